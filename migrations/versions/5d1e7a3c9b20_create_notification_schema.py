"""create_notification_schema

Revision ID: 5d1e7a3c9b20
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5d1e7a3c9b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# (code, name, icon_name, color)
NOTIFICATION_TYPES = [
    ('reservation_new', 'Nueva reserva', 'calendar', 'blue'),
    ('reservation_confirmed', 'Reserva confirmada', 'user-check', 'green'),
    ('reservation_modified', 'Reserva modificada', 'edit', 'amber'),
    ('reservation_cancelled', 'Reserva cancelada', 'x-circle', 'red'),
    ('reservation_no_show', 'No show', 'user-x', 'red'),
    ('reservation_upcoming', 'Reserva próxima', 'clock', 'orange'),
    ('reservation_delay', 'Retraso detectado', 'clock', 'red'),
    ('table_assigned', 'Mesa asignada', 'calendar', 'blue'),
    ('table_unavailable', 'Mesa no disponible', 'alert-triangle', 'red'),
    ('capacity_full', 'Capacidad completa', 'alert-triangle', 'red'),
    ('customer_vip', 'Cliente VIP', 'crown', 'purple'),
    ('customer_new', 'Cliente nuevo', 'user-check', 'blue'),
    ('customer_birthday', 'Cumpleaños', 'bell', 'pink'),
    ('customer_anniversary', 'Aniversario', 'bell', 'pink'),
    ('customer_complaint', 'Queja', 'alert-triangle', 'red'),
    ('customer_compliment', 'Elogio', 'user-check', 'green'),
    ('customer_inactive', 'Cliente inactivo', 'user-x', 'gray'),
    ('customer_alert', 'Alerta de cliente', 'alert-triangle', 'orange'),
    ('customer_dietary', 'Restricción dietética', 'alert-triangle', 'orange'),
    ('table_occupied', 'Mesa ocupada', 'calendar', 'blue'),
    ('table_available', 'Mesa disponible', 'calendar', 'green'),
    ('table_cleaning', 'Limpieza requerida', 'bell', 'amber'),
    ('table_out_of_service', 'Mesa fuera de servicio', 'x-circle', 'red'),
    ('table_time_warning', 'Tiempo de mesa', 'clock', 'amber'),
    ('table_time_exceeded', 'Tiempo excedido', 'clock', 'red'),
    ('table_combination_created', 'Combinación creada', 'settings', 'blue'),
    ('table_combination_dissolved', 'Combinación disuelta', 'settings', 'gray'),
    ('config_hours_changed', 'Horarios', 'settings', 'gray'),
    ('config_capacity_changed', 'Capacidad', 'settings', 'gray'),
    ('config_policy_changed', 'Política de cancelación', 'settings', 'gray'),
    ('config_menu_updated', 'Menú', 'settings', 'gray'),
    ('staff_new', 'Nuevo personal', 'user-check', 'blue'),
    ('staff_role_changed', 'Cambio de rol', 'edit', 'blue'),
    ('staff_deactivated', 'Personal desactivado', 'user-x', 'gray'),
    ('staff_recognition', 'Reconocimiento', 'crown', 'green'),
    ('system_capacity_critical', 'Capacidad crítica', 'alert-triangle', 'red'),
    ('system_integration_failed', 'Integración fallida', 'alert-triangle', 'red'),
    ('system_daily_report', 'Informe diario', 'bar-chart-3', 'blue'),
    ('system_goal_achieved', 'Meta alcanzada', 'bar-chart-3', 'green'),
    ('emergency_evacuation', 'Evacuación', 'alert-triangle', 'red'),
    ('special_event_activated', 'Evento especial', 'bell', 'purple'),
    ('wait_time_exceeded', 'Espera excesiva', 'clock', 'red'),
    ('satisfaction_low', 'Satisfacción baja', 'alert-triangle', 'orange'),
    ('ai_processing', 'Enigmito IA', 'bell', 'purple'),
    ('webhook_received', 'Webhook', 'bell', 'gray'),
]


def upgrade() -> None:
    """Create restaurant entity tables, notification tables, claim tables and seed types."""

    # --- restaurant entities ---
    op.create_table('clientes',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('nombre', sa.String(length=100), nullable=False),
        sa.Column('apellidos', sa.String(length=150), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('telefono', sa.String(length=30), nullable=True),
        sa.Column('vip_status', sa.Boolean(), nullable=False,
                  server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('mesas',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('numero_mesa', sa.String(length=20), nullable=False),
        sa.Column('capacidad', sa.Integer(), nullable=False,
                  server_default='4'),
        sa.Column('zona', sa.String(length=50), nullable=True),
        sa.Column('estado', sa.String(length=20), nullable=False,
                  server_default='libre'),
        sa.Column('activa', sa.Boolean(), nullable=False,
                  server_default='true'),
        sa.Column('ocupada_desde', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.CheckConstraint(
            "estado IN ('libre', 'ocupada', 'reservada', 'limpieza', 'fuera_servicio')",
            name='ck_mesas_estado'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('reservas',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('cliente_id', sa.UUID(), nullable=True),
        sa.Column('mesa_id', sa.UUID(), nullable=True),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('telefono', sa.String(length=30), nullable=True),
        sa.Column('fecha_reserva', sa.Date(), nullable=False),
        sa.Column('hora_reserva', sa.Time(), nullable=False),
        sa.Column('personas', sa.Integer(), nullable=False),
        sa.Column('estado', sa.String(length=30), nullable=False,
                  server_default='pendiente_confirmacion'),
        sa.Column('notas', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.ForeignKeyConstraint(['cliente_id'], ['clientes.id'],
                                ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['mesa_id'], ['mesas.id'],
                                ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reservas_fecha_reserva', 'reservas', ['fecha_reserva'])

    # --- notification_types (seeded catalog) ---
    notification_types = op.create_table('notification_types',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon_name', sa.String(length=50), nullable=False,
                  server_default='bell'),
        sa.Column('color', sa.String(length=30), nullable=False,
                  server_default='blue'),
        sa.Column('is_active', sa.Boolean(), nullable=False,
                  server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    # --- notifications ---
    op.create_table('notifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('type_code', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(length=10), nullable=False,
                  server_default='normal'),
        sa.Column('is_read', sa.Boolean(), nullable=False,
                  server_default='false'),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('NOW()')),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('data', postgresql.JSONB(), nullable=False,
                  server_default='{}'),
        sa.Column('actions', postgresql.JSONB(), nullable=False,
                  server_default='[]'),
        sa.Column('reservation_id', sa.UUID(), nullable=True),
        sa.Column('customer_id', sa.UUID(), nullable=True),
        sa.Column('table_id', sa.UUID(), nullable=True),
        sa.Column('staff_id', sa.UUID(), nullable=True),
        sa.CheckConstraint("priority IN ('high', 'normal', 'low')",
                           name='ck_notifications_priority'),
        sa.CheckConstraint(
            '(is_read AND read_at IS NOT NULL) OR (NOT is_read AND read_at IS NULL)',
            name='ck_notifications_read_state'),
        sa.ForeignKeyConstraint(['type_code'], ['notification_types.code']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index('ix_notifications_dedup', 'notifications',
                    ['type_code', 'reservation_id', 'customer_id', 'table_id',
                     'staff_id', 'created_at'])
    op.create_index('ix_notifications_expires', 'notifications', ['expires_at'],
                    postgresql_where=sa.text('expires_at IS NOT NULL'))

    # --- temporal check claims ---
    op.create_table('reservation_reminders',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('reservation_id', sa.UUID(), nullable=False),
        sa.Column('window_minutes', sa.Integer(), nullable=False),
        sa.Column('claimed_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservas.id'],
                                ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reservation_id', 'window_minutes'),
    )

    op.create_table('table_time_alerts',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('table_id', sa.UUID(), nullable=False),
        sa.Column('threshold_percent', sa.Integer(), nullable=False),
        sa.Column('occupied_since', sa.DateTime(), nullable=False),
        sa.Column('claimed_at', sa.DateTime(), nullable=True,
                  server_default=sa.text('NOW()')),
        sa.ForeignKeyConstraint(['table_id'], ['mesas.id'],
                                ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('table_id', 'threshold_percent', 'occupied_since'),
    )

    # --- Seed notification_types ---
    op.bulk_insert(notification_types, [
        {
            'id': uuid.uuid4(),
            'code': code,
            'name': name,
            'icon_name': icon_name,
            'color': color,
            'is_active': True,
        }
        for code, name, icon_name, color in NOTIFICATION_TYPES
    ])


def downgrade() -> None:
    """Drop everything created by upgrade."""
    op.drop_table('table_time_alerts')
    op.drop_table('reservation_reminders')
    op.drop_index('ix_notifications_expires', table_name='notifications')
    op.drop_index('ix_notifications_dedup', table_name='notifications')
    op.drop_index('ix_notifications_created_at', table_name='notifications')
    op.drop_index('ix_notifications_is_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_table('notification_types')
    op.drop_index('ix_reservas_fecha_reserva', table_name='reservas')
    op.drop_table('reservas')
    op.drop_table('mesas')
    op.drop_table('clientes')
