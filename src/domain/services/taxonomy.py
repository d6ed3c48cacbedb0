"""Event taxonomy: event kind -> notification type, message templates and defaults."""

import string
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog

from core.exceptions import StoreValidationError
from domain.entities.events import DomainEvent, EventKind
from domain.entities.notification import (
    NotificationTypeDefinition,
    Priority,
    RelatedEntityIds,
)

if TYPE_CHECKING:
    from domain.services.notification_service import NotificationService

logger = structlog.get_logger()

_UNSET: Any = object()


@dataclass(frozen=True)
class EventTemplate:
    """How an event kind is rendered into a notification."""

    title: str
    message: str
    priority: Priority = Priority.NORMAL
    actions: tuple[str, ...] = ()
    expires_after: timedelta | None = None
    defaults: Mapping[str, Any] = field(default_factory=dict)


# Several kinds intentionally share one persisted type code.
EVENT_TYPE_CODES: dict[EventKind, str] = {
    # Reservations
    EventKind.RESERVATION_CREATED: "reservation_new",
    EventKind.RESERVATION_CONFIRMED: "reservation_confirmed",
    EventKind.RESERVATION_MODIFIED: "reservation_modified",
    EventKind.RESERVATION_CANCELLED_BY_CUSTOMER: "reservation_cancelled",
    EventKind.RESERVATION_CANCELLED_BY_RESTAURANT: "reservation_cancelled",
    EventKind.RESERVATION_NO_SHOW: "reservation_no_show",
    EventKind.RESERVATION_UPCOMING: "reservation_upcoming",
    EventKind.RESERVATION_UPCOMING_EARLY: "reservation_upcoming",
    EventKind.RESERVATION_DELAYED: "reservation_delay",
    EventKind.TABLE_ASSIGNED_TO_RESERVATION: "table_assigned",
    EventKind.TABLE_UNAVAILABLE: "table_unavailable",
    EventKind.CAPACITY_FULL: "capacity_full",
    # Customers
    EventKind.CUSTOMER_VIP_CHANGED: "customer_vip",
    EventKind.CUSTOMER_NEW: "customer_new",
    EventKind.CUSTOMER_BIRTHDAY: "customer_birthday",
    EventKind.CUSTOMER_ANNIVERSARY: "customer_anniversary",
    EventKind.CUSTOMER_COMPLAINT: "customer_complaint",
    EventKind.CUSTOMER_COMPLIMENT: "customer_compliment",
    EventKind.CUSTOMER_INACTIVE: "customer_inactive",
    EventKind.CUSTOMER_ALERT: "customer_alert",
    EventKind.CUSTOMER_DIETARY_ALERT: "customer_dietary",
    # Tables
    EventKind.TABLE_OCCUPIED: "table_occupied",
    EventKind.TABLE_RELEASED: "table_available",
    EventKind.TABLE_CLEANING_REQUIRED: "table_cleaning",
    EventKind.TABLE_OUT_OF_SERVICE: "table_out_of_service",
    EventKind.TABLE_TIME_WARNING: "table_time_warning",
    EventKind.TABLE_TIME_EXCEEDED: "table_time_exceeded",
    EventKind.TABLE_COMBINATION_CREATED: "table_combination_created",
    EventKind.TABLE_COMBINATION_DISSOLVED: "table_combination_dissolved",
    # Configuration
    EventKind.CONFIG_HOURS_CHANGED: "config_hours_changed",
    EventKind.CONFIG_CAPACITY_CHANGED: "config_capacity_changed",
    EventKind.CONFIG_CANCELLATION_POLICY_CHANGED: "config_policy_changed",
    EventKind.CONFIG_MENU_UPDATED: "config_menu_updated",
    # Staff
    EventKind.STAFF_CREATED: "staff_new",
    EventKind.STAFF_ROLE_CHANGED: "staff_role_changed",
    EventKind.STAFF_DEACTIVATED: "staff_deactivated",
    EventKind.STAFF_RECOGNITION: "staff_recognition",
    # System
    EventKind.SYSTEM_CAPACITY_CRITICAL: "system_capacity_critical",
    EventKind.INTEGRATION_FAILED: "system_integration_failed",
    EventKind.DAILY_REPORT_GENERATED: "system_daily_report",
    EventKind.OCCUPANCY_GOAL_REACHED: "system_goal_achieved",
    EventKind.EMERGENCY_EVACUATION: "emergency_evacuation",
    EventKind.SPECIAL_EVENT_ACTIVATED: "special_event_activated",
    EventKind.WAIT_TIME_EXCEEDED: "wait_time_exceeded",
    EventKind.LOW_SATISFACTION_DETECTED: "satisfaction_low",
    # Integrations
    EventKind.AI_PROCESSING: "ai_processing",
    EventKind.EXTERNAL_WEBHOOK_RECEIVED: "webhook_received",
}

_HIGH = Priority.HIGH
_LOW = Priority.LOW
_CONFIG_ACTIONS = ("Actualizar sistema", "Comunicar a personal")

EVENT_TEMPLATES: dict[EventKind, EventTemplate] = {
    # Reservations
    EventKind.RESERVATION_CREATED: EventTemplate(
        "Nueva Reserva",
        "Mesa para {personas} personas el {fecha_reserva} a las {hora_reserva}",
        actions=("Confirmar", "Ver detalles", "Contactar cliente"),
    ),
    EventKind.RESERVATION_CONFIRMED: EventTemplate(
        "Reserva Confirmada",
        "Reserva confirmada para {nombre} - {fecha_reserva} {hora_reserva}",
        actions=("Ver mesa asignada", "Agregar notas"),
    ),
    EventKind.RESERVATION_MODIFIED: EventTemplate(
        "Reserva Modificada",
        "Cambios en reserva de {nombre}",
        actions=("Ver cambios", "Confirmar disponibilidad"),
    ),
    EventKind.RESERVATION_CANCELLED_BY_CUSTOMER: EventTemplate(
        "Reserva Cancelada por Cliente",
        "{nombre} canceló su reserva del {fecha_reserva}",
        actions=("Contactar cliente", "Ofrecer nueva fecha"),
    ),
    EventKind.RESERVATION_CANCELLED_BY_RESTAURANT: EventTemplate(
        "Reserva Cancelada por el Restaurante",
        "Se canceló la reserva de {nombre} del {fecha_reserva}",
        actions=("Contactar cliente", "Ofrecer nueva fecha"),
    ),
    EventKind.RESERVATION_NO_SHOW: EventTemplate(
        "Cliente No Se Presentó",
        "{nombre} no se presentó a su reserva de las {hora_reserva}",
        actions=("Liberar mesa", "Registrar no-show"),
    ),
    EventKind.RESERVATION_UPCOMING: EventTemplate(
        "Reserva Próxima",
        "{nombre} llega en {minutes_until} minutos - Mesa {mesa}",
        priority=_HIGH,
        actions=("Preparar mesa", "Contactar si retraso"),
        expires_after=timedelta(hours=1),
        defaults={"mesa": "por asignar"},
    ),
    EventKind.RESERVATION_UPCOMING_EARLY: EventTemplate(
        "Reserva en 2 Horas",
        "{nombre} llega a las {hora_reserva} ({personas} personas)",
        actions=("Revisar asignación de mesa",),
        expires_after=timedelta(hours=2),
    ),
    EventKind.RESERVATION_DELAYED: EventTemplate(
        "Retraso Detectado",
        "{nombre} lleva {minutes_late} minutos de retraso",
        priority=_HIGH,
        actions=("Contactar cliente", "Liberar mesa"),
        expires_after=timedelta(hours=1),
    ),
    EventKind.TABLE_ASSIGNED_TO_RESERVATION: EventTemplate(
        "Mesa Asignada",
        "Mesa {numero_mesa} asignada a la reserva de {nombre}",
        priority=_LOW,
        actions=("Ver reserva",),
    ),
    EventKind.TABLE_UNAVAILABLE: EventTemplate(
        "Mesa No Disponible",
        "La mesa {numero_mesa} no está disponible para la reserva de {nombre}",
        priority=_HIGH,
        actions=("Reasignar mesa",),
    ),
    EventKind.CAPACITY_FULL: EventTemplate(
        "Capacidad Máxima Alcanzada",
        "No quedan mesas disponibles para el {fecha_reserva}",
        priority=_HIGH,
        actions=("Abrir lista de espera",),
    ),
    # Customers
    EventKind.CUSTOMER_VIP_CHANGED: EventTemplate(
        "Cliente VIP",
        "Cliente VIP {nombre} {apellidos} tiene reserva",
        priority=_HIGH,
        actions=("Preparar atención especial", "Asignar mejor mesa", "Notificar chef"),
        defaults={"apellidos": ""},
    ),
    EventKind.CUSTOMER_NEW: EventTemplate(
        "Cliente Nuevo",
        "Primera visita de {nombre} {apellidos}",
        actions=("Preparar bienvenida", "Asignar host experimentado"),
        defaults={"apellidos": ""},
    ),
    EventKind.CUSTOMER_BIRTHDAY: EventTemplate(
        "Cumpleaños de Cliente",
        "Hoy es el cumpleaños de {nombre} {apellidos}",
        actions=("Preparar detalle",),
        expires_after=timedelta(days=1),
        defaults={"apellidos": ""},
    ),
    EventKind.CUSTOMER_ANNIVERSARY: EventTemplate(
        "Aniversario de Cliente",
        "{nombre} {apellidos} celebra un aniversario",
        actions=("Preparar detalle",),
        expires_after=timedelta(days=1),
        defaults={"apellidos": ""},
    ),
    EventKind.CUSTOMER_COMPLAINT: EventTemplate(
        "Queja Recibida",
        "{nombre} ha registrado una queja",
        priority=_HIGH,
        actions=("Ver queja", "Contactar cliente"),
    ),
    EventKind.CUSTOMER_COMPLIMENT: EventTemplate(
        "Elogio Recibido",
        "{nombre} ha dejado un elogio",
        priority=_LOW,
        actions=("Compartir con el equipo",),
    ),
    EventKind.CUSTOMER_INACTIVE: EventTemplate(
        "Cliente Inactivo",
        "{nombre} {apellidos} no visita el restaurante desde hace tiempo",
        priority=_LOW,
        actions=("Enviar invitación",),
        defaults={"apellidos": ""},
    ),
    EventKind.CUSTOMER_ALERT: EventTemplate(
        "Alerta de Cliente",
        "Cliente {nombre} tiene alerta activa: {alert_type}",
        priority=_HIGH,
        actions=("Ver detalles alerta", "Seguir protocolo"),
        defaults={"alert_type": "general"},
    ),
    EventKind.CUSTOMER_DIETARY_ALERT: EventTemplate(
        "Restricciones Dietéticas",
        "{nombre} tiene restricciones dietéticas: {restricciones}",
        priority=_HIGH,
        actions=("Notificar cocina",),
    ),
    # Tables
    EventKind.TABLE_OCCUPIED: EventTemplate(
        "Mesa Ocupada",
        "Mesa {numero_mesa} ocupada por {party_size} personas",
        actions=("Iniciar timer", "Actualizar disponibilidad"),
        defaults={"party_size": "N/A"},
    ),
    EventKind.TABLE_RELEASED: EventTemplate(
        "Mesa Disponible",
        "Mesa {numero_mesa} disponible",
        actions=("Limpiar mesa", "Actualizar disponibilidad"),
    ),
    EventKind.TABLE_CLEANING_REQUIRED: EventTemplate(
        "Limpieza Requerida",
        "Mesa {numero_mesa} necesita limpieza",
        actions=("Asignar limpieza",),
    ),
    EventKind.TABLE_OUT_OF_SERVICE: EventTemplate(
        "Mesa Fuera de Servicio",
        "Mesa {numero_mesa} marcada como fuera de servicio",
        priority=_HIGH,
        actions=("Reasignar reservas", "Contactar mantenimiento"),
    ),
    EventKind.TABLE_TIME_WARNING: EventTemplate(
        "Mesa Cerca del Límite",
        "Mesa {numero_mesa} lleva {elapsed_minutes} de {service_minutes} minutos",
        actions=("Preparar cuenta", "Avisar siguiente reserva"),
        expires_after=timedelta(hours=1),
    ),
    EventKind.TABLE_TIME_EXCEEDED: EventTemplate(
        "Mesa Excede Tiempo",
        "Mesa {numero_mesa} excede tiempo asignado",
        priority=_HIGH,
        actions=("Contactar cliente", "Ofrecer bebida gratis", "Reubicar siguiente"),
        expires_after=timedelta(hours=2),
    ),
    EventKind.TABLE_COMBINATION_CREATED: EventTemplate(
        "Combinación de Mesas",
        "Se creó la combinación {nombre_combinacion}",
        priority=_LOW,
        actions=("Ver plano",),
        defaults={"nombre_combinacion": "sin nombre"},
    ),
    EventKind.TABLE_COMBINATION_DISSOLVED: EventTemplate(
        "Combinación Disuelta",
        "Se disolvió la combinación {nombre_combinacion}",
        priority=_LOW,
        actions=("Ver plano",),
        defaults={"nombre_combinacion": "sin nombre"},
    ),
    # Configuration
    EventKind.CONFIG_HOURS_CHANGED: EventTemplate(
        "Horarios Modificados",
        "Los horarios de operación han sido actualizados",
        priority=_HIGH,
        actions=_CONFIG_ACTIONS,
    ),
    EventKind.CONFIG_CAPACITY_CHANGED: EventTemplate(
        "Capacidad Modificada",
        "La capacidad del restaurante ha sido modificada",
        priority=_HIGH,
        actions=_CONFIG_ACTIONS,
    ),
    EventKind.CONFIG_CANCELLATION_POLICY_CHANGED: EventTemplate(
        "Política de Cancelación",
        "Las políticas de cancelación han sido actualizadas",
        priority=_HIGH,
        actions=_CONFIG_ACTIONS,
    ),
    EventKind.CONFIG_MENU_UPDATED: EventTemplate(
        "Menú Actualizado",
        "El menú ha sido actualizado con nuevos elementos",
        priority=_HIGH,
        actions=_CONFIG_ACTIONS,
    ),
    # Staff
    EventKind.STAFF_CREATED: EventTemplate(
        "Nuevo Miembro del Personal",
        "{nombre} se ha unido al equipo",
        actions=("Ver perfil",),
    ),
    EventKind.STAFF_ROLE_CHANGED: EventTemplate(
        "Cambio de Rol",
        "{nombre} ahora tiene el rol {rol}",
        actions=("Ver perfil",),
    ),
    EventKind.STAFF_DEACTIVATED: EventTemplate(
        "Personal Desactivado",
        "La cuenta de {nombre} ha sido desactivada",
        actions=("Ver perfil",),
    ),
    EventKind.STAFF_RECOGNITION: EventTemplate(
        "Reconocimiento",
        "{nombre} ha recibido un reconocimiento",
        priority=_LOW,
        actions=("Felicitar",),
    ),
    # System
    EventKind.SYSTEM_CAPACITY_CRITICAL: EventTemplate(
        "Capacidad Crítica",
        "La ocupación ha alcanzado el {occupancy_percent}%",
        priority=_HIGH,
        actions=("Ver plano", "Gestionar lista de espera"),
        expires_after=timedelta(hours=2),
    ),
    EventKind.INTEGRATION_FAILED: EventTemplate(
        "Integración Fallida",
        "La integración {integration} ha fallado",
        priority=_HIGH,
        actions=("Revisar configuración",),
    ),
    EventKind.DAILY_REPORT_GENERATED: EventTemplate(
        "Informe Diario",
        "El informe del {report_date} está disponible",
        priority=_LOW,
        actions=("Ver informe",),
        expires_after=timedelta(days=7),
    ),
    EventKind.OCCUPANCY_GOAL_REACHED: EventTemplate(
        "Meta de Ocupación Alcanzada",
        "Se alcanzó la meta de ocupación del {goal_percent}%",
        priority=_LOW,
        actions=("Ver métricas",),
    ),
    EventKind.EMERGENCY_EVACUATION: EventTemplate(
        "Emergencia: Evacuación",
        "Se ha activado el protocolo de evacuación",
        priority=_HIGH,
        actions=("Seguir protocolo de evacuación",),
    ),
    EventKind.SPECIAL_EVENT_ACTIVATED: EventTemplate(
        "Evento Especial",
        "El evento {event_name} está activo",
        actions=("Ver detalles",),
        defaults={"event_name": "especial"},
    ),
    EventKind.WAIT_TIME_EXCEEDED: EventTemplate(
        "Tiempo de Espera Excesivo",
        "El tiempo de espera supera los {wait_minutes} minutos",
        priority=_HIGH,
        actions=("Revisar lista de espera",),
        expires_after=timedelta(hours=1),
    ),
    EventKind.LOW_SATISFACTION_DETECTED: EventTemplate(
        "Satisfacción Baja",
        "Se detectó una valoración baja de {nombre}",
        priority=_HIGH,
        actions=("Ver valoración", "Contactar cliente"),
        defaults={"nombre": "un cliente"},
    ),
    # Integrations
    EventKind.AI_PROCESSING: EventTemplate(
        "Enigmito IA",
        "Enigmito está procesando: {task}",
        priority=_LOW,
        expires_after=timedelta(hours=1),
        defaults={"task": "solicitud"},
    ),
    EventKind.EXTERNAL_WEBHOOK_RECEIVED: EventTemplate(
        "Webhook Recibido",
        "Se recibió un evento de {source}",
        priority=_LOW,
        defaults={"source": "origen externo"},
    ),
}


def _check_exhaustive() -> None:
    missing_codes = set(EventKind) - EVENT_TYPE_CODES.keys()
    missing_templates = set(EventKind) - EVENT_TEMPLATES.keys()
    if missing_codes or missing_templates:
        raise RuntimeError(
            "Event taxonomy is incomplete: "
            f"no type code for {sorted(missing_codes)}, "
            f"no template for {sorted(missing_templates)}"
        )


_check_exhaustive()


def _definition(
    code: str, display_name: str, icon: str, color: str
) -> NotificationTypeDefinition:
    return NotificationTypeDefinition(
        code=code, display_name=display_name, icon_token=icon, color_token=color
    )


BUILTIN_TYPE_DEFINITIONS: tuple[NotificationTypeDefinition, ...] = (
    _definition("reservation_new", "Nueva reserva", "calendar", "blue"),
    _definition("reservation_confirmed", "Reserva confirmada", "user-check", "green"),
    _definition("reservation_modified", "Reserva modificada", "edit", "amber"),
    _definition("reservation_cancelled", "Reserva cancelada", "x-circle", "red"),
    _definition("reservation_no_show", "No show", "user-x", "red"),
    _definition("reservation_upcoming", "Reserva próxima", "clock", "orange"),
    _definition("reservation_delay", "Retraso detectado", "clock", "red"),
    _definition("table_assigned", "Mesa asignada", "calendar", "blue"),
    _definition("table_unavailable", "Mesa no disponible", "alert-triangle", "red"),
    _definition("capacity_full", "Capacidad completa", "alert-triangle", "red"),
    _definition("customer_vip", "Cliente VIP", "crown", "purple"),
    _definition("customer_new", "Cliente nuevo", "user-check", "blue"),
    _definition("customer_birthday", "Cumpleaños", "bell", "pink"),
    _definition("customer_anniversary", "Aniversario", "bell", "pink"),
    _definition("customer_complaint", "Queja", "alert-triangle", "red"),
    _definition("customer_compliment", "Elogio", "user-check", "green"),
    _definition("customer_inactive", "Cliente inactivo", "user-x", "gray"),
    _definition("customer_alert", "Alerta de cliente", "alert-triangle", "orange"),
    _definition("customer_dietary", "Restricción dietética", "alert-triangle", "orange"),
    _definition("table_occupied", "Mesa ocupada", "calendar", "blue"),
    _definition("table_available", "Mesa disponible", "calendar", "green"),
    _definition("table_cleaning", "Limpieza requerida", "bell", "amber"),
    _definition("table_out_of_service", "Mesa fuera de servicio", "x-circle", "red"),
    _definition("table_time_warning", "Tiempo de mesa", "clock", "amber"),
    _definition("table_time_exceeded", "Tiempo excedido", "clock", "red"),
    _definition("table_combination_created", "Combinación creada", "settings", "blue"),
    _definition("table_combination_dissolved", "Combinación disuelta", "settings", "gray"),
    _definition("config_hours_changed", "Horarios", "settings", "gray"),
    _definition("config_capacity_changed", "Capacidad", "settings", "gray"),
    _definition("config_policy_changed", "Política de cancelación", "settings", "gray"),
    _definition("config_menu_updated", "Menú", "settings", "gray"),
    _definition("staff_new", "Nuevo personal", "user-check", "blue"),
    _definition("staff_role_changed", "Cambio de rol", "edit", "blue"),
    _definition("staff_deactivated", "Personal desactivado", "user-x", "gray"),
    _definition("staff_recognition", "Reconocimiento", "crown", "green"),
    _definition("system_capacity_critical", "Capacidad crítica", "alert-triangle", "red"),
    _definition("system_integration_failed", "Integración fallida", "alert-triangle", "red"),
    _definition("system_daily_report", "Informe diario", "bar-chart-3", "blue"),
    _definition("system_goal_achieved", "Meta alcanzada", "bar-chart-3", "green"),
    _definition("emergency_evacuation", "Evacuación", "alert-triangle", "red"),
    _definition("special_event_activated", "Evento especial", "bell", "purple"),
    _definition("wait_time_exceeded", "Espera excesiva", "clock", "red"),
    _definition("satisfaction_low", "Satisfacción baja", "alert-triangle", "orange"),
    _definition("ai_processing", "Enigmito IA", "bell", "purple"),
    _definition("webhook_received", "Webhook", "bell", "gray"),
)

_FORMATTER = string.Formatter()


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Interpolate ``{name}`` placeholders from ``values``.

    Only bare identifiers are accepted: attribute access, indexing,
    conversions and format specs are rejected so templates cannot reach
    into payload objects.
    """
    parts: list[str] = []
    for literal, field_name, format_spec, conversion in _FORMATTER.parse(template):
        parts.append(literal)
        if field_name is None:
            continue
        if not field_name.isidentifier() or format_spec or conversion:
            raise StoreValidationError(
                f"Unsupported template placeholder: {field_name!r}",
                details={"template": template},
            )
        value = values.get(field_name)
        if value is None:
            raise StoreValidationError(
                f"Missing template variable: {field_name}",
                details={"template": template, "variable": field_name},
            )
        parts.append(str(value))
    return " ".join("".join(parts).split())


def build_event(
    kind: EventKind,
    payload: Mapping[str, Any] | None = None,
    related: RelatedEntityIds | None = None,
    *,
    priority: Priority | None = None,
    actions: Iterable[str] | None = None,
    expires_after: timedelta | None = _UNSET,
) -> DomainEvent:
    """Create a DomainEvent with the template defaults for its kind."""
    template = EVENT_TEMPLATES[kind]
    return DomainEvent(
        kind=kind,
        payload=dict(payload or {}),
        related=related or RelatedEntityIds(),
        priority=priority or template.priority,
        suggested_actions=tuple(actions) if actions is not None else template.actions,
        expires_after=template.expires_after if expires_after is _UNSET else expires_after,
    )


class TaxonomyRegistry:
    """Resolves event kinds to catalog entries of the notification type table."""

    def __init__(self, definitions: Iterable[NotificationTypeDefinition]) -> None:
        self._definitions: dict[str, NotificationTypeDefinition] = {
            d.code: d for d in definitions
        }

    @classmethod
    def builtin(cls) -> "TaxonomyRegistry":
        return cls(BUILTIN_TYPE_DEFINITIONS)

    @classmethod
    async def load(cls, service: "NotificationService") -> "TaxonomyRegistry":
        """Seed the registry from the remote catalog table.

        Falls back to the builtin catalog when the store cannot be read, so a
        cold start with the database down still maps every event kind.
        """
        try:
            definitions = await service.get_notification_types()
        except Exception as e:  # noqa: BLE001
            logger.warning("notification_catalog_unavailable", error=str(e))
            return cls.builtin()

        registry = cls(definitions)
        unmapped = sorted(
            {code for code in EVENT_TYPE_CODES.values() if registry.get(code) is None}
        )
        if unmapped:
            logger.warning("notification_catalog_incomplete", missing_codes=unmapped)
        logger.info("notification_catalog_loaded", type_count=len(definitions))
        return registry

    def get(self, code: str) -> NotificationTypeDefinition | None:
        return self._definitions.get(code)

    def definitions(self) -> list[NotificationTypeDefinition]:
        return list(self._definitions.values())

    @staticmethod
    def type_code_for(kind: EventKind) -> str:
        return EVENT_TYPE_CODES[kind]

    @staticmethod
    def template_for(kind: EventKind) -> EventTemplate:
        return EVENT_TEMPLATES[kind]

    def resolve(self, kind: EventKind) -> NotificationTypeDefinition | None:
        """Catalog entry for ``kind``; None when missing from the catalog or inactive."""
        code = EVENT_TYPE_CODES.get(kind)
        if code is None:
            return None
        definition = self._definitions.get(code)
        if definition is None or not definition.active:
            return None
        return definition
