"""Domain events: the closed set of things the restaurant can be notified about."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from typing import Any

from domain.entities.notification import Priority, RelatedEntityIds


class EventKind(StrEnum):
    """Every domain event known to the orchestrator.

    Adding a member without a type code and a template in the taxonomy
    registry makes the registry module fail on import.
    """

    # Reservations
    RESERVATION_CREATED = "reservation_created"
    RESERVATION_CONFIRMED = "reservation_confirmed"
    RESERVATION_MODIFIED = "reservation_modified"
    RESERVATION_CANCELLED_BY_CUSTOMER = "reservation_cancelled_by_customer"
    RESERVATION_CANCELLED_BY_RESTAURANT = "reservation_cancelled_by_restaurant"
    RESERVATION_NO_SHOW = "reservation_no_show"
    RESERVATION_UPCOMING = "reservation_upcoming"
    RESERVATION_UPCOMING_EARLY = "reservation_upcoming_early"
    RESERVATION_DELAYED = "reservation_delayed"
    TABLE_ASSIGNED_TO_RESERVATION = "table_assigned_to_reservation"
    TABLE_UNAVAILABLE = "table_unavailable"
    CAPACITY_FULL = "capacity_full"

    # Customers
    CUSTOMER_VIP_CHANGED = "customer_vip_changed"
    CUSTOMER_NEW = "customer_new"
    CUSTOMER_BIRTHDAY = "customer_birthday"
    CUSTOMER_ANNIVERSARY = "customer_anniversary"
    CUSTOMER_COMPLAINT = "customer_complaint"
    CUSTOMER_COMPLIMENT = "customer_compliment"
    CUSTOMER_INACTIVE = "customer_inactive"
    CUSTOMER_ALERT = "customer_alert"
    CUSTOMER_DIETARY_ALERT = "customer_dietary_alert"

    # Tables
    TABLE_OCCUPIED = "table_occupied"
    TABLE_RELEASED = "table_released"
    TABLE_CLEANING_REQUIRED = "table_cleaning_required"
    TABLE_OUT_OF_SERVICE = "table_out_of_service"
    TABLE_TIME_WARNING = "table_time_warning"
    TABLE_TIME_EXCEEDED = "table_time_exceeded"
    TABLE_COMBINATION_CREATED = "table_combination_created"
    TABLE_COMBINATION_DISSOLVED = "table_combination_dissolved"

    # Configuration
    CONFIG_HOURS_CHANGED = "config_hours_changed"
    CONFIG_CAPACITY_CHANGED = "config_capacity_changed"
    CONFIG_CANCELLATION_POLICY_CHANGED = "config_cancellation_policy_changed"
    CONFIG_MENU_UPDATED = "config_menu_updated"

    # Staff
    STAFF_CREATED = "staff_created"
    STAFF_ROLE_CHANGED = "staff_role_changed"
    STAFF_DEACTIVATED = "staff_deactivated"
    STAFF_RECOGNITION = "staff_recognition"

    # System
    SYSTEM_CAPACITY_CRITICAL = "system_capacity_critical"
    INTEGRATION_FAILED = "integration_failed"
    DAILY_REPORT_GENERATED = "daily_report_generated"
    OCCUPANCY_GOAL_REACHED = "occupancy_goal_reached"
    EMERGENCY_EVACUATION = "emergency_evacuation"
    SPECIAL_EVENT_ACTIVATED = "special_event_activated"
    WAIT_TIME_EXCEEDED = "wait_time_exceeded"
    LOW_SATISFACTION_DETECTED = "low_satisfaction_detected"

    # Integrations
    AI_PROCESSING = "ai_processing"
    EXTERNAL_WEBHOOK_RECEIVED = "external_webhook_received"


@dataclass(frozen=True)
class DomainEvent:
    """Transient description of a detected change or temporal condition."""

    kind: EventKind
    payload: Mapping[str, Any] = field(default_factory=dict)
    related: RelatedEntityIds = field(default_factory=RelatedEntityIds)
    priority: Priority = Priority.NORMAL
    suggested_actions: tuple[str, ...] = ()
    expires_after: timedelta | None = None
