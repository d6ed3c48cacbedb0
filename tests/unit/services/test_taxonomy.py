"""Unit tests for the event taxonomy and template rendering."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from core.exceptions import StoreTransportError, StoreValidationError
from domain.entities.events import EventKind
from domain.entities.notification import NotificationTypeDefinition, Priority
from domain.services.taxonomy import (
    BUILTIN_TYPE_DEFINITIONS,
    EVENT_TEMPLATES,
    EVENT_TYPE_CODES,
    TaxonomyRegistry,
    build_event,
    render_template,
)


class TestTaxonomyTotality:
    """Every event kind maps to a type code and a template."""

    def test_every_kind_has_a_type_code(self):
        assert set(EVENT_TYPE_CODES) == set(EventKind)

    def test_every_kind_has_a_template(self):
        assert set(EVENT_TEMPLATES) == set(EventKind)

    def test_builtin_catalog_covers_every_type_code(self):
        builtin_codes = {d.code for d in BUILTIN_TYPE_DEFINITIONS}
        assert set(EVENT_TYPE_CODES.values()) <= builtin_codes

    def test_builtin_registry_resolves_every_kind(self):
        registry = TaxonomyRegistry.builtin()
        assert all(registry.resolve(kind) is not None for kind in EventKind)

    def test_shared_type_codes(self):
        assert (
            EVENT_TYPE_CODES[EventKind.RESERVATION_CANCELLED_BY_CUSTOMER]
            == EVENT_TYPE_CODES[EventKind.RESERVATION_CANCELLED_BY_RESTAURANT]
            == "reservation_cancelled"
        )
        assert EVENT_TYPE_CODES[EventKind.TABLE_RELEASED] == "table_available"


class TestRenderTemplate:
    """Test placeholder interpolation."""

    def test_interpolates_values(self):
        result = render_template(
            "Mesa para {personas} personas el {fecha}", {"personas": 4, "fecha": "2026-10-19"}
        )
        assert result == "Mesa para 4 personas el 2026-10-19"

    def test_collapses_whitespace_from_empty_values(self):
        result = render_template("Cliente VIP {nombre} {apellidos} tiene reserva", {
            "nombre": "Ana",
            "apellidos": "",
        })
        assert result == "Cliente VIP Ana tiene reserva"

    def test_missing_variable_raises(self):
        with pytest.raises(StoreValidationError) as exc_info:
            render_template("Mesa {numero_mesa} disponible", {})

        assert exc_info.value.details["variable"] == "numero_mesa"

    def test_none_value_counts_as_missing(self):
        with pytest.raises(StoreValidationError):
            render_template("Mesa {numero_mesa} disponible", {"numero_mesa": None})

    @pytest.mark.parametrize(
        "template",
        ["{row.__class__}", "{items[0]}", "{value!r}", "{value:>10}"],
    )
    def test_rejects_non_identifier_placeholders(self, template: str):
        with pytest.raises(StoreValidationError):
            render_template(template, {"row": {}, "items": [1], "value": 1})

    def test_literal_braces(self):
        assert render_template("{{literal}} {x}", {"x": 1}) == "{literal} 1"


class TestBuildEvent:
    """Test event construction from template defaults."""

    def test_applies_template_defaults(self):
        event = build_event(EventKind.TABLE_TIME_EXCEEDED, {"numero_mesa": "4"})

        assert event.priority == Priority.HIGH
        assert event.expires_after == timedelta(hours=2)
        assert "Contactar cliente" in event.suggested_actions
        assert event.related.is_empty()

    def test_overrides_win(self):
        event = build_event(
            EventKind.TABLE_TIME_EXCEEDED,
            priority=Priority.LOW,
            actions=["Ver"],
            expires_after=None,
        )

        assert event.priority == Priority.LOW
        assert event.suggested_actions == ("Ver",)
        assert event.expires_after is None


class TestTaxonomyRegistry:
    """Test catalog loading and resolution."""

    @pytest.mark.asyncio
    async def test_load_from_service(self):
        service = AsyncMock()
        service.get_notification_types.return_value = list(BUILTIN_TYPE_DEFINITIONS)

        registry = await TaxonomyRegistry.load(service)

        assert registry.get("reservation_new") is not None
        assert len(registry.definitions()) == len(BUILTIN_TYPE_DEFINITIONS)

    @pytest.mark.asyncio
    async def test_load_falls_back_to_builtin(self):
        service = AsyncMock()
        service.get_notification_types.side_effect = StoreTransportError("list_types")

        registry = await TaxonomyRegistry.load(service)

        assert registry.resolve(EventKind.RESERVATION_CREATED) is not None

    def test_missing_code_is_unmapped(self):
        registry = TaxonomyRegistry(
            [NotificationTypeDefinition(code="reservation_new", display_name="Nueva reserva")]
        )

        assert registry.resolve(EventKind.RESERVATION_CREATED) is not None
        assert registry.resolve(EventKind.CUSTOMER_NEW) is None

    def test_inactive_code_is_unmapped(self):
        registry = TaxonomyRegistry(
            [
                NotificationTypeDefinition(
                    code="reservation_new", display_name="Nueva reserva", active=False
                )
            ]
        )

        assert registry.resolve(EventKind.RESERVATION_CREATED) is None
