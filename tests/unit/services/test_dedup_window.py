"""Unit tests for the deduplication window."""

from datetime import datetime, timedelta
from uuid import uuid4

from domain.entities.notification import DedupWindow, RelatedEntityIds


class TestCalendarDayWindow:
    """Default window: the calendar day in the restaurant's zone."""

    def test_start_is_local_midnight_in_utc(self):
        window = DedupWindow(timezone="Europe/Madrid")

        # 2026-10-19 is CEST (UTC+2): local midnight is 22:00 UTC the day before
        start = window.start_for(datetime(2026, 10, 19, 12, 0))

        assert start == datetime(2026, 10, 18, 22, 0)

    def test_late_utc_evening_belongs_to_next_local_day(self):
        window = DedupWindow(timezone="Europe/Madrid")

        assert window.same_window(datetime(2026, 10, 18, 22, 30), datetime(2026, 10, 19, 12, 0))
        assert not window.same_window(datetime(2026, 10, 18, 21, 30), datetime(2026, 10, 19, 12, 0))

    def test_utc_default(self):
        window = DedupWindow()

        assert window.start_for(datetime(2026, 10, 19, 23, 59)) == datetime(2026, 10, 19)


class TestRollingWindow:
    """Configured window: a rolling span of seconds."""

    def test_start_is_moment_minus_span(self):
        window = DedupWindow(seconds=3600)
        moment = datetime(2026, 10, 19, 12, 0)

        assert window.start_for(moment) == moment - timedelta(hours=1)

    def test_same_window_is_exclusive_at_span(self):
        window = DedupWindow(seconds=60)
        first = datetime(2026, 10, 19, 12, 0)

        assert window.same_window(first, first + timedelta(seconds=59))
        assert not window.same_window(first, first + timedelta(seconds=60))


class TestRelatedEntityIds:
    """Test the related-entity key."""

    def test_empty(self):
        assert RelatedEntityIds().is_empty()

    def test_key_order(self):
        table_id = uuid4()
        related = RelatedEntityIds(table_id=table_id)

        assert not related.is_empty()
        assert related.as_key() == (None, None, table_id, None)
