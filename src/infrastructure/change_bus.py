"""In-process change bus: delivers store change notices to subscribers."""

import structlog

from domain.entities.snapshot import StoreChange
from domain.repositories.change_feed import ChangeCallback, Unsubscribe

logger = structlog.get_logger()


class InProcessChangeBus:
    """IChangeFeed implementation fed by the unit of work and the store webhook."""

    def __init__(self) -> None:
        self._subscribers: list[ChangeCallback] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: StoreChange) -> None:
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception(
                    "change_subscriber_failed",
                    table=change.table,
                    operation=change.operation.value,
                )
