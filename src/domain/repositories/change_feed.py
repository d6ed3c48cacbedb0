"""Change feed protocol: push signals from the store."""

from collections.abc import Callable
from typing import Protocol

from domain.entities.snapshot import StoreChange

ChangeCallback = Callable[[StoreChange], None]
Unsubscribe = Callable[[], None]


class IChangeFeed(Protocol):
    """Source of store change notices."""

    def subscribe(self, callback: ChangeCallback) -> Unsubscribe:
        """Register ``callback``; the returned callable removes it."""
        ...

    def publish(self, change: StoreChange) -> None:
        """Deliver ``change`` to every subscriber."""
        ...
