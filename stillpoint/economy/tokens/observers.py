from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from stillpoint.economy.tokens.types import BalanceChanged

logger = structlog.get_logger("stillpoint.economy.tokens.observers")

BalanceSubscriber = Callable[[BalanceChanged], None]


class BalanceChangeHub:
    """In-process fan-out of committed balance changes."""

    def __init__(self) -> None:
        self._subscribers: list[BalanceSubscriber] = []

    def subscribe(self, subscriber: BalanceSubscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unsubscribe

    def clear(self) -> None:
        self._subscribers.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: BalanceChanged) -> None:
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception(
                    "balance_subscriber_failed",
                    user_id=str(event.user_id),
                    transaction_id=str(event.transaction_id),
                )

    def publish_all(self, events: Iterable[BalanceChanged]) -> None:
        for event in events:
            self.publish(event)


balance_changes = BalanceChangeHub()
