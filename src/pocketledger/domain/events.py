"""Domain events and the event bus that delivers them.

Every event has a fine-grained ``event_type`` (e.g. "TransactionCreated")
used by recomputation handlers, and coarse ``topics`` (e.g.
"transaction_updated") used by views that only need to know *something*
changed and should re-read.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Callable, ClassVar, Optional
from uuid import uuid4

from pocketledger.domain.entities import Budget, Category, Transaction

logger = logging.getLogger(__name__)

TRANSACTION_UPDATED = "transaction_updated"
BUDGET_UPDATED = "budget_updated"
CATEGORY_UPDATED = "category_updated"

REFRESH_TOPICS = (TRANSACTION_UPDATED, BUDGET_UPDATED, CATEGORY_UPDATED)


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all domain events."""

    EVENT_TYPE: ClassVar[str] = "DomainEvent"
    TOPICS: ClassVar[tuple[str, ...]] = ()

    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_type(self) -> str:
        return self.EVENT_TYPE

    @property
    def topics(self) -> tuple[str, ...]:
        return self.TOPICS


@dataclass(frozen=True)
class TransactionCreatedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "TransactionCreated"
    TOPICS: ClassVar[tuple[str, ...]] = (TRANSACTION_UPDATED,)

    transaction: Transaction


@dataclass(frozen=True)
class TransactionUpdatedEvent(DomainEvent):
    """Carries the row before and after the update."""

    EVENT_TYPE: ClassVar[str] = "TransactionUpdated"
    TOPICS: ClassVar[tuple[str, ...]] = (TRANSACTION_UPDATED,)

    transaction: Transaction
    previous: Transaction

    @property
    def old_amount(self):
        return self.previous.amount


@dataclass(frozen=True)
class TransactionDeletedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "TransactionDeleted"
    TOPICS: ClassVar[tuple[str, ...]] = (TRANSACTION_UPDATED,)

    transaction: Transaction


@dataclass(frozen=True)
class BudgetCreatedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "BudgetCreated"
    TOPICS: ClassVar[tuple[str, ...]] = (BUDGET_UPDATED,)

    budget: Budget


@dataclass(frozen=True)
class BudgetUpdatedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "BudgetUpdated"
    TOPICS: ClassVar[tuple[str, ...]] = (BUDGET_UPDATED,)

    budget: Budget


@dataclass(frozen=True)
class BudgetDeletedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "BudgetDeleted"
    TOPICS: ClassVar[tuple[str, ...]] = (BUDGET_UPDATED,)

    budget: Budget


@dataclass(frozen=True)
class CategoryCreatedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "CategoryCreated"
    TOPICS: ClassVar[tuple[str, ...]] = (CATEGORY_UPDATED,)

    category: Category


@dataclass(frozen=True)
class CategoryUpdatedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "CategoryUpdated"
    TOPICS: ClassVar[tuple[str, ...]] = (CATEGORY_UPDATED,)

    category: Category


@dataclass(frozen=True)
class CategoryDeletedEvent(DomainEvent):
    EVENT_TYPE: ClassVar[str] = "CategoryDeleted"
    TOPICS: ClassVar[tuple[str, ...]] = (CATEGORY_UPDATED,)

    category: Category


@dataclass(frozen=True)
class DatabaseResetEvent(DomainEvent):
    """Published after a reset; every view has to reload."""

    EVENT_TYPE: ClassVar[str] = "DatabaseReset"
    TOPICS: ClassVar[tuple[str, ...]] = REFRESH_TOPICS


Handler = Callable[[DomainEvent], None]


class EventBus:
    """Publish/subscribe keyed by event type or topic string.

    A handler failure is logged and counted but never reaches the publisher
    or stops delivery to the remaining handlers.
    """

    def __init__(self):
        """Initialize event bus."""
        self._handlers: dict[str, list[Handler]] = {}

    def subscribe(self, key: str, handler: Handler) -> Callable[[], None]:
        """Subscribe a handler to an event type or topic.

        Args:
            key: Event type (e.g. "TransactionCreated") or topic
                (e.g. "transaction_updated")
            handler: Function called with the event

        Returns:
            Function that removes this subscription
        """
        self._handlers.setdefault(key, []).append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(key, handler)

        return unsubscribe

    def unsubscribe(self, key: str, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(key)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handler_count(self, key: Optional[str] = None) -> int:
        """Number of subscriptions for a key, or in total."""
        if key is not None:
            return len(self._handlers.get(key, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def publish(self, event: DomainEvent) -> int:
        """Deliver an event to every handler of its type and topics.

        A handler registered under several matching keys is called once.

        Args:
            event: The event to publish

        Returns:
            Number of handlers that raised
        """
        targets: list[Handler] = []
        for key in (event.event_type, *event.topics):
            for handler in self._handlers.get(key, []):
                if handler not in targets:
                    targets.append(handler)

        failures = 0
        for handler in targets:
            try:
                handler(event)
            except Exception as e:
                failures += 1
                logger.warning(
                    f"Event handler error for {event.event_type}: {e}",
                    exc_info=True,
                )
        return failures

    def clear(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()
