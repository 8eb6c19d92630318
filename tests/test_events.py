"""Tests for the event bus."""

import logging
from datetime import datetime

from pocketledger.domain.entities import Category, TransactionType
from pocketledger.domain.events import (
    BUDGET_UPDATED,
    CATEGORY_UPDATED,
    REFRESH_TOPICS,
    TRANSACTION_UPDATED,
    CategoryCreatedEvent,
    DatabaseResetEvent,
    EventBus,
)


def make_category():
    now = datetime(2024, 1, 1, 12, 0, 0)
    return Category(
        id=1,
        name="Dining",
        type=TransactionType.EXPENSE,
        icon="restaurant-outline",
        color="#FF6B6B",
        description=None,
        sort_order=0,
        is_default=True,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def test_every_subscriber_receives_event():
    """Test each handler is called once with the published event."""
    bus = EventBus()
    first, second = [], []
    bus.subscribe("CategoryCreated", first.append)
    bus.subscribe("CategoryCreated", second.append)

    event = CategoryCreatedEvent(category=make_category())
    failures = bus.publish(event)

    assert failures == 0
    assert first == [event]
    assert second == [event]


def test_failing_handler_does_not_stop_delivery(caplog):
    """Test a raising handler is logged and the others still run."""
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("handler broke")

    bus.subscribe("CategoryCreated", broken)
    bus.subscribe("CategoryCreated", received.append)

    with caplog.at_level(logging.WARNING, logger="pocketledger.domain.events"):
        failures = bus.publish(CategoryCreatedEvent(category=make_category()))

    assert failures == 1
    assert len(received) == 1
    assert "handler broke" in caplog.text
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_unsubscribe():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe(CATEGORY_UPDATED, received.append)

    unsubscribe()
    bus.publish(CategoryCreatedEvent(category=make_category()))

    assert received == []
    assert bus.handler_count() == 0


def test_unsubscribe_unknown_handler_is_ignored():
    bus = EventBus()
    bus.unsubscribe("CategoryCreated", print)
    assert bus.handler_count("CategoryCreated") == 0


def test_handler_under_type_and_topic_called_once():
    """Test a handler matching several keys of one event runs once."""
    bus = EventBus()
    received = []
    bus.subscribe("CategoryCreated", received.append)
    bus.subscribe(CATEGORY_UPDATED, received.append)

    bus.publish(CategoryCreatedEvent(category=make_category()))

    assert len(received) == 1


def test_topic_subscribers_only_see_their_topic():
    bus = EventBus()
    budgets, categories = [], []
    bus.subscribe(BUDGET_UPDATED, budgets.append)
    bus.subscribe(CATEGORY_UPDATED, categories.append)

    bus.publish(CategoryCreatedEvent(category=make_category()))

    assert budgets == []
    assert len(categories) == 1


def test_reset_event_reaches_every_topic():
    bus = EventBus()
    received = {topic: [] for topic in REFRESH_TOPICS}
    for topic, events in received.items():
        bus.subscribe(topic, events.append)

    event = DatabaseResetEvent()
    bus.publish(event)

    assert TRANSACTION_UPDATED in event.topics
    assert all(events == [event] for events in received.values())


def test_events_carry_identity():
    first = DatabaseResetEvent()
    second = DatabaseResetEvent()

    assert first.event_id != second.event_id
    assert first.occurred_at.tzinfo is not None
    assert first.event_type == "DatabaseReset"


def test_clear():
    bus = EventBus()
    bus.subscribe("CategoryCreated", lambda event: None)
    bus.subscribe(TRANSACTION_UPDATED, lambda event: None)
    assert bus.handler_count() == 2

    bus.clear()

    assert bus.handler_count() == 0
