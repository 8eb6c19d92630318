"""Event handlers that keep derived budget state in step with transactions."""

import logging
from typing import Callable

from pocketledger.domain.budget import BudgetService
from pocketledger.domain.entities import Transaction, TransactionType
from pocketledger.domain.events import (
    DomainEvent,
    EventBus,
    TransactionCreatedEvent,
    TransactionDeletedEvent,
    TransactionUpdatedEvent,
)

logger = logging.getLogger(__name__)


class BudgetAlertHandler:
    """Recompute the exceeded flag of budgets an expense transaction touches.

    An update can move a transaction between categories or dates, so the
    budgets covering both the previous and the new version are refreshed.
    Budgets at or above the alert threshold are logged as alerts.
    """

    EVENT_TYPES = (
        TransactionCreatedEvent.EVENT_TYPE,
        TransactionUpdatedEvent.EVENT_TYPE,
        TransactionDeletedEvent.EVENT_TYPE,
    )

    def __init__(self, budget_service: BudgetService):
        self.budget_service = budget_service

    def __call__(self, event: DomainEvent) -> None:
        affected = []
        for transaction in self._transactions(event):
            if transaction.type != TransactionType.EXPENSE:
                continue
            for budget in self.budget_service.budgets.find_covering(
                transaction.category_id, transaction.date
            ):
                if budget.id not in affected:
                    affected.append(budget.id)

        for budget_id in affected:
            status = self.budget_service.refresh_budget_status(budget_id)
            if status.percentage >= self.budget_service.alert_threshold:
                logger.warning(
                    f"Budget alert: '{status.budget.name}' at {status.percentage:.1f}% "
                    f"({status.spent} of {status.budget.amount})"
                )

    @staticmethod
    def _transactions(event: DomainEvent) -> list[Transaction]:
        if isinstance(event, TransactionUpdatedEvent):
            return [event.previous, event.transaction]
        if isinstance(event, (TransactionCreatedEvent, TransactionDeletedEvent)):
            return [event.transaction]
        return []


def register_budget_handlers(bus: EventBus, budget_service: BudgetService) -> Callable[[], None]:
    """Subscribe a BudgetAlertHandler to every transaction event type.

    Returns:
        Function that removes the subscriptions
    """
    handler = BudgetAlertHandler(budget_service)
    unsubscribers = [bus.subscribe(event_type, handler) for event_type in handler.EVENT_TYPES]

    def unsubscribe() -> None:
        for unsubscribe_one in unsubscribers:
            unsubscribe_one()

    return unsubscribe
