"""Category domain service."""

from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from pocketledger.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    TransactionRepository,
)
from pocketledger.domain.entities import Category, TransactionType
from pocketledger.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    category_in_use,
    category_not_found,
    validation_errors,
)
from pocketledger.domain.events import (
    CategoryCreatedEvent,
    CategoryDeletedEvent,
    CategoryUpdatedEvent,
    DomainEvent,
    EventBus,
)
from pocketledger.domain.patches import CategoryPatch, as_patch
from pocketledger.utils.values import to_enum

DEFAULT_ICON = "ellipsis-horizontal-outline"
DEFAULT_COLOR = "#9E9E9E"


class CategoryService:
    """Service for managing categories."""

    def __init__(
        self,
        categories: CategoryRepository,
        transactions: TransactionRepository,
        budgets: BudgetRepository,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize category service.

        Args:
            categories: Category repository
            transactions: Transaction repository, for reference checks
            budgets: Budget repository, for reference checks
            event_bus: Bus that receives category events
        """
        self.categories = categories
        self.transactions = transactions
        self.budgets = budgets
        self.event_bus = event_bus

    def _publish(self, event: DomainEvent) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def get_categories(self) -> list[Category]:
        return self.categories.find_all()

    def get_active_categories(self) -> list[Category]:
        return self.categories.find_active()

    def get_category_by_id(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Returns:
            Category or None if not found
        """
        return self.categories.find_by_id(category_id)

    def get_categories_by_type(self, category_type: Union[TransactionType, str]) -> list[Category]:
        """List categories of one type.

        Raises:
            ValidationError: If the type is not income or expense
        """
        with validation_errors():
            category_type = to_enum(TransactionType, category_type)
        return self.categories.find_by_type(category_type)

    def create_category(
        self,
        name: str,
        type: Union[TransactionType, str],
        icon: str = DEFAULT_ICON,
        color: str = DEFAULT_COLOR,
        description: Optional[str] = None,
        sort_order: int = 0,
        is_default: bool = False,
        is_active: bool = True,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name
            type: "income" or "expense"
            icon: Icon name
            color: Display color
            description: Optional description
            sort_order: Position in category lists
            is_default: Whether this is a built-in category
            is_active: Whether the category is offered for new records

        Returns:
            The stored category

        Raises:
            ValidationError: If the name is empty or the type is unknown
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        with validation_errors():
            category_type = to_enum(TransactionType, type)

        category = self.categories.create(
            name=name,
            type=category_type,
            icon=icon,
            color=color,
            description=description,
            sort_order=sort_order,
            is_default=is_default,
            is_active=is_active,
        )
        self._publish(CategoryCreatedEvent(category=category))
        return category

    def update_category(
        self, category_id: int, patch: Union[CategoryPatch, Mapping[str, Any]]
    ) -> bool:
        """Update a category.

        Only fields in the category allow-list are written; anything else in
        a mapping (such as "id") is ignored.

        Args:
            category_id: Category ID
            patch: CategoryPatch or mapping of fields to change

        Returns:
            True if the category was updated

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If a value is invalid
            DependencyError: If the type changes while transactions use it
        """
        patch = as_patch(CategoryPatch, patch)
        existing = self.categories.find_by_id(category_id)
        if existing is None:
            raise NotFoundError(category_not_found(category_id))

        if patch.name is not None and not patch.name.strip():
            raise ValidationError("Category name cannot be empty")
        if patch.name is not None:
            patch = replace(patch, name=patch.name.strip())

        if patch.type is not None and patch.type != existing.type:
            transaction_count = self.transactions.count_by_category(category_id)
            if transaction_count:
                raise DependencyError(
                    f"Cannot change type of category {category_id}: "
                    f"{transaction_count} transactions use it"
                )

        updated = self.categories.update(category_id, patch)
        if updated:
            self._publish(CategoryUpdatedEvent(category=self.categories.find_by_id(category_id)))
        return updated

    def delete_category(self, category_id: int) -> bool:
        """Delete a category that nothing references.

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If transactions or budgets reference it
        """
        existing = self.categories.find_by_id(category_id)
        if existing is None:
            raise NotFoundError(category_not_found(category_id))

        transaction_count = self.transactions.count_by_category(category_id)
        budget_count = self.budgets.count_by_category(category_id)
        if transaction_count or budget_count:
            raise DependencyError(category_in_use(category_id, transaction_count, budget_count))

        deleted = self.categories.delete(category_id)
        if deleted:
            self._publish(CategoryDeletedEvent(category=existing))
        return deleted
