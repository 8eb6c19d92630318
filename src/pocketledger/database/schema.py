"""Table definitions for the pocketledger database.

Tables are declared with SQLAlchemy Core and compiled to SQLite DDL, which
the lifecycle manager runs through the query executor. The registry order
puts tables without foreign keys first.
"""

from dataclasses import dataclass
from functools import cached_property

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateIndex, CreateTable

metadata = MetaData()


def _timestamps() -> list[Column]:
    return [
        Column("created_at", DateTime, server_default=func.current_timestamp(), nullable=False),
        Column("updated_at", DateTime, server_default=func.current_timestamp(), nullable=False),
    ]


categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
    Column("type", String(10), nullable=False),
    Column("icon", String, nullable=False, server_default=""),
    Column("color", String, nullable=False, server_default="#9E9E9E"),
    Column("description", String, nullable=True),
    Column("sort_order", Integer, nullable=False, server_default="0"),
    Column("is_default", Boolean, nullable=False, server_default="0"),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    *_timestamps(),
    CheckConstraint("type IN ('income', 'expense')", name="ck_categories_type"),
)

accounts = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, unique=True, nullable=False),
    Column("type", String(20), nullable=False),
    Column("opening_balance", Numeric(10, 2), nullable=False, server_default="0"),
    Column("closing_balance", Numeric(10, 2), nullable=False, server_default="0"),
    *_timestamps(),
    CheckConstraint(
        "type IN ('bank', 'cash', 'credit_card', 'investment', 'other')",
        name="ck_accounts_type",
    ),
)

budgets = Table(
    "budgets",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id"), nullable=False),
    Column("amount", Numeric(10, 2), nullable=False),
    Column("period", String(10), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("month", String(7), nullable=False),
    Column("description", String, nullable=True),
    Column("is_budget_exceeded", Boolean, nullable=False, server_default="0"),
    *_timestamps(),
    CheckConstraint("amount > 0", name="ck_budgets_amount"),
    CheckConstraint(
        "period IN ('daily', 'weekly', 'monthly', 'yearly')", name="ck_budgets_period"
    ),
)

bank_balances = Table(
    "bank_balances",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("year", Integer, nullable=False),
    Column("month", Integer, nullable=False),
    Column("opening_balance", Numeric(10, 2), nullable=False, server_default="0"),
    Column("closing_balance", Numeric(10, 2), nullable=False, server_default="0"),
    *_timestamps(),
    UniqueConstraint("year", "month", name="uq_bank_balances_year_month"),
    CheckConstraint("month BETWEEN 1 AND 12", name="ck_bank_balances_month"),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("amount", Numeric(10, 2), nullable=False),
    Column("type", String(10), nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id"), nullable=False),
    Column("budget_id", Integer, ForeignKey("budgets.id", ondelete="SET NULL"), nullable=True),
    Column("account_id", Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
    Column("description", String, nullable=True),
    Column("date", Date, nullable=False),
    *_timestamps(),
    CheckConstraint("amount > 0", name="ck_transactions_amount"),
    CheckConstraint("type IN ('income', 'expense')", name="ck_transactions_type"),
)

Index("idx_transactions_date", transactions.c.date)
Index("idx_transactions_category", transactions.c.category_id)
Index("idx_budgets_month", budgets.c.month)
Index("idx_budgets_category", budgets.c.category_id)

_dialect = sqlite.dialect()


@dataclass(frozen=True)
class TableDefinition:
    """A registered table with its DDL and the tables it references."""

    table: Table

    @property
    def name(self) -> str:
        return self.table.name

    @cached_property
    def depends_on(self) -> tuple[str, ...]:
        referenced = {fk.column.table.name for fk in self.table.foreign_keys}
        referenced.discard(self.name)
        return tuple(sorted(referenced))

    @cached_property
    def ddl(self) -> str:
        return str(CreateTable(self.table, if_not_exists=True).compile(dialect=_dialect)).strip()

    @cached_property
    def index_ddl(self) -> tuple[str, ...]:
        statements = [
            str(CreateIndex(index, if_not_exists=True).compile(dialect=_dialect)).strip()
            for index in sorted(self.table.indexes, key=lambda i: i.name)
        ]
        return tuple(statements)

    def drop_sql(self) -> str:
        return f"DROP TABLE IF EXISTS {self.name}"


SCHEMAS: tuple[TableDefinition, ...] = (
    TableDefinition(categories),
    TableDefinition(accounts),
    TableDefinition(budgets),
    TableDefinition(bank_balances),
    TableDefinition(transactions),
)

TABLE_NAMES = tuple(schema.name for schema in SCHEMAS)


def get_schema(name: str) -> TableDefinition:
    """Look up a registered table.

    Raises:
        KeyError: If no table with that name is registered
    """
    for schema in SCHEMAS:
        if schema.name == name:
            return schema
    raise KeyError(f"Unknown table '{name}'")


def creation_order(schemas: tuple[TableDefinition, ...] = SCHEMAS) -> list[TableDefinition]:
    """Order tables so every table comes after the tables it references.

    Registration order is kept wherever dependencies allow it.

    Raises:
        ValueError: If the definitions reference each other in a cycle or
            reference an unregistered table
    """
    names = {schema.name for schema in schemas}
    ordered: list[TableDefinition] = []
    placed: set[str] = set()
    pending = list(schemas)
    while pending:
        for schema in pending:
            missing = [dep for dep in schema.depends_on if dep not in names]
            if missing:
                raise ValueError(f"Table '{schema.name}' references unknown tables: {missing}")
            if all(dep in placed for dep in schema.depends_on):
                ordered.append(schema)
                placed.add(schema.name)
                pending.remove(schema)
                break
        else:
            raise ValueError(f"Circular table dependencies: {[s.name for s in pending]}")
    return ordered


def drop_order(schemas: tuple[TableDefinition, ...] = SCHEMAS) -> list[TableDefinition]:
    """Reverse of the creation order: referencing tables go first."""
    return list(reversed(creation_order(schemas)))
