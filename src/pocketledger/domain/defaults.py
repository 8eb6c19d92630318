"""Default categories seeded into an empty database."""

from pocketledger.domain.entities import TransactionType

# (name, type, icon, color)
DEFAULT_CATEGORIES = [
    ("Dining", TransactionType.EXPENSE, "restaurant-outline", "#FF6B6B"),
    ("Shopping", TransactionType.EXPENSE, "cart-outline", "#FFD93D"),
    ("Transport", TransactionType.EXPENSE, "car-outline", "#4ECDC4"),
    ("Housing", TransactionType.EXPENSE, "home-outline", "#1A535C"),
    ("Entertainment", TransactionType.EXPENSE, "game-controller-outline", "#FF9F1C"),
    ("Medical", TransactionType.EXPENSE, "medical-outline", "#E71D36"),
    ("Education", TransactionType.EXPENSE, "school-outline", "#2EC4B6"),
    ("Other", TransactionType.EXPENSE, "ellipsis-horizontal-outline", "#9E9E9E"),
    ("Salary", TransactionType.INCOME, "cash-outline", "#95E1D3"),
    ("Bonus", TransactionType.INCOME, "gift-outline", "#A8E6CF"),
    ("Investment", TransactionType.INCOME, "trending-up-outline", "#6C5CE7"),
    ("Part-time", TransactionType.INCOME, "briefcase-outline", "#74B9FF"),
    ("Gifts", TransactionType.INCOME, "card-outline", "#FD79A8"),
    ("Other Income", TransactionType.INCOME, "ellipsis-horizontal-outline", "#B2BEC3"),
]
