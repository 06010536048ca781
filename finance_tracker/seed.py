"""
Default category tree for a fresh ledger.
"""

from typing import Dict, List, Tuple

from .categories import CategoryManager, CategoryType
from .logging_config import get_logger


logger = get_logger("finance_tracker.seed")


# (name, type, color, [(subcategory name, color), ...])
DEFAULT_CATEGORIES: List[Tuple[str, CategoryType, str, List[Tuple[str, str]]]] = [
    ("Food & Dining", CategoryType.EXPENSE, "#DC2626", [
        ("Groceries", "#DC2626"),
        ("Restaurants", "#EF4444"),
        ("Coffee & Snacks", "#F87171"),
    ]),
    ("Transportation", CategoryType.EXPENSE, "#D97706", [
        ("Gas", "#B45309"),
        ("Public Transit", "#D97706"),
        ("Car Maintenance", "#F59E0B"),
    ]),
    ("Utilities", CategoryType.EXPENSE, "#2563EB", [
        ("Electricity", "#1D4ED8"),
        ("Water", "#2563EB"),
        ("Internet", "#3B82F6"),
    ]),
    ("Entertainment", CategoryType.EXPENSE, "#7C3AED", [
        ("Movies & Shows", "#6D28D9"),
        ("Games", "#7C3AED"),
        ("Sports", "#8B5CF6"),
    ]),
    ("Salary", CategoryType.INCOME, "#059669", []),
    ("Freelance", CategoryType.INCOME, "#10B981", []),
]


def seed_default_categories(category_manager: CategoryManager) -> Dict[str, str]:
    """
    Create the default category tree unless categories already exist.

    Returns:
        Mapping of category name to id for the created categories
    """
    if category_manager.list_categories():
        logger.info("Categories already present; skipping default seed")
        return {}

    created = {}
    for name, category_type, color, children in DEFAULT_CATEGORIES:
        parent = category_manager.create_category(name, category_type, color)
        created[name] = parent.id
        for child_name, child_color in children:
            child = category_manager.create_category(child_name, category_type, child_color, parent_id=parent.id)
            created[child_name] = child.id

    logger.info(f"Seeded {len(created)} default categories")
    return created
