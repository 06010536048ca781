"""
Category Management Module

Income and expense categories arranged in a two-level tree: top-level
categories and their subcategories. Writes that would nest deeper than two
levels, mix types across a parent link or create a cycle are rejected.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum

from .exceptions import ValidationError
from .logging_config import get_logger, log_action
from .schema import CATEGORIES
from .storage import StorageRecord
from .store import LedgerStore
from .validation import check_update_fields, optional_id, parse_enum, require_text


class CategoryType(Enum):
    INCOME = "income"
    EXPENSE = "expense"


DEFAULT_CATEGORY_COLOR = "#059669"


@dataclass
class Category(StorageRecord):
    name: str
    category_type: CategoryType
    color: str = DEFAULT_CATEGORY_COLOR
    parent_id: Optional[str] = None

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(
            **cls._timestamps(data),
            name=data['name'],
            category_type=CategoryType(data['category_type']),
            color=data.get('color') or DEFAULT_CATEGORY_COLOR,
            parent_id=data.get('parent_id')
        )


class CategoryManager:
    """Manages the category tree"""

    UPDATABLE_FIELDS = ("name", "category_type", "color", "parent_id")

    def __init__(self, store: LedgerStore):
        self.store = store
        self.table_name = CATEGORIES
        self.logger = get_logger("finance_tracker.categories")

    def create_category(
        self,
        name: str,
        category_type: Any,
        color: Optional[str] = None,
        parent_id: Optional[str] = None
    ) -> Category:
        now = datetime.now(timezone.utc)
        category = Category(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            name=require_text(name, "name"),
            category_type=parse_enum(CategoryType, category_type, "category_type"),
            color=color or DEFAULT_CATEGORY_COLOR,
            parent_id=optional_id(parent_id, "parent_id")
        )
        self._check_hierarchy(category)
        self.store.save(self.table_name, category)

        log_action(
            self.logger, "info", f"Category created: {category.name}",
            action="create_category", resource=f"category:{category.id}",
            extra={"category_type": category.category_type.value, "parent_id": category.parent_id}
        )
        return category

    def get_category(self, category_id: str) -> Optional[Category]:
        data = self.store.load(self.table_name, category_id)
        if data:
            return Category.from_dict(data)
        return None

    def list_categories(self) -> List[Category]:
        return [Category.from_dict(data) for data in self.store.load_all(self.table_name)]

    def list_subcategories(self, parent_id: str) -> List[Category]:
        return [Category.from_dict(data) for data in self.store.find(self.table_name, {"parent_id": parent_id})]

    def update_category(self, category_id: str, updates: Dict[str, Any]) -> Category:
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        category = Category.from_dict(self.store.require(self.table_name, category_id))

        if "name" in updates:
            category.name = require_text(updates["name"], "name")
        if "category_type" in updates:
            category.category_type = parse_enum(CategoryType, updates["category_type"], "category_type")
        if "color" in updates:
            category.color = updates["color"] or DEFAULT_CATEGORY_COLOR
        if "parent_id" in updates:
            category.parent_id = optional_id(updates["parent_id"], "parent_id")

        self._check_hierarchy(category)
        category.updated_at = datetime.now(timezone.utc)
        self.store.save(self.table_name, category)

        log_action(
            self.logger, "info", f"Category updated: {category.name}",
            action="update_category", resource=f"category:{category_id}",
            extra={"fields": sorted(updates)}
        )
        return category

    def delete_category(self, category_id: str) -> None:
        """Delete a category; refused while transactions, budgets or subcategories use it"""
        self.store.delete(self.table_name, category_id)
        log_action(
            self.logger, "info", "Category deleted",
            action="delete_category", resource=f"category:{category_id}"
        )

    def _check_hierarchy(self, category: Category) -> None:
        children = self.list_subcategories(category.id)
        for child in children:
            if child.category_type != category.category_type:
                raise ValidationError.for_field(
                    "category_type", "must match the type of existing subcategories"
                )

        if category.parent_id is None:
            return

        if category.parent_id == category.id or self._is_descendant(category.parent_id, category.id):
            raise ValidationError.for_field("parent_id", "would create a cycle")

        parent = self.get_category(category.parent_id)
        if parent is None:
            # The store reports the missing parent as NotFound on save
            return
        if not parent.is_top_level:
            raise ValidationError.for_field("parent_id", "parent must be a top-level category")
        if children:
            raise ValidationError.for_field("parent_id", "a category with subcategories cannot have a parent")
        if parent.category_type != category.category_type:
            raise ValidationError.for_field("parent_id", "parent must have the same category type")

    def _is_descendant(self, candidate_id: str, ancestor_id: str) -> bool:
        """Walk up from candidate; True if ancestor_id is reached"""
        seen = set()
        current = self.get_category(candidate_id)
        while current is not None and current.parent_id is not None:
            if current.parent_id == ancestor_id:
                return True
            if current.parent_id in seen:
                return True
            seen.add(current.parent_id)
            current = self.get_category(current.parent_id)
        return False
