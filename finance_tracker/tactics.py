"""
Saving Tactics Module

A catalogue of money-saving tips. Tactics are free-standing records: they do
not reference accounts or categories and take no part in balance derivation.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum

from .exceptions import ValidationError
from .logging_config import get_logger, log_action
from .money import parse_amount
from .schema import SAVING_TACTICS
from .storage import StorageRecord
from .store import LedgerStore
from .validation import check_update_fields, optional_text, parse_enum, require_text


class TacticDifficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class SavingTactic(StorageRecord):
    title: str
    description: str
    category: str
    difficulty: TacticDifficulty = TacticDifficulty.EASY
    estimated_savings: Optional[Decimal] = None
    time_to_implement: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    is_personal: bool = False
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SavingTactic':
        savings = data.get('estimated_savings')
        return cls(
            **cls._timestamps(data),
            title=data['title'],
            description=data['description'],
            category=data['category'],
            difficulty=TacticDifficulty(data.get('difficulty') or TacticDifficulty.EASY.value),
            estimated_savings=Decimal(savings) if savings is not None else None,
            time_to_implement=data.get('time_to_implement'),
            tags=list(data.get('tags') or []),
            is_personal=data.get('is_personal', False),
            is_active=data.get('is_active', True)
        )


def _parse_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(tag, str) for tag in value):
        raise ValidationError.for_field("tags", "must be a list of strings")
    return [tag.strip() for tag in value if tag.strip()]


def _parse_savings(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return parse_amount(value, "estimated_savings")


class SavingTacticManager:
    """CRUD over the saving tactics catalogue"""

    UPDATABLE_FIELDS = (
        "title", "description", "category", "difficulty", "estimated_savings",
        "time_to_implement", "tags", "is_personal", "is_active"
    )

    def __init__(self, store: LedgerStore):
        self.store = store
        self.table_name = SAVING_TACTICS
        self.logger = get_logger("finance_tracker.tactics")

    def create_tactic(
        self,
        title: str,
        description: str,
        category: str,
        difficulty: Any = TacticDifficulty.EASY,
        estimated_savings: Any = None,
        time_to_implement: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_personal: bool = False,
        is_active: bool = True
    ) -> SavingTactic:
        now = datetime.now(timezone.utc)
        tactic = SavingTactic(
            id=self.store.new_id(),
            created_at=now,
            updated_at=now,
            title=require_text(title, "title"),
            description=require_text(description, "description"),
            category=require_text(category, "category").lower(),
            difficulty=parse_enum(TacticDifficulty, difficulty, "difficulty"),
            estimated_savings=_parse_savings(estimated_savings),
            time_to_implement=optional_text(time_to_implement, "time_to_implement"),
            tags=_parse_tags(tags),
            is_personal=bool(is_personal),
            is_active=bool(is_active)
        )
        self.store.save(self.table_name, tactic)

        log_action(
            self.logger, "info", f"Saving tactic created: {tactic.title}",
            action="create_tactic", resource=f"saving_tactic:{tactic.id}",
            extra={"category": tactic.category, "is_personal": tactic.is_personal}
        )
        return tactic

    def get_tactic(self, tactic_id: str) -> Optional[SavingTactic]:
        data = self.store.load(self.table_name, tactic_id)
        if data:
            return SavingTactic.from_dict(data)
        return None

    def list_tactics(self, active_only: bool = False) -> List[SavingTactic]:
        tactics = [SavingTactic.from_dict(data) for data in self.store.load_all(self.table_name)]
        if active_only:
            tactics = [tactic for tactic in tactics if tactic.is_active]
        return tactics

    def list_by_category(self, category: str) -> List[SavingTactic]:
        return [
            SavingTactic.from_dict(data)
            for data in self.store.find(self.table_name, {"category": category.strip().lower()})
        ]

    def list_personal(self) -> List[SavingTactic]:
        return [SavingTactic.from_dict(data) for data in self.store.find(self.table_name, {"is_personal": True})]

    def update_tactic(self, tactic_id: str, updates: Dict[str, Any]) -> SavingTactic:
        check_update_fields(updates, self.UPDATABLE_FIELDS)
        tactic = SavingTactic.from_dict(self.store.require(self.table_name, tactic_id))

        if "title" in updates:
            tactic.title = require_text(updates["title"], "title")
        if "description" in updates:
            tactic.description = require_text(updates["description"], "description")
        if "category" in updates:
            tactic.category = require_text(updates["category"], "category").lower()
        if "difficulty" in updates:
            tactic.difficulty = parse_enum(TacticDifficulty, updates["difficulty"], "difficulty")
        if "estimated_savings" in updates:
            tactic.estimated_savings = _parse_savings(updates["estimated_savings"])
        if "time_to_implement" in updates:
            tactic.time_to_implement = optional_text(updates["time_to_implement"], "time_to_implement")
        if "tags" in updates:
            tactic.tags = _parse_tags(updates["tags"])
        if "is_personal" in updates:
            tactic.is_personal = bool(updates["is_personal"])
        if "is_active" in updates:
            tactic.is_active = bool(updates["is_active"])

        tactic.updated_at = datetime.now(timezone.utc)
        self.store.save(self.table_name, tactic)

        log_action(
            self.logger, "info", f"Saving tactic updated: {tactic.title}",
            action="update_tactic", resource=f"saving_tactic:{tactic_id}",
            extra={"fields": sorted(updates)}
        )
        return tactic

    def delete_tactic(self, tactic_id: str) -> None:
        self.store.delete(self.table_name, tactic_id)
        log_action(
            self.logger, "info", "Saving tactic deleted",
            action="delete_tactic", resource=f"saving_tactic:{tactic_id}"
        )
