"""
Tests for the saving tactics catalogue
"""

import pytest
from decimal import Decimal

from finance_tracker.config import FinanceTrackerConfig
from finance_tracker.exceptions import NotFoundError, ValidationError
from finance_tracker.storage import InMemoryStorage
from finance_tracker.tactics import TacticDifficulty
from finance_tracker.tracker import FinanceTracker


class TestSavingTacticManager:

    def setup_method(self):
        self.tracker = FinanceTracker(InMemoryStorage(), FinanceTrackerConfig(_env_file=None))
        self.manager = self.tracker.tactic_manager

    def test_create_tactic(self):
        tactic = self.manager.create_tactic(
            "Meal prep", "Cook lunches on Sunday", "Food",
            difficulty="Medium", estimated_savings="120.00",
            time_to_implement="2 hours a week", tags=["food", " cooking "]
        )

        assert tactic.category == "food"
        assert tactic.difficulty == TacticDifficulty.MEDIUM
        assert tactic.estimated_savings == Decimal("120.00")
        assert tactic.tags == ["food", "cooking"]
        assert tactic.is_active and not tactic.is_personal
        assert self.manager.get_tactic(tactic.id) == tactic

    def test_optional_fields(self):
        tactic = self.manager.create_tactic("Cancel gym", "Run outside instead", "fitness")
        assert tactic.estimated_savings is None
        assert tactic.tags == []
        assert tactic.difficulty == TacticDifficulty.EASY

    @pytest.mark.parametrize("kwargs,field", [
        ({"title": ""}, "title"),
        ({"difficulty": "impossible"}, "difficulty"),
        ({"estimated_savings": "-1"}, "estimated_savings"),
        ({"estimated_savings": 5.5}, "estimated_savings"),
        ({"tags": "food"}, "tags"),
        ({"tags": 5}, "tags"),
        ({"tags": {"food": True}}, "tags"),
        ({"tags": ["food", 3]}, "tags"),
    ])
    def test_create_validation(self, kwargs, field):
        values = {"title": "Tip", "description": "Do it", "category": "misc"}
        values.update(kwargs)
        with pytest.raises(ValidationError) as exc_info:
            self.manager.create_tactic(**values)
        assert field in exc_info.value.field_errors

    def test_filters(self):
        food = self.manager.create_tactic("Meal prep", "Cook", "Food")
        personal = self.manager.create_tactic("Bike", "Ride to work", "transport", is_personal=True)
        retired = self.manager.create_tactic("Coupons", "Clip them", "food", is_active=False)

        assert {t.id for t in self.manager.list_by_category(" FOOD ")} == {food.id, retired.id}
        assert [t.id for t in self.manager.list_personal()] == [personal.id]
        assert {t.id for t in self.manager.list_tactics(active_only=True)} == {food.id, personal.id}
        assert len(self.manager.list_tactics()) == 3

    def test_update_tactic(self):
        tactic = self.manager.create_tactic("Meal prep", "Cook", "food", estimated_savings="10.00")
        updated = self.manager.update_tactic(
            tactic.id, {"estimated_savings": None, "tags": ["batch"], "is_personal": True}
        )

        assert updated.estimated_savings is None
        assert updated.tags == ["batch"]
        assert updated.is_personal

        with pytest.raises(ValidationError):
            self.manager.update_tactic(tactic.id, {"id": "other"})
        with pytest.raises(ValidationError):
            self.manager.update_tactic(tactic.id, {"tags": 5})
        assert self.manager.get_tactic(tactic.id).tags == ["batch"]

    def test_update_missing(self):
        with pytest.raises(NotFoundError):
            self.manager.update_tactic("missing", {"title": "x"})

    def test_delete_tactic(self):
        tactic = self.manager.create_tactic("Meal prep", "Cook", "food")
        self.manager.delete_tactic(tactic.id)
        assert self.manager.get_tactic(tactic.id) is None
        with pytest.raises(NotFoundError):
            self.manager.delete_tactic(tactic.id)
