"""
Pydantic schemas for API requests and response helpers

Monetary fields travel as decimal strings in both directions. Update
requests accept any field and pass the set ones through as a partial update,
so derived or unknown fields are rejected by the managers with a 400.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..goals import GoalProgress
from ..holdings import Holding
from ..money import quantize
from ..storage import StorageRecord


class UpdateRequest(BaseModel):
    """Partial update; only fields present in the body are applied"""
    model_config = ConfigDict(extra="allow")

    def to_updates(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# Account schemas
class CreateAccountRequest(BaseModel):
    name: str
    account_type: str = Field(..., description="Account type (checking, savings, credit, investment)")
    initial_balance: str = Field("0.00", description="Decimal amount as string")
    color: Optional[str] = None
    is_active: bool = True


class UpdateAccountRequest(UpdateRequest):
    name: Optional[str] = None
    account_type: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None


# Category schemas
class CreateCategoryRequest(BaseModel):
    name: str
    category_type: str = Field(..., description="Category type (income, expense)")
    color: Optional[str] = None
    parent_id: Optional[str] = None


class UpdateCategoryRequest(UpdateRequest):
    name: Optional[str] = None
    category_type: Optional[str] = None
    color: Optional[str] = None
    parent_id: Optional[str] = None


# Transaction schemas
class CreateTransactionRequest(BaseModel):
    description: str
    amount: str = Field(..., description="Decimal amount as string")
    transaction_type: str = Field(..., description="Transaction type (income, expense, transfer)")
    date: str = Field(..., description="ISO date")
    account_id: str
    category_id: Optional[str] = None
    notes: Optional[str] = None


class UpdateTransactionRequest(UpdateRequest):
    description: Optional[str] = None
    amount: Optional[str] = None
    transaction_type: Optional[str] = None
    date: Optional[str] = None
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    notes: Optional[str] = None


# Holding schemas
class CreateHoldingRequest(BaseModel):
    symbol: str
    name: str
    shares: str = Field(..., description="Decimal share count as string, up to 4 places")
    purchase_price: str = Field(..., description="Decimal amount as string")
    current_price: str = Field(..., description="Decimal amount as string")
    account_id: str
    purchase_date: str = Field(..., description="ISO date")
    notes: Optional[str] = None


class UpdateHoldingRequest(UpdateRequest):
    symbol: Optional[str] = None
    name: Optional[str] = None
    shares: Optional[str] = None
    purchase_price: Optional[str] = None
    current_price: Optional[str] = None
    account_id: Optional[str] = None
    purchase_date: Optional[str] = None
    notes: Optional[str] = None


class UpdatePriceRequest(BaseModel):
    current_price: str = Field(..., description="Decimal amount as string")


# Goal schemas
class CreateGoalRequest(BaseModel):
    name: str
    target_amount: str = Field(..., description="Decimal amount as string")
    account_id: str
    deadline: Optional[str] = Field(None, description="ISO date")
    description: Optional[str] = None
    is_completed: bool = False


class UpdateGoalRequest(UpdateRequest):
    name: Optional[str] = None
    target_amount: Optional[str] = None
    account_id: Optional[str] = None
    deadline: Optional[str] = None
    description: Optional[str] = None
    is_completed: Optional[bool] = None


# Goal allocation schemas
class CreateAllocationRequest(BaseModel):
    goal_id: str
    amount: str = Field(..., description="Decimal amount as string")
    date: Optional[str] = Field(None, description="ISO date, defaults to today")
    description: Optional[str] = None


class UpdateAllocationRequest(UpdateRequest):
    goal_id: Optional[str] = None
    amount: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None


# Budget schemas
class CreateBudgetRequest(BaseModel):
    name: str
    amount: str = Field(..., description="Decimal amount as string")
    period: str = Field("monthly", description="Budget period (weekly, monthly, yearly)")
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    alert_threshold: Optional[str] = Field(None, description="Fraction in (0, 1] as string")


class UpdateBudgetRequest(UpdateRequest):
    name: Optional[str] = None
    amount: Optional[str] = None
    period: Optional[str] = None
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    alert_threshold: Optional[str] = None


# Saving tactic schemas
class CreateTacticRequest(BaseModel):
    title: str
    description: str
    category: str
    difficulty: str = Field("easy", description="Difficulty (easy, medium, hard)")
    estimated_savings: Optional[str] = Field(None, description="Decimal amount as string")
    time_to_implement: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_personal: bool = False
    is_active: bool = True


class UpdateTacticRequest(UpdateRequest):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    estimated_savings: Optional[str] = None
    time_to_implement: Optional[str] = None
    tags: Optional[List[str]] = None
    is_personal: Optional[bool] = None
    is_active: Optional[bool] = None


# Response helpers
def record_response(record: StorageRecord) -> Dict[str, Any]:
    """Stored form of a record: decimals and dates as strings, enums as values"""
    return record.to_dict()


def holding_response(holding: Holding) -> Dict[str, Any]:
    result = holding.to_dict()
    result.update({
        "market_value": str(quantize(holding.market_value)),
        "cost_basis": str(quantize(holding.cost_basis)),
        "unrealized_gain": str(holding.unrealized_gain)
    })
    return result


def progress_response(progress: GoalProgress) -> Dict[str, Any]:
    return {
        "goal_id": progress.goal_id,
        "current_amount": str(progress.current_amount),
        "target_amount": str(progress.target_amount),
        "percentage": str(progress.percentage),
        "remaining": str(progress.remaining),
        "is_reached": progress.is_reached
    }
