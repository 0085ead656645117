"""Pydantic schemas for request/response."""
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field


# ----- Settlement core records -----
class Expense(BaseModel):
    id: Optional[Union[int, str]] = None
    description: str = ""
    amount: float
    paid_by: str
    participants: list[str] = []


class Balance(BaseModel):
    attendee_name: str
    amount: float  # positive: is owed, negative: owes


class Settlement(BaseModel):
    from_attendee: str = Field(alias="from")
    to_attendee: str = Field(alias="to")
    amount: float

    class Config:
        populate_by_name = True


# ----- Project -----
class ProjectCreate(BaseModel):
    name: str


class ProjectUpdate(BaseModel):
    name: Optional[str] = None


class ProjectResponse(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None
    attendees: list[str] = []
    expense_count: int = 0

    class Config:
        from_attributes = True


# ----- Attendee -----
class AttendeeCreate(BaseModel):
    name: str


class AttendeeRename(BaseModel):
    name: str


# ----- Group -----
ALL_ATTENDEES_GROUP_ID = "all"
ALL_ATTENDEES_GROUP_NAME = "All Attendees"


class GroupCreate(BaseModel):
    name: str
    members: list[str] = []


class GroupResponse(BaseModel):
    id: Union[int, str]
    name: str
    members: list[str] = []
    is_system_group: bool = False


# ----- Expense -----
class ExpenseCreate(BaseModel):
    description: str
    amount: float
    paid_by: str
    participants: Optional[list[str]] = None
    group_id: Optional[Union[int, str]] = None


class ExpenseUpdate(BaseModel):
    description: Optional[str] = None
    amount: Optional[float] = None
    paid_by: Optional[str] = None
    participants: Optional[list[str]] = None
    group_id: Optional[Union[int, str]] = None


class ExpenseResponse(Expense):
    id: int
    project_id: int
    created_at: Optional[datetime] = None


class FastEntryRequest(BaseModel):
    text: str


class FastEntryResponse(BaseModel):
    expense: ExpenseResponse
    group_name: Optional[str] = None
    warning: Optional[str] = None


# ----- Settlement summary -----
class SettlementSummary(BaseModel):
    project_id: int
    balances: list[Balance]
    settlements: list[Settlement]
    consolidated: bool = True
    all_settled: bool = False


# ----- Project file (save / load) -----
class GroupState(BaseModel):
    name: str
    members: list[str] = []


class ExpenseState(BaseModel):
    description: str
    amount: float
    paid_by: str
    participants: list[str] = []


class ProjectState(BaseModel):
    name: str = "Imported project"
    attendees: list[str] = []
    groups: list[GroupState] = []
    expenses: list[ExpenseState] = []


# ----- AI suggestions -----
class SuggestionRequest(BaseModel):
    description: str
    threshold: float = Field(0.5, ge=0, le=1)


class SuggestionResponse(BaseModel):
    scores: dict[str, float]
    suggested_participants: list[str] = []
