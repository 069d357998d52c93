from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from expense_api.schemas.expense import Email, to_cents


def non_negative(value: Decimal) -> Decimal:
    value = to_cents(value)
    if value < 0:
        raise ValueError("Invalid total amount")
    return value


Total = Annotated[Decimal, AfterValidator(non_negative)]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SnapshotItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str
    amount: float
    category: str
    date: Optional[str] = None


class SaveTotalRequest(CamelModel):
    email: Optional[Email] = None
    token: Optional[str] = Field(default=None, min_length=1, max_length=64)
    total_expense: Total = Field(alias="totalExpense")
    expenses: Optional[List[SnapshotItem]] = None


class SaveTotalResponse(CamelModel):
    success: bool = True
    id: str
    token: Optional[str] = None
    email_sent: bool = Field(default=False, alias="emailSent")
    message: str


class SnapshotRead(CamelModel):
    id: str
    total_expense: float = Field(alias="totalExpense")
    email: Optional[str] = None
    token: Optional[str] = None
    expenses: List[SnapshotItem] = []
    saved_at: datetime = Field(alias="savedAt")


class RetrieveRequest(CamelModel):
    email: Optional[Email] = None
    token: Optional[str] = Field(default=None, min_length=1, max_length=64)


class RetrieveResponse(CamelModel):
    success: bool = True
    expenses: List[SnapshotItem] = []
    total_expense: float = Field(alias="totalExpense")
