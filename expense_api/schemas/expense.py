import re
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CENTS = Decimal("0.01")


# Column sizes in expense_api.models
DESCRIPTION_LENGTH = 255
CATEGORY_LENGTH = 100
EMAIL_LENGTH = 255
# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def validate_email(value: str) -> str:
    value = value.strip()
    if len(value) > EMAIL_LENGTH:
        raise ValueError(f"must be at most {EMAIL_LENGTH} characters")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email address")
    return value


def text_field(max_length: int):
    def require_text(value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        if len(value) > max_length:
            raise ValueError(f"must be at most {max_length} characters")
        return value

    return require_text


def to_cents(value: Decimal) -> Decimal:
    # quantize overflows on huge exponents, so bound the value first
    if abs(value) > MAX_AMOUNT + CENTS:
        raise ValueError(f"Amount must not exceed {MAX_AMOUNT}")
    value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    if abs(value) > MAX_AMOUNT:
        raise ValueError(f"Amount must not exceed {MAX_AMOUNT}")
    return value


def positive_amount(value: Decimal) -> Decimal:
    value = to_cents(value)
    if value <= 0:
        raise ValueError("Amount must be a positive number")
    return value


Description = Annotated[str, AfterValidator(text_field(DESCRIPTION_LENGTH))]
Category = Annotated[str, AfterValidator(text_field(CATEGORY_LENGTH))]
Email = Annotated[str, AfterValidator(validate_email)]
Amount = Annotated[Decimal, AfterValidator(positive_amount)]


class ExpenseCreate(BaseModel):
    description: Description
    amount: Amount
    category: Category
    email: Optional[Email] = None


class ExpensePatch(BaseModel):
    """Partial update. Every field is optional and checked on its own;
    only the fields present in the request body are written."""

    description: Optional[Description] = None
    amount: Optional[Amount] = None
    category: Optional[Category] = None
    email: Optional[Email] = None

    @model_validator(mode="after")
    def _no_null_required_fields(self):
        for name in ("description", "amount", "category"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str
    amount: float
    category: str
    email: Optional[str] = None
    date: datetime
