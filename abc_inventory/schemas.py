from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import IntegrityError, ValidationError

Classification = Literal["A", "B", "C"]


def normalize_code(code: str) -> str:
    """Canonical form used for storing and comparing item codes."""
    return code.strip().upper()


def _as_validation_error(error: PydanticValidationError) -> ValidationError:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return ValidationError(f"Invalid value for '{field}': {first['msg']}", field=field)


class _InventoryModel(BaseModel):
    """
    Shared base for the inventory models. Keyword construction goes through
    pydantic validation and any rejection surfaces as our own ValidationError,
    so callers only deal with one error taxonomy.
    """

    def __init__(self, /, **data: Any):
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise _as_validation_error(e) from e

    class Config:
        # Accept both python names and the persisted camelCase aliases.
        populate_by_name = True


class Item(_InventoryModel):
    """
    A single inventory record. ``code`` is normalized to uppercase; the value
    metric ``total_value`` is derived on every read and never persisted, while
    ``accumulated_percentage`` and ``classification`` are written by the
    classifier and persisted alongside the stored fields.
    """

    code: str = Field(..., alias="code")
    name: str = Field(..., alias="name")
    moves_per_month: int = Field(default=0, ge=0, alias="movesPerMonth")
    unit_price: Decimal = Field(..., ge=0, alias="unitPrice")
    accumulated_percentage: Decimal = Field(
        default=Decimal("0"), alias="accumulatedPercentage"
    )
    classification: Classification = Field(default="C", alias="classification")

    @field_validator("code")
    @classmethod
    def check_code(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("item code cannot be empty")
        return normalize_code(value)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("item name cannot be empty")
        return value

    @classmethod
    def create(
        cls, code: str, name: str, moves_per_month: int, unit_price: Decimal
    ) -> "Item":
        return cls(
            code=code, name=name, moves_per_month=moves_per_month, unit_price=unit_price
        )

    @classmethod
    def without_history(cls, code: str, name: str, unit_price: Decimal) -> "Item":
        """New item with no movement history yet."""
        return cls.create(code, name, 0, unit_price)

    @property
    def total_value(self) -> Decimal:
        return self.moves_per_month * self.unit_price

    def revalidate(self) -> None:
        """
        Re-checks every invariant on the current field values. Fields can be
        changed after construction without validation (loaded records,
        direct assignment), so the store runs this before committing anything.
        Raises IntegrityError on the first violation found.
        """
        if not self.code or not self.code.strip():
            raise IntegrityError("Item has no valid code")
        if not self.name or not self.name.strip():
            raise IntegrityError(f"Item '{self.code}' has no valid name")
        if self.moves_per_month < 0:
            raise IntegrityError(
                f"Item '{self.code}' has negative moves per month: {self.moves_per_month}"
            )
        if self.unit_price < 0:
            raise IntegrityError(
                f"Item '{self.code}' has a negative unit price: {self.unit_price}"
            )
        if self.moves_per_month == 0 and self.unit_price == 0:
            raise IntegrityError(
                f"Item '{self.code}' has neither movements nor price (incomplete data)"
            )

    def describe(self) -> str:
        return (
            f"[{self.classification}] {self.code} - {self.name} | "
            f"moves: {self.moves_per_month} | price: ${self.unit_price:,.2f} | "
            f"total: ${self.total_value:,.2f} | "
            f"acc: {self.accumulated_percentage:.2f}%"
        )


class ItemUpdate(_InventoryModel):
    """New values for an existing item. Fields left as None keep their current value."""

    name: Optional[str] = Field(default=None, alias="name")
    moves_per_month: Optional[int] = Field(default=None, ge=0, alias="movesPerMonth")
    unit_price: Optional[Decimal] = Field(default=None, ge=0, alias="unitPrice")

    class Config:
        populate_by_name = True
        # Only name and the value fields can change; anything else is a typo
        # or an attempt to rewrite the code.
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("item name cannot be empty")
        return value
