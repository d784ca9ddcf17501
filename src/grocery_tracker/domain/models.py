"""Domain models for the Grocery Tracker."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from grocery_tracker.constants import PFAND_CATEGORY_NAME, TOTAL_TOLERANCE


def new_id() -> str:
    return uuid.uuid4().hex


def _coerce_identifier(value: Any) -> Any:
    # Remote rows use integer or uuid keys, local rows use strings
    if value is None or isinstance(value, str):
        return value
    return str(value)


Identifier = Annotated[str, BeforeValidator(_coerce_identifier)]


def parse_timestamp(value: Any) -> Any:
    """Accept date-only strings and drop timezone info (local wall clock)."""
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            text = f"{text}T00:00:00"
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


Timestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]


class Category(BaseModel):
    """A spending category; names are unique case-insensitively."""

    id: Identifier = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=255)
    created_at: Timestamp = Field(alias="createdAt", default_factory=datetime.now)

    class Config:
        populate_by_name = True

    @property
    def is_pfand(self) -> bool:
        return self.name.lower() == PFAND_CATEGORY_NAME.lower()


class Item(BaseModel):
    """A grocery item, optionally tagged with a category id or name."""

    id: Identifier = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=255)
    category: Optional[Identifier] = None
    created_at: Timestamp = Field(alias="createdAt", default_factory=datetime.now)

    class Config:
        populate_by_name = True


class Market(BaseModel):
    id: Identifier = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=255)
    location: Optional[str] = Field(default=None, max_length=500)
    created_at: Timestamp = Field(alias="createdAt", default_factory=datetime.now)

    class Config:
        populate_by_name = True


class PurchaseLineItem(BaseModel):
    """One item/quantity/price entry of a purchase.

    ``item_name`` is a snapshot taken when the purchase was recorded and is
    never refreshed from the live item.
    """

    item_id: Identifier = Field(alias="itemId")
    item_name: str = Field(alias="itemName", default="")
    quantity: int = Field(default=1, gt=0)
    unit_price: float = Field(alias="unitPrice", ge=0)
    total_price: Optional[float] = Field(alias="totalPrice", default=None, ge=0)

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def validate_total_price(self) -> "PurchaseLineItem":
        """Fill in total_price, or check it equals quantity * unit_price."""
        calculated = self.quantity * self.unit_price
        if self.total_price is None:
            self.total_price = calculated
        elif abs(self.total_price - calculated) > TOTAL_TOLERANCE:
            raise ValueError(
                f"Invalid line total: totalPrice ({self.total_price}) != "
                f"quantity ({self.quantity}) * unitPrice ({self.unit_price})"
            )
        return self


class Purchase(BaseModel):
    """A shopping trip: one date, an optional market and its line items."""

    id: Identifier = Field(default_factory=new_id)
    date: Timestamp
    market_id: Optional[Identifier] = Field(alias="marketId", default=None)
    market_name: Optional[str] = Field(alias="marketName", default=None)
    items: List[PurchaseLineItem] = Field(min_length=1)
    total_amount: Optional[float] = Field(alias="totalAmount", default=None, ge=0)
    created_at: Timestamp = Field(alias="createdAt", default_factory=datetime.now)

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def validate_total_amount(self) -> "Purchase":
        """Fill in total_amount, or check it equals the sum of line totals."""
        calculated = sum(line.total_price or 0 for line in self.items)
        if self.total_amount is None:
            self.total_amount = calculated
        elif abs(self.total_amount - calculated) > TOTAL_TOLERANCE:
            raise ValueError(
                f"Invalid purchase total: totalAmount ({self.total_amount}) != "
                f"sum of line totals ({calculated})"
            )
        return self

    @property
    def day_key(self) -> str:
        return self.date.date().isoformat()

    @property
    def month_key(self) -> str:
        return self.date.strftime("%Y-%m")

    def find_line(self, item_id: str) -> Optional[PurchaseLineItem]:
        """Return the first line referencing item_id, in insertion order."""
        return next((line for line in self.items if line.item_id == item_id), None)


class LegacyPurchaseRecord(BaseModel):
    """Earlier one-item-per-record purchase shape."""

    id: Optional[Identifier] = None
    item_id: Identifier = Field(alias="itemId")
    item_name: str = Field(alias="itemName", default="")
    amount: float
    date: str
    created_at: Optional[str] = Field(alias="createdAt", default=None)

    class Config:
        populate_by_name = True

    @property
    def day_key(self) -> str:
        return self.date.split("T")[0]


class PurchaseLineDraft(BaseModel):
    item_id: Identifier = Field(alias="itemId")
    quantity: int = Field(default=1, gt=0)
    unit_price: float = Field(alias="unitPrice", ge=0)

    class Config:
        populate_by_name = True


class PurchaseDraft(BaseModel):
    """In-progress purchase; only turned into a Purchase when saved."""

    date: Timestamp = Field(default_factory=datetime.now)
    market_id: Optional[Identifier] = Field(alias="marketId", default=None)
    lines: List[PurchaseLineDraft] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class LocalSnapshot(BaseModel):
    """All local collections, as handed to the migration routine."""

    categories: List[Category] = Field(default_factory=list)
    items: List[Item] = Field(default_factory=list)
    markets: List[Market] = Field(default_factory=list)
    purchases: List[Purchase] = Field(default_factory=list)
