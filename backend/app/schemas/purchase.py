"""API schemas for purchase endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PurchaseLineRequest(BaseModel):
    itemId: str
    quantity: int = Field(default=1, gt=0)
    unitPrice: float = Field(ge=0)


class PurchaseCreateRequest(BaseModel):
    date: Optional[datetime] = None
    marketId: Optional[str] = None
    items: List[PurchaseLineRequest]
