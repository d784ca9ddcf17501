"""API schemas for category, item and market endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class NameRequest(BaseModel):
    name: str = Field(max_length=255)


class ItemCreateRequest(BaseModel):
    name: str = Field(max_length=255)
    categoryId: Optional[str] = None


class MarketCreateRequest(BaseModel):
    name: str = Field(max_length=255)
    location: Optional[str] = Field(default=None, max_length=500)


class DeleteResponse(BaseModel):
    deleted: bool
    id: str
