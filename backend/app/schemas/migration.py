"""API schemas for the local-to-remote migration."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class MigrationRequest(BaseModel):
    """Local collections as exported from the local store.

    ``purchases`` is kept raw so older one-item records can be upgraded
    before migrating.
    """

    categories: List[Dict[str, Any]] = Field(default_factory=list)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    markets: List[Dict[str, Any]] = Field(default_factory=list)
    purchases: Any = None


class MigrationStatusResponse(BaseModel):
    hasExistingData: bool


class MigrationResponse(BaseModel):
    report: Dict[str, Dict[str, int]]
