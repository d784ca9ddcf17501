"""Local-to-remote migration routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from grocery_tracker.domain.errors import MigrationAlreadyCompletedError
from grocery_tracker.domain.models import Category, Item, LocalSnapshot, Market
from grocery_tracker.services.gateway import RemoteGateway
from grocery_tracker.services.migration import has_existing_data, migrate_snapshot
from grocery_tracker.services.normalizer import normalize_purchases

from ..config import get_gateway
from ..schemas.migration import MigrationRequest, MigrationResponse, MigrationStatusResponse

router = APIRouter(prefix="/migration", tags=["migration"])


@router.get("/status", response_model=MigrationStatusResponse, summary="Check for remote data")
async def migration_status(gateway: RemoteGateway = Depends(get_gateway)):
    """Tell the client whether offering a migration makes sense."""
    return MigrationStatusResponse(hasExistingData=has_existing_data(gateway))


@router.post("", response_model=MigrationResponse, summary="Migrate exported local data")
async def migrate(
    payload: MigrationRequest,
    force: bool = Query(False, description="Migrate even if the account already holds data"),
    gateway: RemoteGateway = Depends(get_gateway),
):
    """Copy an exported local snapshot into the caller's remote store.

    Purchases have no natural key, so a second run would insert them again;
    accounts that already hold categories are refused unless ``force`` is set.
    """
    if not force and has_existing_data(gateway):
        raise MigrationAlreadyCompletedError(
            "Remote store already holds data for this user; pass force=true to migrate anyway"
        )

    try:
        snapshot = LocalSnapshot(
            categories=[Category.model_validate(row) for row in payload.categories],
            items=[Item.model_validate(row) for row in payload.items],
            markets=[Market.model_validate(row) for row in payload.markets],
            purchases=normalize_purchases(payload.purchases).purchases,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid local data") from exc

    report = migrate_snapshot(snapshot, gateway)
    return MigrationResponse(report=report.as_dict())
