"""Purchase routes."""

from __future__ import annotations

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends

from grocery_tracker.domain.models import Purchase, PurchaseDraft, PurchaseLineDraft
from grocery_tracker.services.gateway import RemoteGateway

from ..config import get_gateway
from ..schemas.catalog import DeleteResponse
from ..schemas.purchase import PurchaseCreateRequest

router = APIRouter(prefix="/purchases", tags=["purchases"])


@router.get("", response_model=List[Purchase], summary="List purchases, newest first")
async def list_purchases(gateway: RemoteGateway = Depends(get_gateway)):
    purchases = gateway.list_purchases()
    return sorted(purchases, key=lambda purchase: purchase.date, reverse=True)


@router.post("", response_model=Purchase, status_code=201, summary="Record a purchase")
async def add_purchase(payload: PurchaseCreateRequest, gateway: RemoteGateway = Depends(get_gateway)):
    draft = PurchaseDraft(
        date=payload.date or datetime.now(),
        market_id=payload.marketId,
        lines=[
            PurchaseLineDraft(item_id=line.itemId, quantity=line.quantity, unit_price=line.unitPrice)
            for line in payload.items
        ],
    )
    return gateway.add_purchase(draft)


@router.delete("/{purchase_id}", response_model=DeleteResponse, summary="Delete a purchase")
async def delete_purchase(purchase_id: str, gateway: RemoteGateway = Depends(get_gateway)):
    gateway.delete_purchase(purchase_id)
    return DeleteResponse(deleted=True, id=purchase_id)
