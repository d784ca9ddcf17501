"""Category, item and market management routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from grocery_tracker.domain.models import Category, Item, Market
from grocery_tracker.services.gateway import RemoteGateway

from ..config import get_gateway
from ..schemas.catalog import DeleteResponse, ItemCreateRequest, MarketCreateRequest, NameRequest

router = APIRouter(tags=["catalog"])


@router.get("/categories", response_model=List[Category], summary="List categories")
async def list_categories(gateway: RemoteGateway = Depends(get_gateway)):
    """List the user's categories; Pfand is created on first access."""
    return gateway.list_categories()


@router.post("/categories", response_model=Category, status_code=201, summary="Add a category")
async def add_category(payload: NameRequest, gateway: RemoteGateway = Depends(get_gateway)):
    return gateway.add_category(payload.name)


@router.patch("/categories/{category_id}", response_model=Category, summary="Rename a category")
async def rename_category(
    category_id: str,
    payload: NameRequest,
    gateway: RemoteGateway = Depends(get_gateway),
):
    return gateway.rename_category(category_id, payload.name)


@router.delete("/categories/{category_id}", response_model=DeleteResponse, summary="Delete a category")
async def delete_category(category_id: str, gateway: RemoteGateway = Depends(get_gateway)):
    """Delete a category. Items keep pointing at it; Pfand is rejected."""
    gateway.delete_category(category_id)
    return DeleteResponse(deleted=True, id=category_id)


@router.get("/items", response_model=List[Item], summary="List items")
async def list_items(gateway: RemoteGateway = Depends(get_gateway)):
    return gateway.list_items()


@router.post("/items", response_model=Item, status_code=201, summary="Add an item")
async def add_item(payload: ItemCreateRequest, gateway: RemoteGateway = Depends(get_gateway)):
    return gateway.add_item(payload.name, payload.categoryId)


@router.patch("/items/{item_id}", response_model=Item, summary="Rename an item")
async def rename_item(
    item_id: str,
    payload: NameRequest,
    gateway: RemoteGateway = Depends(get_gateway),
):
    return gateway.rename_item(item_id, payload.name)


@router.delete("/items/{item_id}", response_model=DeleteResponse, summary="Delete an item")
async def delete_item(item_id: str, gateway: RemoteGateway = Depends(get_gateway)):
    gateway.delete_item(item_id)
    return DeleteResponse(deleted=True, id=item_id)


@router.get("/markets", response_model=List[Market], summary="List markets")
async def list_markets(gateway: RemoteGateway = Depends(get_gateway)):
    return gateway.list_markets()


@router.post("/markets", response_model=Market, status_code=201, summary="Add a market")
async def add_market(payload: MarketCreateRequest, gateway: RemoteGateway = Depends(get_gateway)):
    return gateway.add_market(payload.name, payload.location)


@router.patch("/markets/{market_id}", response_model=Market, summary="Rename a market")
async def rename_market(
    market_id: str,
    payload: NameRequest,
    gateway: RemoteGateway = Depends(get_gateway),
):
    return gateway.rename_market(market_id, payload.name)


@router.delete("/markets/{market_id}", response_model=DeleteResponse, summary="Delete a market")
async def delete_market(market_id: str, gateway: RemoteGateway = Depends(get_gateway)):
    gateway.delete_market(market_id)
    return DeleteResponse(deleted=True, id=market_id)
