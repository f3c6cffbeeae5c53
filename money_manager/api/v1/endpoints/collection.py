"""
Collection endpoints - the current user's holdings and every ledger mutation on them.
Thin controllers: resolve user and day, call one ItemService method, map the result.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from money_manager.core.dependencies import CurrentUserId, Today
from money_manager.db.models.user import User
from money_manager.db.repositories import HoldingRepository, ItemRepository, UserRepository
from money_manager.db.session import DbSession, SessionFactory
from money_manager.schemas.item import (
    DetachResponse,
    HoldingResponse,
    ItemAttach,
    ItemCountUpdate,
    ItemCreate,
    ItemDetach,
    ItemPriceUpdate,
    ItemResponse,
    PriceUpdateResponse,
)
from money_manager.schemas.user import UserResponse
from money_manager.services.item_service import ItemService, holding_to_response, item_to_response

router = APIRouter()


def get_item_service(session: DbSession, session_factory: SessionFactory) -> ItemService:
    """Factory for service with repository injection."""
    return ItemService(
        ItemRepository(session),
        UserRepository(session),
        HoldingRepository(session),
        session_factory,
    )


ItemServiceDep = Annotated[ItemService, Depends(get_item_service)]


@router.get("", response_model=list[HoldingResponse])
async def list_holdings(svc: ItemServiceDep, user_id: CurrentUserId):
    """Distinct held items with their unit count, newest item first."""
    rows = await svc.list_holdings_with_count(user_id)
    return [holding_to_response(item, count) for item, count in rows]


@router.put("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def submit_item(svc: ItemServiceDep, user_id: CurrentUserId, as_of: Today, data: ItemCreate):
    """Create a new item and add ``count`` units of it to the collection."""
    item = await svc.submit_item(user_id, data, as_of)
    return item_to_response(item)


@router.get("/autocomplete", response_model=list[ItemResponse])
async def autocomplete(
    svc: ItemServiceDep,
    user_id: CurrentUserId,
    search: str = Query(..., min_length=1, max_length=255),
):
    items = await svc.autocomplete(user_id, search)
    return [item_to_response(item) for item in items]


@router.post("/attach", response_model=ItemResponse)
async def attach_item(svc: ItemServiceDep, user_id: CurrentUserId, as_of: Today, data: ItemAttach):
    item = await svc.attach_item(user_id, data, as_of)
    return item_to_response(item)


@router.post("/detach", response_model=DetachResponse)
async def detach_item(svc: ItemServiceDep, user_id: CurrentUserId, as_of: Today, data: ItemDetach):
    """Remove every unit of the item. Self-submitted items are deleted along the way."""
    result = await svc.detach_item(user_id, data, as_of)
    if isinstance(result, User):
        return DetachResponse(item_deleted=True, user=UserResponse.model_validate(result))
    return DetachResponse(item_deleted=False, item=item_to_response(result))


@router.patch("/count", response_model=ItemResponse)
async def update_count(svc: ItemServiceDep, user_id: CurrentUserId, as_of: Today, data: ItemCountUpdate):
    item = await svc.update_holding_count(user_id, data, as_of)
    return item_to_response(item)


@router.patch("/price", response_model=PriceUpdateResponse)
async def update_price(svc: ItemServiceDep, user_id: CurrentUserId, as_of: Today, data: ItemPriceUpdate):
    """New price for an item; every holder's valuation for today moves with it."""
    result = await svc.update_item_price(user_id, data, as_of)
    return PriceUpdateResponse(
        item=item_to_response(result.item),
        revalued_user_ids=result.revalued_user_ids,
        failed_user_ids=result.failed_user_ids,
    )


@router.get("/{item_id}", response_model=HoldingResponse)
async def get_holding(svc: ItemServiceDep, user_id: CurrentUserId, item_id: int):
    item, count = await svc.get_holding(user_id, item_id)
    return holding_to_response(item, count)
