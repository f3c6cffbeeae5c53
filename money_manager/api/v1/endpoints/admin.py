"""
Admin endpoints - whole-catalog listing and item deletion (privileged users only).
"""

from fastapi import APIRouter, Query

from money_manager.api.v1.endpoints.collection import ItemServiceDep
from money_manager.config import get_settings
from money_manager.core.dependencies import PrivilegedUser, Today
from money_manager.schemas.item import CatalogItemResponse, ItemResponse
from money_manager.schemas.user import UserResponse
from money_manager.services.item_service import item_to_response

router = APIRouter()
settings = get_settings()


@router.get("/items", response_model=list[ItemResponse])
async def list_items(
    svc: ItemServiceDep,
    admin: PrivilegedUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
):
    items = await svc.list_catalog(skip=skip, limit=limit)
    return [item_to_response(item) for item in items]


@router.get("/items/{item_id}", response_model=CatalogItemResponse)
async def get_item(svc: ItemServiceDep, admin: PrivilegedUser, item_id: int):
    """Item with price history and holders. Served from Redis when cached."""
    return await svc.get_catalog_item(item_id)


@router.delete("/items/{item_id}", response_model=UserResponse)
async def delete_item(svc: ItemServiceDep, admin: PrivilegedUser, as_of: Today, item_id: int):
    """Debit every holder, drop all holdings and delete the item. Returns the last holder touched."""
    user = await svc.delete_item(admin.id, item_id, as_of)
    return UserResponse.model_validate(user)
