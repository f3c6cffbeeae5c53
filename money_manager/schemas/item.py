"""Item request/response schemas - REST API contract and input validation."""

from datetime import datetime

from pydantic import BaseModel, Field

from money_manager.schemas.user import UserResponse


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image: str
    url: str
    price_cents: int = Field(..., ge=1)
    count: int = Field(..., ge=1)


class ItemAttach(BaseModel):
    item_id: int
    count: int = Field(..., ge=1)


class ItemDetach(BaseModel):
    item_id: int


class ItemCountUpdate(BaseModel):
    item_id: int
    # Negative counts are rejected here instead of being sign-stripped later
    count: int = Field(..., ge=0)


class ItemPriceUpdate(BaseModel):
    item_id: int
    price_cents: int = Field(..., ge=1)


class ItemResponse(BaseModel):
    id: int
    name: str
    image: str
    url: str
    last_price_cents: int
    highest_price_cents: int
    status: str | None = None
    user_id: int | None = None
    created_at: datetime | None = None
    # Day key (DD/MM/YYYY) -> price in cents, oldest first
    price_history: dict[str, int] = {}


class HoldingResponse(ItemResponse):
    count: int


class HolderSummary(BaseModel):
    id: int
    email: str


class CatalogItemResponse(ItemResponse):
    holders: list[HolderSummary] = []


class PriceUpdateResponse(BaseModel):
    item: ItemResponse
    revalued_user_ids: list[int]
    failed_user_ids: list[int]


class DetachResponse(BaseModel):
    """Detaching a self-submitted item deletes it and returns the user instead of the item."""

    item_deleted: bool
    item: ItemResponse | None = None
    user: UserResponse | None = None
