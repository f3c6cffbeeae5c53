"""Portfolio statistics schemas."""

from pydantic import BaseModel

from money_manager.schemas.item import ItemResponse


class ValuationPoint(BaseModel):
    day: str  # DD/MM/YYYY
    amount_cents: int


class StatisticsResponse(BaseModel):
    item_count: int
    last_known_valuation: ValuationPoint
    top_items: list[ItemResponse]
