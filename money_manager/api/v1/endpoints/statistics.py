"""
Statistics endpoints - portfolio summary and the valuation series.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from money_manager.core.dependencies import CurrentUserId, Today
from money_manager.db.repositories import HoldingRepository, UserRepository
from money_manager.db.session import DbSession
from money_manager.schemas.statistics import StatisticsResponse, ValuationPoint
from money_manager.services.statistics_service import StatisticsService

router = APIRouter()


def get_statistics_service(session: DbSession) -> StatisticsService:
    return StatisticsService(UserRepository(session), HoldingRepository(session))


StatisticsServiceDep = Annotated[StatisticsService, Depends(get_statistics_service)]


@router.get("", response_model=StatisticsResponse)
async def get_statistics(svc: StatisticsServiceDep, user_id: CurrentUserId, as_of: Today):
    """Units held, last known valuation and the three most valuable distinct items."""
    return await svc.get_statistics(user_id, as_of)


@router.get("/valuations", response_model=list[ValuationPoint])
async def valuation_history(svc: StatisticsServiceDep, user_id: CurrentUserId):
    return await svc.valuation_history(user_id)
