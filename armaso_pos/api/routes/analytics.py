"""Sales analytics routes."""

from fastapi import APIRouter, Request

from armaso_pos.core.rate_limit import limiter
from armaso_pos.core.session import CurrentSession
from armaso_pos.db.session import DbSession
from armaso_pos.schemas.analytics import DailyStats, WeeklyStats
from armaso_pos.services import analytics_service

router = APIRouter()


@router.get("/daily", response_model=DailyStats)
@limiter.limit("60/minute")
def get_daily_stats(request: Request, db: DbSession, session: CurrentSession):
    """Today's revenue, order count and top ten items."""
    return analytics_service.get_daily_stats(db)


@router.get("/weekly", response_model=WeeklyStats)
@limiter.limit("60/minute")
def get_weekly_stats(request: Request, db: DbSession, session: CurrentSession):
    """Last seven days bucketed per day, with the top five items."""
    return analytics_service.get_weekly_stats(db)
