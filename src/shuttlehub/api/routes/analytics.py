"""Analytics endpoints: cost roll-ups and participant suggestions."""

from fastapi import APIRouter, Query
from pydantic import BaseModel

from shuttlehub.api.auth import CurrentUser
from shuttlehub.api.dependencies import ServiceDep
from shuttlehub.api.errors import http_error
from shuttlehub.errors import ShuttlehubError
from shuttlehub.services.analytics import AnalyticsSummary, Period, PeriodSummary, SessionCostRow

router = APIRouter(tags=["analytics"])


class AnalyticsResponse(BaseModel):
    """Headline totals, per-period groups and per-session rows."""

    period: Period
    summary: AnalyticsSummary
    periods: list[PeriodSummary]
    sessions: list[SessionCostRow]


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    user: CurrentUser,
    service: ServiceDep,
    period: Period = Query(Period.MONTH, description="day, month or year"),
) -> AnalyticsResponse:
    """Cost analytics across all sessions."""
    try:
        return AnalyticsResponse(
            period=period,
            summary=service.summary(),
            periods=service.period_summaries(period),
            sessions=service.cost_rows(),
        )
    except ShuttlehubError as e:
        raise http_error(e) from e


@router.get("/participants/frequent", response_model=list[str])
def frequent_participants(user: CurrentUser, service: ServiceDep) -> list[str]:
    """Names that have signed up before, for quick joining."""
    try:
        return service.frequent_participants()
    except ShuttlehubError as e:
        raise http_error(e) from e
