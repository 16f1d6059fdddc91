"""Smart advisor endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from shuttlehub.api.auth import CurrentUser
from shuttlehub.api.dependencies import AdvisorDep, ServiceDep
from shuttlehub.api.errors import http_error
from shuttlehub.errors import ShuttlehubError
from shuttlehub.services.advisor import build_advice_summary

router = APIRouter(tags=["advice"])


class AdviceResponse(BaseModel):
    advice: str
    summary: str
    generated: bool  # False when the fallback text was returned


@router.get("/advice", response_model=AdviceResponse)
def get_advice(user: CurrentUser, service: ServiceDep, advisor: AdvisorDep) -> AdviceResponse:
    """Suggestions for the club based on the most recent sessions."""
    try:
        sessions = service.list_sessions()
    except ShuttlehubError as e:
        raise http_error(e) from e

    return AdviceResponse(
        advice=advisor.advise(sessions),
        summary=build_advice_summary(sessions),
        generated=advisor.enabled and bool(sessions),
    )
