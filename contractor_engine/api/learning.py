"""
FastAPI router for the adaptive learning engine.

Endpoints:
- POST /learning/outcomes: Submit a post-event outcome report
- GET /learning/patterns: Service patterns updated in a trailing window
- GET /learning/patterns/{event_type}: One pattern by event type and services
- GET /learning/insights: Insights created in a trailing window
- GET /learning/summary: Learning summary for a trailing window

POST /learning/outcomes stores the raw report first. Only a failure to store
it is reported (503); once stored, the report is accepted and pattern/insight
failures are logged and reflected in the response flags instead.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from contractor_engine.core.dependencies import SettingsDep
from contractor_engine.core.exceptions import InvalidInput, NotFound, UpstreamUnavailable
from contractor_engine.models.schemas import (
    LearningInsight,
    LearningSummary,
    OutcomeAcceptedResponse,
    OutcomeReport,
    ServicePattern,
)
from contractor_engine.services.analytics import (
    get_pattern,
    query_insights,
    query_patterns,
    summarize_outcomes,
)
from contractor_engine.services.learning import record_outcome, store_outcome_report


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/learning", tags=["learning"])


# =============================================================================
# POST /learning/outcomes
# =============================================================================


@router.post("/outcomes", response_model=OutcomeAcceptedResponse, status_code=202)
async def submit_outcome(
    report: OutcomeReport,
    settings: SettingsDep,
) -> OutcomeAcceptedResponse:
    """
    Accept an outcome report and feed it to the learning engine.

    Example Request:
        POST /learning/outcomes
        {
            "event_id": "evt_2f9a",
            "event_type": "wedding",
            "attendee_count": 120,
            "budget": 25000,
            "services_used": ["catering", "photography", "venue", "florist"],
            "success_metrics": {
                "overall_rating": 4.8,
                "budget_variance": 2.0,
                "timeline_adherence": 0.95
            }
        }

    Raises:
        HTTPException 503: If the raw report could not be stored.
    """
    try:
        await store_outcome_report(report)
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)

    result = await record_outcome(report, settings)

    return OutcomeAcceptedResponse(
        accepted=True,
        event_id=report.event_id,
        pattern_updated=result.pattern_updated,
        insights_emitted=result.insights_emitted,
    )


# =============================================================================
# GET /learning/patterns
# =============================================================================


@router.get("/patterns", response_model=List[ServicePattern])
async def list_patterns(
    settings: SettingsDep,
    event_type: Optional[str] = Query(default=None, description="Filter by event type"),
    since_days: Optional[int] = Query(default=None, description="Trailing window in days (>= 1)"),
) -> List[ServicePattern]:
    """
    Service patterns updated within the window, best success rate first.

    Raises:
        HTTPException 400: If since_days is outside [1, max_window_days].
        HTTPException 503: If the store is unavailable.
    """
    try:
        return await query_patterns(event_type, since_days, settings)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)


@router.get("/patterns/{event_type}", response_model=ServicePattern)
async def read_pattern(
    event_type: str,
    services: List[str] = Query(..., description="Services used; order does not matter"),
) -> ServicePattern:
    """
    Look up one pattern.

    Example Request:
        GET /learning/patterns/wedding?services=venue&services=catering

    Raises:
        HTTPException 400: If no services were given.
        HTTPException 404: If no pattern exists for the key.
        HTTPException 503: If the store is unavailable.
    """
    try:
        return await get_pattern(event_type, services)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)


# =============================================================================
# GET /learning/insights
# =============================================================================


@router.get("/insights", response_model=List[LearningInsight])
async def list_insights(
    settings: SettingsDep,
    event_type: Optional[str] = Query(default=None, description="Filter by event type"),
    since_days: Optional[int] = Query(default=None, description="Trailing window in days (>= 1)"),
) -> List[LearningInsight]:
    """Insights created within the window, most confident first."""
    try:
        return await query_insights(event_type, since_days, settings)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)


# =============================================================================
# GET /learning/summary
# =============================================================================


@router.get("/summary", response_model=LearningSummary)
async def learning_summary(
    settings: SettingsDep,
    event_type: Optional[str] = Query(default=None, description="Filter by event type"),
    since_days: Optional[int] = Query(default=None, description="Trailing window in days (>= 1)"),
) -> LearningSummary:
    """
    Read-time summary of outcome reports and pattern confidence.

    Raises:
        HTTPException 400: If since_days is outside [1, max_window_days].
        HTTPException 503: If the store is unavailable.
    """
    try:
        return await summarize_outcomes(event_type, since_days, settings)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UpstreamUnavailable as e:
        logger.error(f"GET /learning/summary failed: {e.message}")
        raise HTTPException(status_code=503, detail=e.message)
