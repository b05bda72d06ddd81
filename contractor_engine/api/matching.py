"""
FastAPI router for contractor matching.

Endpoints:
- POST /matching/contractors: Rank eligible providers for a set of requested
  service categories

Error mapping:
- InvalidInput -> 400
- UpstreamUnavailable -> 503
"""

import logging

from fastapi import APIRouter, HTTPException

from contractor_engine.core.dependencies import SettingsDep
from contractor_engine.core.exceptions import InvalidInput, UpstreamUnavailable
from contractor_engine.models.schemas import MatchingRequest, MatchingResponse
from contractor_engine.services.matching import find_matches


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matching", tags=["matching"])


@router.post("/contractors", response_model=MatchingResponse)
async def match_contractors(
    request: MatchingRequest,
    settings: SettingsDep,
) -> MatchingResponse:
    """
    Find and rank contractors for the requested services.

    Example Request:
        POST /matching/contractors
        {
            "requirements": [
                {"category": "photography", "priority": "high"},
                {"category": "catering"}
            ]
        }

    Example Response:
        {
            "matches": [
                {
                    "providerId": "...",
                    "providerName": "Lens & Light Studio",
                    "serviceCategory": "photography",
                    "matchScore": 0.97,
                    "estimatedPrice": {"min": 1800, "max": 4200},
                    "availability": true,
                    "rating": 4.7,
                    "reviewCount": 86
                }
            ],
            "total": 1,
            "categories": ["photography", "catering"]
        }

    Raises:
        HTTPException 400: If no usable requirement was given.
        HTTPException 503: If the provider catalog is unavailable.
    """
    try:
        return await find_matches(request.requirements, settings)
    except InvalidInput as e:
        logger.warning(f"POST /matching/contractors rejected: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except UpstreamUnavailable as e:
        logger.error(f"POST /matching/contractors failed: {e.message}")
        raise HTTPException(status_code=503, detail=e.message)
