"""
Contractor Engine API package initialization.

FastAPI router modules:
- matching: Contractor matching
- learning: Outcome intake and learning read endpoints
"""

from fastapi import APIRouter

from contractor_engine.api.matching import router as matching_router
from contractor_engine.api.learning import router as learning_router

# Create main API router
api_router = APIRouter()

# Both routers carry their own prefix
api_router.include_router(matching_router)
api_router.include_router(learning_router)

__all__ = [
    "api_router",
    "matching_router",
    "learning_router",
]
