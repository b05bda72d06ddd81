"""
FastAPI dependency injection module for the Contractor Engine backend.

Endpoints receive Settings through a dependency rather than calling
get_settings() directly, so tests can swap configuration with
app.dependency_overrides.

Usage:
    @router.get("/summary")
    async def learning_summary(settings: SettingsDep) -> LearningSummary:
        return await summarize_outcomes(settings=settings)
"""

from typing import Annotated

from fastapi import Depends

from contractor_engine.core.config import Settings, get_settings


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can do:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
