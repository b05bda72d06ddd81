"""
Core infrastructure package for the Contractor Engine backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- FastAPI dependency injection utilities
- The domain exception taxonomy

Re-exports key components so other modules can write:

    from contractor_engine.core import get_settings, get_db_pool, SettingsDep
"""

# =============================================================================
# Re-exports from contractor_engine.core.config
# =============================================================================
from contractor_engine.core.config import Settings, get_settings

# =============================================================================
# Re-exports from contractor_engine.core.database
# =============================================================================
from contractor_engine.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from contractor_engine.core.dependencies
# =============================================================================
from contractor_engine.core.dependencies import get_settings_dependency, SettingsDep

# =============================================================================
# Re-exports from contractor_engine.core.exceptions
# =============================================================================
from contractor_engine.core.exceptions import (
    EngineError,
    InvalidInput,
    UpstreamUnavailable,
    NotFound,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
    # Exception taxonomy (from exceptions.py)
    'EngineError',
    'InvalidInput',
    'UpstreamUnavailable',
    'NotFound',
]
