"""
Provider catalog reader.

Loads every eligible provider profile together with its priced offerings. The
two queries are independent and are issued concurrently on separate pool
connections; the combined fetch is bounded by Settings.catalog_timeout_seconds.

Any database failure or a timeout is reported as UpstreamUnavailable so the
matching call fails closed instead of hanging or returning partial data.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import asyncpg

from contractor_engine.core.config import Settings, get_settings
from contractor_engine.core.database import get_db_pool
from contractor_engine.core.exceptions import UpstreamUnavailable
from contractor_engine.models.schemas import ProviderProfile, ServiceOffering
from contractor_engine.sql.catalog_queries import (
    get_eligible_providers_query,
    get_provider_offerings_query,
)

logger = logging.getLogger(__name__)

# Errors that mean "the store could not answer", as opposed to programming errors.
# asyncpg's command_timeout raises asyncio.TimeoutError, which is not an OSError
# before Python 3.11.
STORE_ERRORS: Tuple[type, ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


async def _fetch_rows(query: str) -> List[asyncpg.Record]:
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        return await conn.fetch(query)


async def _load_catalog_rows() -> Tuple[List[Any], List[Any]]:
    profile_rows, offering_rows = await asyncio.gather(
        _fetch_rows(get_eligible_providers_query()),
        _fetch_rows(get_provider_offerings_query()),
    )
    return profile_rows, offering_rows


def build_provider_profiles(
    profile_rows: Iterable[Mapping[str, Any]],
    offering_rows: Iterable[Mapping[str, Any]],
) -> List[ProviderProfile]:
    """
    Assemble ProviderProfile objects from catalog rows.

    Offerings are attached by provider_id. Profile order follows profile_rows.
    Blank category strings are dropped, and a provider left with no categories
    is skipped entirely since it can never be matched.

    Args:
        profile_rows: Rows from get_eligible_providers_query().
        offering_rows: Rows from get_provider_offerings_query().

    Returns:
        List of ProviderProfile in catalog order.
    """
    offerings_by_provider: Dict[str, List[ServiceOffering]] = defaultdict(list)
    for row in offering_rows:
        offerings_by_provider[row['provider_id']].append(
            ServiceOffering(
                service_type=row['service_type'] or '',
                price_min=row['price_min'],
                price_max=row['price_max'],
            )
        )

    providers: List[ProviderProfile] = []
    for row in profile_rows:
        categories = [c.strip() for c in (row['categories'] or []) if c and c.strip()]
        if not categories:
            continue
        provider_id = row['provider_id']
        providers.append(
            ProviderProfile(
                id=provider_id,
                display_name=row['display_name'] or '',
                categories=categories,
                average_rating=float(row['average_rating'] or 0.0),
                review_count=int(row['review_count'] or 0),
                is_verified=bool(row['is_verified']),
                subscription_tier=row['subscription_tier'],
                offerings=offerings_by_provider.get(provider_id, []),
            )
        )

    return providers


async def fetch_eligible_providers(settings: Optional[Settings] = None) -> List[ProviderProfile]:
    """
    Fetch all eligible providers with their offerings.

    Args:
        settings: Optional settings override; defaults to get_settings().

    Returns:
        Eligible providers in catalog order. May be empty.

    Raises:
        UpstreamUnavailable: If the catalog cannot be reached or does not
            answer within catalog_timeout_seconds.
    """
    settings = settings or get_settings()
    timeout = settings.catalog_timeout_seconds

    try:
        profile_rows, offering_rows = await asyncio.wait_for(_load_catalog_rows(), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Provider catalog fetch timed out after {timeout}s")
        raise UpstreamUnavailable(f"Provider catalog did not respond within {timeout}s") from e
    except STORE_ERRORS as e:
        logger.error(f"Provider catalog fetch failed: {e}", exc_info=True)
        raise UpstreamUnavailable("Provider catalog is unavailable") from e

    providers = build_provider_profiles(profile_rows, offering_rows)
    logger.info(f"Loaded {len(providers)} eligible providers from catalog")
    return providers
