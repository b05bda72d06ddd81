"""
Contractor Matching Engine.

Ranks eligible providers against a set of requested service categories.

Algorithm Overview:
1. Normalize requested categories (strip, lower-case, de-duplicate)
2. Fetch eligible providers from the catalog
3. Drop providers whose categories do not intersect the request
4. Score each survivor:

       score = min(1.0, 0.5
                        + 0.40 * category_overlap
                        + 0.20 * rating / 5
                        + 0.10 * min(review_count / 100, 1)
                        + 0.10 * verified
                        + 0.20 * tier_score)

   rounded to 2 decimals. category_overlap is the fraction of requested
   categories the provider covers.
5. Estimate a price range from the provider's matching offerings, falling
   back to a per-category default table
6. Stable sort by score descending (ties keep catalog order), cap at 10

The base and weights sum past 1.0, so strong providers saturate at 1.00. The
constants are kept as-is because existing consumers rank on these values.

The engine is read-only and keeps no state between calls.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from contractor_engine.core.config import Settings, get_settings
from contractor_engine.core.exceptions import InvalidInput
from contractor_engine.models.enums import SubscriptionTier
from contractor_engine.models.schemas import (
    ContractorMatch,
    MatchingResponse,
    PriceRange,
    ProviderProfile,
    ServiceRequirement,
)
from contractor_engine.services.catalog import fetch_eligible_providers


# =============================================================================
# Scoring Constants
# =============================================================================

BASE_SCORE: float = 0.5
CATEGORY_OVERLAP_WEIGHT: float = 0.40
RATING_WEIGHT: float = 0.20
REVIEW_VOLUME_WEIGHT: float = 0.10
VERIFIED_BONUS: float = 0.10
TIER_WEIGHT: float = 0.20

MAX_RATING: float = 5.0

# Review count at which the review-volume component saturates
REVIEW_SATURATION_COUNT: int = 100

MAX_SCORE: float = 1.0

TIER_SCORES: Dict[str, float] = {
    SubscriptionTier.ENTERPRISE.value: 1.0,
    SubscriptionTier.PROFESSIONAL.value: 0.7,
    SubscriptionTier.ESSENTIAL.value: 0.4,
}
DEFAULT_TIER_SCORE: float = 0.4

DEFAULT_MAX_RESULTS: int = 10


# =============================================================================
# Price Estimation Constants
# =============================================================================

# (min, max) used when a provider has no usable priced offering for a category
DEFAULT_PRICE_RANGES: Dict[str, Tuple[float, float]] = {
    'catering': (2000.0, 5000.0),
    'photography': (1000.0, 3000.0),
    'videography': (1200.0, 3500.0),
    'venue': (3000.0, 10000.0),
    'entertainment': (800.0, 2500.0),
    'music': (800.0, 2500.0),
    'decoration': (500.0, 2000.0),
    'florist': (400.0, 1500.0),
    'transportation': (300.0, 1200.0),
    'planning': (1500.0, 4000.0),
    'audio visual': (600.0, 2000.0),
}
GENERIC_PRICE_RANGE: Tuple[float, float] = (500.0, 2000.0)


logger = logging.getLogger(__name__)


# =============================================================================
# Normalization and Filtering
# =============================================================================


def normalize_categories(requirements: Sequence[ServiceRequirement]) -> List[str]:
    """
    Lower-case and de-duplicate requested categories, keeping first-seen order.

    Raises:
        InvalidInput: If no requirements were given, or none carries a
            non-blank category.
    """
    if not requirements:
        raise InvalidInput("At least one service requirement is required")

    categories: List[str] = []
    seen = set()
    for requirement in requirements:
        category = requirement.category.strip().lower()
        if category and category not in seen:
            seen.add(category)
            categories.append(category)

    if not categories:
        raise InvalidInput("Service requirements must name at least one category")

    return categories


def matched_categories(provider: ProviderProfile, categories_to_match: Sequence[str]) -> List[str]:
    """
    Requested categories the provider declares, in request order.

    An empty list means the provider is not a candidate at all.
    """
    provider_categories = {c.strip().lower() for c in provider.categories}
    return [c for c in categories_to_match if c in provider_categories]


# =============================================================================
# Scoring
# =============================================================================


def tier_score(tier: Optional[str]) -> float:
    if tier is None:
        return DEFAULT_TIER_SCORE
    return TIER_SCORES.get(tier.strip().lower(), DEFAULT_TIER_SCORE)


def calculate_match_score(
    provider: ProviderProfile,
    matched: Sequence[str],
    categories_to_match: Sequence[str],
) -> float:
    """
    Weighted composite match score in [0, 1], rounded to 2 decimals.

    Args:
        provider: Candidate provider.
        matched: Requested categories the provider covers (non-empty).
        categories_to_match: All normalized requested categories.

    Returns:
        The match score.
    """
    overlap = len(matched) / len(categories_to_match)
    normalized_rating = provider.average_rating / MAX_RATING
    review_volume = min(provider.review_count / REVIEW_SATURATION_COUNT, 1.0)
    verified = VERIFIED_BONUS if provider.is_verified else 0.0

    score = (
        BASE_SCORE
        + CATEGORY_OVERLAP_WEIGHT * overlap
        + RATING_WEIGHT * normalized_rating
        + REVIEW_VOLUME_WEIGHT * review_volume
        + verified
        + TIER_WEIGHT * tier_score(provider.subscription_tier)
    )

    return round(min(MAX_SCORE, score), 2)


# =============================================================================
# Price Estimation
# =============================================================================


def default_price_range(category: str) -> PriceRange:
    low, high = DEFAULT_PRICE_RANGES.get(category, GENERIC_PRICE_RANGE)
    return PriceRange(min=low, max=high)


def estimate_price_range(provider: ProviderProfile, matched: Sequence[str]) -> PriceRange:
    """
    Estimate a price range from offerings relevant to the matched categories.

    An offering is relevant when its service_type contains any matched
    category as a case-insensitive substring. The range spans the lowest
    price_min and the highest price_max across relevant offerings. When no
    offering is relevant, or relevant offerings carry no bounds, the default
    table for the first matched category is used.
    """
    relevant = [
        offering for offering in provider.offerings
        if any(category in offering.service_type.lower() for category in matched)
    ]

    minimums = [o.price_min for o in relevant if o.price_min is not None]
    maximums = [o.price_max for o in relevant if o.price_max is not None]

    if not minimums and not maximums:
        return default_price_range(matched[0])

    # One-sided data: reuse the known bound for the missing side
    low = min(minimums) if minimums else min(maximums)
    high = max(maximums) if maximums else max(minimums)
    return PriceRange(min=low, max=max(low, high))


# =============================================================================
# Ranking
# =============================================================================


def score_providers(
    providers: Sequence[ProviderProfile],
    categories_to_match: Sequence[str],
) -> List[ContractorMatch]:
    """
    Build one ContractorMatch per intersecting provider, in catalog order.

    Providers whose categories do not intersect the request are dropped.
    """
    matches: List[ContractorMatch] = []

    for provider in providers:
        matched = matched_categories(provider, categories_to_match)
        if not matched:
            continue

        matches.append(
            ContractorMatch(
                providerId=provider.id,
                providerName=provider.display_name,
                serviceCategory=matched[0],
                matchScore=calculate_match_score(provider, matched, categories_to_match),
                estimatedPrice=estimate_price_range(provider, matched),
                availability=True,
                rating=provider.average_rating,
                reviewCount=provider.review_count,
            )
        )

    return matches


def rank_matches(matches: Sequence[ContractorMatch], limit: int = DEFAULT_MAX_RESULTS) -> List[ContractorMatch]:
    """Stable sort by score descending, then truncate to limit."""
    # sorted() is stable, so equal scores keep catalog order
    ranked = sorted(matches, key=lambda m: m.matchScore, reverse=True)
    return ranked[:limit]


def rank_providers(
    categories: Sequence[str],
    providers: Sequence[ProviderProfile],
    limit: int = DEFAULT_MAX_RESULTS,
) -> MatchingResponse:
    """Score and rank providers against already-normalized categories."""
    scored = score_providers(providers, categories)
    return MatchingResponse(
        matches=rank_matches(scored, limit),
        total=len(scored),
        categories=list(categories),
    )


def match_providers(
    requirements: Sequence[ServiceRequirement],
    providers: Sequence[ProviderProfile],
    limit: int = DEFAULT_MAX_RESULTS,
) -> MatchingResponse:
    """
    Pure matching over an already-fetched provider list.

    Raises:
        InvalidInput: If the requirement list is empty.
    """
    return rank_providers(normalize_categories(requirements), providers, limit)


async def find_matches(
    requirements: Sequence[ServiceRequirement],
    settings: Optional[Settings] = None,
) -> MatchingResponse:
    """
    Match requirements against the live provider catalog.

    Input is validated before the catalog is touched. No eligible providers is
    a successful, empty result.

    Args:
        requirements: Requested services.
        settings: Optional settings override; defaults to get_settings().

    Returns:
        MatchingResponse with at most max_match_results ranked matches.

    Raises:
        InvalidInput: If the requirement list is empty.
        UpstreamUnavailable: If the catalog fetch fails or times out.
    """
    settings = settings or get_settings()
    categories = normalize_categories(requirements)

    providers = await fetch_eligible_providers(settings)
    response = rank_providers(categories, providers, limit=settings.max_match_results)

    logger.info(
        f"Matched {response.total} of {len(providers)} providers for categories {categories}; "
        f"returning {len(response.matches)}"
    )
    return response
