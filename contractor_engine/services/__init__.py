"""
Contractor Engine Services Module

Business logic for the contractor matching and adaptive learning engines.
Services hold no state between calls apart from the learning engine's
per-key write locks, and are consumed by the API layer
(contractor_engine/api/).

Services:
- catalog: Eligible provider profiles and offerings (read-only)
- matching: Provider scoring, price estimation and ranking
- statistics: Running-mean pattern statistics
- learning: Outcome intake, service pattern upserts and insight emission
- analytics: Windowed reads and the learning summary
"""

# =============================================================================
# Catalog Service Exports
# =============================================================================

from contractor_engine.services.catalog import (
    STORE_ERRORS,
    build_provider_profiles,
    fetch_eligible_providers,
)

# =============================================================================
# Matching Service Exports
# =============================================================================

from contractor_engine.services.matching import (
    calculate_match_score,
    estimate_price_range,
    find_matches,
    match_providers,
    normalize_categories,
    rank_matches,
    rank_providers,
)

# =============================================================================
# Statistics Exports
# =============================================================================

from contractor_engine.services.statistics import (
    PatternStats,
    seed_pattern_stats,
    update_pattern_stats,
)

# =============================================================================
# Learning Service Exports
# =============================================================================

from contractor_engine.services.learning import (
    KeyedLock,
    canonical_combination,
    derive_insights,
    record_outcome,
    store_insight,
    store_outcome_report,
    upsert_service_pattern,
)

# =============================================================================
# Analytics Service Exports
# =============================================================================

from contractor_engine.services.analytics import (
    get_pattern,
    query_insights,
    query_patterns,
    reduce_outcomes,
    summarize_outcomes,
)

__all__ = [
    # Catalog
    'STORE_ERRORS',
    'build_provider_profiles',
    'fetch_eligible_providers',
    # Matching
    'calculate_match_score',
    'estimate_price_range',
    'find_matches',
    'match_providers',
    'normalize_categories',
    'rank_matches',
    'rank_providers',
    # Statistics
    'PatternStats',
    'seed_pattern_stats',
    'update_pattern_stats',
    # Learning
    'KeyedLock',
    'canonical_combination',
    'derive_insights',
    'record_outcome',
    'store_insight',
    'store_outcome_report',
    'upsert_service_pattern',
    # Analytics
    'get_pattern',
    'query_insights',
    'query_patterns',
    'reduce_outcomes',
    'summarize_outcomes',
]
