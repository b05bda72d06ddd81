"""
SQL Query Module for the Contractor Engine.

Provides parameterized SQL queries for:
- Provider catalog reads (catalog_queries)
- Service pattern upserts, insight appends and window reads (learning_queries)

Follows the Repository Pattern: services hold the business logic and only
reference query text through these functions. Engine-owned table DDL lives in
schema.sql next to this module.

Example usage:
    from contractor_engine.sql import (
        get_eligible_providers_query,
        get_pattern_for_update_query,
    )

    rows = await conn.fetch(get_eligible_providers_query())
"""

# =============================================================================
# CATALOG QUERIES - Read-only provider catalog
# =============================================================================

from contractor_engine.sql.catalog_queries import (
    get_eligible_providers_query,
    get_provider_offerings_query,
)

# =============================================================================
# LEARNING QUERIES - Aggregate store, insight log, raw reports
# =============================================================================

from contractor_engine.sql.learning_queries import (
    get_pattern_for_update_query,
    get_insert_pattern_query,
    get_update_pattern_query,
    get_pattern_lookup_query,
    get_patterns_window_query,
    get_pattern_confidence_counts_query,
    get_insert_insight_query,
    get_insights_window_query,
    get_insert_outcome_report_query,
    get_outcome_reports_window_query,
)

__all__ = [
    # Catalog queries
    'get_eligible_providers_query',
    'get_provider_offerings_query',
    # Learning queries
    'get_pattern_for_update_query',
    'get_insert_pattern_query',
    'get_update_pattern_query',
    'get_pattern_lookup_query',
    'get_patterns_window_query',
    'get_pattern_confidence_counts_query',
    'get_insert_insight_query',
    'get_insights_window_query',
    'get_insert_outcome_report_query',
    'get_outcome_reports_window_query',
]
