"""
Parameterized SQL queries for the provider catalog.

The catalog is owned by the surrounding platform and is read-only here. The
eligibility predicates live in SQL so the matching engine only ever sees
providers that could be booked:

    - business profile is published
    - owning account has the contractor role and is verified
    - account is not suspended
    - service_categories is non-null and non-empty

Profiles and offerings are fetched by two independent queries so the matching
engine can issue them concurrently.
"""


def get_eligible_providers_query() -> str:
    """
    Generate SQL returning every eligible provider profile.

    Rows are ordered by profile creation time, then id. The matching engine's
    tie-break preserves this order, so it must stay deterministic.

    Returns:
        str: PostgreSQL query with no parameters.
    """
    query = """
    SELECT
        u.id::text AS provider_id,
        COALESCE(bp.company_name, '') AS display_name,
        bp.service_categories AS categories,
        COALESCE(bp.average_rating, 0)::float AS average_rating,
        COALESCE(bp.review_count, 0) AS review_count,
        COALESCE(bp.is_verified, FALSE) AS is_verified,
        bp.subscription_tier::text AS subscription_tier
    FROM business_profiles bp
    JOIN users u ON u.id = bp.user_id
    WHERE u.role = 'contractor'
      AND u.is_verified = TRUE
      AND COALESCE(u.is_suspended, FALSE) = FALSE
      AND COALESCE(bp.is_published, FALSE) = TRUE
      AND bp.service_categories IS NOT NULL
      AND cardinality(bp.service_categories) > 0
    ORDER BY bp.created_at ASC, u.id ASC
    """

    return query


def get_provider_offerings_query() -> str:
    """
    Generate SQL returning the priced offerings of every eligible provider.

    Uses the same eligibility predicates as get_eligible_providers_query() so
    the two result sets line up without a second round trip.

    Returns:
        str: PostgreSQL query with no parameters.
    """
    query = """
    SELECT
        s.user_id::text AS provider_id,
        s.service_type,
        s.price_range_min::float AS price_min,
        s.price_range_max::float AS price_max
    FROM services s
    JOIN business_profiles bp ON bp.user_id = s.user_id
    JOIN users u ON u.id = s.user_id
    WHERE u.role = 'contractor'
      AND u.is_verified = TRUE
      AND COALESCE(u.is_suspended, FALSE) = FALSE
      AND COALESCE(bp.is_published, FALSE) = TRUE
      AND bp.service_categories IS NOT NULL
      AND cardinality(bp.service_categories) > 0
    ORDER BY s.user_id, s.created_at
    """

    return query
