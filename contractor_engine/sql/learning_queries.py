"""
Parameterized SQL queries for the learning aggregate store.

Tables (DDL in schema.sql):
    service_patterns       - one row per (event_type, service_combination)
    learning_insights      - append-only insight log
    event_outcome_reports  - raw outcome reports, stored before learning runs

Pattern updates are a read-modify-write. get_pattern_for_update_query() takes a
row lock inside the caller's transaction, and get_insert_pattern_query() uses
ON CONFLICT DO NOTHING so two first reports for the same key cannot both
create the row; the loser sees no RETURNING row and falls back to the locked
update path.
"""


# =============================================================================
# Service Patterns
# =============================================================================


def get_pattern_for_update_query() -> str:
    """
    Select one pattern row and lock it until the transaction ends.

    Parameters:
        $1: event_type
        $2: service_combination
    """
    return """
    SELECT *
    FROM service_patterns
    WHERE event_type = $1
      AND service_combination = $2
    FOR UPDATE
    """


def get_insert_pattern_query() -> str:
    """
    Insert a brand-new pattern, or nothing if another writer got there first.

    Parameters:
        $1: event_type
        $2: service_combination
        $3: success_rate
        $4: average_rating
        $5: sample_size
        $6: confidence_level
    """
    return """
    INSERT INTO service_patterns (
        event_type,
        service_combination,
        success_rate,
        average_rating,
        sample_size,
        confidence_level,
        created_at,
        updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6, NOW(), NOW())
    ON CONFLICT (event_type, service_combination) DO NOTHING
    RETURNING *
    """


def get_update_pattern_query() -> str:
    """
    Overwrite the statistics of a locked pattern row.

    Parameters:
        $1: event_type
        $2: service_combination
        $3: success_rate
        $4: average_rating
        $5: sample_size
        $6: confidence_level
    """
    return """
    UPDATE service_patterns SET
        success_rate = $3,
        average_rating = $4,
        sample_size = $5,
        confidence_level = $6,
        updated_at = NOW()
    WHERE event_type = $1
      AND service_combination = $2
    RETURNING *
    """


def get_pattern_lookup_query() -> str:
    """
    Fetch a single pattern by key without locking.

    Parameters:
        $1: event_type
        $2: service_combination
    """
    return """
    SELECT *
    FROM service_patterns
    WHERE event_type = $1
      AND service_combination = $2
    """


def get_patterns_window_query() -> str:
    """
    Patterns updated inside a trailing window, best success rate first.

    Parameters:
        $1: window start (timestamptz)
        $2: event_type or NULL for all event types
    """
    return """
    SELECT *
    FROM service_patterns
    WHERE updated_at >= $1
      AND ($2::text IS NULL OR event_type = $2)
    ORDER BY success_rate DESC, sample_size DESC, updated_at DESC
    """


def get_pattern_confidence_counts_query() -> str:
    """
    Count patterns in a window and how many cross the confidence bar.

    Parameters:
        $1: window start (timestamptz)
        $2: event_type or NULL
        $3: confidence threshold (strictly greater than)
    """
    return """
    SELECT
        COUNT(*) AS total_patterns,
        COUNT(*) FILTER (WHERE confidence_level > $3) AS high_confidence_patterns
    FROM service_patterns
    WHERE updated_at >= $1
      AND ($2::text IS NULL OR event_type = $2)
    """


# =============================================================================
# Learning Insights
# =============================================================================


def get_insert_insight_query() -> str:
    """
    Append one insight.

    Parameters:
        $1: event_type
        $2: insight_type
        $3: title
        $4: description
        $5: insight_data (JSON text)
        $6: confidence
    """
    return """
    INSERT INTO learning_insights (
        event_type,
        insight_type,
        title,
        description,
        insight_data,
        confidence,
        created_at
    ) VALUES ($1, $2, $3, $4, $5::jsonb, $6, NOW())
    RETURNING *
    """


def get_insights_window_query() -> str:
    """
    Insights created inside a trailing window, most confident first.

    Parameters:
        $1: window start (timestamptz)
        $2: event_type or NULL
    """
    return """
    SELECT *
    FROM learning_insights
    WHERE created_at >= $1
      AND ($2::text IS NULL OR event_type = $2)
    ORDER BY confidence DESC, created_at DESC
    """


# =============================================================================
# Raw Outcome Reports
# =============================================================================


def get_insert_outcome_report_query() -> str:
    """
    Store a raw outcome report.

    Parameters:
        $1: event_id
        $2: event_type
        $3: attendee_count
        $4: budget
        $5: services_used (text[])
        $6: success_metrics (JSON text)
        $7: feedback
    """
    return """
    INSERT INTO event_outcome_reports (
        event_id,
        event_type,
        attendee_count,
        budget,
        services_used,
        success_metrics,
        feedback,
        created_at
    ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, NOW())
    RETURNING id, created_at
    """


def get_outcome_reports_window_query() -> str:
    """
    Raw reports inside a trailing window, flattened for the summary reduction.

    Parameters:
        $1: window start (timestamptz)
        $2: event_type or NULL
    """
    return """
    SELECT
        event_type,
        (success_metrics->>'overall_rating')::float AS overall_rating,
        (success_metrics->>'budget_variance')::float AS budget_variance,
        created_at
    FROM event_outcome_reports
    WHERE created_at >= $1
      AND ($2::text IS NULL OR event_type = $2)
    ORDER BY created_at ASC
    """
