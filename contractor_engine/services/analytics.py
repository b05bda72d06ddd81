"""
Read-side queries over the learning store.

Everything here is computed at read time from stored rows; nothing is cached
or written back.

- query_patterns(): service patterns updated in a trailing window
- query_insights(): insights created in a trailing window
- get_pattern(): one pattern by (event_type, services)
- summarize_outcomes(): per-window reduction over raw outcome reports

Summary figures:
    event_count               raw reports in the window
    average_rating            mean overall_rating
    average_success_rate      fraction of reports rated >= 4
    budget_variance_by_event_type
                              mean and median budget_variance per event type
    pattern_confidence_rate   high-confidence patterns / all patterns, in %
    learning_velocity         reports per day of window
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pandas as pd

from contractor_engine.core.config import Settings, get_settings
from contractor_engine.core.database import execute_query, execute_query_one
from contractor_engine.core.exceptions import InvalidInput, NotFound, UpstreamUnavailable
from contractor_engine.models.schemas import (
    BudgetVarianceStats,
    LearningInsight,
    LearningSummary,
    ServicePattern,
)
from contractor_engine.services.catalog import STORE_ERRORS
from contractor_engine.services.learning import canonical_combination
from contractor_engine.services.statistics import SUCCESS_RATING_THRESHOLD
from contractor_engine.sql.learning_queries import (
    get_insights_window_query,
    get_outcome_reports_window_query,
    get_pattern_confidence_counts_query,
    get_pattern_lookup_query,
    get_patterns_window_query,
)


# Patterns above this confidence_level count as high-confidence
HIGH_CONFIDENCE_THRESHOLD: float = 0.8

logger = logging.getLogger(__name__)


def _resolve_window(since_days: Optional[int], settings: Optional[Settings]) -> int:
    settings = settings or get_settings()
    if since_days is None:
        return settings.default_window_days
    if since_days < 1:
        raise InvalidInput("since_days must be at least 1")
    if since_days > settings.max_window_days:
        raise InvalidInput(f"since_days must be at most {settings.max_window_days}")
    return since_days


def _window_start(since_days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=since_days)


# =============================================================================
# Patterns and Insights
# =============================================================================


async def query_patterns(
    event_type: Optional[str] = None,
    since_days: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[ServicePattern]:
    """
    Patterns updated within the last since_days days, best success rate first.

    Raises:
        InvalidInput: If since_days is outside [1, max_window_days].
        UpstreamUnavailable: If the store cannot be read.
    """
    window = _resolve_window(since_days, settings)
    since = _window_start(window)

    try:
        rows = await execute_query(get_patterns_window_query(), since, event_type)
    except STORE_ERRORS as e:
        logger.error(f"Failed to read service patterns: {e}", exc_info=True)
        raise UpstreamUnavailable("Service pattern store is unavailable") from e

    return [ServicePattern.from_record(row) for row in rows]


async def query_insights(
    event_type: Optional[str] = None,
    since_days: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[LearningInsight]:
    """
    Insights created within the last since_days days, most confident first.

    Raises:
        InvalidInput: If since_days is outside [1, max_window_days].
        UpstreamUnavailable: If the store cannot be read.
    """
    window = _resolve_window(since_days, settings)
    since = _window_start(window)

    try:
        rows = await execute_query(get_insights_window_query(), since, event_type)
    except STORE_ERRORS as e:
        logger.error(f"Failed to read learning insights: {e}", exc_info=True)
        raise UpstreamUnavailable("Learning insight store is unavailable") from e

    return [LearningInsight.from_record(row) for row in rows]


async def get_pattern(event_type: str, services: Sequence[str]) -> ServicePattern:
    """
    Look up the pattern for one event type and service set.

    The service order does not matter; the key is canonicalized the same way
    the learning engine canonicalizes it.

    Raises:
        InvalidInput: If no services were given.
        NotFound: If no report has been recorded for this key yet.
        UpstreamUnavailable: If the store cannot be read.
    """
    cleaned = [s.strip() for s in services if s and s.strip()]
    if not cleaned:
        raise InvalidInput("At least one service is required")

    combination = canonical_combination(cleaned)
    try:
        row = await execute_query_one(get_pattern_lookup_query(), event_type, combination)
    except STORE_ERRORS as e:
        logger.error(f"Failed to read service pattern: {e}", exc_info=True)
        raise UpstreamUnavailable("Service pattern store is unavailable") from e

    if row is None:
        raise NotFound(f"No service pattern for {event_type!r} with services {combination!r}")

    return ServicePattern.from_record(row)


# =============================================================================
# Summary
# =============================================================================


def build_outcome_frame(rows: Sequence) -> pd.DataFrame:
    """Flatten outcome report rows into a DataFrame with fixed columns."""
    columns = ['event_type', 'overall_rating', 'budget_variance']
    if not rows:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([dict(row) for row in rows])
    return df[columns]


def budget_variance_by_event_type(df: pd.DataFrame) -> List[BudgetVarianceStats]:
    """Mean and median budget_variance per event type, sorted by event type."""
    if df.empty:
        return []

    grouped = (
        df.dropna(subset=['budget_variance'])
        .groupby('event_type')['budget_variance']
        .agg(['count', 'mean', 'median'])
        .sort_index()
    )

    return [
        BudgetVarianceStats(
            event_type=str(event_type),
            event_count=int(stats['count']),
            mean_budget_variance=round(float(stats['mean']), 2),
            median_budget_variance=round(float(stats['median']), 2),
        )
        for event_type, stats in grouped.iterrows()
    ]


def reduce_outcomes(
    df: pd.DataFrame,
    window_days: int,
    event_type: Optional[str],
    total_patterns: int,
    high_confidence_patterns: int,
) -> LearningSummary:
    """
    Pure reduction of outcome rows and pattern counts into a LearningSummary.

    An empty window yields zeros rather than NaN.
    """
    event_count = int(len(df))

    if event_count:
        ratings = pd.to_numeric(df['overall_rating'], errors='coerce').dropna()
        average_rating = round(float(ratings.mean()), 2) if not ratings.empty else 0.0
        average_success_rate = (
            round(float((ratings >= SUCCESS_RATING_THRESHOLD).mean()), 4) if not ratings.empty else 0.0
        )
    else:
        average_rating = 0.0
        average_success_rate = 0.0

    confidence_rate = (
        round(high_confidence_patterns / total_patterns * 100, 2) if total_patterns else 0.0
    )

    return LearningSummary(
        window_days=window_days,
        event_type=event_type,
        event_count=event_count,
        average_rating=average_rating,
        average_success_rate=average_success_rate,
        budget_variance_by_event_type=budget_variance_by_event_type(df),
        total_patterns=total_patterns,
        high_confidence_patterns=high_confidence_patterns,
        pattern_confidence_rate=confidence_rate,
        learning_velocity=round(event_count / window_days, 4),
        generated_at=datetime.now(timezone.utc),
    )


async def summarize_outcomes(
    event_type: Optional[str] = None,
    since_days: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> LearningSummary:
    """
    Summarize learning activity over a trailing window.

    Args:
        event_type: Restrict to one event type, or None for all.
        since_days: Window length in days (>= 1); defaults to
            Settings.default_window_days.
        settings: Optional settings override.

    Returns:
        LearningSummary for the window.

    Raises:
        InvalidInput: If since_days is outside [1, max_window_days].
        UpstreamUnavailable: If the store cannot be read.
    """
    window = _resolve_window(since_days, settings)
    since = _window_start(window)

    try:
        rows = await execute_query(get_outcome_reports_window_query(), since, event_type)
        counts = await execute_query_one(
            get_pattern_confidence_counts_query(), since, event_type, HIGH_CONFIDENCE_THRESHOLD
        )
    except STORE_ERRORS as e:
        logger.error(f"Failed to summarize outcomes: {e}", exc_info=True)
        raise UpstreamUnavailable("Learning store is unavailable") from e

    total_patterns = int(counts['total_patterns']) if counts else 0
    high_confidence = int(counts['high_confidence_patterns']) if counts else 0

    summary = reduce_outcomes(
        build_outcome_frame(rows),
        window_days=window,
        event_type=event_type,
        total_patterns=total_patterns,
        high_confidence_patterns=high_confidence,
    )
    logger.info(
        f"Summarized {summary.event_count} outcome reports over {window} days "
        f"(event_type={event_type or 'all'})"
    )
    return summary
