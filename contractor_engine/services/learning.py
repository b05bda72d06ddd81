"""
Adaptive Learning Engine.

Applies post-event outcome reports to per-(event_type, service_combination)
service patterns and emits derived insights for strongly positive events.

Key Features:
- Canonical pattern key: event type plus the sorted, comma-joined services
- Running-mean pattern update (see services/statistics.py)
- Conditional, non-exclusive insight emission with static confidences
- Best-effort writes: store failures are retried, logged and dropped, never
  raised to the caller

Concurrency:
Two reports for the same key must not both read the old row and write back.
Writers are serialized twice over:
- in-process, by a keyed asyncio lock (one holder per pattern key)
- in the database, by SELECT ... FOR UPDATE inside a transaction, with
  INSERT ... ON CONFLICT DO NOTHING covering the first-report race
Insight inserts are pure appends and run concurrently with the pattern update.

Insight Rules:
- overall_rating >= 4.5 and more than 3 services  -> service_combination, 0.8
- overall_rating >= 4.5 and |budget_variance| < 5  -> budget_optimization, 0.7
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence, Tuple

import asyncpg
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from contractor_engine.core.config import Settings, get_settings
from contractor_engine.core.database import get_db_pool
from contractor_engine.core.exceptions import UpstreamUnavailable
from contractor_engine.models.enums import InsightType
from contractor_engine.models.schemas import (
    BudgetOptimizationPayload,
    LearningInsight,
    OutcomeReport,
    RecordOutcomeResult,
    ServiceCombinationPayload,
    ServicePattern,
)
from contractor_engine.services.catalog import STORE_ERRORS
from contractor_engine.services.statistics import (
    PatternStats,
    seed_pattern_stats,
    update_pattern_stats,
)
from contractor_engine.sql.learning_queries import (
    get_insert_insight_query,
    get_insert_outcome_report_query,
    get_insert_pattern_query,
    get_pattern_for_update_query,
    get_update_pattern_query,
)


# =============================================================================
# Insight Rule Constants
# =============================================================================

# Both insight rules require at least this overall rating
INSIGHT_RATING_THRESHOLD: float = 4.5

# service_combination fires when strictly more services than this were used
COMBINATION_MIN_SERVICES_EXCLUSIVE: int = 3

# budget_optimization fires when |budget_variance| is strictly below this
BUDGET_VARIANCE_TOLERANCE_PCT: float = 5.0

SERVICE_COMBINATION_CONFIDENCE: float = 0.8
BUDGET_OPTIMIZATION_CONFIDENCE: float = 0.7

PatternKey = Tuple[str, str]

logger = logging.getLogger(__name__)


# =============================================================================
# Per-key Serialization
# =============================================================================


class KeyedLock:
    """
    One asyncio.Lock per key, created on demand and discarded once idle.

    Usage:
        async with locks.hold(("wedding", "catering,venue")):
            ...
    """

    def __init__(self) -> None:
        self._locks: Dict[PatternKey, asyncio.Lock] = {}
        self._holders: Dict[PatternKey, int] = {}

    @asynccontextmanager
    async def hold(self, key: PatternKey) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


_pattern_locks = KeyedLock()


# =============================================================================
# Key Canonicalization
# =============================================================================


def canonical_combination(services_used: Sequence[str]) -> str:
    """Sorted, comma-joined service identifiers."""
    return ",".join(sorted(services_used))


def pattern_key(report: OutcomeReport) -> PatternKey:
    return report.event_type, canonical_combination(report.services_used)


# =============================================================================
# Insight Derivation (pure)
# =============================================================================


def derive_insights(report: OutcomeReport) -> List[LearningInsight]:
    """
    Evaluate both insight rules against one report.

    The rules are independent, so a report yields zero, one or two insights.
    Returned insights are not yet persisted (no id or created_at).
    """
    metrics = report.success_metrics
    rating = metrics.overall_rating
    variance = metrics.budget_variance
    services = list(report.services_used)
    insights: List[LearningInsight] = []

    if rating < INSIGHT_RATING_THRESHOLD:
        return insights

    if len(services) > COMBINATION_MIN_SERVICES_EXCLUSIVE:
        insights.append(
            LearningInsight(
                event_type=report.event_type,
                insight_type=InsightType.SERVICE_COMBINATION,
                title=f"Successful service combination for {report.event_type} events",
                description=(
                    f"A {report.event_type} event using {', '.join(services)} "
                    f"achieved an overall rating of {rating:g}/5"
                ),
                data=ServiceCombinationPayload(
                    services=services,
                    overall_rating=rating,
                    budget_variance=variance,
                ),
                confidence=SERVICE_COMBINATION_CONFIDENCE,
            )
        )

    if abs(variance) < BUDGET_VARIANCE_TOLERANCE_PCT:
        insights.append(
            LearningInsight(
                event_type=report.event_type,
                insight_type=InsightType.BUDGET_OPTIMIZATION,
                title=f"On-budget planning for {report.event_type} events",
                description=(
                    f"A {report.event_type} event finished within {abs(variance):g}% of its "
                    f"planned budget with an overall rating of {rating:g}/5"
                ),
                data=BudgetOptimizationPayload(
                    budget_variance=variance,
                    services=services,
                ),
                confidence=BUDGET_OPTIMIZATION_CONFIDENCE,
            )
        )

    return insights


# =============================================================================
# Pattern Upsert
# =============================================================================


def _stats_from_row(row) -> PatternStats:
    return PatternStats(
        success_rate=float(row['success_rate']),
        average_rating=float(row['average_rating']),
        sample_size=int(row['sample_size']),
        confidence_level=float(row['confidence_level']),
    )


async def _apply_rating(
    conn: asyncpg.Connection,
    event_type: str,
    combination: str,
    overall_rating: float,
) -> ServicePattern:
    """Read-modify-write one pattern inside a transaction on conn."""
    async with conn.transaction():
        row = await conn.fetchrow(get_pattern_for_update_query(), event_type, combination)

        if row is None:
            seed = seed_pattern_stats(overall_rating)
            row = await conn.fetchrow(
                get_insert_pattern_query(),
                event_type,
                combination,
                seed.success_rate,
                seed.average_rating,
                seed.sample_size,
                seed.confidence_level,
            )
            if row is not None:
                return ServicePattern.from_record(row)
            # Lost the first-insert race; the row exists now, so lock and update it
            row = await conn.fetchrow(get_pattern_for_update_query(), event_type, combination)

        updated = update_pattern_stats(_stats_from_row(row), overall_rating)
        row = await conn.fetchrow(
            get_update_pattern_query(),
            event_type,
            combination,
            updated.success_rate,
            updated.average_rating,
            updated.sample_size,
            updated.confidence_level,
        )
        return ServicePattern.from_record(row)


async def upsert_service_pattern(
    event_type: str,
    services_used: Sequence[str],
    overall_rating: float,
    settings: Optional[Settings] = None,
) -> ServicePattern:
    """
    Apply one rating to the pattern for (event_type, services_used).

    Serialized per key in-process and locked per row in the database. Store
    errors are retried up to pattern_update_max_attempts times with a linear
    backoff.

    Returns:
        The pattern as stored after this update.

    Raises:
        UpstreamUnavailable: If every attempt failed.
    """
    settings = settings or get_settings()
    combination = canonical_combination(services_used)
    key = (event_type, combination)
    attempts = max(1, settings.pattern_update_max_attempts)
    backoff = settings.pattern_update_backoff_seconds

    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=backoff, increment=backoff),
        retry=retry_if_exception_type(STORE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    async with _pattern_locks.hold(key):
        try:
            async for attempt in retrying:
                with attempt:
                    pool = await get_db_pool()
                    async with pool.acquire() as conn:
                        pattern = await _apply_rating(conn, event_type, combination, overall_rating)
        except STORE_ERRORS as e:
            raise UpstreamUnavailable(
                f"Service pattern update for {key} failed after {attempts} attempts"
            ) from e

    return pattern


# =============================================================================
# Insight Persistence
# =============================================================================


async def store_insight(insight: LearningInsight) -> LearningInsight:
    """
    Append one insight to the log.

    Raises:
        UpstreamUnavailable: If the insert fails.
    """
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                get_insert_insight_query(),
                insight.event_type,
                insight.insight_type.value,
                insight.title,
                insight.description,
                json.dumps(insight.data.model_dump()),
                insight.confidence,
            )
    except STORE_ERRORS as e:
        raise UpstreamUnavailable(f"Could not store {insight.insight_type.value} insight") from e

    return LearningInsight.from_record(row)


# =============================================================================
# Raw Report Intake
# =============================================================================


async def store_outcome_report(report: OutcomeReport) -> str:
    """
    Persist the raw outcome report before any learning runs.

    Returns:
        Database id of the stored report.

    Raises:
        UpstreamUnavailable: If the report could not be stored.
    """
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                get_insert_outcome_report_query(),
                report.event_id,
                report.event_type,
                report.attendee_count,
                report.budget,
                list(report.services_used),
                report.success_metrics.model_dump_json(),
                report.feedback,
            )
    except STORE_ERRORS as e:
        logger.error(f"Failed to store outcome report for event {report.event_id}: {e}", exc_info=True)
        raise UpstreamUnavailable("Outcome report store is unavailable") from e

    return str(row['id'])


# =============================================================================
# Outcome Recording (engine boundary)
# =============================================================================


async def _update_pattern_best_effort(report: OutcomeReport, settings: Settings) -> Optional[ServicePattern]:
    try:
        return await upsert_service_pattern(
            report.event_type,
            report.services_used,
            report.success_metrics.overall_rating,
            settings,
        )
    except UpstreamUnavailable as e:
        logger.error(f"Dropping service pattern update for event {report.event_id}: {e.message}")
        return None


async def _store_insight_best_effort(insight: LearningInsight, event_id: str) -> Optional[LearningInsight]:
    try:
        return await store_insight(insight)
    except UpstreamUnavailable as e:
        logger.error(f"Dropping insight for event {event_id}: {e.message}")
        return None


async def record_outcome(report: OutcomeReport, settings: Optional[Settings] = None) -> RecordOutcomeResult:
    """
    Feed one outcome report into the learning engine.

    The pattern update and each insight insert run concurrently and fail
    independently. Store failures are logged and reflected in the result
    (pattern_updated=False, or a missing insight); they are never raised,
    because the raw report has already been accepted upstream.

    Args:
        report: Validated outcome report.
        settings: Optional settings override; defaults to get_settings().

    Returns:
        RecordOutcomeResult with the update flag and the stored insights.
    """
    settings = settings or get_settings()
    candidates = derive_insights(report)

    pattern, *stored = await asyncio.gather(
        _update_pattern_best_effort(report, settings),
        *(_store_insight_best_effort(insight, report.event_id) for insight in candidates),
    )

    emitted = [insight for insight in stored if insight is not None]
    logger.info(
        f"Recorded outcome for event {report.event_id} ({report.event_type}): "
        f"pattern_updated={pattern is not None}, insights={len(emitted)}/{len(candidates)}"
    )

    return RecordOutcomeResult(pattern_updated=pattern is not None, insights_emitted=emitted)
