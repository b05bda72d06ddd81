"""
Incremental statistics shared by the learning engine and the read side.

A service pattern carries three running statistics over its outcome reports:

    average_rating    exact running mean of overall_rating, no decay
    success_rate      running mean of the indicator overall_rating >= 4,
                      i.e. the empirical fraction of successful reports
    confidence_level  min(1, sample_size / 10)

confidence_level is a sample-count saturation heuristic. It says how many
reports back a pattern, nothing about the spread of their ratings, and it is
kept that way because stored rows and their consumers already use it.
"""

from dataclasses import dataclass


# =============================================================================
# Module Constants
# =============================================================================

# A report counts as a success at or above this overall rating
SUCCESS_RATING_THRESHOLD: float = 4.0

# confidence_level reaches 1.0 at this many samples
CONFIDENCE_SATURATION_SAMPLES: int = 10

# Fixed low-confidence seed for a pattern created by its first report
NEW_PATTERN_CONFIDENCE: float = 0.1


@dataclass(frozen=True)
class PatternStats:
    """Statistics portion of a ServicePattern row."""
    success_rate: float
    average_rating: float
    sample_size: int
    confidence_level: float


def success_indicator(overall_rating: float) -> int:
    """Return 1 when a rating counts as a successful event, else 0."""
    return 1 if overall_rating >= SUCCESS_RATING_THRESHOLD else 0


def running_mean(previous_mean: float, previous_count: int, value: float) -> float:
    """
    Fold one more value into a mean over previous_count values.

    Args:
        previous_mean: Mean of the first previous_count values.
        previous_count: Number of values already folded in (>= 0).
        value: The new value.

    Returns:
        Mean over previous_count + 1 values.
    """
    return (previous_mean * previous_count + value) / (previous_count + 1)


def confidence_for_sample_size(sample_size: int) -> float:
    """Sample-count confidence heuristic, linear up to saturation."""
    return min(1.0, sample_size / CONFIDENCE_SATURATION_SAMPLES)


def seed_pattern_stats(overall_rating: float) -> PatternStats:
    """
    Statistics for a pattern created by its first outcome report.

    The confidence is the fixed NEW_PATTERN_CONFIDENCE seed, which happens to
    equal confidence_for_sample_size(1) with the current constants.
    """
    return PatternStats(
        success_rate=float(success_indicator(overall_rating)),
        average_rating=float(overall_rating),
        sample_size=1,
        confidence_level=NEW_PATTERN_CONFIDENCE,
    )


def update_pattern_stats(current: PatternStats, overall_rating: float) -> PatternStats:
    """
    Apply one more outcome report to existing pattern statistics.

    Args:
        current: Statistics as stored before this report.
        overall_rating: The report's overall rating (1-5).

    Returns:
        New statistics with sample_size incremented by one.
    """
    n = current.sample_size
    new_size = n + 1
    return PatternStats(
        success_rate=running_mean(current.success_rate, n, success_indicator(overall_rating)),
        average_rating=running_mean(current.average_rating, n, overall_rating),
        sample_size=new_size,
        confidence_level=confidence_for_sample_size(new_size),
    )
