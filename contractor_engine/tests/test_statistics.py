"""
Pattern Statistics Test Module

Tests for contractor_engine/services/statistics.py: the running means and the
sample-count confidence heuristic shared by the learning engine.
"""

import pytest

from contractor_engine.services.statistics import (
    NEW_PATTERN_CONFIDENCE,
    PatternStats,
    confidence_for_sample_size,
    running_mean,
    seed_pattern_stats,
    success_indicator,
    update_pattern_stats,
)


class TestPrimitives:
    """Tests for the indicator, running mean and confidence helpers."""

    @pytest.mark.parametrize(
        'rating,expected',
        [(5.0, 1), (4.0, 1), (3.99, 0), (1.0, 0)],
    )
    def test_success_indicator_threshold(self, rating, expected):
        assert success_indicator(rating) == expected

    def test_running_mean_from_empty(self):
        assert running_mean(0.0, 0, 3.0) == 3.0

    def test_running_mean_folds_one_value(self):
        # mean of [4, 5] is 4.5; adding 3 gives 4.0
        assert running_mean(4.5, 2, 3.0) == pytest.approx(4.0)

    @pytest.mark.parametrize(
        'sample_size,expected',
        [(1, 0.1), (5, 0.5), (10, 1.0), (25, 1.0)],
    )
    def test_confidence_saturates_at_ten(self, sample_size, expected):
        assert confidence_for_sample_size(sample_size) == pytest.approx(expected)


class TestPatternStats:
    """Tests for seeding and updating pattern statistics."""

    def test_seed_from_first_report(self):
        """A first report rated 5 seeds 1 / 5 / 1 / 0.1."""
        stats = seed_pattern_stats(5.0)

        assert stats == PatternStats(
            success_rate=1.0,
            average_rating=5.0,
            sample_size=1,
            confidence_level=NEW_PATTERN_CONFIDENCE,
        )

    def test_seed_from_unsuccessful_report(self):
        stats = seed_pattern_stats(3.0)

        assert stats.success_rate == 0.0
        assert stats.average_rating == 3.0

    def test_update_is_exact_running_average(self):
        # Arrange
        ratings = [5.0, 3.0, 4.0, 2.0, 4.5]

        # Act
        stats = seed_pattern_stats(ratings[0])
        for rating in ratings[1:]:
            stats = update_pattern_stats(stats, rating)

        # Assert
        assert stats.sample_size == len(ratings)
        assert stats.average_rating == pytest.approx(sum(ratings) / len(ratings))
        # 5.0, 4.0 and 4.5 are successes
        assert stats.success_rate == pytest.approx(3 / 5)
        assert stats.confidence_level == pytest.approx(0.5)

    def test_update_does_not_mutate_input(self):
        current = seed_pattern_stats(4.0)

        update_pattern_stats(current, 1.0)

        assert current.sample_size == 1
        assert current.average_rating == 4.0

    def test_confidence_caps_at_one(self):
        stats = PatternStats(success_rate=0.5, average_rating=4.0, sample_size=12, confidence_level=1.0)

        updated = update_pattern_stats(stats, 4.0)

        assert updated.sample_size == 13
        assert updated.confidence_level == 1.0
