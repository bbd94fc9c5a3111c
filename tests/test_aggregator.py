"""Tests for repeated runs and histograms."""

import pytest

from dicepool.aggregator import Histogram, histogram, run
from dicepool.errors import NonTerminatingExplosion
from dicepool.expression import Explode, Number, Pool
from dicepool.parser import parse_strict
from dicepool.random_source import SystemRandomSource


class TestRun:
    def test_each_run_draws_fresh_faces(self, faces) -> None:
        values = run(Pool(2, 6), faces(1, 2, 3, 4, 5, 6), 3)
        assert [v.total for v in values] == [3, 7, 11]

    def test_count_must_be_positive(self, faces) -> None:
        with pytest.raises(ValueError):
            run(Pool(2, 6), faces(), 0)

    def test_errors_propagate(self, faces) -> None:
        with pytest.raises(NonTerminatingExplosion):
            run(Pool(2, 1, Explode(repeat=True)), faces(), 5)


class TestHistogram:
    def test_counts_and_at_least(self, faces) -> None:
        tally = histogram(Pool(1, 4), faces(1, 2, 2, 4), 4)
        assert tally.counts == {1: 1, 2: 2, 4: 1}
        assert tally.samples == 4
        assert (tally.minimum, tally.maximum, tally.max_count) == (1, 4, 2)
        assert tally.at_least() == {1: 1.0, 2: 0.75, 4: 0.25}

    def test_counts_sorted_ascending(self, faces) -> None:
        tally = histogram(Pool(1, 6), faces(6, 1, 4, 1), 4)
        assert list(tally.counts) == [1, 4, 6]

    def test_constant(self) -> None:
        tally = histogram(Number(5), SystemRandomSource(1), 100)
        assert tally.counts == {5: 100}
        assert tally.at_least() == {5: 1.0}

    def test_tallies_success_levels(self, faces) -> None:
        tally = histogram(parse_strict("1d6{4}"), faces(1, 4, 6, 5), 4)
        assert tally.counts == {0: 1, 1: 1, 2: 1, 3: 1}

    def test_many_samples(self) -> None:
        tally = histogram(Pool(2, 6), SystemRandomSource(7), 2000)
        assert sum(tally.counts.values()) == 2000
        assert 2 <= tally.minimum <= tally.maximum <= 12
        assert tally.at_least()[tally.minimum] == 1.0

    def test_sample_count_must_be_positive(self, faces) -> None:
        with pytest.raises(ValueError):
            histogram(Pool(1, 6), faces(), 0)

    def test_histogram_is_plain_data(self) -> None:
        tally = Histogram(counts={3: 2, 5: 2}, samples=4)
        assert tally.at_least() == {3: 1.0, 5: 0.5}

    def test_fill_gaps_covers_unrolled_scores(self) -> None:
        tally = Histogram(counts={3: 2, 5: 2}, samples=4)
        assert tally.at_least(fill_gaps=True) == {3: 1.0, 4: 0.5, 5: 0.5}

    def test_rows_follow_samples_not_spread(self, faces) -> None:
        tally = histogram(Pool(1, 1000), faces(2, 999), 2)
        assert tally.at_least() == {2: 1.0, 999: 0.5}
