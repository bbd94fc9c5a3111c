"""Tests for the random sources."""

import pytest

from dicepool.random_source import FixedRandomSource, SystemRandomSource, get_random_source


class TestFixedRandomSource:
    def test_replays_in_order(self) -> None:
        source = FixedRandomSource([3, 1, 6])
        assert [source.roll(6) for _ in range(3)] == [3, 1, 6]
        assert source.remaining == 0

    def test_exhausted(self) -> None:
        source = FixedRandomSource([2])
        source.roll(6)
        with pytest.raises(LookupError):
            source.roll(6)

    def test_face_must_fit_die(self) -> None:
        with pytest.raises(ValueError):
            FixedRandomSource([7]).roll(6)


class TestSystemRandomSource:
    def test_in_range(self) -> None:
        source = SystemRandomSource()
        assert all(1 <= source.roll(8) <= 8 for _ in range(200))

    def test_same_seed_same_rolls(self) -> None:
        a, b = SystemRandomSource(42), SystemRandomSource(42)
        assert [a.roll(20) for _ in range(20)] == [b.roll(20) for _ in range(20)]

    def test_seed_from_settings(self, monkeypatch) -> None:
        monkeypatch.setattr("dicepool.random_source.settings.seed", 9)
        a, b = get_random_source(), get_random_source()
        assert [a.roll(100) for _ in range(10)] == [b.roll(100) for _ in range(10)]
