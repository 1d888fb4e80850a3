"""Tests for picking the active feed item from viewport observations."""

import pytest
from pydantic import ValidationError

from plivetv.feed.selection import FeedSelectionEngine, Observation


def _batch(*pairs: tuple[int, float]) -> list[Observation]:
    return [Observation(index=i, ratio=r) for i, r in pairs]


@pytest.fixture
def engine() -> FeedSelectionEngine:
    return FeedSelectionEngine(item_count=4)


def test_single_item_above_threshold(engine):
    assert engine.select(_batch((2, 0.9))) == 2


def test_exactly_at_threshold_qualifies(engine):
    assert engine.select(_batch((1, 0.6))) == 1


def test_below_threshold_selects_nothing(engine):
    assert engine.select(_batch((1, 0.59), (2, 0.4))) is None


def test_empty_batch(engine):
    assert engine.select([]) is None


def test_highest_ratio_wins(engine):
    assert engine.select(_batch((1, 0.95), (2, 0.7))) == 1
    assert engine.select(_batch((1, 0.7), (2, 0.95))) == 2


def test_equal_ratio_lowest_index_wins(engine):
    assert engine.select(_batch((3, 0.8), (1, 0.8), (2, 0.8))) == 1


def test_report_order_does_not_matter(engine):
    a = engine.select(_batch((0, 0.65), (3, 0.9), (1, 0.9)))
    b = engine.select(_batch((1, 0.9), (0, 0.65), (3, 0.9)))
    assert a == b == 1


def test_out_of_range_index_ignored(engine):
    assert engine.select(_batch((7, 1.0), (-1, 1.0))) is None
    assert engine.select(_batch((7, 1.0), (0, 0.7))) == 0


def test_custom_threshold():
    engine = FeedSelectionEngine(item_count=2, threshold=0.7)
    assert engine.select(_batch((0, 0.65))) is None
    assert engine.select(_batch((0, 0.7))) == 0


def test_ratio_must_be_a_fraction():
    with pytest.raises(ValidationError):
        Observation(index=0, ratio=1.2)


def test_empty_feed_rejected():
    with pytest.raises(ValueError):
        FeedSelectionEngine(item_count=0)
