"""Tests for the feed container: single active player, shared mute, branch routing."""

import random

import pytest

from plivetv.feed import FeedContainer, InactiveItemError, Observation, VirtualMedia
from plivetv.models import Episode, Series


class Branches:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    def __call__(self, character, episode_label, hook):
        self.calls.append((character.id, episode_label, hook))
        return "opened"


@pytest.fixture
def branches() -> Branches:
    return Branches()


@pytest.fixture
def feed(series: Series, timers, branches) -> FeedContainer:
    def media(ep: Episode) -> VirtualMedia:
        return VirtualMedia(ep.url, duration=120)

    container = FeedContainer(series, media_factory=media, scheduler=timers, on_branch=branches)
    container.start()
    return container


def _playing(feed: FeedContainer) -> list[int]:
    return [i for i, item in enumerate(feed.items) if item.playing]


def _see(feed: FeedContainer, index: int, ratio: float = 0.9) -> int:
    return feed.observe([Observation(index=index, ratio=ratio)])


# ── selection ────────────────────────────────────────────────


class TestSelection:
    def test_start_plays_first_item(self, feed) -> None:
        assert feed.state.active_index == 0
        assert feed.state.started is True
        assert _playing(feed) == [0]

    def test_scroll_switches_player(self, feed) -> None:
        assert _see(feed, 1) == 1
        assert _playing(feed) == [1]
        assert feed.items[0].media.paused is True

    def test_observation_below_threshold_keeps_active(self, feed) -> None:
        assert _see(feed, 2, ratio=0.3) == 0
        assert _playing(feed) == [0]

    def test_new_active_item_rewinds(self, feed) -> None:
        _see(feed, 1)
        feed.items[1].media.advance(30)
        feed.items[1].on_time_update(30, 120)
        _see(feed, 2)
        _see(feed, 1)
        assert feed.items[1].media.current_time == 0
        assert feed.items[1].progress == 0

    def test_same_index_does_not_rewind(self, feed) -> None:
        feed.items[0].media.advance(10)
        _see(feed, 0)
        assert feed.items[0].media.current_time == 10

    def test_tie_break_in_one_batch(self, feed) -> None:
        batch = [Observation(index=2, ratio=0.8), Observation(index=1, ratio=0.8)]
        assert feed.observe(batch) == 1
        assert _playing(feed) == [1]

    def test_at_most_one_playing_for_any_sequence(self, feed) -> None:
        rng = random.Random(7)
        for _ in range(300):
            batch = [
                Observation(index=rng.randrange(3), ratio=rng.random())
                for _ in range(rng.randrange(4))
            ]
            feed.observe(batch)
            if rng.random() < 0.3:
                feed.toggle_play(rng.randrange(3))
            assert len(_playing(feed)) <= 1
            assert set(_playing(feed)) <= {feed.state.active_index}

    def test_autoplay_denied_leaves_item_paused(self, series, timers) -> None:
        feed = FeedContainer(
            series,
            media_factory=lambda ep: VirtualMedia(ep.url, duration=60, autoplay="deny"),
            scheduler=timers,
        )
        feed.start()
        assert _playing(feed) == []
        assert feed.state.active_index == 0
        feed.toggle_play(0)
        assert _playing(feed) == [0]

    def test_stop_pauses_everything(self, feed) -> None:
        feed.toggle_play(0)
        feed.stop()
        assert _playing(feed) == []
        assert feed.state.started is False
        assert feed.items[0].indicator == "none"


# ── gestures ─────────────────────────────────────────────────


class TestGestures:
    def test_toggle_active_item(self, feed) -> None:
        assert feed.toggle_play(0) is True
        assert _playing(feed) == []
        assert feed.items[0].indicator == "pause"

    def test_manual_pause_survives_same_observation(self, feed) -> None:
        feed.toggle_play(0)
        _see(feed, 0)
        assert _playing(feed) == []

    def test_toggle_inactive_item_ignored(self, feed) -> None:
        assert feed.toggle_play(2) is False
        assert _playing(feed) == [0]
        assert feed.items[2].indicator == "none"

    def test_toggle_out_of_range(self, feed) -> None:
        with pytest.raises(IndexError):
            feed.toggle_play(9)

    def test_seek(self, feed) -> None:
        assert feed.seek(0, 50) == 60
        assert feed.items[0].progress == 50

    def test_mute_applies_to_all_items(self, feed) -> None:
        for item in feed.items:
            item.on_time_update(30, 120)
        feed.set_muted(True)
        assert all(item.muted for item in feed.items)
        assert all(item.progress == 25 for item in feed.items)
        assert all(item.loading for item in feed.items)
        assert feed.toggle_mute() is False
        assert not any(item.muted for item in feed.items)


# ── branches ─────────────────────────────────────────────────


class TestEnterStory:
    def test_routes_trigger_of_active_item(self, feed, branches) -> None:
        _see(feed, 1)
        assert feed.enter_story(1, 1) == "opened"
        assert branches.calls == [("arzoo", "Episode 02", "Arzoo hook 2")]

    def test_inactive_item_rejected(self, feed, branches) -> None:
        with pytest.raises(InactiveItemError):
            feed.enter_story(2, 0)
        assert branches.calls == []

    def test_unknown_trigger(self, feed) -> None:
        with pytest.raises(IndexError):
            feed.enter_story(0, 5)

    def test_without_handler_returns_none(self, series, timers) -> None:
        feed = FeedContainer(series, scheduler=timers)
        feed.start()
        assert feed.enter_story(0, 0) is None


def test_snapshot(feed) -> None:
    feed.set_muted(True)
    snap = feed.snapshot()
    assert snap["active_index"] == 0
    assert snap["muted"] is True
    assert [i["active"] for i in snap["items"]] == [True, False, False]
    assert snap["items"][0]["playing"] is True
    assert snap["items"][1]["label"] == "Episode 02"
