"""Feed container — one viewer's scrolling feed.

Owns the ordered feed items (one PlaybackController per episode) and the
state they share: which item is active and whether sound is muted. Every
state change goes through a method here, one dispatched event at a time,
so "pause the old item, start the new one" always completes before the
next observation batch is handled and two items never play at once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from plivetv.feed.media import MediaElement, VirtualMedia
from plivetv.feed.playback import INDICATOR_DELAY, PlaybackController, Scheduler
from plivetv.feed.selection import VISIBILITY_THRESHOLD, FeedSelectionEngine, Observation
from plivetv.models import Character, Episode, Series

logger = logging.getLogger(__name__)

MediaFactory = Callable[[Episode], MediaElement]
BranchHandler = Callable[[Character, str, str], Any]


class InactiveItemError(ValueError):
    """Raised when a branch is picked on an item that is not the active one."""


class FeedState(BaseModel):
    """State shared by every item of one feed session."""

    active_index: int = 0
    muted: bool = False
    started: bool = False


def _virtual_media(episode: Episode) -> MediaElement:
    return VirtualMedia(episode.url)


class FeedContainer:
    def __init__(
        self,
        series: Series,
        media_factory: MediaFactory | None = None,
        scheduler: Scheduler | None = None,
        threshold: float = VISIBILITY_THRESHOLD,
        indicator_delay: float = INDICATOR_DELAY,
        on_branch: BranchHandler | None = None,
    ) -> None:
        self.series = series
        self.state = FeedState()
        self.selection = FeedSelectionEngine(len(series.episodes), threshold)
        factory = media_factory or _virtual_media
        self.items = [
            PlaybackController(factory(ep), scheduler, indicator_delay)
            for ep in series.episodes
        ]
        for item in self.items:
            item.set_muted(self.state.muted)
        self._on_branch = on_branch

    @property
    def active(self) -> PlaybackController:
        return self.items[self.state.active_index]

    @property
    def active_episode(self) -> Episode:
        return self.series.episodes[self.state.active_index]

    def item(self, index: int) -> PlaybackController:
        """Controller at ``index``; IndexError when out of range."""
        if not 0 <= index < len(self.items):
            raise IndexError(f"No feed item {index}")
        return self.items[index]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Enter the feed: the first item becomes active and starts playing."""
        self.state.started = True
        self._activate(self.state.active_index)

    def stop(self) -> None:
        for item in self.items:
            item.deactivate()
            item.close()
        self.state.started = False

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def observe(self, batch: Iterable[Observation]) -> int:
        """Apply one viewport observation batch; returns the active index."""
        index = self.selection.select(batch)
        if index is not None and index != self.state.active_index:
            logger.debug("active item %d -> %d", self.state.active_index, index)
            self._activate(index)
        return self.state.active_index

    def _activate(self, index: int) -> None:
        for i, item in enumerate(self.items):
            if i != index:
                item.deactivate()
        self.state.active_index = index
        self.items[index].activate()

    # ------------------------------------------------------------------
    # Viewer gestures
    # ------------------------------------------------------------------

    def toggle_play(self, index: int) -> bool:
        """Toggle the item at ``index``. Only the active item reacts."""
        item = self.item(index)
        if index != self.state.active_index:
            logger.debug("toggle on inactive item %d ignored", index)
            return False
        item.toggle_play()
        return True

    def seek(self, index: int, percent: float) -> float | None:
        return self.item(index).seek(percent)

    def set_muted(self, muted: bool) -> None:
        self.state.muted = muted
        for item in self.items:
            item.set_muted(muted)

    def toggle_mute(self) -> bool:
        self.set_muted(not self.state.muted)
        return self.state.muted

    def enter_story(self, index: int, trigger_index: int) -> Any:
        """Forward a branch tap on the active item to the chat opener."""
        self.item(index)
        if index != self.state.active_index:
            raise InactiveItemError(f"Feed item {index} is not active")
        episode = self.series.episodes[index]
        if not 0 <= trigger_index < len(episode.triggers):
            raise IndexError(f"Episode {episode.id} has no trigger {trigger_index}")
        trigger = episode.triggers[trigger_index]
        character = self.series.character(trigger.character)
        logger.debug("branch %r on %s", trigger.label, episode.label)
        if self._on_branch is None:
            return None
        return self._on_branch(character, episode.label, trigger.hook)

    def snapshot(self) -> dict[str, Any]:
        items = []
        for i, (ep, item) in enumerate(zip(self.series.episodes, self.items)):
            items.append({
                "index": i,
                "episode_id": ep.id,
                "label": ep.label,
                "url": ep.url,
                "active": i == self.state.active_index,
                **item.snapshot(),
            })
        return {**self.state.model_dump(), "items": items}
