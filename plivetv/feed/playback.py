"""Per-item playback controller.

Turns media element events into the transient UI state of one feed item
(loading spinner, time label, progress bar, play/pause flash) and carries
out the viewer's toggle and seek gestures.

Event → state:
  on_load_start            loading = True
  on_metadata(d)           duration = d
  on_ready(d)              duration = d (if given), loading = False
  on_time_update(t, d)     current_time, duration, progress
  on_autoplay_blocked      media paused, awaiting a manual play

Unknown durations (None, NaN, 0, infinity) are stored as 0 and make the
progress 0, never NaN.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any, Literal, Protocol

from plivetv.feed.media import MediaElement, PlaybackBlocked

logger = logging.getLogger(__name__)

Indicator = Literal["none", "play", "pause"]

INDICATOR_DELAY = 0.8


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> Cancellable:
    """Default scheduler: a timer on the running asyncio loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


def _finite(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def progress_percent(current_time: float | None, duration: float | None) -> float:
    """Elapsed share of the video in [0, 100]; 0 while the duration is unknown."""
    dur = _finite(duration)
    if dur <= 0:
        return 0.0
    return min(max(_finite(current_time) / dur * 100, 0.0), 100.0)


def format_time(seconds: float | None) -> str:
    """Render seconds as m:ss ("0:00" for unknown values)."""
    s = _finite(seconds)
    if s < 0:
        s = 0.0
    mins = int(s // 60)
    secs = int(s % 60)
    return f"{mins}:{secs:02d}"


class PlaybackController:
    def __init__(
        self,
        media: MediaElement,
        scheduler: Scheduler | None = None,
        indicator_delay: float = INDICATOR_DELAY,
    ) -> None:
        self.media = media
        self.loading = True
        self.current_time = 0.0
        self.duration = 0.0
        self.progress = 0.0
        self.indicator: Indicator = "none"
        self._scheduler = scheduler or asyncio_scheduler
        self._indicator_delay = indicator_delay
        self._indicator_timer: Cancellable | None = None

    @property
    def playing(self) -> bool:
        return not self.media.paused

    @property
    def muted(self) -> bool:
        return self.media.muted

    @property
    def time_label(self) -> str:
        return f"{format_time(self.current_time)} / {format_time(self.duration)}"

    # ------------------------------------------------------------------
    # Media element events
    # ------------------------------------------------------------------

    def on_load_start(self) -> None:
        self.loading = True

    def on_metadata(self, duration: float | None) -> None:
        self.duration = _finite(duration)

    def on_ready(self, duration: float | None = None) -> None:
        if duration is not None:
            self.duration = _finite(duration)
        self.loading = False

    def on_time_update(self, current_time: float | None, duration: float | None) -> None:
        self.current_time = _finite(current_time)
        self.duration = _finite(duration)
        self.progress = progress_percent(self.current_time, self.duration)

    def on_autoplay_blocked(self) -> None:
        logger.debug("autoplay blocked by client, item stays paused")
        self.media.pause()

    # ------------------------------------------------------------------
    # Selection side effects
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Rewind to the start and try to play; autoplay denial leaves it paused."""
        self.media.seek(0.0)
        self.current_time = 0.0
        self.progress = 0.0
        try:
            self.media.play()
        except PlaybackBlocked as e:
            logger.debug("autoplay denied: %s", e)

    def deactivate(self) -> None:
        self.media.pause()

    # ------------------------------------------------------------------
    # Viewer gestures
    # ------------------------------------------------------------------

    def toggle_play(self) -> None:
        if self.media.paused:
            try:
                self.media.play(user_initiated=True)
            except PlaybackBlocked as e:
                logger.debug("manual play refused: %s", e)
                return
            self._flash("play")
        else:
            self.media.pause()
            self._flash("pause")

    def seek(self, percent: float) -> float | None:
        """Jump to ``percent`` of the video. Returns the target time, or None
        when the duration is not known yet (nothing happens)."""
        duration = _finite(self.media.duration) or self.duration
        if duration <= 0 or not math.isfinite(percent):
            return None
        percent = min(max(percent, 0.0), 100.0)
        target = percent / 100 * duration
        self.media.seek(target)
        self.progress = percent
        return target

    def set_muted(self, muted: bool) -> None:
        self.media.muted = muted

    def close(self) -> None:
        if self._indicator_timer is not None:
            self._indicator_timer.cancel()
            self._indicator_timer = None
        self.indicator = "none"

    def _flash(self, kind: Indicator) -> None:
        # Only the latest indicator is shown; restart its timer.
        if self._indicator_timer is not None:
            self._indicator_timer.cancel()
        self.indicator = kind
        self._indicator_timer = self._scheduler(self._indicator_delay, self._clear_indicator)

    def _clear_indicator(self) -> None:
        self.indicator = "none"
        self._indicator_timer = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "loading": self.loading,
            "playing": self.playing,
            "muted": self.muted,
            "current_time": self.current_time,
            "duration": self.duration,
            "progress": self.progress,
            "indicator": self.indicator,
            "time_label": self.time_label,
        }
