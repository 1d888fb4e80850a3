"""Media element adapter.

A feed item talks to its player only through the MediaElement protocol.
VirtualMedia is the in-memory implementation used by the HTTP backend (the
browser mirrors its state onto a real <video>) and by the tests.
"""

from __future__ import annotations

import logging
import math
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

AutoplayPolicy = Literal["allow", "muted-only", "deny"]


class PlaybackBlocked(RuntimeError):
    """Raised by play() when the environment refuses a programmatic start."""


class MediaElement(Protocol):
    paused: bool
    current_time: float
    duration: float | None
    muted: bool

    def play(self, user_initiated: bool = False) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...


class VirtualMedia:
    """In-memory media element for one video URL.

    ``autoplay`` mimics browser policy for starts that are not caused by a
    user gesture: "allow" always plays, "muted-only" plays only while
    muted, "deny" never plays. User-initiated starts always succeed.
    """

    def __init__(
        self,
        url: str,
        duration: float | None = None,
        autoplay: AutoplayPolicy = "allow",
        loop: bool = True,
    ) -> None:
        self.url = url
        self.duration = duration
        self.autoplay = autoplay
        self.loop = loop
        self.paused = True
        self.current_time = 0.0
        self.muted = False

    def play(self, user_initiated: bool = False) -> None:
        if not user_initiated:
            if self.autoplay == "deny" or (self.autoplay == "muted-only" and not self.muted):
                raise PlaybackBlocked(f"Autoplay denied for {self.url}")
        self.paused = False

    def pause(self) -> None:
        self.paused = True

    def seek(self, seconds: float) -> None:
        if not math.isfinite(seconds):
            return
        t = max(seconds, 0.0)
        if _known(self.duration):
            t = min(t, self.duration)
        self.current_time = t

    def advance(self, seconds: float) -> None:
        """Move the playhead forward as if ``seconds`` of wall time passed."""
        if self.paused or not _known(self.duration):
            return
        t = self.current_time + seconds
        if t >= self.duration:
            if self.loop:
                t = t % self.duration
            else:
                t = self.duration
                self.paused = True
        self.current_time = t


def _known(duration: float | None) -> bool:
    return duration is not None and math.isfinite(duration) and duration > 0
