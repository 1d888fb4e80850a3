"""Single-active-player feed engine."""

from .container import FeedContainer, FeedState, InactiveItemError
from .media import MediaElement, PlaybackBlocked, VirtualMedia
from .playback import PlaybackController, format_time, progress_percent
from .selection import FeedSelectionEngine, Observation

__all__ = [
    "FeedContainer",
    "FeedSelectionEngine",
    "FeedState",
    "InactiveItemError",
    "MediaElement",
    "Observation",
    "PlaybackBlocked",
    "PlaybackController",
    "VirtualMedia",
    "format_time",
    "progress_percent",
]
