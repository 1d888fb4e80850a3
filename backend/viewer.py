"""One viewer's in-memory session: the feed view and the chat overlay.

Nothing here is persisted. Leaving the feed (back to the landing view)
stops playback and closes any open chat, so the next visit starts fresh.
"""

from __future__ import annotations

import logging

from fastapi import Request

from plivetv.chat import ChatSessionManager
from plivetv.config import Settings
from plivetv.feed import FeedContainer
from plivetv.llm import CompletionBackend
from plivetv.models import Series

logger = logging.getLogger(__name__)


class Viewer:
    def __init__(self, settings: Settings, series: Series, backend: CompletionBackend) -> None:
        self.settings = settings
        self.series = series
        self.chat = ChatSessionManager(backend, series)
        self.feed: FeedContainer | None = None

    def enter_feed(self) -> FeedContainer:
        """Open the feed view, or return the one already open."""
        if self.feed is None:
            self.feed = FeedContainer(
                self.series,
                threshold=self.settings.visibility_threshold,
                indicator_delay=self.settings.indicator_delay,
                on_branch=self.chat.open,
            )
            self.feed.start()
            logger.debug("feed opened for %s", self.series.id)
        return self.feed

    def leave_feed(self) -> None:
        if self.feed is not None:
            self.feed.stop()
            self.feed = None
        self.chat.close()


def get_viewer(request: Request) -> Viewer:
    return request.app.state.viewer
