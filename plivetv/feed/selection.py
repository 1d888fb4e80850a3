"""Feed selection — picks the single active item from viewport observations.

The viewport layer (an IntersectionObserver in the browser) reports, per
batch, how much of each feed item is visible. An item at or above the
threshold qualifies. When several qualify in the same batch the highest
ratio wins and equal ratios go to the lowest index, so the outcome never
depends on report order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

VISIBILITY_THRESHOLD = 0.6


class Observation(BaseModel):
    """Visible share of one feed item's viewport footprint."""

    index: int
    ratio: float = Field(ge=0, le=1)


class FeedSelectionEngine:
    def __init__(self, item_count: int, threshold: float = VISIBILITY_THRESHOLD) -> None:
        if item_count < 1:
            raise ValueError("A feed needs at least one item")
        self.item_count = item_count
        self.threshold = threshold

    def qualifies(self, obs: Observation) -> bool:
        return 0 <= obs.index < self.item_count and obs.ratio >= self.threshold

    def select(self, batch: Iterable[Observation]) -> int | None:
        """Return the index this batch makes active, or None if no item qualifies."""
        best: Observation | None = None
        for obs in batch:
            if not self.qualifies(obs):
                continue
            if best is None or (obs.ratio, -obs.index) > (best.ratio, -best.index):
                best = obs
        if best is None:
            return None
        logger.debug("selection batch winner index=%d ratio=%.2f", best.index, best.ratio)
        return best.index
