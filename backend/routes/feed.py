"""Feed view endpoints: enter/leave, viewport observations, player events and gestures."""

from fastapi import APIRouter, Depends, HTTPException

from backend.viewer import Viewer, get_viewer
from plivetv.feed import FeedContainer, InactiveItemError, PlaybackController

from .models import ItemEvent, MuteBody, ObservationBatch, SeekBody

router = APIRouter()


def _feed(viewer: Viewer) -> FeedContainer:
    if viewer.feed is None:
        raise HTTPException(404, "Feed is not open")
    return viewer.feed


def _item(feed: FeedContainer, index: int) -> PlaybackController:
    try:
        return feed.item(index)
    except IndexError:
        raise HTTPException(404, "Feed item not found")


@router.post("/feed")
async def open_feed(viewer: Viewer = Depends(get_viewer)):
    """Enter the feed view; the first episode becomes active."""
    return viewer.enter_feed().snapshot()


@router.get("/feed")
async def get_feed(viewer: Viewer = Depends(get_viewer)):
    """Current feed state: active index, mute flag, per-item playback."""
    return _feed(viewer).snapshot()


@router.delete("/feed")
async def close_feed(viewer: Viewer = Depends(get_viewer)):
    """Return to the landing view. Stops playback and closes any chat."""
    viewer.leave_feed()
    return {"ok": True}


@router.post("/feed/observations")
async def observe(body: ObservationBatch, viewer: Viewer = Depends(get_viewer)):
    """Apply one batch of viewport visibility ratios."""
    feed = _feed(viewer)
    feed.observe(body.entries)
    return feed.snapshot()


@router.post("/feed/items/{index}/events")
async def item_event(index: int, body: ItemEvent, viewer: Viewer = Depends(get_viewer)):
    """Report a media element event (load start, metadata, ready, time update, autoplay block)."""
    item = _item(_feed(viewer), index)
    if body.type == "load_start":
        item.on_load_start()
    elif body.type == "metadata":
        item.on_metadata(body.duration)
    elif body.type == "ready":
        item.on_ready(body.duration)
    elif body.type == "time_update":
        item.on_time_update(body.current_time, body.duration)
    else:
        item.on_autoplay_blocked()
    return item.snapshot()


@router.post("/feed/items/{index}/toggle")
async def toggle_play(index: int, viewer: Viewer = Depends(get_viewer)):
    """Play/pause tap on a video. Taps on inactive items are ignored."""
    feed = _feed(viewer)
    item = _item(feed, index)
    feed.toggle_play(index)
    return item.snapshot()


@router.post("/feed/items/{index}/seek")
async def seek(index: int, body: SeekBody, viewer: Viewer = Depends(get_viewer)):
    """Drag on the seek bar, as a percentage of the video."""
    feed = _feed(viewer)
    item = _item(feed, index)
    target = feed.seek(index, body.percent)
    return {"target_time": target, **item.snapshot()}


@router.put("/feed/mute")
async def set_mute(body: MuteBody, viewer: Viewer = Depends(get_viewer)):
    """Set the shared mute flag (omit ``muted`` to toggle)."""
    feed = _feed(viewer)
    if body.muted is None:
        feed.toggle_mute()
    else:
        feed.set_muted(body.muted)
    return feed.snapshot()


@router.post("/feed/items/{index}/triggers/{trigger_index}")
async def enter_story(index: int, trigger_index: int, viewer: Viewer = Depends(get_viewer)):
    """Pick a story branch on the active item; opens the chat overlay."""
    feed = _feed(viewer)
    try:
        feed.enter_story(index, trigger_index)
    except IndexError:
        raise HTTPException(404, "Trigger not found")
    except InactiveItemError:
        raise HTTPException(409, "Feed item is not active")
    return viewer.chat.snapshot()
