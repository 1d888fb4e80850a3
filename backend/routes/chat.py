"""Chat overlay endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from backend.viewer import Viewer, get_viewer

from .models import ChatBody

router = APIRouter()


@router.get("/chat")
async def get_chat(viewer: Viewer = Depends(get_viewer)):
    """The open chat session and its history."""
    snapshot = viewer.chat.snapshot()
    if snapshot is None:
        raise HTTPException(404, "No chat session open")
    return snapshot


@router.post("/chat/messages")
async def send_message(body: ChatBody, viewer: Viewer = Depends(get_viewer)):
    """Send one user turn and wait for the character's reply.

    Empty messages and messages sent while a reply is pending are not sent;
    ``accepted`` is false for those.
    """
    if viewer.chat.session is None:
        raise HTTPException(404, "No chat session open")
    reply = await viewer.chat.submit(body.message)
    return {"accepted": reply is not None, "session": viewer.chat.snapshot()}


@router.delete("/chat")
async def close_chat(viewer: Viewer = Depends(get_viewer)):
    """Close the overlay. Its history is discarded."""
    viewer.chat.close()
    return {"ok": True}
