# api/inboxAPI.py
# Showcase - feedback and contact messages
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Path as FPath, Request
from pydantic import BaseModel

from ._common import runtime, unwrap

router = APIRouter(prefix="/api", tags=["inbox"])


class FeedbackIn(BaseModel):
    userName: str = ""
    feedback: str = ""
    projectName: str = ""
    projectId: str = ""


class MessageIn(BaseModel):
    name: str = ""
    message: str = ""
    projectName: str = ""
    projectId: str = ""


def _mark_read(request: Request, kind: str, record_id: str, label: str) -> dict[str, Any]:
    rec = unwrap(runtime(request).inbox.mark_read(kind, record_id))
    if rec is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return rec.to_dict()


def _delete(request: Request, kind: str, record_id: str, label: str) -> dict[str, Any]:
    if not unwrap(runtime(request).inbox.delete(kind, record_id)):
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return {"success": True, "message": f"{label} deleted successfully"}


# feedback
@router.get("/feedback")
def api_feedback(request: Request) -> list[dict[str, Any]]:
    return [f.to_dict() for f in runtime(request).inbox.list_feedback()]


@router.post("/feedback")
def api_submit_feedback(request: Request, body: FeedbackIn) -> dict[str, Any]:
    inbox = runtime(request).inbox
    return unwrap(inbox.submit_feedback(body.userName, body.feedback, body.projectName, body.projectId)).to_dict()


@router.put("/feedback/{feedback_id}/read")
def api_feedback_read(request: Request, feedback_id: str = FPath(...)) -> dict[str, Any]:
    return _mark_read(request, "feedback", feedback_id, "Feedback")


@router.delete("/feedback/{feedback_id}")
def api_feedback_delete(request: Request, feedback_id: str = FPath(...)) -> dict[str, Any]:
    return _delete(request, "feedback", feedback_id, "Feedback")


# messages
@router.get("/messages")
def api_messages(request: Request) -> list[dict[str, Any]]:
    return [m.to_dict() for m in runtime(request).inbox.list_messages()]


@router.post("/messages")
def api_send_message(request: Request, body: MessageIn) -> dict[str, Any]:
    inbox = runtime(request).inbox
    return unwrap(inbox.send_message(body.name, body.message, body.projectName, body.projectId)).to_dict()


@router.put("/messages/{message_id}/read")
def api_message_read(request: Request, message_id: str = FPath(...)) -> dict[str, Any]:
    return _mark_read(request, "messages", message_id, "Message")


@router.delete("/messages/{message_id}")
def api_message_delete(request: Request, message_id: str = FPath(...)) -> dict[str, Any]:
    return _delete(request, "messages", message_id, "Message")
