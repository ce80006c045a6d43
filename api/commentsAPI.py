# api/commentsAPI.py
# Showcase - comments API (list, add, owner edit/delete)
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Path as FPath, Query, Request
from pydantic import BaseModel

from ._common import item_or_400, runtime, session_of, unwrap

router = APIRouter(prefix="/api", tags=["comments"])


class CommentIn(BaseModel):
    itemId: str = ""
    itemType: str = ""
    userId: str = ""
    author: str = ""
    text: str = ""


class CommentEdit(BaseModel):
    userId: str = ""
    text: str = ""


@router.get("/comments")
def api_comments(request: Request, itemId: str = Query(""), itemType: str = Query("")) -> list[dict[str, Any]]:
    item = item_or_400(itemType, itemId)
    return [c.to_dict() for c in runtime(request).reconciler.list_comments(item)]


@router.post("/comments")
def api_add_comment(request: Request, body: CommentIn) -> dict[str, Any]:
    item = item_or_400(body.itemType, body.itemId)
    session = session_of(body.userId)
    comment = unwrap(runtime(request).reconciler.add_comment(session, item, body.author, body.text))
    return comment.to_dict()


@router.put("/comments/{comment_id}")
def api_edit_comment(
    request: Request,
    body: CommentEdit,
    comment_id: str = FPath(...),
    itemId: str = Query(""),
    itemType: str = Query(""),
) -> dict[str, Any]:
    item = item_or_400(itemType, itemId)
    session = session_of(body.userId)
    rec = runtime(request).reconciler
    if rec.find_comment(item, comment_id) is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    updated = unwrap(rec.edit_comment(session, item, comment_id, body.text))
    if updated is None:
        return {"success": False}
    return updated.to_dict()


@router.delete("/comments/{comment_id}")
def api_delete_comment(
    request: Request,
    comment_id: str = FPath(...),
    itemId: str = Query(""),
    itemType: str = Query(""),
    userId: str = Query(""),
) -> dict[str, Any]:
    item = item_or_400(itemType, itemId)
    session = session_of(userId)
    rec = runtime(request).reconciler
    if rec.find_comment(item, comment_id) is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    removed = unwrap(rec.delete_comment(session, item, comment_id))
    return {"success": bool(removed)}
