# api/ratingsAPI.py
# Showcase - ratings API (list, summary, upsert)
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from ._common import item_or_400, runtime, session_of, unwrap

router = APIRouter(prefix="/api", tags=["ratings"])


class RatingIn(BaseModel):
    itemId: str = ""
    itemType: str = ""
    userId: str = ""
    rating: Any = None


@router.get("/ratings")
def api_ratings(request: Request, itemId: str = Query(""), itemType: str = Query("")) -> list[dict[str, Any]]:
    item = item_or_400(itemType, itemId)
    return [r.to_dict() for r in runtime(request).reconciler.list_ratings(item)]


@router.get("/ratings/summary")
def api_ratings_summary(request: Request, itemId: str = Query(""), itemType: str = Query("")) -> dict[str, Any]:
    item = item_or_400(itemType, itemId)
    return runtime(request).reconciler.aggregate(item).to_dict()


@router.post("/ratings")
def api_submit_rating(request: Request, body: RatingIn) -> dict[str, Any]:
    item = item_or_400(body.itemType, body.itemId)
    session = session_of(body.userId)
    submission = unwrap(runtime(request).reconciler.submit_rating(session, item, body.rating))
    return submission.to_dict()
