# api/catalogAPI.py
# Showcase - read-only projects and achievements
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Path as FPath, Query, Request

from sc_platform.catalog import ITEM_KINDS

from ._common import runtime

router = APIRouter(prefix="/api", tags=["catalog"])


def _kind(val: str | None) -> str | None:
    k = (val or "").strip().lower()
    if not k:
        return None
    if k not in ITEM_KINDS:
        raise HTTPException(status_code=400, detail=f"Unsupported type: {k}")
    return k


@router.get("/projects")
def api_projects(request: Request, type: str | None = Query(None)) -> list[dict[str, Any]]:
    return runtime(request).catalog.projects(_kind(type))


@router.get("/projects/{project_id}")
def api_project(request: Request, project_id: str = FPath(...)) -> dict[str, Any]:
    found = runtime(request).catalog.project(project_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return found


@router.get("/achievements")
def api_achievements(request: Request, type: str | None = Query(None)) -> list[dict[str, Any]]:
    return runtime(request).catalog.achievements(_kind(type))


@router.get("/achievements/{achievement_id}")
def api_achievement(request: Request, achievement_id: str = FPath(...)) -> dict[str, Any]:
    found = runtime(request).catalog.achievement(achievement_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Achievement not found")
    return found
