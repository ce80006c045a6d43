# api/_common.py
# Showcase - shared helpers for the API routers
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any, NoReturn

from fastapi import HTTPException, Request

from sc_platform.identity import VisitorSession
from sc_platform.models import ItemRef
from sc_platform.reconcile import parse_item
from sc_platform.result import NetworkError, Ok, StorageError, ValidationError
from services.runtime import ServerRuntime


def runtime(request: Request) -> ServerRuntime:
    rt = getattr(request.app.state, "showcase", None)
    if rt is None:
        raise HTTPException(status_code=503, detail="server runtime not initialised")
    return rt


def fail(res: Any) -> NoReturn:
    if isinstance(res, ValidationError):
        raise HTTPException(status_code=400, detail={"field": res.field, "error": res.message})
    if isinstance(res, StorageError):
        raise HTTPException(status_code=500, detail=f"storage write failed: {res.message}")
    if isinstance(res, NetworkError):
        raise HTTPException(status_code=502, detail=res.message)
    raise HTTPException(status_code=500, detail="unexpected result")


def unwrap(res: Any) -> Any:
    if isinstance(res, Ok):
        return res.value
    fail(res)


def item_or_400(item_type: Any, item_id: Any) -> ItemRef:
    return unwrap(parse_item(item_type, item_id))


def session_of(user_id: Any) -> VisitorSession:
    vid = str(user_id or "").strip()
    if not vid:
        raise HTTPException(status_code=400, detail={"field": "userId", "error": "userId is required"})
    # client-supplied; there is no server-side identity check
    return VisitorSession(vid)
