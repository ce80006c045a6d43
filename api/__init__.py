# api/__init__.py
# Showcase - API router registration
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from fastapi import FastAPI

from .catalogAPI import router as catalog_router
from .commentsAPI import router as comments_router
from .inboxAPI import router as inbox_router
from .ratingsAPI import router as ratings_router

__all__ = [
    "catalog_router",
    "comments_router",
    "inbox_router",
    "ratings_router",
    "register",
]


def register(app: FastAPI) -> None:
    app.include_router(ratings_router)
    app.include_router(comments_router)
    app.include_router(catalog_router)
    app.include_router(inbox_router)
