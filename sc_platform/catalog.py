# sc_platform/catalog.py
# Showcase - read-only catalog of projects and achievements
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from _logging import log

ITEM_KINDS: tuple[str, ...] = ("developer", "editor")

DEFAULT_CATALOG: dict[str, list[dict[str, Any]]] = {
    "projects": [
        {
            "id": "dev-1",
            "title": "LinguaSync",
            "description": "Real-time multilingual chat with instant translation, socket messaging and persistent history.",
            "type": "developer",
            "date": "2025-03",
            "url": "",
            "thumbnail": "images/linguasync.png",
            "images": [],
        },
        {
            "id": "dev-2",
            "title": "Portfolio Website",
            "description": "Static portfolio with comments, star ratings and pluggable persistence.",
            "type": "developer",
            "date": "2025-06",
            "url": "",
            "thumbnail": "images/portfolio.png",
            "images": [],
        },
        {
            "id": "edit-1",
            "title": "Short Film Edit",
            "description": "Color grade and cut of a short documentary piece.",
            "type": "editor",
            "date": "2024-11",
            "url": "",
            "thumbnail": "images/shortfilm.png",
            "images": [],
        },
    ],
    "achievements": [
        {
            "id": "ach-1",
            "name": "Hackathon Finalist",
            "title": "Hackathon Finalist",
            "description": "Top team in a university hackathon.",
            "type": "developer",
            "date": "2024-05",
            "platform": "University",
            "position": "Finalist",
            "year": "2024",
            "skill": "Full stack",
        },
        {
            "id": "ach-2",
            "name": "Editing Contest",
            "title": "Editing Contest Winner",
            "description": "First place in an online video editing contest.",
            "type": "editor",
            "date": "2023-09",
            "platform": "Online",
            "position": "1st",
            "year": "2023",
            "skill": "Video editing",
        },
    ],
}


def _clean_entries(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    out: list[dict[str, Any]] = []
    for it in raw:
        if not isinstance(it, dict):
            continue
        iid = str(it.get("id") or "").strip()
        if not iid:
            continue
        entry = dict(it)
        entry["id"] = iid
        entry["type"] = str(it.get("type") or "").strip().lower()
        out.append(entry)
    return out


class Catalog:
    """Fixed reference data. Loaded from catalog.json when present, else the built-in seed."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        src = data if isinstance(data, dict) else DEFAULT_CATALOG
        self._projects = _clean_entries(src.get("projects"))
        self._achievements = _clean_entries(src.get("achievements"))

    @classmethod
    def from_file(cls, path: Path) -> "Catalog":
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text("utf-8"))
        except Exception as e:
            log(f"catalog file unreadable, using built-in seed: {e}", level="WARN", module="CATALOG")
            return cls()
        return cls(data if isinstance(data, dict) else None)

    @staticmethod
    def _filtered(entries: list[dict[str, Any]], kind: str | None) -> list[dict[str, Any]]:
        k = (kind or "").strip().lower()
        rows = [e for e in entries if not k or e.get("type") == k]
        return copy.deepcopy(sorted(rows, key=lambda e: str(e.get("date") or ""), reverse=True))

    def projects(self, kind: str | None = None) -> list[dict[str, Any]]:
        return self._filtered(self._projects, kind)

    def achievements(self, kind: str | None = None) -> list[dict[str, Any]]:
        return self._filtered(self._achievements, kind)

    def project(self, project_id: str) -> dict[str, Any] | None:
        for e in self._projects:
            if e["id"] == project_id:
                return copy.deepcopy(e)
        return None

    def achievement(self, achievement_id: str) -> dict[str, Any] | None:
        for e in self._achievements:
            if e["id"] == achievement_id:
                return copy.deepcopy(e)
        return None


__all__ = ["Catalog", "DEFAULT_CATALOG", "ITEM_KINDS"]
