# sc_platform/identity.py
# Showcase - stable pseudo-random visitor identity
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import time
from dataclasses import dataclass

from _logging import log

from .models import random_suffix
from .storage import StorageBackend

DEFAULT_STORAGE_KEY = "userId"


@dataclass(frozen=True)
class VisitorSession:
    """Explicit session context handed to every reconciliation call."""
    visitor_id: str
    durable: bool = True


def generate_visitor_id() -> str:
    return f"user_{int(time.time() * 1000)}_{random_suffix()}"


class IdentityProvider:
    def __init__(self, storage: StorageBackend | None, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        self.storage = storage
        self.storage_key = storage_key or DEFAULT_STORAGE_KEY

    def _stored(self) -> str | None:
        if self.storage is None:
            return None
        try:
            v = self.storage.read(self.storage_key)
        except Exception as e:
            log(f"visitor id read failed: {e}", level="DEBUG", module="IDENTITY")
            return None
        v = (v or "").strip()
        return v or None

    def get_or_create_visitor_id(self) -> str:
        return self.session().visitor_id

    def session(self) -> VisitorSession:
        existing = self._stored()
        if existing:
            return VisitorSession(existing, durable=True)

        vid = generate_visitor_id()
        saved = False
        if self.storage is not None:
            try:
                saved = bool(self.storage.write(self.storage_key, vid))
            except Exception as e:
                log(f"visitor id write failed: {e}", level="DEBUG", module="IDENTITY")
                saved = False
        if not saved:
            # ratings from this id will not dedupe across reloads
            log("visitor id is not durable; using an ephemeral id", level="WARN", module="IDENTITY")
        return VisitorSession(vid, durable=saved)


__all__ = ["VisitorSession", "IdentityProvider", "generate_visitor_id", "DEFAULT_STORAGE_KEY"]
