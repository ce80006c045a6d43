# sc_platform/storage.py
# Showcase - raw key/value storage backends (memory, JSON file, cloud document store)
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Mapping, Protocol
from urllib.parse import quote

import requests

from _logging import log


class StorageBackend(Protocol):
    """The only capability the core needs from a datastore."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, raw: str) -> bool: ...


class MemoryStorage:
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def read(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def write(self, key: str, raw: str) -> bool:
        with self._lock:
            self._data[key] = str(raw)
        return True

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data.keys())


class FileStorage:
    """One JSON object on disk mapping key -> raw string value."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text("utf-8") or "{}")
        except Exception as e:
            log(f"unreadable storage file {self.path}: {e}", level="WARN", module="STORAGE")
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write_atomic(self, data: Mapping[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + f".{os.getpid()}.tmp")
        tmp.write_text(json.dumps(dict(data), ensure_ascii=False, indent=2, sort_keys=True), "utf-8")
        os.replace(tmp, self.path)

    def read(self, key: str) -> str | None:
        with self._lock:
            v = self._load().get(key)
        return v if isinstance(v, str) else None

    def write(self, key: str, raw: str) -> bool:
        with self._lock:
            data = self._load()
            data[key] = str(raw)
            try:
                self._write_atomic(data)
            except OSError as e:
                log(f"write failed for {self.path}: {e}", level="WARN", module="STORAGE", extra={"key": key})
                return False
        return True


class DocumentStorage:
    """
    Cloud document store reached over its REST document API.

    Each storage key is one document in `collection`; the raw value lives in a
    single string field named `value`.
    """

    FIELD = "value"

    def __init__(
        self,
        *,
        base_url: str,
        project_id: str,
        collection: str = "portfolio",
        database: str = "(default)",
        api_key: str = "",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        self.collection = collection
        self.database = database
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, doc_cfg: Mapping[str, Any], session: requests.Session | None = None) -> "DocumentStorage":
        return cls(
            base_url=str(doc_cfg.get("base_url") or ""),
            project_id=str(doc_cfg.get("project_id") or ""),
            collection=str(doc_cfg.get("collection") or "portfolio"),
            database=str(doc_cfg.get("database") or "(default)"),
            api_key=str(doc_cfg.get("api_key") or ""),
            timeout=float(doc_cfg.get("timeout") or 10.0),
            session=session,
        )

    @staticmethod
    def doc_id(key: str) -> str:
        return str(key).replace("/", "|")

    def doc_url(self, key: str) -> str:
        return (
            f"{self.base_url}/projects/{self.project_id}/databases/{self.database}"
            f"/documents/{self.collection}/{quote(self.doc_id(key), safe='|:~')}"
        )

    def _params(self) -> dict[str, str]:
        return {"key": self.api_key} if self.api_key else {}

    def read(self, key: str) -> str | None:
        url = self.doc_url(key)
        try:
            r = self.session.get(url, params=self._params(), timeout=self.timeout)
        except requests.RequestException as e:
            log(f"document read failed: {e}", level="WARN", module="STORAGE", extra={"key": key})
            return None
        if r.status_code == 404:
            return None
        if not (200 <= r.status_code < 300):
            log("document read rejected", level="WARN", module="STORAGE", extra={"key": key, "status": r.status_code})
            return None
        try:
            fields = (r.json() or {}).get("fields") or {}
            v = (fields.get(self.FIELD) or {}).get("stringValue")
        except (ValueError, AttributeError):
            log("document read returned a malformed body", level="WARN", module="STORAGE", extra={"key": key})
            return None
        return v if isinstance(v, str) else None

    def write(self, key: str, raw: str) -> bool:
        url = self.doc_url(key)
        body = {"fields": {self.FIELD: {"stringValue": str(raw)}}}
        try:
            r = self.session.patch(url, params=self._params(), json=body, timeout=self.timeout)
        except requests.RequestException as e:
            log(f"document write failed: {e}", level="WARN", module="STORAGE", extra={"key": key})
            return False
        if not (200 <= r.status_code < 300):
            log("document write rejected", level="WARN", module="STORAGE", extra={"key": key, "status": r.status_code})
            return False
        return True


def build_storage(kind: str, cfg: Mapping[str, Any], *, path: Path | None = None) -> StorageBackend:
    """Instantiate a raw backend by name: "memory", "file" (needs path) or "document"."""
    k = str(kind or "file").strip().lower()
    if k == "memory":
        return MemoryStorage()
    if k == "document":
        doc_cfg = ((cfg.get("storage") or {}).get("document") or {})
        return DocumentStorage.from_config(doc_cfg)
    if path is None:
        raise ValueError("file storage needs a path")
    return FileStorage(path)


__all__ = ["StorageBackend", "MemoryStorage", "FileStorage", "DocumentStorage", "build_storage"]
