# sc_platform/record_store.py
# Showcase - keyed record store for comments, ratings and inbox records
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from _logging import log

from .models import Comment, Feedback, ItemRef, Message, Rating, new_id, now_iso
from .storage import StorageBackend

Kind = Literal["comments", "ratings", "feedback", "messages"]


@dataclass(frozen=True)
class KindSpec:
    namespace: str
    model: Any
    id_prefix: str
    per_item: bool = True
    tracks_updates: bool = True


KINDS: dict[str, KindSpec] = {
    "comments": KindSpec("portfolio_comments", Comment, "comment"),
    "ratings": KindSpec("portfolio_ratings", Rating, "rating"),
    "feedback": KindSpec("portfolio_feedback", Feedback, "feedback", per_item=False, tracks_updates=False),
    "messages": KindSpec("portfolio_messages", Message, "message", per_item=False, tracks_updates=False),
}


class StoreWriteError(RuntimeError):
    def __init__(self, key: str) -> None:
        super().__init__(f"storage refused write for {key}")
        self.key = key


def _spec(kind: str) -> KindSpec:
    try:
        return KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown record kind: {kind}") from None


class KeyedRecordStore:
    """
    (item, kind) -> ordered list of records on top of any StorageBackend.

    Each (kind, item) pair is one raw storage key holding a JSON array. Every
    mutation is a single read-modify-write of that key. Corrupt payloads read
    as empty and are overwritten by the next write.
    """

    def __init__(self, storage: StorageBackend, *, clock: Callable[[], str] = now_iso) -> None:
        self.storage = storage
        self.clock = clock

    @staticmethod
    def storage_key(item: ItemRef | None, kind: str) -> str:
        spec = _spec(kind)
        if not spec.per_item:
            return spec.namespace
        if item is None:
            raise ValueError(f"{kind} records are keyed by item")
        return f"{spec.namespace}:{item.key}"

    # reads
    def _load(self, item: ItemRef | None, kind: str) -> list[Any]:
        spec = _spec(kind)
        key = self.storage_key(item, kind)
        try:
            raw = self.storage.read(key)
        except Exception as e:
            log(f"read failed: {e}", level="WARN", module="STORE", extra={"key": key})
            return []
        if raw is None or not str(raw).strip():
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            log("corrupt payload treated as empty", level="WARN", module="STORE", extra={"key": key})
            return []
        if not isinstance(data, list):
            log("non-list payload treated as empty", level="WARN", module="STORE", extra={"key": key})
            return []

        out: list[Any] = []
        for obj in data:
            if not isinstance(obj, Mapping):
                continue
            try:
                out.append(spec.model.from_dict(obj, item))
            except (ValueError, TypeError, KeyError) as e:
                log(f"skipping unreadable record: {e}", level="DEBUG", module="STORE", extra={"key": key})
        return out

    def _save(self, item: ItemRef | None, kind: str, records: list[Any]) -> None:
        key = self.storage_key(item, kind)
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        try:
            ok = self.storage.write(key, payload)
        except Exception as e:
            log(f"write failed: {e}", level="WARN", module="STORE", extra={"key": key})
            ok = False
        if not ok:
            raise StoreWriteError(key)

    def list(self, item: ItemRef | None, kind: str) -> list[Any]:
        """Records newest-first by created_at; later inserts win ties."""
        records = self._load(item, kind)
        records.reverse()
        return sorted(records, key=lambda r: r.created_at or "", reverse=True)

    def get(self, item: ItemRef | None, kind: str, record_id: str) -> Any | None:
        for rec in self._load(item, kind):
            if rec.id == record_id:
                return rec
        return None

    # writes
    def append(self, item: ItemRef | None, kind: str, record: Mapping[str, Any]) -> Any:
        """Store a new record. Generates id and timestamps, returns the stored record."""
        spec = _spec(kind)
        records = self._load(item, kind)
        ts = self.clock()
        data = dict(record or {})
        data["id"] = new_id(spec.id_prefix)
        data["createdAt"] = ts
        if spec.tracks_updates:
            data["updatedAt"] = ts
        if item is not None and spec.per_item:
            data["itemId"] = item.item_id
            data["itemType"] = item.item_type
        stored = spec.model.from_dict(data, item)
        records.append(stored)
        self._save(item, kind, records)
        return stored

    def replace(
        self,
        item: ItemRef | None,
        kind: str,
        match: Callable[[Any], bool],
        fields: Mapping[str, Any],
    ) -> Any | None:
        """Update the first record matching `match` in place. None when nothing matches."""
        spec = _spec(kind)
        records = self._load(item, kind)
        for i, rec in enumerate(records):
            if not match(rec):
                continue
            changes = dict(fields or {})
            if spec.tracks_updates and "updated_at" not in changes:
                changes["updated_at"] = self.clock()
            updated = dataclasses.replace(rec, **changes)
            records[i] = updated
            self._save(item, kind, records)
            return updated
        return None

    def remove(self, item: ItemRef | None, kind: str, record_id: str) -> bool:
        records = self._load(item, kind)
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            return False
        self._save(item, kind, kept)
        return True


__all__ = ["KeyedRecordStore", "StoreWriteError", "KINDS", "Kind"]
