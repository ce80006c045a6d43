# services/inbox.py
# Showcase - visitor feedback and contact messages for the portfolio owner
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any

from _logging import log
from sc_platform.models import Feedback, Message
from sc_platform.record_store import KeyedRecordStore, StoreWriteError
from sc_platform.result import Ok, Result, StorageError, ValidationError

MAX_BODY_LEN = 5000
INBOX_KINDS: tuple[str, ...] = ("feedback", "messages")


def _required(field: str, value: Any, label: str) -> Result[str]:
    s = str(value or "").strip()
    if not s:
        return ValidationError(field, f"{label} is required")
    if len(s) > MAX_BODY_LEN:
        return ValidationError(field, f"{label} is limited to {MAX_BODY_LEN} characters")
    return Ok(s)


def check_kind(kind: Any) -> ValidationError | None:
    if kind not in INBOX_KINDS:
        return ValidationError("kind", f"kind must be one of {', '.join(INBOX_KINDS)}")
    return None


def feedback_fields(user_name: Any, feedback: Any, project_name: Any = "", project_id: Any = "") -> Result[dict[str, Any]]:
    n = _required("userName", user_name, "name")
    if not isinstance(n, Ok):
        return n
    f = _required("feedback", feedback, "feedback")
    if not isinstance(f, Ok):
        return f
    return Ok({
        "userName": n.value,
        "feedback": f.value,
        "projectName": str(project_name or "").strip(),
        "projectId": str(project_id or "").strip(),
    })


def message_fields(name: Any, message: Any, project_name: Any = "", project_id: Any = "") -> Result[dict[str, Any]]:
    n = _required("name", name, "name")
    if not isinstance(n, Ok):
        return n
    m = _required("message", message, "message")
    if not isinstance(m, Ok):
        return m
    return Ok({
        "name": n.value,
        "message": m.value,
        "projectName": str(project_name or "").strip(),
        "projectId": str(project_id or "").strip(),
    })


class Inbox:
    def __init__(self, store: KeyedRecordStore) -> None:
        self.store = store

    def _append(self, kind: str, fields: Result[dict[str, Any]]) -> Result[Any]:
        if not isinstance(fields, Ok):
            return fields
        try:
            rec = self.store.append(None, kind, {**fields.value, "read": False})
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)
        log(f"{kind} received", level="INFO", module="INBOX", extra={"id": rec.id})
        return Ok(rec)

    def submit_feedback(self, user_name: Any, feedback: Any, project_name: Any = "", project_id: Any = "") -> Result[Feedback]:
        return self._append("feedback", feedback_fields(user_name, feedback, project_name, project_id))

    def list_feedback(self) -> list[Feedback]:
        return self.store.list(None, "feedback")

    def send_message(self, name: Any, message: Any, project_name: Any = "", project_id: Any = "") -> Result[Message]:
        return self._append("messages", message_fields(name, message, project_name, project_id))

    def list_messages(self) -> list[Message]:
        return self.store.list(None, "messages")

    def mark_read(self, kind: str, record_id: str) -> Result[Any | None]:
        bad = check_kind(kind)
        if bad:
            return bad
        try:
            return Ok(self.store.replace(None, kind, lambda r: r.id == record_id, {"read": True}))
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)

    def delete(self, kind: str, record_id: str) -> Result[bool]:
        bad = check_kind(kind)
        if bad:
            return bad
        try:
            return Ok(self.store.remove(None, kind, record_id))
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)


__all__ = ["Inbox", "INBOX_KINDS", "check_kind", "feedback_fields", "message_fields"]
