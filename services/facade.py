# services/facade.py
# Showcase - persistence facade: REST API with local fallback, or local only
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import requests

from _logging import log
from sc_platform.aggregate import compute_aggregate
from sc_platform.catalog import Catalog
from sc_platform.config_base import CONFIG_BASE, local_storage_path
from sc_platform.identity import IdentityProvider, VisitorSession
from sc_platform.models import AggregateRating, Comment, Feedback, ItemRef, Message, Rating, RatingSubmission
from sc_platform.reconcile import (
    Reconciler,
    validate_author,
    validate_comment_text,
    validate_rating_value,
)
from sc_platform.record_store import KeyedRecordStore
from sc_platform.result import NetworkError, Ok, Result
from sc_platform.storage import StorageBackend, build_storage

from .inbox import Inbox, check_kind, feedback_fields, message_fields
from .remote_client import RemoteClient


class PersistenceFacade(Protocol):
    name: str

    def list_ratings(self, item: ItemRef) -> list[Rating]: ...
    def aggregate(self, item: ItemRef) -> AggregateRating: ...
    def user_rating(self, session: VisitorSession, item: ItemRef) -> int | None: ...
    def submit_rating(self, session: VisitorSession, item: ItemRef, value: Any) -> Result[RatingSubmission]: ...
    def list_comments(self, item: ItemRef) -> list[Comment]: ...
    def add_comment(self, session: VisitorSession, item: ItemRef, author: Any, text: Any) -> Result[Comment]: ...
    def edit_comment(self, session: VisitorSession, item: ItemRef, comment_id: str, text: Any) -> Result[Comment | None]: ...
    def delete_comment(self, session: VisitorSession, item: ItemRef, comment_id: str) -> Result[bool]: ...
    def submit_feedback(self, user_name: Any, feedback: Any, project_name: Any = "", project_id: Any = "") -> Result[Feedback]: ...
    def send_message(self, name: Any, message: Any, project_name: Any = "", project_id: Any = "") -> Result[Message]: ...
    def list_feedback(self) -> list[Feedback]: ...
    def list_messages(self) -> list[Message]: ...
    def mark_read(self, kind: str, record_id: str) -> Result[Any | None]: ...
    def delete_inbox(self, kind: str, record_id: str) -> Result[bool]: ...
    def projects(self, kind: str | None = None) -> list[dict[str, Any]]: ...
    def achievements(self, kind: str | None = None) -> list[dict[str, Any]]: ...
    def project(self, project_id: str) -> dict[str, Any] | None: ...
    def achievement(self, achievement_id: str) -> dict[str, Any] | None: ...


class LocalBackend:
    name = "local"

    def __init__(self, reconciler: Reconciler, inbox: Inbox, catalog: Catalog | None = None) -> None:
        self.reconciler = reconciler
        self.inbox = inbox
        self.catalog = catalog or Catalog()

    @classmethod
    def over(cls, storage: StorageBackend, catalog: Catalog | None = None) -> "LocalBackend":
        store = KeyedRecordStore(storage)
        return cls(Reconciler(store), Inbox(store), catalog)

    def list_ratings(self, item: ItemRef) -> list[Rating]:
        return self.reconciler.list_ratings(item)

    def aggregate(self, item: ItemRef) -> AggregateRating:
        return self.reconciler.aggregate(item)

    def user_rating(self, session: VisitorSession, item: ItemRef) -> int | None:
        return self.reconciler.user_rating(session, item)

    def submit_rating(self, session: VisitorSession, item: ItemRef, value: Any) -> Result[RatingSubmission]:
        return self.reconciler.submit_rating(session, item, value)

    def list_comments(self, item: ItemRef) -> list[Comment]:
        return self.reconciler.list_comments(item)

    def add_comment(self, session: VisitorSession, item: ItemRef, author: Any, text: Any) -> Result[Comment]:
        return self.reconciler.add_comment(session, item, author, text)

    def edit_comment(self, session: VisitorSession, item: ItemRef, comment_id: str, text: Any) -> Result[Comment | None]:
        return self.reconciler.edit_comment(session, item, comment_id, text)

    def delete_comment(self, session: VisitorSession, item: ItemRef, comment_id: str) -> Result[bool]:
        return self.reconciler.delete_comment(session, item, comment_id)

    def submit_feedback(self, user_name: Any, feedback: Any, project_name: Any = "", project_id: Any = "") -> Result[Feedback]:
        return self.inbox.submit_feedback(user_name, feedback, project_name, project_id)

    def send_message(self, name: Any, message: Any, project_name: Any = "", project_id: Any = "") -> Result[Message]:
        return self.inbox.send_message(name, message, project_name, project_id)

    def list_feedback(self) -> list[Feedback]:
        return self.inbox.list_feedback()

    def list_messages(self) -> list[Message]:
        return self.inbox.list_messages()

    def mark_read(self, kind: str, record_id: str) -> Result[Any | None]:
        return self.inbox.mark_read(kind, record_id)

    def delete_inbox(self, kind: str, record_id: str) -> Result[bool]:
        return self.inbox.delete(kind, record_id)

    def projects(self, kind: str | None = None) -> list[dict[str, Any]]:
        return self.catalog.projects(kind)

    def achievements(self, kind: str | None = None) -> list[dict[str, Any]]:
        return self.catalog.achievements(kind)

    def project(self, project_id: str) -> dict[str, Any] | None:
        return self.catalog.project(project_id)

    def achievement(self, achievement_id: str) -> dict[str, Any] | None:
        return self.catalog.achievement(achievement_id)


class RemoteBackend:
    """
    Calls the REST API; any NetworkError falls through to the embedded LocalBackend.
    Input is validated before the network is touched.
    """

    name = "remote"

    def __init__(self, client: RemoteClient, fallback: LocalBackend) -> None:
        self.client = client
        self.fallback = fallback

    def _downgrade(self, err: NetworkError, op: str) -> None:
        log(
            "API call failed, using local storage",
            level="WARN",
            module="FACADE",
            extra={"op": op, "endpoint": err.endpoint, "status": err.status, "error": err.message},
        )

    # ratings
    def list_ratings(self, item: ItemRef) -> list[Rating]:
        res = self.client.get_ratings(item)
        if isinstance(res, Ok):
            return sorted(res.value, key=lambda r: r.created_at or "", reverse=True)
        self._downgrade(res, "list_ratings")
        return self.fallback.list_ratings(item)

    def aggregate(self, item: ItemRef) -> AggregateRating:
        return compute_aggregate(self.list_ratings(item))

    def user_rating(self, session: VisitorSession, item: ItemRef) -> int | None:
        for r in self.list_ratings(item):
            if r.visitor_id == session.visitor_id:
                return r.value
        return None

    def submit_rating(self, session: VisitorSession, item: ItemRef, value: Any) -> Result[RatingSubmission]:
        checked = validate_rating_value(value)
        if not isinstance(checked, Ok):
            return checked
        res = self.client.post_rating(item, session.visitor_id, checked.value)
        if isinstance(res, Ok):
            # average/count come back with the upsert
            return res
        self._downgrade(res, "submit_rating")
        return self.fallback.submit_rating(session, item, checked.value)

    # comments
    def list_comments(self, item: ItemRef) -> list[Comment]:
        res = self.client.get_comments(item)
        if isinstance(res, Ok):
            return sorted(res.value, key=lambda c: c.created_at or "", reverse=True)
        self._downgrade(res, "list_comments")
        return self.fallback.list_comments(item)

    def add_comment(self, session: VisitorSession, item: ItemRef, author: Any, text: Any) -> Result[Comment]:
        a = validate_author(author)
        if not isinstance(a, Ok):
            return a
        t = validate_comment_text(text)
        if not isinstance(t, Ok):
            return t
        res = self.client.post_comment(item, session.visitor_id, a.value, t.value)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "add_comment")
        return self.fallback.add_comment(session, item, a.value, t.value)

    def _foreign(self, session: VisitorSession, item: ItemRef, comment_id: str) -> bool:
        res = self.client.get_comments(item)
        if not isinstance(res, Ok):
            return False
        for c in res.value:
            if c.id == comment_id:
                return c.visitor_id != session.visitor_id
        return False

    def edit_comment(self, session: VisitorSession, item: ItemRef, comment_id: str, text: Any) -> Result[Comment | None]:
        t = validate_comment_text(text)
        if not isinstance(t, Ok):
            return t
        if self._foreign(session, item, comment_id):
            log("ownership check refused", level="WARN", module="FACADE", extra={"item": item.key, "comment": comment_id})
            return Ok(None)
        res = self.client.put_comment(item, comment_id, session.visitor_id, t.value)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "edit_comment")
        return self.fallback.edit_comment(session, item, comment_id, t.value)

    def delete_comment(self, session: VisitorSession, item: ItemRef, comment_id: str) -> Result[bool]:
        if self._foreign(session, item, comment_id):
            log("ownership check refused", level="WARN", module="FACADE", extra={"item": item.key, "comment": comment_id})
            return Ok(False)
        res = self.client.delete_comment(item, comment_id, session.visitor_id)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "delete_comment")
        return self.fallback.delete_comment(session, item, comment_id)

    # inbox
    def submit_feedback(self, user_name: Any, feedback: Any, project_name: Any = "", project_id: Any = "") -> Result[Feedback]:
        fields = feedback_fields(user_name, feedback, project_name, project_id)
        if not isinstance(fields, Ok):
            return fields
        res = self.client.post_feedback(fields.value)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "submit_feedback")
        return self.fallback.submit_feedback(**_inbox_kwargs(fields.value, "userName", "feedback", "user_name"))

    def send_message(self, name: Any, message: Any, project_name: Any = "", project_id: Any = "") -> Result[Message]:
        fields = message_fields(name, message, project_name, project_id)
        if not isinstance(fields, Ok):
            return fields
        res = self.client.post_message(fields.value)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "send_message")
        return self.fallback.send_message(**_inbox_kwargs(fields.value, "name", "message", "name"))

    def list_feedback(self) -> list[Feedback]:
        res = self.client.get_inbox("feedback")
        if isinstance(res, Ok):
            return sorted(res.value, key=lambda r: r.created_at or "", reverse=True)
        self._downgrade(res, "list_feedback")
        return self.fallback.list_feedback()

    def list_messages(self) -> list[Message]:
        res = self.client.get_inbox("messages")
        if isinstance(res, Ok):
            return sorted(res.value, key=lambda r: r.created_at or "", reverse=True)
        self._downgrade(res, "list_messages")
        return self.fallback.list_messages()

    def mark_read(self, kind: str, record_id: str) -> Result[Any | None]:
        bad = check_kind(kind)
        if bad:
            return bad
        res = self.client.put_read(kind, record_id)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "mark_read")
        return self.fallback.mark_read(kind, record_id)

    def delete_inbox(self, kind: str, record_id: str) -> Result[bool]:
        bad = check_kind(kind)
        if bad:
            return bad
        res = self.client.delete_inbox(kind, record_id)
        if isinstance(res, Ok):
            return res
        self._downgrade(res, "delete_inbox")
        return self.fallback.delete_inbox(kind, record_id)

    # catalog
    def projects(self, kind: str | None = None) -> list[dict[str, Any]]:
        res = self.client.get_catalog("projects", kind)
        if isinstance(res, Ok):
            return res.value
        self._downgrade(res, "projects")
        return self.fallback.projects(kind)

    def achievements(self, kind: str | None = None) -> list[dict[str, Any]]:
        res = self.client.get_catalog("achievements", kind)
        if isinstance(res, Ok):
            return res.value
        self._downgrade(res, "achievements")
        return self.fallback.achievements(kind)

    def project(self, project_id: str) -> dict[str, Any] | None:
        res = self.client.get_catalog_entry("projects", project_id)
        if isinstance(res, Ok):
            return res.value
        self._downgrade(res, "project")
        return self.fallback.project(project_id)

    def achievement(self, achievement_id: str) -> dict[str, Any] | None:
        res = self.client.get_catalog_entry("achievements", achievement_id)
        if isinstance(res, Ok):
            return res.value
        self._downgrade(res, "achievement")
        return self.fallback.achievement(achievement_id)


def _inbox_kwargs(fields: Mapping[str, Any], who: str, body: str, who_arg: str) -> dict[str, Any]:
    return {
        who_arg: fields[who],
        body: fields[body],
        "project_name": fields.get("projectName", ""),
        "project_id": fields.get("projectId", ""),
    }


@dataclass
class Client:
    """What a front end needs: the facade, chosen once, and the visitor identity."""
    facade: PersistenceFacade
    identity: IdentityProvider
    storage: StorageBackend

    def session(self) -> VisitorSession:
        return self.identity.session()


def build_facade(
    cfg: Mapping[str, Any],
    *,
    storage: StorageBackend | None = None,
    catalog: Catalog | None = None,
    http: requests.Session | None = None,
) -> PersistenceFacade:
    st = cfg.get("storage") or {}
    raw = storage or build_storage(
        str((st.get("local") or {}).get("backend") or "file"),
        cfg,
        path=local_storage_path(dict(cfg)),
    )
    local = LocalBackend.over(raw, catalog or Catalog.from_file(CONFIG_BASE() / "catalog.json"))
    mode = str(st.get("mode") or "local").strip().lower()
    if mode == "remote":
        client = RemoteClient.from_config(st.get("remote") or {}, session=http)
        log(f"persistence: remote API at {client.base_url} with local fallback", level="INFO", module="FACADE")
        return RemoteBackend(client, local)
    log("persistence: local storage", level="INFO", module="FACADE")
    return local


def build_client(
    cfg: Mapping[str, Any],
    *,
    storage: StorageBackend | None = None,
    catalog: Catalog | None = None,
    http: requests.Session | None = None,
) -> Client:
    st = cfg.get("storage") or {}
    raw = storage or build_storage(
        str((st.get("local") or {}).get("backend") or "file"),
        cfg,
        path=local_storage_path(dict(cfg)),
    )
    key = str((cfg.get("identity") or {}).get("storage_key") or "userId")
    return Client(
        facade=build_facade(cfg, storage=raw, catalog=catalog, http=http),
        identity=IdentityProvider(raw, key),
        storage=raw,
    )


__all__ = [
    "PersistenceFacade",
    "LocalBackend",
    "RemoteBackend",
    "Client",
    "build_facade",
    "build_client",
]
