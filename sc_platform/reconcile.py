# sc_platform/reconcile.py
# Showcase - rating upsert and comment ownership rules
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from typing import Any

from _logging import log

from .aggregate import compute_aggregate
from .identity import VisitorSession
from .models import (
    ITEM_TYPES,
    RATING_MAX,
    RATING_MIN,
    AggregateRating,
    Comment,
    ItemRef,
    Rating,
    RatingSubmission,
)
from .record_store import KeyedRecordStore, StoreWriteError
from .result import Ok, Result, StorageError, ValidationError

MAX_AUTHOR_LEN = 120
MAX_TEXT_LEN = 5000


def parse_item(item_type: Any, item_id: Any) -> Result[ItemRef]:
    t = str(item_type or "").strip().lower()
    if t not in ITEM_TYPES:
        return ValidationError("itemType", f"itemType must be one of {', '.join(ITEM_TYPES)}")
    i = str(item_id or "").strip()
    if not i:
        return ValidationError("itemId", "itemId is required")
    return Ok(ItemRef(t, i))


def validate_rating_value(value: Any) -> Result[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return ValidationError("rating", "rating must be an integer")
    if not (RATING_MIN <= value <= RATING_MAX):
        return ValidationError("rating", f"rating must be between {RATING_MIN} and {RATING_MAX}")
    return Ok(value)


def validate_comment_text(text: Any) -> Result[str]:
    t = str(text or "").strip()
    if not t:
        return ValidationError("text", "comment text is required")
    if len(t) > MAX_TEXT_LEN:
        return ValidationError("text", f"comment text is limited to {MAX_TEXT_LEN} characters")
    return Ok(t)


def validate_author(author: Any) -> Result[str]:
    a = str(author or "").strip()
    if not a:
        return ValidationError("author", "name is required")
    if len(a) > MAX_AUTHOR_LEN:
        return ValidationError("author", f"name is limited to {MAX_AUTHOR_LEN} characters")
    return Ok(a)


def _session_ok(session: VisitorSession) -> ValidationError | None:
    if not (session and str(session.visitor_id or "").strip()):
        return ValidationError("userId", "visitor id is required")
    return None


class Reconciler:
    """Rating upsert, comment lifecycle and aggregate reads over a KeyedRecordStore."""

    def __init__(self, store: KeyedRecordStore) -> None:
        self.store = store

    # ratings
    def list_ratings(self, item: ItemRef) -> list[Rating]:
        return self.store.list(item, "ratings")

    def aggregate(self, item: ItemRef) -> AggregateRating:
        return compute_aggregate(self.list_ratings(item))

    def user_rating(self, session: VisitorSession, item: ItemRef) -> int | None:
        for r in self.list_ratings(item):
            if r.visitor_id == session.visitor_id:
                return r.value
        return None

    def submit_rating(self, session: VisitorSession, item: ItemRef, value: Any) -> Result[RatingSubmission]:
        bad = _session_ok(session)
        if bad:
            return bad
        checked = validate_rating_value(value)
        if not isinstance(checked, Ok):
            return checked

        vid = session.visitor_id
        try:
            # at most one rating per (item, visitor): update in place, keep id and created_at
            rating = self.store.replace(
                item,
                "ratings",
                lambda r: r.visitor_id == vid,
                {"value": checked.value},
            )
            if rating is None:
                rating = self.store.append(item, "ratings", {"userId": vid, "rating": checked.value})
                log("rating created", level="DEBUG", module="RECONCILE", extra={"item": item.key, "value": checked.value})
            else:
                log("rating updated", level="DEBUG", module="RECONCILE", extra={"item": item.key, "value": checked.value})
                # legacy data may hold duplicates for this visitor
                for extra in self.list_ratings(item):
                    if extra.visitor_id == vid and extra.id != rating.id:
                        self.store.remove(item, "ratings", extra.id)
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)

        return Ok(RatingSubmission(rating=rating, aggregate=self.aggregate(item)))

    # comments
    def list_comments(self, item: ItemRef) -> list[Comment]:
        return self.store.list(item, "comments")

    def add_comment(self, session: VisitorSession, item: ItemRef, author: Any, text: Any) -> Result[Comment]:
        bad = _session_ok(session)
        if bad:
            return bad
        a = validate_author(author)
        if not isinstance(a, Ok):
            return a
        t = validate_comment_text(text)
        if not isinstance(t, Ok):
            return t
        try:
            comment = self.store.append(
                item,
                "comments",
                {"userId": session.visitor_id, "author": a.value, "text": t.value},
            )
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)
        return Ok(comment)

    def _owned(self, session: VisitorSession, item: ItemRef, comment_id: str) -> Comment | None:
        comment = self.store.get(item, "comments", comment_id)
        if comment is None:
            return None
        if comment.visitor_id != session.visitor_id:
            log("ownership check refused", level="WARN", module="RECONCILE", extra={"item": item.key, "comment": comment_id})
            return None
        return comment

    def find_comment(self, item: ItemRef, comment_id: str) -> Comment | None:
        return self.store.get(item, "comments", comment_id)

    def edit_comment(self, session: VisitorSession, item: ItemRef, comment_id: str, text: Any) -> Result[Comment | None]:
        """Ok(None) when the comment is missing or belongs to another visitor."""
        t = validate_comment_text(text)
        if not isinstance(t, Ok):
            return t
        if self._owned(session, item, comment_id) is None:
            return Ok(None)
        vid = session.visitor_id
        try:
            updated = self.store.replace(
                item,
                "comments",
                lambda c: c.id == comment_id and c.visitor_id == vid,
                {"text": t.value},
            )
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)
        return Ok(updated)

    def delete_comment(self, session: VisitorSession, item: ItemRef, comment_id: str) -> Result[bool]:
        if self._owned(session, item, comment_id) is None:
            return Ok(False)
        try:
            return Ok(self.store.remove(item, "comments", comment_id))
        except StoreWriteError as e:
            return StorageError(str(e), key=e.key)


__all__ = [
    "Reconciler",
    "parse_item",
    "validate_rating_value",
    "validate_comment_text",
    "validate_author",
]
