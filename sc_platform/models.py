# sc_platform/models.py
# Showcase - records for portfolio items, comments, ratings and the visitor inbox
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import re
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

ITEM_TYPES: tuple[str, ...] = ("project", "achievement")
RATING_MIN = 1
RATING_MAX = 5

_B36 = string.digits + string.ascii_lowercase
_FRACTION = re.compile(r"\.(\d+)")


def _ms_z(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return _ms_z(datetime.now(timezone.utc))


def _parse_iso(s: str) -> datetime | None:
    t = s[:-1] + "+00:00" if s[-1:] in ("Z", "z") else s
    # fromisoformat on 3.10 only takes 3 or 6 fraction digits
    t = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), t, count=1)
    try:
        dt = datetime.fromisoformat(t)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def coerce_ts(v: Any) -> str:
    """
    Canonical UTC `YYYY-MM-DDTHH:MM:SS.mmmZ`, so string order is time order.
    ISO strings are re-emitted with milliseconds; numbers are epoch milliseconds
    (legacy local data). Unparseable strings pass through unchanged.
    """
    if v is None or isinstance(v, bool):
        return ""
    if isinstance(v, (int, float)):
        try:
            dt = datetime.fromtimestamp(float(v) / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return ""
        return _ms_z(dt)
    s = str(v).strip()
    if not s:
        return ""
    dt = _parse_iso(s)
    return _ms_z(dt) if dt else s


def random_suffix(n: int = 9) -> str:
    return "".join(secrets.choice(_B36) for _ in range(n))


def new_id(prefix: str) -> str:
    # <prefix>_<epoch-ms>_<9 base-36 chars>
    return f"{prefix}_{int(time.time() * 1000)}_{random_suffix()}"


def _req_str(data: Mapping[str, Any], *keys: str) -> str:
    for k in keys:
        v = data.get(k)
        if v is not None and str(v).strip():
            return str(v).strip()
    return ""


@dataclass(frozen=True)
class ItemRef:
    """A portfolio entry addressed by (item_type, item_id)."""
    item_type: str
    item_id: str

    @property
    def key(self) -> str:
        return f"{self.item_type}_{self.item_id}"


@dataclass
class Rating:
    id: str
    item_id: str
    item_type: str
    visitor_id: str
    value: int
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], item: ItemRef | None = None) -> "Rating":
        rid = _req_str(data, "id", "_id")
        if not rid:
            raise ValueError("rating without id")
        value = data.get("rating", data.get("value"))
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"rating {rid} has no integer value")
        if not (RATING_MIN <= value <= RATING_MAX):
            raise ValueError(f"rating {rid} value {value} outside {RATING_MIN}-{RATING_MAX}")
        created = coerce_ts(data.get("createdAt") or data.get("timestamp"))
        return cls(
            id=rid,
            item_id=_req_str(data, "itemId") or (item.item_id if item else ""),
            item_type=_req_str(data, "itemType") or (item.item_type if item else ""),
            visitor_id=_req_str(data, "userId", "visitorId"),
            value=value,
            created_at=created,
            updated_at=coerce_ts(data.get("updatedAt")) or created,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "itemId": self.item_id,
            "itemType": self.item_type,
            "userId": self.visitor_id,
            "rating": self.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class Comment:
    id: str
    item_id: str
    item_type: str
    visitor_id: str
    author: str
    text: str
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], item: ItemRef | None = None) -> "Comment":
        cid = _req_str(data, "id", "_id")
        if not cid:
            raise ValueError("comment without id")
        created = coerce_ts(data.get("createdAt") or data.get("timestamp"))
        return cls(
            id=cid,
            item_id=_req_str(data, "itemId") or (item.item_id if item else ""),
            item_type=_req_str(data, "itemType") or (item.item_type if item else ""),
            visitor_id=_req_str(data, "userId", "visitorId"),
            author=str(data.get("author") or ""),
            text=str(data.get("text") or ""),
            created_at=created,
            updated_at=coerce_ts(data.get("updatedAt")) or created,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "itemId": self.item_id,
            "itemType": self.item_type,
            "userId": self.visitor_id,
            "author": self.author,
            "text": self.text,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class AggregateRating:
    """Derived from the ratings of one item on every read. Never stored."""
    average: float = 0.0
    count: int = 0

    @property
    def display(self) -> str:
        return f"{self.average:.1f}"

    def to_dict(self) -> dict[str, Any]:
        return {"average": self.average, "count": self.count, "display": self.display}


@dataclass
class Feedback:
    id: str
    user_name: str
    feedback: str
    project_name: str = ""
    project_id: str = ""
    created_at: str = ""
    read: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], item: ItemRef | None = None) -> "Feedback":
        fid = _req_str(data, "id", "_id")
        if not fid:
            raise ValueError("feedback without id")
        return cls(
            id=fid,
            user_name=str(data.get("userName") or ""),
            feedback=str(data.get("feedback") or ""),
            project_name=str(data.get("projectName") or ""),
            project_id=str(data.get("projectId") or ""),
            created_at=coerce_ts(data.get("createdAt") or data.get("timestamp")),
            read=bool(data.get("read", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userName": self.user_name,
            "feedback": self.feedback,
            "projectName": self.project_name,
            "projectId": self.project_id,
            "createdAt": self.created_at,
            "read": self.read,
        }


@dataclass
class Message:
    id: str
    name: str
    message: str
    project_name: str = ""
    project_id: str = ""
    created_at: str = ""
    read: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], item: ItemRef | None = None) -> "Message":
        mid = _req_str(data, "id", "_id")
        if not mid:
            raise ValueError("message without id")
        return cls(
            id=mid,
            name=str(data.get("name") or ""),
            message=str(data.get("message") or ""),
            project_name=str(data.get("projectName") or ""),
            project_id=str(data.get("projectId") or ""),
            created_at=coerce_ts(data.get("createdAt") or data.get("timestamp")),
            read=bool(data.get("read", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "message": self.message,
            "projectName": self.project_name,
            "projectId": self.project_id,
            "createdAt": self.created_at,
            "read": self.read,
        }


@dataclass
class RatingSubmission:
    rating: Rating
    aggregate: AggregateRating = field(default_factory=AggregateRating)

    def to_dict(self) -> dict[str, Any]:
        out = self.rating.to_dict()
        out["average"] = self.aggregate.average
        out["count"] = self.aggregate.count
        return out
