# services/remote_client.py
# Showcase - REST client for the ratings/comments API
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import json
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests

from _logging import log
from sc_platform.models import AggregateRating, Comment, Feedback, ItemRef, Message, Rating, RatingSubmission
from sc_platform.result import NetworkError, Ok, Result

_INBOX_MODELS: dict[str, Any] = {"feedback": Feedback, "messages": Message}


def safe_json(resp: requests.Response) -> Any:
    """Parsed body, or raises ValueError when the body is not JSON."""
    text = resp.text or ""
    if not text.strip():
        return {}
    ctype = (resp.headers.get("Content-Type") or "").lower()
    if "json" in ctype:
        return resp.json()
    return json.loads(text)


def request_with_retries(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout: float = 10.0,
    max_retries: int = 2,
    retry_on: tuple[int, ...] = (429, 500, 502, 503, 504),
    backoff_base: float = 0.5,
    **kwargs: Any,
) -> requests.Response:
    last: Any = None
    attempts = max(1, int(max_retries))
    for i in range(attempts):
        try:
            resp = session.request(method, url, timeout=timeout, **kwargs)
            if resp.status_code in retry_on and i < attempts - 1:
                wait = backoff_base * (2**i)
                if resp.status_code == 429:
                    try:
                        ra = resp.headers.get("Retry-After")
                        if ra:
                            wait = max(wait, float(ra))
                    except ValueError:
                        pass
                time.sleep(wait)
                last = resp
                continue
            return resp
        except requests.RequestException as e:
            last = e
            if i < attempts - 1:
                time.sleep(backoff_base * (2**i))
    if isinstance(last, requests.Response):
        return last
    raise requests.RequestException(f"request failed after retries: {method} {url}: {last}")


def _records(data: Any, parse: Callable[[Mapping[str, Any]], Any]) -> list[Any]:
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    out: list[Any] = []
    for obj in data:
        if isinstance(obj, Mapping):
            try:
                out.append(parse(obj))
            except (ValueError, TypeError, KeyError):
                continue
    return out


def _entries(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    return [dict(o) for o in data if isinstance(o, Mapping)]


def _entry(data: Any) -> dict[str, Any]:
    if not isinstance(data, Mapping) or not data.get("id"):
        raise ValueError("expected an object with an id")
    return dict(data)


def _submission(data: Any, item: ItemRef) -> RatingSubmission:
    """The upserted rating plus the server's average/count from the same response."""
    if not isinstance(data, Mapping) or "average" not in data or "count" not in data:
        raise ValueError("rating response without average/count")
    count = data["count"]
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError("rating response with a non-integer count")
    aggregate = AggregateRating(average=float(data["average"]), count=count)
    return RatingSubmission(rating=Rating.from_dict(data, item), aggregate=aggregate)


class RemoteClient:
    """
    Thin wrapper over the REST API. Every method returns Ok(...) or NetworkError;
    transport failures, non-2xx statuses and unparseable bodies never raise.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff_base: float = 0.5,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = str(base_url or "").rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    @classmethod
    def from_config(cls, remote_cfg: Mapping[str, Any], session: requests.Session | None = None) -> "RemoteClient":
        return cls(
            str(remote_cfg.get("base_url") or ""),
            timeout=float(remote_cfg.get("timeout") or 10.0),
            max_retries=int(remote_cfg.get("max_retries") or 2),
            session=session,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Result[Any]:
        endpoint = f"{method} {path}"
        if not self.base_url:
            return NetworkError("no API base url configured", endpoint=endpoint)
        url = f"{self.base_url}{path}"
        try:
            resp = request_with_retries(
                self.session,
                method,
                url,
                timeout=self.timeout,
                max_retries=self.max_retries,
                backoff_base=self.backoff_base,
                **kwargs,
            )
        except requests.RequestException as e:
            return NetworkError(str(e), endpoint=endpoint)

        if not (200 <= resp.status_code < 300):
            detail = ""
            try:
                body = safe_json(resp)
                if isinstance(body, Mapping):
                    detail = str(body.get("detail") or body.get("error") or "")
            except ValueError:
                pass
            return NetworkError(detail or "request failed", status=resp.status_code, endpoint=endpoint)
        try:
            data = safe_json(resp)
        except ValueError:
            return NetworkError("unparseable response body", status=resp.status_code, endpoint=endpoint)
        log("api call ok", level="DEBUG", module="REMOTE", extra={"endpoint": endpoint, "status": resp.status_code})
        return Ok(data)

    def _parsed(self, res: Result[Any], parse: Callable[[Any], Any]) -> Result[Any]:
        if not isinstance(res, Ok):
            return res
        try:
            return Ok(parse(res.value))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            return NetworkError(f"malformed response: {e}")

    @staticmethod
    def _item_params(item: ItemRef) -> dict[str, str]:
        return {"itemId": item.item_id, "itemType": item.item_type}

    # ratings
    def get_ratings(self, item: ItemRef) -> Result[list[Rating]]:
        res = self._request("GET", "/ratings", params=self._item_params(item))
        return self._parsed(res, lambda d: _records(d, lambda o: Rating.from_dict(o, item)))

    def post_rating(self, item: ItemRef, visitor_id: str, value: int) -> Result[RatingSubmission]:
        body = {"itemId": item.item_id, "itemType": item.item_type, "userId": visitor_id, "rating": value}
        res = self._request("POST", "/ratings", json=body)
        return self._parsed(res, lambda d: _submission(d, item))

    # comments
    def get_comments(self, item: ItemRef) -> Result[list[Comment]]:
        res = self._request("GET", "/comments", params=self._item_params(item))
        return self._parsed(res, lambda d: _records(d, lambda o: Comment.from_dict(o, item)))

    def post_comment(self, item: ItemRef, visitor_id: str, author: str, text: str) -> Result[Comment]:
        body = {"itemId": item.item_id, "itemType": item.item_type, "userId": visitor_id, "author": author, "text": text}
        res = self._request("POST", "/comments", json=body)
        return self._parsed(res, lambda d: Comment.from_dict(d, item))

    def put_comment(self, item: ItemRef, comment_id: str, visitor_id: str, text: str) -> Result[Comment | None]:
        res = self._request(
            "PUT",
            f"/comments/{comment_id}",
            params=self._item_params(item),
            json={"userId": visitor_id, "text": text},
        )

        def parse(d: Any) -> Comment | None:
            if isinstance(d, Mapping) and d.get("success") is False:
                return None
            return Comment.from_dict(d, item)

        return self._parsed(res, parse)

    def delete_comment(self, item: ItemRef, comment_id: str, visitor_id: str) -> Result[bool]:
        params = {**self._item_params(item), "userId": visitor_id}
        res = self._request("DELETE", f"/comments/{comment_id}", params=params)
        return self._parsed(res, lambda d: bool(isinstance(d, Mapping) and d.get("success")))

    # inbox
    def post_feedback(self, body: Mapping[str, Any]) -> Result[Feedback]:
        res = self._request("POST", "/feedback", json=dict(body))
        return self._parsed(res, Feedback.from_dict)

    def post_message(self, body: Mapping[str, Any]) -> Result[Message]:
        res = self._request("POST", "/messages", json=dict(body))
        return self._parsed(res, Message.from_dict)

    # kind is "feedback" or "messages"
    def get_inbox(self, kind: str) -> Result[list[Any]]:
        model = _INBOX_MODELS[kind]
        res = self._request("GET", f"/{kind}")
        return self._parsed(res, lambda d: _records(d, model.from_dict))

    def put_read(self, kind: str, record_id: str) -> Result[Any]:
        model = _INBOX_MODELS[kind]
        res = self._request("PUT", f"/{kind}/{record_id}/read")
        return self._parsed(res, model.from_dict)

    def delete_inbox(self, kind: str, record_id: str) -> Result[bool]:
        res = self._request("DELETE", f"/{kind}/{record_id}")
        return self._parsed(res, lambda d: bool(isinstance(d, Mapping) and d.get("success")))

    # catalog
    def get_catalog(self, section: str, kind: str | None = None) -> Result[list[dict[str, Any]]]:
        params = {"type": kind} if kind else None
        res = self._request("GET", f"/{section}", params=params)
        return self._parsed(res, _entries)

    def get_catalog_entry(self, section: str, entry_id: str) -> Result[dict[str, Any]]:
        res = self._request("GET", f"/{section}/{entry_id}")
        return self._parsed(res, _entry)


__all__ = ["RemoteClient", "request_with_retries", "safe_json"]
