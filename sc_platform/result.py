# sc_platform/result.py
# Showcase - explicit result types for core and remote operations
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class NetworkError:
    message: str
    status: int | None = None
    endpoint: str = ""

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class StorageError:
    message: str
    key: str = ""

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], ValidationError, NetworkError, StorageError]


__all__ = ["Ok", "ValidationError", "NetworkError", "StorageError", "Result"]
