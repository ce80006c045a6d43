# services/__init__.py
# Showcase - service layer: persistence facade, remote client, inbox, server runtime
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from .facade import Client, LocalBackend, RemoteBackend, build_client, build_facade
from .inbox import Inbox
from .remote_client import RemoteClient
from .runtime import ServerRuntime, build_runtime

__all__ = [
    "Client",
    "LocalBackend",
    "RemoteBackend",
    "RemoteClient",
    "Inbox",
    "ServerRuntime",
    "build_client",
    "build_facade",
    "build_runtime",
]
