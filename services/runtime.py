# services/runtime.py
# Showcase - objects shared by the API routers of one server process
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from _logging import log
from sc_platform.catalog import Catalog
from sc_platform.config_base import CONFIG_BASE, data_dir
from sc_platform.reconcile import Reconciler
from sc_platform.record_store import KeyedRecordStore
from sc_platform.storage import StorageBackend, build_storage

from .inbox import Inbox


@dataclass
class ServerRuntime:
    reconciler: Reconciler
    inbox: Inbox
    catalog: Catalog
    storage: StorageBackend


def build_runtime(
    cfg: Mapping[str, Any],
    *,
    storage: StorageBackend | None = None,
    catalog: Catalog | None = None,
) -> ServerRuntime:
    """Same Reconciler the clients run locally, over the server's own datastore."""
    server = cfg.get("server") or {}
    kind = str(server.get("backend") or "file")
    raw = storage or build_storage(kind, cfg, path=data_dir(dict(cfg)) / "store.json")
    store = KeyedRecordStore(raw)
    cat = catalog or Catalog.from_file(CONFIG_BASE() / "catalog.json")
    log(f"server datastore: {type(raw).__name__}", level="INFO", module="SERVER")
    return ServerRuntime(reconciler=Reconciler(store), inbox=Inbox(store), catalog=cat, storage=raw)


__all__ = ["ServerRuntime", "build_runtime"]
