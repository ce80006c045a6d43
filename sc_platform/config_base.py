# sc_platform/config_base.py
# Showcase - configuration loading, defaults and normalization
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import copy
import json
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Any, Dict, List

# ------------------------------------------------------------
# Base dir resolution
# ------------------------------------------------------------
def CONFIG_BASE() -> Path:
    """
    Determine the base directory for config and data files.

    Priority:
      1) $CONFIG_BASE if set
      2) /config (when running in a container that mounts /config)
      3) Project root (one level up from this package)
    """
    env = os.getenv("CONFIG_BASE")
    if env:
        return Path(env)

    if Path("/app").exists():
        return Path("/config")

    return Path(__file__).resolve().parents[1]


# Default config structure
DEFAULT_CFG: Dict[str, Any] = {
    # --- Persistence ---------------------------------------------------------
    "storage": {
        "mode": "local",                                # "local" or "remote"; chosen once at startup
        "local": {
            "backend": "file",                          # "file", "memory" or "document"
            "path": "",                                 # JSON file for the file backend. Empty = <CONFIG_BASE>/local_storage.json
        },
        "remote": {
            "base_url": "http://localhost:3001/api",    # REST API root (no trailing slash needed)
            "timeout": 10.0,                            # Per-request timeout (seconds)
            "max_retries": 2,                           # Attempts for 429/5xx before giving up (1-5)
        },
        "document": {
            "base_url": "https://firestore.googleapis.com/v1",
            "project_id": "",                           # Cloud project holding the document database
            "database": "(default)",
            "collection": "portfolio",                  # One document per storage key
            "api_key": "",                              # Web API key (sent as ?key=)
            "timeout": 10.0,
        },
    },

    # --- Visitor identity ----------------------------------------------------
    "identity": {
        "storage_key": "userId",                        # Raw storage key holding the visitor id
    },

    # --- API server ----------------------------------------------------------
    "server": {
        "host": "0.0.0.0",
        "port": 3001,
        "cors_origins": ["http://localhost:3000", "http://127.0.0.1:3000"],
        "data_dir": "",                                 # Empty = <CONFIG_BASE>/data
        "backend": "file",                              # Raw storage behind the API: "file", "memory" or "document"
    },

    # --- Runtime -------------------------------------------------------------
    "runtime": {
        "debug": False,                                 # DEBUG lines in the console log
        "debug_http": False,                            # uvicorn access log
    },
}

_ALLOWED_MODES: List[str] = ["local", "remote"]
_ALLOWED_BACKENDS: List[str] = ["file", "memory", "document"]


# ------------------------------------------------------------
# Helpers: paths, IO, merging, normalization
# ------------------------------------------------------------
def _cfg_file() -> Path:
    return CONFIG_BASE() / "config.json"


def config_path() -> Path:
    return _cfg_file()


def _read_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = f".{time.time_ns()}.{os.getpid()}.{threading.get_ident()}.{secrets.token_hex(4)}.tmp"
    tmp = p.with_suffix(suffix)

    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    tmp.replace(p)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)  # type: ignore[assignment]
        else:
            out[k] = v
    return out


def _as_float(v: Any, default: float) -> float:
    try:
        f = float(v)
    except Exception:
        return default
    return f if f > 0 else default


def _as_int(v: Any, default: int, lo: int, hi: int) -> int:
    try:
        i = int(v)
    except Exception:
        return default
    return max(lo, min(hi, i))


def _normalize_storage(storage: Dict[str, Any]) -> Dict[str, Any]:
    s = dict(storage or {})
    defaults = DEFAULT_CFG["storage"]

    mode = str(s.get("mode") or "local").strip().lower()
    s["mode"] = mode if mode in _ALLOWED_MODES else "local"

    local = dict(s.get("local") or {})
    backend = str(local.get("backend") or "file").strip().lower()
    local["backend"] = backend if backend in _ALLOWED_BACKENDS else "file"
    local["path"] = str(local.get("path") or "").strip()
    s["local"] = local

    remote = dict(s.get("remote") or {})
    remote["base_url"] = str(remote.get("base_url") or defaults["remote"]["base_url"]).strip().rstrip("/")
    remote["timeout"] = _as_float(remote.get("timeout"), defaults["remote"]["timeout"])
    remote["max_retries"] = _as_int(remote.get("max_retries"), defaults["remote"]["max_retries"], 1, 5)
    s["remote"] = remote

    doc = dict(s.get("document") or {})
    doc["base_url"] = str(doc.get("base_url") or defaults["document"]["base_url"]).strip().rstrip("/")
    doc["timeout"] = _as_float(doc.get("timeout"), defaults["document"]["timeout"])
    doc["collection"] = str(doc.get("collection") or defaults["document"]["collection"]).strip()
    doc["database"] = str(doc.get("database") or defaults["document"]["database"]).strip()
    s["document"] = doc
    return s


def _normalize_server(server: Dict[str, Any]) -> Dict[str, Any]:
    v = dict(server or {})
    backend = str(v.get("backend") or "file").strip().lower()
    v["backend"] = backend if backend in _ALLOWED_BACKENDS else "file"
    v["port"] = _as_int(v.get("port"), DEFAULT_CFG["server"]["port"], 1, 65535)
    origins = v.get("cors_origins")
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    v["cors_origins"] = [str(o) for o in origins] if isinstance(origins, list) else []
    return v


def normalize_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(cfg or {})
    out["storage"] = _normalize_storage(out.get("storage") or {})
    out["server"] = _normalize_server(out.get("server") or {})
    ident = dict(out.get("identity") or {})
    ident["storage_key"] = str(ident.get("storage_key") or "userId").strip() or "userId"
    out["identity"] = ident
    return out


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """Read config.json over the defaults. A missing or broken file yields the defaults."""
    p = _cfg_file()
    user_cfg: Dict[str, Any] = {}
    if p.exists():
        try:
            user_cfg = _read_json(p)
        except Exception:
            user_cfg = {}
    if not isinstance(user_cfg, dict):
        user_cfg = {}

    return normalize_config(_deep_merge(DEFAULT_CFG, user_cfg))


def save_config(cfg: Dict[str, Any]) -> None:
    _write_json_atomic(_cfg_file(), normalize_config(dict(cfg or {})))


def data_dir(cfg: Dict[str, Any]) -> Path:
    raw = str(((cfg.get("server") or {}).get("data_dir")) or "").strip()
    return Path(raw) if raw else CONFIG_BASE() / "data"


def local_storage_path(cfg: Dict[str, Any]) -> Path:
    raw = str((((cfg.get("storage") or {}).get("local") or {}).get("path")) or "").strip()
    return Path(raw) if raw else CONFIG_BASE() / "local_storage.json"


def redact_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(cfg or {})
    doc = ((out.get("storage") or {}).get("document") or {})
    if isinstance(doc, dict) and str(doc.get("api_key") or "").strip():
        doc["api_key"] = "••••••••"
    return out
