# _logging.py
# Showcase - console logger with module tags, key=value extras and an optional JSON lines file.
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations
import sys, datetime, json, os, threading, time
from typing import Any, Optional, TextIO, Mapping, Dict

from sc_platform.config_base import config_path

RESET = "\033[0m"
DIM = "\033[90m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[33m"
BLUE = "\033[94m"

LEVELS = {"silent": 60, "error": 40, "warn": 30, "info": 20, "debug": 10}

# label -> (severity, color)
_LABELS: Dict[str, tuple[str, str]] = {
    "DEBUG": ("debug", DIM),
    "INFO": ("info", BLUE),
    "SUCCESS": ("info", GREEN),
    "WARN": ("warn", YELLOW),
    "WARNING": ("warn", YELLOW),
    "FALLBACK": ("warn", YELLOW),
    "ERROR": ("error", RED),
}

_TRUTHY = ("1", "true", "yes", "on")


class _DebugGate:
    """runtime.debug from config.json, re-read at most every `ttl` seconds. $SC_DEBUG wins."""

    def __init__(self, ttl: float = 5.0) -> None:
        self.ttl = ttl
        self._on = False
        self._ts = 0.0

    def reset(self) -> None:
        self._ts = 0.0

    def __call__(self) -> bool:
        if (os.getenv("SC_DEBUG") or "").strip().lower() in _TRUTHY:
            return True
        now = time.time()
        if now - self._ts > self.ttl:
            try:
                with open(config_path(), "r", encoding="utf-8") as f:
                    cfg = json.load(f)
            except (OSError, ValueError):
                cfg = {}
            rt = cfg.get("runtime") if isinstance(cfg, dict) else None
            self._on = bool((rt or {}).get("debug"))
            self._ts = now
        return self._on


_debug_enabled = _DebugGate()


def _reset_debug_cache() -> None:
    _debug_enabled.reset()


def _one_line(s: Any) -> str:
    return " ".join(str("" if s is None else s).split())


def _kv(fields: Mapping[str, Any]) -> str:
    out: list[str] = []
    for k in sorted(fields):
        v = _one_line(fields[k])
        if not v:
            continue
        if " " in v or '"' in v or "=" in v:
            v = json.dumps(v, ensure_ascii=False)
        out.append(f"{k}={v}")
    return " ".join(out)


class Logger:
    def __init__(
        self,
        stream: TextIO = sys.stdout,
        level: str = "info",
        use_color: bool = True,
        *,
        module: Optional[str] = None,
        json_stream: Optional[TextIO] = None,
        _lock: Optional[threading.Lock] = None,
    ):
        self.stream = stream
        self.level_no = LEVELS.get(level, LEVELS["info"])
        self.use_color = use_color and os.getenv("NO_COLOR") is None
        self.module = (module or "").strip()
        self.json_stream = json_stream
        self._lock = _lock or threading.Lock()

    def set_level(self, level: str) -> None:
        self.level_no = LEVELS.get(level, self.level_no)

    def enable_json(self, file_path: str) -> None:
        self.json_stream = open(file_path, "a", encoding="utf-8")

    def bind(self, module: str) -> "Logger":
        child = Logger(self.stream, "info", self.use_color, module=module, json_stream=self.json_stream, _lock=self._lock)
        child.level_no = self.level_no
        child.use_color = self.use_color
        return child

    def _allowed(self, severity: str) -> bool:
        if severity == "debug":
            return _debug_enabled()
        return LEVELS.get(severity, LEVELS["info"]) >= self.level_no

    def _line(self, label: str, msg: str, extra: Optional[Mapping[str, Any]]) -> str:
        tail = _kv(extra) if extra else ""
        body = f"{msg} {tail}" if tail else msg
        color = _LABELS.get(label, ("info", ""))[1] if self.use_color else ""
        lvl = f"{color}{label}{RESET}" if color else label
        ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        stamp = f"{DIM}[{ts}]{RESET}" if self.use_color else f"[{ts}]"
        head = f"[{self.module}] " if self.module else ""
        return f"{stamp} {head}{lvl} {body}"

    def emit(self, label: str, msg: str, extra: Optional[Mapping[str, Any]] = None) -> None:
        label = (label or "INFO").upper()
        severity = _LABELS.get(label, ("info", ""))[0]
        if not self._allowed(severity):
            return
        line = self._line(label, msg, extra)
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()
            if self.json_stream:
                rec: Dict[str, Any] = {
                    "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
                    "level": label,
                    "module": self.module,
                    "msg": msg,
                }
                if extra:
                    rec["extra"] = dict(extra)
                self.json_stream.write(json.dumps(rec, ensure_ascii=False, default=str) + "\n")
                self.json_stream.flush()

    def debug(self, msg: str, extra: Optional[Mapping[str, Any]] = None) -> None:
        self.emit("DEBUG", msg, extra)

    def info(self, msg: str, extra: Optional[Mapping[str, Any]] = None) -> None:
        self.emit("INFO", msg, extra)

    def warn(self, msg: str, extra: Optional[Mapping[str, Any]] = None) -> None:
        self.emit("WARN", msg, extra)

    def error(self, msg: str, extra: Optional[Mapping[str, Any]] = None) -> None:
        self.emit("ERROR", msg, extra)

    # log("text", level="WARN", module="FACADE", extra={...})
    def __call__(
        self,
        message: str,
        *,
        level: str = "INFO",
        module: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        target = self.bind(module) if module else self
        target.emit(level, message, extra)


log = Logger(level=(os.getenv("SC_LOG_LEVEL") or "info").strip().lower())
if os.getenv("SC_LOG_FILE"):
    log.enable_json(os.environ["SC_LOG_FILE"])

__all__ = ["Logger", "log", "LEVELS"]
