# /showcase.py
# Showcase - portfolio ratings, comments and inbox API
# Copyright (c) 2025-2026 Showcase
from __future__ import annotations

import time
from typing import Any, Mapping

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from _logging import log
from api import register as register_api
from sc_platform.catalog import Catalog
from sc_platform.config_base import CONFIG_BASE, data_dir, load_config
from sc_platform.storage import StorageBackend
from services.runtime import build_runtime

VERSION = "1.0.0"


def _is_debug(cfg: Mapping[str, Any]) -> bool:
    return bool((cfg.get("runtime") or {}).get("debug"))


def create_app(
    cfg: Mapping[str, Any] | None = None,
    *,
    storage: StorageBackend | None = None,
    catalog: Catalog | None = None,
) -> FastAPI:
    conf = dict(cfg or load_config())
    app = FastAPI(title="Showcase", version=VERSION)

    origins = list(((conf.get("server") or {}).get("cors_origins")) or [])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    debug = _is_debug(conf)

    @app.middleware("http")
    async def conditional_access_logger(request: Request, call_next):
        t0 = time.time()
        response = None
        err: Exception | None = None
        status = 0
        try:
            response = await call_next(request)
            status = getattr(response, "status_code", 0) or 0
        except Exception as e:
            err = e
            status = 500
        finally:
            should_log = (err is not None) or status >= 500 or (debug and status >= 400)
            if should_log:
                dt_ms = int((time.time() - t0) * 1000)
                client = request.client
                host = f"{client.host}:{client.port}" if client else "-"
                path_qs = request.url.path + (f"?{request.url.query}" if request.url.query else "")
                log(
                    f'{host} - "{request.method} {path_qs}" {status} ({dt_ms} ms)',
                    level="ERROR" if status >= 500 else "WARN",
                    module="HTTP",
                )
        if err is not None:
            raise err
        return response

    @app.get("/api/health", tags=["health"])
    def api_health() -> dict[str, Any]:
        return {"ok": True, "version": VERSION}

    app.state.showcase = build_runtime(conf, storage=storage, catalog=catalog)
    register_api(app)
    return app


app = create_app()


# Entry point
def main(host: str | None = None, port: int | None = None) -> None:
    cfg = load_config()
    server = cfg.get("server") or {}
    bind_host = host or str(server.get("host") or "0.0.0.0")
    bind_port = int(port or server.get("port") or 3001)

    print("\nShowcase API running:")
    print(f"  Local:   http://127.0.0.1:{bind_port}/api")
    print(f"  Bind:    {bind_host}:{bind_port}")
    print(f"  Config:  {CONFIG_BASE() / 'config.json'} (JSON)")
    print(f"  Data:    {data_dir(cfg)}\n")

    debug = _is_debug(cfg)
    debug_http = bool((cfg.get("runtime") or {}).get("debug_http"))

    uvicorn.run(
        app,
        host=bind_host,
        port=bind_port,
        log_level=("debug" if debug else "warning"),
        access_log=debug_http,
    )


if __name__ == "__main__":
    main()
