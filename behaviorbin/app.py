"""
Container Notes:
- Listens on ${HOST}:${PORT} (default 0.0.0.0:5000).
- No files are written to disk; access logs go to stdout as structured JSON lines.
- Every behavior is chosen from the request path, see behaviorbin.routes.

Run: behaviorbin  (or: uvicorn behaviorbin.app:app)
Example: curl -i http://localhost:5000/status/418
"""

import json
import logging
import random
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .assets import AssetStore, DirectoryAssetStore
from .behaviors import Behaviors
from .config import Settings
from .errors import BehaviorError
from .routes import Dispatcher

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

log = logging.getLogger("behaviorbin")


# --- Logging ---
class StructuredLogger:
    def log(self, ts, method, path, status, latency_ms, user_agent, req_id, route):
        log_obj = {
            "ts": ts,
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "user_agent": user_agent,
            "req_id": req_id,
            "route": route,
        }
        print(json.dumps(log_obj), flush=True)


class AccessLogMiddleware:
    """One JSON line per request. Plain ASGI, so the receive channel is left untouched."""

    def __init__(self, app: ASGIApp, logger: Optional[StructuredLogger] = None):
        self.app = app
        self.logger = logger or StructuredLogger()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        start = time.time()
        status = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            request = Request(scope)
            latency_ms = int((time.time() - start) * 1000)
            ts = datetime.now(timezone.utc).isoformat()
            req_id = request.headers.get("x-req-id") or str(uuid.uuid4())
            route = scope.get("state", {}).get("route", "")
            self.logger.log(
                ts, request.method, request.url.path, status, latency_ms,
                request.headers.get("user-agent", ""), req_id, route,
            )


# --- Errors ---
async def behavior_error_handler(request: Request, exc: BehaviorError):
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=exc.headers)


# --- App ---
def create_app(
    settings: Optional[Settings] = None,
    rng: Optional[random.Random] = None,
    assets: Optional[AssetStore] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if rng is None:
        rng = random.Random(settings.seed)
    if assets is None:
        assets = DirectoryAssetStore(settings.static_dir)
    dispatcher = Dispatcher(Behaviors(assets, rng))

    app = FastAPI(title="behaviorbin", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    if settings.access_log:
        app.add_middleware(AccessLogMiddleware)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.add_exception_handler(BehaviorError, behavior_error_handler)

    @app.api_route("/{path:path}", methods=METHODS, include_in_schema=False)
    async def dispatch(request: Request):
        return await dispatcher.dispatch(request)

    return app


app = create_app()


# --- Main ---
def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=logging.DEBUG if settings.log_level == "trace" else settings.log_level.upper())
    served = create_app(settings)
    log.info("Serving behaviors on %s:%d (assets: %s)", settings.host, settings.port, settings.static_dir)
    uvicorn.run(served, host=settings.host, port=settings.port, log_level=settings.log_level, access_log=False)


if __name__ == "__main__":
    main()
