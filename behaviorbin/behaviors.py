import asyncio
import hashlib
import random
import re
from email.utils import formatdate
from http import HTTPStatus
from typing import Optional

from fastapi import Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from .assets import INDEX_DOCUMENT, AssetStore
from .durations import DurationError, parse_bounded_duration
from .errors import AssetNotFound, AssetReadError, AuthRequired, InvalidParameter

MAX_BYTES = 100 * 1024
MAX_REDIRECTS = 20
MAX_DELAY_SECONDS = 60.0
DEFAULT_FAILURE_RATE = 0.5
CLIENT_CLOSED_REQUEST = 499

# Long-lived entry for shared caches, forced revalidation for clients.
UNCACHEABLE = {
    "Surrogate-Control": "max-age=31557600",
    "Cache-Control": "no-store, max-age=0",
}

# Framing headers the server computes itself.
FRAMING_HEADERS = {"content-length", "transfer-encoding", "connection"}

JSON_MEDIA_TYPE = "text/json"

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_int(text: str) -> int:
    """Optional sign and ASCII digits, nothing else."""
    if not _INTEGER_RE.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    return int(text)


def reason_phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def allows_body(code: int) -> bool:
    return code >= 200 and code not in (204, 304)


class TextJSONResponse(JSONResponse):
    media_type = JSON_MEDIA_TYPE


async def wait_for_disconnect(request: Request) -> None:
    """Block until the ASGI server reports that the client went away."""
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


class Behaviors:
    """The behavior handlers. Each one fully owns the response it builds."""

    def __init__(self, assets: AssetStore, rng: Optional[random.Random] = None):
        self.assets = assets
        self.rng = rng or random.Random()

    # --- Status ---
    async def status(self, request: Request, segment: str) -> Response:
        """Respond with one of the comma separated status codes."""
        candidates = segment.split(",")
        headers = dict(UNCACHEABLE) if len(candidates) > 1 else {}
        try:
            codes = [parse_int(candidate) for candidate in candidates]
        except ValueError:
            raise InvalidParameter("Invalid status", headers=headers or None)
        code = self.rng.choice(codes)
        # a 1xx cannot be the final response of an ASGI app
        if code > 999 or code < 200:
            raise InvalidParameter(reason_phrase(400), headers=headers or None)
        if code >= 300 and allows_body(code):
            return PlainTextResponse(reason_phrase(code), status_code=code, headers=headers)
        return Response(status_code=code, headers=headers)

    # --- Delay ---
    async def delay(self, request: Request, segment: str) -> Response:
        """Answer after the given duration, or 499 if the client leaves first."""
        try:
            seconds = parse_bounded_duration(segment, 0.0, MAX_DELAY_SECONDS)
        except DurationError:
            raise InvalidParameter("Invalid duration")
        timer = asyncio.ensure_future(asyncio.sleep(seconds))
        disconnect = asyncio.ensure_future(wait_for_disconnect(request))
        done, pending = await asyncio.wait({timer, disconnect}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        if disconnect in done:
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        return PlainTextResponse("delayed ok")

    # --- Bytes ---
    async def random_bytes(self, request: Request, segment: str) -> Response:
        """Return n random bytes, at most MAX_BYTES."""
        try:
            count = parse_int(segment)
        except ValueError as e:
            raise InvalidParameter(str(e))
        if count < 0:
            raise InvalidParameter(reason_phrase(400))
        if count == 0:
            return Response(status_code=200, headers={"Content-Length": "0"})
        payload = self.rng.randbytes(min(count, MAX_BYTES))
        return Response(content=payload, media_type="application/octet-stream")

    # --- Cache ---
    async def cache(self, request: Request) -> Response:
        """304 for conditional requests, else fresh validators."""
        if request.headers.get("if-modified-since") or request.headers.get("if-none-match"):
            return Response(status_code=304)
        last_modified = formatdate(usegmt=True)
        etag = hashlib.sha1(last_modified.encode()).hexdigest()
        return Response(headers={"Last-Modified": last_modified, "ETag": f'"{etag}"'})

    async def cache_for(self, request: Request, segment: str) -> Response:
        """Cache-Control: public for the given number of seconds."""
        try:
            seconds = parse_int(segment)
        except ValueError as e:
            raise InvalidParameter(str(e))
        return Response(headers={"Cache-Control": f"public, max-age={seconds}"})

    # --- Echo & reflection ---
    async def anything(self, request: Request) -> Response:
        """Send the request's headers and body straight back."""
        body = await request.body()
        response = Response(content=body)
        for key, value in request.headers.items():
            if key not in FRAMING_HEADERS:
                response.headers.append(key, value)
        return response

    async def user_agent(self, request: Request) -> Response:
        return TextJSONResponse({"user-agent": request.headers.get("user-agent", "")})

    async def ip(self, request: Request) -> Response:
        return TextJSONResponse({"origin": request.client.host if request.client else ""})

    async def bearer(self, request: Request) -> Response:
        """Require 'Authorization: Bearer <token>'."""
        fields = request.headers.get("authorization", "").split()
        if len(fields) != 2 or fields[0] != "Bearer":
            raise AuthRequired("Bearer")
        return TextJSONResponse({"authenticated": True, "token": fields[1]})

    # --- Redirect ---
    async def redirect(self, request: Request, segment: str) -> Response:
        """302 to /redirect/<n-1> until n reaches 0."""
        try:
            remaining = parse_int(segment)
        except ValueError:
            raise InvalidParameter("Invalid redirects")
        if remaining < 0:
            raise InvalidParameter("Invalid redirects")
        if remaining == 0:
            return PlainTextResponse("completed redirects")
        if remaining > MAX_REDIRECTS:
            raise InvalidParameter(f"maximum of {MAX_REDIRECTS} redirects allowed")
        return PlainTextResponse(
            reason_phrase(302), status_code=302, headers={"Location": f"/redirect/{remaining - 1}"}
        )

    # --- Unstable ---
    async def unstable(self, request: Request) -> Response:
        """Fail with 500 at the rate given by ?failure-rate (default 0.5)."""
        rate = failure_rate(request.query_params.get("failure-rate"))
        if self.rng.random() > rate:
            return Response(headers=UNCACHEABLE)
        return PlainTextResponse(reason_phrase(500), status_code=500, headers=UNCACHEABLE)

    # --- Static ---
    async def index(self, request: Request) -> Response:
        document = self.assets.read(INDEX_DOCUMENT)
        if document is None:
            raise AssetReadError()
        return HTMLResponse(document)

    async def static(self, request: Request) -> Response:
        """Serve the asset stored under the request path, verbatim."""
        data = self.assets.read(request.url.path.lstrip("/"))
        if data is None:
            raise AssetNotFound()
        return Response(content=data)


def failure_rate(raw: Optional[str]) -> float:
    """Probability strictly inside (0, 1), otherwise DEFAULT_FAILURE_RATE."""
    try:
        rate = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_FAILURE_RATE
    if 0 < rate < 1:
        return rate
    return DEFAULT_FAILURE_RATE
