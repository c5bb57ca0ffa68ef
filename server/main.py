"""colourfmt FastAPI server: colour format strings to JSON runs."""

from __future__ import annotations

import hashlib
import io
import logging
import math
import os
import socket
import time

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, field_validator

from colour_format import ColourFormatError
from colours import Colour, parse_colour
from console import ColourConsole

log = logging.getLogger(__name__)

app = FastAPI(title="colourfmt", version="1.0.0")
_security = HTTPBearer()

TOKEN = os.environ.get("CF_TOKEN", "changeme")
HOST = os.environ.get("CF_HOST", "127.0.0.1")
PORT = int(os.environ.get("CF_PORT", "8787"))
FORMAT_RATE = int(os.environ.get("CF_FORMAT_RATE", "50"))

MAX_FORMAT_LENGTH = 4096
MAX_ARGS = 64


def _verify(creds: HTTPAuthorizationCredentials = Depends(_security)) -> str:
    if creds.credentials != TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")
    return creds.credentials


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "hostname": socket.gethostname(),
    }


@app.get("/palette")
async def palette():
    return {
        "colours": [
            {
                "name": c.label,
                "run": c.run_name,
                "fg": c.fg_code,
                "bg": c.bg_code,
            }
            for c in Colour
        ]
    }


class FormatRequest(BaseModel):
    format: str = Field(max_length=MAX_FORMAT_LENGTH)
    args: list[Colour] = Field(default_factory=list, max_length=MAX_ARGS)
    foreground: Colour = Colour.WHITE
    background: Colour = Colour.BLACK

    @field_validator("args", mode="before")
    @classmethod
    def parse_args(cls, value):
        if not isinstance(value, list):
            raise ValueError("args must be a list of colour names")
        return [parse_colour(v) if isinstance(v, str) else v for v in value]

    @field_validator("foreground", "background", mode="before")
    @classmethod
    def parse_single(cls, value):
        if isinstance(value, str):
            return parse_colour(value)
        return value


class _RateLimiter:
    """Sliding one-second window over /format requests.

    Parsing is cheap but every request builds a console and renders ANSI, so
    bursts get a 429 with a Retry-After hint for when the window frees up.
    """

    def __init__(self, max_per_sec: int = 20):
        if max_per_sec < 1:
            raise ValueError("max_per_sec must be at least 1")
        self._max = max_per_sec
        self._timestamps: list[float] = []

    def check(self) -> None:
        now = time.monotonic()
        self._timestamps = [t for t in self._timestamps if now - t < 1.0]
        if len(self._timestamps) >= self._max:
            retry_after = max(1, math.ceil(1.0 - (now - self._timestamps[0])))
            log.info("Format rate limit hit (%d/s)", self._max)
            raise HTTPException(
                status_code=429,
                detail="Rate limit exceeded",
                headers={"Retry-After": str(retry_after)},
            )
        self._timestamps.append(now)


_format_limiter = _RateLimiter(max_per_sec=FORMAT_RATE)


@app.post("/format")
async def post_format(
    body: FormatRequest,
    _: str = Depends(_verify),
):
    _format_limiter.check()
    buf = io.StringIO()
    console = ColourConsole(body.foreground, body.background, out=buf)
    try:
        segments = console.format(body.format, *body.args)
    except ColourFormatError as exc:
        log.info("Rejected format string: %s", exc)
        raise HTTPException(
            status_code=400,
            detail={
                "kind": exc.kind,
                "block": exc.block,
                "blockIndex": exc.block_index,
                "message": str(exc),
            },
        )
    console.write_segments(segments)
    ansi = buf.getvalue()

    return {
        "segments": [s.to_run() for s in segments],
        "ansi": ansi,
        "hash": hashlib.sha256(ansi.encode()).hexdigest()[:16],
    }


if __name__ == "__main__":
    import sys

    import uvicorn

    if TOKEN == "changeme":
        print(
            "\n\033[1;31mFATAL: CF_TOKEN is set to 'changeme'.\033[0m\n"
            "Generate a secure token:  python3 -c \"import secrets; print(secrets.token_urlsafe(32))\"\n"
            "Then set it:  export CF_TOKEN=<your-token>\n",
            file=sys.stderr,
        )
        sys.exit(1)

    logging.basicConfig(level=os.environ.get("CF_LOG_LEVEL", "INFO").upper())
    uvicorn.run(app, host=HOST, port=PORT)
