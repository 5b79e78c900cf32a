"""FastAPI application entrypoints for rsrb.

This module exposes an HTTP endpoint that runs rsrb source text. Each `/run`
request constructs a fresh `Interpreter` to avoid cross-request state sharing.
Server-side caps are enforced to prevent clients from overriding
resource/safety limits.
"""

import time
from typing import Any, Dict, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from ..rsrb.interpreter import Interpreter
from ..rsrb.subprocess_runner import run_in_subprocess

app = FastAPI(title="rsrb API", version="0.1")


def _cap_settings(settings: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Enforce server-side safe caps for runtime tunables.

    Clients may include a `settings` object with per-run tunables. The server
    must not trust these entirely; `_cap_settings` uses a fresh
    `Interpreter()`'s defaults as the ceiling and applies the client's
    requested values up to those ceilings.

    Returns a dict suitable for passing directly into `Interpreter.run`.
    """
    defaults = Interpreter()
    safe = {key: getattr(defaults, key) for key in Interpreter.SETTINGS}
    if not settings:
        return safe
    caps = {}
    for key, ceiling in safe.items():
        caps[key] = min(int(settings.get(key, ceiling)), ceiling)
    return caps


class RunRequest(BaseModel):
    """Pydantic model for the `/run` request body.

    Fields:
        code: rsrb source text.
        settings: optional runtime tunables; will be capped server-side.
        use_subprocess: run the program in an isolated worker process.
    """
    code: str
    settings: Optional[Dict[str, Any]] = None
    use_subprocess: bool = False


@app.post("/run")
async def run_code(req: RunRequest):
    """Handle a code execution request.

    Any exception is turned into a SERVER_ERROR response so callers receive a
    stable JSON shape.
    """
    start = time.time()
    try:
        capped = _cap_settings(req.settings or {})
        if req.use_subprocess:
            result = run_in_subprocess(req.code, settings=capped)
        else:
            result = Interpreter().run(req.code, settings=capped)
    except Exception as e:
        return {
            "output": "",
            "warnings": [],
            "duration_ms": int((time.time() - start) * 1000),
            "errors": {"code": "SERVER_ERROR", "message": str(e)},
        }
    result["duration_ms"] = int((time.time() - start) * 1000)
    return result
