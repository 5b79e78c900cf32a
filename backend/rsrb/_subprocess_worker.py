"""Subprocess worker that runs one rsrb program.

This module is executed as a short-lived subprocess
(``python -m backend.rsrb._subprocess_worker``). It reads a single JSON object
from stdin with shape {"code": "...", "settings": {...}}, runs the code in a
fresh `Interpreter` and writes the run result ({"output", "warnings",
"errors"}) as JSON to stdout.

The calling process is responsible for wall-clock timeouts and resource caps.
"""

import json
import sys

from backend.rsrb.interpreter import Interpreter


def main() -> int:
    raw = sys.stdin.read()
    try:
        payload = json.loads(raw)
        code = payload.get("code", "")
        settings = payload.get("settings") or {}
    except (ValueError, AttributeError) as e:
        # Communicate payload decoding errors via JSON to the parent process
        print(json.dumps({"output": "", "warnings": [], "errors": {"code": "BAD_PAYLOAD", "message": str(e)}}))
        return 1

    res = Interpreter().run(code, settings=settings)
    print(json.dumps(res))
    return 0


if __name__ == "__main__":
    sys.exit(main())
