"""Helpers to run an rsrb program in a small, controlled subprocess.

This module provides `run_code_in_subprocess`, a convenience wrapper that
launches the `_subprocess_worker` module (which follows a simple
JSON-over-stdin/stdout protocol). The function enforces a wall-clock timeout
and can apply light OS-level resource limits on POSIX systems (CPU seconds
and address-space / memory usage), which keeps deeply recursive or very long
programs from tying up the calling process.

Behavior and guarantees:
  - On POSIX, optional RLIMIT_CPU and RLIMIT_AS limits are applied using a
    preexec function. On Windows these limits are no-ops.
  - The worker is launched as a short-lived process with closed file
    descriptors and a minimal environment.
  - The function returns (returncode, stdout, stderr). A returncode of -1
    indicates the process was terminated due to timeout.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

# directory holding the top-level `backend` package
PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _make_posix_preexec(cpu_seconds: Optional[int], mem_limit_mb: Optional[int]):
    """Return a preexec_fn that applies resource limits on POSIX systems.

    If the `resource` module is unavailable the function becomes a no-op.
    """
    def preexec():
        try:
            import resource
        except ImportError:
            return

        if cpu_seconds is not None:
            resource.setrlimit(resource.RLIMIT_CPU, (int(cpu_seconds), int(cpu_seconds)))

        if mem_limit_mb is not None:
            mem_bytes = int(mem_limit_mb) * 1024 * 1024
            resource.setrlimit(resource.RLIMIT_AS, (mem_bytes, mem_bytes))

        # new session so signals aimed at the parent do not reach the worker
        try:
            os.setsid()
        except OSError:
            pass

    return preexec


def run_code_in_subprocess(
    code: str,
    timeout_s: int = 2,
    *,
    settings: Optional[Dict[str, Any]] = None,
    cpu_seconds: Optional[int] = 2,
    mem_limit_mb: Optional[int] = 512,
) -> Tuple[int, str, str]:
    """Run `code` in the `_subprocess_worker` module and return outputs.

    Parameters:
      - code: rsrb source text sent to the worker via JSON on stdin.
      - timeout_s: wall-clock timeout for the whole operation (seconds).
      - settings: interpreter limits forwarded to `Interpreter.run`.
      - cpu_seconds: optional RLIMIT_CPU (seconds) applied on POSIX.
      - mem_limit_mb: optional RLIMIT_AS (MB) applied on POSIX.

    Returns (returncode, stdout, stderr). On timeout the function will kill
    the process and return (-1, "", "TIMEOUT").
    """
    # Keep the child's environment minimal; PYTHONPATH lets it import `backend`
    env = {"PATH": os.environ.get("PATH", ""), "PYTHONPATH": str(PROJECT_ROOT)}

    popen_kwargs: Dict[str, Any] = dict(
        args=[sys.executable, "-m", "backend.rsrb._subprocess_worker"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
        cwd=str(PROJECT_ROOT),
        close_fds=True,
    )

    if os.name != "nt":
        popen_kwargs["preexec_fn"] = _make_posix_preexec(cpu_seconds, mem_limit_mb)

    proc = subprocess.Popen(**popen_kwargs)

    payload = json.dumps({"code": code, "settings": settings or {}})
    try:
        out, err = proc.communicate(payload, timeout=timeout_s)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.communicate()
        return -1, "", "TIMEOUT"

    return proc.returncode, out or "", err or ""


def run_in_subprocess(code: str, settings: Optional[Dict[str, Any]] = None, timeout_s: int = 2) -> Dict[str, Any]:
    """Run `code` in a subprocess and return a result dict shaped like `Interpreter.run`."""
    try:
        rc, out, err = run_code_in_subprocess(code, timeout_s=timeout_s, settings=settings)
    except OSError as e:
        return {"output": "", "warnings": [], "errors": {"code": "SUBPROCESS_ERROR", "message": str(e)}}
    if rc == -1:
        return {"output": "", "warnings": [], "errors": {"code": "TIMEOUT", "message": "Time limit exceeded"}}
    if rc != 0:
        return {"output": "", "warnings": [], "errors": {"code": "SUBPROCESS_FAILED", "message": err}}
    try:
        return json.loads(out)
    except json.JSONDecodeError:
        return {"output": out, "warnings": [], "errors": {"code": "SUBPROCESS_FAILED", "message": "bad worker output"}}
