"""ffmpeg process execution: spawn, timeout, exit classification."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from typing import Any, Dict, Sequence

from ffrender.core.errors import ProcessError, RenderTimeoutError, ToolNotFoundError


LOG = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "ffmpeg"
DEFAULT_TIMEOUT_MS = 30000


def resolve_ffmpeg_executable(configured: str = "") -> str:
    """Configured path first, then PATH lookup, then the bare name."""
    explicit = str(configured or "").strip()
    if explicit:
        return explicit
    return shutil.which(DEFAULT_EXECUTABLE) or DEFAULT_EXECUTABLE


def _popen_kwargs() -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.PIPE,
        "stderr": subprocess.PIPE,
    }
    if os.name == "nt":
        kwargs["creationflags"] = getattr(subprocess, "CREATE_NO_WINDOW", 0)
    return kwargs


def run_ffmpeg(
    args: Sequence[str],
    *,
    executable: str,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
    log_command: bool = False,
) -> bytes:
    """Run ``executable args...`` and return its stdout bytes.

    Raises `ToolNotFoundError` when the executable cannot be found,
    `RenderTimeoutError` after killing a process that outlived ``timeout_ms``,
    and `ProcessError` on a non-zero exit. No partial output is ever returned.
    """
    command = [str(executable), *[str(arg) for arg in args]]
    if log_command:
        LOG.info("[ffmpeg] %s", " ".join(command))

    start = time.monotonic()
    try:
        proc = subprocess.Popen(command, **_popen_kwargs())
    except FileNotFoundError as exc:
        raise ToolNotFoundError(executable) from exc

    with proc:
        try:
            stdout, stderr = proc.communicate(timeout=max(0.001, float(timeout_ms) / 1000.0))
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
            elapsed_ms = (time.monotonic() - start) * 1000.0
            raise RenderTimeoutError(timeout_ms, elapsed_ms) from None

    elapsed_ms = (time.monotonic() - start) * 1000.0
    if proc.returncode != 0:
        err_text = (stderr or b"").decode("utf-8", errors="replace").strip()
        raise ProcessError(proc.returncode, err_text)
    LOG.debug("ffmpeg produced %d bytes in %.1fms", len(stdout or b""), elapsed_ms)
    return bytes(stdout or b"")
