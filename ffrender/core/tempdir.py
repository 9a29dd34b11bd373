"""Run-scoped scratch directories for ffmpeg renders."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from typing import List, Optional


LOG = logging.getLogger(__name__)

TEMP_NAMESPACE = "ffrender"


def resolve_temp_root(temp_dir: str = "") -> str:
    base = str(temp_dir or "").strip() or tempfile.gettempdir()
    root = os.path.join(base, TEMP_NAMESPACE)
    os.makedirs(root, exist_ok=True)
    return root


class RunContext:
    """Private scratch directory plus the text files written into it.

    Use as a context manager: the directory is created on enter and removed
    with everything in it on exit, whether the render succeeded or not.
    """

    def __init__(self, temp_root: str) -> None:
        self._temp_root = os.path.realpath(temp_root)
        self._path: Optional[str] = None
        self._files: List[str] = []

    @property
    def path(self) -> str:
        if self._path is None:
            raise RuntimeError("run context is not open")
        return self._path

    @property
    def files(self) -> List[str]:
        return list(self._files)

    def open(self) -> "RunContext":
        if self._path is not None:
            raise RuntimeError("run context already used")
        os.makedirs(self._temp_root, exist_ok=True)
        self._path = tempfile.mkdtemp(prefix="run-", dir=self._temp_root)
        return self

    def write_text(self, text: str) -> str:
        """Write ``text`` to a uniquely named UTF-8 file and return its path."""
        full = os.path.join(self.path, f"text-{uuid.uuid4().hex[:16]}.txt")
        with open(full, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        self._files.append(full)
        return full

    def close(self) -> None:
        for full in self._files:
            try:
                os.remove(full)
            except FileNotFoundError:
                pass
            except OSError as exc:
                LOG.warning("failed to remove scratch file %s: %s", full, exc)
        self._files = []
        path = self._path
        if path is None or not os.path.isdir(path):
            return
        try:
            shutil.rmtree(path)
        except OSError as exc:
            LOG.warning("failed to remove run directory %s: %s", path, exc)
            shutil.rmtree(path, ignore_errors=True)

    def __enter__(self) -> "RunContext":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
