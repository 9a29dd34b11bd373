"""Error taxonomy for ffmpeg composition renders."""

from __future__ import annotations

from typing import Optional


class RenderError(Exception):
    """Base class for every terminal render failure."""


class ValidationError(RenderError, ValueError):
    """Raised when a composition spec or render request is malformed."""


class SpecDecodeError(ValidationError):
    """Raised when a spec file is not valid JSON."""


class UnsafeValueError(RenderError, ValueError):
    """Raised when a user value could break out of the filter-graph syntax."""


class MissingFontError(RenderError, RuntimeError):
    """Raised when a text layer has no usable font file."""


class ConfigError(RenderError, ValueError):
    """Raised when the renderer configuration file cannot be used."""


class UnsupportedInputError(RenderError, ValueError):
    """Raised when no handler (and no delegate renderer) accepts the input."""


class ToolNotFoundError(RenderError, FileNotFoundError):
    """Raised when the ffmpeg executable cannot be launched."""

    def __init__(self, executable: str) -> None:
        self.executable = str(executable)
        super().__init__(
            f"ffmpeg not found ({self.executable}); set `ffmpegPath` in the renderer "
            "config or install ffmpeg in PATH"
        )


class ProcessError(RenderError, RuntimeError):
    """Raised when ffmpeg exits with a non-zero status."""

    def __init__(self, exit_code: Optional[int], stderr: str = "") -> None:
        self.exit_code = exit_code
        self.stderr = str(stderr or "")
        detail = self.stderr.strip() or "unknown error"
        super().__init__(f"ffmpeg exit {exit_code}: {detail}")


class RenderTimeoutError(RenderError, TimeoutError):
    """Raised when ffmpeg exceeds the configured wall-clock bound."""

    def __init__(self, timeout_ms: float, elapsed_ms: float) -> None:
        self.timeout_ms = float(timeout_ms)
        self.elapsed_ms = float(elapsed_ms)
        super().__init__(f"ffmpeg timeout after {int(round(self.timeout_ms))}ms")
