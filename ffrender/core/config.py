"""Renderer configuration values and providers."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union

import yaml

from ffrender.core.errors import ConfigError


DEFAULT_TIMEOUT_MS = 30000
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "default_config.yaml"

_ENV_OVERRIDES = {
    "FFRENDER_FFMPEG_PATH": "ffmpegPath",
    "FFRENDER_FONT_FILE": "ffmpegFontFile",
    "FFRENDER_TIMEOUT_MS": "ffmpegTimeoutMs",
    "FFRENDER_LOG_COMMAND": "ffmpegLogCommand",
    "FFRENDER_TEMP_DIR": "tempDir",
}
_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _to_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _to_timeout_ms(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(DEFAULT_TIMEOUT_MS)
    if not math.isfinite(number) or number <= 0:
        return float(DEFAULT_TIMEOUT_MS)
    return number


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class RenderConfig:
    ffmpeg_path: str = ""
    font_file: str = ""
    timeout_ms: float = float(DEFAULT_TIMEOUT_MS)
    log_command: bool = False
    temp_dir: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "RenderConfig":
        """Build from the camelCase config file keys."""
        return cls(
            ffmpeg_path=_to_text(raw.get("ffmpegPath")),
            font_file=_to_text(raw.get("ffmpegFontFile")),
            timeout_ms=_to_timeout_ms(raw.get("ffmpegTimeoutMs", DEFAULT_TIMEOUT_MS)),
            log_command=_to_bool(raw.get("ffmpegLogCommand", False)),
            temp_dir=_to_text(raw.get("tempDir")),
        )


class ConfigProvider(Protocol):
    def get(self) -> RenderConfig:
        ...


class StaticConfigProvider:
    """Fixed configuration, mostly for tests and embedding."""

    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        self._config = config or RenderConfig()

    def get(self) -> RenderConfig:
        return self._config


class YamlConfigProvider:
    """Re-reads defaults, user file and environment on every `get()`.

    Nothing is cached, so an edited config file applies to the next render.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        *,
        defaults_path: Union[str, Path] = DEFAULT_CONFIG_PATH,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._defaults_path = Path(defaults_path)
        self._environ = environ if environ is not None else os.environ

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def get(self) -> RenderConfig:
        merged: Dict[str, Any] = {}
        merged.update(_load_yaml_mapping(self._defaults_path))
        if self._path is not None and self._path.is_file():
            merged.update(_load_yaml_mapping(self._path))
        for env_name, key in _ENV_OVERRIDES.items():
            value = self._environ.get(env_name)
            if value is not None and value.strip():
                merged[key] = value
        return RenderConfig.from_mapping(merged)


def _load_yaml_mapping(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config must be a mapping: {path}")
    return raw
