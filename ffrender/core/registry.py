"""Injected registry of render backends used for delegation."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Protocol


class Renderer(Protocol):
    """Anything with an ``id`` and a ``render(request)`` capability."""

    id: str

    def render(self, request: Any) -> Any:
        ...


class RendererRegistry:
    """Thread-safe, insertion-ordered renderer collection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._renderers: Dict[str, Renderer] = {}

    def add(self, renderer: Renderer) -> bool:
        renderer_id = str(getattr(renderer, "id", "") or "").strip()
        if not renderer_id:
            raise ValueError("renderer id must be a non-empty string")
        with self._lock:
            if renderer_id in self._renderers:
                return False
            self._renderers[renderer_id] = renderer
            return True

    def get(self, renderer_id: str) -> Optional[Renderer]:
        with self._lock:
            return self._renderers.get(str(renderer_id or "").strip())

    def list(self) -> List[Renderer]:
        with self._lock:
            return list(self._renderers.values())

    def find_delegate(self, exclude: str) -> Optional[Renderer]:
        """First registered renderer whose id differs from ``exclude``."""
        with self._lock:
            for renderer_id, renderer in self._renderers.items():
                if renderer_id != exclude:
                    return renderer
        return None
