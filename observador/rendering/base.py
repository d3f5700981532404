"""
Renderer backend contract.

Provides:
- RenderedArtifact, the immutable output (bytes + filename)
- RendererBackend, the abstract backend interface
- Backend registry keyed by format name ("docx", "pdf")
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Type

from observador.core.document_model import DocumentModel
from observador.core.layout_config import LAYOUT, LayoutConfig
from observador.pipeline.asset_loader import LogoSet

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedArtifact:
    """
    Finished document.

    Attributes:
        data: Serialized file bytes
        filename: Download filename (set by the coordinator)
        media_type: MIME type of ``data``
    """
    data: bytes
    filename: str
    media_type: str

    def __len__(self) -> int:
        return len(self.data)


class RendererBackend(ABC):
    """
    Turns a DocumentModel into one file format.

    Implementations must be deterministic in structure for identical input
    and must never drop content silently: columns are scaled proportionally
    or LayoutOverflowError is raised.
    """

    format_name: str = ''
    extension: str = ''
    media_type: str = 'application/octet-stream'

    def __init__(self, layout: LayoutConfig = LAYOUT):
        self.layout = layout

    @abstractmethod
    def render_bytes(self, model: DocumentModel, logos: LogoSet) -> bytes:
        """
        Serialize the document.

        Raises:
            LayoutOverflowError: Content does not fit the page geometry
            PackagingError: Serialization failed
        """

    def render(self, model: DocumentModel, logos: LogoSet, filename: str = '') -> RenderedArtifact:
        """Render and wrap the bytes in a RenderedArtifact."""
        data = self.render_bytes(model, logos)
        LOGGER.info("  %s rendered: %.1f KB", self.format_name.upper(), len(data) / 1024)
        return RenderedArtifact(data=data, filename=filename, media_type=self.media_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(format='{self.format_name}')"


# ============================================================================
# BACKEND REGISTRY
# ============================================================================
_BACKENDS: Dict[str, Type[RendererBackend]] = {}


def register_backend(cls: Type[RendererBackend]) -> Type[RendererBackend]:
    """Class decorator registering a backend under its format_name."""
    if not cls.format_name:
        raise ValueError(f"{cls.__name__} has no format_name")
    if cls.format_name in _BACKENDS:
        raise ValueError(f"Backend '{cls.format_name}' already registered")
    _BACKENDS[cls.format_name] = cls
    return cls


def get_backend(name: str, layout: LayoutConfig = LAYOUT) -> RendererBackend:
    """
    Instantiate a backend by format name.

    Raises:
        ValueError: If no backend has that name
    """
    key = name.lower().lstrip('.')
    factory: Callable[..., RendererBackend] = _BACKENDS.get(key)  # type: ignore[assignment]
    if factory is None:
        raise ValueError(f"Unknown output format '{name}' (available: {', '.join(available_backends())})")
    return factory(layout)


def available_backends() -> List[str]:
    return sorted(_BACKENDS)
