"""
Rendering layer: one backend per output format.

Importing this package registers the DOCX and PDF backends.
"""

from .base import (
    RenderedArtifact,
    RendererBackend,
    available_backends,
    get_backend,
    register_backend,
)
from .docx_renderer import DocxRenderer
from .pdf_renderer import PdfRenderer

__all__ = [
    'RenderedArtifact',
    'RendererBackend',
    'available_backends',
    'get_backend',
    'register_backend',
    'DocxRenderer',
    'PdfRenderer',
]
