"""
Export pipeline modules.

Asset loading and document assembly; rendering lives in
observador.rendering.
"""

from .asset_loader import AssetLoader, ImageAsset, LogoSet, decode_image
from .document_assembler import DocumentAssembler

__all__ = [
    'AssetLoader',
    'ImageAsset',
    'LogoSet',
    'decode_image',
    'DocumentAssembler',
]
