#!/usr/bin/env python3
"""
Asset Loader

Fetches the two letterhead logos and normalizes them for the renderers.

Sources:
- http(s):// URLs, fetched with httpx under a bounded timeout
- file:// URLs and plain filesystem paths (bundled assets)

Every image is decoded with Pillow and re-encoded as PNG, which both
python-docx and ReportLab embed without further conversion. A fetch or
decode failure raises AssetLoadError; nothing is rendered from a partial
logo set.

Optional cache:
    Keyed by URL with single-flight semantics: concurrent requests for the
    same URL await one in-flight fetch. Failures are never cached.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
from PIL import Image, UnidentifiedImageError

from observador.core.errors import AssetLoadError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0
_NATIVE_MODES = ('RGB', 'RGBA', 'L', 'LA')


# ============================================================================
# ASSET TYPES
# ============================================================================
@dataclass(frozen=True)
class ImageAsset:
    """
    Decoded image ready for embedding.

    Attributes:
        url: Source location
        data: PNG-encoded bytes
        width_px: Natural width in pixels
        height_px: Natural height in pixels
        source_format: Format detected by Pillow (e.g. "JPEG")
    """
    url: str
    data: bytes
    width_px: int
    height_px: int
    source_format: str = 'PNG'

    def stream(self) -> BytesIO:
        """Fresh binary stream over the PNG bytes (one per consumer)."""
        return BytesIO(self.data)


@dataclass(frozen=True)
class LogoSet:
    """Both letterhead logos, always loaded together."""
    left: ImageAsset
    right: ImageAsset

    def get(self, key: str) -> ImageAsset:
        if key == 'left_logo':
            return self.left
        if key == 'right_logo':
            return self.right
        raise KeyError(key)


def decode_image(url: str, raw: bytes) -> ImageAsset:
    """
    Decode raw bytes with Pillow and normalize them to PNG.

    Raises:
        AssetLoadError: If the bytes are not a decodable image
    """
    if not raw:
        raise AssetLoadError(url, "empty response")
    try:
        with Image.open(BytesIO(raw)) as image:
            image.load()
            source_format = image.format or 'UNKNOWN'
            width, height = image.size
            converted = image if image.mode in _NATIVE_MODES else image.convert('RGBA')
            out = BytesIO()
            converted.save(out, format='PNG')
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise AssetLoadError(url, f"not a decodable image ({exc})") from exc

    return ImageAsset(url=url, data=out.getvalue(), width_px=width, height_px=height,
                      source_format=source_format)


# ============================================================================
# LOADER
# ============================================================================
class AssetLoader:
    """
    Loads logo images for one or more export calls.

    Example:
        >>> loader = AssetLoader(timeout=5.0, cache=True)
        >>> logos = await loader.load_logos(left_url, right_url)
    """

    def __init__(self,
                 timeout: float = DEFAULT_TIMEOUT_SEC,
                 cache: bool = False,
                 client: Optional[httpx.AsyncClient] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            timeout: Bound for each fetch, in seconds
            cache: Keep decoded assets keyed by URL
            client: Shared httpx client (not closed by the loader)
            transport: Transport for the per-fetch clients (tests use
                httpx.MockTransport)
        """
        self.timeout = float(timeout)
        self.cache_enabled = cache
        self._client = client
        self._transport = transport
        self._cache: Dict[str, ImageAsset] = {}
        self._inflight: Dict[str, asyncio.Future] = {}
        self.fetch_count = 0

    # ========================================================================
    # PUBLIC API
    # ========================================================================
    async def load(self, url: str) -> ImageAsset:
        """
        Fetch and decode one image.

        Raises:
            AssetLoadError: On fetch failure, timeout or undecodable data
        """
        if not self.cache_enabled:
            return await self._load_uncached(url)

        cached = self._cache.get(url)
        if cached is not None:
            return cached

        task = self._inflight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._load_uncached(url))
            self._inflight[url] = task
            task.add_done_callback(lambda done, key=url: self._settle(key, done))
        return await asyncio.shield(task)

    async def load_logos(self, left_url: str, right_url: str) -> LogoSet:
        """
        Load both logos; either both succeed or AssetLoadError is raised.
        """
        left, right = await asyncio.gather(self.load(left_url), self.load(right_url))
        LOGGER.info("  Logos loaded: %s (%dx%d), %s (%dx%d)",
                    left.url, left.width_px, left.height_px,
                    right.url, right.width_px, right.height_px)
        return LogoSet(left=left, right=right)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ========================================================================
    # PRIVATE METHODS
    # ========================================================================
    def _settle(self, url: str, task: asyncio.Future) -> None:
        self._inflight.pop(url, None)
        if task.cancelled():
            return
        if task.exception() is None:
            self._cache[url] = task.result()

    async def _load_uncached(self, url: str) -> ImageAsset:
        raw = await self._fetch(url)
        asset = decode_image(url, raw)
        LOGGER.debug("Decoded %s: %s %dx%d, %d bytes", url, asset.source_format,
                     asset.width_px, asset.height_px, len(asset.data))
        return asset

    async def _fetch(self, url: str) -> bytes:
        self.fetch_count += 1
        scheme = urlparse(url).scheme.lower()
        if scheme in ('http', 'https'):
            return await self._fetch_http(url)
        if scheme == 'file':
            return await self._read_file(Path(url2pathname(urlparse(url).path)), url)
        if scheme and len(scheme) > 1:
            raise AssetLoadError(url, f"unsupported scheme '{scheme}'")
        # Bare path (a one-letter scheme is a Windows drive)
        return await self._read_file(Path(url), url)

    async def _fetch_http(self, url: str) -> bytes:
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise AssetLoadError(url, f"timed out after {self.timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            raise AssetLoadError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise AssetLoadError(url, str(exc) or type(exc).__name__) from exc
        return response.content

    async def _read_file(self, path: Path, url: str) -> bytes:
        try:
            return await asyncio.wait_for(asyncio.to_thread(path.read_bytes), self.timeout)
        except asyncio.TimeoutError as exc:
            raise AssetLoadError(url, f"timed out after {self.timeout:g}s") from exc
        except OSError as exc:
            raise AssetLoadError(url, exc.strerror or str(exc)) from exc
