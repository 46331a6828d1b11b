"""
Asset stores: opaque reference -> bytes.

The renderer only asks "give me bytes for this reference". References may be
paths under a local root, http(s) URLs, or data: URLs. Every failure surfaces
as AssetFetchError so the element can degrade instead of failing the badge.
"""

from __future__ import annotations

import base64
import logging
import os
import random
import time
from io import BytesIO
from typing import Dict, Mapping, Optional
from urllib.parse import unquote_to_bytes

from config import ASSET_FETCH_TIMEOUT_S, ASSET_USER_AGENT
from errors import AssetFetchError

logger = logging.getLogger(__name__)


class AssetStore:
    """Interface: resolve an asset reference to raw bytes or raise AssetFetchError."""

    def fetch(self, ref: str) -> bytes:
        raise NotImplementedError


class MemoryAssetStore(AssetStore):
    """Dict-backed store (uploads held in memory, tests)."""

    def __init__(self, assets: Optional[Mapping[str, bytes]] = None):
        self._assets: Dict[str, bytes] = dict(assets or {})

    def put(self, ref: str, data: bytes) -> None:
        self._assets[ref] = data

    def fetch(self, ref: str) -> bytes:
        try:
            return self._assets[ref]
        except KeyError:
            raise AssetFetchError(ref, "not found") from None


class LocalAssetStore(AssetStore):
    """Files under a root directory; references may not escape the root."""

    def __init__(self, root: str):
        self.root = os.path.realpath(root)

    def _safe_path(self, ref: str) -> Optional[str]:
        raw = (ref or "").strip()
        if not raw:
            return None
        candidate = raw if os.path.isabs(raw) else os.path.join(self.root, raw)
        resolved = os.path.realpath(candidate)
        if resolved == self.root or resolved.startswith(f"{self.root}{os.sep}"):
            return resolved
        return None

    def fetch(self, ref: str) -> bytes:
        path = self._safe_path(ref)
        if path is None:
            raise AssetFetchError(ref, f"outside asset root {self.root}")
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise AssetFetchError(ref, "not found") from None
        except OSError as e:
            raise AssetFetchError(ref, e) from e


class HttpAssetStore(AssetStore):
    """http(s) URLs via requests, with an explicit (connect, read) timeout."""

    def __init__(self, timeout_s: float = ASSET_FETCH_TIMEOUT_S, max_attempts: int = 1, session=None):
        self.timeout_s = timeout_s
        self.max_attempts = max(1, int(max_attempts))
        self._session = session

    def fetch(self, ref: str) -> bytes:
        import requests

        client = self._session or requests
        last_exc: Optional[Exception] = None
        for attempt in range(self.max_attempts):
            try:
                resp = client.get(
                    ref,
                    timeout=(self.timeout_s, self.timeout_s),
                    headers={"User-Agent": ASSET_USER_AGENT},
                )
            except requests.Timeout as e:
                raise AssetFetchError(ref, f"timed out after {self.timeout_s}s") from e
            except requests.RequestException as e:
                last_exc = e
            else:
                if resp.status_code == 200:
                    return resp.content
                if resp.status_code not in (429, 500, 502, 503):
                    raise AssetFetchError(ref, f"HTTP {resp.status_code}")
                last_exc = AssetFetchError(ref, f"HTTP {resp.status_code}")
            if attempt + 1 < self.max_attempts:
                # Retry transient errors with a short, capped backoff
                time.sleep(min(2.0, 0.3 * (2**attempt) + random.random() * 0.1))
        if isinstance(last_exc, AssetFetchError):
            raise last_exc
        raise AssetFetchError(ref, last_exc) from last_exc


def decode_data_url(ref: str) -> bytes:
    """Payload of a ``data:[<mime>][;base64],<data>`` reference."""
    header, sep, payload = ref.partition(",")
    if not sep:
        raise AssetFetchError(ref[:40], "malformed data URL")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=True)
        return unquote_to_bytes(payload)
    except ValueError as e:
        raise AssetFetchError(ref[:40], f"undecodable data URL: {e}") from e


class DefaultAssetStore(AssetStore):
    """Dispatch on the reference: data: URLs inline, http(s) over the network, the rest from ``root``."""

    def __init__(self, root: Optional[str] = None, timeout_s: float = ASSET_FETCH_TIMEOUT_S):
        self.local = LocalAssetStore(root) if root else None
        self.http = HttpAssetStore(timeout_s=timeout_s)

    def fetch(self, ref: str) -> bytes:
        lowered = ref.strip().lower()
        if lowered.startswith("data:"):
            return decode_data_url(ref.strip())
        if lowered.startswith(("http://", "https://")):
            return self.http.fetch(ref.strip())
        if self.local is None:
            raise AssetFetchError(ref, "no local asset root configured")
        return self.local.fetch(ref)


def default_store(timeout_s: float = ASSET_FETCH_TIMEOUT_S, root: Optional[str] = None) -> AssetStore:
    return DefaultAssetStore(root=root, timeout_s=timeout_s)


def load_image(store: AssetStore, ref: str):
    """
    Fetch and fully decode a raster asset.

    Returns:
        PIL Image in RGB, or RGBA when the source carries transparency
    """
    from PIL import Image, UnidentifiedImageError

    data = store.fetch(ref)
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise AssetFetchError(ref, f"not a decodable image: {e}") from e
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
    elif img.mode != "RGB":
        img = img.convert("RGB")
    logger.debug("Loaded asset %s (%dx%d)", ref[:80], img.width, img.height)
    return img


class AssetCache:
    """
    Decoded images for one render call.

    Failures are remembered and re-raised when the element that needs the
    asset renders, so one bad reference costs one fetch.
    """

    def __init__(self, store: AssetStore):
        self.store = store
        self._results: Dict[str, object] = {}

    def prefetch(self, refs) -> None:
        for ref in refs:
            if ref in self._results:
                continue
            try:
                self._results[ref] = load_image(self.store, ref)
            except AssetFetchError as e:
                logger.warning("Asset %s unavailable: %s", ref[:80], e)
                self._results[ref] = e
            except Exception as e:
                # Third-party stores may raise anything (TimeoutError, ConnectionError, ...)
                logger.warning("Asset %s unavailable: %s: %s", ref[:80], type(e).__name__, e)
                self._results[ref] = AssetFetchError(ref, f"{type(e).__name__}: {e}")

    def image(self, ref: str):
        if ref not in self._results:
            self.prefetch([ref])
        result = self._results[ref]
        if isinstance(result, AssetFetchError):
            raise result
        return result
