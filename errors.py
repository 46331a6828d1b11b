"""Error taxonomy for badge rendering.

Only ConfigurationError is allowed to escape compositor.compose(); the other
classes are absorbed per element and reported on the returned document.
"""

from __future__ import annotations

from typing import Optional


class BadgeError(Exception):
    """Base class for every error raised by the renderer."""


class ConfigurationError(BadgeError):
    """Structural template problem (bad page size, malformed element, no template for a category)."""


class ElementError(BadgeError):
    """An error tied to a single template element."""

    kind = "render"

    def __init__(self, element_id: Optional[str], cause: object):
        self.element_id = element_id
        self.cause = cause
        super().__init__(f"element {element_id!r}: {cause}")


class AssetFetchError(ElementError):
    """Asset reference could not be fetched or decoded (missing, timed out, corrupt)."""

    kind = "asset"

    def __init__(self, ref: str, cause: object, element_id: Optional[str] = None):
        self.ref = ref
        super().__init__(element_id, f"asset {ref!r}: {cause}")


class RenderError(ElementError):
    """Drawing failure for one element not covered by the other classes."""

    kind = "render"


class EncodingError(ElementError):
    """QR payload could not be encoded."""

    kind = "encoding"

    def __init__(self, cause: object, element_id: Optional[str] = None):
        super().__init__(element_id, cause)
