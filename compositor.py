"""
Document compositor: template + render context -> one fixed-size badge document.

compose() is stateless and safe to call from many threads or processes at
once. Only ConfigurationError escapes it; any other failure is confined to the
element that caused it and reported on RenderedDocument.failures.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from assets import AssetCache, default_store
from config import PAGE_BACKGROUND_COLOR
from elements import build_renderers
from errors import ElementError, RenderError
from layout import page_size, resolve
from models import (
    ELEMENT_BACKGROUND,
    ELEMENT_LOGO,
    AnyElement,
    BackgroundElement,
    BadgeTemplate,
    ElementFailure,
    RenderContext,
    RenderedDocument,
    RenderOptions,
)
from surfaces import create_surface
from templates import legacy_elements

logger = logging.getLogger(__name__)

TEMPLATE_BACKGROUND_ID = "template-background"


def _draw_order(
    template: BadgeTemplate, context: RenderContext, width_cm: float
) -> Tuple[AnyElement, ...]:
    """Visible elements, backgrounds first, everything else in stored order."""
    elements = template.elements or legacy_elements(template, context, width_cm)
    visible = [e for e in elements if e.visible]
    backgrounds = [e for e in visible if e.type == ELEMENT_BACKGROUND]
    others = [e for e in visible if e.type != ELEMENT_BACKGROUND]
    if not backgrounds and template.background_image_ref:
        backgrounds = [BackgroundElement(id=TEMPLATE_BACKGROUND_ID, asset_ref=template.background_image_ref)]
    return tuple(backgrounds + others)


def _asset_refs(elements, context: RenderContext) -> List[str]:
    refs: List[str] = []
    for element in elements:
        if element.type == ELEMENT_LOGO:
            ref = element.asset_ref or context.event.logo_ref
        elif element.type == ELEMENT_BACKGROUND:
            ref = element.asset_ref or context.template.background_image_ref
        else:
            continue
        if ref and ref not in refs:
            refs.append(ref)
    return refs


def compose(
    template: BadgeTemplate,
    context: RenderContext,
    options: Optional[RenderOptions] = None,
) -> RenderedDocument:
    """
    Render one badge.

    Args:
        template: Validated badge template (see models.template_from_dict)
        context: Attendee and event for this badge
        options: Output format, DPI, asset store, fonts; defaults to vector PDF

    Returns:
        RenderedDocument whose physical page size equals the template's badge size

    Raises:
        ConfigurationError: invalid page size, raised before anything is fetched or drawn
    """
    options = options or RenderOptions()
    width_cm, height_cm = page_size(template)
    context = replace(context, template=template)

    elements = _draw_order(template, context, width_cm)
    images = AssetCache(options.asset_store or default_store(timeout_s=options.asset_timeout_s))
    images.prefetch(_asset_refs(elements, context))

    surface = create_surface(options.output_format, width_cm, height_cm, options.dpi)
    surface.fill_rect(0, 0, width_cm, height_cm, PAGE_BACKGROUND_COLOR)
    renderers = build_renderers(options, images)

    failures: List[ElementFailure] = []
    for element in elements:
        box = resolve(element, width_cm, height_cm)
        try:
            renderers[element.type].render(surface, box, element, context)
        except ElementError as e:
            logger.warning("Badge %s: element %r left blank (%s): %s",
                           context.attendee.qr_uuid, element.id, e.kind, e.cause)
            failures.append(ElementFailure(e.element_id or element.id, e.kind, str(e.cause)))
        except Exception as e:
            logger.exception("Badge %s: element %r failed to draw", context.attendee.qr_uuid, element.id)
            failures.append(ElementFailure(element.id, RenderError.kind, f"{type(e).__name__}: {e}"))

    content = surface.finalize()
    logger.info(
        "Rendered badge %s: %s, %.2f x %.2f cm, %d element(s), %d failure(s)",
        context.attendee.qr_uuid, surface.mime_type, width_cm, height_cm, len(elements), len(failures),
    )
    return RenderedDocument(
        content=content,
        mime_type=surface.mime_type,
        width_cm=width_cm,
        height_cm=height_cm,
        failures=tuple(failures),
    )
