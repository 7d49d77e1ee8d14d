"""Color predicates, site-theme detection and element categories."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .color import Color, parse_color
from .config import ThresholdSet

if TYPE_CHECKING:
    from .host import Document, Element

DEFAULT_THRESHOLDS = ThresholdSet()

ICON_MARKERS = ("icon", "logo")


class ElementCategory(str, Enum):
    """How the engine treats an element, decided once from its tag."""

    SKIP = "skip"  # Media and embedded content, left untouched
    INPUT = "input"  # Form controls
    BRIGHT_TEXT = "bright_text"  # Headings, labels, links, emphasis
    VECTOR = "vector"  # SVG shapes with fill/stroke paint
    INVERTIBLE = "invertible"  # Small icon/logo images, recolored by filter
    PLAIN = "plain"


SKIP_TAGS = frozenset(
    {"video", "audio", "iframe", "canvas", "picture", "embed", "object", "source", "track"}
)
IMAGE_TAGS = frozenset({"img", "svg"})
INPUT_TAGS = frozenset({"input", "textarea", "select", "button"})
VECTOR_TAGS = frozenset({"path", "rect", "circle", "ellipse", "polygon", "line", "polyline"})
BRIGHT_TEXT_TAGS = frozenset(
    {"h1", "h2", "h3", "h4", "h5", "h6", "label", "legend", "th", "strong", "b", "em", "a"}
)

_TAG_CATEGORIES: dict[str, ElementCategory] = {
    **dict.fromkeys(SKIP_TAGS, ElementCategory.SKIP),
    **dict.fromkeys(INPUT_TAGS, ElementCategory.INPUT),
    **dict.fromkeys(VECTOR_TAGS, ElementCategory.VECTOR),
    **dict.fromkeys(BRIGHT_TEXT_TAGS, ElementCategory.BRIGHT_TEXT),
}


def is_light_background(color: Color, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    return color.brightness > thresholds.bg_brightness


def is_colorful(color: Color, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    """Saturated colors carry meaning (brand, links, warnings) and are kept."""
    return color.hsl.s > thresholds.colorful_saturation


def is_near_black(color: Color, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    return color.brightness < thresholds.keep_black


def is_dark_sample(color: Color | None, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    return color is not None and color.brightness < thresholds.site_dark_brightness


def detect_dark_site(document: Document, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    """Sample root and body backgrounds; either one being dark marks a dark site."""
    body_bg = parse_color(document.body.computed_style().get_property_value("background-color"))
    root_bg = parse_color(
        document.document_element.computed_style().get_property_value("background-color")
    )
    return is_dark_sample(body_bg, thresholds) or is_dark_sample(root_bg, thresholds)


def looks_like_icon(element: Element, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    """Best-effort guess whether an image is a small icon or logo.

    Both rendered dimensions must be below icon_max_size, and the class list or
    the image source must mention "icon" or "logo". False positives and misses
    are expected.
    """
    width, height = element.bounding_size()
    if width >= thresholds.icon_max_size or height >= thresholds.icon_max_size:
        return False
    haystacks = [
        element.class_name,
        element.get_attribute("src") or "",
        element.get_attribute("href") or "",
        element.get_attribute("xlink:href") or "",
    ]
    text = " ".join(haystacks).lower()
    return any(marker in text for marker in ICON_MARKERS)


def classify(element: Element, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> ElementCategory:
    """Place an element in exactly one category."""
    tag = element.tag_name.lower()
    if tag in IMAGE_TAGS:
        if looks_like_icon(element, thresholds):
            return ElementCategory.INVERTIBLE
        return ElementCategory.SKIP
    return _TAG_CATEGORIES.get(tag, ElementCategory.PLAIN)
