"""Inline style mutation with snapshot/restore.

Every write goes through StyleMutator.write(), which snapshots the element's
original inline values the first time it is touched. Restoring puts those
values back (priority included) and drops the snapshot, so an element carries
engine styles exactly while it has a live snapshot.
"""

from __future__ import annotations

import weakref
from collections.abc import Callable
from dataclasses import dataclass

from .classifier import ElementCategory, classify
from .color import Color, parse_color
from .config import EngineConfig
from .gradient import is_gradient
from .host import ComputedStyle, Element
from .logger import changes_enabled, checks_enabled, get_logger
from .transform import (
    gradient_is_dark,
    input_fallback_background,
    inversion_filter,
    light_text,
    transform_background,
    transform_border,
    transform_gradient,
    transform_side_border,
    transform_text,
    transform_vector_paint,
)

logger = get_logger()

IMPORTANT = "important"

# Every property the engine may write; snapshots cover all of them
TRACKED_PROPERTIES = (
    "background-color",
    "background-image",
    "color",
    "border-color",
    "border-left-color",
    "border-right-color",
    "fill",
    "stroke",
    "filter",
    "-webkit-text-fill-color",
    "background-clip",
    "-webkit-background-clip",
)

SIDES = ("left", "right")


@dataclass(frozen=True, slots=True)
class SavedProperty:
    """Original inline value and priority of one property ('' when unset)."""

    value: str
    priority: str


StyleSnapshot = dict[str, SavedProperty]


def describe(element: Element) -> str:
    """Short label for log lines, e.g. div#main.card."""
    label = element.tag_name
    ident = element.get_attribute("id")
    if ident:
        label += f"#{ident}"
    classes = element.class_name.split()
    if classes:
        label += "." + ".".join(classes[:2])
    return label


class _Pass:
    """Computed values of one element, read before its first write.

    Borders and vector paint are read live by their steps, after the text
    color is settled.
    """

    def __init__(self, element: Element, category: ElementCategory, site_dark: bool) -> None:
        self.element = element
        self.category = category
        self.site_dark = site_dark
        computed: ComputedStyle = element.computed_style()
        self.computed = computed
        self.background_color = computed.get_property_value("background-color")
        self.background_image = computed.get_property_value("background-image")
        self.color = computed.get_property_value("color")
        self.clip = computed.get_property_value(
            "-webkit-background-clip"
        ) or computed.get_property_value("background-clip")
        self.background: Color | None = parse_color(self.background_color)
        self.dark_context = site_dark
        self.text_settled = False

    @property
    def is_input(self) -> bool:
        return self.category is ElementCategory.INPUT

    @property
    def gradient_text(self) -> bool:
        return self.clip.strip().lower() == "text" and is_gradient(self.background_image)


Step = Callable[["StyleMutator", _Pass], None]


class StyleMutator:
    """Applies dark-mode transforms to elements and can undo them."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self._snapshots: weakref.WeakKeyDictionary[Element, StyleSnapshot] = (
            weakref.WeakKeyDictionary()
        )
        self._inverted: weakref.WeakSet[Element] = weakref.WeakSet()

    # -- snapshots -----------------------------------------------------

    def save_original_style(self, element: Element) -> bool:
        """Capture the original inline values; returns False if already captured."""
        if element in self._snapshots:
            return False
        style = element.style
        self._snapshots[element] = {
            name: SavedProperty(style.get_property_value(name), style.get_property_priority(name))
            for name in TRACKED_PROPERTIES
        }
        return True

    def restore_original_style(self, element: Element) -> bool:
        """Write back the snapshot and discard it; returns False if there was none."""
        snapshot = self._snapshots.pop(element, None)
        self._inverted.discard(element)
        if snapshot is None:
            return False
        style = element.style
        restored = 0
        for name, saved in snapshot.items():
            if style.get_property_value(name) == saved.value and (
                style.get_property_priority(name) == saved.priority
            ):
                continue
            if saved.value:
                style.set_property(name, saved.value, saved.priority)
            else:
                style.remove_property(name)
            restored += 1
        if restored and changes_enabled():
            logger.changes(f"restored {describe(element)} ({restored} properties)")
        return True

    def has_snapshot(self, element: Element) -> bool:
        return element in self._snapshots

    @property
    def snapshot_count(self) -> int:
        return len(self._snapshots)

    def snapshotted_elements(self) -> list[Element]:
        return list(self._snapshots.keys())

    # -- writes --------------------------------------------------------

    def write(self, element: Element, name: str, value: str) -> None:
        """Set an inline !important value, snapshotting the element first."""
        self.save_original_style(element)
        style = element.style
        if style.get_property_value(name) == value and style.get_property_priority(name) == IMPORTANT:
            return
        style.set_property(name, value, IMPORTANT)
        if changes_enabled():
            logger.changes(f"{describe(element)} {name}: {value}")

    # -- transform pipeline --------------------------------------------

    def apply_dark_mode(self, element: Element, site_dark: bool = False) -> ElementCategory:
        """Run the category's rule pipeline on one element.

        On a dark site only the text-legibility exceptions run.
        """
        category = classify(element, self.config.thresholds)
        steps = PIPELINES[category]
        if not steps:
            if checks_enabled():
                logger.checks(f"{describe(element)}: skipped ({category.value})")
            return category
        state = _Pass(element, category, site_dark)
        if checks_enabled():
            logger.checks(f"{describe(element)}: {category.value}, site_dark={site_dark}")
        for step in steps:
            if site_dark and step not in DARK_SITE_STEPS:
                continue
            step(self, state)
        return category

    def mark_inverted(self, element: Element) -> None:
        self._inverted.add(element)

    def is_inside_inverted(self, element: Element) -> bool:
        node = element.parent_element
        while node is not None:
            if node in self._inverted:
                return True
            node = node.parent_element
        return False


# ============================================================================
# Pipeline steps
# ============================================================================


def _invert_icon(mutator: StyleMutator, state: _Pass) -> None:
    mutator.write(state.element, "filter", inversion_filter(mutator.config.colors))
    mutator.mark_inverted(state.element)


def _rewrite_gradient_background(mutator: StyleMutator, state: _Pass) -> None:
    if not is_gradient(state.background_image):
        return
    new_value = transform_gradient(state.background_image, mutator.config.thresholds)
    if new_value is not None:
        mutator.write(state.element, "background-image", new_value)


def _rewrite_background(mutator: StyleMutator, state: _Pass) -> None:
    thresholds = mutator.config.thresholds
    element = state.element
    if state.background is not None:
        new_value = transform_background(state.background, state.is_input, thresholds)
        if new_value is not None:
            mutator.write(element, "background-color", new_value)
        if state.is_input:
            mutator.write(element, "border-color", mutator.config.colors.input_border)
    elif state.is_input:
        mutator.write(element, "background-color", input_fallback_background(thresholds))
        mutator.write(element, "border-color", mutator.config.colors.input_border)


def _derive_dark_context(mutator: StyleMutator, state: _Pass) -> None:
    thresholds = mutator.config.thresholds
    element_dark = (
        state.background is not None and state.background.brightness <= thresholds.bg_brightness
    )
    state.dark_context = (
        state.site_dark or element_dark or gradient_is_dark(state.background_image, thresholds)
    )


def _solid_text_fill(mutator: StyleMutator, state: _Pass) -> None:
    fill = light_text(mutator.config.thresholds)
    mutator.write(state.element, "background-image", "none")
    mutator.write(state.element, "-webkit-text-fill-color", fill)
    mutator.write(state.element, "color", fill)
    state.text_settled = True


def _strip_gradient_text(mutator: StyleMutator, state: _Pass) -> None:
    # A clipped gradient cannot be partially darkened and stay legible
    if state.gradient_text:
        _solid_text_fill(mutator, state)


def _strip_dark_gradient_text(mutator: StyleMutator, state: _Pass) -> None:
    if state.text_settled or not state.gradient_text:
        return
    if gradient_is_dark(state.background_image, mutator.config.thresholds):
        _solid_text_fill(mutator, state)


def _rewrite_text(mutator: StyleMutator, state: _Pass) -> None:
    if state.text_settled:
        return
    new_value = transform_text(
        parse_color(state.color),
        state.category,
        state.dark_context,
        mutator.config.thresholds,
    )
    if new_value is not None:
        mutator.write(state.element, "color", new_value)


def _rewrite_borders(mutator: StyleMutator, state: _Pass) -> None:
    thresholds = mutator.config.thresholds
    border = parse_color(state.computed.get_property_value("border-color"))
    if border is not None:
        new_value = transform_border(border, thresholds)
        if new_value is not None:
            mutator.write(state.element, "border-color", new_value)

    for side in SIDES:
        if not _has_visible_side(state.computed, side):
            continue
        color = parse_color(state.computed.get_property_value(f"border-{side}-color"))
        if color is None:
            continue
        new_value = transform_side_border(color, thresholds, mutator.config.colors)
        if new_value is not None:
            mutator.write(state.element, f"border-{side}-color", new_value)


def _has_visible_side(computed: ComputedStyle, side: str) -> bool:
    style = computed.get_property_value(f"border-{side}-style").strip().lower()
    if style in ("", "none", "hidden"):
        return False
    width = computed.get_property_value(f"border-{side}-width").strip().lower()
    try:
        return float(width.removesuffix("px") or 0) > 0
    except ValueError:
        # Keywords such as 'thin' are visible widths
        return width in ("thin", "medium", "thick")


def _rewrite_vector_paint(mutator: StyleMutator, state: _Pass) -> None:
    if mutator.is_inside_inverted(state.element):
        return
    for name in ("fill", "stroke"):
        paint = parse_color(state.computed.get_property_value(name))
        if paint is None:
            continue
        new_value = transform_vector_paint(paint, mutator.config.thresholds, mutator.config.colors)
        if new_value is not None:
            mutator.write(state.element, name, new_value)


_TEXT_STEPS: tuple[Step, ...] = (
    _rewrite_gradient_background,
    _rewrite_background,
    _derive_dark_context,
    _strip_gradient_text,
    _strip_dark_gradient_text,
    _rewrite_text,
)

PIPELINES: dict[ElementCategory, tuple[Step, ...]] = {
    ElementCategory.SKIP: (),
    ElementCategory.INVERTIBLE: (_invert_icon,),
    ElementCategory.INPUT: _TEXT_STEPS,
    ElementCategory.BRIGHT_TEXT: (*_TEXT_STEPS, _rewrite_borders),
    ElementCategory.PLAIN: (*_TEXT_STEPS, _rewrite_borders),
    ElementCategory.VECTOR: (*_TEXT_STEPS, _rewrite_borders, _rewrite_vector_paint),
}

# The only steps that run on a site that already has a dark theme
DARK_SITE_STEPS: frozenset[Step] = frozenset({_strip_dark_gradient_text})
