"""Pure color transforms.

Every function maps an input value plus element context to the CSS value the
engine should write, or None for "no change". Nothing here reads or writes a
document.
"""

from __future__ import annotations

from dataclasses import replace

from .classifier import (
    DEFAULT_THRESHOLDS,
    ElementCategory,
    is_colorful,
    is_light_background,
    is_near_black,
)
from .color import Color, format_rgb, hsl_to_rgb
from .config import OutputColors, ThresholdSet
from .gradient import GradientValue, is_gradient

DEFAULT_COLORS = OutputColors()

PERCENT_PER_BRIGHTNESS = 2.55  # 0-255 brightness scale to HSL lightness percent
BACKGROUND_SATURATION_FACTOR = 0.3
BACKGROUND_SATURATION_CAP = 20
BORDER_SATURATION_CAP = 15
BORDER_LIGHTNESS = 30
INPUT_FALLBACK_LIFT = 10  # Unparseable input backgrounds sit this far above the input band

BRIGHT_CATEGORIES = frozenset({ElementCategory.INPUT, ElementCategory.BRIGHT_TEXT})


def background_lightness(
    color: Color, is_input: bool = False, thresholds: ThresholdSet = DEFAULT_THRESHOLDS
) -> float:
    """Target lightness on the 0-255 scale for a light background.

    The brightness-weighted halves of the dark range always sum to the whole
    half range, so every light input lands on the band midpoint.
    """
    normalized = (color.brightness - thresholds.bg_brightness) / (255 - thresholds.bg_brightness)
    half_range = thresholds.dark_range * 0.5
    lightness = thresholds.dark_min + (1 - normalized) * half_range + normalized * half_range
    if is_input:
        lightness += thresholds.input_offset
    return lightness


def darken_background(
    color: Color, is_input: bool = False, thresholds: ThresholdSet = DEFAULT_THRESHOLDS
) -> Color | None:
    """Map a light background into the dark band, keeping a trace of its hue."""
    if not is_light_background(color, thresholds):
        return None
    hsl = color.hsl
    saturation = min(hsl.s * BACKGROUND_SATURATION_FACTOR, BACKGROUND_SATURATION_CAP)
    lightness = background_lightness(color, is_input, thresholds)
    return Color(*hsl_to_rgb(hsl.h, saturation, lightness / PERCENT_PER_BRIGHTNESS))


def transform_background(
    color: Color, is_input: bool = False, thresholds: ThresholdSet = DEFAULT_THRESHOLDS
) -> str | None:
    darkened = darken_background(color, is_input, thresholds)
    return format_rgb(darkened) if darkened is not None else None


def input_fallback_background(thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> str:
    """Background for form controls whose own background is transparent."""
    level = int(thresholds.dark_min + thresholds.input_offset + INPUT_FALLBACK_LIFT)
    return format_rgb(Color(level, level, level))


def transform_gradient(value: str, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> str | None:
    """Darken every light stop of a gradient, leaving its geometry alone.

    Stops keep their original alpha.
    """
    if not is_gradient(value):
        return None

    def darken(stop: Color) -> str | None:
        darkened = darken_background(stop, thresholds=thresholds)
        if darkened is None:
            return None
        return format_rgb(replace(darkened, a=stop.a))

    return GradientValue.parse(value).map_colors(darken)


def gradient_is_dark(value: str, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> bool:
    """True when the mean stop brightness is at or below the background threshold."""
    if not is_gradient(value):
        return False
    mean = GradientValue.parse(value).mean_brightness
    return mean is not None and mean <= thresholds.bg_brightness


def light_text(thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> str:
    level = thresholds.light_text_target
    return format_rgb(Color(level, level, level))


def transform_text(
    color: Color | None,
    category: ElementCategory = ElementCategory.PLAIN,
    dark_context: bool = False,
    thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
) -> str | None:
    """Decide the text color of an element.

    Colorful text is semantic and kept. Near-black text on a dark background
    was put there on purpose and is kept. Remaining gray-to-black text
    becomes light. Form controls, headings, labels and links get light text
    even when their color cannot be read.
    """
    if color is None:
        return light_text(thresholds) if category in BRIGHT_CATEGORIES else None
    if is_colorful(color, thresholds):
        return None
    if dark_context and is_near_black(color, thresholds):
        return None
    if color.brightness < thresholds.text_brightness:
        return light_text(thresholds)
    return None


def transform_border(color: Color, thresholds: ThresholdSet = DEFAULT_THRESHOLDS) -> str | None:
    """Bright borders become a dim, mostly desaturated line."""
    if color.brightness <= thresholds.border_brightness:
        return None
    hsl = color.hsl
    saturation = min(hsl.s * BACKGROUND_SATURATION_FACTOR, BORDER_SATURATION_CAP)
    return format_rgb(Color(*hsl_to_rgb(hsl.h, saturation, BORDER_LIGHTNESS)))


def transform_side_border(
    color: Color,
    thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
    colors: OutputColors = DEFAULT_COLORS,
) -> str | None:
    """Bright left/right rules (thread indicators) become flat dark gray."""
    if color.brightness <= thresholds.border_brightness:
        return None
    return colors.side_border


def transform_vector_paint(
    color: Color,
    thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
    colors: OutputColors = DEFAULT_COLORS,
) -> str | None:
    """Dark neutral fill/stroke would vanish on a dark page; lift it to light gray."""
    if color.brightness >= thresholds.vector_brightness or is_colorful(color, thresholds):
        return None
    return colors.vector_paint


def inversion_filter(colors: OutputColors = DEFAULT_COLORS) -> str:
    return colors.inversion_filter
