"""Color model: functional color parsing, brightness and RGB/HSL conversion.

Only the functional `rgb()` / `rgba()` notation is understood, since that is
the only form computed styles ever report. Anything else parses to None,
which callers treat as "leave this property alone".
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

# Perceptual luma weights, per mille so gray levels come out exact
LUMA_RED = 299
LUMA_GREEN = 587
LUMA_BLUE = 114

CHANNEL_MAX = 255
HSL_LIGHTNESS_MIDPOINT = 0.5  # HSL lightness midpoint for color conversion

# Body of a functional color; shared by the anchored parser and the gradient scanner
COLOR_FUNCTION_PATTERN = (
    r"rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*(\d*\.?\d+)\s*)?\)"
)
_COLOR_RE = re.compile(rf"^\s*{COLOR_FUNCTION_PATTERN}\s*$", re.IGNORECASE)


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (17.5 -> 18)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True, slots=True)
class HSL:
    """Hue in degrees [0, 360), saturation and lightness as percentages."""

    h: float
    s: float
    l: float  # noqa: E741 - conventional HSL component name


@dataclass(frozen=True, slots=True)
class Color:
    """An sRGB color with integer channels and float alpha."""

    r: int
    g: int
    b: int
    a: float = 1.0

    @classmethod
    def from_match(cls, groups: tuple[str | None, ...]) -> Color | None:
        """Build a color from regex groups, or None if any channel is out of range."""
        r, g, b = (int(groups[i] or 0) for i in range(3))
        if max(r, g, b) > CHANNEL_MAX:
            return None
        alpha = float(groups[3]) if groups[3] is not None else 1.0
        if alpha > 1:
            return None
        return cls(r, g, b, alpha)

    @property
    def brightness(self) -> float:
        return brightness(self.r, self.g, self.b)

    @property
    def hsl(self) -> HSL:
        return rgb_to_hsl(self.r, self.g, self.b)

    @property
    def is_opaque(self) -> bool:
        return self.a >= 1

    def __str__(self) -> str:
        return format_rgb(self)


def parse_color(value: str | None) -> Color | None:
    """Parse a computed color string.

    Args:
        value: e.g. 'rgb(255, 255, 255)' or 'rgba(0, 0, 0, 0.5)'

    Returns:
        The parsed Color, or None for empty input, 'transparent', fully
        transparent colors, out-of-range channels and unrecognized syntax.
    """
    if not value:
        return None
    match = _COLOR_RE.match(value)
    if not match:
        return None
    color = Color.from_match(match.groups())
    if color is None or color.a == 0:
        return None
    return color


def brightness(r: float, g: float, b: float) -> float:
    """Perceptual brightness in [0, 255]."""
    return (LUMA_RED * r + LUMA_GREEN * g + LUMA_BLUE * b) / 1000


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    """Convert 0-255 RGB channels to HSL (degrees, percent, percent)."""
    rf, gf, bf = r / CHANNEL_MAX, g / CHANNEL_MAX, b / CHANNEL_MAX
    high = max(rf, gf, bf)
    low = min(rf, gf, bf)
    lightness = (high + low) / 2

    if high == low:
        return HSL(0.0, 0.0, lightness * 100)

    d = high - low
    s = d / (2 - high - low) if lightness > HSL_LIGHTNESS_MIDPOINT else d / (high + low)
    if high == rf:
        h = (gf - bf) / d + (6 if gf < bf else 0)
    elif high == gf:
        h = (bf - rf) / d + 2
    else:
        h = (rf - gf) / d + 4

    return HSL((h / 6) * 360 % 360, s * 100, lightness * 100)


def hsl_to_rgb(h: float, s: float, lightness: float) -> tuple[int, int, int]:
    """Convert HSL to 0-255 RGB channels.

    Args:
        h: Hue in degrees (0-360)
        s: Saturation as percentage (0-100)
        lightness: Lightness as percentage (0-100)
    """
    h = h / 360
    s = s / 100
    lightness = lightness / 100

    if s == 0:
        r = g = b = lightness
    else:

        def hue_to_rgb(p: float, q: float, t: float) -> float:
            if t < 0:
                t += 1
            if t > 1:
                t -= 1
            if t < 1 / 6:
                return p + (q - p) * 6 * t
            if t < 1 / 2:
                return q
            if t < 2 / 3:
                return p + (q - p) * (2 / 3 - t) * 6
            return p

        q = (
            lightness * (1 + s)
            if lightness < HSL_LIGHTNESS_MIDPOINT
            else lightness + s - lightness * s
        )
        p = 2 * lightness - q
        r = hue_to_rgb(p, q, h + 1 / 3)
        g = hue_to_rgb(p, q, h)
        b = hue_to_rgb(p, q, h - 1 / 3)

    return _to_channel(r), _to_channel(g), _to_channel(b)


def format_rgb(color: Color) -> str:
    """Format a color as CSS, keeping alpha only when it is not opaque."""
    if color.is_opaque:
        return f"rgb({color.r}, {color.g}, {color.b})"
    return f"rgba({color.r}, {color.g}, {color.b}, {color.a:g})"


def _to_channel(fraction: float) -> int:
    # Trim float noise first so exact halves (17.5) round the same way every time
    value = round_half_up(round(fraction * CHANNEL_MAX, 9))
    return max(0, min(CHANNEL_MAX, value))
