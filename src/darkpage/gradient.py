"""Typed view of the color tokens inside a CSS gradient value.

Tokens remember their offsets in the source text, so a rewritten gradient is
rebuilt from the original text between tokens and every angle, stop position
and keyword survives verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from .color import COLOR_FUNCTION_PATTERN, Color

_TOKEN_RE = re.compile(COLOR_FUNCTION_PATTERN, re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ColorToken:
    """One functional color inside a gradient."""

    start: int
    end: int
    text: str
    color: Color | None  # None when out of range or fully transparent


@dataclass(frozen=True, slots=True)
class GradientValue:
    """A background-image value split into color tokens."""

    source: str
    tokens: tuple[ColorToken, ...]

    @classmethod
    def parse(cls, value: str) -> GradientValue:
        tokens: list[ColorToken] = []
        for match in _TOKEN_RE.finditer(value):
            color = Color.from_match(match.groups())
            if color is not None and color.a == 0:
                color = None
            tokens.append(ColorToken(match.start(), match.end(), match.group(0), color))
        return cls(value, tuple(tokens))

    @property
    def colors(self) -> list[Color]:
        return [token.color for token in self.tokens if token.color is not None]

    @property
    def mean_brightness(self) -> float | None:
        """Mean brightness of the visible stops, None when there are none."""
        colors = self.colors
        if not colors:
            return None
        return sum(c.brightness for c in colors) / len(colors)

    def rebuild(self, replacements: Mapping[int, str]) -> str:
        """Return the source with tokens at the given indexes replaced."""
        pieces: list[str] = []
        cursor = 0
        for index, token in enumerate(self.tokens):
            pieces.append(self.source[cursor : token.start])
            pieces.append(replacements.get(index, token.text))
            cursor = token.end
        pieces.append(self.source[cursor:])
        return "".join(pieces)

    def map_colors(self, func: Callable[[Color], str | None]) -> str | None:
        """Rewrite each visible stop with func; None if func changed nothing."""
        replacements: dict[int, str] = {}
        for index, token in enumerate(self.tokens):
            if token.color is None:
                continue
            new_value = func(token.color)
            if new_value is not None:
                replacements[index] = new_value
        if not replacements:
            return None
        return self.rebuild(replacements)


def is_gradient(value: str | None) -> bool:
    return value is not None and "gradient" in value.lower()
