"""Tests for the pure color transforms."""

import pytest

from darkpage.classifier import ElementCategory
from darkpage.color import Color, parse_color
from darkpage.config import OutputColors, ThresholdSet
from darkpage.transform import (
    darken_background,
    gradient_is_dark,
    input_fallback_background,
    inversion_filter,
    transform_background,
    transform_border,
    transform_gradient,
    transform_side_border,
    transform_text,
    transform_vector_paint,
)

WHITE = Color(255, 255, 255)


class TestTransformBackground:
    """Test background darkening."""

    @pytest.mark.parametrize("level", [0, 50, 100])
    def test_dark_backgrounds_unchanged(self, level: int) -> None:
        assert transform_background(Color(level, level, level)) is None

    def test_gray_50_unchanged(self) -> None:
        assert transform_background(Color(50, 50, 50)) is None

    def test_white_lands_in_dark_band(self) -> None:
        result = parse_color(transform_background(WHITE))
        assert result is not None
        hsl = result.hsl
        assert hsl.s == 0
        assert 10 <= hsl.l * 2.55 <= 25
        assert (result.r, result.g, result.b) == (18, 18, 18)

    def test_darken_background_returns_opaque_color(self) -> None:
        assert darken_background(Color(255, 255, 255, 0.4)) == Color(18, 18, 18)
        assert darken_background(Color(50, 50, 50)) is None

    def test_every_light_input_lands_on_band_midpoint(self) -> None:
        assert transform_background(Color(101, 101, 101)) == "rgb(18, 18, 18)"
        assert transform_background(Color(200, 200, 200)) == "rgb(18, 18, 18)"

    def test_tint_is_kept_but_muted(self) -> None:
        result = parse_color(transform_background(Color(255, 240, 200)))
        assert result is not None
        assert 10 <= result.brightness <= 25
        assert result.r >= result.b

    def test_input_sits_above_band(self) -> None:
        assert transform_background(WHITE, is_input=True) == "rgb(28, 28, 28)"

    def test_output_is_opaque(self) -> None:
        assert transform_background(Color(255, 255, 255, 0.4)) == "rgb(18, 18, 18)"

    def test_input_fallback(self) -> None:
        assert input_fallback_background() == "rgb(30, 30, 30)"

    def test_custom_band(self) -> None:
        thresholds = ThresholdSet(dark_min=40, dark_max=40)
        result = parse_color(transform_background(WHITE, thresholds=thresholds))
        assert result is not None
        assert result.r == 40


class TestTransformText:
    """Test text color decisions."""

    def test_gray_text_becomes_light(self) -> None:
        assert transform_text(Color(68, 68, 68)) == "rgb(255, 255, 255)"

    def test_colorful_text_unchanged(self) -> None:
        assert transform_text(Color(200, 30, 30)) is None
        assert transform_text(Color(0, 102, 204), ElementCategory.BRIGHT_TEXT) is None

    def test_already_light_text_unchanged(self) -> None:
        assert transform_text(Color(230, 230, 230)) is None

    def test_near_black_kept_on_dark_background(self) -> None:
        assert transform_text(Color(0, 0, 0), dark_context=True) is None

    def test_near_black_lightened_on_light_background(self) -> None:
        assert transform_text(Color(0, 0, 0), dark_context=False) == "rgb(255, 255, 255)"

    def test_dark_gray_lightened_in_dark_context(self) -> None:
        assert transform_text(Color(90, 90, 90), dark_context=True) == "rgb(255, 255, 255)"

    def test_unparseable_color(self) -> None:
        assert transform_text(None, ElementCategory.PLAIN) is None
        assert transform_text(None, ElementCategory.INPUT) == "rgb(255, 255, 255)"
        assert transform_text(None, ElementCategory.BRIGHT_TEXT) == "rgb(255, 255, 255)"

    def test_light_text_target(self) -> None:
        thresholds = ThresholdSet(light_text_target=230)
        assert transform_text(Color(68, 68, 68), thresholds=thresholds) == "rgb(230, 230, 230)"


class TestBordersAndPaint:
    """Test border, vector paint and icon outputs."""

    def test_bright_border_dimmed(self) -> None:
        result = parse_color(transform_border(Color(220, 220, 220)))
        assert result is not None
        assert result.r == result.g == result.b
        assert 76 <= result.r <= 77

    def test_border_saturation_capped(self) -> None:
        result = parse_color(transform_border(Color(255, 200, 200)))
        assert result is not None
        assert result.hsl.s <= 16

    def test_dim_border_unchanged(self) -> None:
        assert transform_border(Color(150, 150, 150)) is None
        assert transform_border(Color(0, 0, 0)) is None

    def test_side_border(self) -> None:
        assert transform_side_border(Color(200, 200, 200)) == "rgb(51, 51, 51)"
        assert transform_side_border(Color(100, 100, 100)) is None
        colors = OutputColors(side_border="rgb(60, 60, 60)")
        assert transform_side_border(WHITE, colors=colors) == "rgb(60, 60, 60)"

    def test_vector_paint(self) -> None:
        assert transform_vector_paint(Color(60, 60, 60)) == "rgb(224, 224, 224)"
        assert transform_vector_paint(Color(0, 128, 0)) is None
        assert transform_vector_paint(Color(200, 200, 200)) is None

    def test_inversion_filter(self) -> None:
        assert inversion_filter() == "invert(1) brightness(1.2)"


class TestGradients:
    """Test gradient rewrites."""

    def test_light_stops_darkened_geometry_kept(self) -> None:
        value = "linear-gradient(90deg, rgb(255,255,255) 0%, rgb(200,200,200) 100%)"
        assert transform_gradient(value) == (
            "linear-gradient(90deg, rgb(18, 18, 18) 0%, rgb(18, 18, 18) 100%)"
        )

    def test_alpha_preserved(self) -> None:
        value = "linear-gradient(to bottom, rgba(255, 255, 255, 0.5), rgb(0, 0, 0))"
        assert transform_gradient(value) == (
            "linear-gradient(to bottom, rgba(18, 18, 18, 0.5), rgb(0, 0, 0))"
        )

    def test_dark_gradient_unchanged(self) -> None:
        assert transform_gradient("linear-gradient(rgb(0, 0, 0), rgb(40, 40, 40))") is None

    def test_not_a_gradient(self) -> None:
        assert transform_gradient("url(hero.png)") is None
        assert transform_gradient("none") is None

    def test_gradient_is_dark(self) -> None:
        assert gradient_is_dark("linear-gradient(90deg, rgb(20, 20, 60), rgb(40, 40, 90))")
        assert not gradient_is_dark("linear-gradient(rgb(255, 255, 255), rgb(200, 200, 200))")
        assert not gradient_is_dark("linear-gradient(red, blue)")
        assert not gradient_is_dark("none")
