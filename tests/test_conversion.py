"""Tests for RGB/HSV/HSB conversions."""

import pytest

from desktop_dye.colors.conversion import (
    HsbTriple,
    brightness_percent,
    channel_to_unit,
    hsv_to_rgb,
    rgb_to_hsv,
    round_half_away,
    to_hex,
    to_hsb,
    unit_to_channel,
)
from desktop_dye.core.models import HsvColor, RgbColor


class TestRoundHalfAway:
    """Tests for round_half_away."""

    def test_halves_round_away_from_zero(self):
        assert round_half_away(2.5, 0) == 3.0
        assert round_half_away(-2.5, 0) == -3.0

    def test_three_places(self):
        assert round_half_away(12.3456) == 12.346
        assert round_half_away(-12.3454) == -12.345

    def test_integers_unchanged(self):
        assert round_half_away(100.0) == 100.0
        assert round_half_away(0.0) == 0.0


class TestChannelMapping:
    """Tests for 8-bit <-> unit interval mapping."""

    def test_exact_endpoints(self):
        assert channel_to_unit(0) == 0.0
        assert channel_to_unit(255) == 1.0

    def test_unit_to_channel_clamps(self):
        assert unit_to_channel(1.5) == 255
        assert unit_to_channel(-0.2) == 0

    def test_unit_to_channel_truncates(self):
        assert unit_to_channel(0.5) == 127
        assert unit_to_channel(0.999) == 254


class TestRgbToHsv:
    """Tests for rgb_to_hsv."""

    def test_primaries(self):
        red = rgb_to_hsv(RgbColor.of(255, 0, 0))
        assert red == HsvColor.of(0.0, 1.0, 1.0)

        green = rgb_to_hsv(RgbColor.of(0, 255, 0))
        assert green.hue == pytest.approx(120.0)
        assert green.saturation == 1.0
        assert green.value == 1.0

    def test_grey_has_no_saturation(self):
        grey = rgb_to_hsv(RgbColor.of(128, 128, 128))
        assert grey.hue == 0.0
        assert grey.saturation == 0.0
        assert grey.value == pytest.approx(128 / 255)

    def test_hue_in_degrees(self):
        for color in [RgbColor.of(10, 200, 30), RgbColor.of(250, 3, 180), RgbColor.of(1, 2, 3)]:
            hsv = rgb_to_hsv(color)
            assert 0.0 <= hsv.hue < 360.0


class TestHsvToRgb:
    """Tests for hsv_to_rgb."""

    def test_primaries(self):
        assert hsv_to_rgb(HsvColor.of(0.0, 1.0, 1.0)) == RgbColor.of(255, 0, 0)
        assert hsv_to_rgb(HsvColor.of(120.0, 1.0, 1.0)) == RgbColor.of(0, 255, 0)

    def test_black_and_white(self):
        assert hsv_to_rgb(HsvColor.of(0.0, 0.0, 0.0)) == RgbColor.of(0, 0, 0)
        assert hsv_to_rgb(HsvColor.of(200.0, 0.0, 1.0)) == RgbColor.of(255, 255, 255)

    def test_hue_wraps(self):
        assert hsv_to_rgb(HsvColor.of(360.0, 1.0, 1.0)) == RgbColor.of(255, 0, 0)

    @pytest.mark.parametrize(
        "rgb",
        [(0, 0, 0), (255, 255, 255), (12, 34, 56), (200, 100, 50), (128, 0, 255), (77, 77, 78)],
    )
    def test_round_trip_within_one(self, rgb):
        """HSV round trips lose at most one step per channel."""
        original = RgbColor.of(*rgb)
        result = hsv_to_rgb(rgb_to_hsv(original))
        for before, after in zip(original.as_tuple(), result.as_tuple()):
            assert abs(before - after) <= 1


class TestToHex:
    """Tests for to_hex."""

    def test_rgb(self):
        assert to_hex(RgbColor.of(255, 128, 0)) == "ff8000"
        assert to_hex(RgbColor.of(0, 0, 0)) == "000000"

    def test_hsv(self):
        assert to_hex(HsvColor.of(0.0, 1.0, 1.0)) == "ff0000"


class TestToHsb:
    """Tests for to_hsb and brightness_percent."""

    def test_full_color(self):
        assert to_hsb(HsvColor.of(120.0, 1.0, 1.0)) == HsbTriple(120.0, 100.0, 100.0)

    def test_brightness_percent(self):
        assert brightness_percent(HsvColor.of(0.0, 0.0, 0.5)) == 50.0
        assert brightness_percent(HsvColor.of(0.0, 0.0, 0.0)) == 0.0

    def test_values_rounded(self):
        hsb = to_hsb(HsvColor.of(12.34567, 0.123456, 0.5))
        assert hsb.hue == 12.346
        assert hsb.saturation == 12.346
        assert hsb.brightness == 50.0
