import pytest

from cubecore.colorspace import (
    RGB_COLOR_BLACK,
    RGB_COLOR_ORANGE,
    RGB_COLOR_WHITE,
    decode_rgb,
    decode_rgba,
    invert_rgb,
    make_rgb,
    make_rgba,
)


@pytest.mark.parametrize("rgb", [(0, 0, 0), (255, 165, 0), (12, 34, 56), (255, 255, 255)])
def test_rgb_round_trip(rgb):
    assert decode_rgb(make_rgb(*rgb)) == rgb


@pytest.mark.parametrize("rgba", [(1, 2, 3, 4), (255, 0, 255, 128), (0, 0, 0, 255)])
def test_rgba_round_trip(rgba):
    assert decode_rgba(make_rgba(*rgba)) == rgba


def test_decode_rgb_ignores_alpha():
    assert decode_rgb(make_rgba(10, 20, 30, 40)) == (10, 20, 30)


def test_named_constant_components():
    assert decode_rgb(RGB_COLOR_ORANGE) == (255, 165, 0)


def test_invert_black_is_white():
    assert invert_rgb(RGB_COLOR_BLACK) == RGB_COLOR_WHITE
    assert invert_rgb(RGB_COLOR_WHITE) == RGB_COLOR_BLACK


@pytest.mark.parametrize("rgb", [(12, 34, 56), (255, 0, 128)])
def test_invert_twice_is_identity(rgb):
    value = make_rgb(*rgb)
    assert invert_rgb(invert_rgb(value)) == value


def test_invert_components_sum_to_full():
    value = make_rgb(12, 200, 77)
    for original, inverted in zip(decode_rgb(value), decode_rgb(invert_rgb(value))):
        assert original + inverted == 255


def test_values_stay_within_32_bits():
    assert make_rgba(255, 255, 255, 255) <= 0xFFFFFFFF
    assert decode_rgba(make_rgba(255, 255, 255, 255)) == (255, 255, 255, 255)