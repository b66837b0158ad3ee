import pytest

from productstamp.models import (
    CompositeOptions,
    CornerPosition,
    CustomPosition,
    OverlayTransform,
    parse_position,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("top-left", CornerPosition("top-left")),
        ("Bottom_Right", CornerPosition("bottom-right")),
        ("top right", CornerPosition("top-right")),
        ("50,50", CustomPosition(50, 50)),
        (" 12.5 , 80% ", CustomPosition(12.5, 80)),
        ((10, 90), CustomPosition(10, 90)),
        ({"x": 1, "y": 2}, CustomPosition(1, 2)),
    ],
)
def test_parse_position(value, expected) -> None:
    assert parse_position(value) == expected


@pytest.mark.parametrize("value", ["middle", "", "150,20", "-5,5"])
def test_parse_position_rejects_invalid(value: str) -> None:
    with pytest.raises(ValueError):
        parse_position(value)


def test_composite_options_defaults() -> None:
    options = CompositeOptions()
    assert options.logo_position == CornerPosition("top-right")
    assert options.price_position == CornerPosition("bottom-right")
    assert options.logo_scale == 1.0
    assert options.price_rotation_degrees == 0.0
    assert options.price_text_color == "#FFFFFF"
    assert options.price_background_color == "#E11D48"
    assert options.price is None


def test_composite_options_builds_overlay_transforms() -> None:
    options = CompositeOptions(
        logo_position="25,75",
        logo_scale=1.5,
        logo_rotation_degrees=-15,
        price_text="1500",
        price_position="top-left",
        price_scale=0.5,
        price_rotation_degrees=10,
    )
    assert options.logo_transform == OverlayTransform(1.5, -15, CustomPosition(25, 75))
    assert options.price_transform == OverlayTransform(0.5, 10, CornerPosition("top-left"))
    assert options.price.raw_text == "1500"


def test_empty_price_text_means_no_price() -> None:
    assert CompositeOptions(price_text="").price is None


@pytest.mark.parametrize(
    "kwargs",
    [{"logo_scale": 0}, {"price_scale": -1}, {"price_text_color": "nope"}, {"logo_position": "centre"}],
)
def test_composite_options_validation(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        CompositeOptions(**kwargs)


def test_none_positions_fall_back_to_default_corners() -> None:
    options = CompositeOptions(logo_position=None, price_position=None)
    assert options.logo_position == CornerPosition("top-right")
    assert options.price_position == CornerPosition("bottom-right")
