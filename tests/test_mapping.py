"""Unit tests for display-to-image coordinate mapping."""

import pydantic
import pytest

from ecg_leadbox import (
    DisplayRect,
    LeadBoundary,
    ValidationError,
    default_selection,
    display_ratio,
    map_to_display,
    map_to_image,
    next_selection,
)

IMAGE = (800, 600)


class TestMapToImage:
    """Tests for map_to_image."""

    def test_identity_ratio(self):
        boundary = map_to_image(DisplayRect(x=10, y=10, w=40, h=40), 1.0, IMAGE, "I")
        assert boundary == LeadBoundary(lead_name="I", x1=10, y1=10, x2=50, y2=50)

    def test_downscaled_display(self):
        """A display at half size maps to twice the coordinates."""
        boundary = map_to_image(DisplayRect(x=10, y=10, w=40, h=40), 0.5, IMAGE, "II")
        assert (boundary.x1, boundary.y1, boundary.x2, boundary.y2) == (20, 20, 100, 100)

    def test_per_axis_ratio(self):
        boundary = map_to_image(DisplayRect(x=10, y=10, w=40, h=40), (0.5, 0.25), IMAGE, "III")
        assert (boundary.x1, boundary.y1, boundary.x2, boundary.y2) == (20, 40, 100, 200)

    def test_rounds_half_up(self):
        boundary = map_to_image(DisplayRect(x=2.5, y=3.5, w=10, h=10), 1.0, IMAGE, "I")
        assert (boundary.x1, boundary.y1, boundary.x2, boundary.y2) == (3, 4, 13, 14)

    def test_clamps_to_image(self):
        boundary = map_to_image(DisplayRect(x=780, y=590, w=100, h=100), 1.0, IMAGE, "V6")
        assert (boundary.x1, boundary.y1, boundary.x2, boundary.y2) == (780, 590, 800, 600)

    def test_clamps_negative_origin(self):
        boundary = map_to_image(DisplayRect(x=-20, y=-5, w=50, h=30), 1.0, IMAGE, "I")
        assert (boundary.x1, boundary.y1, boundary.x2, boundary.y2) == (0, 0, 30, 25)

    def test_expands_collapsed_box(self):
        """A sub-pixel selection is grown to one pixel at its far edge."""
        boundary = map_to_image(DisplayRect(x=10.2, y=10, w=0.2, h=5), 1.0, IMAGE, "I")
        assert (boundary.x1, boundary.x2) == (10, 11)
        assert boundary.width == 1

    def test_collapsed_at_image_edge(self):
        with pytest.raises(ValidationError, match="zero x-extent"):
            map_to_image(DisplayRect(x=799.6, y=10, w=0.2, h=5), 1.0, IMAGE, "I")

    @pytest.mark.parametrize(
        "rect",
        [
            DisplayRect(x=900, y=10, w=40, h=40),
            DisplayRect(x=-100, y=10, w=50, h=40),
            DisplayRect(x=10, y=600, w=40, h=40),
            DisplayRect(x=10, y=-60, w=40, h=40),
        ],
    )
    def test_outside_image(self, rect: DisplayRect):
        with pytest.raises(ValidationError, match="outside the image"):
            map_to_image(rect, 1.0, IMAGE, "I")

    @pytest.mark.parametrize("rect", [DisplayRect(x=10, y=10, w=0, h=40), DisplayRect(x=10, y=10, w=40, h=0)])
    def test_empty_selection(self, rect: DisplayRect):
        with pytest.raises(ValidationError, match="Selection is empty"):
            map_to_image(rect, 1.0, IMAGE, "I")

    @pytest.mark.parametrize("ratio", [0, -1.0, (1.0, 0.0), float("nan")])
    def test_invalid_ratio(self, ratio):
        with pytest.raises(ValidationError, match="ratio must be positive"):
            map_to_image(DisplayRect(x=10, y=10, w=40, h=40), ratio, IMAGE, "I")

    def test_unknown_lead_name(self):
        with pytest.raises(ValueError, match="Invalid lead name"):
            map_to_image(DisplayRect(x=10, y=10, w=40, h=40), 1.0, IMAGE, "V7")

    @pytest.mark.parametrize(
        "coords",
        [
            {"x": float("nan"), "y": 10, "w": 40, "h": 40},
            {"x": 10, "y": float("inf"), "w": 40, "h": 40},
            {"x": 10, "y": 10, "w": float("nan"), "h": 40},
            {"x": 10, "y": 10, "w": 40, "h": float("inf")},
        ],
    )
    def test_non_finite_selection(self, coords: dict):
        rect = DisplayRect.model_construct(**coords)
        with pytest.raises(ValidationError, match="must be finite"):
            map_to_image(rect, 1.0, IMAGE, "I")


@pytest.mark.parametrize("field", ["x", "y", "w", "h"])
@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_display_rect_rejects_non_finite(field: str, value: float):
    coords = {"x": 10.0, "y": 10.0, "w": 40.0, "h": 40.0, field: value}
    with pytest.raises(pydantic.ValidationError):
        DisplayRect(**coords)


@pytest.mark.parametrize("ratio", [1.0, 0.8, 0.5, 1.25, (0.75, 0.6)])
@pytest.mark.parametrize(
    "rect",
    [
        DisplayRect(x=10, y=10, w=40, h=40),
        DisplayRect(x=13.3, y=7.7, w=121.9, h=58.4),
        DisplayRect(x=201, y=155.5, w=97.25, h=33.1),
    ],
)
def test_round_trip_within_one_pixel(rect: DisplayRect, ratio):
    """Mapping to image space and back reproduces every edge within one pixel."""
    boundary = map_to_image(rect, ratio, IMAGE, "I")
    back = map_to_display(boundary, ratio)

    assert back.x == pytest.approx(rect.x, abs=1)
    assert back.y == pytest.approx(rect.y, abs=1)
    assert back.x + back.w == pytest.approx(rect.x + rect.w, abs=1)
    assert back.y + back.h == pytest.approx(rect.y + rect.h, abs=1)


def test_display_ratio():
    assert display_ratio((400, 300), IMAGE) == (0.5, 0.5)
    assert display_ratio((800, 300), IMAGE) == (1.0, 0.5)


def test_display_ratio_rejects_empty_image():
    with pytest.raises(ValidationError):
        display_ratio((400, 300), (0, 600))


class TestSelectionBoxes:
    """Tests for the suggested selection boxes."""

    def test_default_box_800x600(self):
        rect = default_selection((800, 600))
        assert (rect.x, rect.y, rect.w, rect.h) == (10, 10, 200, 200)

    def test_default_box_has_minimum_size(self):
        rect = default_selection((100, 90))
        assert (rect.w, rect.h) == (40, 40)

    def test_default_box_floors(self):
        rect = default_selection((1003, 761))
        assert (rect.w, rect.h) == (250, 253)

    def test_next_box_is_shifted(self):
        rect = next_selection(DisplayRect(x=10, y=10, w=200, h=200))
        assert (rect.x, rect.y, rect.w, rect.h) == (30, 20, 200, 200)

    def test_next_box_custom_offset(self):
        rect = next_selection(DisplayRect(x=10, y=10, w=50, h=50), offset=(0, 60))
        assert (rect.x, rect.y) == (10, 70)


if __name__ == "__main__":
    pytest.main([__file__])
