"""
Tests for annotation and filter entities.

Tests cover:
- Rectangle/polygon construction and validation
- Color parsing and formatting
- Persisted dict form
- Filter settings validation and CSS output
"""

import math

import pytest

from droneverse.domain.entities.annotation_entity import (
    TRANSPARENT,
    AnnotationKind,
    PolygonAnnotation,
    RectangleAnnotation,
    annotation_from_dict,
    annotation_to_dict,
    format_color,
    make_annotation,
    parse_color,
)
from droneverse.domain.entities.filter_entity import DEFAULT_FILTERS, FilterSettings, InvalidFilterError
from droneverse.domain.exceptions import InvalidAnnotationError


class TestAnnotationConstruction:
    """Tests for the annotation variants."""

    def test_rectangle_normalizes_points_to_float_tuples(self):
        rect = RectangleAnnotation(points=[[10, 20], [30, 40]])
        assert rect.points == ((10.0, 20.0), (30.0, 40.0))
        assert rect.kind is AnnotationKind.RECTANGLE
        assert rect.color == TRANSPARENT
        assert rect.severity is None

    def test_rectangle_requires_exactly_two_corners(self):
        with pytest.raises(InvalidAnnotationError):
            RectangleAnnotation(points=((10, 10),))
        with pytest.raises(InvalidAnnotationError):
            RectangleAnnotation(points=((10, 10), (20, 20), (30, 30)))

    def test_polygon_needs_at_least_two_vertices(self):
        with pytest.raises(InvalidAnnotationError):
            PolygonAnnotation(points=((10, 10),))
        poly = PolygonAnnotation(points=((10, 10), (20, 20)))
        assert len(poly.points) == 2

    def test_polygon_keeps_recorded_order(self):
        pts = ((50, 10), (10, 90), (90, 90), (70, 40))
        poly = PolygonAnnotation(points=pts)
        assert poly.points == tuple((float(x), float(y)) for x, y in pts)

    @pytest.mark.parametrize("point", [(-0.1, 10), (10, 100.5), (math.nan, 10), (10, math.inf)])
    def test_points_outside_range_rejected(self, point):
        with pytest.raises(InvalidAnnotationError):
            RectangleAnnotation(points=((10, 10), point))

    def test_boundary_points_accepted(self):
        rect = RectangleAnnotation(points=((0, 0), (100, 100)))
        assert rect.points == ((0.0, 0.0), (100.0, 100.0))

    @pytest.mark.parametrize("severity", [0, 6, True, 2.5, "3"])
    def test_invalid_severity_rejected(self, severity):
        with pytest.raises(InvalidAnnotationError):
            RectangleAnnotation(points=((10, 10), (20, 20)), severity=severity)

    def test_valid_severity_range(self):
        for level in range(1, 6):
            assert PolygonAnnotation(points=((1, 1), (2, 2)), severity=level).severity == level

    def test_invalid_annotation_error_is_value_error(self):
        with pytest.raises(ValueError):
            RectangleAnnotation(points=((10, 10),))

    def test_annotations_are_immutable(self):
        rect = RectangleAnnotation(points=((10, 10), (20, 20)))
        with pytest.raises(AttributeError):
            rect.severity = 3

    def test_make_annotation_dispatches_on_kind(self):
        rect = make_annotation(AnnotationKind.RECTANGLE, [[1, 2], [3, 4]], severity=2)
        poly = make_annotation(AnnotationKind.POLYGON, [[1, 2], [3, 4], [5, 6]])
        assert isinstance(rect, RectangleAnnotation)
        assert isinstance(poly, PolygonAnnotation)
        assert rect.severity == 2


class TestColors:
    """Tests for color parsing."""

    def test_parse_rgba_string(self):
        assert parse_color("rgba(255, 0, 0, 0.0)") == (255, 0, 0, 0.0)
        assert parse_color("rgba(128,128,128,0.5)") == (128, 128, 128, 0.5)

    def test_parse_rgb_string_is_opaque(self):
        assert parse_color("rgb(10, 20, 30)") == (10, 20, 30, 1.0)

    def test_parse_sequence(self):
        assert parse_color([1, 2, 3]) == (1, 2, 3, 1.0)
        assert parse_color((1, 2, 3, 0.25)) == (1, 2, 3, 0.25)

    @pytest.mark.parametrize("value", ["red", "rgba(300, 0, 0, 1)", "rgba(0, 0, 0, 2)", [1, 2]])
    def test_unsupported_colors_rejected(self, value):
        with pytest.raises(InvalidAnnotationError):
            parse_color(value)

    def test_format_color(self):
        assert format_color((255, 0, 0, 0.0)) == "rgba(255, 0, 0, 0.0)"


class TestPersistedForm:
    """Tests for the {type, points, color, crackLevel} dict form."""

    def test_to_dict(self):
        rect = RectangleAnnotation(points=((10, 10), (50, 50)), severity=3)
        assert annotation_to_dict(rect) == {
            "type": "square",
            "points": [[10.0, 10.0], [50.0, 50.0]],
            "color": "rgba(255, 0, 0, 0.0)",
            "crackLevel": 3,
        }

    def test_from_dict_restores_polygon(self):
        data = {"type": "polygon", "points": [[1, 1], [5, 1], [3, 4]], "color": "rgba(255, 0, 0, 0.0)", "crackLevel": None}
        poly = annotation_from_dict(data)
        assert isinstance(poly, PolygonAnnotation)
        assert poly.points == ((1.0, 1.0), (5.0, 1.0), (3.0, 4.0))
        assert poly.severity is None

    def test_from_dict_unknown_type(self):
        with pytest.raises(InvalidAnnotationError):
            annotation_from_dict({"type": "circle", "points": [[1, 1], [2, 2]]})


class TestFilterSettings:
    """Tests for FilterSettings."""

    def test_defaults_are_identity(self):
        assert FilterSettings().is_identity()
        assert not FilterSettings(brightness=120).is_identity()

    def test_negative_values_rejected_except_hue(self):
        with pytest.raises(InvalidFilterError):
            FilterSettings(blur=-1)
        with pytest.raises(InvalidFilterError):
            FilterSettings(contrast=-5)
        assert FilterSettings(hue_rotate=-90).hue_rotate == -90.0

    def test_non_finite_rejected(self):
        with pytest.raises(InvalidFilterError):
            FilterSettings(brightness=math.inf)

    def test_css_string(self):
        css = FilterSettings(brightness=120, blur=2.5, hue_rotate=45).to_css()
        assert css == (
            "brightness(120%) contrast(100%) saturate(100%) "
            "blur(2.5px) grayscale(0%) hue-rotate(45deg)"
        )

    def test_dict_form_uses_camel_case_hue(self):
        settings = FilterSettings(hue_rotate=30, grayscale=50)
        data = settings.to_dict()
        assert data["hueRotate"] == 30.0
        assert FilterSettings.from_dict(data) == settings

    def test_from_empty_dict_is_default(self):
        assert FilterSettings.from_dict(None) is DEFAULT_FILTERS
        assert FilterSettings.from_dict({}) is DEFAULT_FILTERS
