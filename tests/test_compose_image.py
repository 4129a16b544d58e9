"""
Tests for composing filtered, annotated JPEGs.

Tests cover:
- Overlay geometry (stroke, rectangle corners, badge placement)
- Rectangle corner-order independence
- Polygon vertex order without a repeated closing point
- Filter application before overlays
- Rendering on real pixels with OpenCV
- Error propagation from loading/decoding/encoding
"""

import asyncio
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from droneverse.data.adapters.opencv_surface import OpenCvSurfaceFactory
from droneverse.domain.entities.annotation_entity import PolygonAnnotation, RectangleAnnotation
from droneverse.domain.entities.filter_entity import FilterSettings
from droneverse.domain.exceptions import EncodingError, ImageLoadError
from droneverse.domain.usecases.compose_image_usecase import (
    STROKE_COLOR,
    ComposeImageUseCase,
    badge_geometry,
    normalize_corners,
    scaled_blur,
    stroke_width_for,
)

from conftest import FakeImageRepository, RecordingSurface, make_image_bytes


class RecordingFactory:
    def __init__(self, width, height):
        self.surfaces = []
        self.width = width
        self.height = height

    def create(self, image_bytes):
        surface = RecordingSurface(self.width, self.height)
        self.surfaces.append(surface)
        return surface


def decode(jpeg: bytes) -> np.ndarray:
    return np.array(Image.open(BytesIO(jpeg)).convert("RGB")).astype(int)


def is_orange(pixel) -> bool:
    r, g, b = pixel
    return r > 150 and r - b > 60 and 60 < g < 220


@pytest.fixture
def composer():
    return ComposeImageUseCase(images=FakeImageRepository({}), surfaces=OpenCvSurfaceFactory())


class TestGeometry:
    """Tests for overlay geometry helpers."""

    def test_stroke_width_scales_with_output_width(self):
        assert stroke_width_for(1000) == 2.0
        assert stroke_width_for(4000) == pytest.approx(8.0)

    def test_stroke_width_has_floor(self):
        assert stroke_width_for(200) == 2.0

    def test_normalize_corners_any_order(self):
        expected = ((100.0, 80.0), (500.0, 400.0))
        assert normalize_corners((100.0, 80.0), (500.0, 400.0)) == expected
        assert normalize_corners((500.0, 400.0), (100.0, 80.0)) == expected
        assert normalize_corners((100.0, 400.0), (500.0, 80.0)) == expected

    def test_badge_sits_left_of_bounding_box(self):
        (x, y), size = badge_geometry([(100.0, 80.0), (500.0, 400.0)], 1000)
        assert size == pytest.approx(30.0)
        assert x == pytest.approx(65.0)
        assert y == pytest.approx(80.0)

    def test_badge_uses_polygon_bounding_box(self):
        (x, y), size = badge_geometry([(300.0, 50.0), (200.0, 300.0), (400.0, 250.0)], 1000)
        assert (x, y) == pytest.approx((165.0, 50.0))

    def test_blur_in_output_pixels_by_default(self):
        assert scaled_blur(FilterSettings(blur=4), 4000, None) == 4.0

    def test_blur_scaled_from_preview_width(self):
        assert scaled_blur(FilterSettings(blur=2), 4000, 800) == pytest.approx(10.0)


class TestDrawCalls:
    """Tests for what the composer asks the surface to draw."""

    def _render(self, annotations, filters=None, preview_width=None, width=1000, height=800):
        factory = RecordingFactory(width, height)
        composer = ComposeImageUseCase(images=FakeImageRepository({}), surfaces=factory)
        blob = composer.render(b"raw", annotations, filters, preview_width)
        return blob, factory.surfaces[0].calls

    def test_rectangle_with_severity(self):
        rect = RectangleAnnotation(points=((10, 10), (50, 50)), severity=3)
        blob, calls = self._render([rect])
        assert blob == b"jpeg"

        kind, top_left, bottom_right, fill, stroke, stroke_width = calls[0]
        assert kind == "rectangle"
        assert top_left == pytest.approx((100.0, 80.0))
        assert bottom_right == pytest.approx((500.0, 400.0))
        assert fill[3] == 0.0
        assert stroke == STROKE_COLOR
        assert stroke_width == 2.0

        kind, badge_top_left, size, text = calls[1]
        assert kind == "badge"
        assert badge_top_left == pytest.approx((65.0, 80.0))
        assert size == pytest.approx(30.0)
        assert text == "3"

        assert calls[-1] == ("encode", 90)

    def test_rectangle_corner_order_does_not_matter(self):
        _, forward = self._render([RectangleAnnotation(points=((10, 10), (50, 50)))])
        _, backward = self._render([RectangleAnnotation(points=((50, 50), (10, 10)))])
        _, crossed = self._render([RectangleAnnotation(points=((10, 50), (50, 10)))])
        assert forward == backward == crossed

    def test_polygon_vertices_in_order_without_closing_point(self):
        poly = PolygonAnnotation(points=((30, 10), (10, 50), (50, 50), (40, 30)))
        _, calls = self._render([poly])
        kind, points, fill, stroke, _ = calls[0]
        assert kind == "polygon"
        assert len(points) == 4
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        assert xs == pytest.approx([300.0, 100.0, 500.0, 400.0])
        assert ys == pytest.approx([80.0, 400.0, 400.0, 240.0])

    def test_no_badge_without_severity(self):
        _, calls = self._render([PolygonAnnotation(points=((10, 10), (20, 20), (10, 20)))])
        assert [c[0] for c in calls] == ["polygon", "encode"]

    def test_annotations_drawn_in_recording_order(self):
        first = RectangleAnnotation(points=((10, 10), (20, 20)), severity=1)
        second = PolygonAnnotation(points=((30, 30), (40, 40), (30, 40)))
        _, calls = self._render([first, second])
        assert [c[0] for c in calls] == ["rectangle", "badge", "polygon", "encode"]

    def test_identity_filters_skip_filter_pass(self):
        _, calls = self._render([], FilterSettings())
        assert [c[0] for c in calls] == ["encode"]

    def test_filters_applied_before_overlays(self):
        rect = RectangleAnnotation(points=((10, 10), (50, 50)))
        _, calls = self._render([rect], FilterSettings(grayscale=100, blur=2), preview_width=500)
        assert calls[0][0] == "filters"
        assert calls[0][2] == pytest.approx(4.0)
        assert calls[1][0] == "rectangle"

    def test_empty_annotation_list_only_encodes(self):
        _, calls = self._render([])
        assert calls == [("encode", 90)]


class TestOpenCvRendering:
    """Tests rendering real pixels and decoding the JPEG output."""

    def test_rectangle_scenario_pixels(self, composer):
        source = make_image_bytes(1000, 800, (0, 0, 0))
        rect = RectangleAnnotation(points=((10, 10), (50, 50)), severity=3)
        out = decode(composer.render(source, [rect]))

        assert out.shape == (800, 1000, 3)
        # Stroke along the top edge
        assert any(is_orange(out[y, 300]) for y in range(78, 83))
        # Transparent fill leaves the interior untouched
        assert out[240, 300].max() < 30
        # Red badge body left of the box
        r, g, b = out[106, 69]
        assert r > 150 and g < 100 and b < 100
        # White numeral inside the badge
        numeral = out[86:104, 72:90]
        assert (numeral.min(axis=2) > 180).sum() > 5

    def test_output_is_jpeg_of_same_size(self, composer):
        out = composer.render(make_image_bytes(320, 240), [])
        with Image.open(BytesIO(out)) as img:
            assert img.format == "JPEG"
            assert img.size == (320, 240)

    def test_rectangle_corner_order_identical_bytes(self, composer):
        source = make_image_bytes(200, 100, (20, 40, 60))
        a = composer.render(source, [RectangleAnnotation(points=((20, 30), (60, 70)), severity=2)])
        b = composer.render(source, [RectangleAnnotation(points=((60, 70), (20, 30)), severity=2)])
        assert a == b

    def test_rendering_is_deterministic(self, composer):
        source = make_image_bytes(300, 200, (90, 120, 30))
        annotations = [
            RectangleAnnotation(points=((5, 5), (40, 60)), severity=5),
            PolygonAnnotation(points=((50, 10), (90, 20), (70, 90)), severity=1),
        ]
        filters = FilterSettings(brightness=110, contrast=90, blur=1.5, hue_rotate=30)
        assert composer.render(source, annotations, filters) == composer.render(source, annotations, filters)

    def test_overlays_not_affected_by_grayscale(self, composer):
        source = make_image_bytes(1000, 800, (0, 0, 255))
        rect = RectangleAnnotation(points=((10, 10), (50, 50)))
        out = decode(composer.render(source, [rect], FilterSettings(grayscale=100)))
        r, g, b = out[600, 800]
        assert abs(r - g) < 12 and abs(g - b) < 12
        assert any(is_orange(out[y, 300]) for y in range(78, 83))

    def test_exif_orientation_applied(self, composer):
        img = Image.new("RGB", (40, 20), (0, 0, 0))
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 CW on display
        buf = BytesIO()
        img.save(buf, format="JPEG", exif=exif)
        out = composer.render(buf.getvalue(), [])
        with Image.open(BytesIO(out)) as result:
            assert result.size == (20, 40)


class TestErrors:
    """Tests for failures reaching the caller."""

    def test_load_error_propagates(self):
        composer = ComposeImageUseCase(images=FakeImageRepository({}), surfaces=OpenCvSurfaceFactory())
        with pytest.raises(ImageLoadError):
            asyncio.run(composer.compose("https://example.com/missing.jpg", []))

    def test_undecodable_bytes(self, composer):
        with pytest.raises(ImageLoadError):
            composer.render(b"definitely not an image", [])

    def test_encoding_error_propagates(self):
        class BrokenSurface(RecordingSurface):
            def encode_jpeg(self, quality):
                raise EncodingError("JPEG encoding failed")

        class BrokenFactory:
            def create(self, image_bytes):
                return BrokenSurface(10, 10)

        composer = ComposeImageUseCase(images=FakeImageRepository({}), surfaces=BrokenFactory())
        with pytest.raises(EncodingError):
            composer.render(b"raw", [])

    def test_compose_loads_then_renders(self):
        images = FakeImageRepository({"https://example.com/a.png": make_image_bytes(64, 48)})
        composer = ComposeImageUseCase(images=images, surfaces=OpenCvSurfaceFactory())
        out = asyncio.run(composer.compose("https://example.com/a.png", []))
        assert images.requested == ["https://example.com/a.png"]
        assert out[:2] == b"\xff\xd8"
