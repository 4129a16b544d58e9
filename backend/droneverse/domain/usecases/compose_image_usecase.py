import asyncio
from typing import List, Optional, Sequence, Tuple

from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.annotation_entity import (
    Annotation,
    Point,
    PolygonAnnotation,
    RectangleAnnotation,
    Rgba,
)
from droneverse.domain.entities.filter_entity import DEFAULT_FILTERS, FilterSettings
from droneverse.domain.repositories.image_repository import ImageRepository
from droneverse.domain.repositories.raster_surface import PixelPoint, RasterSurface, RasterSurfaceFactory


_logger = get_logger("compose_usecase")

STROKE_COLOR: Rgba = (255, 165, 0, 1.0)  # orange
BADGE_FILL: Rgba = (255, 0, 0, 1.0)
BADGE_BORDER: Rgba = (255, 255, 255, 1.0)
BADGE_TEXT: Rgba = (255, 255, 255, 1.0)

# Relative to the output width so overlays look the same on any image size.
STROKE_RATIO = 0.002
MIN_STROKE_PX = 2.0
BADGE_RATIO = 0.03
BADGE_GAP_RATIO = 0.005

DEFAULT_JPEG_QUALITY = 90


def percent_to_pixels(points: Sequence[Point], width: int, height: int) -> List[PixelPoint]:
    return [(x / 100.0 * width, y / 100.0 * height) for (x, y) in points]


def normalize_corners(p1: PixelPoint, p2: PixelPoint) -> Tuple[PixelPoint, PixelPoint]:
    """Top-left and bottom-right corners of the box spanned by two corners in any order."""
    return (min(p1[0], p2[0]), min(p1[1], p2[1])), (max(p1[0], p2[0]), max(p1[1], p2[1]))


def stroke_width_for(width: int) -> float:
    return max(MIN_STROKE_PX, width * STROKE_RATIO)


def badge_geometry(pixel_points: Sequence[PixelPoint], width: int) -> Tuple[PixelPoint, float]:
    """Top-left corner and side of the severity badge.

    The badge sits outside the shape, left of its bounding box top-left corner, with
    a gap of BADGE_GAP_RATIO * width.
    """
    size = width * BADGE_RATIO
    min_x = min(p[0] for p in pixel_points)
    min_y = min(p[1] for p in pixel_points)
    return (min_x - size - width * BADGE_GAP_RATIO, min_y), size


def scaled_blur(filters: FilterSettings, natural_width: int, preview_width: Optional[float]) -> float:
    """Blur sigma in output pixels.

    Without preview_width the value is taken as output pixels. With it, the value is
    treated as preview pixels and scaled up so the output matches what the preview showed.
    """
    if not preview_width or preview_width <= 0:
        return filters.blur
    return filters.blur * (natural_width / float(preview_width))


class ComposeImageUseCase:
    """Burns filters and annotation overlays into a single JPEG.

    Loading and encoding run in worker threads; the event loop only awaits them.
    Errors (ImageLoadError, SurfaceCreationError, EncodingError) reach the caller untouched.
    """

    def __init__(self, images: ImageRepository, surfaces: RasterSurfaceFactory,
                 jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> None:
        self._images = images
        self._surfaces = surfaces
        self._quality = jpeg_quality

    async def compose(self, source_url: str, annotations: Sequence[Annotation],
                      filters: Optional[FilterSettings] = None,
                      preview_width: Optional[float] = None) -> bytes:
        data = await asyncio.to_thread(self._images.load, source_url)
        return await asyncio.to_thread(self.render, data, annotations, filters, preview_width)

    def render(self, image_bytes: bytes, annotations: Sequence[Annotation],
               filters: Optional[FilterSettings] = None,
               preview_width: Optional[float] = None) -> bytes:
        surface = self._surfaces.create(image_bytes)
        self.draw(surface, annotations, filters, preview_width)
        blob = surface.encode_jpeg(self._quality)
        _logger.debug("Composed %dx%d image with %d annotation(s)", surface.width, surface.height, len(annotations))
        return blob

    @staticmethod
    def draw(surface: RasterSurface, annotations: Sequence[Annotation],
             filters: Optional[FilterSettings] = None,
             preview_width: Optional[float] = None) -> None:
        filters = filters or DEFAULT_FILTERS
        if not filters.is_identity():
            surface.apply_filters(filters, blur_px=scaled_blur(filters, surface.width, preview_width))
        # Overlays go on after filtering so they stay crisp.
        for annotation in annotations:
            draw_annotation(surface, annotation)


def draw_annotation(surface: RasterSurface, annotation: Annotation) -> None:
    width, height = surface.width, surface.height
    pixel_points = percent_to_pixels(annotation.points, width, height)
    stroke = stroke_width_for(width)

    if isinstance(annotation, RectangleAnnotation):
        top_left, bottom_right = normalize_corners(pixel_points[0], pixel_points[1])
        surface.draw_rectangle(top_left, bottom_right, fill=annotation.color, stroke=STROKE_COLOR, stroke_width=stroke)
    elif isinstance(annotation, PolygonAnnotation):
        surface.draw_polygon(pixel_points, fill=annotation.color, stroke=STROKE_COLOR, stroke_width=stroke)
    else:
        raise TypeError(f"Unsupported annotation type: {type(annotation).__name__}")

    if annotation.severity is not None:
        top_left, size = badge_geometry(pixel_points, width)
        surface.draw_badge(
            top_left,
            size,
            str(annotation.severity),
            fill=BADGE_FILL,
            border=BADGE_BORDER,
            border_width=width * STROKE_RATIO,
            text_color=BADGE_TEXT,
        )
