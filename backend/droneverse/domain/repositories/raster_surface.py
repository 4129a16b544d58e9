from abc import ABC, abstractmethod
from typing import Sequence, Tuple

from droneverse.domain.entities.annotation_entity import Rgba
from droneverse.domain.entities.filter_entity import FilterSettings


PixelPoint = Tuple[float, float]


class RasterSurface(ABC):
    """2D raster surface sized to a source image's natural resolution.

    Coordinates are absolute pixels of the surface. Colors are RGBA with alpha in [0, 1].
    """

    @property
    @abstractmethod
    def width(self) -> int:
        raise NotImplementedError

    @property
    @abstractmethod
    def height(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def apply_filters(self, filters: FilterSettings, blur_px: float) -> None:
        """Filter the base image in place. blur_px replaces filters.blur as gaussian sigma."""
        raise NotImplementedError

    @abstractmethod
    def draw_rectangle(self, top_left: PixelPoint, bottom_right: PixelPoint,
                       fill: Rgba, stroke: Rgba, stroke_width: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_polygon(self, points: Sequence[PixelPoint], fill: Rgba, stroke: Rgba, stroke_width: float) -> None:
        """Fill and stroke the closed path through points in order."""
        raise NotImplementedError

    @abstractmethod
    def draw_badge(self, top_left: PixelPoint, size: float, text: str,
                   fill: Rgba, border: Rgba, border_width: float, text_color: Rgba) -> None:
        """Square badge of side size with text centered inside."""
        raise NotImplementedError

    @abstractmethod
    def encode_jpeg(self, quality: int) -> bytes:
        """Raises EncodingError when serialization fails."""
        raise NotImplementedError


class RasterSurfaceFactory(ABC):
    @abstractmethod
    def create(self, image_bytes: bytes) -> RasterSurface:
        """Decode image bytes onto a new surface.

        Raises ImageLoadError for undecodable bytes and SurfaceCreationError when the
        surface cannot be allocated.
        """
        raise NotImplementedError
