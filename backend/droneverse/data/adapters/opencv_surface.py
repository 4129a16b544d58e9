import math
from io import BytesIO
from typing import Sequence

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.annotation_entity import Rgba
from droneverse.domain.entities.filter_entity import FilterSettings
from droneverse.domain.exceptions import EncodingError, ImageLoadError, SurfaceCreationError
from droneverse.domain.repositories.raster_surface import PixelPoint, RasterSurface, RasterSurfaceFactory

_logger = get_logger("opencv_surface")

# Luminance coefficients from the W3C Filter Effects matrices.
_SATURATE_LUMA = (0.213, 0.715, 0.072)
_GRAYSCALE_LUMA = (0.2126, 0.7152, 0.0722)


def saturate_matrix(amount: float) -> np.ndarray:
    r, g, b = _SATURATE_LUMA
    s = amount
    return np.array([
        [r + (1 - r) * s, g - g * s, b - b * s],
        [r - r * s, g + (1 - g) * s, b - b * s],
        [r - r * s, g - g * s, b + (1 - b) * s],
    ], dtype=np.float32)


def grayscale_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(max(amount, 0.0), 1.0)
    r, g, b = _GRAYSCALE_LUMA
    return np.array([
        [r + (1 - r) * a, g - g * a, b - b * a],
        [r - r * a, g + (1 - g) * a, b - b * a],
        [r - r * a, g - g * a, b + (1 - b) * a],
    ], dtype=np.float32)


def hue_rotate_matrix(degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ], dtype=np.float32)


def apply_css_filters(rgb: np.ndarray, filters: FilterSettings, blur_px: float) -> np.ndarray:
    """Apply the CSS filter chain to an RGB uint8 array.

    Order matches `brightness() contrast() saturate() blur() grayscale() hue-rotate()`,
    each step clamped to [0, 1]. Identity steps are skipped.
    """
    img = rgb.astype(np.float32) / 255.0

    if filters.brightness != 100.0:
        img = np.clip(img * (filters.brightness / 100.0), 0.0, 1.0)
    if filters.contrast != 100.0:
        c = filters.contrast / 100.0
        img = np.clip((img - 0.5) * c + 0.5, 0.0, 1.0)
    if filters.saturate != 100.0:
        img = np.clip(img @ saturate_matrix(filters.saturate / 100.0).T, 0.0, 1.0)
    if blur_px > 0:
        img = cv2.GaussianBlur(img, (0, 0), sigmaX=blur_px, sigmaY=blur_px, borderType=cv2.BORDER_REPLICATE)
    if filters.grayscale > 0:
        img = np.clip(img @ grayscale_matrix(filters.grayscale / 100.0).T, 0.0, 1.0)
    if filters.hue_rotate % 360 != 0:
        img = np.clip(img @ hue_rotate_matrix(filters.hue_rotate).T, 0.0, 1.0)

    return np.ascontiguousarray(np.round(img * 255.0).astype(np.uint8))


def _rgb(color: Rgba):
    r, g, b, _ = color
    return (int(r), int(g), int(b))


def _px(value: float) -> int:
    return int(round(value))


class OpenCvSurface(RasterSurface):
    """RasterSurface backed by an RGB uint8 NumPy array drawn with OpenCV."""

    def __init__(self, pixels: np.ndarray) -> None:
        self._pixels = pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    def apply_filters(self, filters: FilterSettings, blur_px: float) -> None:
        self._pixels = apply_css_filters(self._pixels, filters, blur_px)

    def _fill(self, polygon: np.ndarray, fill: Rgba) -> None:
        alpha = float(fill[3])
        if alpha <= 0.0:
            return
        if alpha >= 1.0:
            cv2.fillPoly(self._pixels, [polygon], _rgb(fill), lineType=cv2.LINE_8)
            return
        mask = np.zeros(self._pixels.shape[:2], dtype=np.uint8)
        cv2.fillPoly(mask, [polygon], 255, lineType=cv2.LINE_8)
        region = mask.astype(bool)
        color = np.array(_rgb(fill), dtype=np.float32)
        blended = self._pixels[region].astype(np.float32) * (1.0 - alpha) + color * alpha
        self._pixels[region] = np.round(blended).astype(np.uint8)

    def draw_rectangle(self, top_left: PixelPoint, bottom_right: PixelPoint,
                       fill: Rgba, stroke: Rgba, stroke_width: float) -> None:
        x1, y1 = _px(top_left[0]), _px(top_left[1])
        x2, y2 = _px(bottom_right[0]), _px(bottom_right[1])
        box = np.array([[x1, y1], [x2, y1], [x2, y2], [x1, y2]], dtype=np.int32)
        self._fill(box, fill)
        cv2.rectangle(self._pixels, (x1, y1), (x2, y2), _rgb(stroke), max(1, _px(stroke_width)), cv2.LINE_8)

    def draw_polygon(self, points: Sequence[PixelPoint], fill: Rgba, stroke: Rgba, stroke_width: float) -> None:
        pts = np.array([[_px(x), _px(y)] for (x, y) in points], dtype=np.int32)
        self._fill(pts, fill)
        cv2.polylines(self._pixels, [pts.reshape((-1, 1, 2))], True, _rgb(stroke), max(1, _px(stroke_width)), cv2.LINE_AA)

    def draw_badge(self, top_left: PixelPoint, size: float, text: str,
                   fill: Rgba, border: Rgba, border_width: float, text_color: Rgba) -> None:
        x1, y1 = _px(top_left[0]), _px(top_left[1])
        x2, y2 = _px(top_left[0] + size), _px(top_left[1] + size)
        cv2.rectangle(self._pixels, (x1, y1), (x2, y2), _rgb(fill), cv2.FILLED)
        cv2.rectangle(self._pixels, (x1, y1), (x2, y2), _rgb(border), max(1, _px(border_width)), cv2.LINE_8)

        # Scale the glyph so its height is ~60% of the badge, bold via thickness.
        font = cv2.FONT_HERSHEY_SIMPLEX
        thickness = max(1, _px(size * 0.08))
        (_, base_h), _ = cv2.getTextSize(text, font, 1.0, thickness)
        scale = (size * 0.6) / max(base_h, 1)
        (tw, th), _ = cv2.getTextSize(text, font, scale, thickness)
        org = (_px(top_left[0] + (size - tw) / 2.0), _px(top_left[1] + (size + th) / 2.0))
        cv2.putText(self._pixels, text, org, font, scale, _rgb(text_color), thickness, cv2.LINE_AA)

    def encode_jpeg(self, quality: int) -> bytes:
        try:
            bgr = cv2.cvtColor(self._pixels, cv2.COLOR_RGB2BGR)
            ok, buf = cv2.imencode(".jpg", bgr, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
        except cv2.error as e:
            raise EncodingError(f"JPEG encoding failed: {e}") from e
        if not ok:
            raise EncodingError("JPEG encoding failed")
        return buf.tobytes()


class OpenCvSurfaceFactory(RasterSurfaceFactory):
    """Decodes images with Pillow (EXIF orientation applied) into OpenCvSurface instances."""

    def create(self, image_bytes: bytes) -> OpenCvSurface:
        try:
            with Image.open(BytesIO(image_bytes)) as img:
                img = ImageOps.exif_transpose(img)
                rgb = img.convert("RGB")
        except Image.DecompressionBombError as e:
            raise SurfaceCreationError(f"Image too large for a surface: {e}") from e
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageLoadError(f"Could not decode image: {e}") from e

        width, height = rgb.size
        if width <= 0 or height <= 0:
            raise SurfaceCreationError(f"Invalid surface size {width}x{height}")
        try:
            pixels = np.array(rgb, dtype=np.uint8)
        except MemoryError as e:
            raise SurfaceCreationError(f"Could not allocate {width}x{height} surface") from e
        _logger.debug("Created %dx%d surface", width, height)
        return OpenCvSurface(np.ascontiguousarray(pixels))
