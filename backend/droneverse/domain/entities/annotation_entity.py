import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple, Union

from droneverse.domain.exceptions import InvalidAnnotationError


Point = Tuple[float, float]
Rgba = Tuple[int, int, int, float]

# Finalized annotations are invisible fills; only the orange stroke shows.
TRANSPARENT: Rgba = (255, 0, 0, 0.0)
# Fill used for the shape while it is still being drawn.
PREVIEW_GRAY: Rgba = (128, 128, 128, 0.5)

MIN_SEVERITY = 1
MAX_SEVERITY = 5

_RGBA_RE = re.compile(
    r"^\s*rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)\s*$"
)


class AnnotationKind(str, Enum):
    RECTANGLE = "square"
    POLYGON = "polygon"


def parse_color(value: Union[str, Sequence[Any], None]) -> Rgba:
    """Parse 'rgba(r, g, b, a)' / 'rgb(r, g, b)' or a 3/4 sequence into an RGBA tuple."""
    if value is None:
        return TRANSPARENT
    if isinstance(value, str):
        m = _RGBA_RE.match(value)
        if not m:
            raise InvalidAnnotationError(f"Unsupported color: {value!r}")
        r, g, b = int(m.group(1)), int(m.group(2)), int(m.group(3))
        a = float(m.group(4)) if m.group(4) is not None else 1.0
    else:
        parts = list(value)
        if len(parts) not in (3, 4):
            raise InvalidAnnotationError(f"Unsupported color: {value!r}")
        r, g, b = int(parts[0]), int(parts[1]), int(parts[2])
        a = float(parts[3]) if len(parts) == 4 else 1.0
    if not all(0 <= c <= 255 for c in (r, g, b)) or not 0.0 <= a <= 1.0:
        raise InvalidAnnotationError(f"Color out of range: {value!r}")
    return (r, g, b, a)


def format_color(color: Rgba) -> str:
    r, g, b, a = color
    return f"rgba({r}, {g}, {b}, {a})"


def _normalize_points(points: Sequence[Sequence[float]]) -> Tuple[Point, ...]:
    normalized = []
    for p in points:
        if len(p) != 2:
            raise InvalidAnnotationError(f"Point must have two coordinates: {p!r}")
        x, y = float(p[0]), float(p[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            raise InvalidAnnotationError(f"Point is not finite: {p!r}")
        if not (0.0 <= x <= 100.0 and 0.0 <= y <= 100.0):
            raise InvalidAnnotationError(f"Point outside 0-100%: {p!r}")
        normalized.append((x, y))
    return tuple(normalized)


def _check_severity(severity: Optional[int]) -> None:
    if severity is None:
        return
    if isinstance(severity, bool) or not isinstance(severity, int):
        raise InvalidAnnotationError(f"Severity must be an integer: {severity!r}")
    if not MIN_SEVERITY <= severity <= MAX_SEVERITY:
        raise InvalidAnnotationError(f"Severity must be between {MIN_SEVERITY} and {MAX_SEVERITY}: {severity}")


@dataclass(frozen=True)
class RectangleAnnotation:
    """Axis-aligned box given by two opposite corners, in any order.

    Corners are percentages (0-100) of image width/height.
    """
    points: Tuple[Point, Point]
    color: Rgba = TRANSPARENT
    severity: Optional[int] = None

    kind: ClassVar[AnnotationKind] = AnnotationKind.RECTANGLE

    def __post_init__(self) -> None:
        pts = _normalize_points(self.points)
        if len(pts) != 2:
            raise InvalidAnnotationError(f"Rectangle needs exactly 2 corners, got {len(pts)}")
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "color", parse_color(self.color))
        _check_severity(self.severity)


@dataclass(frozen=True)
class PolygonAnnotation:
    """Polygon through its vertices in recorded order.

    The path is stored open: the closing edge back to the first vertex is implied
    at render time and never stored as a point.
    """
    points: Tuple[Point, ...]
    color: Rgba = TRANSPARENT
    severity: Optional[int] = None

    kind: ClassVar[AnnotationKind] = AnnotationKind.POLYGON

    def __post_init__(self) -> None:
        pts = _normalize_points(self.points)
        if len(pts) < 2:
            raise InvalidAnnotationError(f"Polygon needs at least 2 vertices, got {len(pts)}")
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "color", parse_color(self.color))
        _check_severity(self.severity)


Annotation = Union[RectangleAnnotation, PolygonAnnotation]


def make_annotation(kind: AnnotationKind, points: Sequence[Sequence[float]],
                    color: Union[str, Sequence[Any], None] = None,
                    severity: Optional[int] = None) -> Annotation:
    rgba = parse_color(color) if color is not None else TRANSPARENT
    if kind is AnnotationKind.RECTANGLE:
        return RectangleAnnotation(points=tuple(points), color=rgba, severity=severity)
    if kind is AnnotationKind.POLYGON:
        return PolygonAnnotation(points=tuple(points), color=rgba, severity=severity)
    raise InvalidAnnotationError(f"Unknown annotation kind: {kind!r}")


def annotation_from_dict(data: Dict[str, Any]) -> Annotation:
    """Build an annotation from its persisted form ({type, points, color, crackLevel})."""
    try:
        kind = AnnotationKind(data.get("type"))
    except ValueError:
        raise InvalidAnnotationError(f"Unknown annotation type: {data.get('type')!r}")
    return make_annotation(
        kind,
        data.get("points") or [],
        color=data.get("color"),
        severity=data.get("crackLevel"),
    )


def annotation_to_dict(annotation: Annotation) -> Dict[str, Any]:
    return {
        "type": annotation.kind.value,
        "points": [[x, y] for (x, y) in annotation.points],
        "color": format_color(annotation.color),
        "crackLevel": annotation.severity,
    }
