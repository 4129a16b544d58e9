from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from droneverse.domain.entities.annotation_entity import (
    PREVIEW_GRAY,
    TRANSPARENT,
    format_color,
    Annotation,
    AnnotationKind,
    Point,
    make_annotation,
)
from droneverse.domain.exceptions import InvalidTransitionError


class SessionState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    PENDING_SEVERITY = "pending_severity"


@dataclass(frozen=True)
class ViewBox:
    """On-screen bounding box of the rendered image, in client pixels."""
    left: float
    top: float
    width: float
    height: float


def to_percent(client_x: float, client_y: float, box: ViewBox) -> Point:
    """Pointer position relative to the rendered image, as 0-100 percentages.

    Positions outside the image are clamped to its edges.
    """
    if box.width <= 0 or box.height <= 0:
        raise ValueError("Rendered image box must have a positive size")
    x = (client_x - box.left) / box.width * 100.0
    y = (client_y - box.top) / box.height * 100.0
    return (min(max(x, 0.0), 100.0), min(max(y, 0.0), 100.0))


class DrawingSession:
    """Interactive creation of one annotation from pointer input.

    IDLE -> DRAWING(kind) -> PENDING_SEVERITY -> IDLE. Saved annotations are handed to
    on_save; nothing else leaves the session.
    """

    def __init__(self, on_save: Callable[[Annotation], None]) -> None:
        self._on_save = on_save
        self.image_id: Optional[str] = None
        self._reset()

    def _reset(self) -> None:
        self.state = SessionState.IDLE
        self.kind: Optional[AnnotationKind] = None
        self.points: Tuple[Point, ...] = ()
        self._anchor: Optional[Point] = None
        self._complete = False

    @property
    def is_complete(self) -> bool:
        """Rectangle has both corners fixed."""
        return self._complete

    def select_tool(self, kind: AnnotationKind) -> None:
        if self.state is SessionState.PENDING_SEVERITY:
            raise InvalidTransitionError("Save or cancel the severity picker before picking a tool")
        self._reset()
        self.kind = AnnotationKind(kind)
        self.state = SessionState.DRAWING

    def pointer_click(self, client_x: float, client_y: float, box: ViewBox) -> None:
        if self.state is not SessionState.DRAWING:
            return
        point = to_percent(client_x, client_y, box)
        if self.kind is AnnotationKind.POLYGON:
            self.points = self.points + (point,)
        elif self.kind is AnnotationKind.RECTANGLE:
            if self._complete:
                return
            if self._anchor is None:
                self._anchor = point
                self.points = (point,)
            else:
                self.points = (self._anchor, point)
                self._anchor = None
                self._complete = True

    def pointer_move(self, client_x: float, client_y: float, box: ViewBox) -> None:
        if self.state is not SessionState.DRAWING or self.kind is not AnnotationKind.RECTANGLE:
            return
        if self._anchor is None:
            return
        self.points = (self._anchor, to_percent(client_x, client_y, box))

    def confirm(self) -> None:
        if self.state is not SessionState.DRAWING:
            raise InvalidTransitionError(f"Nothing to confirm in state {self.state.value}")
        if len(self.points) < 2:
            raise InvalidTransitionError("A shape needs at least 2 points")
        # A rectangle confirmed mid-drag keeps its live preview corner.
        self._anchor = None
        self._complete = self.kind is AnnotationKind.RECTANGLE
        self.state = SessionState.PENDING_SEVERITY

    def save(self, severity: Optional[int] = None) -> Annotation:
        if self.state is not SessionState.PENDING_SEVERITY:
            raise InvalidTransitionError(f"Nothing to save in state {self.state.value}")
        # Validation or consumer errors leave the picker open.
        annotation = make_annotation(self.kind, self.points, color=TRANSPARENT, severity=severity)
        self._on_save(annotation)
        self._reset()
        return annotation

    def cancel(self) -> None:
        if self.state is not SessionState.PENDING_SEVERITY:
            raise InvalidTransitionError(f"No severity picker open in state {self.state.value}")
        self._reset()

    def discard(self) -> None:
        if self.state is SessionState.PENDING_SEVERITY:
            raise InvalidTransitionError("Use cancel to close the severity picker")
        self._reset()

    def switch_image(self, image_id: Optional[str]) -> None:
        """Selecting another image drops any shape in progress."""
        self.image_id = image_id
        self._reset()

    def preview(self) -> dict:
        return {
            "state": self.state.value,
            "kind": self.kind.value if self.kind else None,
            "points": [list(p) for p in self.points],
            "color": format_color(PREVIEW_GRAY),
            "complete": self._complete or (self.kind is AnnotationKind.POLYGON and len(self.points) >= 2),
        }
