import threading
from typing import Dict, Optional, Tuple

from droneverse.domain.entities.annotation_entity import Annotation, AnnotationKind
from droneverse.domain.entities.damage_entity import DamageEntry, ImageMetadata
from droneverse.domain.entities.filter_entity import DEFAULT_FILTERS, FilterSettings
from droneverse.domain.exceptions import InvalidTransitionError
from droneverse.domain.usecases.drawing_session import DrawingSession
from droneverse.domain.usecases.record_annotation_usecase import record_annotation


class InspectionWorkspace:
    """One user's working state: the selected image, its drawing session, the damage
    map built from saved annotations and the per-image filters.

    Requests for the same user may run on different threads; callers hold `lock`
    around any read-modify-write of the session, damages or filters.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.session = DrawingSession(on_save=self._on_annotation_saved)
        self.image_id: Optional[str] = None
        self.metadata: Optional[ImageMetadata] = None
        self.client_name: Optional[str] = None
        self.damages: Dict[str, DamageEntry] = {}
        self.filters: Dict[str, FilterSettings] = {}

    def select_image(self, image_id: str, metadata: ImageMetadata, client_name: Optional[str] = None) -> None:
        if not image_id:
            raise ValueError("Image identity cannot be empty")
        with self.lock:
            self.image_id = image_id
            self.metadata = metadata
            if client_name:
                self.client_name = client_name
            self.session.switch_image(image_id)

    def select_tool(self, kind: AnnotationKind) -> None:
        with self.lock:
            if self.image_id is None:
                raise InvalidTransitionError("Select an image before drawing")
            self.session.select_tool(kind)

    def _on_annotation_saved(self, annotation: Annotation) -> None:
        if self.image_id is None or self.metadata is None:
            raise InvalidTransitionError("No image selected")
        self.damages = record_annotation(self.damages, self.image_id, self.metadata, annotation)

    def set_filters(self, filters: FilterSettings) -> None:
        with self.lock:
            if self.image_id is None:
                raise InvalidTransitionError("Select an image before adjusting filters")
            self.filters[self.image_id] = filters

    def current_filters(self) -> FilterSettings:
        if self.image_id is None:
            return DEFAULT_FILTERS
        return self.filters.get(self.image_id, DEFAULT_FILTERS)

    def snapshot(self) -> Tuple[Dict[str, DamageEntry], Dict[str, FilterSettings], Optional[str]]:
        """Copies of the damage map and filters, plus the client name, taken atomically."""
        with self.lock:
            return dict(self.damages), dict(self.filters), self.client_name

    def clear_damages(self, reported: Optional[Dict[str, DamageEntry]] = None) -> None:
        """Drop damages that went into a report.

        With `reported`, only entries still identical to the reported snapshot are
        dropped, so annotations saved while the report was generating survive.
        """
        with self.lock:
            if reported is None:
                self.damages = {}
                return
            self.damages = {k: v for k, v in self.damages.items() if reported.get(k) is not v}


class WorkspaceRegistry:
    """In-memory workspaces keyed by user id."""

    def __init__(self) -> None:
        self._workspaces: Dict[str, InspectionWorkspace] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> InspectionWorkspace:
        with self._lock:
            ws = self._workspaces.get(user_id)
            if ws is None:
                ws = InspectionWorkspace()
                self._workspaces[user_id] = ws
            return ws

    def drop(self, user_id: str) -> None:
        with self._lock:
            self._workspaces.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._workspaces.clear()
