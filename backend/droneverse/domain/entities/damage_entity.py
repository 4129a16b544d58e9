from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple

from droneverse.domain.entities.annotation_entity import Annotation
from droneverse.domain.entities.filter_entity import DEFAULT_FILTERS, FilterSettings


UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class ImageMetadata:
    """Source image and where on the turbine it was taken."""
    image_url: str
    turbine: str = UNKNOWN_LOCATION
    blade: str = UNKNOWN_LOCATION
    side: str = UNKNOWN_LOCATION


@dataclass(frozen=True)
class DamageEntry:
    """All annotations recorded against one source image.

    - image_public_id: identity of the image in storage; unique key of the damage map
    - turbine / blade / side: free-text location labels
    - annotations: in recording order
    """
    image_url: str
    image_public_id: str
    turbine: str = UNKNOWN_LOCATION
    blade: str = UNKNOWN_LOCATION
    side: str = UNKNOWN_LOCATION
    annotations: Tuple[Annotation, ...] = ()

    def with_annotation(self, annotation: Annotation) -> "DamageEntry":
        return replace(self, annotations=self.annotations + (annotation,))


DamageMap = Mapping[str, DamageEntry]


@dataclass(frozen=True)
class ReportDamage:
    """Snapshot of a damage entry as stored in a report.

    image_url/image_public_id point at the composited image, or at the original
    one when fallback is True (composition or upload failed).
    """
    turbine: str
    blade: str
    side: str
    image_url: str
    image_public_id: str
    annotations: Tuple[Annotation, ...] = ()
    filters: FilterSettings = DEFAULT_FILTERS
    fallback: bool = False
    error: Optional[str] = None


@dataclass
class Report:
    client_name: str
    damages: List[ReportDamage]
    owner_id: Optional[str] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def grouped(self) -> Dict[str, Dict[str, Dict[str, List[ReportDamage]]]]:
        """Damages grouped turbine -> blade -> side, preserving report order."""
        tree: Dict[str, Dict[str, Dict[str, List[ReportDamage]]]] = {}
        for d in self.damages:
            tree.setdefault(d.turbine, {}).setdefault(d.blade, {}).setdefault(d.side, []).append(d)
        return tree


@dataclass
class ReportOutcome:
    """Persisted report plus which entries fell back to their original image."""
    report: Report
    fallback_ids: List[str] = field(default_factory=list)

    @property
    def fallback_count(self) -> int:
        return len(self.fallback_ids)

    @property
    def message(self) -> str:
        if not self.fallback_ids:
            return "Report generated successfully."
        return f"Report generated, but {self.fallback_count} image(s) could not be processed."
