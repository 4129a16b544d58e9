from typing import List, Optional, Tuple

from droneverse.domain.entities.damage_entity import ImageMetadata
from droneverse.domain.entities.inspection_entity import Inspection
from droneverse.domain.exceptions import InspectionNotFoundError
from droneverse.domain.repositories.inspection_repository import InspectionRepository


class ManageInspectionsUseCase:
    """Owner-scoped creation and lookup of inspections and the images they hold."""

    def __init__(self, repository: InspectionRepository) -> None:
        self._repo = repository

    def create(self, inspection: Inspection, owner_id: Optional[str]) -> Inspection:
        inspection.validate()
        inspection.owner_id = owner_id
        return self._repo.create(inspection)

    def list(self, owner_id: Optional[str]) -> List[Inspection]:
        return self._repo.list(owner_id=owner_id)

    def get(self, inspection_id: str, owner_id: Optional[str]) -> Optional[Inspection]:
        inspection = self._repo.get(inspection_id)
        if inspection is None or (owner_id is not None and inspection.owner_id != owner_id):
            return None
        return inspection

    def locate_image(self, inspection_id: str, public_id: str,
                     owner_id: Optional[str]) -> Tuple[Inspection, ImageMetadata]:
        """The inspection plus turbine, blade, side and URL of one of its photos."""
        inspection = self.get(inspection_id, owner_id)
        if inspection is None:
            raise InspectionNotFoundError(f"Inspection {inspection_id} not found")
        metadata = inspection.locate_image(public_id)
        if metadata is None:
            raise InspectionNotFoundError(f"Image {public_id} is not part of inspection {inspection_id}")
        return inspection, metadata
