from abc import ABC, abstractmethod
from typing import List, Optional

from droneverse.domain.entities.inspection_entity import Inspection


class InspectionRepository(ABC):
    """Persistence contract for inspections. Failures raise PersistenceError."""

    @abstractmethod
    def create(self, inspection: Inspection) -> Inspection:
        raise NotImplementedError

    @abstractmethod
    def list(self, owner_id: Optional[str] = None) -> List[Inspection]:
        """Inspections visible to owner_id, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get(self, inspection_id: str) -> Optional[Inspection]:
        raise NotImplementedError
