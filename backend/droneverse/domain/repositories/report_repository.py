from abc import ABC, abstractmethod
from typing import List, Optional

from droneverse.domain.entities.damage_entity import Report


class ReportRepository(ABC):
    """Persistence contract for generated reports. Failures raise ReportPersistenceError."""

    @abstractmethod
    def create(self, report: Report) -> Report:
        """Store a new report and return it with id and createdAt set."""
        raise NotImplementedError

    @abstractmethod
    def list(self, owner_id: Optional[str] = None) -> List[Report]:
        """Reports visible to owner_id, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get(self, report_id: str) -> Optional[Report]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, report_id: str) -> bool:
        """Remove a report; False when it did not exist."""
        raise NotImplementedError
