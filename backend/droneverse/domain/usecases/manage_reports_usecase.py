from typing import List, Optional

from droneverse.domain.entities.damage_entity import Report
from droneverse.domain.repositories.report_repository import ReportRepository


class ManageReportsUseCase:
    """Owner-scoped access to stored reports."""

    def __init__(self, repository: ReportRepository) -> None:
        self._repo = repository

    def save(self, report: Report) -> Report:
        if not report.client_name or not report.client_name.strip():
            raise ValueError("Client name cannot be empty")
        return self._repo.create(report)

    def list(self, owner_id: Optional[str]) -> List[Report]:
        return self._repo.list(owner_id=owner_id)

    def get(self, report_id: str, owner_id: Optional[str]) -> Optional[Report]:
        report = self._repo.get(report_id)
        if report is None or (owner_id is not None and report.owner_id != owner_id):
            return None
        return report

    def delete(self, report_id: str, owner_id: Optional[str]) -> bool:
        if self.get(report_id, owner_id) is None:
            return False
        return self._repo.delete(report_id)
