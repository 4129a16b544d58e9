import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from droneverse.core.utils.logger import get_logger
from droneverse.data.db.database import Database, as_utc
from droneverse.data.db.models import InspectionRecord
from droneverse.domain.entities.inspection_entity import (
    Inspection,
    Location,
    turbines_from_dicts,
    turbines_to_dicts,
)
from droneverse.domain.exceptions import PersistenceError
from droneverse.domain.repositories.inspection_repository import InspectionRepository

_logger = get_logger("inspection_repo")


def _inspection_entity(record: InspectionRecord) -> Inspection:
    return Inspection(
        id=record.id,
        owner_id=record.owner_id,
        client_name=record.client_name,
        employee_name=record.employee_name,
        location=Location.from_dict(record.location),
        turbines=turbines_from_dicts(record.turbines),
        created_at=as_utc(record.created_at),
    )


class InspectionRepositoryImpl(InspectionRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, inspection: Inspection) -> Inspection:
        record = InspectionRecord(
            id=uuid.uuid4().hex,
            owner_id=inspection.owner_id,
            client_name=inspection.client_name,
            employee_name=inspection.employee_name,
            location=inspection.location.to_dict(),
            turbines=turbines_to_dicts(inspection.turbines),
            created_at=as_utc(inspection.created_at),
        )
        with self._db.session() as db:
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
            except SQLAlchemyError as e:
                db.rollback()
                _logger.error("Failed to create inspection: %s", e)
                raise PersistenceError(f"Failed to create inspection: {e}") from e
            _logger.info("Inspection %s created for %s", record.id, record.client_name)
            return _inspection_entity(record)

    def list(self, owner_id: Optional[str] = None) -> List[Inspection]:
        with self._db.session() as db:
            try:
                query = db.query(InspectionRecord)
                if owner_id is not None:
                    query = query.filter(InspectionRecord.owner_id == owner_id)
                records = query.order_by(InspectionRecord.created_at.desc()).all()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to fetch inspections: {e}") from e
            return [_inspection_entity(r) for r in records]

    def get(self, inspection_id: str) -> Optional[Inspection]:
        with self._db.session() as db:
            try:
                record = db.get(InspectionRecord, inspection_id)
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to read inspection {inspection_id}: {e}") from e
            return _inspection_entity(record) if record else None
