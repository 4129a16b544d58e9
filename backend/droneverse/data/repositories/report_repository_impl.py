import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from droneverse.core.utils.logger import get_logger
from droneverse.data.db.database import Database, as_utc
from droneverse.data.db.models import ReportDamageRecord, ReportRecord
from droneverse.domain.entities.annotation_entity import annotation_from_dict, annotation_to_dict
from droneverse.domain.entities.damage_entity import Report, ReportDamage
from droneverse.domain.entities.filter_entity import FilterSettings
from droneverse.domain.exceptions import ReportPersistenceError
from droneverse.domain.repositories.report_repository import ReportRepository

_logger = get_logger("report_repo")


def _damage_record(damage: ReportDamage, position: int) -> ReportDamageRecord:
    return ReportDamageRecord(
        position=position,
        turbine=damage.turbine,
        blade=damage.blade,
        side=damage.side,
        image_url=damage.image_url,
        image_public_id=damage.image_public_id,
        annotations=[annotation_to_dict(a) for a in damage.annotations],
        filters=damage.filters.to_dict(),
        fallback=damage.fallback,
        error=damage.error,
    )


def _damage_entity(record: ReportDamageRecord) -> ReportDamage:
    return ReportDamage(
        turbine=record.turbine,
        blade=record.blade,
        side=record.side,
        image_url=record.image_url,
        image_public_id=record.image_public_id,
        annotations=tuple(annotation_from_dict(a) for a in record.annotations or []),
        filters=FilterSettings.from_dict(record.filters),
        fallback=bool(record.fallback),
        error=record.error,
    )


def _report_entity(record: ReportRecord) -> Report:
    return Report(
        id=record.id,
        client_name=record.client_name,
        owner_id=record.owner_id,
        created_at=as_utc(record.created_at),
        damages=[_damage_entity(d) for d in record.damages],
    )


class ReportRepositoryImpl(ReportRepository):
    """Reports and their damages stored through SQLAlchemy."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, report: Report) -> Report:
        record = ReportRecord(
            id=uuid.uuid4().hex,
            client_name=report.client_name,
            owner_id=report.owner_id,
            created_at=as_utc(report.created_at),
            damages=[_damage_record(d, i) for i, d in enumerate(report.damages)],
        )
        with self._db.session() as db:
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
                return _report_entity(record)
            except SQLAlchemyError as e:
                db.rollback()
                _logger.error("Failed to create report: %s", e)
                raise ReportPersistenceError(f"Failed to create report: {e}") from e

    def list(self, owner_id: Optional[str] = None) -> List[Report]:
        with self._db.session() as db:
            try:
                query = db.query(ReportRecord)
                if owner_id is not None:
                    query = query.filter(ReportRecord.owner_id == owner_id)
                records = query.order_by(ReportRecord.created_at.desc()).all()
                return [_report_entity(r) for r in records]
            except SQLAlchemyError as e:
                raise ReportPersistenceError(f"Failed to fetch reports: {e}") from e

    def get(self, report_id: str) -> Optional[Report]:
        with self._db.session() as db:
            try:
                record = db.get(ReportRecord, report_id)
                return _report_entity(record) if record else None
            except SQLAlchemyError as e:
                raise ReportPersistenceError(f"Failed to read report {report_id}: {e}") from e

    def delete(self, report_id: str) -> bool:
        with self._db.session() as db:
            try:
                record = db.get(ReportRecord, report_id)
                if record is None:
                    return False
                db.delete(record)
                db.commit()
                return True
            except SQLAlchemyError as e:
                db.rollback()
                raise ReportPersistenceError(f"Failed to delete report {report_id}: {e}") from e
