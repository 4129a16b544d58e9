import asyncio
from typing import Mapping, Optional

from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.damage_entity import DamageEntry, DamageMap, Report, ReportDamage, ReportOutcome
from droneverse.domain.entities.filter_entity import DEFAULT_FILTERS, FilterSettings
from droneverse.domain.repositories.report_repository import ReportRepository
from droneverse.domain.repositories.upload_repository import UploadRepository
from droneverse.domain.usecases.compose_image_usecase import ComposeImageUseCase

_logger = get_logger("report_usecase")

DEFAULT_CLIENT_NAME = "Client Report"


def report_folder(entry: DamageEntry) -> str:
    return f"Reports/{entry.turbine}/{entry.blade}"


class NoDamagesError(ValueError):
    pass


class GenerateReportUseCase:
    """Composes every damaged image, uploads the results and persists the report.

    Entries are processed concurrently. An entry whose composition or upload fails keeps
    its original image and is flagged as fallback; persistence failures propagate.
    """

    def __init__(self, composer: ComposeImageUseCase, uploads: UploadRepository, reports: ReportRepository) -> None:
        self._composer = composer
        self._uploads = uploads
        self._reports = reports

    async def generate(self, damages: DamageMap, filters_by_image: Optional[Mapping[str, FilterSettings]] = None,
                       client_name: Optional[str] = None, owner_id: Optional[str] = None) -> ReportOutcome:
        if not damages:
            raise NoDamagesError("No damages annotated. Please annotate images before generating a report.")
        filters_by_image = filters_by_image or {}

        processed = await asyncio.gather(*(
            self._process(entry, filters_by_image.get(image_id, DEFAULT_FILTERS))
            for image_id, entry in damages.items()
        ))

        fallback_ids = [d.image_public_id for d in processed if d.fallback]
        if fallback_ids:
            _logger.warning("%d of %d image(s) fell back to the original: %s",
                            len(fallback_ids), len(processed), ", ".join(fallback_ids))

        report = Report(client_name=client_name or DEFAULT_CLIENT_NAME, damages=list(processed), owner_id=owner_id)
        saved = await asyncio.to_thread(self._reports.create, report)
        _logger.info("Report %s generated with %d damage(s)", saved.id, len(saved.damages))
        return ReportOutcome(report=saved, fallback_ids=fallback_ids)

    async def _process(self, entry: DamageEntry, filters: FilterSettings) -> ReportDamage:
        try:
            blob = await self._composer.compose(entry.image_url, entry.annotations, filters)
            uploaded = await asyncio.to_thread(
                self._uploads.upload, blob, report_folder(entry), f"{entry.image_public_id.rsplit('/', 1)[-1]}.jpg"
            )
        except Exception as e:
            _logger.warning("Error processing image %s for report, using original: %s", entry.image_public_id, e)
            return ReportDamage(
                turbine=entry.turbine,
                blade=entry.blade,
                side=entry.side,
                image_url=entry.image_url,
                image_public_id=entry.image_public_id,
                annotations=entry.annotations,
                filters=filters,
                fallback=True,
                error=f"{type(e).__name__}: {e}",
            )
        return ReportDamage(
            turbine=entry.turbine,
            blade=entry.blade,
            side=entry.side,
            image_url=uploaded.secure_url,
            image_public_id=uploaded.public_id,
            annotations=entry.annotations,
            filters=filters,
        )
