from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.damage_entity import Report
from droneverse.domain.exceptions import InvalidAnnotationError, ReportPersistenceError
from droneverse.domain.usecases.generate_report_usecase import NoDamagesError
from droneverse.domain.usecases.inspection_workspace import InspectionWorkspace
from droneverse.presentation.api.deps import current_user_id, current_workspace, rate_limited
from droneverse.presentation.api.v1.schemas import ReportDamageModel, ReportResponse, ReportTree


router = APIRouter(prefix="/api/v1/reports", tags=["reports"])
logger = get_logger("report_router")


class GenerateReportRequest(BaseModel):
    client_name: Optional[str] = None


class GenerateReportResponse(BaseModel):
    report: ReportResponse
    fallback_count: int
    fallback_image_ids: List[str]
    message: str


class CreateReportRequest(BaseModel):
    client_name: str = Field(..., min_length=1)
    damages: List[ReportDamageModel]


@router.post("/generate", response_model=GenerateReportResponse, dependencies=[Depends(rate_limited)])
async def generate_report(req: GenerateReportRequest,
                          user_id: str = Depends(current_user_id),
                          ws: InspectionWorkspace = Depends(current_workspace)):
    snapshot, filters, client_name = ws.snapshot()
    usecase = ServiceLocator.generate_report_usecase()
    try:
        outcome = await usecase.generate(
            snapshot,
            filters,
            client_name=req.client_name or client_name,
            owner_id=user_id,
        )
    except NoDamagesError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReportPersistenceError as e:
        logger.error("Failed to create report: %s", e)
        raise HTTPException(status_code=500, detail="Failed to generate report.")

    ws.clear_damages(snapshot)
    return GenerateReportResponse(
        report=ReportResponse.from_entity(outcome.report),
        fallback_count=outcome.fallback_count,
        fallback_image_ids=outcome.fallback_ids,
        message=outcome.message,
    )


@router.post("", response_model=ReportResponse, status_code=201)
def create_report(req: CreateReportRequest, user_id: str = Depends(current_user_id)):
    try:
        damages = [d.to_entity() for d in req.damages]
    except (InvalidAnnotationError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    usecase = ServiceLocator.manage_reports_usecase()
    try:
        saved = usecase.save(Report(client_name=req.client_name, damages=damages, owner_id=user_id))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReportPersistenceError as e:
        logger.error("Failed to create report: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create report")
    return ReportResponse.from_entity(saved)


@router.get("", response_model=List[ReportResponse])
def list_reports(user_id: str = Depends(current_user_id)):
    try:
        reports = ServiceLocator.manage_reports_usecase().list(owner_id=user_id)
    except ReportPersistenceError as e:
        logger.error("Failed to fetch reports: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch reports")
    return [ReportResponse.from_entity(r) for r in reports]


def _get_owned(report_id: str, user_id: str) -> Report:
    try:
        report = ServiceLocator.manage_reports_usecase().get(report_id, owner_id=user_id)
    except ReportPersistenceError as e:
        logger.error("Failed to read report %s: %s", report_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch report")
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(report_id: str, user_id: str = Depends(current_user_id)):
    return ReportResponse.from_entity(_get_owned(report_id, user_id))


@router.get("/{report_id}/tree", response_model=ReportTree)
def get_report_tree(report_id: str, user_id: str = Depends(current_user_id)):
    report = _get_owned(report_id, user_id)
    return {
        turbine: {
            blade: {side: [ReportDamageModel.from_entity(d) for d in damages] for side, damages in sides.items()}
            for blade, sides in blades.items()
        }
        for turbine, blades in report.grouped().items()
    }


@router.delete("/{report_id}")
def delete_report(report_id: str, user_id: str = Depends(current_user_id)):
    try:
        deleted = ServiceLocator.manage_reports_usecase().delete(report_id, owner_id=user_id)
    except ReportPersistenceError as e:
        logger.error("Failed to delete report %s: %s", report_id, e)
        raise HTTPException(status_code=500, detail="Failed to delete report")
    if not deleted:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"success": True}
