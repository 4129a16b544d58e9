from typing import List

from fastapi import APIRouter, Depends, HTTPException

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.utils.logger import get_logger
from droneverse.domain.exceptions import InvalidInspectionError, PersistenceError
from droneverse.presentation.api.deps import current_user_id
from droneverse.presentation.api.v1.schemas import InspectionRequest, InspectionResponse


router = APIRouter(prefix="/api/v1/inspections", tags=["inspections"])
logger = get_logger("inspection_router")


@router.post("", response_model=InspectionResponse, status_code=201)
def create_inspection(req: InspectionRequest, user_id: str = Depends(current_user_id)):
    usecase = ServiceLocator.manage_inspections_usecase()
    try:
        saved = usecase.create(req.to_entity(), owner_id=user_id)
    except InvalidInspectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        logger.error("Failed to create inspection: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create inspection")
    return InspectionResponse.from_entity(saved)


@router.get("", response_model=List[InspectionResponse])
def list_inspections(user_id: str = Depends(current_user_id)):
    try:
        inspections = ServiceLocator.manage_inspections_usecase().list(owner_id=user_id)
    except PersistenceError as e:
        logger.error("Failed to fetch inspections: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch inspections")
    return [InspectionResponse.from_entity(i) for i in inspections]


@router.get("/{inspection_id}", response_model=InspectionResponse)
def get_inspection(inspection_id: str, user_id: str = Depends(current_user_id)):
    try:
        inspection = ServiceLocator.manage_inspections_usecase().get(inspection_id, owner_id=user_id)
    except PersistenceError as e:
        logger.error("Failed to read inspection %s: %s", inspection_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch inspection")
    if inspection is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    return InspectionResponse.from_entity(inspection)
