from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.annotation_entity import AnnotationKind
from droneverse.domain.entities.damage_entity import UNKNOWN_LOCATION, ImageMetadata
from droneverse.domain.exceptions import (
    InspectionNotFoundError,
    InvalidAnnotationError,
    InvalidTransitionError,
    PersistenceError,
)
from droneverse.domain.usecases.drawing_session import ViewBox
from droneverse.domain.usecases.inspection_workspace import InspectionWorkspace
from droneverse.presentation.api.deps import current_user_id, current_workspace
from droneverse.presentation.api.v1.schemas import AnnotationModel, DamageEntryResponse, FilterModel


router = APIRouter(prefix="/api/v1/workspace", tags=["workspace"])
logger = get_logger("workspace_router")


class SelectImageRequest(BaseModel):
    image_url: Optional[str] = Field(None, description="Full-resolution URL of the source image")
    public_id: str = Field(..., description="Storage identity of the image")
    inspection_id: Optional[str] = Field(None, description="Take URL and location from this inspection")
    turbine: Optional[str] = None
    blade: Optional[str] = None
    side: Optional[str] = None
    client_name: Optional[str] = None


class ToolRequest(BaseModel):
    kind: AnnotationKind


class BoxModel(BaseModel):
    left: float
    top: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class PointerRequest(BaseModel):
    event: Literal["click", "move"]
    client_x: float
    client_y: float
    box: BoxModel = Field(..., description="Bounding box of the rendered image in client pixels")


class SaveRequest(BaseModel):
    severity: Optional[int] = Field(None, ge=1, le=5, description="Crack level 1-5; omit for none")


class SessionPreview(BaseModel):
    state: str
    kind: Optional[str] = None
    points: List[List[float]]
    color: str
    complete: bool


class WorkspaceResponse(BaseModel):
    image_id: Optional[str] = None
    client_name: Optional[str] = None
    session: SessionPreview
    filters: FilterModel
    filter_css: str
    damages: List[DamageEntryResponse]
    damage_count: int


class SaveResponse(BaseModel):
    annotation: AnnotationModel
    workspace: WorkspaceResponse


def _state(ws: InspectionWorkspace) -> WorkspaceResponse:
    cloud_name = ServiceLocator.config().cloudinary_cloud_name
    filters = ws.current_filters()
    return WorkspaceResponse(
        image_id=ws.image_id,
        client_name=ws.client_name,
        session=SessionPreview(**ws.session.preview()),
        filters=FilterModel.from_entity(filters),
        filter_css=filters.to_css(),
        damages=[DamageEntryResponse.from_entity(e, cloud_name) for e in ws.damages.values()],
        damage_count=len(ws.damages),
    )


@router.get("", response_model=WorkspaceResponse)
def get_workspace(ws: InspectionWorkspace = Depends(current_workspace)):
    with ws.lock:
        return _state(ws)


def _metadata_from_inspection(req: SelectImageRequest, public_id: str, user_id: str):
    try:
        inspection, metadata = ServiceLocator.manage_inspections_usecase().locate_image(
            req.inspection_id, public_id, owner_id=user_id
        )
    except InspectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        logger.error("Failed to read inspection %s: %s", req.inspection_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch inspection")
    return metadata, req.client_name or inspection.client_name


@router.post("/image", response_model=WorkspaceResponse)
def select_image(req: SelectImageRequest,
                 user_id: str = Depends(current_user_id),
                 ws: InspectionWorkspace = Depends(current_workspace)):
    public_id = req.public_id.strip()
    if not public_id:
        raise HTTPException(status_code=400, detail="public_id is required")
    if req.inspection_id:
        # Location labels and URL come from the stored inspection.
        metadata, client_name = _metadata_from_inspection(req, public_id, user_id)
    else:
        image_url = (req.image_url or "").strip().strip('`"')
        if not image_url:
            raise HTTPException(status_code=400, detail="image_url and public_id are required")
        metadata = ImageMetadata(
            image_url=image_url,
            turbine=req.turbine or UNKNOWN_LOCATION,
            blade=req.blade or UNKNOWN_LOCATION,
            side=req.side or UNKNOWN_LOCATION,
        )
        client_name = req.client_name
    with ws.lock:
        ws.select_image(public_id, metadata, client_name=client_name)
        return _state(ws)


@router.post("/tool", response_model=WorkspaceResponse)
def select_tool(req: ToolRequest, ws: InspectionWorkspace = Depends(current_workspace)):
    with ws.lock:
        try:
            ws.select_tool(req.kind)
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(ws)


@router.post("/pointer", response_model=WorkspaceResponse)
def pointer(req: PointerRequest, ws: InspectionWorkspace = Depends(current_workspace)):
    box = ViewBox(left=req.box.left, top=req.box.top, width=req.box.width, height=req.box.height)
    with ws.lock:
        if req.event == "click":
            ws.session.pointer_click(req.client_x, req.client_y, box)
        else:
            ws.session.pointer_move(req.client_x, req.client_y, box)
        return _state(ws)


@router.post("/confirm", response_model=WorkspaceResponse)
def confirm(ws: InspectionWorkspace = Depends(current_workspace)):
    with ws.lock:
        try:
            ws.session.confirm()
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(ws)


@router.post("/save", response_model=SaveResponse)
def save(req: SaveRequest, ws: InspectionWorkspace = Depends(current_workspace)):
    with ws.lock:
        try:
            annotation = ws.session.save(req.severity)
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except InvalidAnnotationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        logger.info("Annotation saved on %s (%s, severity=%s)", ws.image_id, annotation.kind.value, annotation.severity)
        return SaveResponse(annotation=AnnotationModel.from_entity(annotation), workspace=_state(ws))


@router.post("/cancel", response_model=WorkspaceResponse)
def cancel(ws: InspectionWorkspace = Depends(current_workspace)):
    with ws.lock:
        try:
            ws.session.cancel()
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(ws)


@router.post("/discard", response_model=WorkspaceResponse)
def discard(ws: InspectionWorkspace = Depends(current_workspace)):
    with ws.lock:
        try:
            ws.session.discard()
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(ws)


@router.put("/filters", response_model=WorkspaceResponse)
def set_filters(req: FilterModel, ws: InspectionWorkspace = Depends(current_workspace)):
    try:
        filters = req.to_entity()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    with ws.lock:
        try:
            ws.set_filters(filters)
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(ws)
