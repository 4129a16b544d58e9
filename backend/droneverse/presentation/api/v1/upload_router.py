from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.utils.logger import get_logger
from droneverse.domain.exceptions import InvalidUploadPathError, UploadError
from droneverse.presentation.api.deps import current_user_id, rate_limited


router = APIRouter(prefix="/api/v1/upload", tags=["upload"])
logger = get_logger("upload_router")


class UploadResponse(BaseModel):
    secure_url: str
    public_id: str


@router.post("", response_model=UploadResponse, dependencies=[Depends(current_user_id), Depends(rate_limited)])
def upload(file: UploadFile = File(...), folderPath: Optional[str] = Form(None)):
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="No file provided")
    # folderPath is relative to the storage root, e.g. "WTG 1/Blade 1/LE"
    try:
        result = ServiceLocator.upload_repo().upload(data, folderPath or "", filename=file.filename)
    except InvalidUploadPathError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError as e:
        logger.error("Upload error: %s", e)
        raise HTTPException(status_code=502, detail=f"Upload failed: {e}")
    return UploadResponse(secure_url=result.secure_url, public_id=result.public_id)
