from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.utils.logger import get_logger
from droneverse.presentation.api.v1.auth_router import router as auth_router
from droneverse.presentation.api.v1.inspection_router import router as inspection_router
from droneverse.presentation.api.v1.report_router import router as report_router
from droneverse.presentation.api.v1.upload_router import router as upload_router
from droneverse.presentation.api.v1.workspace_router import router as workspace_router


logger = get_logger("main")

app = FastAPI(title="DroneVerse Inspection Backend", version="1.0.0")

# Enable permissive CORS (allow all origins). Use with caution in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    cfg = ServiceLocator.config()
    ServiceLocator.database()
    logger.info("Starting DroneVerse backend (env=%s)", cfg.app_env)


@app.on_event("shutdown")
async def on_shutdown():
    ServiceLocator.reset()


@app.get("/")
def root():
    return {"status": "ok", "message": "DroneVerse backend running"}


@app.get("/media/{file_path:path}")
def media(file_path: str):
    """Serves files written by the local upload backend."""
    root = Path(ServiceLocator.config().upload_dir).resolve()
    target = (root / file_path).resolve()
    if root not in target.parents or not target.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(target)


app.include_router(auth_router)
app.include_router(inspection_router)
app.include_router(upload_router)
app.include_router(workspace_router)
app.include_router(report_router)
