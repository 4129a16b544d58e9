from typing import Optional

from droneverse.core.config.environment_config import EnvironmentConfig
from droneverse.core.utils.logger import get_logger
from droneverse.core.utils.rate_limit import FixedWindowRateLimiter
from droneverse.data.adapters.http_image_loader import HttpImageLoader
from droneverse.data.adapters.http_upload_client import HttpUploadClient
from droneverse.data.adapters.local_upload_client import LocalUploadClient
from droneverse.data.adapters.opencv_surface import OpenCvSurfaceFactory
from droneverse.data.db.database import Database
from droneverse.data.repositories.image_repository_impl import ImageRepositoryImpl
from droneverse.data.repositories.inspection_repository_impl import InspectionRepositoryImpl
from droneverse.data.repositories.report_repository_impl import ReportRepositoryImpl
from droneverse.data.repositories.upload_repository_impl import UploadRepositoryImpl
from droneverse.data.repositories.user_repository_impl import UserRepositoryImpl
from droneverse.domain.usecases.auth_usecase import AuthUseCase
from droneverse.domain.usecases.compose_image_usecase import ComposeImageUseCase
from droneverse.domain.usecases.generate_report_usecase import GenerateReportUseCase
from droneverse.domain.usecases.inspection_workspace import WorkspaceRegistry
from droneverse.domain.usecases.manage_inspections_usecase import ManageInspectionsUseCase
from droneverse.domain.usecases.manage_reports_usecase import ManageReportsUseCase

_logger = get_logger("service_locator")


class ServiceLocator:
    """Lazily builds and caches the app's services.

    Everything cached here is released by reset(), which the app calls on shutdown
    and tests call between cases.
    """
    _config: Optional[EnvironmentConfig] = None
    _database: Optional[Database] = None
    _image_repo: Optional[ImageRepositoryImpl] = None
    _surface_factory: Optional[OpenCvSurfaceFactory] = None
    _compose_usecase: Optional[ComposeImageUseCase] = None
    _upload_repo: Optional[UploadRepositoryImpl] = None
    _report_repo: Optional[ReportRepositoryImpl] = None
    _generate_report_usecase: Optional[GenerateReportUseCase] = None
    _manage_reports_usecase: Optional[ManageReportsUseCase] = None
    _user_repo: Optional[UserRepositoryImpl] = None
    _auth_usecase: Optional[AuthUseCase] = None
    _inspection_repo: Optional[InspectionRepositoryImpl] = None
    _manage_inspections_usecase: Optional[ManageInspectionsUseCase] = None
    _workspaces: Optional[WorkspaceRegistry] = None
    _rate_limiter: Optional[FixedWindowRateLimiter] = None

    @classmethod
    def config(cls) -> EnvironmentConfig:
        if cls._config is None:
            cls._config = EnvironmentConfig()
            _logger.info(
                "config APP_ENV=%s UPLOAD_BACKEND=%s DATABASE_URL=%s SESSION_SECRET=%s",
                cls._config.app_env,
                cls._config.upload_backend,
                cls._config.database_url.split("@")[-1],
                "SET" if cls._config.session_secret else "MISSING",
            )
        return cls._config

    @classmethod
    def database(cls) -> Database:
        if cls._database is None:
            cls._database = Database(cls.config().database_url)
            cls._database.create_all()
        return cls._database

    @classmethod
    def image_repo(cls) -> ImageRepositoryImpl:
        if cls._image_repo is None:
            cfg = cls.config()
            loader = HttpImageLoader(timeout=cfg.image_fetch_timeout, allow_local=cfg.allow_local_images)
            cls._image_repo = ImageRepositoryImpl(client=loader)
        return cls._image_repo

    @classmethod
    def surface_factory(cls) -> OpenCvSurfaceFactory:
        if cls._surface_factory is None:
            cls._surface_factory = OpenCvSurfaceFactory()
        return cls._surface_factory

    @classmethod
    def compose_usecase(cls) -> ComposeImageUseCase:
        if cls._compose_usecase is None:
            cls._compose_usecase = ComposeImageUseCase(
                images=cls.image_repo(),
                surfaces=cls.surface_factory(),
                jpeg_quality=cls.config().jpeg_quality,
            )
        return cls._compose_usecase

    @classmethod
    def upload_repo(cls) -> UploadRepositoryImpl:
        if cls._upload_repo is None:
            cfg = cls.config()
            if cfg.upload_backend.lower() == "http":
                client = HttpUploadClient(endpoint=cfg.upload_endpoint, timeout=cfg.upload_timeout)
            else:
                client = LocalUploadClient(root_dir=cfg.upload_dir, base_url=cfg.upload_base_url)
            cls._upload_repo = UploadRepositoryImpl(client=client, root_folder=cfg.upload_root_folder)
        return cls._upload_repo

    @classmethod
    def report_repo(cls) -> ReportRepositoryImpl:
        if cls._report_repo is None:
            cls._report_repo = ReportRepositoryImpl(database=cls.database())
        return cls._report_repo

    @classmethod
    def generate_report_usecase(cls) -> GenerateReportUseCase:
        if cls._generate_report_usecase is None:
            cls._generate_report_usecase = GenerateReportUseCase(
                composer=cls.compose_usecase(),
                uploads=cls.upload_repo(),
                reports=cls.report_repo(),
            )
        return cls._generate_report_usecase

    @classmethod
    def manage_reports_usecase(cls) -> ManageReportsUseCase:
        if cls._manage_reports_usecase is None:
            cls._manage_reports_usecase = ManageReportsUseCase(repository=cls.report_repo())
        return cls._manage_reports_usecase

    @classmethod
    def user_repo(cls) -> UserRepositoryImpl:
        if cls._user_repo is None:
            cls._user_repo = UserRepositoryImpl(database=cls.database())
        return cls._user_repo

    @classmethod
    def auth_usecase(cls) -> AuthUseCase:
        if cls._auth_usecase is None:
            cls._auth_usecase = AuthUseCase(users=cls.user_repo())
        return cls._auth_usecase

    @classmethod
    def inspection_repo(cls) -> InspectionRepositoryImpl:
        if cls._inspection_repo is None:
            cls._inspection_repo = InspectionRepositoryImpl(database=cls.database())
        return cls._inspection_repo

    @classmethod
    def manage_inspections_usecase(cls) -> ManageInspectionsUseCase:
        if cls._manage_inspections_usecase is None:
            cls._manage_inspections_usecase = ManageInspectionsUseCase(repository=cls.inspection_repo())
        return cls._manage_inspections_usecase

    @classmethod
    def workspaces(cls) -> WorkspaceRegistry:
        if cls._workspaces is None:
            cls._workspaces = WorkspaceRegistry()
        return cls._workspaces

    @classmethod
    def rate_limiter(cls) -> FixedWindowRateLimiter:
        if cls._rate_limiter is None:
            cfg = cls.config()
            cls._rate_limiter = FixedWindowRateLimiter(
                max_requests=cfg.rate_limit_max,
                window_seconds=cfg.rate_limit_window_seconds,
            )
        return cls._rate_limiter

    @classmethod
    def reset(cls) -> None:
        if cls._workspaces is not None:
            cls._workspaces.clear()
        if cls._rate_limiter is not None:
            cls._rate_limiter.reset()
        if cls._database is not None:
            cls._database.dispose()
        cls._config = None
        cls._database = None
        cls._image_repo = None
        cls._surface_factory = None
        cls._compose_usecase = None
        cls._upload_repo = None
        cls._report_repo = None
        cls._generate_report_usecase = None
        cls._manage_reports_usecase = None
        cls._user_repo = None
        cls._auth_usecase = None
        cls._inspection_repo = None
        cls._manage_inspections_usecase = None
        cls._workspaces = None
        cls._rate_limiter = None
