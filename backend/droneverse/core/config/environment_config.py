import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


# .env values override empty defaults coming from the container environment.
try:
    load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env"), override=True)
except Exception:
    load_dotenv(override=True)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass
class EnvironmentConfig:
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    # Upload backend: 'local' writes into UPLOAD_DIR, 'http' posts to UPLOAD_ENDPOINT
    upload_backend: str = field(default_factory=lambda: os.getenv("UPLOAD_BACKEND", "local"))
    upload_dir: str = field(default_factory=lambda: os.getenv("UPLOAD_DIR", "uploads"))
    # Public base URL under which UPLOAD_DIR is served (local backend)
    upload_base_url: str = field(default_factory=lambda: os.getenv("UPLOAD_BASE_URL", "http://localhost:8000/media"))
    upload_endpoint: str = field(default_factory=lambda: os.getenv("UPLOAD_ENDPOINT", ""))
    upload_root_folder: str = field(default_factory=lambda: os.getenv("UPLOAD_ROOT_FOLDER", "DroneVerse"))
    upload_timeout: float = field(default_factory=lambda: float(os.getenv("UPLOAD_TIMEOUT", "60")))
    # Cloudinary cloud name, only used to build optimized thumbnail URLs
    cloudinary_cloud_name: str = field(default_factory=lambda: os.getenv("CLOUDINARY_CLOUD_NAME", ""))
    # SQLAlchemy URL for users, inspections and reports
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///droneverse.db"))
    image_fetch_timeout: float = field(default_factory=lambda: float(os.getenv("IMAGE_FETCH_TIMEOUT", "30")))
    # Allow reading source images from local paths (development only)
    allow_local_images: bool = field(default_factory=lambda: _env_bool("ALLOW_LOCAL_IMAGES", "false"))
    jpeg_quality: int = field(default_factory=lambda: int(os.getenv("JPEG_QUALITY", "90")))
    # Session cookie
    session_secret: str = field(default_factory=lambda: os.getenv("SESSION_SECRET", ""))
    session_cookie_name: str = field(default_factory=lambda: os.getenv("SESSION_COOKIE_NAME", "token"))
    session_max_age: int = field(default_factory=lambda: int(os.getenv("SESSION_MAX_AGE", str(7 * 24 * 60 * 60))))
    # Fixed-window rate limiting per client IP
    rate_limit_max: int = field(default_factory=lambda: int(os.getenv("RATE_LIMIT_MAX", "100")))
    rate_limit_window_seconds: float = field(default_factory=lambda: float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60")))
    # Key the limiter on x-forwarded-for only when running behind a trusted proxy
    trust_proxy_headers: bool = field(default_factory=lambda: _env_bool("TRUST_PROXY_HEADERS", "false"))
