"""Shared fixtures: isolated config directories, synthetic images and in-memory fakes."""

from io import BytesIO
from typing import Dict, List, Optional

import pytest
from PIL import Image

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.data.db.database import Database
from droneverse.domain.entities.damage_entity import Report
from droneverse.domain.exceptions import ImageLoadError
from droneverse.domain.repositories.image_repository import ImageRepository
from droneverse.domain.repositories.raster_surface import RasterSurface
from droneverse.domain.repositories.report_repository import ReportRepository


def make_image_bytes(width: int, height: int, color=(0, 0, 0), fmt: str = "PNG") -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


class FakeImageRepository(ImageRepository):
    """Serves images from a dict; unknown URLs fail like an unreachable host."""

    def __init__(self, images: Dict[str, bytes]) -> None:
        self.images = images
        self.requested: List[str] = []

    def load(self, image_url: str) -> bytes:
        self.requested.append(image_url)
        if image_url not in self.images:
            raise ImageLoadError(f"Failed to fetch image: {image_url}")
        return self.images[image_url]


class RecordingSurface(RasterSurface):
    """Surface that records draw calls instead of rasterizing."""

    def __init__(self, width: int, height: int) -> None:
        self._width = width
        self._height = height
        self.calls: List[tuple] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def apply_filters(self, filters, blur_px):
        self.calls.append(("filters", filters, blur_px))

    def draw_rectangle(self, top_left, bottom_right, fill, stroke, stroke_width):
        self.calls.append(("rectangle", top_left, bottom_right, fill, stroke, stroke_width))

    def draw_polygon(self, points, fill, stroke, stroke_width):
        self.calls.append(("polygon", list(points), fill, stroke, stroke_width))

    def draw_badge(self, top_left, size, text, fill, border, border_width, text_color):
        self.calls.append(("badge", top_left, size, text))

    def encode_jpeg(self, quality):
        self.calls.append(("encode", quality))
        return b"jpeg"


class InMemoryReportRepository(ReportRepository):
    def __init__(self) -> None:
        self.reports: Dict[str, Report] = {}

    def create(self, report: Report) -> Report:
        report.id = f"r{len(self.reports) + 1}"
        self.reports[report.id] = report
        return report

    def list(self, owner_id: Optional[str] = None) -> List[Report]:
        return [r for r in self.reports.values() if owner_id is None or r.owner_id == owner_id]

    def get(self, report_id: str) -> Optional[Report]:
        return self.reports.get(report_id)

    def delete(self, report_id: str) -> bool:
        return self.reports.pop(report_id, None) is not None


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    """Point every storage location at tmp_path and rebuild services from scratch."""
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("UPLOAD_BACKEND", "local")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("UPLOAD_BASE_URL", "http://testserver/media")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'droneverse.db'}")
    monkeypatch.setenv("SESSION_SECRET", "test-secret")
    monkeypatch.setenv("RATE_LIMIT_MAX", "1000")
    monkeypatch.setenv("UPLOAD_ROOT_FOLDER", "DroneVerse")
    monkeypatch.setenv("SESSION_COOKIE_NAME", "token")
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "")
    monkeypatch.setenv("TRUST_PROXY_HEADERS", "false")
    ServiceLocator.reset()
    yield tmp_path
    ServiceLocator.reset()


@pytest.fixture
def database():
    """Fresh in-memory database with every table created."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


def login(client, email: str = "inspector@droneverse.io", password: str = "blade-runner-42", name: str = "Inspector"):
    """Register (if needed) and log in; the client keeps the session cookie."""
    client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["user"]
