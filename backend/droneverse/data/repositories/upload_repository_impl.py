from typing import Optional, Protocol, Any, Dict

from droneverse.core.utils.logger import get_logger
from droneverse.domain.entities.upload_entity import UploadResult
from droneverse.domain.exceptions import InvalidUploadPathError, UploadError
from droneverse.domain.repositories.upload_repository import UploadRepository

_logger = get_logger("upload_repo")


class UploadClient(Protocol):
    def upload(self, data: bytes, folder: str, filename: Optional[str] = None) -> Dict[str, Any]:
        ...


class UploadRepositoryImpl(UploadRepository):
    """Prefixes every folder with the storage root and maps client responses to UploadResult."""

    def __init__(self, client: UploadClient, root_folder: str = "DroneVerse") -> None:
        self._client = client
        self._root = root_folder.strip("/")

    def full_folder(self, folder: str) -> str:
        folder = (folder or "").replace("\\", "/").strip("/")
        if any(part in ("..", ".") for part in folder.split("/")):
            raise InvalidUploadPathError(f"Invalid folder path: {folder}")
        if not self._root:
            return folder
        return f"{self._root}/{folder}" if folder else self._root

    def upload(self, data: bytes, folder: str, filename: Optional[str] = None) -> UploadResult:
        if not data:
            raise UploadError("No file provided")
        target = self.full_folder(folder)
        try:
            raw = self._client.upload(data, target, filename=filename)
        except UploadError:
            raise
        except Exception as e:
            _logger.error("Upload to %s failed: %s", target, e)
            raise UploadError(f"Upload failed: {e}") from e
        secure_url = raw.get("secure_url") if isinstance(raw, dict) else None
        public_id = raw.get("public_id") if isinstance(raw, dict) else None
        if not secure_url or not public_id:
            raise UploadError("Upload failed: response without secure_url/public_id")
        return UploadResult(secure_url=str(secure_url), public_id=str(public_id))
