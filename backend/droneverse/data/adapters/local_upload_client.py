import os
import uuid
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from droneverse.core.utils.logger import get_logger
from droneverse.domain.exceptions import InvalidUploadPathError

_logger = get_logger("local_upload")


class LocalUploadClient:
    """Stores uploads under a local directory and serves them from base_url.

    Mirrors the managed image store's response shape: {secure_url, public_id}, where
    public_id is the folder path plus a generated name, without extension.
    """

    def __init__(self, root_dir: str, base_url: str) -> None:
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")

    def _target_dir(self, folder: str) -> Path:
        root = self.root_dir.resolve()
        target = (root / folder).resolve() if folder else root
        if target != root and root not in target.parents:
            raise InvalidUploadPathError(f"Folder escapes the upload root: {folder}")
        return target

    def upload(self, data: bytes, folder: str, filename: Optional[str] = None) -> Dict[str, Any]:
        basename = os.path.basename((filename or "").replace("\\", "/"))
        stem, ext = os.path.splitext(basename)
        stem = stem.strip(".")
        name = f"{stem or 'image'}_{uuid.uuid4().hex[:12]}"
        ext = ext or ".jpg"
        folder = folder.strip("/")
        target_dir = self._target_dir(folder)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"{name}{ext}"
        with open(path, "wb") as fh:
            fh.write(data)
        public_id = f"{folder}/{name}" if folder else name
        _logger.info("Stored upload %s (%d bytes)", public_id, len(data))
        return {
            "secure_url": f"{self.base_url}/{quote(public_id)}{ext}",
            "public_id": public_id,
            "bytes": len(data),
        }
