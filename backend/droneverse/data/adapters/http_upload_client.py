from typing import Any, Dict, Optional

import requests

from droneverse.core.utils.logger import get_logger

_logger = get_logger("http_upload")


class HttpUploadClient:
    """Posts blobs to an upload endpoint as multipart form data (file + folderPath)."""

    def __init__(self, endpoint: str, timeout: float = 60.0, session: Optional[requests.Session] = None) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    def upload(self, data: bytes, folder: str, filename: Optional[str] = None) -> Dict[str, Any]:
        if not self.endpoint:
            raise RuntimeError("UPLOAD_ENDPOINT is not configured")
        files = {"file": (filename or "image.jpg", data, "image/jpeg")}
        resp = self._session.post(self.endpoint, files=files, data={"folderPath": folder}, timeout=self.timeout)
        if resp.status_code >= 400:
            raise RuntimeError(f"Upload endpoint error {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError:
            raise RuntimeError(f"Non-JSON response from upload endpoint: {resp.text[:200]}")
