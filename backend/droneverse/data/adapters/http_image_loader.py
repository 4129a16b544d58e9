import base64
import binascii
import os

import requests

from droneverse.core.utils.logger import get_logger
from droneverse.domain.exceptions import ImageLoadError

_logger = get_logger("image_loader")


class HttpImageLoader:
    """Loads source image bytes from an http(s) URL, a data URL or, if allowed, a local path."""

    def __init__(self, timeout: float = 30.0, allow_local: bool = False, session: requests.Session | None = None):
        self.timeout = timeout
        self.allow_local = allow_local
        self._session = session or requests.Session()

    def _sanitize_url(self, url: str) -> str:
        return url.strip().strip('`"')

    def load(self, image_source: str) -> bytes:
        source = self._sanitize_url(image_source or "")
        if not source:
            raise ImageLoadError("Image URL cannot be empty")
        if source.startswith("http://") or source.startswith("https://"):
            return self._load_http(source)
        if source.startswith("data:image"):
            return self._load_data_url(source)
        if self.allow_local:
            return self._load_path(source)
        raise ImageLoadError(f"Unsupported image source: {source[:50]}")

    def _load_http(self, url: str) -> bytes:
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            _logger.error("Failed to fetch image %s: %s", url[:80], e)
            raise ImageLoadError(f"Failed to fetch image: {e}") from e
        if resp.status_code >= 400:
            raise ImageLoadError(f"Image fetch returned HTTP {resp.status_code} for {url[:80]}")
        if not resp.content:
            raise ImageLoadError(f"Empty image body for {url[:80]}")
        return resp.content

    def _load_data_url(self, data_url: str) -> bytes:
        # data:image/png;base64,iVBORw0KGgo...
        try:
            header, encoded = data_url.split(",", 1)
        except ValueError:
            raise ImageLoadError("Malformed data URL")
        if ";base64" not in header:
            raise ImageLoadError("Only base64 data URLs are supported")
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(f"Invalid base64 image data: {e}") from e

    def _load_path(self, path: str) -> bytes:
        if not os.path.isfile(path):
            raise ImageLoadError(f"File not found: {path}")
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as e:
            raise ImageLoadError(f"Failed to read image file: {e}") from e
