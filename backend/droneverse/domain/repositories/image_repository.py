from abc import ABC, abstractmethod


class ImageRepository(ABC):
    """Contract for fetching the raw bytes of a source image."""

    @abstractmethod
    def load(self, image_url: str) -> bytes:
        """Fetch the image at full resolution.

        - image_url: http(s) URL, data URL (data:image/...;base64,...) or, when enabled, a local path.

        Raises ImageLoadError when the image cannot be fetched.
        """
        raise NotImplementedError
