from abc import ABC, abstractmethod
from typing import Optional

from droneverse.domain.entities.upload_entity import UploadResult


class UploadRepository(ABC):
    @abstractmethod
    def upload(self, data: bytes, folder: str, filename: Optional[str] = None) -> UploadResult:
        """Store a binary blob under a destination folder (e.g. 'Reports/WTG 1/Blade 1').

        Returns the public URL and storage id; raises UploadError on failure.
        """
        raise NotImplementedError
