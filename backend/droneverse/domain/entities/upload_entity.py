from dataclasses import dataclass


@dataclass(frozen=True)
class UploadResult:
    secure_url: str
    public_id: str
