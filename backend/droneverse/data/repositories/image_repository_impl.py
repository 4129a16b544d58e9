from droneverse.data.adapters.http_image_loader import HttpImageLoader
from droneverse.domain.repositories.image_repository import ImageRepository


class ImageRepositoryImpl(ImageRepository):
    def __init__(self, client: HttpImageLoader) -> None:
        self._client = client

    def load(self, image_url: str) -> bytes:
        return self._client.load(image_url)
