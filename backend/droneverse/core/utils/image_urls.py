from typing import Optional


def optimized_image_url(url: str, public_id: Optional[str], width: int = 200, height: int = 200,
                        cloud_name: Optional[str] = None) -> str:
    """Cloudinary thumbnail URL (fill crop, automatic format and quality).

    Falls back to the original URL when there is no cloud name or public id.
    """
    if not cloud_name or not public_id:
        return url
    return f"https://res.cloudinary.com/{cloud_name}/image/upload/c_fill,w_{width},h_{height},f_auto,q_auto/{public_id}"
