import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from droneverse.domain.exceptions import InspectionError


class InvalidFilterError(InspectionError, ValueError):
    pass


@dataclass(frozen=True)
class FilterSettings:
    """CSS-style filter channels applied to one source image.

    - brightness, contrast, saturate, grayscale: percentages
    - blur: gaussian standard deviation in pixels
    - hue_rotate: degrees
    """
    brightness: float = 100.0
    contrast: float = 100.0
    saturate: float = 100.0
    blur: float = 0.0
    grayscale: float = 0.0
    hue_rotate: float = 0.0

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if not math.isfinite(float(value)):
                raise InvalidFilterError(f"{name} must be a finite number")
            if name != "hue_rotate" and value < 0:
                raise InvalidFilterError(f"{name} cannot be negative")
            object.__setattr__(self, name, float(value))

    def is_identity(self) -> bool:
        return self == DEFAULT_FILTERS

    def to_css(self) -> str:
        """CSS filter string used by the live preview."""
        return (
            f"brightness({self.brightness:g}%) contrast({self.contrast:g}%) saturate({self.saturate:g}%) "
            f"blur({self.blur:g}px) grayscale({self.grayscale:g}%) hue-rotate({self.hue_rotate:g}deg)"
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "brightness": self.brightness,
            "contrast": self.contrast,
            "saturate": self.saturate,
            "blur": self.blur,
            "grayscale": self.grayscale,
            "hueRotate": self.hue_rotate,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FilterSettings":
        if not data:
            return DEFAULT_FILTERS
        return cls(
            brightness=data.get("brightness", 100.0),
            contrast=data.get("contrast", 100.0),
            saturate=data.get("saturate", 100.0),
            blur=data.get("blur", 0.0),
            grayscale=data.get("grayscale", 0.0),
            hue_rotate=data.get("hueRotate", data.get("hue_rotate", 0.0)),
        )


DEFAULT_FILTERS = FilterSettings()
