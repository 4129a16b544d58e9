from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from droneverse.domain.entities.damage_entity import ImageMetadata
from droneverse.domain.exceptions import InvalidInspectionError


@dataclass(frozen=True)
class Location:
    city: str
    address: str
    postcode: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "address": self.address,
            "postcode": self.postcode,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Location":
        data = data or {}
        return cls(
            city=data.get("city") or "",
            address=data.get("address") or "",
            postcode=data.get("postcode") or "",
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )


@dataclass(frozen=True)
class InspectionImage:
    url: str
    public_id: str


@dataclass(frozen=True)
class InspectionSide:
    name: str
    images: Tuple[InspectionImage, ...] = ()


@dataclass(frozen=True)
class InspectionBlade:
    name: str
    sides: Tuple[InspectionSide, ...] = ()


@dataclass(frozen=True)
class InspectionTurbine:
    name: str
    blades: Tuple[InspectionBlade, ...] = ()


def turbines_to_dicts(turbines: Tuple[InspectionTurbine, ...]) -> List[Dict[str, Any]]:
    return [
        {
            "name": t.name,
            "blades": [
                {
                    "name": b.name,
                    "sides": [
                        {"name": s.name, "images": [{"url": i.url, "publicId": i.public_id} for i in s.images]}
                        for s in b.sides
                    ],
                }
                for b in t.blades
            ],
        }
        for t in turbines
    ]


def turbines_from_dicts(data: Optional[List[Dict[str, Any]]]) -> Tuple[InspectionTurbine, ...]:
    return tuple(
        InspectionTurbine(
            name=t.get("name") or "",
            blades=tuple(
                InspectionBlade(
                    name=b.get("name") or "",
                    sides=tuple(
                        InspectionSide(
                            name=s.get("name") or "",
                            images=tuple(
                                InspectionImage(url=i["url"], public_id=i["publicId"])
                                for i in s.get("images") or []
                            ),
                        )
                        for s in b.get("sides") or []
                    ),
                )
                for b in t.get("blades") or []
            ),
        )
        for t in data or []
    )


@dataclass
class Inspection:
    """A field inspection: who, where, and the photos taken per turbine, blade and side."""
    client_name: str
    employee_name: str
    location: Location
    turbines: Tuple[InspectionTurbine, ...] = ()
    owner_id: Optional[str] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def validate(self) -> None:
        missing = [
            name for name, value in (
                ("clientName", self.client_name),
                ("employeeName", self.employee_name),
                ("location.city", self.location.city),
                ("location.address", self.location.address),
                ("location.postcode", self.location.postcode),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise InvalidInspectionError(f"Missing required fields: {', '.join(missing)}")

    def images(self):
        """Yields (turbine, blade, side, image) for every photo in the inspection."""
        for turbine in self.turbines:
            for blade in turbine.blades:
                for side in blade.sides:
                    for image in side.images:
                        yield turbine.name, blade.name, side.name, image

    def locate_image(self, public_id: str) -> Optional[ImageMetadata]:
        for turbine, blade, side, image in self.images():
            if image.public_id == public_id:
                return ImageMetadata(image_url=image.url, turbine=turbine, blade=blade, side=side)
        return None
