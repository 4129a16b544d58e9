from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from droneverse.core.utils.image_urls import optimized_image_url
from droneverse.domain.entities.annotation_entity import Annotation, format_color, make_annotation, AnnotationKind
from droneverse.domain.entities.damage_entity import DamageEntry, Report, ReportDamage
from droneverse.domain.entities.filter_entity import FilterSettings
from droneverse.domain.entities.inspection_entity import (
    Inspection,
    InspectionBlade,
    InspectionImage,
    InspectionSide,
    InspectionTurbine,
    Location,
)


class AnnotationModel(BaseModel):
    type: AnnotationKind = Field(..., description="'square' (two opposite corners) or 'polygon'")
    points: List[List[float]] = Field(..., description="[[x, y], ...] as 0-100 percentages")
    color: str = "rgba(255, 0, 0, 0.0)"
    crack_level: Optional[int] = Field(None, ge=1, le=5)

    @classmethod
    def from_entity(cls, a: Annotation) -> "AnnotationModel":
        return cls(
            type=a.kind,
            points=[[x, y] for (x, y) in a.points],
            color=format_color(a.color),
            crack_level=a.severity,
        )

    def to_entity(self) -> Annotation:
        return make_annotation(self.type, self.points, color=self.color, severity=self.crack_level)


class FilterModel(BaseModel):
    brightness: float = Field(100.0, ge=0)
    contrast: float = Field(100.0, ge=0)
    saturate: float = Field(100.0, ge=0)
    blur: float = Field(0.0, ge=0)
    grayscale: float = Field(0.0, ge=0, le=100)
    hue_rotate: float = 0.0

    @classmethod
    def from_entity(cls, f: FilterSettings) -> "FilterModel":
        return cls(
            brightness=f.brightness,
            contrast=f.contrast,
            saturate=f.saturate,
            blur=f.blur,
            grayscale=f.grayscale,
            hue_rotate=f.hue_rotate,
        )

    def to_entity(self) -> FilterSettings:
        return FilterSettings(
            brightness=self.brightness,
            contrast=self.contrast,
            saturate=self.saturate,
            blur=self.blur,
            grayscale=self.grayscale,
            hue_rotate=self.hue_rotate,
        )


class DamageEntryResponse(BaseModel):
    image_url: str
    image_public_id: str
    thumbnail_url: str
    turbine: str
    blade: str
    side: str
    annotations: List[AnnotationModel]

    @classmethod
    def from_entity(cls, e: DamageEntry, cloud_name: Optional[str] = None) -> "DamageEntryResponse":
        return cls(
            image_url=e.image_url,
            image_public_id=e.image_public_id,
            thumbnail_url=optimized_image_url(e.image_url, e.image_public_id, cloud_name=cloud_name),
            turbine=e.turbine,
            blade=e.blade,
            side=e.side,
            annotations=[AnnotationModel.from_entity(a) for a in e.annotations],
        )


class ReportDamageModel(BaseModel):
    turbine: str = "Unknown"
    blade: str = "Unknown"
    side: str = "Unknown"
    image_url: str
    image_public_id: str
    annotations: List[AnnotationModel] = []
    filters: FilterModel = FilterModel()
    fallback: bool = False
    error: Optional[str] = None

    @classmethod
    def from_entity(cls, d: ReportDamage) -> "ReportDamageModel":
        return cls(
            turbine=d.turbine,
            blade=d.blade,
            side=d.side,
            image_url=d.image_url,
            image_public_id=d.image_public_id,
            annotations=[AnnotationModel.from_entity(a) for a in d.annotations],
            filters=FilterModel.from_entity(d.filters),
            fallback=d.fallback,
            error=d.error,
        )

    def to_entity(self) -> ReportDamage:
        return ReportDamage(
            turbine=self.turbine,
            blade=self.blade,
            side=self.side,
            image_url=self.image_url,
            image_public_id=self.image_public_id,
            annotations=tuple(a.to_entity() for a in self.annotations),
            filters=self.filters.to_entity(),
            fallback=self.fallback,
            error=self.error,
        )


class ReportResponse(BaseModel):
    id: str
    client_name: str
    created_at: datetime
    damages: List[ReportDamageModel]

    @classmethod
    def from_entity(cls, r: Report) -> "ReportResponse":
        return cls(
            id=r.id or "",
            client_name=r.client_name,
            created_at=r.created_at,
            damages=[ReportDamageModel.from_entity(d) for d in r.damages],
        )


# turbine -> blade -> side -> damages
ReportTree = Dict[str, Dict[str, Dict[str, List[ReportDamageModel]]]]


class LocationModel(BaseModel):
    city: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    postcode: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class InspectionImageModel(BaseModel):
    url: str
    public_id: str


class InspectionSideModel(BaseModel):
    name: str
    images: List[InspectionImageModel] = []


class InspectionBladeModel(BaseModel):
    name: str
    sides: List[InspectionSideModel] = []


class InspectionTurbineModel(BaseModel):
    name: str
    blades: List[InspectionBladeModel] = []


class InspectionRequest(BaseModel):
    client_name: str = Field(..., min_length=1)
    employee_name: str = Field(..., min_length=1)
    location: LocationModel
    turbines: List[InspectionTurbineModel] = []

    def to_entity(self) -> Inspection:
        return Inspection(
            client_name=self.client_name,
            employee_name=self.employee_name,
            location=Location(**self.location.model_dump()),
            turbines=tuple(
                InspectionTurbine(name=t.name, blades=tuple(
                    InspectionBlade(name=b.name, sides=tuple(
                        InspectionSide(name=s.name, images=tuple(
                            InspectionImage(url=i.url, public_id=i.public_id) for i in s.images
                        ))
                        for s in b.sides
                    ))
                    for b in t.blades
                ))
                for t in self.turbines
            ),
        )


class InspectionResponse(InspectionRequest):
    id: str
    created_at: datetime

    @classmethod
    def from_entity(cls, i: Inspection) -> "InspectionResponse":
        loc = i.location
        return cls(
            id=i.id or "",
            created_at=i.created_at,
            client_name=i.client_name,
            employee_name=i.employee_name,
            location=LocationModel(city=loc.city, address=loc.address, postcode=loc.postcode,
                                   latitude=loc.latitude, longitude=loc.longitude),
            turbines=[
                InspectionTurbineModel(name=t.name, blades=[
                    InspectionBladeModel(name=b.name, sides=[
                        InspectionSideModel(name=s.name, images=[
                            InspectionImageModel(url=img.url, public_id=img.public_id) for img in s.images
                        ])
                        for s in b.sides
                    ])
                    for b in t.blades
                ])
                for t in i.turbines
            ],
        )
