from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional, Union


Number = Union[int, float]

SOURCE_PROPERTYFINDER = "propertyfinder"
SOURCE_BAYUT = "bayut"


@dataclass
class Location:
    full_name: Optional[str] = None
    emirate: Optional[str] = None
    main_area: Optional[str] = None
    sub_area: Optional[str] = None
    sub_sub_area: Optional[str] = None


@dataclass
class Coordinates:
    lat: float
    lon: float
    map_link: str


@dataclass
class Regulatory:
    permit_number: Optional[str] = None
    permit_url: Optional[str] = None


@dataclass
class PropertyDetails:
    zone_name: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    image_url: Optional[str] = None
    image_encoded: Optional[str] = None
    price: Optional[Number] = None
    size: Optional[Number] = None
    plot_area: Optional[Number] = None


@dataclass
class ListingFields:
    """Everything a portal parser pulled out of one listing payload."""

    location: Location = field(default_factory=Location)
    coordinates: Optional[Coordinates] = None
    regulatory: Regulatory = field(default_factory=Regulatory)
    property: PropertyDetails = field(default_factory=PropertyDetails)
    company: str = ""
    building_name: Optional[str] = None
    unit_number: Optional[str] = None


@dataclass
class ListingResult:
    success: bool
    source: Optional[str]
    url: str
    error: Optional[str] = None
    location: Optional[Location] = None
    coordinates: Optional[Coordinates] = None
    regulatory: Optional[Regulatory] = None
    property: Optional[PropertyDetails] = None
    company: Optional[str] = None
    building_name: Optional[str] = None
    unit_number: Optional[str] = None

    @classmethod
    def failure(cls, source: Optional[str], url: str, error: str) -> "ListingResult":
        return cls(success=False, source=source, url=url, error=error)

    @classmethod
    def from_fields(cls, source: str, url: str, fields: ListingFields) -> "ListingResult":
        return cls(
            success=True,
            source=source,
            url=url,
            location=fields.location,
            coordinates=fields.coordinates,
            regulatory=fields.regulatory,
            property=fields.property,
            company=fields.company or "",
            building_name=fields.building_name,
            unit_number=fields.unit_number,
        )

    def to_dict(self) -> dict:
        if not self.success:
            return {
                "success": False,
                "source": self.source,
                "url": self.url,
                "error": self.error,
            }
        return {
            "success": True,
            "source": self.source,
            "url": self.url,
            "location": asdict(self.location or Location()),
            "coordinates": asdict(self.coordinates) if self.coordinates else None,
            "regulatory": asdict(self.regulatory or Regulatory()),
            "property": asdict(self.property or PropertyDetails()),
            "company": self.company or "",
            "building_name": self.building_name,
            "unit_number": self.unit_number,
        }
