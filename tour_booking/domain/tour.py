"""
Tour and destination domain models.

Parsed from the camelCase JSON exchanged with the tour services.
Every attribute is optional on the wire; missing values stay None.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Accommodation:
    """Lodging attached to a destination."""

    name: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    details: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Accommodation"]:
        if not data:
            return None
        return cls(
            name=data.get("name"),
            type=data.get("type"),
            location=data.get("location"),
            details=data.get("details"),
            check_in=data.get("checkIn"),
            check_out=data.get("checkOut"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "details": self.details,
            "checkIn": self.check_in,
            "checkOut": self.check_out,
        }


@dataclass
class Destination:
    """
    Destination record.

    Returned by the destination-lookup service for a booked state and
    embedded in tours. Keys the model does not know about are kept in
    ``extra_fields`` so enrichment never drops data.
    """

    dest_name: Optional[str] = None
    state: Optional[str] = None
    description: Optional[str] = None
    accommodation: Optional[Accommodation] = None
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = {"destName", "state", "description", "accommodation"}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Destination":
        data = data or {}
        return cls(
            dest_name=data.get("destName"),
            state=data.get("state"),
            description=data.get("description"),
            accommodation=Accommodation.from_dict(data.get("accommodation")),
            extra_fields={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra_fields)
        payload.update(
            {
                "destName": self.dest_name,
                "state": self.state,
                "description": self.description,
            }
        )
        if self.accommodation is not None:
            payload["accommodation"] = self.accommodation.to_dict()
        return payload


@dataclass
class Tour:
    """
    Tour listing as displayed by the tour card.

    Attributes:
        tour_id: Server identifier (``tourId``)
        title: Display title
        description: Free-text description
        image_link: URL of the cover image (``imageLink``)
        duration: Human-readable duration, e.g. "5 days"
        start_date: ISO date string (``startDate``)
        price: Price as returned by the server
        destinations: Ordered destinations visited by the tour
    """

    tour_id: Optional[Any] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image_link: Optional[str] = None
    duration: Optional[Any] = None
    start_date: Optional[str] = None
    price: Optional[Any] = None
    destinations: List[Destination] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Tour":
        data = data or {}
        return cls(
            tour_id=data.get("tourId"),
            title=data.get("title"),
            description=data.get("description"),
            image_link=data.get("imageLink"),
            duration=data.get("duration"),
            start_date=data.get("startDate"),
            price=data.get("price"),
            destinations=[Destination.from_dict(d) for d in data.get("destinations") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the request body accepted by the tour endpoints."""
        payload: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "imageLink": self.image_link,
            "duration": self.duration,
            "startDate": self.start_date,
            "price": self.price,
            "destinations": [d.to_dict() for d in self.destinations],
        }
        if self.tour_id is not None:
            payload["tourId"] = self.tour_id
        return payload
