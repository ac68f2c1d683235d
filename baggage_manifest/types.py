from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

__all__: list[str] = ["BaggageRecord", "ParseResult"]

# Python attribute -> wire key expected by the reconciliation store.
_WIRE_KEYS: Dict[str, str] = {
    "bag_id": "bagId",
    "passenger_name": "passengerName",
    "pnr": "pnr",
    "seat_number": "seatNumber",
    "flight_class": "class",
    "psn": "psn",
    "weight": "weight",
    "route": "route",
    "categories": "categories",
    "loaded": "loaded",
    "received": "received",
}


@dataclass
class BaggageRecord:
    """
    One bag recovered from a manifest.

    Attributes:
        bag_id: Identifier printed on the bag tag
        passenger_name: Passenger surname or full name (at least 2 characters)
        pnr: Booking locator, when the format carries one
        seat_number: Seat assigned to the passenger
        flight_class: Cabin / priority class token as printed (``class`` on the wire)
        psn: Passenger sequence number
        weight: Bag weight in kilograms
        route: ``ORIGIN-DESTINATION`` airport pair
        categories: Special handling categories
        loaded: True/False when the report states it, None when unknown
        received: True/False when the report states it, None when unknown
    """

    bag_id: str
    passenger_name: str
    pnr: Optional[str] = None
    seat_number: Optional[str] = None
    flight_class: Optional[str] = None
    psn: Optional[str] = None
    weight: Optional[float] = None
    route: Optional[str] = None
    categories: Optional[str] = None
    loaded: Optional[bool] = None
    received: Optional[bool] = None

    def dict(self) -> dict[str, Any]:
        """Return the camelCase wire representation, omitting absent fields."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                data[_WIRE_KEYS[f.name]] = value
        return data


@dataclass
class ParseResult:
    """
    Outcome of parsing one uploaded manifest.

    Attributes:
        items: Records in first-encounter order, unique by ``bag_id``
        total_count: Number of records, always ``len(items)``
    """

    items: List[BaggageRecord] = field(default_factory=list)
    total_count: int = 0

    @classmethod
    def empty(cls) -> "ParseResult":
        return cls(items=[], total_count=0)

    def dict(self) -> dict[str, Any]:
        return {
            "items": [item.dict() for item in self.items],
            "totalCount": self.total_count,
        }
