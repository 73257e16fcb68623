"""Pydantic models for tracked packages and the public tracking response."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator


class HistoryEntry(BaseModel):
    """One location-tagged event in a package's history."""

    model_config = ConfigDict(extra="allow")

    status: Optional[Any] = None
    location: Optional[Any] = None
    timestamp: Optional[Any] = None


class PackageRecord(BaseModel):
    """A package as stored by the tracking store."""

    tracking_number: str = Field(min_length=1)
    sender: Optional[Any] = None
    receiver: Optional[Any] = None
    shipment_info: Optional[Any] = None
    status: Optional[str] = None
    location: Optional[Any] = None
    history: List[HistoryEntry] = Field(default_factory=list)

    @field_validator("history", mode="before")
    @classmethod
    def _decode_history(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, (str, bytes)):
            return orjson.loads(value) if value else []
        return value

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PackageRecord":
        """Build a record from a snake_case store row or camelCase payload."""
        if not isinstance(row, Mapping):
            raise ValueError(f"Package row must be an object, got {type(row).__name__}")
        return cls(
            tracking_number=row.get("trackingnumber") or row.get("trackingNumber") or row.get("tracking_number") or "",
            sender=row.get("sender"),
            receiver=row.get("receiver"),
            shipment_info=row.get("shipmentinfo", row.get("shipmentInfo")),
            status=row.get("status"),
            location=row.get("location"),
            history=row.get("history"),
        )


class TrackingResponse(BaseModel):
    """Public tracking payload with coordinates for map display."""

    tracking_number: str
    sender: Optional[Any] = None
    receiver: Optional[Any] = None
    shipment_info: Optional[Any] = None
    status: Optional[str] = None
    location: Optional[Any] = None
    coordinates: Optional[Dict[str, float]] = None
    history: List[Dict[str, Any]] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "trackingNumber": self.tracking_number,
            "sender": self.sender or None,
            "receiver": self.receiver or None,
            "shipmentInfo": self.shipment_info or None,
            "status": self.status or None,
            "location": self.location or None,
            "coordinates": self.coordinates,
            "history": self.history,
        }
