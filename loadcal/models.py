"""
Domain objects for the load calendar.

Entity (person | group), GroupMembership, CapacityOverride, Load,
LoadAssignment, and the computed views (HeatmapDay, HeatmapData, DayDetails,
OverloadAlert).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from loadcal.dates import format_date

DEFAULT_PERSON_CAPACITY = 5.0
DEFAULT_WEIGHT = 1.0


class EntityType(StrEnum):
    PERSON = "person"
    GROUP = "group"


@dataclass
class Entity:
    """A person (id is an email) or a group (id is a slug)."""

    id: str
    title: str
    type: EntityType
    default_capacity: float = DEFAULT_PERSON_CAPACITY
    employee_id: str | None = None
    created_at: datetime | None = None

    @property
    def is_group(self) -> bool:
        return self.type == EntityType.GROUP

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": str(self.type),
            "employee_id": self.employee_id,
            "default_capacity": self.default_capacity,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class GroupMembership:
    group_id: str
    person_email: str


@dataclass(frozen=True)
class CapacityOverride:
    entity_id: str
    date: date
    capacity: float

    def to_dict(self) -> dict[str, Any]:
        return {"entity_id": self.entity_id, "date": format_date(self.date), "capacity": self.capacity}


@dataclass
class Load:
    """A single-day unit of work, optionally keyed by an upstream external id."""

    title: str
    date: date
    id: int | None = None
    external_id: str | None = None
    source: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "external_id": self.external_id,
            "title": self.title,
            "source": self.source,
            "url": self.url,
            "date": format_date(self.date),
        }


@dataclass(frozen=True)
class LoadAssignment:
    person_email: str
    weight: float = DEFAULT_WEIGHT
    load_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"load_id": self.load_id, "person_email": self.person_email, "weight": self.weight}


@dataclass
class LoadWithAssignments:
    load: Load
    assignments: list[LoadAssignment] = field(default_factory=list)

    @property
    def total_weight(self) -> float:
        return sum(a.weight for a in self.assignments)

    def to_dict(self) -> dict[str, Any]:
        return {
            "load": self.load.to_dict(),
            "assignments": [a.to_dict() for a in self.assignments],
        }


@dataclass(frozen=True)
class HeatmapDay:
    date: date
    load: float
    capacity: float
    color: str
    color_hex: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": format_date(self.date),
            "load": self.load,
            "capacity": self.capacity,
            "color": self.color,
            "color_hex": self.color_hex,
        }


@dataclass
class HeatmapData:
    entity: Entity
    start: date
    end: date
    days: list[HeatmapDay] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": self.entity.to_dict(),
            "start": format_date(self.start),
            "end": format_date(self.end),
            "days": [d.to_dict() for d in self.days],
        }


@dataclass
class DayDetails:
    """Drill-down for one heatmap cell."""

    entity: Entity
    date: date
    loads: list[LoadWithAssignments]
    total_load: float
    capacity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity.id,
            "date": format_date(self.date),
            "loads": [lw.to_dict() for lw in self.loads],
            "total_load": self.total_load,
            "capacity": self.capacity,
        }


@dataclass(frozen=True)
class OverloadAlert:
    """Webhook payload for a person overloaded on a future day."""

    person: str
    date: date
    load: float
    capacity: float

    @property
    def message(self) -> str:
        return (
            f"{self.person} is overloaded on {format_date(self.date)} "
            f"(load: {self.load:.1f}, capacity: {self.capacity:.1f})"
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "person": self.person,
            "date": format_date(self.date),
            "load": self.load,
            "capacity": self.capacity,
            "message": self.message,
        }
