"""
Central data model definitions used across the project.

This module defines the canonical structure of the campus records so that:
- the knowledge store, matcher, classifier and composer share the same field names
- every record is immutable once loaded (frozen dataclasses, tuples instead of lists)
- responses carry their payload as a tagged union the UI can switch on
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Optional, Tuple, Union


CATEGORIES = ("schedule", "facilities", "dining", "library", "administrative", "calendar", "faq", "general")
INTENTS = ("help", "location", "schedule", "list", "information")
RESPONSE_TYPES = ("text", "structured", "faq")

FACILITY_TYPES = ("academic", "recreational", "administrative", "residential", "dining")
DINING_TYPES = ("cafeteria", "restaurant", "cafe", "food_truck")
MENU_CATEGORIES = ("breakfast", "lunch", "dinner", "snacks", "beverages")
EVENT_TYPES = ("deadline", "holiday", "exam", "registration", "event")
FAQ_CATEGORIES = ("academic", "facilities", "dining", "library", "administrative", "general")


@dataclass(frozen=True)
class ClassSchedule:
    """
    One course meeting pattern (e.g. CS101, Mon/Wed/Fri 9:00 AM - 10:30 AM).
    """

    id: str
    course_code: str
    course_name: str
    instructor: str
    time: str
    days: Tuple[str, ...]
    location: str
    semester: str


@dataclass(frozen=True)
class CampusFacility:
    id: str
    name: str
    type: str
    location: str
    hours: str
    description: str
    amenities: Tuple[str, ...]
    contact: Optional[str] = None


@dataclass(frozen=True)
class MenuItem:
    name: str
    price: float
    category: str
    dietary: Tuple[str, ...]


@dataclass(frozen=True)
class DiningOption:
    id: str
    name: str
    type: str
    location: str
    hours: str
    specialties: Tuple[str, ...]
    menu: Tuple[MenuItem, ...]


@dataclass(frozen=True)
class LibraryService:
    id: str
    name: str
    description: str
    location: str
    hours: str
    policies: Tuple[str, ...]
    resources: Tuple[str, ...]


@dataclass(frozen=True)
class AdministrativeService:
    id: str
    name: str
    department: str
    description: str
    location: str
    hours: str
    requirements: Tuple[str, ...]
    contact: str
    forms: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class AcademicCalendarEvent:
    """
    One dated entry of the academic calendar (no time of day).
    """

    id: str
    event: str
    date: date
    description: str
    type: str


@dataclass(frozen=True)
class FAQ:
    """
    A frequently asked question.

    related_questions are plain strings, not ids. They are resolved against
    other FAQs by substring match on the question text.
    """

    id: str
    question: str
    answer: str
    category: str
    keywords: Tuple[str, ...]
    related_questions: Tuple[str, ...]


Record = Union[
    ClassSchedule,
    CampusFacility,
    DiningOption,
    LibraryService,
    AdministrativeService,
    AcademicCalendarEvent,
    FAQ,
]

# kind tag -> record type carried by ResponseData
DATA_KINDS = {
    "schedule": ClassSchedule,
    "facility": CampusFacility,
    "dining": DiningOption,
    "library": LibraryService,
    "administrative": AdministrativeService,
    "calendar": AcademicCalendarEvent,
    "faq": FAQ,
}


@dataclass(frozen=True)
class ResponseData:
    """
    Tagged payload of a Response: `kind` names the record type in `records`.
    """

    kind: str
    records: Tuple[Record, ...]

    def __post_init__(self) -> None:
        expected = DATA_KINDS.get(self.kind)
        if expected is None:
            raise ValueError(f"Unknown data kind: {self.kind!r}")
        for r in self.records:
            if not isinstance(r, expected):
                raise TypeError(f"{type(r).__name__} is not a {self.kind} record")

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class Response:
    """
    What the assistant answers for one query.

    confidence is a fixed heuristic score in [0, 1], not a probability.
    """

    content: str
    type: str
    confidence: float
    data: Optional[ResponseData] = None
    suggestions: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        """
        JSON-ready representation (dates as ISO strings, tuples as lists).
        """
        out: dict[str, Any] = {
            "content": self.content,
            "type": self.type,
            "confidence": self.confidence,
        }
        if self.data is not None:
            out["data_kind"] = self.data.kind
            out["data"] = [record_to_dict(r) for r in self.data.records]
        if self.suggestions is not None:
            out["suggestions"] = list(self.suggestions)
        return out


@dataclass(frozen=True)
class QueryContext:
    query: str
    category: str
    keywords: Tuple[str, ...]
    intent: str


@dataclass(frozen=True)
class CategoryRule:
    """
    One row of the keyword -> category table (first match wins).
    """

    keywords: Tuple[str, ...]
    category: str
    response: str


def _jsonable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def record_to_dict(record: Record) -> dict[str, Any]:
    return _jsonable(asdict(record))
