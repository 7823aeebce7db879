"""
Knowledge store: the static campus dataset the assistant answers from.

The dataset lives as JSON files in:

    campusassist/data/

one file per collection (schedules, facilities, dining, library,
administrative, calendar, faqs). It is loaded once into a frozen
KnowledgeStore and then only read.

Loading is deliberately defensive, like the rest of the data layer:
- a missing or broken file yields an empty collection
- a malformed record is skipped
- a duplicate id keeps the first record
Each of these is logged as a warning instead of crashing the assistant.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, TypeVar, Union

from campusassist.model import (
    DINING_TYPES,
    EVENT_TYPES,
    FACILITY_TYPES,
    FAQ,
    FAQ_CATEGORIES,
    MENU_CATEGORIES,
    AcademicCalendarEvent,
    AdministrativeService,
    CampusFacility,
    ClassSchedule,
    DiningOption,
    LibraryService,
    MenuItem,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Paths & defaults
# ---------------------------------------------------------------------------

PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"

DEFAULT_WINDOW_DAYS = 30

COLLECTION_FILES = {
    "class_schedules": "schedules.json",
    "campus_facilities": "facilities.json",
    "dining_options": "dining.json",
    "library_services": "library.json",
    "administrative_services": "administrative.json",
    "academic_calendar": "calendar.json",
    "faqs": "faqs.json",
}


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KnowledgeStore:
    """
    Read-only collections of campus records.

    Built once at startup and passed into the matcher, classifier and
    composer, so tests can hand in a substituted dataset.
    """

    class_schedules: Tuple[ClassSchedule, ...] = ()
    campus_facilities: Tuple[CampusFacility, ...] = ()
    dining_options: Tuple[DiningOption, ...] = ()
    library_services: Tuple[LibraryService, ...] = ()
    administrative_services: Tuple[AdministrativeService, ...] = ()
    academic_calendar: Tuple[AcademicCalendarEvent, ...] = ()
    faqs: Tuple[FAQ, ...] = ()

    def search_facilities(self, text: str) -> list[CampusFacility]:
        """
        Facilities whose name, description or any amenity contains `text`
        (case-insensitive). Collection order, not ranked.
        """
        q = text.lower()
        return [
            f
            for f in self.campus_facilities
            if q in f.name.lower() or q in f.description.lower() or any(q in a.lower() for a in f.amenities)
        ]

    def search_dining(self, text: str) -> list[DiningOption]:
        """
        Dining options whose name, any specialty or any menu item name contains
        `text` (case-insensitive). Collection order, not ranked.
        """
        q = text.lower()
        return [
            d
            for d in self.dining_options
            if q in d.name.lower()
            or any(q in s.lower() for s in d.specialties)
            or any(q in item.name.lower() for item in d.menu)
        ]

    def get_upcoming_events(
        self, days: int = DEFAULT_WINDOW_DAYS, now: Union[date, datetime, None] = None
    ) -> list[AcademicCalendarEvent]:
        """
        Calendar events dated within [today, today + days], both ends inclusive,
        sorted by date. `now` defaults to the current local time on every call.
        """
        today = _as_date(now)
        if days < 0:
            return []
        # windows past date.max end there instead of overflowing
        until = today + timedelta(days=min(days, (date.max - today).days))
        upcoming = [ev for ev in self.academic_calendar if today <= ev.date <= until]
        # sorted() is stable, so same-day events keep collection order
        return sorted(upcoming, key=lambda ev: ev.date)

    def get_faqs_by_category(self, category: str) -> list[FAQ]:
        return [f for f in self.faqs if f.category == category]

    def find_faq(self, faq_id: str) -> Optional[FAQ]:
        return next((f for f in self.faqs if f.id == faq_id), None)

    def get_related_faqs(self, faq_id: str) -> list[FAQ]:
        """
        Resolve a FAQ's related-question strings to FAQ records.

        Matching is by substring of the other FAQs' question text, so a related
        question may resolve to zero, one or several FAQs. Unknown id -> [].
        """
        faq = self.find_faq(faq_id)
        if faq is None:
            return []
        related = [q.lower() for q in faq.related_questions]
        return [f for f in self.faqs if any(q in f.question.lower() for q in related)]


def _as_date(now: Union[date, datetime, None]) -> date:
    if now is None:
        return datetime.now().date()
    if isinstance(now, datetime):
        return now.date()
    return now


# ---------------------------------------------------------------------------
# Record parsing (dict -> frozen dataclass)
# ---------------------------------------------------------------------------


def _text(raw: dict[str, Any], key: str) -> str:
    value = raw[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value.strip()


def _texts(raw: dict[str, Any], key: str) -> Tuple[str, ...]:
    value = raw.get(key, [])
    if not isinstance(value, list):
        raise TypeError(f"{key} must be a list")
    return tuple(str(x) for x in value)


def _choice(raw: dict[str, Any], key: str, allowed: Tuple[str, ...]) -> str:
    value = _text(raw, key)
    if value not in allowed:
        raise ValueError(f"{key}={value!r} not in {allowed}")
    return value


def _optional_text(raw: dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    return None if value is None else str(value).strip()


def parse_schedule(raw: dict[str, Any]) -> ClassSchedule:
    days = _texts(raw, "days")
    if not days:
        raise ValueError("days must not be empty")
    return ClassSchedule(
        id=_text(raw, "id"),
        course_code=_text(raw, "course_code"),
        course_name=_text(raw, "course_name"),
        instructor=_text(raw, "instructor"),
        time=_text(raw, "time"),
        days=days,
        location=_text(raw, "location"),
        semester=_text(raw, "semester"),
    )


def parse_facility(raw: dict[str, Any]) -> CampusFacility:
    return CampusFacility(
        id=_text(raw, "id"),
        name=_text(raw, "name"),
        type=_choice(raw, "type", FACILITY_TYPES),
        location=_text(raw, "location"),
        hours=_text(raw, "hours"),
        description=_text(raw, "description"),
        amenities=_texts(raw, "amenities"),
        contact=_optional_text(raw, "contact"),
    )


def parse_menu_item(raw: dict[str, Any]) -> MenuItem:
    price = float(raw["price"])
    if price < 0:
        raise ValueError(f"negative price: {price}")
    return MenuItem(
        name=_text(raw, "name"),
        price=price,
        category=_choice(raw, "category", MENU_CATEGORIES),
        dietary=_texts(raw, "dietary"),
    )


def parse_dining(raw: dict[str, Any]) -> DiningOption:
    menu = raw.get("menu", [])
    if not isinstance(menu, list):
        raise TypeError("menu must be a list")
    return DiningOption(
        id=_text(raw, "id"),
        name=_text(raw, "name"),
        type=_choice(raw, "type", DINING_TYPES),
        location=_text(raw, "location"),
        hours=_text(raw, "hours"),
        specialties=_texts(raw, "specialties"),
        menu=tuple(parse_menu_item(m) for m in menu),
    )


def parse_library_service(raw: dict[str, Any]) -> LibraryService:
    return LibraryService(
        id=_text(raw, "id"),
        name=_text(raw, "name"),
        description=_text(raw, "description"),
        location=_text(raw, "location"),
        hours=_text(raw, "hours"),
        policies=_texts(raw, "policies"),
        resources=_texts(raw, "resources"),
    )


def parse_administrative_service(raw: dict[str, Any]) -> AdministrativeService:
    forms = raw.get("forms")
    return AdministrativeService(
        id=_text(raw, "id"),
        name=_text(raw, "name"),
        department=_text(raw, "department"),
        description=_text(raw, "description"),
        location=_text(raw, "location"),
        hours=_text(raw, "hours"),
        requirements=_texts(raw, "requirements"),
        contact=_text(raw, "contact"),
        forms=None if forms is None else _texts(raw, "forms"),
    )


def parse_calendar_event(raw: dict[str, Any]) -> AcademicCalendarEvent:
    return AcademicCalendarEvent(
        id=_text(raw, "id"),
        event=_text(raw, "event"),
        date=datetime.strptime(_text(raw, "date"), "%Y-%m-%d").date(),
        description=_text(raw, "description"),
        type=_choice(raw, "type", EVENT_TYPES),
    )


def parse_faq(raw: dict[str, Any]) -> FAQ:
    return FAQ(
        id=_text(raw, "id"),
        question=_text(raw, "question"),
        answer=_text(raw, "answer"),
        category=_choice(raw, "category", FAQ_CATEGORIES),
        keywords=_texts(raw, "keywords"),
        related_questions=_texts(raw, "related_questions"),
    )


PARSERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "class_schedules": parse_schedule,
    "campus_facilities": parse_facility,
    "dining_options": parse_dining,
    "library_services": parse_library_service,
    "administrative_services": parse_administrative_service,
    "academic_calendar": parse_calendar_event,
    "faqs": parse_faq,
}


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _load_json(path: Path) -> Any:
    """
    Load JSON from a file; [] if it is missing or unreadable.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Data file not found: %s", path)
        return []
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return []


def parse_collection(raw_items: Any, parser: Callable[[dict[str, Any]], T], source: str = "") -> Tuple[T, ...]:
    """
    Parse a list of raw dicts, skipping malformed entries and duplicate ids.
    """
    if not isinstance(raw_items, list):
        logger.warning("%s: expected a list of records, got %s", source, type(raw_items).__name__)
        return ()

    out: list[T] = []
    seen: set[str] = set()
    for i, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            logger.warning("%s[%d]: not an object, skipped", source, i)
            continue
        try:
            record = parser(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("%s[%d]: invalid record skipped (%s)", source, i, exc)
            continue
        record_id = getattr(record, "id")
        if record_id in seen:
            logger.warning("%s[%d]: duplicate id %r skipped", source, i, record_id)
            continue
        seen.add(record_id)
        out.append(record)
    return tuple(out)


def load_knowledge_store(data_dir: str | Path | None = None) -> KnowledgeStore:
    """
    Build a KnowledgeStore from the JSON files in `data_dir`
    (default: the dataset shipped inside the package).
    """
    base = Path(data_dir) if data_dir is not None else DATA_DIR
    collections: dict[str, Tuple[Any, ...]] = {}
    for name, filename in COLLECTION_FILES.items():
        path = base / filename
        collections[name] = parse_collection(_load_json(path), PARSERS[name], source=filename)
        logger.debug("Loaded %d records from %s", len(collections[name]), path)
    return KnowledgeStore(**collections)
