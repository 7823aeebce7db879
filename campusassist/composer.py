"""
Response composition.

process_query() turns one free-text query into a Response:

    query -> categorize_query / analyze_query -> branch per category -> Response

Branch order and confidence values are fixed:

    faq             0.95
    no keywords     0.3  (clarification prompt)
    facilities      0.9 location/hours of top hit, 0.8 matches, 0.6 everything
    dining          0.9 open/hours, 0.8 menu/food/eat, 0.7 otherwise
    schedule        0.9 list/all/my, 0.95 exact course code, 0.8 otherwise
    library         0.9 books or computers, 0.8 otherwise
    administrative  0.9 tuition or scholarships, 0.7 otherwise
    calendar        0.9 exams or deadlines, 0.8 otherwise
    FAQ fallback    0.7
    help menu       0.4

Every path ends in one of these branches, for any string input.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Union

from campusassist.classify import analyze_query, categorize_query
from campusassist.faq import search_faqs
from campusassist.knowledge import DEFAULT_WINDOW_DAYS, KnowledgeStore
from campusassist.model import FAQ, AdministrativeService, QueryContext, Record, Response, ResponseData

logger = logging.getLogger(__name__)

Now = Union[date, datetime, None]

COURSE_CODE_RE = re.compile(r"([A-Z]{2,4}\s?\d{3})", re.IGNORECASE)

CLARIFICATION = (
    "I'd be happy to help! Could you please be more specific about what you're looking for? "
    "I can assist with class schedules, campus facilities, dining options, library services, "
    "and administrative procedures."
)

APOLOGY = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again or ask me something else!"
)

HELP_SUGGESTIONS = (
    "How do I register for classes?",
    "Where is the library?",
    "What dining options are available?",
    "How do I pay tuition?",
)

HELP_MENU = """I'm not sure I understand "{query}" completely, but I'm here to help! I can assist you with:

🎓 **Academic Information**
• Class schedules and course details
• Academic calendar and important dates
• Exam schedules and deadlines

🏢 **Campus Facilities**
• Building locations and hours
• Library services and resources
• Recreation center and gym facilities

🍽️ **Dining & Services**
• Cafeteria menus and hours
• Coffee shops and restaurants
• Campus dining options

💼 **Administrative Services**
• Tuition payments and fees
• Student ID card services
• Scholarships and financial aid

❓ **Common Questions**
• How do I register for classes?
• Where is the library?
• How do I pay tuition?
• What dining options are available?

Try asking me something like "How do I borrow books?" or "Where can I get lunch?\""""


def _contains_any(text: str, needles: Sequence[str]) -> bool:
    return any(n in text for n in needles)


def _structured(content: str, kind: str, records: Sequence[Record], confidence: float) -> Response:
    return Response(
        content=content,
        type="structured",
        confidence=confidence,
        data=ResponseData(kind=kind, records=tuple(records)),
    )


def _faq_response(content: str, matches: Sequence[FAQ], confidence: float) -> Response:
    top = matches[0]
    return Response(
        content=content,
        type="faq",
        confidence=confidence,
        data=ResponseData(kind="faq", records=tuple(matches)),
        suggestions=top.related_questions,
    )


# ---------------------------------------------------------------------------
# Category branches (None = fall through to the FAQ fallback)
# ---------------------------------------------------------------------------


def _answer_faq(query: str, store: KnowledgeStore) -> Optional[Response]:
    matches = search_faqs(query, store.faqs)
    if not matches:
        return None
    top = matches[0]
    return _faq_response(f'Here\'s what I found about "{query}":\n\n**{top.question}**\n\n{top.answer}', matches, 0.95)


def _answer_facilities(query: str, context: QueryContext, store: KnowledgeStore) -> Response:
    facilities = store.search_facilities(query)

    if context.intent == "location" and facilities:
        f = facilities[0]
        return _structured(f"The {f.name} is located at {f.location}. {f.description}", "facility", [f], 0.9)

    if context.intent == "schedule" and facilities:
        f = facilities[0]
        return _structured(f"The {f.name} is open {f.hours}.", "facility", [f], 0.9)

    if facilities:
        return _structured("Here are the campus facilities I found:", "facility", facilities, 0.8)
    return _structured("Here are all available campus facilities:", "facility", store.campus_facilities, 0.6)


def _answer_dining(query: str, store: KnowledgeStore) -> Response:
    q = query.lower()
    dining = store.search_dining(query) or list(store.dining_options)

    if _contains_any(q, ("open", "hours")):
        return _structured("Here are the dining hours for today:", "dining", dining, 0.9)
    if _contains_any(q, ("menu", "food", "eat")):
        return _structured("Here are the available dining options and their specialties:", "dining", dining, 0.8)
    return _structured("Here are the dining options available on campus:", "dining", dining, 0.7)


def find_course_code(query: str) -> Optional[str]:
    """
    First course-code-looking token (2-4 letters, optional space, 3 digits),
    with the space removed.
    """
    m = COURSE_CODE_RE.search(query)
    if not m:
        return None
    return re.sub(r"\s", "", m.group(1), count=1)


def _answer_schedule(query: str, context: QueryContext, store: KnowledgeStore) -> Response:
    q = query.lower()
    if context.intent == "list" or _contains_any(q, ("all", "my")):
        return _structured("Here are your current class schedules:", "schedule", store.class_schedules, 0.9)

    code = find_course_code(query)
    if code:
        course = next((c for c in store.class_schedules if c.course_code.lower() == code.lower()), None)
        if course is not None:
            return _structured(f"Here's the schedule for {course.course_code}:", "schedule", [course], 0.95)

    return _structured("Here are your class schedules:", "schedule", store.class_schedules, 0.8)


def _answer_library(query: str, store: KnowledgeStore) -> Response:
    q = query.lower()
    services = store.library_services

    if _contains_any(q, ("book", "borrow")):
        book = next((s for s in services if "book" in s.name.lower()), None)
        return _structured(
            "Here's information about borrowing books from the library:",
            "library",
            [book] if book else services,
            0.9,
        )

    if _contains_any(q, ("computer", "print")):
        computer = next((s for s in services if "computer" in s.name.lower()), None)
        return _structured(
            "Here's information about computer and printing services:",
            "library",
            [computer] if computer else services,
            0.9,
        )

    return _structured("Here are all the library services available:", "library", services, 0.8)


def _services_named(store: KnowledgeStore, primary: str, *fallbacks: str) -> list[AdministrativeService]:
    services = store.administrative_services
    hit = next((s for s in services if primary in s.name.lower()), None)
    if hit is not None:
        return [hit]
    names = (primary,) + fallbacks
    return [s for s in services if _contains_any(s.name.lower(), names)]


def _answer_administrative(query: str, store: KnowledgeStore) -> Response:
    q = query.lower()

    if _contains_any(q, ("pay", "tuition", "fee")):
        return _structured(
            "Here's how to pay your tuition and fees:",
            "administrative",
            _services_named(store, "tuition", "financial"),
            0.9,
        )

    if _contains_any(q, ("scholarship", "financial aid")):
        return _structured(
            "Here's information about scholarships and financial aid:",
            "administrative",
            _services_named(store, "scholarship", "financial"),
            0.9,
        )

    return _structured(
        "Here are the administrative services available:", "administrative", store.administrative_services, 0.7
    )


def _answer_calendar(query: str, store: KnowledgeStore, now: Now) -> Response:
    q = query.lower()
    upcoming = store.get_upcoming_events(DEFAULT_WINDOW_DAYS, now=now)

    if _contains_any(q, ("exam", "test")):
        exams = [ev for ev in upcoming if ev.type == "exam"]
        if exams:
            return _structured("Here are the upcoming exam dates:", "calendar", exams, 0.9)
        return _structured("No upcoming exams found in the next 30 days.", "calendar", upcoming, 0.9)

    if "deadline" in q:
        deadlines = [ev for ev in upcoming if ev.type == "deadline"]
        if deadlines:
            return _structured("Here are the upcoming deadlines:", "calendar", deadlines, 0.9)
        return _structured("No upcoming deadlines found in the next 30 days.", "calendar", upcoming, 0.9)

    return _structured("Here are the upcoming important dates:", "calendar", upcoming, 0.8)


def _fallback(query: str, store: KnowledgeStore) -> Response:
    matches = search_faqs(query, store.faqs)
    if matches:
        top = matches[0]
        return _faq_response(
            f"I think this might help answer your question:\n\n**{top.question}**\n\n{top.answer}",
            matches[:3],
            0.7,
        )
    return Response(
        content=HELP_MENU.format(query=query),
        type="text",
        confidence=0.4,
        suggestions=HELP_SUGGESTIONS,
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def process_query(query: str, store: KnowledgeStore, now: Now = None) -> Response:
    """
    Answer one query from the knowledge store.

    Deterministic for a given query, store and `now` (used for the calendar
    window; defaults to the current time).
    """
    category = categorize_query(query, store)
    context = analyze_query(query)
    logger.debug("query=%r category=%s intent=%s keywords=%s", query, category, context.intent, context.keywords)

    if category == "faq":
        answer = _answer_faq(query, store)
        if answer is not None:
            return answer

    if not context.keywords:
        return Response(content=CLARIFICATION, type="text", confidence=0.3)

    if category == "facilities":
        return _answer_facilities(query, context, store)
    if category == "dining":
        return _answer_dining(query, store)
    if category == "schedule":
        return _answer_schedule(query, context, store)
    if category == "library":
        return _answer_library(query, store)
    if category == "administrative":
        return _answer_administrative(query, store)
    if category == "calendar":
        return _answer_calendar(query, store, now)

    logger.debug("no category branch for %r, trying FAQ fallback", query)
    return _fallback(query, store)


def apology_response() -> Response:
    return Response(content=APOLOGY, type="text", confidence=0.1)


def answer_safely(
    query: str, store: KnowledgeStore, now: Now = None, answer: Callable[..., Response] = process_query
) -> Response:
    """
    Run `answer` (default: process_query) for UI callers; any unexpected
    error becomes the fixed apology.
    """
    try:
        return answer(query, store, now=now)
    except Exception:
        logger.exception("Failed to answer %r", query)
        return apology_response()
