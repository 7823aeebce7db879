"""
Query classification.

Two first-match-wins chains live here and their ORDER IS THE PRIORITY:

- CATEGORY_RULES: keyword sets -> category. A rule matches when any query
  token and any rule keyword contain one another (case-insensitive).
- INTENT_RULES: trigger words -> intent, checked on the raw lowercased text.

categorize_query() adds one step in front of the rule table: queries that look
like questions ("how do i", "?", ...) are classified as "faq" whenever the FAQ
matcher finds something. analyze_query() does NOT apply that step.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from campusassist.faq import search_faqs
from campusassist.knowledge import KnowledgeStore
from campusassist.model import FAQ, CategoryRule, QueryContext

logger = logging.getLogger(__name__)


FAQ_TRIGGERS = ("how do i", "how to", "what should i", "can i", "where do i", "help", "?")

STOP_WORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "what", "where", "when", "how",
        "can", "could", "would", "should",
    }
)


def _rule(category: str, response: str, *keywords: str) -> CategoryRule:
    return CategoryRule(keywords=tuple(keywords), category=category, response=response)


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    # class schedules
    _rule(
        "schedule",
        "I can help you with class schedules. Here are the current courses:",
        "class", "schedule", "course", "time", "when", "CS101", "computer science",
    ),
    _rule("schedule", "Here are the instructors for current courses:", "professor", "instructor", "teacher", "who teaches"),
    # facilities
    _rule("facilities", "Here's information about campus facilities:", "library", "where is", "location", "building", "hours"),
    _rule(
        "facilities",
        "The Student Recreation Center offers excellent fitness facilities:",
        "gym", "recreation", "fitness", "pool", "sports", "exercise",
    ),
    _rule(
        "facilities",
        "Our Science Laboratory Complex provides state-of-the-art research facilities:",
        "lab", "laboratory", "science", "research", "equipment",
    ),
    _rule("facilities", "Here's information about campus parking:", "parking", "park", "car", "vehicle", "permit"),
    # dining
    _rule(
        "dining",
        "Here are the dining options available on campus:",
        "food", "eat", "dining", "cafeteria", "restaurant", "menu", "hungry",
    ),
    _rule("dining", "For coffee and light refreshments, check out Campus Grind:", "coffee", "cafe", "drink", "beverage"),
    _rule("dining", "Pizza Corner is great for dinner and late-night dining:", "pizza", "late night", "dinner"),
    _rule(
        "dining",
        "We have excellent vegetarian and vegan options available:",
        "vegetarian", "vegan", "dietary", "gluten-free", "healthy",
    ),
    # library
    _rule(
        "library",
        "The Central Library offers comprehensive services:",
        "book", "borrow", "study", "research", "quiet", "computer", "print",
    ),
    _rule("library", "For printing and computer services:", "printing", "scan", "copy", "computer lab"),
    # administrative
    _rule(
        "administrative",
        "For tuition payments and financial services:",
        "pay", "tuition", "fees", "bill", "payment", "money",
    ),
    _rule("administrative", "For student ID card services:", "id card", "student id", "replacement", "lost card"),
    _rule(
        "administrative",
        "For scholarships and financial assistance:",
        "scholarship", "financial aid", "money", "assistance",
    ),
    _rule(
        "administrative",
        "For course registration:",
        "register", "registration", "enroll", "add class", "drop class",
    ),
    # calendar
    _rule(
        "calendar",
        "Here are upcoming important dates:",
        "calendar", "events", "dates", "deadline", "exam", "holiday",
    ),
    _rule("calendar", "Here are the upcoming exam dates:", "exam", "test", "midterm", "final"),
    # generic questions
    _rule(
        "faq",
        "I found some frequently asked questions that might help:",
        "how", "what", "where", "when", "why", "help", "question", "faq",
    ),
)

INTENT_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("how", "help"), "help"),
    (("where", "location"), "location"),
    (("when", "time", "hours"), "schedule"),
    (("what", "show", "list"), "list"),
)
DEFAULT_INTENT = "information"

CONTEXTUAL_HELP: dict[str, tuple[str, ...]] = {
    "schedule": (
        "Try asking: 'What's my class schedule?'",
        "Or: 'When is my CS101 class?'",
        "Or: 'Who teaches calculus?'",
    ),
    "facilities": (
        "Try asking: 'Where is the library?'",
        "Or: 'What are the gym hours?'",
        "Or: 'How do I get to the science building?'",
    ),
    "dining": (
        "Try asking: 'What dining options are available?'",
        "Or: 'Do you have vegetarian food?'",
        "Or: 'Where can I get coffee?'",
    ),
    "library": (
        "Try asking: 'How do I borrow books?'",
        "Or: 'Can I print at the library?'",
        "Or: 'What are the library hours?'",
    ),
    "administrative": (
        "Try asking: 'How do I pay tuition?'",
        "Or: 'Where do I get my student ID?'",
        "Or: 'How do I apply for scholarships?'",
    ),
    "calendar": (
        "Try asking: 'When are final exams?'",
        "Or: 'What are the important dates?'",
        "Or: 'When is registration?'",
    ),
}
DEFAULT_HELP = (
    "Try asking about classes, facilities, dining, library, or administrative services",
    "You can ask questions like 'Where is...' or 'How do I...'",
    "I'm here to help with any campus-related questions!",
)


def _rule_matches(rule: CategoryRule, words: list[str]) -> bool:
    for keyword in rule.keywords:
        kw = keyword.lower()
        if any(kw in word or word in kw for word in words):
            return True
    return False


def find_relevant_knowledge(query: str, rules: Iterable[CategoryRule] = CATEGORY_RULES) -> list[CategoryRule]:
    """
    All rules matching the query, in table order.
    """
    words = query.lower().split()
    return [rule for rule in rules if _rule_matches(rule, words)]


def category_from_rules(query: str, rules: Iterable[CategoryRule] = CATEGORY_RULES) -> str:
    words = query.lower().split()
    for rule in rules:
        if _rule_matches(rule, words):
            return rule.category
    return "general"


def looks_like_question(query: str) -> bool:
    q = query.lower()
    return any(trigger in q for trigger in FAQ_TRIGGERS)


def categorize_query(query: str, store: KnowledgeStore) -> str:
    """
    Category tag for a free-text query.

    Question-like queries with at least one FAQ hit are "faq"; otherwise the
    first matching rule decides; otherwise "general".
    """
    if looks_like_question(query) and search_faqs(query, store.faqs):
        logger.debug("categorize %r -> faq (question with FAQ hits)", query)
        return "faq"
    category = category_from_rules(query)
    logger.debug("categorize %r -> %s", query, category)
    return category


def detect_intent(query: str) -> str:
    q = query.lower()
    for triggers, intent in INTENT_RULES:
        if any(t in q for t in triggers):
            return intent
    return DEFAULT_INTENT


def extract_keywords(query: str) -> tuple[str, ...]:
    """
    Lowercased whitespace tokens longer than 2 chars, minus stop words.
    """
    words = [w for w in query.lower().split() if len(w) > 2]
    return tuple(w for w in words if w not in STOP_WORDS)


def analyze_query(query: str) -> QueryContext:
    return QueryContext(
        query=query,
        category=category_from_rules(query),
        keywords=extract_keywords(query),
        intent=detect_intent(query),
    )


def get_contextual_help(category: str) -> tuple[str, ...]:
    return CONTEXTUAL_HELP.get(category, DEFAULT_HELP)


def enhance_query(query: str, store: KnowledgeStore) -> dict[str, Any]:
    """
    Category plus the FAQ hits and "try asking" hints that go with it.
    """
    category = categorize_query(query, store)
    faqs: list[FAQ] = []
    if category == "faq":
        faqs = search_faqs(query, store.faqs)
    if faqs:
        suggestions = get_contextual_help(faqs[0].category)
    else:
        suggestions = get_contextual_help(category)
    return {"category": category, "faqs": faqs, "suggestions": suggestions}
