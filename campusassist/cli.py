"""
CLI (Command Line Interface).

Quick terminal commands, e.g.:

    campusassist ask "Where is the library?"
    campusassist classify "CS101 schedule"
    campusassist faq "borrow books"
    campusassist events --days 30 --now 2024-10-01
    campusassist chat

Note:
- The chat UI lives in campusassist/interactive.py
- Apart from chat, output is plain text (or JSON with --json)
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date, datetime
from typing import Optional

from rich.logging import RichHandler

from campusassist.classify import analyze_query, categorize_query, find_relevant_knowledge, get_contextual_help
from campusassist.composer import answer_safely, process_query
from campusassist.faq import rank_faqs
from campusassist.knowledge import DEFAULT_WINDOW_DAYS, KnowledgeStore, load_knowledge_store
from campusassist.model import Response, record_to_dict
from campusassist.phrasing import generate_natural_response

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _parse_now(text: Optional[str]) -> Optional[date]:
    """
    Parse --now (YYYY-MM-DD). Raises ValueError for invalid dates.
    """
    if not text:
        return None
    return datetime.strptime(text.strip(), "%Y-%m-%d").date()


def _record_line(kind: str, rec: dict) -> str:
    if kind == "schedule":
        return f"{rec['course_code']} | {rec['course_name']} | {rec['instructor']} | {rec['time']} | {', '.join(rec['days'])} | {rec['location']}"
    if kind == "calendar":
        return f"{rec['date']} | {rec['event']} ({rec['type']})"
    if kind == "faq":
        return f"{rec['id']}: {rec['question']}"
    # facilities, dining, library, administrative
    return f"{rec['name']} | {rec['location']} | {rec['hours']}"


def _print_response(response: Response, as_json: bool) -> None:
    if as_json:
        print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
        return

    print(response.content)
    print(f"\n[{response.type}] confidence: {round(response.confidence * 100)}%")

    if response.data is not None and len(response.data) > 0:
        print("")
        for r in response.data.records:
            print(f"- {_record_line(response.data.kind, record_to_dict(r))}")

    if response.suggestions:
        print("\nYou might also ask:")
        for s in response.suggestions:
            print(f"- {s}")


def _cmd_ask(args: argparse.Namespace, store: KnowledgeStore, now: Optional[date]) -> int:
    """
    Answer one query.
    """
    query = (args.text or "").strip()
    if not query:
        print("Please provide a question.")
        return 1

    answer = generate_natural_response if args.natural else process_query
    response = answer_safely(query, store, now=now, answer=answer)
    _print_response(response, args.json)
    return 0


def _cmd_classify(args: argparse.Namespace, store: KnowledgeStore) -> int:
    """
    Show how a query is understood (category, intent, keywords, matching rules).
    """
    query = (args.text or "").strip()
    if not query:
        print("Please provide a question.")
        return 1

    category = categorize_query(query, store)
    context = analyze_query(query)
    rules = find_relevant_knowledge(query)

    if args.json:
        payload = {
            "category": category,
            "rule_category": context.category,
            "intent": context.intent,
            "keywords": list(context.keywords),
            "matching_rules": [r.category for r in rules],
            "help": list(get_contextual_help(category)),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    print(f"category:      {category}")
    print(f"rule category: {context.category}")
    print(f"intent:        {context.intent}")
    print(f"keywords:      {', '.join(context.keywords) if context.keywords else '(none)'}")
    print(f"matching rules: {len(rules)}")
    for r in rules:
        print(f"- {r.category}: {r.response}")
    print("")
    for hint in get_contextual_help(category):
        print(hint)
    return 0


def _cmd_faq(args: argparse.Namespace, store: KnowledgeStore) -> int:
    """
    Show ranked FAQ matches with their scores.
    """
    query = args.text or ""
    ranked = rank_faqs(query, store.faqs)
    if not ranked:
        print("No matching FAQs.")
        return 0

    for faq, score in ranked:
        print(f"{score:>3} | {faq.id} | {faq.question}")
    return 0


def _cmd_events(args: argparse.Namespace, store: KnowledgeStore, now: Optional[date]) -> int:
    """
    List upcoming academic calendar events.
    """
    if args.days < 0:
        print("--days must not be negative.")
        return 1

    events = store.get_upcoming_events(args.days, now=now)
    if not events:
        print(f"No events in the next {args.days} days.")
        return 0

    for ev in events:
        print(f"{ev.date.isoformat()} | {ev.event} ({ev.type}) | {ev.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="campusassist", description="Smart Campus Assistant CLI")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory with the campus JSON files")
    parser.add_argument("--now", type=str, default=None, help="Pretend today is this date (YYYY-MM-DD)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_ask = sub.add_parser("ask", help="Ask the assistant a question")
    p_ask.add_argument("text", type=str, help="Question text")
    p_ask.add_argument("--json", action="store_true", help="Print the response as JSON")
    p_ask.add_argument("--natural", action="store_true", help="Add thinking delay and varied phrasing")

    p_classify = sub.add_parser("classify", help="Show category, intent and keywords of a question")
    p_classify.add_argument("text", type=str, help="Question text")
    p_classify.add_argument("--json", action="store_true", help="Print as JSON")

    p_faq = sub.add_parser("faq", help="Rank FAQs for a question")
    p_faq.add_argument("text", type=str, help="Question text")

    p_events = sub.add_parser("events", help="Upcoming academic calendar events")
    p_events.add_argument("--days", type=int, default=DEFAULT_WINDOW_DAYS, help="Window size in days")

    p_chat = sub.add_parser("chat", help="Interactive chat mode")
    p_chat.add_argument("--no-delay", action="store_true", help="Answer instantly without varied phrasing")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        now = _parse_now(args.now)
    except ValueError:
        print(f"Invalid --now date: {args.now!r} (expected YYYY-MM-DD)")
        raise SystemExit(1)

    store = load_knowledge_store(args.data_dir)
    logger.debug("Knowledge store ready: %d FAQs, %d facilities", len(store.faqs), len(store.campus_facilities))

    if args.command == "ask":
        raise SystemExit(_cmd_ask(args, store, now))
    if args.command == "classify":
        raise SystemExit(_cmd_classify(args, store))
    if args.command == "faq":
        raise SystemExit(_cmd_faq(args, store))
    if args.command == "events":
        raise SystemExit(_cmd_events(args, store, now))

    if args.command == "chat":
        from campusassist.interactive import run_interactive

        run_interactive(store, now=now, delay=not args.no_delay)
        raise SystemExit(0)

    raise SystemExit(2)
