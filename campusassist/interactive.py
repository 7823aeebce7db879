"""
Interactive chat mode.

A terminal chat around the composer:
- every answer shows its content, a confidence badge and, for structured
  and FAQ answers, a table chosen by the payload kind
- suggestions (max 3) and the quick actions are numbered; typing the number
  asks that question
- [0], "quit" or "exit" leaves the chat
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from campusassist.composer import Now, answer_safely, process_query
from campusassist.knowledge import KnowledgeStore
from campusassist.model import (
    FAQ,
    AcademicCalendarEvent,
    AdministrativeService,
    CampusFacility,
    ClassSchedule,
    DiningOption,
    LibraryService,
    Response,
    ResponseData,
)
from campusassist.phrasing import generate_natural_response

QUICK_ACTIONS: tuple[tuple[str, str], ...] = (
    ("Class Schedule", "Show me my class schedule"),
    ("Campus Map", "Where is the library?"),
    ("Dining Options", "What are today's dining options?"),
    ("Library Hours", "What are the library hours?"),
    ("Fees & Payments", "How do I pay my tuition fees?"),
    ("Student Services", "What student services are available?"),
)

WELCOME = Response(
    content=(
        "Hello! I'm your Smart Campus Assistant. I can help you with class schedules, campus facilities, "
        "dining options, library services, and administrative procedures. "
        "Feel free to ask me anything in your own words!"
    ),
    type="text",
    confidence=1.0,
)

MAX_SUGGESTIONS_SHOWN = 3
EXIT_WORDS = {"0", "quit", "exit", "q"}


def _cell(text: Optional[str]) -> str:
    return escape(text or "")


def _join(items: Sequence[str], sep: str = ", ") -> str:
    return escape(sep.join(items))


def confidence_badge(confidence: float) -> str:
    pct = round(confidence * 100)
    color = "green" if pct >= 80 else "yellow" if pct >= 50 else "red"
    return f"[{color}]{pct}%[/]"


# ---------------------------------------------------------------------------
# Tables per payload kind (record text is data, never markup)
# ---------------------------------------------------------------------------


def _schedule_table(rows: Sequence[ClassSchedule]) -> Table:
    table = Table(title="Class schedule", box=box.SIMPLE)
    for col in ("Course", "Name", "Instructor", "Time", "Days", "Location"):
        table.add_column(col)
    for c in rows:
        table.add_row(
            f"[bold cyan]{_cell(c.course_code)}[/]",
            _cell(c.course_name),
            f"[magenta]{_cell(c.instructor)}[/]",
            _cell(c.time),
            _join(c.days),
            _cell(c.location),
        )
    return table


def _facility_table(rows: Sequence[CampusFacility]) -> Table:
    table = Table(title="Campus facilities", box=box.SIMPLE)
    for col in ("Facility", "Type", "Location", "Hours", "Amenities", "Contact"):
        table.add_column(col)
    for f in rows:
        table.add_row(
            f"[bold cyan]{_cell(f.name)}[/]",
            _cell(f.type),
            _cell(f.location),
            _cell(f.hours),
            _join(f.amenities),
            _cell(f.contact),
        )
    return table


def _dining_table(rows: Sequence[DiningOption]) -> Table:
    table = Table(title="Dining", box=box.SIMPLE)
    for col in ("Place", "Type", "Location", "Hours", "Specialties", "Menu"):
        table.add_column(col)
    for d in rows:
        menu = "\n".join(f"{_cell(item.name)} ${item.price:.2f}" for item in d.menu)
        table.add_row(
            f"[bold cyan]{_cell(d.name)}[/]", _cell(d.type), _cell(d.location), _cell(d.hours), _join(d.specialties), menu
        )
    return table


def _library_table(rows: Sequence[LibraryService]) -> Table:
    table = Table(title="Library services", box=box.SIMPLE)
    for col in ("Service", "Location", "Hours", "Policies"):
        table.add_column(col)
    for s in rows:
        table.add_row(f"[bold cyan]{_cell(s.name)}[/]", _cell(s.location), _cell(s.hours), _join(s.policies, "\n"))
    return table


def _administrative_table(rows: Sequence[AdministrativeService]) -> Table:
    table = Table(title="Administrative services", box=box.SIMPLE)
    for col in ("Service", "Department", "Location", "Hours", "Requirements", "Contact"):
        table.add_column(col)
    for s in rows:
        table.add_row(
            f"[bold cyan]{_cell(s.name)}[/]",
            _cell(s.department),
            _cell(s.location),
            _cell(s.hours),
            _join(s.requirements, "\n"),
            _cell(s.contact),
        )
    return table


def _calendar_table(rows: Sequence[AcademicCalendarEvent]) -> Table:
    table = Table(title="Upcoming dates", box=box.SIMPLE)
    for col in ("Date", "Event", "Type", "Description"):
        table.add_column(col)
    for ev in rows:
        table.add_row(
            ev.date.isoformat(), f"[bold cyan]{_cell(ev.event)}[/]", f"[yellow]{_cell(ev.type)}[/]", _cell(ev.description)
        )
    return table


def _faq_table(rows: Sequence[FAQ]) -> Table:
    table = Table(title="Related FAQs", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Category")
    for i, f in enumerate(rows, start=1):
        table.add_row(str(i), _cell(f.question), _cell(f.category))
    return table


TABLE_BUILDERS: dict[str, Callable[[Any], Table]] = {
    "schedule": _schedule_table,
    "facility": _facility_table,
    "dining": _dining_table,
    "library": _library_table,
    "administrative": _administrative_table,
    "calendar": _calendar_table,
    "faq": _faq_table,
}


def build_table(data: ResponseData) -> Table:
    return TABLE_BUILDERS[data.kind](data.records)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_response(response: Response, console: Console) -> list[str]:
    """
    Print one assistant answer. Returns the suggestions that were offered
    (numbered from 1), so the caller can resolve a numeric pick.
    """
    title = f"Assistant · {confidence_badge(response.confidence)}"
    console.print(Panel(Markdown(response.content), title=title, title_align="left", box=box.ROUNDED))

    if response.data is not None and len(response.data) > 0:
        console.print(build_table(response.data))

    offered = list(response.suggestions or ())[:MAX_SUGGESTIONS_SHOWN]
    if offered:
        console.print("[bold]You might also ask:[/]")
        for i, s in enumerate(offered, start=1):
            console.print(f"  [{i}] {escape(s)}")
    return offered


def _print_quick_actions(console: Console) -> list[str]:
    table = Table(title="Quick actions", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Asks")
    for i, (label, query) in enumerate(QUICK_ACTIONS, start=1):
        table.add_row(str(i), label, query)
    console.print(table)
    return [query for _, query in QUICK_ACTIONS]


def resolve_input(raw: str, options: Sequence[str]) -> Optional[str]:
    """
    Map user input to a query: a number picks from `options`, anything else
    is the query itself. None for blank input or an out-of-range number.
    """
    text = raw.strip()
    if not text:
        return None
    # isdigit() also accepts "²" or "①", which int() rejects
    if text.isdecimal():
        i = int(text)
        if 1 <= i <= len(options):
            return options[i - 1]
        return None
    return text


def run_interactive(
    store: KnowledgeStore,
    now: Now = None,
    delay: bool = True,
    console: Optional[Console] = None,
    input_fn: Optional[Callable[[str], str]] = None,
) -> None:
    """
    Chat loop. Each answer goes through answer_safely(), so a failing query
    shows the apology instead of ending the session.
    """
    console = console or Console()
    prompt = input_fn or console.input
    answer = generate_natural_response if delay else process_query

    console.print("\n=== Smart Campus Assistant (interactive) ===")
    render_response(WELCOME, console)
    options = _print_quick_actions(console)

    while True:
        try:
            raw = prompt("\nYou [0 = exit]: ")
        except EOFError:
            raw = "0"

        if raw.strip().lower() in EXIT_WORDS:
            console.print("Bye.")
            return

        query = resolve_input(raw, options)
        if query is None:
            if raw.strip():
                console.print("Out of range.")
            continue

        console.print(f"[bold]You:[/] {escape(query)}")
        with console.status("Thinking..."):
            response = answer_safely(query, store, now=now, answer=answer)

        offered = render_response(response, console)
        options = offered or [q for _, q in QUICK_ACTIONS]
