"""
Tests for the interactive chat.

The console writes into a StringIO and input comes from a scripted list,
so the loop runs without a terminal. delay=False keeps it instant.
"""

import io
import unittest
from datetime import date
from unittest import mock

from rich.console import Console

from campusassist.interactive import (
    QUICK_ACTIONS,
    TABLE_BUILDERS,
    build_table,
    confidence_badge,
    render_response,
    resolve_input,
    run_interactive,
)
from campusassist.knowledge import load_knowledge_store
from campusassist.model import DATA_KINDS, CampusFacility, Response, ResponseData


def _console() -> Console:
    return Console(file=io.StringIO(), width=200)


def _scripted(lines: list[str]):
    it = iter(lines)
    return lambda prompt: next(it)


class TestResolveInput(unittest.TestCase):
    OPTIONS = ["first", "second"]

    def test_number_picks_option(self) -> None:
        self.assertEqual(resolve_input("2", self.OPTIONS), "second")
        self.assertEqual(resolve_input(" 1 ", self.OPTIONS), "first")

    def test_out_of_range(self) -> None:
        self.assertIsNone(resolve_input("3", self.OPTIONS))
        self.assertIsNone(resolve_input("0", self.OPTIONS))

    def test_text_passes_through(self) -> None:
        self.assertEqual(resolve_input("  where is the gym ", self.OPTIONS), "where is the gym")

    def test_unicode_digits_are_text(self) -> None:
        # "²" and "①" are digits to str.isdigit() but not numbers int() can parse
        self.assertEqual(resolve_input("²", self.OPTIONS), "²")
        self.assertEqual(resolve_input("①", self.OPTIONS), "①")

    def test_blank(self) -> None:
        self.assertIsNone(resolve_input("   ", self.OPTIONS))


class TestRendering(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.store = load_knowledge_store()

    def test_confidence_badge(self) -> None:
        self.assertEqual(confidence_badge(0.95), "[green]95%[/]")
        self.assertEqual(confidence_badge(0.7), "[yellow]70%[/]")
        self.assertEqual(confidence_badge(0.3), "[red]30%[/]")

    def test_every_kind_has_a_table(self) -> None:
        self.assertEqual(set(TABLE_BUILDERS), set(DATA_KINDS))
        s = self.store
        samples = {
            "schedule": s.class_schedules,
            "facility": s.campus_facilities,
            "dining": s.dining_options,
            "library": s.library_services,
            "administrative": s.administrative_services,
            "calendar": s.academic_calendar,
            "faq": s.faqs,
        }
        for kind, records in samples.items():
            table = build_table(ResponseData(kind=kind, records=records))
            self.assertEqual(table.row_count, len(records), kind)

    def test_suggestions_capped_at_three(self) -> None:
        console = _console()
        response = Response(content="Hi", type="text", confidence=0.5, suggestions=("a", "b", "c", "d"))
        offered = render_response(response, console)
        self.assertEqual(offered, ["a", "b", "c"])
        out = console.file.getvalue()
        self.assertIn("[3] c", out)
        self.assertNotIn("[4] d", out)

    def test_record_text_is_not_markup(self) -> None:
        console = _console()
        lab = CampusFacility(
            id="1",
            name="Lab [/] East",
            type="academic",
            location="[red]North",
            hours="9-5",
            description="",
            amenities=("[bold]Wifi",),
        )
        response = Response(
            content="Here are the campus facilities I found:",
            type="structured",
            confidence=0.8,
            data=ResponseData(kind="facility", records=(lab,)),
        )
        render_response(response, console)
        out = console.file.getvalue()
        self.assertIn("Lab [/] East", out)
        self.assertIn("[red]North", out)
        self.assertIn("[bold]Wifi", out)

    def test_suggestion_text_is_not_markup(self) -> None:
        console = _console()
        render_response(Response(content="Hi", type="text", confidence=0.5, suggestions=("[bold]x",)), console)
        self.assertIn("[1] [bold]x", console.file.getvalue())


class TestRunInteractive(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.store = load_knowledge_store()

    def run_chat(self, lines: list[str]) -> str:
        console = _console()
        run_interactive(
            self.store, now=date(2024, 10, 1), delay=False, console=console, input_fn=_scripted(lines)
        )
        return console.file.getvalue()

    def test_free_text_query(self) -> None:
        out = self.run_chat(["CS101 schedule", "0"])
        self.assertIn("Smart Campus Assistant", out)
        self.assertIn("Here's the schedule for CS101:", out)
        self.assertIn("95%", out)
        self.assertTrue(out.rstrip().endswith("Bye."))

    def test_quick_action_by_number(self) -> None:
        out = self.run_chat(["1", "quit"])
        self.assertIn(f"You: {QUICK_ACTIONS[0][1]}", out)
        self.assertIn("Calculus II", out)

    def test_suggestion_by_number(self) -> None:
        # the FAQ answer offers its related questions as [1]..[3]
        faq = self.store.find_faq("4")
        out = self.run_chat(["What are the library hours?", "1", "exit"])
        self.assertIn(f"You: {faq.related_questions[0]}", out)

    def test_unicode_digit_input_is_asked_as_text(self) -> None:
        out = self.run_chat(["²", "0"])
        self.assertIn("You: ²", out)
        self.assertIn("Bye.", out)

    def test_out_of_range_number(self) -> None:
        out = self.run_chat(["9", "0"])
        self.assertIn("Out of range.", out)

    def test_end_of_input_exits(self) -> None:
        def closed(prompt: str) -> str:
            raise EOFError

        console = _console()
        run_interactive(self.store, delay=False, console=console, input_fn=closed)
        self.assertIn("Bye.", console.file.getvalue())

    def test_failure_shows_apology_and_continues(self) -> None:
        with mock.patch("campusassist.interactive.process_query", side_effect=RuntimeError("boom")):
            with self.assertLogs("campusassist.composer", level="ERROR"):
                out = self.run_chat(["pizza", "0"])
        self.assertIn("I apologize", out)
        self.assertIn("10%", out)
        self.assertIn("Bye.", out)


if __name__ == "__main__":
    unittest.main()
