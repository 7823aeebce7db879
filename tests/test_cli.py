"""
Tests for CLI entry points.

These tests focus on:
- Argument validation (ask requires text, --now must be a date, --days >= 0)
- Output of each sub-command, with stdout captured
- A data directory without JSON files still answers
"""

import contextlib
import io
import json
import tempfile
import unittest

from campusassist.cli import main


def run_cli(argv: list[str]) -> tuple[int, str]:
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        try:
            main(argv)
        except SystemExit as e:
            return int(e.code or 0), out.getvalue()
    return 0, out.getvalue()


class TestCLI(unittest.TestCase):
    def test_ask_requires_text(self) -> None:
        # ask without text should exit with nonzero
        with self.assertRaises(SystemExit) as ctx:
            with contextlib.redirect_stdout(io.StringIO()):
                main(["ask", ""])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_ask_plain(self) -> None:
        code, out = run_cli(["ask", "CS101 schedule"])
        self.assertEqual(code, 0)
        self.assertIn("Here's the schedule for CS101:", out)
        self.assertIn("[structured] confidence: 95%", out)
        self.assertIn("CS101 | Introduction to Computer Science", out)

    def test_ask_json(self) -> None:
        code, out = run_cli(["ask", "--json", "CS101 schedule"])
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["confidence"], 0.95)
        self.assertEqual(payload["data_kind"], "schedule")
        self.assertEqual(payload["data"][0]["course_code"], "CS101")

    def test_ask_faq_lists_suggestions(self) -> None:
        code, out = run_cli(["ask", "What are the library hours?"])
        self.assertEqual(code, 0)
        self.assertIn("You might also ask:", out)

    def test_classify_json(self) -> None:
        code, out = run_cli(["classify", "--json", "What are the library hours?"])
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["category"], "faq")
        self.assertEqual(payload["rule_category"], "facilities")
        self.assertEqual(payload["intent"], "schedule")
        self.assertEqual(payload["keywords"], ["library", "hours?"])

    def test_classify_text(self) -> None:
        code, out = run_cli(["classify", "pizza"])
        self.assertEqual(code, 0)
        self.assertIn("category:      dining", out)

    def test_faq_ranking(self) -> None:
        code, out = run_cli(["faq", "borrow books"])
        self.assertEqual(code, 0)
        self.assertIn("| 9 |", out.splitlines()[0])

    def test_faq_no_match(self) -> None:
        code, out = run_cli(["faq", "asdkfj"])
        self.assertEqual(code, 0)
        self.assertIn("No matching FAQs.", out)

    def test_events_window(self) -> None:
        code, out = run_cli(["--now", "2024-10-01", "events"])
        self.assertEqual(code, 0)
        self.assertIn("Midterm Exams", out)
        self.assertNotIn("Spring Registration", out)

    def test_events_huge_window(self) -> None:
        code, out = run_cli(["--now", "2024-10-01", "events", "--days", "1000000000"])
        self.assertEqual(code, 0)
        self.assertIn("Spring Registration", out)

    def test_events_negative_days(self) -> None:
        code, _ = run_cli(["events", "--days", "-1"])
        self.assertEqual(code, 1)

    def test_invalid_now(self) -> None:
        code, out = run_cli(["--now", "2024-13-01", "events"])
        self.assertEqual(code, 1)
        self.assertIn("Invalid --now date", out)

    def test_empty_data_dir_still_answers(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            code, out = run_cli(["--data-dir", d, "ask", "asdkfj"])
        self.assertEqual(code, 0)
        self.assertIn("I'm not sure I understand", out)


if __name__ == "__main__":
    unittest.main()
