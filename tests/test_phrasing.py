"""
Unit tests for natural phrasing.

Randomness and the pause are injected, so nothing here sleeps for real.
"""

import unittest
from datetime import date

from campusassist.composer import process_query
from campusassist.knowledge import load_knowledge_store
from campusassist.phrasing import MAX_DELAY_SECONDS, MIN_DELAY_SECONDS, generate_natural_response, naturalize_content


class PickRng:
    """Always picks the same index; uniform() returns the midpoint."""

    def __init__(self, index: int) -> None:
        self.index = index

    def choice(self, seq):
        return seq[self.index]

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2


class TestNaturalize(unittest.TestCase):
    def test_first_variant_keeps_content(self) -> None:
        text = "Here are the dining options available on campus:"
        self.assertEqual(naturalize_content(text, PickRng(0)), text)

    def test_opening_is_swapped(self) -> None:
        out = naturalize_content("Here are the campus facilities I found:", PickRng(1))
        self.assertEqual(out, "I found the campus facilities I found:")

    def test_only_the_opening_is_replaced(self) -> None:
        out = naturalize_content("Here's the schedule. Here's more.", PickRng(1))
        self.assertEqual(out, "Here is the schedule. Here's more.")

    def test_replacement_feeds_next_variation(self) -> None:
        # "Here are" -> "Here's what I found:" -> "I found what I found:"
        out = naturalize_content("Here are the upcoming deadlines:", PickRng(2))
        self.assertEqual(out, "I found what I found: the upcoming deadlines:")

    def test_other_openings_untouched(self) -> None:
        text = "No upcoming exams found in the next 30 days."
        self.assertEqual(naturalize_content(text, PickRng(3)), text)

    def test_default_rng(self) -> None:
        out = naturalize_content("I can help with that.")
        self.assertTrue(out.endswith(" with that."))


class TestGenerateNaturalResponse(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.store = load_knowledge_store()

    def test_pauses_once_within_bounds(self) -> None:
        pauses = []
        generate_natural_response("pizza", self.store, rng=PickRng(0), sleep=pauses.append)
        self.assertEqual(len(pauses), 1)
        self.assertGreaterEqual(pauses[0], MIN_DELAY_SECONDS)
        self.assertLessEqual(pauses[0], MAX_DELAY_SECONDS)

    def test_zero_delay_skips_the_pause(self) -> None:
        pauses = []
        generate_natural_response("pizza", self.store, sleep=pauses.append, min_delay=0, max_delay=0)
        self.assertEqual(pauses, [])

    def test_only_content_changes(self) -> None:
        now = date(2024, 10, 1)
        for q in ("pizza", "CS101 schedule", "exam", "What are the library hours?", "asdkfj"):
            plain = process_query(q, self.store, now=now)
            natural = generate_natural_response(q, self.store, now=now, rng=PickRng(1), sleep=lambda s: None)
            self.assertEqual(natural.type, plain.type, q)
            self.assertEqual(natural.confidence, plain.confidence, q)
            self.assertEqual(natural.data, plain.data, q)
            self.assertEqual(natural.suggestions, plain.suggestions, q)

    def test_content_is_rephrased(self) -> None:
        r = generate_natural_response("pizza", self.store, rng=PickRng(3), sleep=lambda s: None)
        self.assertEqual(r.content, "These are the dining options available on campus:")


if __name__ == "__main__":
    unittest.main()
