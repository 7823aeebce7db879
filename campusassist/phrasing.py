"""
Natural phrasing (presentation only).

Wraps the deterministic composer with a short random "thinking" pause and
swaps a few stock opening phrases for random alternatives. Nothing here
changes type, confidence, data or suggestions.
"""

from __future__ import annotations

import dataclasses
import random
import time
from typing import Callable, Optional

from campusassist.composer import Now, process_query
from campusassist.knowledge import KnowledgeStore
from campusassist.model import Response

MIN_DELAY_SECONDS = 0.5
MAX_DELAY_SECONDS = 1.5

# applied in this order; a replacement can feed the next entry
VARIATIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Here are", ("Here are", "I found", "Here's what I found:", "These are")),
    ("Here's", ("Here's", "Here is", "I found", "This is")),
    ("I can help", ("I can help", "I'd be happy to help", "Let me assist you", "I'm here to help")),
)


def naturalize_content(content: str, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    for original, replacements in VARIATIONS:
        if content.startswith(original):
            content = content.replace(original, rng.choice(replacements), 1)
    return content


def generate_natural_response(
    query: str,
    store: KnowledgeStore,
    now: Now = None,
    rng: Optional[random.Random] = None,
    sleep: Callable[[float], None] = time.sleep,
    min_delay: float = MIN_DELAY_SECONDS,
    max_delay: float = MAX_DELAY_SECONDS,
) -> Response:
    rng = rng or random.Random()
    if max_delay > 0:
        sleep(rng.uniform(min_delay, max_delay))

    response = process_query(query, store, now=now)
    return dataclasses.replace(response, content=naturalize_content(response.content, rng))
