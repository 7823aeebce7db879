"""
FAQ matching.

Every FAQ is scored against the query additively:
    +10  question contains the whole query
    +5   per keyword found inside the query
    per query token longer than 2 chars:
      +1  token found in question or answer (once, not per field)
      +2  per keyword containing the token

FAQs with score <= 0 are dropped, the rest are ranked by score
(stable on ties) and cut to the top 5.
"""

from __future__ import annotations

from typing import Iterable

from campusassist.model import FAQ

MAX_FAQ_RESULTS = 5

QUESTION_MATCH_SCORE = 10
KEYWORD_IN_QUERY_SCORE = 5
TOKEN_IN_TEXT_SCORE = 1
TOKEN_IN_KEYWORD_SCORE = 2


def query_tokens(query: str) -> list[str]:
    return [w for w in query.lower().split() if len(w) > 2]


def score_faq(faq: FAQ, query: str) -> int:
    q = query.lower()
    question = faq.question.lower()
    answer = faq.answer.lower()
    keywords = [k.lower() for k in faq.keywords]

    score = 0

    # An empty query is contained in every question and scores here too.
    if q in question:
        score += QUESTION_MATCH_SCORE

    for kw in keywords:
        if kw in q:
            score += KEYWORD_IN_QUERY_SCORE

    for word in query_tokens(q):
        if word in question or word in answer:
            score += TOKEN_IN_TEXT_SCORE
        for kw in keywords:
            if word in kw:
                score += TOKEN_IN_KEYWORD_SCORE

    return score


def rank_faqs(query: str, faqs: Iterable[FAQ], limit: int = MAX_FAQ_RESULTS) -> list[tuple[FAQ, int]]:
    """
    (faq, score) pairs with positive score, best first, at most `limit`.
    """
    scored = [(faq, score_faq(faq, query)) for faq in faqs]
    positive = [pair for pair in scored if pair[1] > 0]
    positive.sort(key=lambda pair: pair[1], reverse=True)
    return positive[:limit]


def search_faqs(query: str, faqs: Iterable[FAQ]) -> list[FAQ]:
    """
    Top FAQs for `query`. An empty list means "no match", not an error.
    """
    return [faq for faq, _ in rank_faqs(query, faqs)]
