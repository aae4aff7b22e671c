"""Fuzzy row filtering.

Rows are matched as one space-joined string. A query matches when its
characters appear in order (case-insensitive) somewhere in that string.
Matches are scored so that hits at word starts and runs of adjacent
characters rank above scattered ones.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..models import Dataset

FIRST_CHAR_BONUS = 10
SEPARATOR_BONUS = 20
CAMEL_CASE_BONUS = 20
ADJACENT_BONUS = 5
LEADING_PENALTY = -5
MAX_LEADING_PENALTY = -15

SEPARATORS = frozenset(" -_./\\:")


@dataclass(frozen=True)
class Match:
    index: int
    score: int


def _fold(s: str) -> str:
    # One folded character per input character, so match positions index
    # the original text (casefold alone turns "ß" into "ss").
    return "".join(c.casefold()[0] for c in s)


def _position_bonus(text: str, i: int) -> int:
    if i == 0:
        return FIRST_CHAR_BONUS
    prev, cur = text[i - 1], text[i]
    bonus = 0
    if prev in SEPARATORS:
        bonus += SEPARATOR_BONUS
    if prev.islower() and cur.isupper():
        bonus += CAMEL_CASE_BONUS
    return bonus


def _score_from(text: str, folded: str, query: str, first: int) -> int | None:
    """Score a greedy match of `query` that starts at `first`."""
    score = _position_bonus(text, first) + max(first * LEADING_PENALTY, MAX_LEADING_PENALTY)
    last = first
    run_bonus = 0
    for ch in query[1:]:
        i = folded.find(ch, last + 1)
        if i < 0:
            return None
        score += _position_bonus(text, i)
        if i == last + 1:
            step = run_bonus * 2 + ADJACENT_BONUS
            score += step
            run_bonus += step
        else:
            run_bonus = 0
        last = i
    return score - (len(text) - len(query))


def score(query: str, text: str) -> int | None:
    """Best score of `query` against `text`, or None when it doesn't match."""
    needle = _fold(query)
    if not needle:
        return None
    folded = _fold(text)
    best: int | None = None
    i = folded.find(needle[0])
    while i >= 0:
        s = _score_from(text, folded, needle, i)
        if s is None:
            # A later start can't succeed if this one ran out of text.
            break
        if best is None or s > best:
            best = s
        i = folded.find(needle[0], i + 1)
    return best


def rank(query: str, texts: Sequence[str]) -> list[Match]:
    """Matching indexes ordered by descending score; ties keep input order."""
    matches = []
    for index, text in enumerate(texts):
        s = score(query, text)
        if s is not None:
            matches.append(Match(index=index, score=s))
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches


class FilterEngine:
    """Filters a dataset against a query without touching the input.

    An empty (or whitespace-only) query is a no-op and returns the dataset
    it was given.
    """

    def filter(self, query: str, dataset: Dataset) -> Dataset:
        if not query or not query.strip():
            return dataset
        matches = rank(query, [row.text() for row in dataset.rows])
        return dataset.with_rows(dataset.rows[m.index] for m in matches)


def filter_rows(query: str, dataset: Dataset) -> Dataset:
    return FilterEngine().filter(query, dataset)
