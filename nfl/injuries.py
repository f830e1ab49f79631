"""Shared injury-note parsing for rating and projection adjustments."""

from __future__ import annotations

import re
from typing import Iterable

QB_PATTERN = re.compile(r"\bqb\d*\b|\bquarterback\b", re.IGNORECASE)
OUT_PATTERN = re.compile(r"\bout\b|\bir\b", re.IGNORECASE)
BENCH_PATTERN = re.compile(r"\bbench(?:ed)?\b", re.IGNORECASE)

QB_NOTE_POINTS = 4
OTHER_NOTE_POINTS = 2


def is_qb_note(text: str | None) -> bool:
    return bool(text) and bool(QB_PATTERN.search(text))


def is_out_note(text: str | None) -> bool:
    """True for "out" / "IR" style notes."""

    return bool(text) and bool(OUT_PATTERN.search(text))


def qb_ruled_out(notes: Iterable[str]) -> bool:
    """True when any note flags the quarterback as out, on IR or benched."""

    for note in notes:
        if not note:
            continue
        if is_qb_note(note) and (OUT_PATTERN.search(note) or BENCH_PATTERN.search(note)):
            return True
    return False


def injury_point_penalty(notes: Iterable[str]) -> int:
    """Points removed from a team's projected score for its injury notes."""

    penalty = 0
    for note in notes:
        if not note:
            continue
        penalty += QB_NOTE_POINTS if is_qb_note(note) else OTHER_NOTE_POINTS
    return penalty


__all__ = [
    "QB_NOTE_POINTS",
    "OTHER_NOTE_POINTS",
    "is_qb_note",
    "is_out_note",
    "qb_ruled_out",
    "injury_point_penalty",
]
