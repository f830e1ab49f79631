"""Dynamic tier and offense/defense ratings from record, QB form and roster news."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Union

from nfl.injuries import is_out_note, qb_ruled_out
from nfl.models import NewsArticle, Team, TeamRating

MIN_TIER = 1
MAX_TIER = 5
MIN_RATING = 50
MAX_RATING = 99

QB_OUT_PENALTY = 15
GENERIC_OUT_PENALTY = 5
QB_OUT_TIER_DROP = 2

_LEADING_INT = re.compile(r"^\s*(\d+)")

NewsLike = Union[str, NewsArticle]


def parse_wins(record: Optional[str]) -> int:
    """Leading win count of a ``W-L[-T]`` record; 0 when it cannot be parsed."""

    match = _LEADING_INT.match(record or "")
    return int(match.group(1)) if match else 0


def tier_for_wins(wins: int) -> int:
    if wins >= 10:
        return 1
    if wins >= 8:
        return 2
    if wins >= 6:
        return 3
    if wins >= 4:
        return 4
    return 5


def base_rating(tier: int) -> int:
    return 95 - (tier - 1) * 5


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def _snippet_text(item: NewsLike) -> str:
    return item.text if isinstance(item, NewsArticle) else str(item or "")


def qb_form(team: Team) -> tuple[int, int]:
    """Return ``(offense boost, tier promotion)`` from season passing numbers."""

    stats = team.qb_stats
    if stats is None:
        return 0, 0
    ratio = stats.td_int_ratio
    per_week = stats.yards_per_week
    boost = 0
    if ratio > 2.5 and per_week > 250:
        boost = 10
    elif ratio > 1.5 and per_week > 200:
        boost = 5
    elif ratio < 1.0:
        boost = -10
    promotion = 1 if ratio > 2.0 and stats.passing_tds > 25 else 0
    return boost, promotion


def rate_team(team: Team, news: Iterable[NewsLike] = ()) -> TeamRating:
    """Rate ``team`` for a single analysis.

    The result depends on the live record, injury notes and the supplied
    news snippets, all of which change between requests, so it is
    recomputed on every call rather than cached.
    """

    tier = tier_for_wins(parse_wins(team.record))
    base = base_rating(tier)

    qb_boost, promotion = qb_form(team)
    tier -= promotion

    texts: List[str] = [note for note in team.key_injuries if note]
    texts.extend(text for text in (_snippet_text(item) for item in news) if text)

    qb_out = qb_ruled_out(texts)
    if qb_out:
        penalty = QB_OUT_PENALTY
        tier += QB_OUT_TIER_DROP
    elif any(is_out_note(text) for text in texts):
        penalty = GENERIC_OUT_PENALTY
    else:
        penalty = 0

    offense = _clamp(base + qb_boost - penalty, MIN_RATING, MAX_RATING)
    defense = _clamp(base - penalty // 2, MIN_RATING, MAX_RATING)
    return TeamRating(
        tier=_clamp(tier, MIN_TIER, MAX_TIER),
        offense=offense,
        defense=defense,
        qb_out=qb_out,
        qb_boost=qb_boost,
    )
