"""Betting-line parsing and market math."""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from nfl.models import Game
from nfl.teams import ABBREVIATION_ALIASES

logger = logging.getLogger(__name__)

DEFAULT_TOTAL = 44.0

__all__ = [
    "DEFAULT_TOTAL",
    "parse_spread",
    "parse_total",
    "market_line",
    "implied_scores",
    "win_prob_from_spread",
    "elo_win_prob",
]


def _canonical_abbr(abbr: Optional[str]) -> str:
    key = (abbr or "").strip().upper()
    return ABBREVIATION_ALIASES.get(key, key)


def parse_spread(spread: Optional[str], home_abbr: str) -> float:
    """Convert ``"<favorite> <signed points>"`` into a home-relative spread.

    Positive when the home team is favored, negative when the away team is.
    Malformed strings (missing tokens, non-numeric points) yield ``0.0``.
    ESPN abbreviation aliases (``WSH``, ``JAC``, ``LA``) resolve to the
    dataset abbreviations on both sides.
    """

    tokens = (spread or "").split()
    if len(tokens) < 2:
        return 0.0
    favorite, raw_points = tokens[0], tokens[-1]
    try:
        points = abs(float(raw_points))
    except ValueError:
        logger.debug("Unparseable spread %r; treating as pick'em", spread)
        return 0.0
    if not math.isfinite(points):
        return 0.0
    return points if _canonical_abbr(favorite) == _canonical_abbr(home_abbr) else -points


def parse_total(total: object, default: float = DEFAULT_TOTAL) -> float:
    try:
        value = float(total)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return value


def market_line(game: Game, *, default_total: float = DEFAULT_TOTAL) -> Tuple[float, float]:
    """Return ``(home-relative spread, total)`` for ``game``.

    Games without betting data are treated as pick'em at ``default_total``.
    """

    if game.betting is None:
        return 0.0, default_total
    spread = parse_spread(game.betting.spread, game.home_team.abbreviation)
    total = parse_total(game.betting.total, default_total)
    return spread, total


def implied_scores(spread: float, total: float) -> Tuple[float, float]:
    """Split a total into home/away points using the home-relative spread."""

    return (total + spread) / 2.0, (total - spread) / 2.0


def win_prob_from_spread(spread: float, sigma: float) -> float:
    """Home win probability for a home-relative margin under a normal model."""

    if sigma <= 0:
        return 0.5 if spread == 0 else float(spread > 0)
    return 0.5 * (1.0 + math.erf(spread / (sigma * math.sqrt(2))))


def elo_win_prob(home_elo: float, away_elo: float, home_field: float = 0.0) -> float:
    return 1.0 / (1.0 + 10.0 ** (-(home_elo - away_elo + home_field) / 400.0))

