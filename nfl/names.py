"""Utility helpers for normalising team names and spotting team mentions in text."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, Set

from .models import Team


def normalize_ascii(text: str | None) -> str:
    """Return an upper-case ASCII string (empty string if input is falsy)."""

    if not text:
        return ""
    normalized = (
        unicodedata.normalize("NFKD", str(text))
        .encode("ascii", "ignore")
        .decode("ascii")
        .upper()
        .strip()
    )
    return " ".join(normalized.split())


def normalize_team(text: str | None) -> str:
    return normalize_ascii(text)


def team_aliases(team: Team) -> Set[str]:
    """Case-insensitive aliases (full name and nickname) for ``team``."""

    aliases = {normalize_team(team.name)}
    if team.nickname:
        aliases.add(normalize_team(team.nickname))
    aliases.discard("")
    return aliases


def mentions_team(text: str | None, team: Team) -> bool:
    """True when ``text`` names ``team``.

    Names and nicknames match case-insensitively on word boundaries; the
    abbreviation only matches as an upper-case token so that "NO" or "NE"
    inside ordinary prose is not mistaken for a team.
    """

    if not text:
        return False
    upper = normalize_ascii(text)
    for alias in team_aliases(team):
        if re.search(rf"(?<![A-Z0-9]){re.escape(alias)}(?![A-Z0-9])", upper):
            return True
    abbr = team.abbreviation.strip()
    if abbr and re.search(rf"(?<![A-Za-z0-9]){re.escape(abbr)}(?![A-Za-z0-9])", str(text)):
        return True
    return False


def mentioned_teams(text: str | None, teams: Iterable[Team]) -> List[Team]:
    return [team for team in teams if mentions_team(text, team)]


def names_third_team(text: str | None, home: Team, away: Team, teams: Iterable[Team]) -> bool:
    """True when ``text`` mentions a team other than ``home``/``away``."""

    own = {home.abbreviation, away.abbreviation}
    return any(team.abbreviation not in own for team in mentioned_teams(text, teams))
