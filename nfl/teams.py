"""Static team and schedule snapshot (2025 season, Week 16).

Used as the offline fallback for the scoreboard feed and as the source of
status/injury context that the live feed does not carry.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Optional, Tuple

from .models import BettingData, Game, Team

LOGO_URL = "https://a.espncdn.com/i/teamlogos/nfl/500/{slug}.png"

# abbr: (name, color, record, standing, status, injuries, tier, offense, defense)
_TEAM_ROWS: Dict[str, tuple] = {
    # AFC West
    "DEN": ("Denver Broncos", "#FB4F14", "12-2-0", "1st AFC West", "clinched", [], 1, 96, 94),
    "LAC": ("Los Angeles Chargers", "#0080C6", "10-4-0", "3rd AFC West", "contender", [], 1, 92, 88),
    "KC": ("Kansas City Chiefs", "#E31837", "6-8-0", "4th AFC West", "eliminated",
           ["P. Mahomes QB (ACL - IR)", "T. Kelce (Rest)"], 4, 70, 80),
    "LV": ("Las Vegas Raiders", "#000000", "2-12-0", "4th AFC West", "eliminated", [], 5, 60, 65),
    # AFC East
    "NE": ("New England Patriots", "#002244", "11-3-0", "1st AFC East", "contender", [], 1, 92, 94),
    "BUF": ("Buffalo Bills", "#00338D", "10-4-0", "2nd AFC East", "contender", [], 2, 88, 82),
    "MIA": ("Miami Dolphins", "#008E97", "6-8-0", "3rd AFC East", "eliminated", [], 4, 70, 68),
    "NYJ": ("New York Jets", "#125740", "3-11-0", "4th AFC East", "eliminated", [], 5, 65, 70),
    # AFC South
    "JAX": ("Jacksonville Jaguars", "#006778", "10-4-0", "1st AFC South", "contender", [], 2, 88, 80),
    "HOU": ("Houston Texans", "#03202F", "9-5-0", "2nd AFC South", "contender", [], 2, 85, 78),
    "IND": ("Indianapolis Colts", "#002C5F", "8-6-0", "3rd AFC South", "bubble",
            ["NEWS: P. Rivers signed, cleared to start"], 3, 80, 75),
    "TEN": ("Tennessee Titans", "#4B92DB", "2-12-0", "4th AFC South", "eliminated", [], 5, 60, 65),
    # AFC North
    "PIT": ("Pittsburgh Steelers", "#FFB612", "8-6-0", "1st AFC North", "contender",
            ["QB1: A. Rodgers (Questionable)"], 2, 88, 88),
    "BAL": ("Baltimore Ravens", "#241773", "7-7-0", "2nd AFC North", "bubble", [], 3, 78, 80),
    "CIN": ("Cincinnati Bengals", "#FB4F14", "4-10-0", "3rd AFC North", "eliminated",
            ["J. Burrow QB (IR)"], 4, 70, 68),
    "CLE": ("Cleveland Browns", "#311D00", "3-11-0", "4th AFC North", "eliminated", [], 5, 60, 75),
    # NFC West
    "LAR": ("Los Angeles Rams", "#003594", "11-3-0", "1st NFC West", "clinched", [], 1, 92, 88),
    "SEA": ("Seattle Seahawks", "#002244", "11-3-0", "2nd NFC West", "contender", [], 1, 88, 90),
    "SF": ("San Francisco 49ers", "#AA0000", "10-4-0", "3rd NFC West", "contender", [], 1, 90, 90),
    "ARI": ("Arizona Cardinals", "#97233F", "3-11-0", "4th NFC West", "eliminated", [], 5, 65, 60),
    # NFC North
    "CHI": ("Chicago Bears", "#0B162A", "10-4-0", "1st NFC North", "contender", [], 1, 90, 88),
    "GB": ("Green Bay Packers", "#203731", "9-4-1", "2nd NFC North", "contender", [], 2, 88, 80),
    "DET": ("Detroit Lions", "#0076B6", "8-6-0", "3rd NFC North", "bubble", [], 3, 85, 78),
    "MIN": ("Minnesota Vikings", "#4F2683", "6-8-0", "4th NFC North", "bubble", [], 4, 78, 75),
    # NFC South
    "TB": ("Tampa Bay Buccaneers", "#D50A0A", "7-7-0", "1st NFC South", "contender", [], 3, 80, 75),
    "CAR": ("Carolina Panthers", "#0085CA", "7-7-0", "2nd NFC South", "bubble", [], 3, 78, 72),
    "ATL": ("Atlanta Falcons", "#A71930", "5-9-0", "3rd NFC South", "eliminated", [], 4, 70, 68),
    "NO": ("New Orleans Saints", "#D3BC8D", "4-10-0", "4th NFC South", "eliminated", [], 5, 65, 65),
    # NFC East
    "PHI": ("Philadelphia Eagles", "#004C54", "9-5-0", "1st NFC East", "contender", [], 2, 90, 86),
    "DAL": ("Dallas Cowboys", "#003594", "6-7-1", "3rd NFC East", "bubble", [], 4, 75, 70),
    "WAS": ("Washington Commanders", "#5A1414", "4-10-0", "3rd NFC East", "eliminated", [], 4, 70, 68),
    "NYG": ("New York Giants", "#0B2265", "2-12-0", "4th NFC East", "eliminated", [], 5, 60, 60),
}

_LOGO_SLUGS = {"WAS": "wsh"}


def _build_team(abbr: str, row: tuple) -> Team:
    name, color, record, standing, status, injuries = row[:6]
    return Team(
        id=abbr,
        name=name,
        abbreviation=abbr,
        logo_url=LOGO_URL.format(slug=_LOGO_SLUGS.get(abbr, abbr.lower())),
        color=color,
        record=record,
        status=status,
        key_injuries=list(injuries),
        standing=standing,
    )


TEAMS: Dict[str, Team] = {abbr: _build_team(abbr, row) for abbr, row in _TEAM_ROWS.items()}

# abbr -> (tier, offense, defense) as calibrated before the live adjustments
BASELINE_RATINGS: Dict[str, Tuple[int, int, int]] = {
    abbr: (row[6], row[7], row[8]) for abbr, row in _TEAM_ROWS.items()
}

# ESPN uses a few abbreviations that differ from the dataset keys
ABBREVIATION_ALIASES = {"WSH": "WAS", "JAC": "JAX", "LA": "LAR"}

DOME_VENUES = {
    "Lucas Oil Stadium",
    "Ford Field",
    "Caesars Superdome",
    "State Farm Stadium",
    "NRG Stadium",
    "AT&T Stadium",
    "U.S. Bank Stadium",
    "Allegiant Stadium",
    "SoFi Stadium",
    "Mercedes-Benz Stadium",
}

# (game id, date, venue, away, home, spread, total, public %)
_WEEK_16_ROWS: List[tuple] = [
    ("w16-1", "Thu, Dec 18 • 8:15 PM ET", "Lumen Field", "LAR", "SEA", "SEA -1.5", 47.5, 55),
    ("w16-2", "Sat, Dec 20 • 5:00 PM ET", "FedExField", "PHI", "WAS", "PHI -9.5", 44.0, 82),
    ("w16-3", "Sat, Dec 20 • 8:20 PM ET", "Soldier Field", "GB", "CHI", "CHI -2.5", 41.5, 60),
    ("w16-4", "Sun, Dec 21 • 1:00 PM ET", "M&T Bank Stadium", "NE", "BAL", "NE -3.0", 43.0, 58),
    ("w16-5", "Sun, Dec 21 • 1:00 PM ET", "Bank of America Stadium", "TB", "CAR", "CAR -1.0", 39.5, 45),
    ("w16-6", "Sun, Dec 21 • 1:00 PM ET", "Cleveland Browns Stadium", "BUF", "CLE", "BUF -13.5", 45.0, 90),
    ("w16-7", "Sun, Dec 21 • 1:00 PM ET", "AT&T Stadium", "LAC", "DAL", "LAC -6.5", 48.5, 75),
    ("w16-8", "Sun, Dec 21 • 1:00 PM ET", "Caesars Superdome", "NYJ", "NO", "NO -2.5", 36.0, 40),
    ("w16-9", "Sun, Dec 21 • 1:00 PM ET", "MetLife Stadium", "MIN", "NYG", "MIN -7.0", 40.5, 85),
    ("w16-10", "Sun, Dec 21 • 1:00 PM ET", "Nissan Stadium", "KC", "TEN", "KC -3.5", 38.0, 65),
    ("w16-11", "Sun, Dec 21 • 1:00 PM ET", "Hard Rock Stadium", "CIN", "MIA", "MIA -4.0", 42.5, 70),
    ("w16-12", "Sun, Dec 21 • 4:05 PM ET", "State Farm Stadium", "ATL", "ARI", "ATL -3.0", 44.0, 60),
    ("w16-13", "Sun, Dec 21 • 4:05 PM ET", "Empower Field at Mile High", "JAX", "DEN", "DEN -5.5", 46.5, 72),
    ("w16-14", "Sun, Dec 21 • 4:25 PM ET", "Ford Field", "PIT", "DET", "DET -4.5", 49.0, 68),
    ("w16-15", "Sun, Dec 21 • 4:25 PM ET", "NRG Stadium", "LV", "HOU", "HOU -10.5", 43.5, 88),
    ("w16-16", "Mon, Dec 22 • 8:15 PM ET", "Lucas Oil Stadium", "SF", "IND", "SF -6.0", 45.5, 78),
]

STATIC_SEASON = 2025
STATIC_WEEK = 16


def team_by_abbreviation(abbr: Optional[str]) -> Optional[Team]:
    """Return a copy of the dataset team for ``abbr`` (ESPN aliases accepted)."""

    if not abbr:
        return None
    key = abbr.strip().upper()
    key = ABBREVIATION_ALIASES.get(key, key)
    team = TEAMS.get(key)
    return copy.deepcopy(team) if team else None


def all_teams() -> List[Team]:
    return [copy.deepcopy(team) for team in TEAMS.values()]


def static_schedule() -> List[Game]:
    """Return fresh copies of the Week 16 games (callers may mutate them)."""

    games: List[Game] = []
    for game_id, date, venue, away, home, spread, total, public_pct in _WEEK_16_ROWS:
        games.append(
            Game(
                id=game_id,
                week=STATIC_WEEK,
                date=date,
                venue=venue,
                home_team=copy.deepcopy(TEAMS[home]),
                away_team=copy.deepcopy(TEAMS[away]),
                betting=BettingData(spread=spread, total=float(total), public_betting_pct=float(public_pct)),
            )
        )
    return games
