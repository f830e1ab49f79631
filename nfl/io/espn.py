"""Client helpers for the public ESPN scoreboard and news feeds."""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from nfl.config import FeedSettings
from nfl.models import BettingData, Game, NewsArticle, QBStats, Team
from nfl.teams import STATIC_SEASON, STATIC_WEEK, static_schedule, team_by_abbreviation

logger = logging.getLogger(__name__)

USER_AGENT = "medi-picks/0.1"
LIVE_SOURCE = "ESPN_SCOREBOARD"
STATIC_SOURCE = "STATIC_FALLBACK"

_QB_LINE = re.compile(
    r"(?P<yds>[\d,]+)\s*YDS.*?(?P<td>\d+)\s*TD.*?(?P<int>\d+)\s*INT",
    re.IGNORECASE,
)


class ESPNError(RuntimeError):
    """Raised when a request to an ESPN feed fails."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _to_int(value: Any) -> int:
    try:
        return int(float(str(value).replace(",", "")))
    except (TypeError, ValueError):
        return 0


class ESPNClient:
    """Minimal helper around the ESPN site API with bounded retries."""

    def __init__(self, settings: Optional[FeedSettings] = None, *, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or FeedSettings()
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json", "User-Agent": USER_AGENT})

    def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.settings.timeout)
        except requests.RequestException as exc:
            raise ESPNError(f"Request to {url} failed: {exc}") from exc
        if response.status_code >= 400:
            raise ESPNError(f"ESPN returned HTTP {response.status_code} for {url}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as exc:
            raise ESPNError(f"Invalid JSON returned by {url}: {response.text[:200]}") from exc

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        attempts = max(1, int(self.settings.retry_attempts))
        attempt = 0
        while True:
            try:
                return self._request(url, params)
            except ESPNError as exc:
                attempt += 1
                if attempt >= attempts:
                    raise
                sleep_for = self.settings.retry_backoff * attempt
                logger.warning(
                    "ESPN request failed (%s). Retrying in %.1fs (attempt %d/%d).",
                    exc,
                    sleep_for,
                    attempt,
                    attempts,
                )
                time.sleep(sleep_for)

    def scoreboard(self, *, week: Optional[int] = None, season: Optional[int] = None) -> dict:
        params: Dict[str, Any] = {}
        if week is not None:
            params["week"] = int(week)
        if season is not None:
            params["dates"] = int(season)
        payload = self.get(self.settings.scoreboard_url, params or None)
        if not isinstance(payload, dict):
            raise ESPNError("Unexpected scoreboard payload from ESPN.")
        return payload

    def news(self, *, limit: int = 50) -> dict:
        payload = self.get(self.settings.news_url, {"limit": int(limit)})
        if not isinstance(payload, dict):
            raise ESPNError("Unexpected news payload from ESPN.")
        return payload


def _parse_qb(competitor: dict) -> Optional[QBStats]:
    for category in competitor.get("leaders", []) or []:
        if category.get("name") not in {"passingYards", "passing"}:
            continue
        for leader in category.get("leaders", []) or []:
            match = _QB_LINE.search(str(leader.get("displayValue") or ""))
            if not match:
                continue
            athlete = leader.get("athlete") or {}
            return QBStats(
                passing_yards=_to_int(match.group("yds")),
                passing_tds=_to_int(match.group("td")),
                interceptions=_to_int(match.group("int")),
                name=athlete.get("displayName") or athlete.get("shortName"),
            )
    return None


def _parse_team(competitor: dict, state: str) -> Team:
    raw = competitor.get("team") or {}
    abbreviation = str(raw.get("abbreviation") or "").upper()
    known = team_by_abbreviation(abbreviation)
    records = competitor.get("records") or []
    record = records[0].get("summary") if records else None
    color = raw.get("color") or ""
    if color and not color.startswith("#"):
        color = f"#{color}"

    team = Team(
        id=str(raw.get("id") or abbreviation),
        name=raw.get("displayName") or raw.get("name") or (known.name if known else abbreviation),
        abbreviation=known.abbreviation if known else abbreviation,
        logo_url=raw.get("logo") or (known.logo_url if known else ""),
        color=color or (known.color if known else ""),
        record=record or (known.record if known else "0-0"),
        status=known.status if known else "bubble",
        key_injuries=list(known.key_injuries) if known else [],
        standing=known.standing if known else "",
        qb_stats=_parse_qb(competitor),
    )
    if state != "pre" and competitor.get("score") not in (None, ""):
        team.score = _to_int(competitor.get("score"))
    return team


def _parse_odds(competition: dict) -> Optional[BettingData]:
    odds = competition.get("odds") or []
    if not odds:
        return None
    line = odds[0]
    spread = str(line.get("details") or "").strip()
    total = line.get("overUnder")
    if not spread and total is None:
        return None
    try:
        total_value = float(total)
    except (TypeError, ValueError):
        total_value = 0.0
    return BettingData(spread=spread, total=total_value, public_betting_pct=50.0)


def normalize_event(event: dict, *, default_week: int = 0) -> Optional[Game]:
    competitions = event.get("competitions") or []
    if not competitions:
        return None
    competition = competitions[0]
    status = competition.get("status") or event.get("status") or {}
    status_type = status.get("type") or {}
    state = status_type.get("state") or "pre"
    if state not in {"pre", "in", "post"}:
        state = "pre"

    home_raw = away_raw = None
    for competitor in competition.get("competitors", []) or []:
        if competitor.get("homeAway") == "home":
            home_raw = competitor
        elif competitor.get("homeAway") == "away":
            away_raw = competitor
    if home_raw is None or away_raw is None:
        return None

    week = (event.get("week") or {}).get("number") or default_week
    venue = (competition.get("venue") or {}).get("fullName") or ""
    return Game(
        id=str(event.get("id")),
        week=_to_int(week),
        date=str(event.get("date") or competition.get("date") or ""),
        venue=venue,
        home_team=_parse_team(home_raw, state),
        away_team=_parse_team(away_raw, state),
        status=state,
        clock=status_type.get("shortDetail") or status_type.get("detail"),
        betting=_parse_odds(competition),
    )


def normalize_scoreboard(payload: dict) -> dict:
    """Normalise a scoreboard response into ``{"meta": ..., "data": [Game]}``."""

    season = (payload.get("season") or {}).get("year")
    week = (payload.get("week") or {}).get("number")
    games: List[Game] = []
    for event in payload.get("events", []) or []:
        game = normalize_event(event, default_week=_to_int(week))
        if game is None:
            logger.debug("Skipping malformed scoreboard event %s", event.get("id"))
            continue
        games.append(game)
    states = {game.status for game in games}
    return {
        "meta": {
            "season": _to_int(season),
            "week": _to_int(week),
            "status": "LIVE" if "in" in states else ("FINAL" if states == {"post"} else "SCHEDULED"),
            "timestamp": _now_iso(),
            "source": LIVE_SOURCE,
        },
        "data": games,
    }


def static_payload() -> dict:
    return {
        "meta": {
            "season": STATIC_SEASON,
            "week": STATIC_WEEK,
            "status": "STATIC",
            "timestamp": _now_iso(),
            "source": STATIC_SOURCE,
        },
        "data": static_schedule(),
    }


def fetch_schedule(
    client: Optional[ESPNClient] = None,
    *,
    use_live: Optional[bool] = None,
    week: Optional[int] = None,
) -> dict:
    """Current games, live when possible and the static week otherwise.

    Never raises: a failed or malformed live fetch is logged and the static
    snapshot is returned instead.
    """

    client = client or ESPNClient()
    live = client.settings.use_live if use_live is None else use_live
    if not live:
        return static_payload()
    try:
        return normalize_scoreboard(client.scoreboard(week=week))
    except ESPNError as exc:
        logger.warning("Scoreboard fetch failed; serving static schedule: %s", exc)
        return static_payload()


def parse_articles(payload: dict) -> List[NewsArticle]:
    articles: List[NewsArticle] = []
    for raw in payload.get("articles", []) or []:
        headline = str(raw.get("headline") or "").strip()
        if not headline:
            continue
        team_ids: List[str] = []
        for category in raw.get("categories", []) or []:
            if category.get("type") != "team":
                continue
            team_id = category.get("teamId") or (category.get("team") or {}).get("id")
            if team_id is not None:
                team_ids.append(str(team_id))
        articles.append(
            NewsArticle(
                headline=headline,
                description=str(raw.get("description") or "").strip(),
                published=raw.get("published"),
                team_ids=tuple(team_ids),
            )
        )
    return articles


def fetch_news(client: Optional[ESPNClient] = None, *, limit: int = 50) -> List[NewsArticle]:
    """League news articles; an empty list when the feed is unavailable."""

    client = client or ESPNClient()
    try:
        return parse_articles(client.news(limit=limit))
    except ESPNError as exc:
        logger.warning("News fetch failed; continuing without news: %s", exc)
        return []
