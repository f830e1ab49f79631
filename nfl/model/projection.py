"""Matchup projection engine.

Blends the market-implied score (spread/total), the dynamic team ratings,
injury penalties, a news-impact modifier and a seeded variance term into
integer scores, then derives confidence, leverage and trap-game signals and
hands everything to the narrative generator.

Every random draw comes from one generator seeded by the game id, consumed
in a fixed order (variance, weather, narrative variants), so a game always
projects to the same output.
"""

from __future__ import annotations

import hashlib
import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from nfl import narrative
from nfl.config import EngineSettings, Settings
from nfl.injuries import injury_point_penalty
from nfl.market import elo_win_prob, implied_scores, market_line, win_prob_from_spread
from nfl.models import AnalysisResult, Game, Leverage, NewsArticle, Team, TeamRating, Weather
from nfl.news import generate_team_news, matchup_news, news_impact
from nfl.teams import all_teams
from nfl.weather import forecast_for, total_adjustment

from .rating import rate_team

logger = logging.getLogger(__name__)

TIE_BREAK_POINTS = 3


@dataclass(frozen=True)
class Projection:
    home_score: int
    away_score: int
    winner: str
    market_spread: float
    market_total: float
    home_win_prob: float
    confidence: int

    @property
    def margin(self) -> int:
        return abs(self.home_score - self.away_score)

    @property
    def model_spread(self) -> float:
        return float(self.home_score - self.away_score)

    @property
    def home_wins(self) -> bool:
        return self.home_score > self.away_score


def variance_rng(game_id: str, salt: str) -> np.random.Generator:
    """Generator keyed by ``game_id``; identical across calls and processes."""

    digest = hashlib.sha256(f"{game_id}:{salt}".encode("utf-8")).digest()
    return np.random.default_rng(int.from_bytes(digest[:8], "big"))


def variance_points(rng: np.random.Generator, spread: float) -> float:
    """Symmetric perturbation in ``[-spread, spread)``."""

    return float(rng.random()) * 2.0 * spread - spread


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round a raw projection to a legal football score."""

    score = round_half_up(value)
    if score < 0:
        return 0
    if score == 1:
        return 0
    if score == 4:
        return 3
    return score


def elo_for(rating: TeamRating, engine: EngineSettings) -> float:
    return engine.elo_base + engine.elo_per_point * (rating.offense + rating.defense) / 2.0


def confidence_for(margin: float, home_win_prob: float, engine: EngineSettings) -> int:
    confidence = min(99, round_half_up(50 + abs(margin) * engine.confidence_multiplier))
    if engine.no_bet_low <= home_win_prob <= engine.no_bet_high:
        confidence = min(confidence, engine.no_bet_confidence_cap)
    return confidence


def project_scores(
    game: Game,
    home_rating: TeamRating,
    away_rating: TeamRating,
    home_news: Iterable = (),
    away_news: Iterable = (),
    *,
    engine: Optional[EngineSettings] = None,
    rng: Optional[np.random.Generator] = None,
) -> Projection:
    engine = engine or EngineSettings()
    if rng is None:
        rng = variance_rng(game.id, engine.variance_salt)

    spread, total = market_line(game, default_total=engine.default_total)
    implied_home, implied_away = implied_scores(spread, total)

    home_edge = (home_rating.offense - away_rating.defense) / 4.0
    away_edge = (away_rating.offense - home_rating.defense) / 4.0

    home_raw = (
        implied_home
        + home_edge
        - injury_point_penalty(game.home_team.key_injuries)
        + news_impact(home_news)
    )
    away_raw = (
        implied_away
        + away_edge
        - injury_point_penalty(game.away_team.key_injuries)
        + news_impact(away_news)
    )

    swing = variance_points(rng, engine.variance_points)
    home_score = clamp_score(home_raw + swing)
    away_score = clamp_score(away_raw - swing)

    if home_score == away_score:
        # Better offense takes the tie; identical offenses fall to the market
        # favourite, and a pick'em between equals goes to the visitor.
        if home_rating.offense != away_rating.offense:
            home_takes_tie = home_rating.offense > away_rating.offense
        else:
            home_takes_tie = spread > 0
        if home_takes_tie:
            home_score += TIE_BREAK_POINTS
        else:
            away_score += TIE_BREAK_POINTS

    winner = game.home_team.name if home_score > away_score else game.away_team.name
    margin = home_score - away_score
    elo_prob = elo_win_prob(
        elo_for(home_rating, engine),
        elo_for(away_rating, engine),
        engine.elo_home_field,
    )
    home_win_prob = (elo_prob + win_prob_from_spread(margin, engine.margin_sigma)) / 2.0

    return Projection(
        home_score=home_score,
        away_score=away_score,
        winner=winner,
        market_spread=spread,
        market_total=total,
        home_win_prob=home_win_prob,
        confidence=confidence_for(margin, home_win_prob, engine),
    )


def _bounded(value: float, lo: float, hi: float) -> int:
    return int(round_half_up(float(np.clip(value, lo, hi))))


def explosiveness(home: TeamRating, away: TeamRating, total: float, weather: Optional[Weather] = None) -> int:
    """0-99 shootout potential from offensive quality and the market total."""

    value = (home.offense + away.offense) / 2.0 - 10.0
    if total > 46:
        value += (total - 46) * 2.0
    elif total < 40:
        value -= (40 - total) * 2.0
    if abs(home.offense - away.offense) >= 15:
        value += 5.0
    if weather is not None:
        value += total_adjustment(weather)
    return _bounded(value, 0, 99)


def execution(confidence: int, home: TeamRating, away: TeamRating) -> int:
    """0-99 blend of projection confidence and the two teams' tier quality."""

    tier_quality = (6.0 - (home.tier + away.tier) / 2.0) * 20.0
    return _bounded(0.5 * confidence + 0.5 * tier_quality, 0, 99)


def _qb_index(rating: TeamRating) -> float:
    return rating.offense + rating.qb_boost - (10 if rating.qb_out else 0)


def leverage(home: TeamRating, away: TeamRating, engine: Optional[EngineSettings] = None) -> Leverage:
    engine = engine or EngineSettings()
    return Leverage(
        offense=_bounded(50 + (home.offense - away.offense) * engine.leverage_offense, 5, 95),
        defense=_bounded(50 + (home.defense - away.defense) * engine.leverage_defense, 5, 95),
        qb=_bounded(50 + (_qb_index(home) - _qb_index(away)) * engine.leverage_qb, 5, 95),
    )


def jinx(
    game: Game,
    projection: Projection,
    home: TeamRating,
    away: TeamRating,
) -> tuple[int, str, int]:
    """Trap-game score (1-10), its justification and the upset probability (%)."""

    if projection.market_spread != 0:
        home_favored = projection.market_spread > 0
    else:
        home_favored = projection.home_wins
    favorite, underdog = (
        (game.home_team, game.away_team) if home_favored else (game.away_team, game.home_team)
    )
    fav_rating, dog_rating = (home, away) if home_favored else (away, home)

    score = 1
    reasons: List[str] = []
    if projection.margin <= 3:
        score += 3
        reasons.append("the projection is a coin flip")
    elif projection.margin <= 7:
        score += 2
        reasons.append("the projected margin is inside one score")
    if game.betting and game.betting.public_betting_pct >= 70:
        score += 2
        reasons.append(f"{game.betting.public_betting_pct:.0f}% of public money is riding the favourite")
    if favorite.status == "clinched":
        score += 2
        reasons.append(f"{favorite.name} have already clinched and may rest starters")
    if underdog.status == "eliminated" and favorite.status != "eliminated":
        score += 1
        reasons.append(f"{underdog.name} are playing spoiler with nothing to lose")
    elif underdog.status == "bubble":
        score += 1
        reasons.append(f"{underdog.name} are fighting for their playoff lives")
    if not home_favored:
        score += 1
        reasons.append(f"{favorite.name} have to win on the road")
    if fav_rating.tier >= dog_rating.tier:
        score += 1
        reasons.append("the tiers say these teams are closer than the line")
    if projection.market_spread != 0 and home_favored != projection.home_wins:
        score += 2
        reasons.append(f"the model has {underdog.name} winning outright")

    score = max(1, min(10, score))
    if reasons:
        analysis = "Trap signals: " + "; ".join(reasons) + "."
    else:
        analysis = f"No trap signals. {favorite.name} should handle business."

    fav_prob = projection.home_win_prob if home_favored else 1.0 - projection.home_win_prob
    upset = round_half_up(100 * (1.0 - fav_prob))
    return score, analysis, max(0, min(100, upset))


def key_factors(game: Game, projection: Projection, lev: Leverage) -> List[str]:
    factors: List[str] = []
    if game.betting:
        winner_margin = projection.model_spread if projection.home_wins else -projection.model_spread
        winner_line = projection.market_spread if projection.home_wins else -projection.market_spread
        covers = winner_margin > winner_line
        factors.append(f"ATS Lean: {'Likely Cover' if covers else 'Trap Line'}")
        projected_total = projection.home_score + projection.away_score
        side = "Over" if projected_total > projection.market_total else "Under"
        factors.append(f"Total Lean: {side} {projection.market_total:g}")
    if lev.qb >= 55:
        factors.append(f"QB Edge: {game.home_team.abbreviation}")
    elif lev.qb <= 45:
        factors.append(f"QB Edge: {game.away_team.abbreviation}")
    else:
        factors.append("QB Edge: Even")
    injuries = game.home_team.key_injuries + game.away_team.key_injuries
    if injuries:
        factors.append(f"Injury Watch: {injuries[0]}")
    factors.append("Turnover Margin")
    return factors


def quick_take(projection: Projection, explosive: int, jinx_score: int) -> str:
    if explosive >= 80:
        return "Shootout Alert"
    if jinx_score >= 7:
        return "Trap Game"
    if projection.margin > 10:
        return "Mismatch"
    if projection.margin <= 3:
        return "Coin Flip"
    return "Close Game"


def injury_impact(game: Game) -> str:
    home_pen = injury_point_penalty(game.home_team.key_injuries)
    away_pen = injury_point_penalty(game.away_team.key_injuries)
    if not home_pen and not away_pen:
        return "Clean bill of health."
    parts = []
    for team, penalty in ((game.home_team, home_pen), (game.away_team, away_pen)):
        if penalty:
            parts.append(f"{team.abbreviation} -{penalty} pts ({', '.join(team.key_injuries)})")
    return "Significant injury impact: " + "; ".join(parts) + "."


def _fetch_news_safely(news_fetcher: Callable[[], Iterable[NewsArticle]]) -> List[NewsArticle]:
    try:
        return list(news_fetcher())
    except Exception as exc:  # any feed failure degrades to "no news"
        logger.warning("News fetch failed; projecting without news: %s", exc)
        return []


def analyze_matchup(
    game: Game,
    *,
    news: Optional[Iterable[NewsArticle]] = None,
    teams: Optional[Sequence[Team]] = None,
    settings: Optional[Settings] = None,
    news_fetcher: Optional[Callable[[], Iterable[NewsArticle]]] = None,
) -> AnalysisResult:
    """Full analysis for one game; a pure function of its inputs."""

    settings = settings or Settings()
    engine = settings.engine
    teams = list(teams) if teams is not None else all_teams()
    if news is None:
        news = _fetch_news_safely(news_fetcher) if news_fetcher is not None else []

    home, away = game.home_team, game.away_team
    home_news, away_news = matchup_news(news, home, away, teams)
    home_rating = rate_team(home, home_news)
    away_rating = rate_team(away, away_news)

    rng = variance_rng(game.id, engine.variance_salt)
    projection = project_scores(
        game, home_rating, away_rating, home_news, away_news, engine=engine, rng=rng
    )
    weather = forecast_for(game, rng)
    lev = leverage(home_rating, away_rating, engine)
    explosive = explosiveness(home_rating, away_rating, projection.market_total, weather)
    jinx_score, jinx_analysis, upset = jinx(game, projection, home_rating, away_rating)

    story = narrative.build_narrative(
        game,
        projection,
        home_rating,
        away_rating,
        lev,
        home_news=home_news,
        away_news=away_news,
        teams=teams,
        rng=rng,
    )

    latest = [f"[{home.abbreviation}] {item.headline}" for item in home_news]
    latest += [f"[{away.abbreviation}] {item.headline}" for item in away_news]
    latest += [f"[{home.abbreviation}] {line}" for line in generate_team_news(home, game.id)]
    latest += [f"[{away.abbreviation}] {line}" for line in generate_team_news(away, game.id)]

    result = AnalysisResult(
        game_id=game.id,
        winner_prediction=projection.winner,
        home_score_prediction=projection.home_score,
        away_score_prediction=projection.away_score,
        confidence_score=projection.confidence,
        summary=f"{projection.winner} wins {max(projection.home_score, projection.away_score)}-"
        f"{min(projection.home_score, projection.away_score)}",
        narrative=story,
        key_factors=key_factors(game, projection, lev),
        jinx_score=jinx_score,
        jinx_analysis=jinx_analysis,
        upset_probability=upset,
        execution_rating=execution(projection.confidence, home_rating, away_rating),
        explosive_rating=explosive,
        quick_take=quick_take(projection, explosive, jinx_score),
        weather=weather,
        leverage=lev,
        injury_impact=injury_impact(game),
        home_rating=home_rating,
        away_rating=away_rating,
        market_spread=projection.market_spread,
        market_total=projection.market_total,
        model_spread=projection.model_spread,
        home_win_prob=round(projection.home_win_prob, 4),
        latest_news=latest,
    )
    if game.is_final and game.home_team.score is not None and game.away_team.score is not None:
        result.retrospective = narrative.retrospective(game, projection.winner)
    return result
