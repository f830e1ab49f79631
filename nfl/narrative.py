"""Rule-based matchup write-ups.

Each section picks a template family from thresholds on the projection
(status combination, rating gap, market edge, news availability) and then a
variant inside the family from the game-seeded generator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from .models import Game, Leverage, NewsArticle, Retrospective, Team, TeamRating
from .names import names_third_team
from .news import generate_team_news
from .teams import BASELINE_RATINGS

if TYPE_CHECKING:
    from .model.projection import Projection

FILLER = "Both sidelines are keeping their cards close to the vest this week."

_STAKES = {
    "playoff_preview": [
        "This has the feel of a January preview. {home} and {away} are both playing for seeding, and neither staff will be saving anything for later.",
        "Two postseason teams, one statement. {away} visit {home} with home-field tiebreakers hanging on every possession.",
    ],
    "spoiler": [
        "{contender} need this one; {spoiler} would love nothing more than to wreck their December.",
        "Nothing to lose is a dangerous mindset. {spoiler} are out of it, and {contender} cannot afford a slip.",
    ],
    "elimination": [
        "Win or go home, two weeks early. {home} and {away} are both hanging on the playoff bubble.",
        "The loser of this one is likely booking tee times. {away} at {home} is an elimination game in all but name.",
    ],
    "draft": [
        "Pride and draft position are all that remain for {home} and {away}. Expect young players to get long looks.",
        "Neither {home} nor {away} is playing for January, which makes this a tape-evaluation game for both front offices.",
    ],
    "default": [
        "{away} travel to {venue} with something to prove, and {home} will not make it easy.",
        "Week {week} at {venue}: {home} host {away} in a game with more on the line than the standings suggest.",
    ],
}

_CONTENDING = {"clinched", "contender"}


def safe_snippet(snippet: Optional[str], home: Team, away: Team, teams: Sequence[Team]) -> str:
    """Return ``snippet`` unless it names a team outside this matchup."""

    if not snippet or names_third_team(snippet, home, away, teams):
        return FILLER
    return snippet


def _pick(rng: np.random.Generator, options: Sequence[str]) -> str:
    return options[int(rng.integers(len(options)))]


def stakes(game: Game, rng: np.random.Generator) -> str:
    home, away = game.home_team, game.away_team
    statuses = {home.status, away.status}
    fields = {
        "home": home.name,
        "away": away.name,
        "venue": game.venue,
        "week": game.week,
    }
    if home.status in _CONTENDING and away.status in _CONTENDING:
        family = "playoff_preview"
    elif "eliminated" in statuses and statuses - {"eliminated"}:
        family = "spoiler"
        contender = away if home.status == "eliminated" else home
        spoiler = home if contender is away else away
        fields.update(contender=contender.name, spoiler=spoiler.name)
    elif statuses == {"bubble"}:
        family = "elimination"
    elif statuses == {"eliminated"}:
        family = "draft"
    else:
        family = "default"
    return _pick(rng, _STAKES[family]).format(**fields)


def _qb_label(team: Team) -> str:
    stats = team.qb_stats
    if stats is not None and stats.name:
        return f"{stats.name} ({team.abbreviation})"
    return f"the {team.nickname} quarterback"


def qb_duel(game: Game, home: TeamRating, away: TeamRating, lev: Leverage, rng: np.random.Generator) -> str:
    home_qb = _qb_label(game.home_team)
    away_qb = _qb_label(game.away_team)
    if home.qb_out and away.qb_out:
        return f"Backups on both sidelines. With {home_qb} and {away_qb} both sidelined, expect a conservative, run-first script."
    if home.qb_out or away.qb_out:
        missing, healthy = (home_qb, away_qb) if home.qb_out else (away_qb, home_qb)
        return f"The biggest swing in this game is who is not playing. {missing} is out, and {healthy} has a real edge under center."
    if lev.qb >= 60 or lev.qb <= 40:
        edge, other = (home_qb, away_qb) if lev.qb >= 60 else (away_qb, home_qb)
        share = lev.qb if lev.qb >= 60 else 100 - lev.qb
        options = [
            f"{edge} holds a {share}% leverage share in the passing game. {other} has to keep pace without turning it over.",
            f"Under center this is a clear mismatch: {edge} over {other}, a {share}-{100 - share} split.",
        ]
        return _pick(rng, options)
    options = [
        f"{home_qb} and {away_qb} grade out nearly even. Whoever protects the ball wins this duel.",
        f"No separation at quarterback. {away_qb} versus {home_qb} is a wash on paper.",
    ]
    return _pick(rng, options)


def _baseline_note(team: Team, rating: TeamRating) -> str:
    baseline = BASELINE_RATINGS.get(team.abbreviation)
    if baseline is None:
        return ""
    delta = rating.offense - baseline[1]
    if delta >= 5:
        return f" The {team.nickname} offense is running {delta} points hotter than its preseason calibration."
    if delta <= -5:
        return f" The {team.nickname} offense has slipped {-delta} points below its preseason calibration."
    return ""


def unit_matchup(game: Game, home: TeamRating, away: TeamRating, rng: np.random.Generator) -> str:
    home_gap = home.offense - away.defense
    away_gap = away.offense - home.defense
    swing = home_gap - away_gap
    home_name, away_name = game.home_team.nickname, game.away_team.nickname
    if abs(swing) >= 15:
        better = home_name if swing > 0 else away_name
        text = _pick(
            rng,
            [
                f"The unit ratings are lopsided. The {better} win both sides of the ball by a wide margin ({abs(swing)}-point swing).",
                f"Talent gap alert: a {abs(swing)}-point rating swing favours the {better} in the trenches and on the perimeter.",
            ],
        )
    elif abs(swing) >= 6:
        better = home_name if swing > 0 else away_name
        text = _pick(
            rng,
            [
                f"The {better} hold a modest edge when each offense is matched against the opposing defense ({abs(swing)} points).",
                f"Matchup math leans {better}: their offense-versus-defense gap is {abs(swing)} points better.",
            ],
        )
    else:
        text = _pick(
            rng,
            [
                f"Offense {home.offense} vs defense {away.defense} on one side, {away.offense} vs {home.defense} on the other. Dead even.",
                "The unit grades cancel out. This will be decided by turnovers and special teams.",
            ],
        )
    return text + _baseline_note(game.home_team, home) + _baseline_note(game.away_team, away)


def market_value(game: Game, projection: "Projection", rng: np.random.Generator) -> str:
    if game.betting is None:
        return f"No line is posted yet; the model makes it {_margin_phrase(game, projection)}."
    edge = projection.model_spread - projection.market_spread
    line = game.betting.spread
    if abs(edge) < 1.5:
        return _pick(
            rng,
            [
                f"Vegas set the line at {line}, and the model lands right on top of it: {_margin_phrase(game, projection)}.",
                f"No value here. The market ({line}) and the model ({_margin_phrase(game, projection)}) agree.",
            ],
        )
    side = game.home_team.name if edge > 0 else game.away_team.name
    if abs(edge) < 4:
        return f"The model leans {side} against the {line} number, projecting {_margin_phrase(game, projection)}, a {abs(edge):.1f}-point edge."
    return _pick(
        rng,
        [
            f"Value alert: the line is {line} but the model projects {_margin_phrase(game, projection)}. That is a {abs(edge):.1f}-point gap toward {side}.",
            f"The market is off by {abs(edge):.1f} points. {side} is the side against {line}.",
        ],
    )


def _margin_phrase(game: Game, projection: "Projection") -> str:
    if projection.home_wins:
        return f"{game.home_team.abbreviation} by {projection.margin}"
    return f"{game.away_team.abbreviation} by {projection.margin}"


def x_factor(
    game: Game,
    home_news: Sequence[NewsArticle],
    away_news: Sequence[NewsArticle],
    teams: Sequence[Team],
    rng: np.random.Generator,
) -> str:
    home, away = game.home_team, game.away_team
    wire = [(home, item.headline) for item in home_news] + [(away, item.headline) for item in away_news]
    if wire:
        team, headline = wire[int(rng.integers(len(wire)))]
        snippet = safe_snippet(headline, home, away, teams)
        return f"Keep an eye on the {team.nickname}: \"{snippet}\""
    generated = generate_team_news(home, game.id) + generate_team_news(away, game.id)
    injury_lines = [line for line in generated if "Blow" in line or "pitch count" in line or "looming" in line]
    if injury_lines:
        return safe_snippet(injury_lines[0], home, away, teams)
    return safe_snippet(_pick(rng, generated), home, away, teams) if generated else FILLER


def verdict(game: Game, projection: "Projection") -> str:
    high = max(projection.home_score, projection.away_score)
    low = min(projection.home_score, projection.away_score)
    if projection.confidence >= 75:
        tone = "comfortably"
    elif projection.confidence <= 45:
        tone = "in a game that could go either way"
    else:
        tone = "in a competitive one"
    injured = game.home_team if projection.home_wins else game.away_team
    lead = f"Despite injuries to {injured.key_injuries[0]}, the" if injured.key_injuries else "The"
    return f"{lead} {projection.winner} prevail {high}-{low} {tone}. Confidence: {projection.confidence}/99."


def build_narrative(
    game: Game,
    projection: "Projection",
    home: TeamRating,
    away: TeamRating,
    lev: Leverage,
    *,
    home_news: Sequence[NewsArticle] = (),
    away_news: Sequence[NewsArticle] = (),
    teams: Sequence[Team] = (),
    rng: Optional[np.random.Generator] = None,
) -> str:
    rng = rng if rng is not None else np.random.default_rng(0)
    sections = [
        ("The Stakes", stakes(game, rng)),
        ("QB Duel", qb_duel(game, home, away, lev, rng)),
        ("Unit Matchup", unit_matchup(game, home, away, rng)),
        ("Market Watch", market_value(game, projection, rng)),
        ("X-Factor", x_factor(game, home_news, away_news, teams, rng)),
        ("The Verdict", verdict(game, projection)),
    ]
    return "\n\n".join(f"**{title}:** {body}" for title, body in sections)


def retrospective(game: Game, predicted_winner: str) -> Retrospective:
    """Post-game look back for a final game."""

    home, away = game.home_team, game.away_team
    home_score = home.score or 0
    away_score = away.score or 0
    winner, loser = (home, away) if home_score > away_score else (away, home)
    margin = abs(home_score - away_score)
    result = f"Final: {away.abbreviation} {away_score}, {home.abbreviation} {home_score}"

    called = predicted_winner == winner.name
    if margin <= 3:
        key = f"{winner.name} survived a one-score finish"
    elif margin >= 14:
        key = f"{winner.name} controlled it wire to wire"
    else:
        key = f"{winner.name} made the key stops late against {loser.name}"
    key += ". The model called it." if called else ". The model missed this one."

    performers: List[str] = []
    for team in (winner, loser):
        stats = team.qb_stats
        if stats is not None and stats.name:
            performers.append(f"{stats.name} ({team.abbreviation})")
    if not performers:
        performers.append(f"{winner.name} defense")
    return Retrospective(result=result, key_to_victory=key, standout_performers=performers)
