from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from nfl.config import EngineSettings, Settings
from nfl.model import projection
from nfl.model.projection import (
    analyze_matchup,
    clamp_score,
    confidence_for,
    project_scores,
    variance_rng,
)
from nfl.model.rating import rate_team
from nfl.models import BettingData, Game, Team, TeamRating
from nfl.teams import static_schedule

ILLEGAL_SCORES = {1, 4}


def _plain_game(game_id: str = "g1") -> Game:
    return Game(
        id=game_id,
        week=1,
        date="Sun",
        venue="Somewhere Field",
        home_team=Team(id="HOM", name="Home Town Hosts", abbreviation="HOM"),
        away_team=Team(id="AWY", name="Away City Visitors", abbreviation="AWY"),
    )


def test_clamp_score_produces_legal_scores() -> None:
    assert clamp_score(-2.0) == 0
    assert clamp_score(1.2) == 0
    assert clamp_score(3.6) == 3
    assert clamp_score(2.4) == 2
    assert clamp_score(6.5) == 7
    assert clamp_score(27.49) == 27


def test_confidence_formula_and_no_bet_cap() -> None:
    engine = EngineSettings()
    assert confidence_for(20, 0.9, engine) == 99
    assert confidence_for(2, 0.8, engine) == 55
    assert confidence_for(-6, 0.2, engine) == 65
    assert confidence_for(3, 0.5, engine) == 45
    assert confidence_for(10, 0.59, engine) == 45


def test_variance_generator_is_keyed_by_game_id() -> None:
    first = variance_rng("w16-1", "salt").random(3)
    again = variance_rng("w16-1", "salt").random(3)
    other = variance_rng("w16-2", "salt").random(3)
    assert list(first) == list(again)
    assert list(first) != list(other)


def test_analysis_is_deterministic() -> None:
    game = static_schedule()[0]
    first = analyze_matchup(game, news=[])
    second = analyze_matchup(static_schedule()[0], news=[])
    assert first.to_dict() == second.to_dict()


def test_static_week_scores_are_legal_and_decisive() -> None:
    settings = Settings()
    for game in static_schedule():
        result = analyze_matchup(game, news=[], settings=settings)
        home, away = result.home_score_prediction, result.away_score_prediction
        assert home >= 0 and away >= 0
        assert home not in ILLEGAL_SCORES and away not in ILLEGAL_SCORES
        assert home != away
        expected = game.home_team.name if home > away else game.away_team.name
        assert result.winner_prediction == expected
        assert 1 <= result.confidence_score <= 99
        assert 1 <= result.jinx_score <= 10
        assert 0 <= result.upset_probability <= 100
        for share in (result.leverage.offense, result.leverage.defense, result.leverage.qb):
            assert 5 <= share <= 95
        assert result.retrospective is None


def test_confidence_capped_inside_no_bet_band() -> None:
    engine = EngineSettings()
    for game in static_schedule():
        home = rate_team(game.home_team)
        away = rate_team(game.away_team)
        proj = project_scores(game, home, away, engine=engine)
        if engine.no_bet_low <= proj.home_win_prob <= engine.no_bet_high:
            assert proj.confidence <= engine.no_bet_confidence_cap


def test_tie_goes_to_better_offense(monkeypatch) -> None:
    monkeypatch.setattr(projection, "variance_points", lambda rng, spread: 0.0)
    game = _plain_game()
    home = TeamRating(tier=3, offense=80, defense=76)
    away = TeamRating(tier=3, offense=76, defense=80)
    proj = project_scores(game, home, away)
    assert (proj.home_score, proj.away_score) == (25, 22)
    assert proj.winner == "Home Town Hosts"


def test_tie_between_equal_offenses_goes_to_visitor_on_pickem(monkeypatch) -> None:
    monkeypatch.setattr(projection, "variance_points", lambda rng, spread: 0.0)
    rating = TeamRating(tier=3, offense=80, defense=80)
    proj = project_scores(_plain_game(), rating, rating)
    assert (proj.home_score, proj.away_score) == (22, 25)
    assert proj.winner == "Away City Visitors"
    assert proj.market_total == pytest.approx(44.0)


def test_news_failure_degrades_to_no_news(caplog) -> None:
    def broken_feed():
        raise ConnectionError("feed down")

    game = static_schedule()[2]
    with caplog.at_level(logging.WARNING):
        result = analyze_matchup(game, news_fetcher=broken_feed)
    assert "News fetch failed" in caplog.text
    baseline = analyze_matchup(static_schedule()[2], news=[])
    assert result.home_score_prediction == baseline.home_score_prediction
    assert result.away_score_prediction == baseline.away_score_prediction


def test_final_game_gets_retrospective() -> None:
    game = static_schedule()[0]
    game.status = "post"
    game.home_team.score = 27
    game.away_team.score = 20
    result = analyze_matchup(game, news=[])
    assert result.retrospective is not None
    assert result.retrospective.result == "Final: LAR 20, SEA 27"
    assert "Seattle Seahawks" in result.retrospective.key_to_victory


def test_narrative_has_every_section() -> None:
    result = analyze_matchup(static_schedule()[5], news=[])
    for title in ("The Stakes", "QB Duel", "Unit Matchup", "Market Watch", "X-Factor", "The Verdict"):
        assert f"**{title}:**" in result.narrative
    assert result.summary.startswith(result.winner_prediction)


RATING_PAIRS = [
    (TeamRating(tier=3, offense=80, defense=80), TeamRating(tier=3, offense=80, defense=80)),
    (TeamRating(tier=1, offense=99, defense=50), TeamRating(tier=5, offense=50, defense=99)),
    (TeamRating(tier=5, offense=50, defense=99), TeamRating(tier=1, offense=99, defense=50)),
    (TeamRating(tier=5, offense=50, defense=50), TeamRating(tier=5, offense=50, defense=50)),
    (TeamRating(tier=1, offense=99, defense=99), TeamRating(tier=1, offense=99, defense=99)),
]


@pytest.mark.parametrize("ratings", RATING_PAIRS)
@pytest.mark.parametrize("spread", [None, "HOM -3.5", "AWY -14", "HOM -0.5"])
@pytest.mark.parametrize("total", [1.0, 3.0, 20.0, 44.0, 55.0])
def test_projection_sweep_stays_legal(ratings, spread, total) -> None:
    home_rating, away_rating = ratings
    for index in range(12):
        game = _plain_game(f"sweep-{index}")
        if spread is not None:
            game.betting = BettingData(spread=spread, total=total)
        proj = project_scores(game, home_rating, away_rating)
        assert proj.home_score >= 0 and proj.away_score >= 0
        assert proj.home_score not in ILLEGAL_SCORES
        assert proj.away_score not in ILLEGAL_SCORES
        assert proj.home_score != proj.away_score
        assert 1 <= proj.confidence <= 99
        assert 0.0 <= proj.home_win_prob <= 1.0


def test_analysis_identical_across_interpreters() -> None:
    root = Path(__file__).resolve().parents[1]
    script = (
        "import json\n"
        "from nfl.model.projection import analyze_matchup\n"
        "from nfl.teams import static_schedule\n"
        "print(json.dumps([analyze_matchup(g, news=[]).to_dict() for g in static_schedule()], sort_keys=True))\n"
    )
    outputs = []
    for hash_seed in ("1", "2"):
        env = {**os.environ, "PYTHONPATH": str(root), "PYTHONHASHSEED": hash_seed}
        completed = subprocess.run(
            [sys.executable, "-c", script],
            cwd=root,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        outputs.append(json.loads(completed.stdout))
    assert outputs[0] == outputs[1]
    local = [analyze_matchup(game, news=[]).to_dict() for game in static_schedule()]
    assert json.loads(json.dumps(local, sort_keys=True)) == outputs[0]
