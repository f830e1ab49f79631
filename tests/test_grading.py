from __future__ import annotations

from nfl.market.grading import (
    LOSS,
    PUSH,
    WIN,
    compute_standings,
    grade_ats,
    grade_frame,
    grade_straight_up,
    home_line,
)
from nfl.models import GameResult, UserPrediction


def _result(home: int, away: int, spread: str = "HOME -3.5") -> GameResult:
    return GameResult(
        home_score=home,
        away_score=away,
        spread=spread,
        home_abbr="HOME",
        away_abbr="AWAY",
        home_name="Home Side",
        away_name="Away Side",
    )


def test_home_line_uses_home_relative_sign() -> None:
    assert home_line(_result(27, 24)) == 3.5
    assert home_line(_result(27, 24, "AWAY -2.5")) == -2.5
    assert home_line(_result(27, 24, "")) is None


def test_ats_grading_matches_home_side_pick() -> None:
    result = _result(27, 24)
    assert grade_ats(result, 30, 20) == WIN
    assert grade_ats(result, 24, 27) == WIN
    assert grade_ats(result, 24, 20) == WIN
    assert grade_ats(result, 17, 24) == LOSS


def test_ats_push_when_margin_lands_on_line() -> None:
    result = _result(21, 24, "HOME -3")
    assert grade_ats(result, 30, 10) == PUSH
    assert grade_ats(result, 10, 30) == PUSH


def test_prediction_on_the_line_uses_predicted_winner() -> None:
    assert grade_ats(_result(30, 20, "HOME -3"), 20, 23) == LOSS
    assert grade_ats(_result(30, 20, "AWAY -3"), 23, 20) == WIN


def test_no_line_means_no_ats_grade() -> None:
    assert grade_ats(_result(27, 24, "PK"), 27, 24) is None


def test_straight_up() -> None:
    result = _result(27, 24)
    assert grade_straight_up(result, "Home Side") is True
    assert grade_straight_up(result, "Away Side") is False


def test_standings_track_user_and_engine_separately() -> None:
    predictions = {
        "g1": UserPrediction(
            game_id="g1",
            home_score="24",
            away_score="20",
            predicted_winner="Home Side",
            user_home_score="17",
            user_away_score="24",
            user_predicted_winner="Away Side",
        ),
        "g2": UserPrediction(game_id="g2", home_score="10", away_score="20", predicted_winner="Away Side"),
        "g3": UserPrediction(game_id="g3", home_score="31", away_score="3", predicted_winner="Home Side"),
    }
    results = {
        "g1": _result(27, 24),
        "g2": _result(21, 24, "HOME -3"),
        "g4": _result(10, 0),
    }
    standings = compute_standings(predictions, results)
    app, user = standings["app"], standings["user"]
    assert (app.wins, app.losses) == (2, 0)
    assert (app.ats_wins, app.ats_losses, app.ats_pushes) == (1, 0, 1)
    assert (user.wins, user.losses) == (0, 1)
    assert (user.ats_wins, user.ats_losses, user.ats_pushes) == (0, 1, 0)
    assert app.win_pct == 1.0
    assert user.to_dict()["win_pct"] == 0.0


def test_grade_frame_has_one_row_per_graded_game() -> None:
    predictions = {"g1": UserPrediction(game_id="g1", home_score="24", away_score="20", predicted_winner="Home Side")}
    frame = grade_frame(predictions, {"g1": _result(27, 24), "g2": _result(3, 0)})
    assert list(frame["game_id"]) == ["g1"]
    assert frame.loc[0, "app_ats"] == WIN
    assert bool(frame.loc[0, "app_straight_up"]) is True
    assert frame.loc[0, "final"] == "24-27"
