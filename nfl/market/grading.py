"""Straight-up and against-the-spread grading of stored picks."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Mapping, Optional

import pandas as pd

from nfl.market import parse_spread
from nfl.models import GameResult, UserPrediction

WIN = "WIN"
LOSS = "LOSS"
PUSH = "PUSH"


@dataclass
class Record:
    wins: int = 0
    losses: int = 0
    ats_wins: int = 0
    ats_losses: int = 0
    ats_pushes: int = 0

    def add_straight_up(self, hit: bool) -> None:
        if hit:
            self.wins += 1
        else:
            self.losses += 1

    def add_ats(self, grade: Optional[str]) -> None:
        if grade == WIN:
            self.ats_wins += 1
        elif grade == LOSS:
            self.ats_losses += 1
        elif grade == PUSH:
            self.ats_pushes += 1

    @property
    def win_pct(self) -> Optional[float]:
        played = self.wins + self.losses
        return self.wins / played if played else None

    def to_dict(self) -> Dict[str, object]:
        payload = asdict(self)
        payload["win_pct"] = self.win_pct
        return payload


def _to_number(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def home_line(result: GameResult) -> Optional[float]:
    """Home-relative line for a stored result (``None`` when no line was posted)."""

    if len((result.spread or "").split()) < 2:
        return None
    return parse_spread(result.spread, result.home_abbr)


def grade_ats(result: GameResult, pred_home: float, pred_away: float) -> Optional[str]:
    """Grade a predicted score against the line in effect for ``result``.

    Both the actual and the predicted margin are shifted by the same
    home-relative line; an actual value of exactly zero is a push whatever
    the pick. A prediction sitting exactly on the line falls back to the
    side it picked to win.
    """

    line = home_line(result)
    if line is None:
        return None
    actual = (result.home_score - result.away_score) + line
    if actual == 0:
        return PUSH
    predicted = (pred_home - pred_away) + line
    picked_home = predicted > 0 if predicted != 0 else pred_home > pred_away
    return WIN if (actual > 0) == picked_home else LOSS


def grade_straight_up(result: GameResult, predicted_winner: str) -> bool:
    return predicted_winner == result.winner


def _user_scores(prediction: UserPrediction) -> Optional[tuple[float, float]]:
    home = _to_number(prediction.user_home_score)
    away = _to_number(prediction.user_away_score)
    if not home and not away:
        return None
    return home, away


def compute_standings(
    predictions: Mapping[str, UserPrediction],
    results: Mapping[str, GameResult],
) -> Dict[str, Record]:
    """Tally the user's and the engine's records over every graded game.

    Only games holding both a stored prediction and a stored result count.
    The two tracks are graded independently and may disagree.
    """

    user = Record()
    app = Record()
    for game_id, result in results.items():
        prediction = predictions.get(game_id)
        if prediction is None:
            continue

        if prediction.user_predicted_winner:
            user.add_straight_up(grade_straight_up(result, prediction.user_predicted_winner))
            scores = _user_scores(prediction)
            if scores is not None:
                user.add_ats(grade_ats(result, *scores))

        if prediction.predicted_winner:
            app.add_straight_up(grade_straight_up(result, prediction.predicted_winner))
            app.add_ats(
                grade_ats(result, _to_number(prediction.home_score), _to_number(prediction.away_score))
            )

    return {"user": user, "app": app}


def grade_frame(
    predictions: Mapping[str, UserPrediction],
    results: Mapping[str, GameResult],
) -> pd.DataFrame:
    """Per-game grades as a dataframe (one row per graded game)."""

    columns = [
        "game_id",
        "matchup",
        "final",
        "actual_winner",
        "app_pick",
        "app_straight_up",
        "app_ats",
        "user_pick",
        "user_straight_up",
        "user_ats",
    ]
    rows = []
    for game_id, result in results.items():
        prediction = predictions.get(game_id)
        if prediction is None:
            continue
        user_scores = _user_scores(prediction)
        rows.append(
            {
                "game_id": game_id,
                "matchup": f"{result.away_abbr} @ {result.home_abbr}",
                "final": f"{result.away_score}-{result.home_score}",
                "actual_winner": result.winner,
                "app_pick": prediction.predicted_winner or None,
                "app_straight_up": grade_straight_up(result, prediction.predicted_winner)
                if prediction.predicted_winner
                else None,
                "app_ats": grade_ats(
                    result, _to_number(prediction.home_score), _to_number(prediction.away_score)
                ),
                "user_pick": prediction.user_predicted_winner,
                "user_straight_up": grade_straight_up(result, prediction.user_predicted_winner)
                if prediction.user_predicted_winner
                else None,
                "user_ats": grade_ats(result, *user_scores) if user_scores else None,
            }
        )
    return pd.DataFrame(rows, columns=columns)
