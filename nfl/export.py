"""CSV export of the weekly schedule with saved picks."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import pandas as pd

from .models import Game, UserPrediction

MISSING = "N/A"

COLUMNS = [
    "Week",
    "Date",
    "Matchup",
    "Away Team",
    "Home Team",
    "Predicted Winner",
    "Predicted Score (Away)",
    "Predicted Score (Home)",
    "Spread",
    "Total",
]


def _score(value: Optional[str]) -> Union[int, str]:
    try:
        return int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return MISSING


def predictions_frame(schedule: Sequence[Game], predictions: Mapping[str, UserPrediction]) -> pd.DataFrame:
    """One row per scheduled game; games without a pick carry ``N/A``."""

    rows = []
    for game in schedule:
        prediction = predictions.get(game.id)
        rows.append(
            {
                "Week": f"Week {game.week}",
                "Date": game.date,
                "Matchup": game.matchup,
                "Away Team": game.away_team.name,
                "Home Team": game.home_team.name,
                "Predicted Winner": (prediction.predicted_winner or MISSING) if prediction else MISSING,
                "Predicted Score (Away)": _score(prediction.away_score) if prediction else MISSING,
                "Predicted Score (Home)": _score(prediction.home_score) if prediction else MISSING,
                "Spread": (game.betting.spread or MISSING) if game.betting else MISSING,
                "Total": game.betting.total if game.betting else MISSING,
            }
        )
    return pd.DataFrame(rows, columns=COLUMNS)


def export_csv(
    schedule: Sequence[Game],
    predictions: Mapping[str, UserPrediction],
    path: Optional[Union[str, Path]] = None,
) -> str:
    """Render the CSV (text fields quoted) and optionally write it to ``path``."""

    frame = predictions_frame(schedule, predictions)
    text = frame.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    if path is not None:
        target = Path(path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    return text
