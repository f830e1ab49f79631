from __future__ import annotations

import io

import pandas as pd

from nfl.export import COLUMNS, export_csv, predictions_frame
from nfl.models import UserPrediction
from nfl.teams import static_schedule

HEADER = (
    '"Week","Date","Matchup","Away Team","Home Team","Predicted Winner",'
    '"Predicted Score (Away)","Predicted Score (Home)","Spread","Total"'
)


def test_every_game_gets_a_row_with_na_for_missing_picks() -> None:
    schedule = static_schedule()
    text = export_csv(schedule, {})
    lines = text.strip().split("\n")
    assert lines[0] == HEADER
    assert len(lines) == len(schedule) + 1
    frame = pd.read_csv(io.StringIO(text), keep_default_na=False)
    assert list(frame.columns) == COLUMNS
    assert (frame["Predicted Winner"] == "N/A").all()
    assert frame.loc[0, "Week"] == "Week 16"
    assert frame.loc[0, "Matchup"] == "LAR @ SEA"


def test_saved_pick_is_exported() -> None:
    schedule = static_schedule()
    predictions = {
        "w16-1": UserPrediction(game_id="w16-1", home_score="24", away_score="20", predicted_winner="Seattle Seahawks")
    }
    text = export_csv(schedule, predictions)
    row = text.strip().split("\n")[1]
    assert '"Seattle Seahawks",20,24,"SEA -1.5",47.5' in row
    frame = predictions_frame(schedule, predictions)
    assert frame.loc[1, "Predicted Score (Home)"] == "N/A"


def test_missing_betting_is_na_and_file_written(tmp_path) -> None:
    schedule = static_schedule()[:1]
    schedule[0].betting = None
    target = tmp_path / "out" / "picks.csv"
    text = export_csv(schedule, {}, target)
    assert target.read_text(encoding="utf-8") == text
    assert text.strip().split("\n")[1].endswith('"N/A","N/A","N/A","N/A","N/A"')
