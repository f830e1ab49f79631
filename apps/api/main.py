"""FastAPI interface for schedules, projections and pick tracking."""

from __future__ import annotations

import dataclasses
import os
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.responses import Response

from nfl.config import Settings
from nfl.export import export_csv
from nfl.io.espn import ESPNClient, fetch_news
from nfl.io.store import LocalStore, PredictionStore, ResultStore
from nfl.market.grading import compute_standings, grade_frame
from nfl.model.projection import analyze_matchup
from nfl.models import UserPrediction
from nfl.schedule import ScheduleFeed

app = FastAPI(title="Medi Picks API")

_state: Dict[str, Any] = {}


def _require_api_key(provided: Optional[str]) -> None:
    expected = os.environ.get("NFL_API_KEY")
    if expected and provided != expected:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _settings() -> Settings:
    settings = _state.get("settings")
    if settings is None:
        settings = Settings.load()
        _state["settings"] = settings
    return settings


def _client() -> ESPNClient:
    client = _state.get("client")
    if client is None:
        client = ESPNClient(_settings().feeds)
        _state["client"] = client
    return client


def _predictions() -> PredictionStore:
    return PredictionStore.from_settings(_settings().store)


def _results() -> ResultStore:
    return ResultStore(LocalStore(_settings().store.local_path))


def _feed(refresh: bool = False) -> ScheduleFeed:
    feed = _state.get("feed")
    if feed is None:
        feed = ScheduleFeed(client=_client(), results=_results())
        _state["feed"] = feed
    if refresh or feed.meta is None:
        feed.refresh()
    return feed


def reset_state() -> None:
    """Forget cached settings, clients and the schedule (used after config changes)."""

    _state.clear()


@app.get("/schedule")
def schedule(
    refresh: bool = Query(False, description="Poll the feed before answering"),
    api_key: Optional[str] = Query(None, alias="auth"),
) -> dict:
    _require_api_key(api_key)
    feed = _feed(refresh)
    return {
        "meta": feed.meta,
        "games": [dataclasses.asdict(game) for game in feed.games],
    }


@app.get("/games/{game_id}/analysis")
def game_analysis(
    game_id: str,
    api_key: Optional[str] = Query(None, alias="auth"),
) -> dict:
    _require_api_key(api_key)
    game = _feed().game(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail=f"Unknown game {game_id}")
    settings = _settings()
    fetcher = (lambda: fetch_news(_client())) if settings.feeds.use_live else (lambda: [])
    analysis = analyze_matchup(game, settings=settings, news_fetcher=fetcher)
    return analysis.to_dict()


@app.get("/predictions")
def get_predictions(
    user: Optional[str] = Query(None, description="User id for the remote store"),
    api_key: Optional[str] = Query(None, alias="auth"),
) -> dict:
    _require_api_key(api_key)
    predictions = _predictions().load(user)
    return {game_id: prediction.to_dict() for game_id, prediction in predictions.items()}


@app.put("/predictions")
def put_predictions(
    payload: Dict[str, Dict[str, Any]] = Body(..., description="Predictions keyed by game id"),
    user: Optional[str] = Query(None, description="User id for the remote store"),
    api_key: Optional[str] = Query(None, alias="auth"),
) -> dict:
    _require_api_key(api_key)
    store = _predictions()
    predictions = store.load(user)
    for game_id, item in payload.items():
        predictions[game_id] = UserPrediction.from_dict({**item, "gameId": game_id})
    store.save(user, predictions)
    return {game_id: prediction.to_dict() for game_id, prediction in predictions.items()}


@app.get("/standings")
def standings(
    user: Optional[str] = Query(None, description="User id for the remote store"),
    api_key: Optional[str] = Query(None, alias="auth"),
) -> dict:
    _require_api_key(api_key)
    predictions = _predictions().load(user)
    results = _results().load()
    records = compute_standings(predictions, results)
    games = grade_frame(predictions, results)
    return {
        "standings": {name: record.to_dict() for name, record in records.items()},
        "games": games.astype(object).where(games.notna(), None).to_dict(orient="records"),
    }


@app.get("/export.csv")
def export(
    user: Optional[str] = Query(None, description="User id for the remote store"),
    api_key: Optional[str] = Query(None, alias="auth"),
) -> Response:
    _require_api_key(api_key)
    feed = _feed()
    text = export_csv(feed.games, _predictions().load(user))
    week = (feed.meta or {}).get("week", "")
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="medi_picks_week_{week}.csv"'},
    )
