from __future__ import annotations

import json
import logging

import pytest

from nfl.config import StoreSettings
from nfl.io.store import (
    PREDICTIONS_KEY,
    RESULTS_KEY,
    LocalStore,
    PredictionStore,
    RemoteDocumentStore,
    ResultStore,
    StoreError,
)
from nfl.models import UserPrediction
from nfl.teams import static_schedule


class _BrokenRemote:
    def save(self, user_id, predictions):
        raise StoreError("remote unavailable")

    def load(self, user_id):
        raise StoreError("remote unavailable")


class _Response:
    def __init__(self, status_code: int, payload=None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class _FakeSession:
    def __init__(self, get_response: _Response, patch_response: _Response | None = None) -> None:
        self.headers: dict = {}
        self.get_response = get_response
        self.patch_response = patch_response or _Response(200, {})
        self.calls: list = []

    def get(self, url, timeout=None):
        self.calls.append(("GET", url, None))
        return self.get_response

    def patch(self, url, json=None, timeout=None):
        self.calls.append(("PATCH", url, json))
        return self.patch_response


def _prediction(game_id: str = "w16-1", winner: str = "Seattle Seahawks") -> UserPrediction:
    return UserPrediction(game_id=game_id, home_score="24", away_score="20", predicted_winner=winner)


def test_local_store_round_trip(tmp_path) -> None:
    store = LocalStore(tmp_path / "nested" / "store.json")
    assert store.get("missing", "default") == "default"
    store.set("key", {"a": 1})
    assert store.get("key") == {"a": 1}
    assert json.loads((tmp_path / "nested" / "store.json").read_text())["key"] == {"a": 1}


def test_corrupt_local_store_reads_as_empty(tmp_path, caplog) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json")
    with caplog.at_level(logging.WARNING):
        assert LocalStore(path).get(PREDICTIONS_KEY) is None
    assert "unreadable" in caplog.text


def test_predictions_without_user_stay_local(tmp_path) -> None:
    store = PredictionStore(LocalStore(tmp_path / "store.json"), remote=_BrokenRemote())
    store.save(None, {"w16-1": _prediction()})
    loaded = store.load(None)
    assert loaded["w16-1"].predicted_winner == "Seattle Seahawks"


def test_remote_failure_falls_back_to_local(tmp_path, caplog) -> None:
    local = LocalStore(tmp_path / "store.json")
    store = PredictionStore(local, remote=_BrokenRemote())
    with caplog.at_level(logging.WARNING):
        store.save("user-1", {"w16-1": _prediction()})
    assert "keeping them locally" in caplog.text
    assert local.get(PREDICTIONS_KEY)["w16-1"]["predictedWinner"] == "Seattle Seahawks"
    assert store.load("user-1")["w16-1"].home_score == "24"


def test_upsert_overwrites_same_game(tmp_path) -> None:
    store = PredictionStore(LocalStore(tmp_path / "store.json"))
    store.upsert(None, _prediction())
    store.upsert(None, _prediction("w16-2", "Philadelphia Eagles"))
    predictions = store.upsert(None, _prediction(winner="Los Angeles Rams"))
    assert set(predictions) == {"w16-1", "w16-2"}
    assert store.load(None)["w16-1"].predicted_winner == "Los Angeles Rams"


def test_from_settings_builds_remote_only_with_url(tmp_path) -> None:
    plain = PredictionStore.from_settings(StoreSettings(local_path=tmp_path / "a.json"))
    assert plain.remote is None
    remote = PredictionStore.from_settings(
        StoreSettings(local_path=tmp_path / "a.json", remote_url="https://store.example/api", remote_token="t0k")
    )
    assert isinstance(remote.remote, RemoteDocumentStore)
    assert remote.remote.session.headers["Authorization"] == "Bearer t0k"


def test_remote_document_store_requests() -> None:
    session = _FakeSession(_Response(200, {"predictions": {"w16-1": {"homeScore": "21"}}}))
    remote = RemoteDocumentStore("https://store.example/api/", session=session)
    assert remote.load("u1") == {"predictions": {"w16-1": {"homeScore": "21"}}}
    remote.save("u1", {"w16-2": {"homeScore": "30"}})
    assert session.calls[0][:2] == ("GET", "https://store.example/api/users/u1")
    assert session.calls[1] == ("PATCH", "https://store.example/api/users/u1", {"predictions": {"w16-2": {"homeScore": "30"}}})


def test_missing_remote_document_reads_local(tmp_path) -> None:
    local = LocalStore(tmp_path / "store.json")
    local.set(PREDICTIONS_KEY, {"w16-3": _prediction("w16-3").to_dict()})
    remote = RemoteDocumentStore("https://store.example", session=_FakeSession(_Response(404)))
    store = PredictionStore(local, remote)
    assert list(store.load("u1")) == ["w16-3"]


def test_remote_http_error_raises_store_error() -> None:
    remote = RemoteDocumentStore("https://store.example", session=_FakeSession(_Response(500), _Response(503)))
    with pytest.raises(StoreError):
        remote.load("u1")
    with pytest.raises(StoreError):
        remote.save("u1", {})


def test_results_are_write_once(tmp_path) -> None:
    local = LocalStore(tmp_path / "store.json")
    results = ResultStore(local)
    games = static_schedule()
    games[0].status = "post"
    games[0].home_team.score = 24
    games[0].away_team.score = 17
    assert results.record_final(games) == ["w16-1"]

    games[0].home_team.score = 99
    assert results.record_final(games) == []
    stored = results.load()
    assert stored["w16-1"].home_score == 24
    assert stored["w16-1"].winner == "Seattle Seahawks"
    assert stored["w16-1"].spread == "SEA -1.5"
    assert set(local.get(RESULTS_KEY)) == {"w16-1"}
