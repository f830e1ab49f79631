"""Prediction and game-result persistence (local JSON file, optional remote documents)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from nfl.config import StoreSettings
from nfl.models import Game, GameResult, UserPrediction

logger = logging.getLogger(__name__)

PREDICTIONS_KEY = "mediPicks_predictions"
RESULTS_KEY = "mediPicks_results"
COLLECTION_NAME = "users"


class StoreError(RuntimeError):
    """Raised when the remote document store cannot be read or written."""


class LocalStore:
    """JSON-file key/value store; every write replaces the file atomically."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Local store %s unreadable; starting empty: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
        tmp.replace(self.path)


class RemoteDocumentStore:
    """Per-user documents holding a ``predictions`` field, over HTTP."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _url(self, user_id: str) -> str:
        return f"{self.base_url}/{COLLECTION_NAME}/{user_id}"

    def load(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the user's document, or ``None`` when it does not exist yet."""

        try:
            response = self.session.get(self._url(user_id), timeout=self.timeout)
        except requests.RequestException as exc:
            raise StoreError(f"Loading document for {user_id} failed: {exc}") from exc
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise StoreError(f"Document store returned HTTP {response.status_code} for {user_id}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreError(f"Invalid JSON in document for {user_id}") from exc
        return payload if isinstance(payload, dict) else None

    def save(self, user_id: str, predictions: Dict[str, Any]) -> None:
        """Merge ``predictions`` into the user's document."""

        try:
            response = self.session.patch(
                self._url(user_id),
                json={"predictions": predictions},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise StoreError(f"Saving document for {user_id} failed: {exc}") from exc
        if response.status_code >= 400:
            raise StoreError(f"Document store returned HTTP {response.status_code} for {user_id}")


def _decode_predictions(raw: Any) -> Dict[str, UserPrediction]:
    if not isinstance(raw, dict):
        return {}
    decoded: Dict[str, UserPrediction] = {}
    for game_id, item in raw.items():
        if not isinstance(item, dict):
            continue
        prediction = UserPrediction.from_dict({"gameId": game_id, **item})
        decoded[str(game_id)] = prediction
    return decoded


def _encode_predictions(predictions: Mapping[str, UserPrediction]) -> Dict[str, Any]:
    return {game_id: prediction.to_dict() for game_id, prediction in predictions.items()}


class PredictionStore:
    """Saves the whole game-id -> prediction map; later saves replace earlier ones.

    Without a user id, or without a remote store, predictions live in the
    local file. A failed remote write or read falls back to the local file
    so a save is never dropped.
    """

    def __init__(self, local: LocalStore, remote: Optional[RemoteDocumentStore] = None) -> None:
        self.local = local
        self.remote = remote

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "PredictionStore":
        remote = None
        if settings.remote_url:
            remote = RemoteDocumentStore(
                settings.remote_url,
                settings.remote_token,
                timeout=settings.remote_timeout,
            )
        return cls(LocalStore(settings.local_path), remote)

    def _load_local(self) -> Dict[str, UserPrediction]:
        return _decode_predictions(self.local.get(PREDICTIONS_KEY, {}))

    def save(self, user_id: Optional[str], predictions: Mapping[str, UserPrediction]) -> None:
        payload = _encode_predictions(predictions)
        if not user_id or self.remote is None:
            self.local.set(PREDICTIONS_KEY, payload)
            return
        try:
            self.remote.save(user_id, payload)
        except StoreError as exc:
            logger.warning("Saving predictions remotely failed; keeping them locally: %s", exc)
            self.local.set(PREDICTIONS_KEY, payload)

    def load(self, user_id: Optional[str]) -> Dict[str, UserPrediction]:
        if not user_id or self.remote is None:
            return self._load_local()
        try:
            document = self.remote.load(user_id)
        except StoreError as exc:
            logger.warning("Loading predictions remotely failed; reading local copy: %s", exc)
            return self._load_local()
        if document is None:
            return self._load_local()
        return _decode_predictions(document.get("predictions") or {})

    def upsert(self, user_id: Optional[str], prediction: UserPrediction) -> Dict[str, UserPrediction]:
        """Store one prediction, overwriting any earlier one for the same game."""

        predictions = self.load(user_id)
        predictions[prediction.game_id] = prediction
        self.save(user_id, predictions)
        return predictions


class ResultStore:
    """Final scores keyed by game id, written once per game."""

    def __init__(self, local: LocalStore) -> None:
        self.local = local

    def load(self) -> Dict[str, GameResult]:
        raw = self.local.get(RESULTS_KEY, {}) or {}
        if not isinstance(raw, dict):
            return {}
        return {str(game_id): GameResult.from_dict(item) for game_id, item in raw.items() if isinstance(item, dict)}

    def record_final(self, games: Iterable[Game]) -> List[str]:
        """Capture final scores for games not seen as final before.

        A result already on file is never overwritten, even if a later feed
        reports a different final score.
        """

        raw = dict(self.local.get(RESULTS_KEY, {}) or {})
        recorded: List[str] = []
        for game in games:
            if not game.is_final or game.home_team.score is None or game.away_team.score is None:
                continue
            if game.id in raw:
                continue
            raw[game.id] = GameResult.from_game(game).to_dict()
            recorded.append(game.id)
        if recorded:
            self.local.set(RESULTS_KEY, raw)
        return recorded
