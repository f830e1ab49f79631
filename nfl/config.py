"""Configuration helpers for the picks toolkit."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "defaults.yaml"


def load_config(path: Optional[str | Path] = None, *, env_var: str = "NFL_CONFIG") -> Dict[str, Any]:
    """Load configuration from YAML.

    Parameters
    ----------
    path :
        Optional explicit configuration file path. When omitted, the
        function looks for ``env_var`` (default ``NFL_CONFIG``) and
        finally falls back to ``config/defaults.yaml`` bundled with the
        repository.
    env_var :
        Environment variable that can override the configuration path.

    Returns
    -------
    dict
        Parsed configuration dictionary (empty when the file is blank).
    """

    candidate = path or os.environ.get(env_var)
    if candidate:
        config_path = Path(candidate).expanduser()
    else:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping; got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class FeedSettings:
    scoreboard_url: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
    news_url: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/news"
    timeout: float = 15.0
    retry_attempts: int = 3
    retry_backoff: float = 1.5
    use_live: bool = True
    poll_interval: float = 60.0


@dataclass(frozen=True)
class StoreSettings:
    local_path: Path = Path("data/medi_picks.json")
    remote_url: Optional[str] = None
    remote_token: Optional[str] = None
    remote_timeout: float = 10.0


@dataclass(frozen=True)
class EngineSettings:
    """Constants for the projection engine.

    ``variance_salt`` is mixed into every game id before seeding the
    variance generator, so changing it reshuffles every projection.
    """

    default_total: float = 44.0
    variance_salt: str = "medi-jinx"
    variance_points: float = 3.0
    confidence_multiplier: float = 2.5
    no_bet_low: float = 0.40
    no_bet_high: float = 0.60
    no_bet_confidence_cap: int = 45
    margin_sigma: float = 13.5
    elo_base: float = 1000.0
    elo_per_point: float = 10.0
    elo_home_field: float = 48.0
    leverage_offense: float = 2.5
    leverage_defense: float = 2.5
    leverage_qb: float = 1.5


@dataclass(frozen=True)
class Settings:
    feeds: FeedSettings = field(default_factory=FeedSettings)
    store: StoreSettings = field(default_factory=StoreSettings)
    engine: EngineSettings = field(default_factory=EngineSettings)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None, *, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Build settings from a parsed YAML mapping plus credentials from the environment."""

        config = config or {}
        env = os.environ if environ is None else environ
        feeds_cfg = config.get("feeds") or {}
        store_cfg = config.get("store") or {}
        engine_cfg = dict(config.get("engine") or {})
        leverage_cfg = engine_cfg.pop("leverage", None) or {}

        feeds = FeedSettings(**{k: v for k, v in feeds_cfg.items() if k in FeedSettings.__dataclass_fields__})

        local_path = store_cfg.get("local_path")
        store = StoreSettings(
            local_path=Path(local_path).expanduser() if local_path else StoreSettings.local_path,
            remote_url=env.get("NFL_STORE_URL") or store_cfg.get("remote_url"),
            remote_token=env.get("NFL_STORE_TOKEN"),
            remote_timeout=float(store_cfg.get("remote_timeout", StoreSettings.remote_timeout)),
        )

        engine_kwargs = {k: v for k, v in engine_cfg.items() if k in EngineSettings.__dataclass_fields__}
        for name in ("offense", "defense", "qb"):
            if name in leverage_cfg:
                engine_kwargs[f"leverage_{name}"] = float(leverage_cfg[name])
        engine = EngineSettings(**engine_kwargs)
        return cls(feeds=feeds, store=store, engine=engine)

    @classmethod
    def load(cls, path: Optional[str | Path] = None) -> "Settings":
        return cls.from_config(load_config(path))
