"""Shared utilities for NFL matchup projections and pick tracking."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional


def load_config(path: Optional[str | Path] = None, *, env_var: str = "NFL_CONFIG") -> Dict[str, Any]:
    """Proxy to :func:`nfl.config.load_config` with a lazy import.

    Importing :mod:`nfl` stays cheap; YAML parsing is only pulled in when a
    caller actually asks for configuration.
    """

    from .config import load_config as _load_config

    return _load_config(path, env_var=env_var)


__all__ = ["load_config"]
