"""Game-day weather flavour and its effect on scoring environment."""

from __future__ import annotations

from typing import Dict

import numpy as np

from .models import Game, Weather
from .teams import DOME_VENUES

DOME = Weather(temp=72, condition="Dome", wind_speed=0, impact_on_passing="Low")

_CONDITIONS = ("Clear", "Cloudy", "Overcast", "Light Rain", "Rain", "Snow")
# December in the open-air NFL footprint: mostly dry, some precipitation
_CONDITION_WEIGHTS = (0.32, 0.24, 0.18, 0.12, 0.08, 0.06)


def passing_impact(condition: str, wind_speed: float) -> str:
    condition = condition.lower()
    if wind_speed >= 15 or "snow" in condition:
        return "High"
    if wind_speed >= 10 or "rain" in condition:
        return "Moderate"
    return "Low"


def forecast_for(game: Game, rng: np.random.Generator) -> Weather:
    """Deterministic conditions for ``game`` drawn from the game-seeded ``rng``."""

    if game.venue in DOME_VENUES:
        return DOME
    condition = str(rng.choice(_CONDITIONS, p=_CONDITION_WEIGHTS))
    temp = int(rng.integers(18, 62))
    if "snow" in condition.lower():
        temp = min(temp, 32)
    wind = int(rng.integers(0, 22))
    return Weather(
        temp=temp,
        condition=condition,
        wind_speed=wind,
        impact_on_passing=passing_impact(condition, wind),
    )


def weather_features(weather: Weather) -> Dict[str, float]:
    condition = weather.condition.lower()
    return {
        "wind_high": max(weather.wind_speed - 10.0, 0.0),
        "cold": max(32.0 - weather.temp, 0.0),
        "rain": 1.0 if "rain" in condition else 0.0,
        "snow": 1.0 if "snow" in condition else 0.0,
    }


WEATHER_COEFFS = {"wind_high": -0.5, "cold": -0.1, "rain": -1.5, "snow": -3.0}


def total_adjustment(weather: Weather, max_adjustment: float = 6.0) -> float:
    """Points to shave off a game total for the conditions (never positive)."""

    features = weather_features(weather)
    delta = sum(WEATHER_COEFFS.get(name, 0.0) * value for name, value in features.items())
    delta = min(delta, 0.0)
    return max(-max_adjustment, delta)
