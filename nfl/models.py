"""Domain records shared by the adapters, engines and stores."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

TEAM_STATUSES = ("clinched", "contender", "bubble", "eliminated")
GAME_STATUSES = ("pre", "in", "post")


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class QBStats:
    passing_yards: float
    passing_tds: int
    interceptions: int
    name: Optional[str] = None

    @property
    def td_int_ratio(self) -> float:
        # A clean sheet counts as one interception so the ratio stays finite.
        return self.passing_tds / max(self.interceptions, 1)

    @property
    def yards_per_week(self) -> float:
        return self.passing_yards / 15.0


@dataclass
class Team:
    id: str
    name: str
    abbreviation: str
    logo_url: str = ""
    color: str = ""
    record: str = "0-0"
    status: str = "bubble"
    key_injuries: List[str] = field(default_factory=list)
    score: Optional[int] = None
    qb_stats: Optional[QBStats] = None
    standing: str = ""

    def __post_init__(self) -> None:
        status = (self.status or "bubble").strip().lower()
        self.status = status if status in TEAM_STATUSES else "bubble"

    @property
    def nickname(self) -> str:
        return self.name.split()[-1] if self.name else self.abbreviation


@dataclass(frozen=True)
class BettingData:
    spread: str
    total: float
    public_betting_pct: float = 50.0


@dataclass
class Game:
    id: str
    week: int
    date: str
    venue: str
    home_team: Team
    away_team: Team
    status: str = "pre"
    clock: Optional[str] = None
    betting: Optional[BettingData] = None

    @property
    def is_final(self) -> bool:
        return self.status == "post"

    @property
    def matchup(self) -> str:
        return f"{self.away_team.abbreviation} @ {self.home_team.abbreviation}"


@dataclass(frozen=True)
class NewsArticle:
    headline: str
    description: str = ""
    published: Optional[str] = None
    team_ids: Tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return f"{self.headline} {self.description}".strip()


@dataclass(frozen=True)
class TeamRating:
    """Per-analysis team strength; recomputed every run, never stored."""

    tier: int
    offense: int
    defense: int
    qb_out: bool = False
    qb_boost: int = 0


@dataclass
class UserPrediction:
    game_id: str
    home_score: str
    away_score: str
    predicted_winner: str
    user_home_score: Optional[str] = None
    user_away_score: Optional[str] = None
    user_predicted_winner: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "gameId": self.game_id,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "predictedWinner": self.predicted_winner,
            "userHomeScore": self.user_home_score,
            "userAwayScore": self.user_away_score,
            "userPredictedWinner": self.user_predicted_winner,
        }
        return {key: value for key, value in payload.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPrediction":
        def _text(key: str) -> Optional[str]:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            game_id=str(data.get("gameId", "")),
            home_score=str(data.get("homeScore", "")),
            away_score=str(data.get("awayScore", "")),
            predicted_winner=str(data.get("predictedWinner", "")),
            user_home_score=_text("userHomeScore"),
            user_away_score=_text("userAwayScore"),
            user_predicted_winner=_text("userPredictedWinner"),
        )


@dataclass(frozen=True)
class GameResult:
    home_score: int
    away_score: int
    spread: str
    home_abbr: str
    away_abbr: str
    home_name: str
    away_name: str

    @classmethod
    def from_game(cls, game: Game) -> "GameResult":
        return cls(
            home_score=_to_int(game.home_team.score),
            away_score=_to_int(game.away_team.score),
            spread=game.betting.spread if game.betting else "",
            home_abbr=game.home_team.abbreviation,
            away_abbr=game.away_team.abbreviation,
            home_name=game.home_team.name,
            away_name=game.away_team.name,
        )

    @property
    def winner(self) -> str:
        return self.home_name if self.home_score > self.away_score else self.away_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "spread": self.spread,
            "homeAbbr": self.home_abbr,
            "awayAbbr": self.away_abbr,
            "homeName": self.home_name,
            "awayName": self.away_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameResult":
        return cls(
            home_score=_to_int(data.get("homeScore")),
            away_score=_to_int(data.get("awayScore")),
            spread=str(data.get("spread") or ""),
            home_abbr=str(data.get("homeAbbr", "")),
            away_abbr=str(data.get("awayAbbr", "")),
            home_name=str(data.get("homeName", "")),
            away_name=str(data.get("awayName", "")),
        )


@dataclass(frozen=True)
class Weather:
    temp: int
    condition: str
    wind_speed: int
    impact_on_passing: str


@dataclass(frozen=True)
class Leverage:
    """Home-team share (0-100) of each positional edge."""

    offense: int
    defense: int
    qb: int


@dataclass(frozen=True)
class Retrospective:
    result: str
    key_to_victory: str
    standout_performers: List[str] = field(default_factory=list)


@dataclass
class AnalysisResult:
    game_id: str
    winner_prediction: str
    home_score_prediction: int
    away_score_prediction: int
    confidence_score: int
    summary: str
    narrative: str
    key_factors: List[str]
    jinx_score: int
    jinx_analysis: str
    upset_probability: int
    execution_rating: int
    explosive_rating: int
    quick_take: str
    weather: Weather
    leverage: Leverage
    injury_impact: str
    home_rating: TeamRating
    away_rating: TeamRating
    market_spread: float
    market_total: float
    model_spread: float
    home_win_prob: float
    latest_news: List[str] = field(default_factory=list)
    retrospective: Optional[Retrospective] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_prediction(self) -> UserPrediction:
        """Condense into the record the prediction store keeps."""

        return UserPrediction(
            game_id=self.game_id,
            home_score=str(self.home_score_prediction),
            away_score=str(self.away_score_prediction),
            predicted_winner=self.winner_prediction,
        )
