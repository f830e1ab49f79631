"""Project an NFL week from the command line."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from nfl.config import Settings
from nfl.export import export_csv
from nfl.io.espn import ESPNClient, fetch_news, fetch_schedule
from nfl.io.store import LocalStore, PredictionStore, ResultStore
from nfl.market.grading import compute_standings
from nfl.model.projection import analyze_matchup
from nfl.models import AnalysisResult, Game, UserPrediction
from nfl.schedule import ScheduleFeed

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Project every game of an NFL week.")
    parser.add_argument("--week", type=int, help="Week to request from the live scoreboard (default: current).")
    parser.add_argument("--static", action="store_true", help="Use the bundled schedule instead of the live feed.")
    parser.add_argument("--config", type=Path, help="Optional YAML config (defaults to $NFL_CONFIG or bundled).")
    parser.add_argument("--output", type=Path, help="Optional CSV output path.")
    parser.add_argument(
        "--save",
        action="store_true",
        help="Store the engine picks (user picks already on file are kept).",
    )
    parser.add_argument("--user", type=str, help="User id for the remote prediction store.")
    parser.add_argument("--standings", action="store_true", help="Print user/engine records over final games.")
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep polling the schedule every feeds.poll_interval seconds and record finals.",
    )
    parser.add_argument("--polls", type=int, help="Stop watching after this many polls (default: forever).")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default WARNING).",
    )
    return parser.parse_args(argv)


def summary_frame(games: Sequence[Game], analyses: Sequence[AnalysisResult]) -> pd.DataFrame:
    by_id = {analysis.game_id: analysis for analysis in analyses}
    rows = []
    for game in games:
        analysis = by_id.get(game.id)
        if analysis is None:
            continue
        rows.append(
            {
                "matchup": game.matchup,
                "status": game.status,
                "pick": analysis.winner_prediction,
                "away_score": analysis.away_score_prediction,
                "home_score": analysis.home_score_prediction,
                "confidence": analysis.confidence_score,
                "market_spread": analysis.market_spread,
                "model_spread": analysis.model_spread,
                "home_win_prob": analysis.home_win_prob,
                "jinx": analysis.jinx_score,
                "take": analysis.quick_take,
            }
        )
    return pd.DataFrame(rows)


def merge_engine_picks(
    existing: Dict[str, UserPrediction],
    analyses: Sequence[AnalysisResult],
) -> Dict[str, UserPrediction]:
    """Refresh the engine fields of stored picks without touching the user's."""

    merged = dict(existing)
    for analysis in analyses:
        fresh = analysis.to_prediction()
        prior = merged.get(analysis.game_id)
        if prior is not None:
            fresh = dataclasses.replace(
                fresh,
                user_home_score=prior.user_home_score,
                user_away_score=prior.user_away_score,
                user_predicted_winner=prior.user_predicted_winner,
            )
        merged[analysis.game_id] = fresh
    return merged


def watch(args: argparse.Namespace, settings: Settings, client: ESPNClient) -> ScheduleFeed:
    """Poll the scoreboard until interrupted, recording finals as they land."""

    use_live = False if args.static else None
    feed = ScheduleFeed(
        lambda: fetch_schedule(client, use_live=use_live, week=args.week),
        results=ResultStore(LocalStore(settings.store.local_path)),
    )
    logger.info("Watching the schedule every %.0fs", settings.feeds.poll_interval)
    try:
        feed.run(settings.feeds.poll_interval, iterations=args.polls, sleep=time.sleep)
    except KeyboardInterrupt:
        logger.info("Stopped watching")
    print(f"Watched {len(feed.games)} games (week {(feed.meta or {}).get('week')})")
    return feed


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    settings = Settings.load(args.config)
    client = ESPNClient(settings.feeds)
    if args.watch:
        watch(args, settings, client)
        return

    payload = fetch_schedule(client, use_live=False if args.static else None, week=args.week)
    games: List[Game] = payload["data"]
    meta = payload["meta"]
    if not games:
        print("No games found for the requested week.")
        return

    news = [] if args.static else fetch_news(client)
    analyses = [analyze_matchup(game, news=news, settings=settings) for game in games]
    logger.info("Projected %d games (source %s)", len(analyses), meta.get("source"))

    store = PredictionStore.from_settings(settings.store)
    results = ResultStore(LocalStore(settings.store.local_path))
    results.record_final(games)

    predictions = {analysis.game_id: analysis.to_prediction() for analysis in analyses}
    if args.save:
        predictions = merge_engine_picks(store.load(args.user), analyses)
        store.save(args.user, predictions)
        print(f"Saved {len(analyses)} picks")

    if args.output:
        export_csv(games, predictions, args.output)
        print(f"Saved picks to {args.output}")
    else:
        print(f"Week {meta.get('week')} ({meta.get('source')})")
        print(summary_frame(games, analyses).to_string(index=False))

    if args.standings:
        standings = compute_standings(store.load(args.user), results.load())
        print(pd.DataFrame({name: record.to_dict() for name, record in standings.items()}).to_string())


if __name__ == "__main__":
    main()
