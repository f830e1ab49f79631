from __future__ import annotations

from nfl.io.espn import static_payload
from nfl.io.store import LocalStore, ResultStore
from nfl.schedule import ScheduleFeed


def _payload(week: int) -> dict:
    payload = static_payload()
    payload["meta"]["week"] = week
    return payload


def test_stale_response_is_discarded() -> None:
    feed = ScheduleFeed(fetcher=lambda: _payload(0))
    older = feed.begin()
    newer = feed.begin()
    assert feed.apply(newer, _payload(17)) is True
    assert feed.apply(older, _payload(16)) is False
    assert feed.meta["week"] == 17
    assert len(feed.games) == 16


def test_refresh_records_final_results(tmp_path) -> None:
    def fetch() -> dict:
        payload = static_payload()
        game = payload["data"][1]
        game.status = "post"
        game.home_team.score = 10
        game.away_team.score = 31
        return payload

    results = ResultStore(LocalStore(tmp_path / "store.json"))
    feed = ScheduleFeed(fetcher=fetch, results=results)
    assert feed.refresh() is True
    assert list(results.load()) == ["w16-2"]
    assert results.load()["w16-2"].winner == "Philadelphia Eagles"
    assert feed.game("w16-2").is_final
    assert feed.game("nope") is None


def test_run_polls_until_iterations_exhausted() -> None:
    calls = {"fetch": 0}
    sleeps = []

    def fetch() -> dict:
        calls["fetch"] += 1
        return _payload(calls["fetch"])

    feed = ScheduleFeed(fetcher=fetch)
    feed.run(30.0, iterations=3, sleep=sleeps.append)
    assert calls["fetch"] == 3
    assert sleeps == [30.0, 30.0]
    assert feed.meta["week"] == 3
