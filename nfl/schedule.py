"""Polling the schedule feed without letting stale responses win."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from .io.espn import ESPNClient, fetch_schedule
from .io.store import ResultStore
from .models import Game

logger = logging.getLogger(__name__)


class ScheduleFeed:
    """Holds the latest schedule and records finals as they appear.

    Every fetch is tagged with a monotonically increasing sequence number at
    the moment it is issued. A response is applied only if its number is
    newer than the last applied one, so a slow earlier poll that completes
    after a later one is discarded.
    """

    def __init__(
        self,
        fetcher: Optional[Callable[[], dict]] = None,
        *,
        results: Optional[ResultStore] = None,
        client: Optional[ESPNClient] = None,
    ) -> None:
        if fetcher is None:
            client = client or ESPNClient()
            fetcher = lambda: fetch_schedule(client)  # noqa: E731
        self.fetcher = fetcher
        self.results = results
        self.games: List[Game] = []
        self.meta: Optional[Dict[str, object]] = None
        self._issued = 0
        self._applied = 0

    def begin(self) -> int:
        self._issued += 1
        return self._issued

    def apply(self, sequence: int, payload: dict) -> bool:
        if sequence <= self._applied:
            logger.info("Discarding stale schedule response #%d (latest applied #%d)", sequence, self._applied)
            return False
        self._applied = sequence
        self.games = list(payload.get("data") or [])
        self.meta = payload.get("meta")
        if self.results is not None:
            recorded = self.results.record_final(self.games)
            if recorded:
                logger.info("Recorded final results for %s", ", ".join(recorded))
        return True

    def refresh(self) -> bool:
        sequence = self.begin()
        return self.apply(sequence, self.fetcher())

    def game(self, game_id: str) -> Optional[Game]:
        return next((game for game in self.games if game.id == game_id), None)

    def run(
        self,
        interval: float,
        *,
        iterations: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Refresh every ``interval`` seconds (forever when ``iterations`` is None)."""

        count = 0
        while iterations is None or count < iterations:
            self.refresh()
            count += 1
            if iterations is not None and count >= iterations:
                break
            sleep(interval)
