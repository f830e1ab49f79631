"""Team-relevance filtering, keyword impact and synthetic headlines for news."""

from __future__ import annotations

import hashlib
import re
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .injuries import BENCH_PATTERN
from .models import NewsArticle, Team
from .model.rating import parse_wins
from .names import mentioned_teams, mentions_team

ROUNDUP_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\broundup\b",
        r"\btakeaways\b",
        r"\bpower rankings\b",
        r"\bweek \d+ (?:picks|predictions|grades|preview|recap|injury report)\b",
        r"\bwhat we learned\b",
        r"\bwinners and losers\b",
        r"\bevery team\b",
        r"\ball 32\b",
        r"\bfantasy\b",
    )
]

# keyword pattern -> impact per occurrence
NEWS_KEYWORDS: List[Tuple[re.Pattern, int]] = [
    (re.compile(r"\bout\b", re.IGNORECASE), -3),
    (re.compile(r"\binjur(?:y|ies|ed)\b", re.IGNORECASE), -3),
    (re.compile(r"\bconcussion\b", re.IGNORECASE), -3),
    (re.compile(r"\bir\b", re.IGNORECASE), -3),
    (re.compile(r"\bdoubtful\b", re.IGNORECASE), -2),
    (re.compile(r"\bquestionable\b", re.IGNORECASE), -2),
    (re.compile(r"\bbenched\b", re.IGNORECASE), -2),
    (re.compile(r"\breturn(?:s|ing|ed)?\b", re.IGNORECASE), 2),
    (re.compile(r"\bcleared\b", re.IGNORECASE), 2),
    (re.compile(r"\bactive\b", re.IGNORECASE), 2),
]
NEWS_IMPACT_LIMIT = 10

NewsLike = Union[str, NewsArticle]


def _text(item: NewsLike) -> str:
    return item.text if isinstance(item, NewsArticle) else str(item or "")


def is_roundup(article: NewsArticle, teams: Sequence[Team] = ()) -> bool:
    """League-wide content (roundups, rankings, multi-team pieces)."""

    text = article.text
    if any(pattern.search(text) for pattern in ROUNDUP_PATTERNS):
        return True
    if teams and len(mentioned_teams(text, teams)) > 2:
        return True
    return False


def is_about(article: NewsArticle, team: Team) -> bool:
    if team.id and team.id in article.team_ids:
        return True
    return mentions_team(article.text, team)


def filter_team_news(
    articles: Iterable[NewsArticle],
    team: Team,
    *,
    teams: Sequence[Team] = (),
    exclude: Iterable[Team] = (),
) -> List[NewsArticle]:
    """Articles about ``team``, minus roundups and anything naming ``exclude``."""

    excluded = list(exclude)
    selected: List[NewsArticle] = []
    for article in articles:
        if not is_about(article, team):
            continue
        if is_roundup(article, teams):
            continue
        if any(mentions_team(article.text, other) for other in excluded):
            continue
        selected.append(article)
    return selected


# headline clauses: punctuation, or a matchup connector between two team names
_CLAUSE_SPLIT = re.compile(r"[.;!?,]|\s(?:vs\.?|versus|against|at|@|facing)\s", re.IGNORECASE)


def has_roster_signal(text: str) -> bool:
    """True when ``text`` carries an availability keyword the ratings react to."""

    return any(pattern.search(text) for pattern, _ in NEWS_KEYWORDS) or bool(BENCH_PATTERN.search(text))


def article_owner(article: NewsArticle, home: Team, away: Team) -> Optional[Team]:
    """The single matchup team an article's roster news belongs to, if any.

    A team tag naming exactly one side wins; otherwise every clause holding a
    roster keyword must name exactly one side, and all of them the same one.
    """

    tagged = [team for team in (home, away) if team.id and team.id in article.team_ids]
    if len(tagged) == 1:
        return tagged[0]
    owners = set()
    for clause in _CLAUSE_SPLIT.split(article.text):
        if not has_roster_signal(clause):
            continue
        named = [team for team in (home, away) if mentions_team(clause, team)]
        if len(named) != 1:
            return None
        owners.add(named[0].abbreviation)
    if len(owners) != 1:
        return None
    return home if home.abbreviation in owners else away


def matchup_news(
    articles: Iterable[NewsArticle],
    home: Team,
    away: Team,
    teams: Sequence[Team],
) -> Tuple[List[NewsArticle], List[NewsArticle]]:
    """Per-team news for one game.

    Any article that names a team outside the matchup is dropped from both
    lists, so one team's roster news cannot leak into another game. An
    article about both sides goes to the side it is pinned to by
    :func:`article_owner`; if it carries roster keywords but cannot be
    pinned, it is dropped rather than penalising both teams.
    """

    articles = list(articles)
    own = {home.abbreviation, away.abbreviation}
    outsiders = [team for team in teams if team.abbreviation not in own]
    home_news = filter_team_news(articles, home, teams=teams, exclude=outsiders)
    away_news = filter_team_news(articles, away, teams=teams, exclude=outsiders)

    shared = {id(article) for article in home_news} & {id(article) for article in away_news}

    def pinned(news: List[NewsArticle], side: Team) -> List[NewsArticle]:
        return [
            article
            for article in news
            if id(article) not in shared
            or not has_roster_signal(article.text)
            or article_owner(article, home, away) is side
        ]

    return pinned(home_news, home), pinned(away_news, away)


def news_impact(snippets: Iterable[NewsLike]) -> int:
    """Signed score modifier from injury/availability keywords, in [-10, 10]."""

    total = 0
    for item in snippets:
        text = _text(item)
        if not text:
            continue
        for pattern, weight in NEWS_KEYWORDS:
            total += weight * len(pattern.findall(text))
    return max(-NEWS_IMPACT_LIMIT, min(NEWS_IMPACT_LIMIT, total))


STATUS_HEADLINES = {
    "clinched": [
        "Rest vs. Rust: Debate heats up on playing starters down the stretch.",
        "Eyes on the Prize: Coordinator sticking to a vanilla gameplan to hide schemes.",
        "Home Field Advantage: The road to the Super Bowl runs through here.",
        "Chasing History: Team looking to set a franchise record for wins.",
    ],
    "contender": [
        "Statement Game: A win here sends a message to the rest of the conference.",
        "Seeding Shuffle: Every snap matters for playoff positioning.",
        "Peaking at the Right Time? The offense looks unstoppable in December.",
        "Defense Tightening Up: Allowing only 14 PPG over the last three weeks.",
    ],
    "bubble": [
        "Win or Go Home: Playoff intensity arrives early.",
        "The Math Is Simple: Keep winning and no help is needed.",
        "Locker Room Confidential: 'We treat this like a Game 7.'",
        "Pressure mounting on the coaching staff to deliver a postseason berth.",
    ],
    "eliminated": [
        "Draft Board Season: Scouts spotted watching top QB prospects.",
        "Spoiler Alert: Team relishing the chance to ruin a rival's playoff hopes.",
        "Evaluation Mode: Young players expected to see increased snap counts.",
        "Culture Change? Tough questions facing the front office this offseason.",
    ],
}


def _seeded_index(seed: str, size: int) -> int:
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % size


def generate_team_news(team: Team, seed: str = "") -> List[str]:
    """Synthetic headlines from the team's status, first injury and record.

    The status headline is picked deterministically from ``seed`` and the
    team id, so a game id seed always yields the same wire.
    """

    news: List[str] = []
    pool = STATUS_HEADLINES.get(team.status, STATUS_HEADLINES["eliminated"])
    news.append(pool[_seeded_index(f"{seed}:{team.id}", len(pool))])

    if team.key_injuries:
        injury = team.key_injuries[0]
        player = injury.split("(")[0].strip()
        if re.search(r"\bir\b", injury, re.IGNORECASE):
            news.append(f"Devastating Blow: {player} officially shut down. Offense looking for answers.")
        elif re.search(r"\bquestionable\b|\(q\)", injury, re.IGNORECASE):
            news.append(f"Optimism growing for {player} but likely on a 'pitch count'.")
        else:
            news.append(f"{injury} situation looming large over game prep.")

    wins = parse_wins(team.record)
    if wins >= 10:
        news.append("Power Rankings: Consensus top-five team continues a dominant stretch.")
    if wins <= 4:
        news.append("Mock Draft: Currently projected to pick inside the top five.")
    return news
