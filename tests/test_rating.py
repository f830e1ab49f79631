from __future__ import annotations

import pytest

from nfl.model.rating import base_rating, parse_wins, qb_form, rate_team, tier_for_wins
from nfl.models import NewsArticle, QBStats, Team
from nfl.teams import team_by_abbreviation


def _team(record: str, *, injuries=None, qb: QBStats | None = None) -> Team:
    return Team(
        id="TST",
        name="Test City Testers",
        abbreviation="TST",
        record=record,
        key_injuries=list(injuries or []),
        qb_stats=qb,
    )


def test_parse_wins_reads_leading_integer() -> None:
    assert parse_wins("12-2-0") == 12
    assert parse_wins("9-4-1") == 9
    assert parse_wins("") == 0
    assert parse_wins(None) == 0
    assert parse_wins("n/a") == 0


def test_tier_map_and_base_rating() -> None:
    assert [tier_for_wins(w) for w in (12, 10, 9, 8, 7, 6, 5, 4, 3, 0)] == [1, 1, 2, 2, 3, 3, 4, 4, 5, 5]
    assert [base_rating(t) for t in (1, 2, 3, 4, 5)] == [95, 90, 85, 80, 75]


def test_qb_out_on_injured_reserve_drops_tier_and_ratings() -> None:
    kc = team_by_abbreviation("KC")
    rating = rate_team(kc)
    assert rating.qb_out is True
    assert rating.tier == 5
    assert rating.offense == 70
    assert rating.defense == 78


def test_generic_out_note_from_news() -> None:
    team = _team("12-2-0")
    rating = rate_team(team, [NewsArticle(headline="Star receiver ruled out for Sunday")])
    assert rating.qb_out is False
    assert rating.tier == 1
    assert rating.offense == 90
    assert rating.defense == 93


def test_benched_quarterback_counts_as_out() -> None:
    rating = rate_team(_team("8-6-0"), ["Starting quarterback benched after three interceptions"])
    assert rating.qb_out is True
    assert rating.tier == 4


def test_ratings_stay_in_bounds() -> None:
    elite = _team("16-1-0", qb=QBStats(passing_yards=5200, passing_tds=45, interceptions=6))
    awful = _team(
        "0-16-0",
        injuries=["QB1 (IR)"],
        qb=QBStats(passing_yards=1500, passing_tds=4, interceptions=12),
    )
    top = rate_team(elite)
    bottom = rate_team(awful)
    assert top.tier == 1 and top.offense == 99
    assert bottom.tier == 5 and bottom.offense == 50
    for rating in (top, bottom):
        assert 1 <= rating.tier <= 5
        assert 50 <= rating.offense <= 99
        assert 50 <= rating.defense <= 99


def test_qb_form_boost_and_promotion() -> None:
    hot = _team("9-5-0", qb=QBStats(passing_yards=4200, passing_tds=30, interceptions=8))
    boost, promotion = qb_form(hot)
    assert boost == 10
    assert promotion == 1
    assert rate_team(hot).tier == 1
    assert qb_form(_team("9-5-0")) == (0, 0)
    # a clean sheet is treated as one interception
    clean = QBStats(passing_yards=3000, passing_tds=3, interceptions=0)
    assert clean.td_int_ratio == 3.0


@pytest.mark.parametrize("record", ["17-0", "10-7", "8-9", "6-11", "4-13", "0-17", "", "bogus"])
@pytest.mark.parametrize(
    "injuries",
    [[], ["WR1 (Out)"], ["QB1 (IR)"], ["Starting QB benched"], ["QB1 (Out)", "LT (Out)"]],
)
@pytest.mark.parametrize(
    "qb",
    [
        None,
        QBStats(passing_yards=5400, passing_tds=48, interceptions=4),
        QBStats(passing_yards=3300, passing_tds=22, interceptions=10),
        QBStats(passing_yards=1200, passing_tds=3, interceptions=15),
        QBStats(passing_yards=0, passing_tds=0, interceptions=0),
    ],
)
def test_rating_bounds_across_records_injuries_and_qb_form(record, injuries, qb) -> None:
    rating = rate_team(_team(record, injuries=injuries, qb=qb))
    assert 1 <= rating.tier <= 5
    assert 50 <= rating.offense <= 99
    assert 50 <= rating.defense <= 99
