"""Model-level helpers.

The projection engine lives in :mod:`nfl.model.projection`; it is not
re-exported here because it depends on the news helpers, which in turn use
the rating functions below.
"""

from .rating import base_rating, parse_wins, qb_form, rate_team, tier_for_wins

__all__ = [
    "base_rating",
    "parse_wins",
    "qb_form",
    "rate_team",
    "tier_for_wins",
]
