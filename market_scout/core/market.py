"""Market-wide statistics reported next to the scores."""

from typing import Sequence

from market_scout.core.scoring import average_rating, round_half_up_tenth
from market_scout.models import BusinessRecord, MarketAnalysis


def summarize(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> MarketAnalysis:
    """Competitor count, mean competitor rating and the target's review share.

    The market share is the target's fraction of all review counts in the
    local set, a proxy rather than a revenue figure.
    """
    total_reviews = target.review_count + sum(c.review_count for c in competitors)
    market_share = target.review_count / total_reviews * 100 if total_reviews > 0 else 0.0

    return MarketAnalysis(
        total_competitors=len(competitors),
        average_rating=round_half_up_tenth(average_rating(competitors)),
        market_share=round_half_up_tenth(market_share),
    )
