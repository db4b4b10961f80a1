"""Heuristic scores for a target business against its competitor set.

Every function here is pure and accepts an empty competitor sequence; each
one documents what it falls back to in that case.
"""

import math
from typing import List, Sequence

from market_scout.models import BusinessRecord

DEFAULT_AVERAGE_RATING = 4.0
DEFAULT_AVERAGE_REVIEWS = 50.0
PERFORMANCE_CAP = 64
MAX_STATEMENTS = 3


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_half_up_tenth(value: float) -> float:
    """Round to one decimal place with halves going up, e.g. 4.25 -> 4.3."""
    return math.floor(value * 10 + 0.5) / 10


def strength(business: BusinessRecord) -> float:
    """Rating weighted by the log of review volume."""
    return business.rating * math.log10(business.review_count + 1)


def average_rating(competitors: Sequence[BusinessRecord]) -> float:
    if not competitors:
        return DEFAULT_AVERAGE_RATING
    return sum(c.rating for c in competitors) / len(competitors)


def average_reviews(competitors: Sequence[BusinessRecord]) -> float:
    if not competitors:
        return DEFAULT_AVERAGE_REVIEWS
    return sum(c.review_count for c in competitors) / len(competitors)


def rank_by_strength(businesses: Sequence[BusinessRecord]) -> List[BusinessRecord]:
    # sorted() is stable, so equal strengths keep their input order.
    return sorted(businesses, key=strength, reverse=True)


def market_position(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> int:
    """1-based rank of the target among itself and its competitors."""
    combined = [target, *competitors]
    order = sorted(range(len(combined)), key=lambda i: strength(combined[i]), reverse=True)
    return order.index(0) + 1


def competitive_score(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> int:
    """0-100 score of the target against competitor averages plus listing bonuses."""
    score = 50.0

    avg_rating = average_rating(competitors)
    if target.rating > avg_rating:
        score += min(20.0, (target.rating - avg_rating) * 10)
    else:
        score -= min(20.0, (avg_rating - target.rating) * 10)

    avg_reviews = average_reviews(competitors)
    if avg_reviews > 0:
        if target.review_count > avg_reviews:
            score += min(15.0, (target.review_count - avg_reviews) / avg_reviews * 15)
        else:
            score -= min(15.0, (avg_reviews - target.review_count) / avg_reviews * 15)

    if target.contact.has_website:
        score += 10
    if target.contact.has_phone:
        score += 5

    return max(0, min(100, round_half_up(score)))


def performance_score(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> int:
    """0-64 score: the gap between the target and the market leader.

    Without competitors the score is the target's rating scaled to 100 and
    capped at 64.
    """
    if not competitors:
        return min(PERFORMANCE_CAP, round_half_up(target.rating / 5 * 100))

    ranked = rank_by_strength(competitors)
    top = ranked[0]
    top3 = ranked[:3]
    score = 100.0

    top_strength = strength(top)
    if top_strength > 0:
        score -= 30 * max(0.0, top_strength - strength(target)) / top_strength

    avg3 = sum(c.review_count for c in top3) / len(top3)
    if avg3 > 0 and target.review_count < avg3:
        score -= min(25.0, (avg3 - target.review_count) / avg3 * 25)

    if top.rating > 0 and target.rating < top.rating:
        score -= min(25.0, (top.rating - target.rating) / top.rating * 25)

    if not target.contact.has_website:
        score -= 8
    if not target.contact.has_phone:
        score -= 4
    if (target.contact.photos or 0) < 10:
        score -= 4
    if target.review_count < 50:
        score -= 4

    return max(0, min(PERFORMANCE_CAP, round_half_up(score)))


def identify_strengths(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> List[str]:
    strengths: List[str] = []
    avg_rating = average_rating(competitors)

    if competitors and target.rating > avg_rating + 0.2:
        beaten = sum(1 for c in competitors if c.rating < target.rating)
        strengths.append(f"Higher rating than {round_half_up(beaten / len(competitors) * 100)}% of competitors")

    if target.rating >= 4.5:
        strengths.append("Excellent customer service reputation")

    if target.contact.has_website and target.contact.has_phone:
        strengths.append("Complete online business profile")

    if target.review_count > average_reviews(competitors):
        strengths.append("Above average review volume")

    return strengths[:MAX_STATEMENTS]


def identify_opportunities(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> List[str]:
    opportunities: List[str] = []

    if competitors:
        # max() keeps the first competitor on ties.
        leader = max(competitors, key=lambda c: c.review_count)
        if target.review_count < leader.review_count * 0.7:
            needed = leader.review_count - target.review_count
            opportunities.append(f"Increase review volume by {needed} reviews to match market leader")

    if not target.contact.has_website:
        opportunities.append("Add website to improve online presence")

    if target.review_count < 50:
        opportunities.append("Focus on collecting more customer reviews")

    if target.rating < average_rating(competitors):
        opportunities.append("Improve service quality to boost customer ratings")

    if (target.contact.photos or 0) < 10:
        opportunities.append("Add more photos to business listing")

    return opportunities[:MAX_STATEMENTS]
