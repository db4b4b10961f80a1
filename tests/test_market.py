import pytest

from market_scout.core.market import summarize


def test_summarize_with_competitors(business_factory):
    target = business_factory("t", review_count=100)
    competitors = [
        business_factory("c1", rating=4.6, review_count=200),
        business_factory("c2", rating=4.2, review_count=100),
    ]

    summary = summarize(target, competitors)

    assert summary.total_competitors == 2
    assert summary.average_rating == pytest.approx(4.4)
    assert summary.market_share == pytest.approx(25.0)


def test_summarize_without_competitors_uses_defaults(business_factory):
    summary = summarize(business_factory("t", rating=3.5, review_count=12), [])

    assert summary.total_competitors == 0
    assert summary.average_rating == 4.0
    assert summary.market_share == 100.0


def test_summarize_zero_reviews_everywhere(business_factory):
    target = business_factory("t", review_count=0)
    competitors = [business_factory("c1", review_count=0)]
    assert summarize(target, competitors).market_share == 0
    assert summarize(target, []).market_share == 0


@pytest.mark.parametrize("target_reviews,competitor_reviews", [(0, [5]), (3, [0, 0]), (7, [1, 2, 3]), (1, [10000])])
def test_market_share_bounded(business_factory, target_reviews, competitor_reviews):
    target = business_factory("t", review_count=target_reviews)
    competitors = [business_factory(f"c{i}", review_count=n) for i, n in enumerate(competitor_reviews)]
    share = summarize(target, competitors).market_share
    assert 0 <= share <= 100


def test_summarize_rounds_ties_up(business_factory):
    target = business_factory("t", review_count=1)
    competitors = [
        business_factory("c1", rating=4.0, review_count=5),
        business_factory("c2", rating=4.5, review_count=10),
    ]

    summary = summarize(target, competitors)

    assert summary.average_rating == 4.3
    assert summary.market_share == 6.3
