"""Local SEO enrichment built from DataForSEO lookups."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from market_scout.etl.address import extract_domain, extract_locality, extract_state
from market_scout.models import (
    BusinessRecord,
    CompetitorDomain,
    KeywordGap,
    KeywordOpportunity,
    KeywordRanking,
    LocalSeoInsights,
    SeoMetrics,
    SeoReport,
)
from market_scout.vendors.dataforseo import DataForSeoClient

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 10
MIN_SEARCH_VOLUME = 10
MAX_RANKING_POSITION = 20


def build_local_keywords(business: BusinessRecord, city: str, state: str) -> List[str]:
    """Local search phrases for the business, most relevant first."""
    service = business.service_type.lower()
    keywords = [
        f"{service} {city}",
        f"{service} {city} {state}",
        f"{city} {service}",
        f"{service} near me",
        f"{service} service {city}",
        f"{service} contractor {city}",
        f"{service} company {city}",
        f"emergency {service} {city}",
        f"24 hour {service} {city}",
        f"{service} emergency service {city}",
        f"best {service} {city}",
        f"top {service} {city}",
        business.name,
        f"{business.name} {city}",
        f"{business.name} reviews",
    ]
    return [" ".join(k.split()) for k in keywords][:MAX_KEYWORDS]


def keyword_opportunities(
    keyword_data: Sequence[Dict[str, Any]],
    serp_results: Sequence[Dict[str, Any]],
    domain: str,
) -> List[KeywordOpportunity]:
    opportunities = []
    for row in keyword_data:
        if row["search_volume"] <= MIN_SEARCH_VOLUME:
            continue
        ranking = None
        if domain:
            ranking = next(
                (s for s in serp_results if s["keyword"] == row["keyword"] and domain in s["url"]),
                None,
            )
        position = ranking["position"] if ranking else None
        opportunities.append(
            KeywordOpportunity(
                keyword=row["keyword"],
                search_volume=row["search_volume"],
                difficulty=round(row["competition"] * 100),
                current_position=position,
                opportunity=position is None or position > 3,
            )
        )
    return opportunities


def keyword_gaps(
    keyword_data: Sequence[Dict[str, Any]],
    serp_results: Sequence[Dict[str, Any]],
    business: BusinessRecord,
    competitors: Sequence[BusinessRecord],
) -> Tuple[List[KeywordRanking], List[KeywordGap]]:
    """Split keywords into those the business ranks for and those only competitors rank for."""
    domain = extract_domain(business.contact.website)
    competitor_domains = {
        extract_domain(c.contact.website): c for c in competitors if extract_domain(c.contact.website)
    }

    ranking_for: List[KeywordRanking] = []
    not_ranking_for: List[KeywordGap] = []
    for row in keyword_data:
        if row["search_volume"] < MIN_SEARCH_VOLUME:
            continue
        matches = [s for s in serp_results if s["keyword"] == row["keyword"]]

        own = next((s for s in matches if domain and domain in s["url"]), None)
        if own and own["position"] <= MAX_RANKING_POSITION:
            ranking_for.append(
                KeywordRanking(
                    keyword=row["keyword"],
                    position=own["position"],
                    search_volume=row["search_volume"],
                    url=own["url"],
                )
            )
            continue

        rivals = sorted(
            (s for s in matches if any(d in s["url"] for d in competitor_domains)),
            key=lambda s: s["position"],
        )
        if rivals:
            top = rivals[0]
            owner = next((c for d, c in competitor_domains.items() if d in top["url"]), None)
            not_ranking_for.append(
                KeywordGap(
                    keyword=row["keyword"],
                    search_volume=row["search_volume"],
                    top_competitor=owner.name if owner else "Unknown Competitor",
                    competitor_position=top["position"],
                )
            )

    return ranking_for[:10], not_ranking_for[:5]


def local_seo_insights(
    local_pack: Sequence[Dict[str, Any]],
    business: BusinessRecord,
    competitors: Sequence[BusinessRecord],
) -> LocalSeoInsights:
    titles = [item.get("title") or "" for item in local_pack]
    in_pack = any(business.name in title for title in titles)
    gaps: Tuple[str, ...] = ()
    if not in_pack:
        gaps = tuple(c.name for c in competitors if any(c.name in title for title in titles))
    return LocalSeoInsights(
        local_pack_presence=in_pack,
        citation_count=len(local_pack),
        nap_consistency=True,
        competitor_gaps=gaps,
    )


def seo_metrics(backlinks: Optional[Dict[str, Any]]) -> SeoMetrics:
    if not backlinks:
        return SeoMetrics()
    return SeoMetrics(
        domain_authority=backlinks.get("rank") or 0,
        backlinks=backlinks.get("backlinks") or 0,
        referring_domains=backlinks.get("referring_domains") or 0,
        organic_keywords=backlinks.get("organic_keywords") or 0,
        organic_traffic=backlinks.get("organic_traffic") or 0,
    )


def _domain_strengths(item: Dict[str, Any]) -> Tuple[str, ...]:
    strengths = []
    if (item.get("etv") or 0) > 1000:
        strengths.append("High organic visibility")
    if (item.get("keywords_count") or 0) > 100:
        strengths.append("Broad keyword coverage")
    if (item.get("traffic") or 0) > 5000:
        strengths.append("Strong traffic volume")
    return tuple(strengths)


def competitor_intelligence(domains: Sequence[Dict[str, Any]]) -> List[CompetitorDomain]:
    return [
        CompetitorDomain(
            domain=item.get("domain") or "",
            visibility=item.get("etv") or 0,
            common_keywords=item.get("keywords_count") or 0,
            strengths=_domain_strengths(item),
        )
        for item in domains[:5]
    ]


class DataForSeoEnricher:
    """Builds an SeoReport for a target; individual lookup failures degrade to empty data."""

    def __init__(self, client: DataForSeoClient, max_workers: int = 5) -> None:
        self.client = client
        self.max_workers = max_workers

    def _safe(self, name: str, call: Callable[[], Any], default: Any) -> Any:
        try:
            return call()
        except Exception as exc:  # noqa: BLE001
            logger.warning("DataForSEO %s lookup failed: %s", name, exc)
            return default

    def analyze(self, business: BusinessRecord, competitors: Sequence[BusinessRecord]) -> SeoReport:
        domain = extract_domain(business.contact.website)
        city = extract_locality(business.address)
        state = extract_state(business.address)
        location = ", ".join(part for part in (city, state) if part) or "United States"
        keywords = build_local_keywords(business, city, state)
        logger.info("Running SEO analysis for %s in %s with %d keywords", business.name, location, len(keywords))

        lookups: Dict[str, Tuple[Callable[[], Any], Any]] = {
            "serp": (lambda: self.client.serp_results(keywords, location), []),
            "keywords": (lambda: self.client.keyword_data(keywords), []),
            "local_pack": (lambda: self.client.local_pack(f"{business.service_type} {city}".strip(), location), []),
        }
        if domain:
            lookups["backlinks"] = (lambda: self.client.backlink_summary(domain), None)
            lookups["competitor_domains"] = (lambda: self.client.competitor_domains(domain), [])

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                name: executor.submit(self._safe, name, call, default)
                for name, (call, default) in lookups.items()
            }
            data = {name: future.result() for name, future in futures.items()}

        serp = data["serp"]
        keyword_rows = data["keywords"]
        ranking_for, not_ranking_for = keyword_gaps(keyword_rows, serp, business, competitors)
        report = SeoReport(
            seo_metrics=seo_metrics(data.get("backlinks")),
            keyword_opportunities=tuple(keyword_opportunities(keyword_rows, serp, domain)),
            keywords_not_ranking_for=tuple(not_ranking_for),
            keywords_ranking_for=tuple(ranking_for),
            local_seo=local_seo_insights(data["local_pack"], business, competitors),
            competitor_intelligence=tuple(competitor_intelligence(data.get("competitor_domains") or [])),
        )
        logger.info(
            "SEO analysis found %d ranking keywords and %d gaps for %s",
            len(report.keywords_ranking_for),
            len(report.keywords_not_ranking_for),
            business.name,
        )
        return report
