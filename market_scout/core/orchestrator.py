"""Runs one competitive analysis from discovery through optional enrichment."""

from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from market_scout.core import scoring
from market_scout.core.discovery import CompetitorDiscoverer
from market_scout.core.market import summarize
from market_scout.models import AnalysisResult, BusinessRecord, NarrativeInsights, SeoReport

logger = logging.getLogger(__name__)


class AnalysisInputError(ValueError):
    """Raised when the target business cannot be analyzed."""


class NarrativeEnricher(Protocol):
    def generate(self, target: BusinessRecord, result: AnalysisResult) -> NarrativeInsights:
        ...


class SeoEnricher(Protocol):
    def analyze(self, target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> SeoReport:
        ...


def validate_target(target: BusinessRecord) -> None:
    missing = [name for name in ("service_type", "address") if not (getattr(target, name) or "").strip()]
    if missing:
        raise AnalysisInputError(f"target business is missing: {', '.join(missing)}")


def score(target: BusinessRecord, competitors: Sequence[BusinessRecord]) -> AnalysisResult:
    """Numeric and textual results for a target against an already discovered set."""
    competitors = tuple(competitors)
    return AnalysisResult(
        market_position=scoring.market_position(target, competitors),
        competitive_score=scoring.competitive_score(target, competitors),
        performance_score=scoring.performance_score(target, competitors),
        strengths=tuple(scoring.identify_strengths(target, competitors)),
        opportunities=tuple(scoring.identify_opportunities(target, competitors)),
        competitors=competitors,
        market_analysis=summarize(target, competitors),
    )


class AnalysisOrchestrator:
    def __init__(
        self,
        discoverer: CompetitorDiscoverer,
        narrative_enricher: Optional[NarrativeEnricher] = None,
        seo_enricher: Optional[SeoEnricher] = None,
        enrichment_workers: int = 2,
    ) -> None:
        self.discoverer = discoverer
        self.narrative_enricher = narrative_enricher
        self.seo_enricher = seo_enricher
        self.enrichment_workers = enrichment_workers

    def analyze(self, target: BusinessRecord) -> AnalysisResult:
        validate_target(target)

        competitors = self.discoverer.discover(target)
        result = score(target, competitors)
        logger.info(
            "Scored %s: position=%d competitive=%d performance=%d competitors=%d",
            target.id,
            result.market_position,
            result.competitive_score,
            result.performance_score,
            len(competitors),
        )
        return self._enrich(target, result)

    def _enrich(self, target: BusinessRecord, result: AnalysisResult) -> AnalysisResult:
        tasks: Dict[str, Callable[[], Any]] = {}
        if self.narrative_enricher is not None:
            tasks["ai_insights"] = lambda: self.narrative_enricher.generate(target, result)
        if self.seo_enricher is not None:
            tasks["seo_data"] = lambda: self.seo_enricher.analyze(target, result.competitors)
        if not tasks:
            return result

        with ThreadPoolExecutor(max_workers=self.enrichment_workers) as executor:
            futures = {field: executor.submit(task) for field, task in tasks.items()}
            enrichment = {field: self._settle(field, future) for field, future in futures.items()}

        return dataclasses.replace(result, **enrichment)

    @staticmethod
    def _settle(field: str, future) -> Optional[Any]:
        try:
            return future.result()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Enrichment %s failed, continuing without it: %s", field, exc)
            return None
