"""Competitor discovery through several phrasings of the same local search."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Protocol, Sequence, Tuple

from market_scout.etl.address import extract_locality
from market_scout.models import BusinessRecord

logger = logging.getLogger(__name__)

QUERY_TEMPLATES = (
    "{service} near {locality}",
    "{service} services {locality}",
    "{service} contractors {locality}",
    "{service} companies in {locality}",
)
MAX_COMPETITORS = 10
EARLY_STOP_AT = 15


class BusinessDirectory(Protocol):
    def search(self, query: str) -> List[BusinessRecord]:
        ...


def build_queries(service_type: str, locality: str) -> List[str]:
    return [template.format(service=service_type, locality=locality) for template in QUERY_TEMPLATES]


class CompetitorDiscoverer:
    """Find up to ``max_competitors`` distinct businesses competing with a target.

    Variants are merged in query order and the first record seen for an id
    wins, whether the searches ran one by one or concurrently.
    """

    def __init__(
        self,
        directory: BusinessDirectory,
        locality_extractor: Callable[[str], str] = extract_locality,
        max_workers: int = 4,
        max_competitors: int = MAX_COMPETITORS,
        early_stop_at: int = EARLY_STOP_AT,
    ) -> None:
        self.directory = directory
        self.locality_extractor = locality_extractor
        self.max_workers = max_workers
        self.max_competitors = max_competitors
        self.early_stop_at = early_stop_at

    def discover(self, target: BusinessRecord) -> Tuple[BusinessRecord, ...]:
        locality = self.locality_extractor(target.address) or target.address
        queries = build_queries(target.service_type, locality)
        logger.info("Discovering competitors for %s with %d query variants", target.id, len(queries))

        if self.max_workers <= 1:
            accumulator = self._collect_sequential(queries)
        else:
            accumulator = self._collect_concurrent(queries)

        competitors = [record for record in accumulator.values() if record.id != target.id]
        logger.info(
            "Found %d unique businesses, %d competitors after excluding target %s",
            len(accumulator),
            len(competitors),
            target.id,
        )
        return tuple(competitors[: self.max_competitors])

    def _search(self, query: str) -> List[BusinessRecord]:
        try:
            return list(self.directory.search(query))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Directory search failed for query=%s: %s", query, exc)
            return []

    def _merge(self, accumulator: Dict[str, BusinessRecord], records: Sequence[BusinessRecord]) -> None:
        for record in records:
            if record.id not in accumulator:
                accumulator[record.id] = record

    def _collect_sequential(self, queries: Sequence[str]) -> Dict[str, BusinessRecord]:
        accumulator: Dict[str, BusinessRecord] = {}
        for query in queries:
            if len(accumulator) >= self.early_stop_at:
                logger.debug("Early stop with %d businesses before query=%s", len(accumulator), query)
                break
            self._merge(accumulator, self._search(query))
        return accumulator

    def _collect_concurrent(self, queries: Sequence[str]) -> Dict[str, BusinessRecord]:
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(queries))) as executor:
            futures = [executor.submit(self._search, query) for query in queries]
            responses = [future.result() for future in futures]

        accumulator: Dict[str, BusinessRecord] = {}
        for query, records in zip(queries, responses):
            if len(accumulator) >= self.early_stop_at:
                logger.debug("Early stop with %d businesses, ignoring query=%s", len(accumulator), query)
                break
            self._merge(accumulator, records)
        return accumulator
