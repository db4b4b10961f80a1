"""CLI job that locates a business and prints its competitive analysis."""

import argparse
import dataclasses
import json
import logging
from typing import List, Optional

from market_scout.core.config import ConfigError, get_settings
from market_scout.core.factory import build_directory, build_orchestrator
from market_scout.models import AnalysisResult

logger = logging.getLogger(__name__)


def run_analysis_job(*, query: str, index: int = 0, service_type: Optional[str] = None) -> AnalysisResult:
    query = query.strip()
    if not query:
        raise ValueError("Query must not be empty")

    settings = get_settings()
    directory = build_directory(settings)
    orchestrator = build_orchestrator(settings, directory=directory)

    logger.info("Looking up target business for query=%s", query)
    matches = directory.search(query)
    if not matches:
        raise LookupError(f"No business found for query {query!r}")
    if not 0 <= index < len(matches):
        raise LookupError(f"Result index {index} out of range, {len(matches)} businesses found")

    target = matches[index]
    if service_type:
        target = dataclasses.replace(target, service_type=service_type)
    logger.info("Analyzing %s (%s, %s)", target.name, target.id, target.service_type)
    return orchestrator.analyze(target)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a competitor analysis for a local business")
    parser.add_argument("query", help="Search text that finds the target, e.g. 'Elite HVAC Phoenix'")
    parser.add_argument("--index", type=int, default=0, help="Which search result to analyze")
    parser.add_argument("--service-type", dest="service_type", help="Override the detected service type")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation of the printed result")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    try:
        result = run_analysis_job(query=args.query, index=args.index, service_type=args.service_type)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except (ValueError, LookupError) as exc:
        logger.error("Analysis not possible: %s", exc)
        return 1

    print(json.dumps(result.to_dict(), indent=args.indent))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
