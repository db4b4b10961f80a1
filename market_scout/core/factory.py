"""Builds analysis collaborators from Settings."""

import logging
from typing import Optional

from market_scout.core.config import ConfigError, Settings
from market_scout.core.discovery import BusinessDirectory, CompetitorDiscoverer
from market_scout.core.narrative import OpenAINarrativeEnricher
from market_scout.core.orchestrator import AnalysisOrchestrator
from market_scout.core.seo import DataForSeoEnricher
from market_scout.vendors.dataforseo import DataForSeoClient
from market_scout.vendors.google_places import GooglePlacesDirectory
from market_scout.vendors.mock_directory import MockDirectory
from market_scout.vendors.serpapi_maps import SerpApiDirectory

logger = logging.getLogger(__name__)


def build_directory(settings: Settings) -> BusinessDirectory:
    provider = settings.directory_provider
    if provider == "auto":
        if settings.google_api_key:
            provider = "google"
        elif settings.serpapi_api_key:
            provider = "serpapi"
        else:
            provider = "mock"

    if provider == "google":
        if not settings.google_api_key:
            raise ConfigError("GOOGLE_PLACES_API_KEY is required for the google directory provider")
        logger.info("Using Google Places business directory")
        return GooglePlacesDirectory(settings.google_api_key)
    if provider == "serpapi":
        if not settings.serpapi_api_key:
            raise ConfigError("SERPAPI_API_KEY is required for the serpapi directory provider")
        logger.info("Using SerpAPI Google Maps business directory")
        return SerpApiDirectory(settings.serpapi_api_key)

    logger.info("Using mock business directory")
    return MockDirectory()


def build_narrative_enricher(settings: Settings) -> Optional[OpenAINarrativeEnricher]:
    if not settings.openai_api_key:
        return None
    return OpenAINarrativeEnricher(settings.openai_api_key, model=settings.openai_model)


def build_seo_enricher(settings: Settings) -> Optional[DataForSeoEnricher]:
    if not settings.dataforseo_configured:
        return None
    return DataForSeoEnricher(DataForSeoClient(settings.dataforseo_login, settings.dataforseo_password))


def build_orchestrator(settings: Settings, directory: Optional[BusinessDirectory] = None) -> AnalysisOrchestrator:
    discoverer = CompetitorDiscoverer(
        directory or build_directory(settings),
        max_workers=settings.discovery_workers,
        max_competitors=settings.max_competitors,
    )
    return AnalysisOrchestrator(
        discoverer,
        narrative_enricher=build_narrative_enricher(settings),
        seo_enricher=build_seo_enricher(settings),
    )
