"""Core data models shared by discovery, scoring and enrichment."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Location:
    lat: float = 0.0
    lng: float = 0.0


@dataclass(frozen=True)
class ContactInfo:
    """Public listing details; every field is optional on the provider side."""

    phone: Optional[str] = None
    website: Optional[str] = None
    photos: int = 0
    business_status: str = "OPERATIONAL"
    currently_open: Optional[bool] = None
    hours: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def has_website(self) -> bool:
        return bool(self.website)

    @property
    def has_phone(self) -> bool:
        return bool(self.phone)


@dataclass(frozen=True)
class BusinessRecord:
    """Normalized snapshot of a business returned by a directory lookup."""

    id: str
    name: str
    address: str = ""
    service_type: str = ""
    rating: float = 0.0
    review_count: int = 0
    location: Location = field(default_factory=Location)
    contact: ContactInfo = field(default_factory=ContactInfo)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("BusinessRecord.id must not be empty")
        if not 0.0 <= self.rating <= 5.0:
            raise ValueError(f"rating must be within [0, 5], got {self.rating}")
        if self.review_count < 0:
            raise ValueError(f"review_count must be non-negative, got {self.review_count}")


@dataclass(frozen=True)
class MarketAnalysis:
    total_competitors: int
    average_rating: float
    # Share of combined review counts; an approximation, not a true market size.
    market_share: float


@dataclass(frozen=True)
class NarrativeInsights:
    executive_summary: str
    key_findings: Tuple[str, ...] = ()
    strategic_recommendations: Tuple[str, ...] = ()
    market_opportunities: Tuple[str, ...] = ()
    competitive_advantages: Tuple[str, ...] = ()
    action_items: Tuple[str, ...] = ()
    risk_factors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SeoMetrics:
    domain_authority: int = 0
    backlinks: int = 0
    referring_domains: int = 0
    organic_keywords: int = 0
    organic_traffic: int = 0


@dataclass(frozen=True)
class KeywordOpportunity:
    keyword: str
    search_volume: int
    difficulty: int
    current_position: Optional[int] = None
    opportunity: bool = True


@dataclass(frozen=True)
class KeywordRanking:
    keyword: str
    position: int
    search_volume: int
    url: Optional[str] = None


@dataclass(frozen=True)
class KeywordGap:
    keyword: str
    search_volume: int
    top_competitor: str
    competitor_position: int


@dataclass(frozen=True)
class LocalSeoInsights:
    local_pack_presence: bool = False
    citation_count: int = 0
    nap_consistency: bool = True
    competitor_gaps: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CompetitorDomain:
    domain: str
    visibility: float = 0.0
    common_keywords: int = 0
    strengths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SeoReport:
    seo_metrics: SeoMetrics = field(default_factory=SeoMetrics)
    keyword_opportunities: Tuple[KeywordOpportunity, ...] = ()
    keywords_not_ranking_for: Tuple[KeywordGap, ...] = ()
    keywords_ranking_for: Tuple[KeywordRanking, ...] = ()
    local_seo: LocalSeoInsights = field(default_factory=LocalSeoInsights)
    competitor_intelligence: Tuple[CompetitorDomain, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis run. Enrichment is attached with dataclasses.replace."""

    market_position: int
    competitive_score: int
    performance_score: int
    strengths: Tuple[str, ...]
    opportunities: Tuple[str, ...]
    competitors: Tuple[BusinessRecord, ...]
    market_analysis: MarketAnalysis
    ai_insights: Optional[NarrativeInsights] = None
    seo_data: Optional[SeoReport] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert into the JSON payload returned by the API and the CLI."""
        return asdict(self)
