"""Database helpers for storing target businesses and their analyses."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from psycopg2 import extras, pool

from market_scout.core.config import get_settings
from market_scout.models import AnalysisResult, BusinessRecord

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def _business_params(record: BusinessRecord) -> Dict[str, Any]:
    return {
        "place_id": record.id,
        "business_name": record.name,
        "address": record.address,
        "service_type": record.service_type,
        "rating": record.rating,
        "review_count": record.review_count,
        "business_status": record.contact.business_status,
        "currently_open": record.contact.currently_open,
        "latitude": record.location.lat,
        "longitude": record.location.lng,
        "phone": record.contact.phone,
        "website": record.contact.website,
        "hours": extras.Json(record.contact.hours) if record.contact.hours is not None else None,
        "photos": record.contact.photos,
    }


def _analysis_params(business_id: int, result: AnalysisResult) -> Dict[str, Any]:
    payload = result.to_dict()
    return {
        "target_business_id": business_id,
        "market_position": result.market_position,
        "competitive_score": result.competitive_score,
        "performance_score": result.performance_score,
        "strengths": extras.Json(list(result.strengths)),
        "opportunities": extras.Json(list(result.opportunities)),
        "competitor_data": extras.Json(payload["competitors"]),
        "market_share": result.market_analysis.market_share,
        "average_competitor_rating": result.market_analysis.average_rating,
        "total_competitors": result.market_analysis.total_competitors,
        "ai_insights": extras.Json(payload["ai_insights"]) if result.ai_insights else None,
        "seo_data": extras.Json(payload["seo_data"]) if result.seo_data else None,
    }


_UPSERT_BUSINESS = """
INSERT INTO home_service_businesses (
    place_id,
    business_name,
    address,
    service_type,
    rating,
    review_count,
    business_status,
    currently_open,
    latitude,
    longitude,
    phone,
    website,
    hours,
    photos,
    updated_at
) VALUES (
    %(place_id)s,
    %(business_name)s,
    %(address)s,
    %(service_type)s,
    %(rating)s,
    %(review_count)s,
    %(business_status)s,
    %(currently_open)s,
    %(latitude)s,
    %(longitude)s,
    %(phone)s,
    %(website)s,
    %(hours)s,
    %(photos)s,
    NOW()
)
ON CONFLICT (place_id) DO UPDATE SET
    business_name = EXCLUDED.business_name,
    address = EXCLUDED.address,
    service_type = EXCLUDED.service_type,
    rating = EXCLUDED.rating,
    review_count = EXCLUDED.review_count,
    business_status = EXCLUDED.business_status,
    currently_open = EXCLUDED.currently_open,
    latitude = EXCLUDED.latitude,
    longitude = EXCLUDED.longitude,
    phone = EXCLUDED.phone,
    website = EXCLUDED.website,
    hours = EXCLUDED.hours,
    photos = EXCLUDED.photos,
    updated_at = NOW()
RETURNING id;
"""

_INSERT_ANALYSIS = """
INSERT INTO competitor_analyses (
    target_business_id,
    market_position,
    competitive_score,
    performance_score,
    strengths,
    opportunities,
    competitor_data,
    market_share,
    average_competitor_rating,
    total_competitors,
    ai_insights,
    seo_data
) VALUES (
    %(target_business_id)s,
    %(market_position)s,
    %(competitive_score)s,
    %(performance_score)s,
    %(strengths)s,
    %(opportunities)s,
    %(competitor_data)s,
    %(market_share)s,
    %(average_competitor_rating)s,
    %(total_competitors)s,
    %(ai_insights)s,
    %(seo_data)s
)
RETURNING id;
"""


def upsert_business(record: BusinessRecord) -> int:
    """Persist the target business idempotently and return its row id."""
    params = _business_params(record)
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_UPSERT_BUSINESS, params)
            business_id = cur.fetchone()[0]
        conn.commit()
    logger.debug("Upserted business %s as id=%s", record.id, business_id)
    return business_id


def insert_analysis(business_id: int, result: AnalysisResult) -> int:
    params = _analysis_params(business_id, result)
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_INSERT_ANALYSIS, params)
            analysis_id = cur.fetchone()[0]
        conn.commit()
    logger.debug("Stored analysis id=%s for business id=%s", analysis_id, business_id)
    return analysis_id


def _fetch_one(sql: str, row_id: int) -> Optional[Dict[str, Any]]:
    with get_connection() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(sql, (row_id,))
            row = cur.fetchone()
    return dict(row) if row else None


def get_analysis(analysis_id: int) -> Optional[Dict[str, Any]]:
    return _fetch_one("SELECT * FROM competitor_analyses WHERE id = %s", analysis_id)


def get_business(business_id: int) -> Optional[Dict[str, Any]]:
    return _fetch_one("SELECT * FROM home_service_businesses WHERE id = %s", business_id)
