"""HTTP entrypoint exposing business search and competitor analysis."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Iterator, Optional

from flask import Flask, Response, jsonify, request, stream_with_context

from market_scout.core import db
from market_scout.core.config import Settings, get_settings
from market_scout.core.discovery import BusinessDirectory
from market_scout.core.factory import build_directory, build_orchestrator
from market_scout.core.orchestrator import AnalysisOrchestrator, validate_target
from market_scout.etl.transform import record_from_payload

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


def _event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


def create_app(
    settings: Optional[Settings] = None,
    directory: Optional[BusinessDirectory] = None,
    orchestrator: Optional[AnalysisOrchestrator] = None,
) -> Flask:
    """Build the Flask app around explicitly constructed collaborators."""
    settings = settings or get_settings()
    directory = directory or build_directory(settings)
    orchestrator = orchestrator or build_orchestrator(settings, directory=directory)
    persist = bool(settings.database_url)

    app = Flask(__name__)

    @app.get("/")
    def root() -> Any:
        return "ok", 200

    @app.get("/healthz")
    def healthcheck() -> Any:
        return (
            jsonify(
                {
                    "status": "ok",
                    "directory": type(directory).__name__,
                    "ai_insights": orchestrator.narrative_enricher is not None,
                    "seo_enrichment": orchestrator.seo_enricher is not None,
                    "persistence": persist,
                    "revision": os.getenv("K_REVISION", "unknown"),
                }
            ),
            200,
        )

    @app.get("/api/search/businesses")
    def search_businesses() -> Any:
        query = (request.args.get("q") or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return jsonify({"success": False, "results": [], "error": "Query must be at least 2 characters"})

        try:
            businesses = directory.search(query)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Business search failed for %s: %s", query, exc)
            return jsonify({"success": False, "results": [], "error": "Failed to search businesses"}), 500

        return jsonify(
            {
                "success": True,
                "results": [asdict(business) for business in businesses],
                "total_results": len(businesses),
            }
        )

    @app.post("/api/analysis/start")
    def start_analysis() -> Any:
        payload: Dict[str, Any] = request.get_json(silent=True) or {}
        try:
            target = record_from_payload(payload)
            validate_target(target)
        except ValueError as exc:
            return jsonify({"success": False, "error": f"Invalid business data: {exc}"}), 400

        business_id = None
        if persist:
            try:
                business_id = db.upsert_business(target)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Failed to store business %s: %s", target.id, exc)
                return jsonify({"success": False, "error": "Failed to store business"}), 500

        def generate() -> Iterator[str]:
            yield _event({"progress": 15, "message": "Discovering local competitors..."})
            try:
                result = orchestrator.analyze(target)
                yield _event({"progress": 75, "message": "Saving analysis..." if persist else "Preparing results..."})
                analysis_id = db.insert_analysis(business_id, result) if persist else None
            except Exception as exc:  # noqa: BLE001
                logger.exception("Analysis failed for %s: %s", target.id, exc)
                yield _event({"progress": 0, "message": "Analysis failed", "error": "Failed to complete analysis"})
                return

            yield _event(
                {
                    "progress": 100,
                    "message": "Analysis complete!",
                    "completed": True,
                    "analysis_id": analysis_id,
                    "business_id": business_id,
                    "result": result.to_dict(),
                }
            )

        headers = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
        return Response(stream_with_context(generate()), mimetype="text/event-stream", headers=headers)

    @app.get("/api/analysis/<int:analysis_id>")
    def get_analysis(analysis_id: int) -> Any:
        if not persist:
            return jsonify({"success": False, "error": "Persistence is not configured"}), 503

        try:
            analysis = db.get_analysis(analysis_id)
            if analysis is None:
                return jsonify({"success": False, "error": "Analysis not found"}), 404
            business = db.get_business(analysis["target_business_id"])
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to load analysis %s: %s", analysis_id, exc)
            return jsonify({"success": False, "error": "Failed to retrieve analysis"}), 500

        return json.dumps({"success": True, "analysis": analysis, "business": business}, default=str), 200, {
            "Content-Type": "application/json"
        }

    return app


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    settings = get_settings()
    logger.info("[BOOT] Binding on 0.0.0.0:%d", settings.port)
    create_app(settings).run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
