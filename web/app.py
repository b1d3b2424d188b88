"""
Care Digest - Web API

A small Flask JSON API over the ranking core and the interest store.

Run with: python -m web.app
"""

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request
from loguru import logger

from caredigest.config import APP_ENV, DEBUG, MAX_STARTERS
from caredigest.digest import DigestConfig, DigestGenerator
from caredigest.interest import InterestTracker
from caredigest.logging_setup import configure_logging
from caredigest.models.context import ContextSnapshot
from caredigest.pipeline import attach_interest
from caredigest.ranking import InsightRanker, StarterRanker
from caredigest.storage import InterestStore, StorageError, create_store


API_PREFIX = "/api/v1"


def _json_body() -> dict:
    """Request body as a JSON object; raises ValueError otherwise."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def create_app(store: Optional[InterestStore] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        store: Interest store backing the tracker. Defaults to the configured backend.
    """
    app = Flask(__name__)

    tracker = InterestTracker(store or create_store())
    insight_ranker = InsightRanker()
    starter_ranker = StarterRanker()
    generator = DigestGenerator(insight_ranker, starter_ranker, DigestConfig())

    app.config["INTEREST_TRACKER"] = tracker

    def _context() -> ContextSnapshot:
        return attach_interest(ContextSnapshot.from_dict(_json_body()), tracker)

    # =========================================================================
    # Error Handling
    # =========================================================================

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return jsonify({"success": False, "error": str(e)}), 400

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        logger.error("Interest store unavailable: {}", e)
        return jsonify({"success": False, "error": "Interest store unavailable"}), 503

    # =========================================================================
    # Health
    # =========================================================================

    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "env": APP_ENV,
            "store": tracker.store.name,
            "time": datetime.now().isoformat(timespec="seconds"),
        })

    # =========================================================================
    # Personalization
    # =========================================================================

    @app.route(f"{API_PREFIX}/personalization/insights", methods=["POST"])
    def api_insights():
        """Ranked insight cards for a context document."""
        context = _context()
        cards = insight_ranker.rank(context)
        return jsonify({
            "subject_id": context.subject_id,
            "date": context.date.isoformat(),
            "insights": [c.to_dict() for c in cards],
        })

    @app.route(f"{API_PREFIX}/personalization/starters", methods=["POST"])
    def api_starters():
        """Ranked conversation starters for a context document."""
        context = _context()
        limit = request.args.get("limit", type=int)
        limit = MAX_STARTERS if limit is None else max(0, min(limit, MAX_STARTERS))
        starters = starter_ranker.rank(context, limit=limit)
        return jsonify({
            "subject_id": context.subject_id,
            "starters": [s.to_dict() for s in starters],
        })

    @app.route(f"{API_PREFIX}/personalization/digest", methods=["POST"])
    def api_digest():
        """Full digest (insights, starters, topic scores) for a context document."""
        digest = generator.build(_context())
        return jsonify(digest.to_dict())

    # =========================================================================
    # Interest Vectors
    # =========================================================================

    @app.route(f"{API_PREFIX}/interests/<user_id>/<subject_id>")
    def api_get_interest(user_id, subject_id):
        vector = tracker.get_vector(user_id, subject_id)
        return jsonify(vector.to_dict())

    @app.route(f"{API_PREFIX}/interests/<user_id>/<subject_id>/interactions", methods=["POST"])
    def api_record_interaction(user_id, subject_id):
        data = _json_body()
        topic = data.get("topic")
        if not topic:
            raise ValueError("topic is required")

        weight = data.get("weight", 1.0)
        try:
            weight = float(weight)
        except (TypeError, ValueError):
            raise ValueError(f"weight must be a number, got {weight!r}") from None

        vector = tracker.record_interaction(user_id, subject_id, topic, weight)
        return jsonify(vector.to_dict())

    @app.route(f"{API_PREFIX}/interests/<user_id>/<subject_id>/explicit-topics", methods=["PUT"])
    def api_set_explicit_topics(user_id, subject_id):
        topics = _json_body().get("topics")
        if not isinstance(topics, list):
            raise ValueError("topics must be a list")

        vector = tracker.set_explicit_topics(user_id, subject_id, topics)
        return jsonify(vector.to_dict())

    return app


app = create_app()


if __name__ == "__main__":
    configure_logging()
    print("=" * 50)
    print("🚀 Care Digest API")
    print("=" * 50)
    print("Listening on http://localhost:5001")
    print("Press Ctrl+C to stop")
    print("=" * 50)
    app.run(debug=DEBUG, port=5001)
