"""
JSON API for line item suggestions.

Routes:
- POST /api/suggest   {"keywords": "..."} -> {"suggestions": [...]}
- GET  /api/health
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from invoicewise.config import AppConfig, get_config
from invoicewise.llm.client import LLMClient
from invoicewise.suggestions import (
    NO_KEYWORDS_MESSAGE,
    SUGGESTION_FAILED_MESSAGE,
    EmptyKeywordsError,
    SuggestionError,
    suggest_items,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.route("/suggest", methods=["POST"])
def api_suggest():
    body = request.get_json(silent=True)
    keywords = body.get("keywords") if isinstance(body, dict) else None
    if not isinstance(keywords, str):
        keywords = None

    try:
        suggestions = suggest_items(
            keywords,
            client=current_app.extensions["invoicewise.llm_client"],
            config=current_app.extensions["invoicewise.config"],
        )
    except EmptyKeywordsError:
        return jsonify({"error": NO_KEYWORDS_MESSAGE}), 400
    except SuggestionError as e:
        logger.error(f"API Suggestion Error: {e.__cause__ or e}")
        return jsonify({"error": SUGGESTION_FAILED_MESSAGE}), 500

    return jsonify({"suggestions": [s.to_dict() for s in suggestions]}), 200


@api_bp.route("/health", methods=["GET"])
def api_health():
    return jsonify({
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }), 200


def create_app(config: Optional[AppConfig] = None, client: Optional[LLMClient] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Application configuration (global config if omitted)
        client: LLM client to serve suggestions with (built from config if omitted)
    """
    config = config or get_config()
    app = Flask(__name__)
    app.extensions["invoicewise.config"] = config
    app.extensions["invoicewise.llm_client"] = client or LLMClient(config=config)
    app.register_blueprint(api_bp)
    return app


def main():
    """Run the development server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    create_app().run(host="127.0.0.1", port=5000)


if __name__ == "__main__":
    main()
