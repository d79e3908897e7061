"""
Statement tools – API back-end

Endpoints
─────────
GET  /health                          → {"status": "ok"}
POST /api/patterns/...                → detection, discovery, synthesis, testing, library
POST /api/split                       → ZIP of per-account statement PDFs
POST /api/distribution/...            → archive import, customer list, matching, email
"""

# SPDX-License-Identifier: AGPL-3.0-only

# ── imports ──────────────────────────────────────────────────────
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS                 # allow front-end origin
from werkzeug.exceptions import HTTPException

# Load environment variables from .env file
load_dotenv()

from common.config import ToolsConfig, config as default_config
from common.logger import get_logger
from distribution.endpoints import register_distribution_endpoints
from patterns.endpoints import register_pattern_endpoints

logger = get_logger(__name__)


def create_app(settings: ToolsConfig = None) -> Flask:
    """Build the Flask application."""
    settings = settings or default_config

    app = Flask(__name__)
    CORS(app)
    app.config["STATEMENT_CONFIG"] = settings
    app.config["UPLOAD_FOLDER"] = settings.get_effective_upload_folder()
    app.config["MAX_CONTENT_LENGTH"] = settings.max_file_size
    app.config["PATTERN_LIBRARY_PATH"] = settings.pattern_library_path

    register_pattern_endpoints(app)
    register_distribution_endpoints(app)

    # ── ROUTES ───────────────────────────────────────────────────
    @app.get("/")
    def root():
        """Simple root for anyone hitting the API directly."""
        return {"service": "Statement Tools API", "docs": "/health"}, 200

    @app.get("/health")
    def health():
        """Used by the front-end (and uptime checks) to verify API is alive."""
        return jsonify(status="ok", mail_configured=settings.is_mail_configured()), 200

    @app.errorhandler(413)
    def file_too_large(e):
        limit_mb = settings.max_file_size // (1024 * 1024)
        return jsonify(error=f"File too large (max {limit_mb} MB)"), 413

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error: %s", e)
        return jsonify(error="Internal server error"), 500

    logger.info("Statement tools API ready (mail configured: %s)", settings.is_mail_configured())
    return app


app = create_app()


if __name__ == "__main__":
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
    app.run(host="0.0.0.0", port=8000)   # change port if needed
