# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for the pattern engine.
"""
from flask import current_app, request, jsonify
from marshmallow import ValidationError as SchemaError
from pydantic import ValidationError

from common.logger import get_logger
from common.pdf_utils import PDFProcessingError, extract_text_by_page
from common.uploads import UploadError, read_upload
from validators import (
    DetectRequestSchema,
    GeneratePatternSchema,
    PatternLibrarySchema,
    PatternTestSchema,
    PromotePatternsSchema,
    format_errors,
)
from .discovery import analyze_document
from .library import PatternLibrary, load_library, save_library
from .matcher import detect_report
from .models import DiscoveredPattern
from .synthesizer import generate_regex_pattern
from .tester import evaluate_library, evaluate_pattern

logger = get_logger(__name__)


def current_library() -> PatternLibrary:
    return load_library(current_app.config["PATTERN_LIBRARY_PATH"])


def current_catalog():
    """Saved custom rules followed by the default catalog."""
    return current_library().build_catalog()


def register_pattern_endpoints(app):
    """Register pattern engine endpoints with Flask app."""

    @app.post("/api/patterns/detect")
    def detect_patterns_endpoint():
        """Detect values in posted text or in an uploaded PDF."""
        try:
            if request.files:
                _, data = read_upload("file", ".pdf")
                text = "\n".join(extract_text_by_page(data))
                value_type = request.form.get("value_type") or None
            else:
                payload = DetectRequestSchema().load(request.get_json(silent=True) or {})
                text = payload["text"]
                value_type = payload["value_type"]
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400
        except (UploadError, PDFProcessingError) as e:
            return jsonify({"error": str(e)}), 400

        catalog = current_catalog()
        if value_type:
            catalog = [r for r in catalog if r.value_type.value == value_type]
        report = detect_report(text, catalog)
        return jsonify(report.model_dump(mode="json"))

    @app.post("/api/patterns/discover")
    def discover_patterns_endpoint():
        """Analyse the first pages of a sample statement."""
        settings = current_app.config["STATEMENT_CONFIG"]
        try:
            _, data = read_upload("file", ".pdf")
            pages = extract_text_by_page(data, max_pages=settings.discovery_max_pages)
        except (UploadError, PDFProcessingError) as e:
            return jsonify({"error": str(e)}), 400

        result = analyze_document(pages, max_pages=settings.discovery_max_pages)
        return jsonify(result.model_dump(mode="json"))

    @app.post("/api/patterns/generate")
    def generate_pattern_endpoint():
        try:
            payload = GeneratePatternSchema().load(request.get_json(silent=True) or {})
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400

        pattern = generate_regex_pattern(payload["examples"], payload["value_type"])
        return jsonify({"pattern": pattern, "value_type": payload["value_type"]})

    @app.post("/api/patterns/test")
    def test_pattern_endpoint():
        """Run one pattern, or the saved library, over sample text or a PDF."""
        settings = current_app.config["STATEMENT_CONFIG"]
        try:
            if request.files:
                _, data = read_upload("file", ".pdf")
                form = dict(request.form)
                form["text"] = "\n".join(extract_text_by_page(data, max_pages=settings.tester_max_pages))
                payload = PatternTestSchema().load(form)
            else:
                payload = PatternTestSchema().load(request.get_json(silent=True) or {})
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400
        except (UploadError, PDFProcessingError) as e:
            return jsonify({"error": str(e)}), 400

        limit = settings.tester_match_limit
        if payload["pattern"]:
            results = [evaluate_pattern(payload["pattern"], payload["text"], limit)]
        elif payload["use_library"]:
            results = evaluate_library(current_library(), payload["text"], limit)
        else:
            return jsonify({"error": "Provide a pattern or set use_library"}), 400

        return jsonify({"results": [r.model_dump(mode="json") for r in results]})

    @app.get("/api/patterns/library")
    def get_pattern_library():
        return jsonify(current_library().model_dump(mode="json"))

    @app.post("/api/patterns/library")
    def save_pattern_library():
        """Replace the saved library."""
        try:
            payload = PatternLibrarySchema().load(request.get_json(silent=True) or {})
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400

        library = PatternLibrary()
        for pattern in payload["account_patterns"]:
            library.add_account_pattern(pattern)
        for pattern in payload["name_patterns"]:
            library.add_name_pattern(pattern)
        save_library(library, current_app.config["PATTERN_LIBRARY_PATH"])
        logger.info(
            "Saved pattern library: %d account, %d name patterns",
            len(library.account_patterns), len(library.name_patterns),
        )
        return jsonify(library.model_dump(mode="json"))

    @app.post("/api/patterns/library/promote")
    def promote_patterns():
        """Save selected discovered patterns into the library."""
        try:
            payload = PromotePatternsSchema().load(request.get_json(silent=True) or {})
            discovered = [DiscoveredPattern.model_validate(p) for p in payload["patterns"]]
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400
        except ValidationError as e:
            return jsonify({"error": f"Invalid discovered pattern: {e.errors()[0]['msg']}"}), 400

        library = current_library()
        saved, skipped = library.promote(discovered, payload["selected"])
        save_library(library, current_app.config["PATTERN_LIBRARY_PATH"])
        return jsonify({
            "saved": saved,
            "skipped": skipped,
            "library": library.model_dump(mode="json"),
        })
