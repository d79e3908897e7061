# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for statement splitting and distribution.
"""
import io

from flask import current_app, request, jsonify, send_file
from marshmallow import ValidationError as SchemaError

from common.logger import get_logger
from common.uploads import UploadError, read_upload
from patterns.endpoints import current_catalog
from validators import SendRequestSchema, SplitRequestSchema, format_errors
from .archive import extract_archive
from .customers import customers_to_csv, parse_customer_csv
from .mailer import MailgunClient
from .models import EmailTemplate
from .reconciler import match_stats, matched_only, reconcile
from .splitter import bundle_zip, split_pdf
from .templates import DEFAULT_TEMPLATE

logger = get_logger(__name__)


def _segment_json(segment):
    return segment.model_dump(mode="json", exclude={"content"})


def _record_json(record):
    return {
        "segment": _segment_json(record.segment),
        "customer": record.customer.model_dump(mode="json"),
        "matched": record.matched,
    }


def _read_customers(field="customers"):
    _, data = read_upload(field, ".csv")
    return parse_customer_csv(data.decode("utf-8", errors="replace"))


def _read_archive(field="archive"):
    name, data = read_upload(field, ".zip")
    return extract_archive(data, name)


def register_distribution_endpoints(app):
    """Register splitting and distribution endpoints with Flask app."""

    @app.post("/api/split")
    def split_statements():
        """Split a statement PDF by account and return the pieces as a ZIP."""
        try:
            name, data = read_upload("file", ".pdf")
            form = SplitRequestSchema().load(dict(request.form))
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400
        except UploadError as e:
            return jsonify({"error": str(e)}), 400

        result = split_pdf(data, current_catalog(), form["month_year"] or None, name)
        if not result.files:
            return jsonify({"error": "No statements could be split", "errors": result.errors}), 422

        response = send_file(
            io.BytesIO(bundle_zip(result.files)),
            as_attachment=True,
            download_name="split_statements.zip",
            mimetype="application/zip",
        )
        response.headers["X-Split-Files"] = str(len(result.files))
        response.headers["X-Split-Errors"] = str(len(result.errors))
        return response

    @app.post("/api/distribution/archive")
    def import_archive():
        """List the statements in a ZIP with a starter customer CSV."""
        try:
            imported = _read_archive("file")
        except UploadError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({
            "segments": [_segment_json(s) for s in imported.segments],
            "errors": imported.errors,
            "customer_csv_template": customers_to_csv(imported.segments),
        })

    @app.post("/api/distribution/customers")
    def import_customers():
        try:
            imported = _read_customers("file")
        except UploadError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify(imported.model_dump(mode="json"))

    @app.post("/api/distribution/match")
    def match_customers():
        """Pair statements from a ZIP with rows of a customer CSV."""
        try:
            imported = _read_archive()
            customers = _read_customers()
        except UploadError as e:
            return jsonify({"error": str(e)}), 400

        records = reconcile(imported.segments, customers.customers)
        return jsonify({
            "records": [_record_json(r) for r in records],
            "stats": match_stats(records).model_dump(),
            "archive_errors": imported.errors,
            "customer_errors": customers.errors,
        })

    @app.post("/api/distribution/send")
    def send_statements():
        """Email every matched statement, or one test email to test_email."""
        settings = current_app.config["STATEMENT_CONFIG"]
        if not settings.is_mail_configured():
            return jsonify({"error": "Mail delivery is not configured"}), 503

        try:
            form = SendRequestSchema().load(dict(request.form))
            imported = _read_archive()
            customers = _read_customers()
        except SchemaError as e:
            return jsonify({"error": format_errors(e)}), 400
        except UploadError as e:
            return jsonify({"error": str(e)}), 400

        template = EmailTemplate.from_text(form["template"]) if form["template"] else DEFAULT_TEMPLATE
        records = reconcile(imported.segments, customers.customers)
        matched = matched_only(records)
        if not matched:
            return jsonify({"error": "No statements matched a customer"}), 400

        client = MailgunClient(settings)
        if form["test_email"]:
            results = [client.send_test(form["test_email"], matched[0], template)]
        else:
            results = client.send_batch(records, template)

        sent = sum(1 for r in results if r.success)
        return jsonify({
            "results": [r.model_dump(mode="json") for r in results],
            "sent": sent,
            "failed": len(results) - sent,
            "stats": match_stats(records).model_dump(),
        })
