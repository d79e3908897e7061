# SPDX-License-Identifier: AGPL-3.0-only

"""
Integration tests for the HTTP endpoints, using the Flask test client.
"""

import io
import zipfile
from unittest.mock import patch

import pytest

from app import create_app
from common.config import ToolsConfig
from distribution.models import DeliveryResult


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _upload(content, filename):
    return (io.BytesIO(content), filename)


class TestHealth:
    """Test service endpoints."""

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"
        assert resp.get_json()["mail_configured"] is False

    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_upload_too_large(self, tmp_path, statement_pdf):
        settings = ToolsConfig(pattern_library_path=str(tmp_path / "lib.json"), max_file_size=64)
        client = create_app(settings).test_client()
        resp = client.post(
            "/api/split",
            data={"file": _upload(statement_pdf, "big.pdf")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 413
        assert "too large" in resp.get_json()["error"]


class TestPatternEndpoints:
    """Test the pattern engine over HTTP."""

    def test_detect_text(self, client):
        resp = client.post("/api/patterns/detect", json={"text": "Account Nbr: FBNWSTX999888"})
        assert resp.status_code == 200
        matches = resp.get_json()["matches"]["labeled_account_numbers"]
        assert matches[0]["value"] == "FBNWSTX999888"
        assert matches[0]["confidence"] > 0.8

    def test_detect_filtered_by_type(self, client, sample_text):
        resp = client.post("/api/patterns/detect", json={"text": sample_text, "value_type": "date"})
        assert set(resp.get_json()["matches"]) == {"slash_dates"}

    def test_detect_pdf(self, client, statement_pdf):
        resp = client.post(
            "/api/patterns/detect",
            data={"file": _upload(statement_pdf, "s.pdf")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 200
        assert "labeled_account_numbers" in resp.get_json()["matches"]

    def test_detect_requires_text(self, client):
        resp = client.post("/api/patterns/detect", json={"text": "   "})
        assert resp.status_code == 400
        assert "Text field is required" in resp.get_json()["error"]

    def test_discover(self, client, statement_pdf):
        resp = client.post(
            "/api/patterns/discover",
            data={"file": _upload(statement_pdf, "s.pdf")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["patterns"]
        assert all(0 <= p["confidence"] <= 1 for p in body["patterns"])

    def test_discover_requires_pdf(self, client):
        resp = client.post("/api/patterns/discover", data={}, content_type="multipart/form-data")
        assert resp.status_code == 400

    def test_generate(self, client):
        resp = client.post(
            "/api/patterns/generate",
            json={"examples": ["FBNWSTX1234", "SMNWSTX56789"], "value_type": "account"},
        )
        assert resp.get_json()["pattern"] == r"[A-Z]{6,8}\d{4,6}"

    def test_generate_requires_examples(self, client):
        assert client.post("/api/patterns/generate", json={}).status_code == 400

    def test_pattern_tester(self, client):
        resp = client.post("/api/patterns/test", json={"pattern": r"ACC\d+", "text": "ACC1 acc2"})
        (result,) = resp.get_json()["results"]
        assert result["success"]
        assert result["matches"] == ["ACC1", "acc2"]

    def test_pattern_tester_invalid_pattern(self, client):
        resp = client.post("/api/patterns/test", json={"pattern": "([", "text": "abc"})
        assert resp.status_code == 200
        assert resp.get_json()["results"][0]["success"] is False

    def test_pattern_tester_needs_pattern(self, client):
        assert client.post("/api/patterns/test", json={"text": "abc"}).status_code == 400

    def test_library_round_trip(self, client):
        assert client.get("/api/patterns/library").get_json() == {"account_patterns": [], "name_patterns": []}
        resp = client.post("/api/patterns/library", json={"account_patterns": [r"REF\d+", r"REF\d+"]})
        assert resp.get_json()["account_patterns"] == [r"REF\d+"]
        assert client.get("/api/patterns/library").get_json()["account_patterns"] == [r"REF\d+"]

        resp = client.post("/api/patterns/test", json={"text": "REF1 and REF2", "use_library": True})
        assert resp.get_json()["results"][0]["matches"] == ["REF1", "REF2"]

    def test_library_used_by_detect(self, client):
        client.post("/api/patterns/library", json={"account_patterns": [r"REF-(\d{4})"]})
        resp = client.post("/api/patterns/detect", json={"text": "Invoice REF-1234"})
        assert resp.get_json()["matches"]["custom_account_1"][0]["value"] == "1234"

    def test_promote(self, client):
        discovered = [
            {"value_type": "account", "pattern_source": r"[A-Z]{3}\d{5}", "confidence": 0.5, "frequency": 3},
            {"value_type": "date", "pattern_source": r"\d+/\d+", "confidence": 0.5, "frequency": 3},
        ]
        resp = client.post("/api/patterns/library/promote", json={"patterns": discovered, "selected": [0, 1]})
        body = resp.get_json()
        assert (body["saved"], body["skipped"]) == (1, 1)
        assert body["library"]["account_patterns"] == [r"[A-Z]{3}\d{5}"]

    def test_promote_invalid_pattern(self, client):
        resp = client.post(
            "/api/patterns/library/promote",
            json={"patterns": [{"value_type": "bogus"}], "selected": [0]},
        )
        assert resp.status_code == 400


class TestDistributionEndpoints:
    """Test splitting, matching and sending over HTTP."""

    def test_split(self, client, statement_pdf):
        resp = client.post(
            "/api/split",
            data={"file": _upload(statement_pdf, "may.pdf"), "month_year": "May 2025"},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 200
        assert resp.mimetype == "application/zip"
        assert resp.headers["X-Split-Files"] == "2"
        with zipfile.ZipFile(io.BytesIO(resp.data)) as zf:
            names = zf.namelist()
        assert len(names) == 2
        assert names[0].startswith("ABC12345_")

    def test_split_requires_pdf(self, client):
        resp = client.post(
            "/api/split",
            data={"file": _upload(b"a,b", "list.csv")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400

    def test_split_unreadable(self, client):
        resp = client.post(
            "/api/split",
            data={"file": _upload(b"junk", "bad.pdf")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 422
        assert resp.get_json()["errors"]

    def test_archive(self, client, statement_zip):
        resp = client.post(
            "/api/distribution/archive",
            data={"file": _upload(statement_zip, "may.zip")},
            content_type="multipart/form-data",
        )
        body = resp.get_json()
        assert [s["account_number"] for s in body["segments"]] == ["FBNWSTX123456", "SMNWSTX56789"]
        assert "content" not in body["segments"][0]
        assert body["customer_csv_template"].startswith('"Account Number","Email","Customer Name"')

    def test_customers(self, client, customer_csv):
        resp = client.post(
            "/api/distribution/customers",
            data={"file": _upload(customer_csv.encode(), "customers.csv")},
            content_type="multipart/form-data",
        )
        body = resp.get_json()
        assert len(body["customers"]) == 2
        assert body["errors"] == []

    def test_match(self, client, statement_zip, customer_csv):
        resp = client.post(
            "/api/distribution/match",
            data={
                "archive": _upload(statement_zip, "may.zip"),
                "customers": _upload(customer_csv.encode(), "customers.csv"),
            },
            content_type="multipart/form-data",
        )
        body = resp.get_json()
        assert body["stats"] == {"total": 2, "matched": 1, "unmatched": 1}
        assert [r["matched"] for r in body["records"]] == [True, False]
        assert body["records"][1]["customer"]["email"] == ""

    def test_match_requires_both_files(self, client, statement_zip):
        resp = client.post(
            "/api/distribution/match",
            data={"archive": _upload(statement_zip, "may.zip")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400

    def test_send_requires_mail_config(self, client, statement_zip, customer_csv):
        resp = client.post(
            "/api/distribution/send",
            data={
                "archive": _upload(statement_zip, "may.zip"),
                "customers": _upload(customer_csv.encode(), "customers.csv"),
            },
            content_type="multipart/form-data",
        )
        assert resp.status_code == 503

    @patch("distribution.endpoints.MailgunClient")
    def test_send(self, mock_client_cls, tmp_path, mail_settings, statement_zip, customer_csv):
        settings = mail_settings.model_copy(update={"pattern_library_path": str(tmp_path / "lib.json")})
        client = create_app(settings).test_client()
        mock_client_cls.return_value.send_batch.return_value = [
            DeliveryResult(account_number="FBNWSTX123456", email="john.smith@example.com", success=True),
        ]

        resp = client.post(
            "/api/distribution/send",
            data={
                "archive": _upload(statement_zip, "may.zip"),
                "customers": _upload(customer_csv.encode(), "customers.csv"),
                "template": "Subject: Hi {{customerName}}\nYour statement is attached.",
            },
            content_type="multipart/form-data",
        )

        assert resp.status_code == 200
        assert resp.get_json()["sent"] == 1
        records, template = mock_client_cls.return_value.send_batch.call_args.args
        assert template.subject == "Hi {{customerName}}"
        assert len(records) == 2

    @patch("distribution.endpoints.MailgunClient")
    def test_send_test_email(self, mock_client_cls, tmp_path, mail_settings, statement_zip, customer_csv):
        settings = mail_settings.model_copy(update={"pattern_library_path": str(tmp_path / "lib.json")})
        client = create_app(settings).test_client()
        mock_client_cls.return_value.send_test.return_value = DeliveryResult(
            account_number="FBNWSTX123456", email="qa@example.org", success=True,
        )

        resp = client.post(
            "/api/distribution/send",
            data={
                "archive": _upload(statement_zip, "may.zip"),
                "customers": _upload(customer_csv.encode(), "customers.csv"),
                "test_email": "qa@example.org",
            },
            content_type="multipart/form-data",
        )

        assert resp.status_code == 200
        to, record, _ = mock_client_cls.return_value.send_test.call_args.args
        assert to == "qa@example.org"
        assert record.segment.account_number == "FBNWSTX123456"
        mock_client_cls.return_value.send_batch.assert_not_called()
