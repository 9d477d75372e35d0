"""
Command-line interface tests
"""

import json
import logging
from pathlib import Path

import pytest

from myinvois_compliance.main import main

SAMPLES = Path(__file__).resolve().parent.parent / "samples" / "sample_invoices.json"


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("MYINVOIS_TOLERANCE", "MYINVOIS_RULESET", "MYINVOIS_LOG_LEVEL", "MYINVOIS_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    yield
    # Handlers point at the captured stderr of this test
    logging.getLogger("myinvois_compliance").handlers = []


class TestMain:

    def test_help(self, capsys):
        assert main(["--help"]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_no_arguments_prints_usage(self, capsys):
        assert main([]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_too_many_files(self, capsys):
        assert main(["a.json", "b.json"]) == 2

    def test_option_without_value(self):
        with pytest.raises(SystemExit):
            main(["--tin"])

    def test_valid_tin(self, capsys):
        assert main(["--tin", "C2581476930"]) == 0

        out = capsys.readouterr().out
        assert "C 2581 476 930" in out
        assert "Company/Corporate entity" in out

    def test_invalid_tin(self, capsys):
        assert main(["--tin", "C12"]) == 1

        out = capsys.readouterr().out
        assert "not a valid TIN" in out
        assert "TIN is too short" in out

    def test_industry_lookup(self, capsys):
        assert main(["--industry", "62010"]) == 0

        out = capsys.readouterr().out
        assert "Computer programming activities" in out
        assert "B2C consolidation: allowed" in out

    def test_prohibited_industry(self, capsys):
        assert main(["--industry", "35101"]) == 1
        assert "not allowed" in capsys.readouterr().out

    def test_consolidation_batch_too_large(self, capsys):
        assert main(["--industry", "47190", "--lines", "250"]) == 1

        out = capsys.readouterr().out
        assert "Batch of 250: NOT OK" in out
        assert "Consider splitting into multiple consolidated invoices" in out

    def test_batch_file(self, capsys):
        assert main([str(SAMPLES)]) == 1

        out = capsys.readouterr().out
        assert "BATCH COMPLIANCE SUMMARY" in out
        assert "Total Invoices: 2" in out
        assert "CONS-2024-01" in out

    def test_single_invoice_json(self, tmp_path, capsys, invoice_document):
        invoice_file = tmp_path / "invoice.json"
        invoice_file.write_text(json.dumps(invoice_document))

        assert main([str(invoice_file), "--json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["validation"]["score"] == 100
        assert payload["findings"] == []

    def test_extended_ruleset_from_config(self, tmp_path, capsys, invoice_document):
        invoice_document["invoice"]["grand_total"] = "2000.00"
        invoice_file = tmp_path / "invoice.json"
        invoice_file.write_text(json.dumps(invoice_document))
        config_file = tmp_path / "strict.yaml"
        config_file.write_text("validation:\n  ruleset: extended\n")

        assert main(["--config", str(config_file), str(invoice_file), "--json"]) == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload["validation"]["ruleset_version"] == "2024.1-ext"
        assert [f["rule_code"] for f in payload["findings"]] == ["MY-016"]
