"""
Compliance engine tests: reports, fault isolation and batch processing
"""

import logging

import pytest

from myinvois_compliance.agents.orchestrator import (
    ComplianceEngine,
    evaluate_complete_invoice,
    evaluate_invoice,
    get_default_engine,
)
from myinvois_compliance.models.invoice import CompleteInvoice
from myinvois_compliance.models.validation import Severity, ValidationRule
from myinvois_compliance.validators.malaysian_rules import RuleRegistry, build_registry


def exploding_check(invoice, lines, org, buyer):
    raise KeyError("missing lookup")


def always_fails(invoice, lines, org, buyer):
    return False


EXPLODING_RULE = ValidationRule(
    code="X-001",
    severity=Severity.ERROR,
    field="invoice",
    message="Exploding rule",
    fix_hint="none",
    check=exploding_check,
)

FAILING_RULE = ValidationRule(
    code="X-002",
    severity=Severity.WARNING,
    field="invoice.notes",
    message="Always fails",
    fix_hint="none",
    check=always_fails,
)


@pytest.fixture
def engine():
    return ComplianceEngine()


class TestComplianceReport:

    def test_compliant_report(self, engine, complete_invoice, organization):
        report = engine.run_complete(complete_invoice, organization)

        assert report.invoice_number == "INV-2024-001"
        assert report.findings == []
        assert report.score == 100
        assert report.faults == []
        assert report.ruleset_version == "2024.1"
        assert report.rule_count == 12
        assert report.is_submission_ready() is True

    def test_report_counts(self, engine, complete_invoice, organization):
        usd = complete_invoice.invoice.model_copy(update={"currency": "USD"})
        org = organization.model_copy(update={"is_sst_registered": False})

        report = engine.run(usd, complete_invoice.line_items, org, complete_invoice.buyer)

        assert report.error_count == 1
        assert report.warning_count == 1
        assert report.info_count == 1
        assert report.is_submission_ready() is False
        assert [f.rule_code for f in report.by_severity(Severity.WARNING)] == ["MY-008"]
        # 100 - 100 * 13 / 120 = 89.17
        assert report.score == 89

    def test_warnings_do_not_block_submission(self, engine, complete_invoice, organization):
        org = organization.model_copy(update={"is_sst_registered": False})

        report = engine.run_complete(complete_invoice, org)

        assert report.warning_count == 1
        assert report.is_submission_ready() is True

    def test_score_uses_registry_size(self, complete_invoice, organization):
        extended = ComplianceEngine({"validation": {"ruleset": "extended"}})
        org = organization.model_copy(update={"tin": "bad"})

        report = extended.run_complete(complete_invoice, org)

        assert report.rule_count == 16
        # 100 - 100 * 10 / 160 = 93.75
        assert report.score == 94

    def test_evaluate_complete_matches_evaluate(self, engine, complete_invoice, organization):
        org = organization.model_copy(update={"tin": "bad"})

        assert engine.evaluate_complete(complete_invoice, org) == engine.evaluate(
            complete_invoice.invoice, complete_invoice.line_items, org, complete_invoice.buyer
        )


class TestFaultIsolation:
    """A rule that raises is skipped, the rest still run"""

    def test_faulting_rule_is_skipped(self, complete_invoice, organization, caplog):
        registry = build_registry().extend([EXPLODING_RULE, FAILING_RULE], version="test")
        engine = ComplianceEngine(registry=registry)

        with caplog.at_level(logging.ERROR, logger="myinvois_compliance"):
            report = engine.run_complete(complete_invoice, organization)

        assert [f.rule_code for f in report.findings] == ["X-002"]
        assert len(report.faults) == 1
        assert report.faults[0].rule_code == "X-001"
        assert report.faults[0].error_type == "KeyError"
        assert "X-001" in caplog.text
        assert "INV-2024-001" in caplog.text

    def test_faulting_rule_not_a_finding(self, complete_invoice, organization):
        engine = ComplianceEngine(registry=RuleRegistry([EXPLODING_RULE]))

        assert engine.evaluate_complete(complete_invoice, organization) == []

    def test_faulting_rule_still_counts_in_denominator(self, complete_invoice, organization):
        engine = ComplianceEngine(registry=RuleRegistry([EXPLODING_RULE, FAILING_RULE]))

        report = engine.run_complete(complete_invoice, organization)

        assert report.rule_count == 2
        # 100 - 100 * 3 / 20 = 85
        assert report.score == 85

    def test_empty_registry(self, complete_invoice, organization):
        engine = ComplianceEngine(registry=RuleRegistry([], version="empty"))

        report = engine.run_complete(complete_invoice, organization)

        assert report.findings == []
        assert report.score == 100
        assert report.ruleset_version == "empty"


class TestBatchProcessing:

    def test_process_batch(self, engine, complete_invoice, organization):
        no_buyer = CompleteInvoice(
            invoice=complete_invoice.invoice.model_copy(update={"invoice_number": "INV-2024-002"}),
            line_items=complete_invoice.line_items,
        )

        results = engine.process_batch([(complete_invoice, organization), (no_buyer, organization)])

        assert results["total_invoices"] == 2
        assert results["submission_ready"] == 1
        assert results["non_compliant"] == 1
        assert results["total_errors"] == 1
        assert results["total_warnings"] == 0
        assert results["faulted_rules"] == 0
        assert results["average_score"] == 96
        assert results["ruleset_version"] == "2024.1"
        assert [r.invoice_number for r in results["reports"]] == ["INV-2024-001", "INV-2024-002"]

    def test_empty_batch(self, engine):
        results = engine.process_batch([])

        assert results["total_invoices"] == 0
        assert results["average_score"] == 0


class TestModuleHelpers:

    def test_default_engine_is_shared(self):
        assert get_default_engine() is get_default_engine()

    def test_evaluate_invoice(self, invoice, lines, organization):
        assert [f.rule_code for f in evaluate_invoice(invoice, lines, organization)] == ["MY-007"]

    def test_evaluate_complete_invoice(self, complete_invoice, organization):
        assert evaluate_complete_invoice(complete_invoice, organization) == []

    def test_default_engine_reads_environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MYINVOIS_RULESET", "extended")
        get_default_engine.cache_clear()
        try:
            assert get_default_engine().registry.version == "2024.1-ext"
        finally:
            get_default_engine.cache_clear()
