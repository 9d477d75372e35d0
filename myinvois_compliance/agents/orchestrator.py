"""
Compliance engine
Runs every registered rule against an invoice and scores the findings
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from myinvois_compliance.models.invoice import Buyer, CompleteInvoice, Invoice, InvoiceLine, Organization
from myinvois_compliance.models.validation import (
    ComplianceReport,
    RuleFault,
    RuleOutcome,
    ValidationResult,
    ValidationRule,
)
from myinvois_compliance.utils.config import load_config
from myinvois_compliance.validators.industry_codes import IndustryCodeTable
from myinvois_compliance.validators.malaysian_rules import RuleRegistry, build_registry
from myinvois_compliance.validators.scoring import compute_score

logger = logging.getLogger(__name__)


class ComplianceEngine:
    """
    Evaluates invoices against a rule registry.

    The engine holds no per-invoice state: the registry and industry table
    are immutable, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        config: Optional[Dict] = None,
        registry: Optional[RuleRegistry] = None,
        industry_table: Optional[IndustryCodeTable] = None
    ):
        self.config = config or {}
        self.registry = registry if registry is not None else build_registry(self.config, industry_table)

    def _run_rule(
        self,
        rule: ValidationRule,
        invoice: Invoice,
        lines: Sequence[InvoiceLine],
        org: Organization,
        buyer: Optional[Buyer]
    ) -> RuleOutcome:
        try:
            return RuleOutcome(rule=rule, passed=bool(rule.check(invoice, list(lines), org, buyer)))
        except Exception as e:
            # A broken rule must not hide the findings of the others
            logger.exception(
                "Validation rule %s failed on invoice %s",
                rule.code, getattr(invoice, "invoice_number", "<unknown>")
            )
            return RuleOutcome(
                rule=rule,
                fault=RuleFault(rule_code=rule.code, error_type=type(e).__name__, error=str(e))
            )

    def _outcomes(
        self,
        invoice: Invoice,
        lines: Sequence[InvoiceLine],
        org: Organization,
        buyer: Optional[Buyer]
    ) -> List[RuleOutcome]:
        return [self._run_rule(rule, invoice, lines, org, buyer) for rule in self.registry]

    def evaluate(
        self,
        invoice: Invoice,
        lines: Sequence[InvoiceLine],
        org: Organization,
        buyer: Optional[Buyer] = None
    ) -> List[ValidationResult]:
        """Findings for every rule the invoice fails, in registry order"""
        outcomes = self._outcomes(invoice, lines, org, buyer)
        return [outcome.rule.to_result() for outcome in outcomes if outcome.failed]

    def evaluate_complete(self, complete: CompleteInvoice, org: Organization) -> List[ValidationResult]:
        return self.evaluate(complete.invoice, complete.line_items, org, complete.buyer)

    def score(self, results: Sequence[ValidationResult]) -> int:
        return compute_score(results, rule_count=len(self.registry))

    def run(
        self,
        invoice: Invoice,
        lines: Sequence[InvoiceLine],
        org: Organization,
        buyer: Optional[Buyer] = None
    ) -> ComplianceReport:
        """Evaluate, score and record which rules could not be evaluated"""
        outcomes = self._outcomes(invoice, lines, org, buyer)
        findings = [outcome.rule.to_result() for outcome in outcomes if outcome.failed]
        faults = [outcome.fault for outcome in outcomes if outcome.fault is not None]

        report = ComplianceReport(
            invoice_number=invoice.invoice_number,
            findings=findings,
            score=self.score(findings),
            faults=faults,
            ruleset_version=self.registry.version,
            rule_count=len(self.registry),
        )

        logger.debug(
            "Invoice %s: %d finding(s), score %d, %d faulted rule(s)",
            invoice.invoice_number, len(findings), report.score, len(faults)
        )
        return report

    def run_complete(self, complete: CompleteInvoice, org: Organization) -> ComplianceReport:
        return self.run(complete.invoice, complete.line_items, org, complete.buyer)

    def process_batch(self, invoices: Sequence[Tuple[CompleteInvoice, Organization]]) -> Dict:
        """
        Evaluate many invoices

        Returns summary statistics plus the individual reports
        """

        logger.info("Processing batch of %d invoices", len(invoices))

        reports = [self.run_complete(complete, org) for complete, org in invoices]

        submission_ready = len([r for r in reports if r.is_submission_ready()])
        average_score = sum(r.score for r in reports) / len(reports) if reports else 0

        return {
            'total_invoices': len(reports),
            'submission_ready': submission_ready,
            'non_compliant': len(reports) - submission_ready,
            'total_errors': sum(r.error_count for r in reports),
            'total_warnings': sum(r.warning_count for r in reports),
            'faulted_rules': sum(len(r.faults) for r in reports),
            'average_score': average_score,
            'ruleset_version': self.registry.version,
            'reports': reports,
        }


@lru_cache
def get_default_engine() -> ComplianceEngine:
    """Engine built from load_config(), so config.yaml and MYINVOIS_* overrides apply"""
    return ComplianceEngine(load_config())


def evaluate_invoice(
    invoice: Invoice,
    lines: Sequence[InvoiceLine],
    org: Organization,
    buyer: Optional[Buyer] = None
) -> List[ValidationResult]:
    return get_default_engine().evaluate(invoice, lines, org, buyer)


def evaluate_complete_invoice(complete: CompleteInvoice, org: Organization) -> List[ValidationResult]:
    return get_default_engine().evaluate_complete(complete, org)
