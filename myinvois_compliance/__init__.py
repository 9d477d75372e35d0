"""
Malaysian e-Invoice (LHDN MyInvois) compliance validation

    from myinvois_compliance import evaluate_invoice, compute_score

    findings = evaluate_invoice(invoice, lines, organization, buyer)
    score = compute_score(findings)
"""

from myinvois_compliance.agents.orchestrator import (
    ComplianceEngine,
    evaluate_complete_invoice,
    evaluate_invoice,
    get_default_engine,
)
from myinvois_compliance.models.invoice import (
    Buyer,
    BuyerAddress,
    CompleteInvoice,
    EInvoiceType,
    Invoice,
    InvoiceLine,
    InvoiceStatus,
    Organization,
)
from myinvois_compliance.models.validation import (
    ComplianceReport,
    ConsolidationCheck,
    ConsolidationDecision,
    IndustryCode,
    Severity,
    TinType,
    TinValidationResult,
    ValidationResult,
    ValidationRule,
)
from myinvois_compliance.validators.arithmetic_validator import ArithmeticValidator
from myinvois_compliance.validators.consolidation_policy import validate_consolidation
from myinvois_compliance.validators.industry_codes import (
    IndustryCodeTable,
    get_industry_table,
    is_consolidation_allowed,
    is_sst_applicable,
    lookup_industry,
    search_industry_codes,
)
from myinvois_compliance.validators.malaysian_rules import (
    DuplicateRuleError,
    RuleRegistry,
    build_registry,
)
from myinvois_compliance.validators.scoring import compute_score
from myinvois_compliance.validators.tin_validator import (
    describe_tin_type,
    format_tin_for_display,
    suggest_tin_formats,
    validate_tin,
)

__version__ = "0.1.0"

__all__ = [
    "ArithmeticValidator",
    "Buyer",
    "BuyerAddress",
    "CompleteInvoice",
    "ComplianceEngine",
    "ComplianceReport",
    "ConsolidationCheck",
    "ConsolidationDecision",
    "DuplicateRuleError",
    "EInvoiceType",
    "IndustryCode",
    "IndustryCodeTable",
    "Invoice",
    "InvoiceLine",
    "InvoiceStatus",
    "Organization",
    "RuleRegistry",
    "Severity",
    "TinType",
    "TinValidationResult",
    "ValidationResult",
    "ValidationRule",
    "build_registry",
    "compute_score",
    "describe_tin_type",
    "evaluate_complete_invoice",
    "evaluate_invoice",
    "format_tin_for_display",
    "get_default_engine",
    "get_industry_table",
    "is_consolidation_allowed",
    "is_sst_applicable",
    "lookup_industry",
    "search_industry_codes",
    "suggest_tin_formats",
    "validate_consolidation",
    "validate_tin",
]
