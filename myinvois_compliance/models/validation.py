"""
Validation result models
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from myinvois_compliance.models.invoice import Buyer, Invoice, InvoiceLine, Organization


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class TinType(str, Enum):
    CORPORATE = "corporate"
    INDIVIDUAL = "individual"
    GOVERNMENT = "government"
    NONPROFIT = "nonprofit"
    UNKNOWN = "unknown"


RuleCheck = Callable[[Invoice, List[InvoiceLine], Organization, Optional[Buyer]], bool]


@dataclass(frozen=True)
class ValidationRule:
    """
    A named compliance rule.

    ``check`` returns True when the invoice is compliant. It must be a pure
    function of its four arguments.
    """
    code: str
    severity: Severity
    field: str
    message: str
    fix_hint: str
    check: RuleCheck

    def to_result(self) -> "ValidationResult":
        return ValidationResult(
            rule_code=self.code,
            severity=self.severity,
            field_path=self.field,
            message=self.message,
            fix_suggestion=self.fix_hint,
        )


class ValidationResult(BaseModel):
    """A single finding emitted for a failed rule"""
    model_config = ConfigDict(frozen=True)

    rule_code: str
    severity: Severity
    field_path: str
    message: str
    fix_suggestion: str
    is_resolved: bool = False


class RuleFault(BaseModel):
    """A rule whose predicate raised instead of answering"""
    model_config = ConfigDict(frozen=True)

    rule_code: str
    error_type: str
    error: str


@dataclass(frozen=True)
class RuleOutcome:
    """Either a pass/fail answer or a fault, never both"""
    rule: ValidationRule
    passed: Optional[bool] = None
    fault: Optional[RuleFault] = None

    @property
    def failed(self) -> bool:
        return self.fault is None and self.passed is False


class ComplianceReport(BaseModel):
    """Findings, score and audit metadata for one evaluation pass"""
    invoice_number: str
    findings: List[ValidationResult] = Field(default_factory=list)
    score: int = Field(default=100, ge=0, le=100)
    faults: List[RuleFault] = Field(default_factory=list)
    ruleset_version: str
    rule_count: int

    @property
    def error_count(self) -> int:
        return len([f for f in self.findings if f.severity == Severity.ERROR])

    @property
    def warning_count(self) -> int:
        return len([f for f in self.findings if f.severity == Severity.WARNING])

    @property
    def info_count(self) -> int:
        return len([f for f in self.findings if f.severity == Severity.INFO])

    def is_submission_ready(self) -> bool:
        """No blocking errors (warnings and info are allowed)"""
        return self.error_count == 0

    def by_severity(self, severity: Severity) -> List[ValidationResult]:
        return [f for f in self.findings if f.severity == severity]


class TinValidationResult(BaseModel):
    is_valid: bool = False
    type: TinType = TinType.UNKNOWN
    format: str = ""
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class IndustryCode(BaseModel):
    """One MSIC 2008 entry"""
    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    category: str
    section: str
    allows_b2c_consolidation: bool
    sst_applicable: bool
    notes: Optional[str] = None


class IndustrySection(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    title: str
    description: str


class ConsolidationCheck(BaseModel):
    """Eligibility of an industry for B2C consolidation"""
    allowed: bool
    reason: Optional[str] = None
    restrictions: Optional[List[str]] = None


class ConsolidationDecision(BaseModel):
    """Answer for a concrete consolidation batch"""
    allowed: bool
    reason: Optional[str] = None
    action: Optional[str] = None


class ArithmeticDiscrepancy(BaseModel):
    """An amount that does not reconcile with the figures it is derived from"""
    check_id: str
    field_path: str
    expected: str
    actual: str
    line_number: Optional[int] = None

    @property
    def description(self) -> str:
        where = f"Line {self.line_number}: " if self.line_number is not None else ""
        return f"{where}{self.field_path} expected {self.expected}, got {self.actual}"
