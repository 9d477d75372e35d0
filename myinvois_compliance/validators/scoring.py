"""
Compliance score (0-100) from validation findings

Errors cost 10 points of weight, warnings 3, info nothing. Deductions are
scaled against the worst case of every registered rule failing as an error.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from myinvois_compliance.models.validation import Severity, ValidationResult
from myinvois_compliance.validators.malaysian_rules import STANDARD_RULE_COUNT

ERROR_WEIGHT = 10
WARNING_WEIGHT = 3


def compute_score(results: Iterable[ValidationResult], rule_count: int = STANDARD_RULE_COUNT) -> int:
    results = list(results)
    if not results:
        return 100

    if rule_count <= 0:
        raise ValueError("rule_count must be positive")

    errors = len([r for r in results if r.severity == Severity.ERROR])
    warnings = len([r for r in results if r.severity == Severity.WARNING])

    deductions = errors * ERROR_WEIGHT + warnings * WARNING_WEIGHT
    max_deductions = rule_count * ERROR_WEIGHT

    raw = Decimal(100) - Decimal(100) * deductions / max_deductions
    # Half-up rounding so x.5 scores round the same way every time
    score = int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, min(100, score))
