"""
Malaysian e-Invoice (LHDN MyInvois) compliance rules

Rules are grouped into versioned, append-only registries. The registry size
is the denominator of the compliance score, so a stored score is only
reproducible against the same registry version.

Rule codes:
- MY-001..MY-012: standard ruleset
- MY-013..MY-016: amount reconciliation, extended ruleset only
"""

from functools import partial
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from myinvois_compliance.models.invoice import Buyer, Invoice, InvoiceLine, Organization
from myinvois_compliance.models.validation import Severity, ValidationRule
from myinvois_compliance.utils.config import DEFAULT_CONFIG
from myinvois_compliance.utils.decimals import to_decimal
from myinvois_compliance.validators.arithmetic_validator import ArithmeticValidator
from myinvois_compliance.validators.industry_codes import IndustryCodeTable, get_industry_table
from myinvois_compliance.validators.tin_validator import validate_tin

RULESET_VERSION = '2024.1'
EXTENDED_RULESET_VERSION = '2024.1-ext'

TIN_FIX_HINT = 'Use format C1234567890 (corporate) or 123456789012 (individual)'


class DuplicateRuleError(ValueError):
    """Raised when a registry would contain two rules with the same code"""


class RuleRegistry:
    """Ordered, immutable collection of uniquely coded rules"""

    def __init__(self, rules: Iterable[ValidationRule] = (), version: str = RULESET_VERSION):
        self._rules = tuple(rules)
        self.version = version

        seen = set()
        for rule in self._rules:
            if rule.code in seen:
                raise DuplicateRuleError(f"Duplicate rule code: {rule.code}")
            seen.add(rule.code)

    def extend(self, rules: Iterable[ValidationRule], version: Optional[str] = None) -> "RuleRegistry":
        """Return a new registry with ``rules`` appended"""
        return RuleRegistry(self._rules + tuple(rules), version or self.version)

    def get(self, code: str) -> Optional[ValidationRule]:
        for rule in self._rules:
            if rule.code == code:
                return rule
        return None

    @property
    def codes(self) -> List[str]:
        return [rule.code for rule in self._rules]

    def __iter__(self) -> Iterator[ValidationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, code: object) -> bool:
        return any(rule.code == code for rule in self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry(version={self.version!r}, rules={len(self._rules)})"


# Rule predicates. Signature: (invoice, lines, org, buyer) -> compliant?

def _supplier_tin_valid(invoice: Invoice, lines: Sequence[InvoiceLine],
                        org: Organization, buyer: Optional[Buyer]) -> bool:
    return validate_tin(org.tin).is_valid


def _buyer_tin_valid(invoice: Invoice, lines: Sequence[InvoiceLine],
                     org: Organization, buyer: Optional[Buyer]) -> bool:
    # Optional for consolidated B2C or individual buyers; whitespace-only still gets checked
    # Buyer TIN is optional, e.g. consolidated B2C or individual buyers; a blank one is not omitted
    if buyer is None or not buyer.tin:
        return True
    return validate_tin(buyer.tin).is_valid


def _line_sst_correct(arithmetic: ArithmeticValidator, invoice: Invoice, lines: Sequence[InvoiceLine],
                      org: Organization, buyer: Optional[Buyer]) -> bool:
    return not arithmetic.check_line_sst(lines)


def _consolidation_eligible(industry_table: IndustryCodeTable, invoice: Invoice, lines: Sequence[InvoiceLine],
                            org: Organization, buyer: Optional[Buyer]) -> bool:
    if not invoice.is_consolidated:
        return True
    return industry_table.is_consolidation_allowed(org.industry_code or '').allowed


def _exchange_rate_provided(invoice: Invoice, lines: Sequence[InvoiceLine],
                            org: Organization, buyer: Optional[Buyer]) -> bool:
    return not invoice.is_foreign_currency() or to_decimal(invoice.exchange_rate) != 1


def _reference_present(invoice: Invoice, lines: Sequence[InvoiceLine],
                       org: Organization, buyer: Optional[Buyer]) -> bool:
    if not invoice.requires_reference():
        return True
    return bool((invoice.reference_invoice_id or '').strip())


def _buyer_present(invoice: Invoice, lines: Sequence[InvoiceLine],
                   org: Organization, buyer: Optional[Buyer]) -> bool:
    return invoice.is_consolidated or buyer is not None


def _sst_registration_consistent(invoice: Invoice, lines: Sequence[InvoiceLine],
                                 org: Organization, buyer: Optional[Buyer]) -> bool:
    charges_sst = any(to_decimal(line.sst_rate) > 0 for line in lines)
    return not charges_sst or org.is_sst_registered


def _consolidation_period_matches(invoice: Invoice, lines: Sequence[InvoiceLine],
                                  org: Organization, buyer: Optional[Buyer]) -> bool:
    if not invoice.is_consolidated or not invoice.consolidation_period:
        return True
    return invoice.consolidation_period.strip() == invoice.issue_date.strftime('%Y-%m')


def _due_date_reasonable(max_days: int, invoice: Invoice, lines: Sequence[InvoiceLine],
                         org: Organization, buyer: Optional[Buyer]) -> bool:
    if invoice.due_date is None:
        return True
    days = (invoice.due_date - invoice.issue_date).days
    return 0 <= days <= max_days


def _domestic_currency(invoice: Invoice, lines: Sequence[InvoiceLine],
                       org: Organization, buyer: Optional[Buyer]) -> bool:
    return not invoice.is_foreign_currency()


def _quantities_normal(threshold: int, invoice: Invoice, lines: Sequence[InvoiceLine],
                       org: Organization, buyer: Optional[Buyer]) -> bool:
    return all(to_decimal(line.quantity) <= threshold for line in lines)


def _line_totals_correct(arithmetic: ArithmeticValidator, invoice: Invoice, lines: Sequence[InvoiceLine],
                         org: Organization, buyer: Optional[Buyer]) -> bool:
    return not arithmetic.check_line_totals(lines)


def _subtotal_correct(arithmetic: ArithmeticValidator, invoice: Invoice, lines: Sequence[InvoiceLine],
                      org: Organization, buyer: Optional[Buyer]) -> bool:
    return not arithmetic.check_subtotal(invoice, lines)


def _sst_total_correct(arithmetic: ArithmeticValidator, invoice: Invoice, lines: Sequence[InvoiceLine],
                       org: Organization, buyer: Optional[Buyer]) -> bool:
    return not arithmetic.check_sst_total(invoice, lines)


def _grand_total_correct(arithmetic: ArithmeticValidator, invoice: Invoice, lines: Sequence[InvoiceLine],
                         org: Organization, buyer: Optional[Buyer]) -> bool:
    return not arithmetic.check_grand_total(invoice)


def standard_rules(
    config: Optional[Dict] = None,
    industry_table: Optional[IndustryCodeTable] = None
) -> List[ValidationRule]:
    """Rules MY-001 to MY-012 with thresholds bound from config"""

    settings = {**DEFAULT_CONFIG['validation'], **(config or {}).get('validation', {})}
    arithmetic = ArithmeticValidator(settings['tolerance'])
    industry_table = industry_table or get_industry_table()

    return [
        ValidationRule(
            code='MY-001',
            severity=Severity.ERROR,
            field='supplier.tin',
            message='Supplier TIN format invalid',
            fix_hint=TIN_FIX_HINT,
            check=_supplier_tin_valid,
        ),
        ValidationRule(
            code='MY-002',
            severity=Severity.ERROR,
            field='buyer.tin',
            message='Buyer TIN format invalid',
            fix_hint=TIN_FIX_HINT,
            check=_buyer_tin_valid,
        ),
        ValidationRule(
            code='MY-003',
            severity=Severity.ERROR,
            field='line_items[].sst_amount',
            message='SST calculation incorrect',
            fix_hint='SST Amount = Line Total × SST Rate ÷ 100',
            check=partial(_line_sst_correct, arithmetic),
        ),
        ValidationRule(
            code='MY-004',
            severity=Severity.ERROR,
            field='invoice.is_consolidated',
            message='Industry not eligible for B2C consolidation',
            fix_hint='Issue individual invoices for utilities, telecom, government sectors',
            check=partial(_consolidation_eligible, industry_table),
        ),
        ValidationRule(
            code='MY-005',
            severity=Severity.ERROR,
            field='invoice.exchange_rate',
            message='Exchange rate required for non-MYR invoices',
            fix_hint='Provide Bank Negara Malaysia reference rate (6 decimal places)',
            check=_exchange_rate_provided,
        ),
        ValidationRule(
            code='MY-006',
            severity=Severity.ERROR,
            field='invoice.reference_invoice_id',
            message='Credit/Debit note must reference original invoice',
            fix_hint='Provide original invoice ID or number for credit/debit notes',
            check=_reference_present,
        ),
        ValidationRule(
            code='MY-007',
            severity=Severity.ERROR,
            field='invoice.buyer_required',
            message='Buyer information required for non-consolidated invoices',
            fix_hint='Provide buyer details or mark invoice as consolidated for B2C',
            check=_buyer_present,
        ),
        ValidationRule(
            code='MY-008',
            severity=Severity.WARNING,
            field='line_items[].sst_rate',
            message='SST rate applied but organization not SST registered',
            fix_hint='Register for SST or remove SST charges',
            check=_sst_registration_consistent,
        ),
        ValidationRule(
            code='MY-009',
            severity=Severity.WARNING,
            field='invoice.consolidation_period',
            message='Consolidation period should match issue date month',
            fix_hint='Set consolidation period to YYYY-MM format matching issue date',
            check=_consolidation_period_matches,
        ),
        ValidationRule(
            code='MY-010',
            severity=Severity.WARNING,
            field='invoice.due_date',
            message='Due date should be within reasonable payment terms',
            fix_hint=f"Set due date within {int(settings['max_payment_days'])} days of issue date",
            check=partial(_due_date_reasonable, int(settings['max_payment_days'])),
        ),
        ValidationRule(
            code='MY-011',
            severity=Severity.INFO,
            field='invoice.currency',
            message='Foreign currency invoice detected',
            fix_hint='Ensure exchange rate is from Bank Negara Malaysia on issue date',
            check=_domestic_currency,
        ),
        ValidationRule(
            code='MY-012',
            severity=Severity.INFO,
            field='line_items[].quantity',
            message='High quantity detected',
            fix_hint='Verify quantity is correct for bulk transactions',
            check=partial(_quantities_normal, int(settings['high_quantity_threshold'])),
        ),
    ]


def reconciliation_rules(config: Optional[Dict] = None) -> List[ValidationRule]:
    """Rules MY-013 to MY-016: line and invoice totals must add up"""

    settings = {**DEFAULT_CONFIG['validation'], **(config or {}).get('validation', {})}
    arithmetic = ArithmeticValidator(settings['tolerance'])

    return [
        ValidationRule(
            code='MY-013',
            severity=Severity.ERROR,
            field='line_items[].line_total',
            message='Line total does not match quantity, unit price and discount',
            fix_hint='Line Total = Quantity × Unit Price − Discount',
            check=partial(_line_totals_correct, arithmetic),
        ),
        ValidationRule(
            code='MY-014',
            severity=Severity.ERROR,
            field='invoice.subtotal',
            message='Subtotal does not match sum of line totals',
            fix_hint='Subtotal = sum of all line totals',
            check=partial(_subtotal_correct, arithmetic),
        ),
        ValidationRule(
            code='MY-015',
            severity=Severity.ERROR,
            field='invoice.sst_amount',
            message='Invoice SST amount does not match sum of line SST amounts',
            fix_hint='Invoice SST = sum of all line SST amounts',
            check=partial(_sst_total_correct, arithmetic),
        ),
        ValidationRule(
            code='MY-016',
            severity=Severity.ERROR,
            field='invoice.grand_total',
            message='Grand total does not reconcile',
            fix_hint='Grand Total = Subtotal − Total Discount + SST Amount',
            check=partial(_grand_total_correct, arithmetic),
        ),
    ]


def build_registry(
    config: Optional[Dict] = None,
    industry_table: Optional[IndustryCodeTable] = None
) -> RuleRegistry:
    """Registry for the ruleset named in ``config['validation']['ruleset']``"""

    ruleset = (config or {}).get('validation', {}).get('ruleset', 'standard')
    registry = RuleRegistry(standard_rules(config, industry_table), version=RULESET_VERSION)

    if ruleset == 'extended':
        registry = registry.extend(reconciliation_rules(config), version=EXTENDED_RULESET_VERSION)
    elif ruleset != 'standard':
        raise ValueError(f"Unknown ruleset '{ruleset}'")

    return registry


# Number of rules in the standard registry; the default score denominator
STANDARD_RULE_COUNT = 12
