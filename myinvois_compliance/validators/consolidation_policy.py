"""
B2C consolidation policy

Decides whether a batch of consumer transactions may be rolled into one
consolidated e-Invoice, before the invoice itself exists.

Both this helper and IndustryCodeTable.is_consolidation_allowed share the
prohibited list below. Codes are matched by prefix, so group entries such as
"61" (telecommunications) cover every 5-digit code in the group and the
conditional caps keyed on "47" and "56" apply to real codes like "47190".
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Optional, Union

from myinvois_compliance.models.validation import ConsolidationDecision
from myinvois_compliance.utils.decimals import format_money, to_decimal

logger = logging.getLogger(__name__)


# Whole MSIC groups excluded from B2C consolidation
PROHIBITED_INDUSTRY_CODES = (
    '35101',  # Electric power generation
    '35102',  # Electric power transmission
    '35103',  # Electric power distribution
    '36000',  # Water collection, treatment and supply
    '37000',  # Sewerage
    '61',     # Telecommunications
    '52211',  # Parking services
    '52212',  # Toll road operations
    '84',     # Public administration and defence
)

INDIVIDUAL_INVOICES_ACTION = 'Issue individual invoices for each transaction'


@dataclass(frozen=True)
class ConsolidationLimit:
    label: str
    max_transactions: Optional[int] = None
    max_amount: Optional[Decimal] = None


CONDITIONAL_LIMITS = MappingProxyType({
    '47': ConsolidationLimit(label='Retail', max_transactions=200),
    '56': ConsolidationLimit(label='F&B', max_amount=Decimal('50000')),
})


def normalize_code(industry_code: Optional[str]) -> str:
    return (industry_code or '').strip()


def is_prohibited(industry_code: Optional[str]) -> bool:
    """True when the code falls in a group that may never consolidate"""
    code = normalize_code(industry_code)
    if not code:
        return False
    return any(code.startswith(prefix) for prefix in PROHIBITED_INDUSTRY_CODES)


def find_limit(industry_code: Optional[str]) -> Optional[ConsolidationLimit]:
    code = normalize_code(industry_code)
    if not code:
        return None

    for prefix, limit in CONDITIONAL_LIMITS.items():
        if code.startswith(prefix):
            return limit
    return None


def validate_consolidation(
    industry_code: Optional[str],
    line_count: int,
    total_amount: Union[str, int, float, Decimal, None] = None
) -> ConsolidationDecision:
    """
    Can ``line_count`` transactions (worth ``total_amount`` in MYR, if known)
    be consolidated for this industry?
    """

    if is_prohibited(industry_code):
        logger.debug("Consolidation refused for prohibited industry %s", industry_code)
        return ConsolidationDecision(
            allowed=False,
            reason='Industry not eligible for consolidation',
            action=INDIVIDUAL_INVOICES_ACTION
        )

    limit = find_limit(industry_code)
    if limit is None:
        return ConsolidationDecision(allowed=True)

    if limit.max_transactions is not None and line_count > limit.max_transactions:
        return ConsolidationDecision(
            allowed=False,
            reason=(
                f'{limit.label} consolidation recommended max '
                f'{limit.max_transactions} transactions/month ({line_count} given)'
            ),
            action='Consider splitting into multiple consolidated invoices'
        )

    if limit.max_amount is not None and total_amount is not None:
        amount = to_decimal(total_amount)
        if amount > limit.max_amount:
            return ConsolidationDecision(
                allowed=False,
                reason=(
                    f'{limit.label} consolidation recommended max '
                    f'RM{format_money(limit.max_amount)}/month (RM{format_money(amount)} given)'
                ),
                action='Consider splitting into multiple consolidated invoices'
            )

    return ConsolidationDecision(allowed=True)
