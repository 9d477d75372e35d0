"""
Arithmetic invariant checks for invoice amounts

Per line:  line_total = quantity x unit_price - discount_amount
           sst_amount = line_total x sst_rate / 100
Invoice:   subtotal    = sum(line_total)
           sst_amount  = sum(line sst_amount)
           grand_total = subtotal - total_discount + sst_amount

Every check runs on every call; one failing check never hides another.
"""

from decimal import Decimal
from typing import List, Sequence, Union

from myinvois_compliance.models.invoice import Invoice, InvoiceLine
from myinvois_compliance.models.validation import ArithmeticDiscrepancy
from myinvois_compliance.utils.decimals import DEFAULT_TOLERANCE, quantize_money, to_decimal

LINE_TOTAL = 'line_total'
LINE_SST = 'line_sst'
SUBTOTAL = 'subtotal'
SST_TOTAL = 'sst_total'
GRAND_TOTAL = 'grand_total'


def expected_line_total(line: InvoiceLine) -> Decimal:
    return to_decimal(line.quantity) * to_decimal(line.unit_price) - to_decimal(line.discount_amount)


def expected_line_sst(line: InvoiceLine) -> Decimal:
    return to_decimal(line.line_total) * to_decimal(line.sst_rate) / Decimal(100)


class ArithmeticValidator:
    """Line and invoice level amount reconciliation"""

    def __init__(self, tolerance: Union[str, Decimal] = DEFAULT_TOLERANCE):
        self.tolerance = to_decimal(tolerance)

    def _matches(self, actual: Decimal, expected: Decimal) -> bool:
        return abs(actual - expected) <= self.tolerance

    def check(self, invoice: Invoice, lines: Sequence[InvoiceLine]) -> List[ArithmeticDiscrepancy]:
        """Run all invariants and return every discrepancy found"""
        discrepancies = []
        discrepancies.extend(self.check_line_totals(lines))
        discrepancies.extend(self.check_line_sst(lines))
        discrepancies.extend(self.check_subtotal(invoice, lines))
        discrepancies.extend(self.check_sst_total(invoice, lines))
        discrepancies.extend(self.check_grand_total(invoice))
        return discrepancies

    def check_line_totals(self, lines: Sequence[InvoiceLine]) -> List[ArithmeticDiscrepancy]:
        errors = []

        for line in lines:
            expected = expected_line_total(line)
            actual = to_decimal(line.line_total)
            if not self._matches(actual, expected):
                errors.append(ArithmeticDiscrepancy(
                    check_id=LINE_TOTAL,
                    field_path='line_items[].line_total',
                    line_number=line.line_number,
                    expected=str(quantize_money(expected)),
                    actual=str(actual),
                ))

        return errors

    def check_line_sst(self, lines: Sequence[InvoiceLine]) -> List[ArithmeticDiscrepancy]:
        errors = []

        for line in lines:
            expected = expected_line_sst(line)
            actual = to_decimal(line.sst_amount)
            if not self._matches(actual, expected):
                errors.append(ArithmeticDiscrepancy(
                    check_id=LINE_SST,
                    field_path='line_items[].sst_amount',
                    line_number=line.line_number,
                    expected=str(quantize_money(expected)),
                    actual=str(actual),
                ))

        return errors

    def check_subtotal(self, invoice: Invoice, lines: Sequence[InvoiceLine]) -> List[ArithmeticDiscrepancy]:
        calculated = sum((to_decimal(line.line_total) for line in lines), Decimal(0))
        actual = to_decimal(invoice.subtotal)

        if self._matches(actual, calculated):
            return []
        return [ArithmeticDiscrepancy(
            check_id=SUBTOTAL,
            field_path='invoice.subtotal',
            expected=str(quantize_money(calculated)),
            actual=str(actual),
        )]

    def check_sst_total(self, invoice: Invoice, lines: Sequence[InvoiceLine]) -> List[ArithmeticDiscrepancy]:
        calculated = sum((to_decimal(line.sst_amount) for line in lines), Decimal(0))
        actual = to_decimal(invoice.sst_amount)

        if self._matches(actual, calculated):
            return []
        return [ArithmeticDiscrepancy(
            check_id=SST_TOTAL,
            field_path='invoice.sst_amount',
            expected=str(quantize_money(calculated)),
            actual=str(actual),
        )]

    def check_grand_total(self, invoice: Invoice) -> List[ArithmeticDiscrepancy]:
        calculated = (
            to_decimal(invoice.subtotal)
            - to_decimal(invoice.total_discount)
            + to_decimal(invoice.sst_amount)
        )
        actual = to_decimal(invoice.grand_total)

        if self._matches(actual, calculated):
            return []
        return [ArithmeticDiscrepancy(
            check_id=GRAND_TOTAL,
            field_path='invoice.grand_total',
            expected=str(quantize_money(calculated)),
            actual=str(actual),
        )]
