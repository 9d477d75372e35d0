"""
Reporter Agent
Generates compliance reports for people (console) and machines (JSON)
"""

import json
from datetime import datetime
from typing import Dict, List, Optional

from myinvois_compliance.models.invoice import CompleteInvoice, Organization
from myinvois_compliance.models.validation import ComplianceReport, Severity
from myinvois_compliance.utils.decimals import format_money
from myinvois_compliance.validators.tin_validator import format_tin_for_display


class ReporterAgent:
    """
    Reporter Agent

    Generates reports in various formats:
    - Console (colored text)
    - JSON (machine readable)
    - Summary (batch view)
    """

    def __init__(self, config: Optional[dict] = None, use_color: bool = True):
        self.config = config or {}

        # ANSI color codes
        self.colors = {
            'green': '\033[92m',
            'red': '\033[91m',
            'yellow': '\033[93m',
            'blue': '\033[94m',
            'gray': '\033[90m',
            'bold': '\033[1m',
            'reset': '\033[0m'
        }
        if not use_color:
            self.colors = {name: '' for name in self.colors}

    def generate_console_report(
        self,
        complete: CompleteInvoice,
        organization: Organization,
        report: ComplianceReport,
        generated_at: Optional[datetime] = None
    ) -> str:
        """Generate detailed console report"""

        c = self.colors
        invoice = complete.invoice
        lines = []

        # Header
        lines.append("=" * 80)
        lines.append(f"{c['bold']}E-INVOICE COMPLIANCE REPORT{c['reset']}")
        lines.append("=" * 80)
        lines.append("")

        # Invoice details
        lines.append(f"{c['bold']}Invoice Details:{c['reset']}")
        lines.append(f"  Number: {invoice.invoice_number}")
        lines.append(f"  Type: {invoice.e_invoice_type.name.replace('_', ' ').title()} ({invoice.e_invoice_type.value})")
        lines.append(f"  Issue Date: {invoice.issue_date.isoformat()}")
        lines.append(f"  Grand Total: {invoice.currency} {format_money(invoice.grand_total)}")
        lines.append(f"  Supplier TIN: {format_tin_for_display(organization.tin) or '-'}")
        if complete.buyer is not None:
            lines.append(f"  Buyer: {complete.buyer.name}")
        elif invoice.is_consolidated:
            lines.append(f"  Buyer: (consolidated B2C, period {invoice.consolidation_period or '-'})")
        lines.append("")

        # Score
        score_color = self._get_score_color(report.score)
        lines.append(f"{c['bold']}Compliance Score:{c['reset']} {score_color}{report.score}/100{c['reset']}")
        lines.append(f"  Ruleset: {report.ruleset_version} ({report.rule_count} rules)")
        lines.append(f"  Errors: {c['red']}{report.error_count}{c['reset']}")
        lines.append(f"  Warnings: {c['yellow']}{report.warning_count}{c['reset']}")
        lines.append(f"  Info: {c['blue']}{report.info_count}{c['reset']}")
        status = 'READY FOR SUBMISSION' if report.is_submission_ready() else 'NOT COMPLIANT'
        status_color = c['green'] if report.is_submission_ready() else c['red']
        lines.append(f"  Status: {status_color}{status}{c['reset']}")
        lines.append("")

        for severity in (Severity.ERROR, Severity.WARNING, Severity.INFO):
            findings = report.by_severity(severity)
            if not findings:
                continue

            color = self._get_severity_color(severity)
            lines.append("-" * 80)
            lines.append(f"{color}{c['bold']}{severity.value.upper()}S ({len(findings)}){c['reset']}")
            lines.append("-" * 80)

            for finding in findings:
                lines.append(f"  {color}{self._get_severity_symbol(severity)} {finding.rule_code}: {finding.message}{c['reset']}")
                lines.append(f"    Field: {finding.field_path}")
                lines.append(f"    Fix: {finding.fix_suggestion}")
                lines.append("")

        if report.faults:
            lines.append("-" * 80)
            lines.append(f"{c['gray']}Rules not evaluated ({len(report.faults)}){c['reset']}")
            for fault in report.faults:
                lines.append(f"  {c['gray']}○ {fault.rule_code}: {fault.error_type}: {fault.error}{c['reset']}")
            lines.append("")

        # Footer
        generated_at = generated_at or datetime.now()
        lines.append("=" * 80)
        lines.append(f"Report generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append("=" * 80)

        return "\n".join(lines)

    def generate_json_report(
        self,
        complete: CompleteInvoice,
        organization: Organization,
        report: ComplianceReport
    ) -> str:
        """Generate JSON report"""

        invoice = complete.invoice
        payload = {
            'invoice': {
                'number': invoice.invoice_number,
                'type': invoice.e_invoice_type.value,
                'issue_date': invoice.issue_date.isoformat(),
                'currency': invoice.currency,
                'grand_total': invoice.grand_total,
                'is_consolidated': invoice.is_consolidated,
                'supplier_tin': organization.tin,
            },
            'validation': {
                'score': report.score,
                'ruleset_version': report.ruleset_version,
                'rule_count': report.rule_count,
                'errors': report.error_count,
                'warnings': report.warning_count,
                'info': report.info_count,
                'submission_ready': report.is_submission_ready(),
            },
            'findings': [finding.model_dump(mode='json') for finding in report.findings],
            'faults': [fault.model_dump(mode='json') for fault in report.faults],
        }

        return json.dumps(payload, indent=2)

    def generate_summary_report(self, batch_results: Dict) -> str:
        """Generate summary for batch processing"""

        c = self.colors
        lines = []

        lines.append("=" * 80)
        lines.append(f"{c['bold']}BATCH COMPLIANCE SUMMARY{c['reset']}")
        lines.append("=" * 80)
        lines.append("")

        lines.append(f"{c['bold']}Overview:{c['reset']}")
        lines.append(f"  Total Invoices: {batch_results['total_invoices']}")
        lines.append(f"  Submission Ready: {c['green']}{batch_results['submission_ready']}{c['reset']}")
        lines.append(f"  Non-compliant: {c['red']}{batch_results['non_compliant']}{c['reset']}")
        lines.append(f"  Errors: {batch_results['total_errors']}  Warnings: {batch_results['total_warnings']}")
        lines.append(f"  Average Score: {batch_results['average_score']:.1f}")
        lines.append(f"  Ruleset: {batch_results['ruleset_version']}")
        lines.append("")

        reports: List[ComplianceReport] = batch_results.get('reports', [])
        for report in reports:
            symbol = '✓' if report.is_submission_ready() else '✗'
            codes = ', '.join(f.rule_code for f in report.findings) or '-'
            lines.append(f"  {symbol} {report.invoice_number:20s} | Score: {report.score:>3d} | {codes}")

        lines.append("")
        lines.append("=" * 80)

        return "\n".join(lines)

    def _get_severity_symbol(self, severity: Severity) -> str:
        symbols = {
            Severity.ERROR: '✗',
            Severity.WARNING: '⚠',
            Severity.INFO: 'ℹ'
        }
        return symbols.get(severity, '?')

    def _get_severity_color(self, severity: Severity) -> str:
        if severity == Severity.ERROR:
            return self.colors['red']
        elif severity == Severity.WARNING:
            return self.colors['yellow']
        return self.colors['blue']

    def _get_score_color(self, score: int) -> str:
        if score >= 90:
            return self.colors['green']
        elif score >= 70:
            return self.colors['yellow']
        return self.colors['red']
