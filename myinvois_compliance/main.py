"""
Malaysian e-Invoice Compliance Validator

Usage:
    python -m myinvois_compliance INVOICE.json                # Validate invoice(s) in a JSON file
    python -m myinvois_compliance INVOICE.json --json         # Print JSON report(s)
    python -m myinvois_compliance --tin C1234567890           # Check a TIN
    python -m myinvois_compliance --industry 47190 --lines 250  # Consolidation preview

Options:
    --config PATH   YAML configuration file (default: ./config.yaml if present)
    --help          Show this help message
"""

import logging
import sys
from typing import List, Optional

from myinvois_compliance.agents.orchestrator import ComplianceEngine
from myinvois_compliance.agents.reporter import ReporterAgent
from myinvois_compliance.utils.config import load_config
from myinvois_compliance.utils.data_loaders import InvoiceDataLoader
from myinvois_compliance.utils.logger import setup_logging
from myinvois_compliance.validators.consolidation_policy import validate_consolidation
from myinvois_compliance.validators.industry_codes import IndustryCodeTable
from myinvois_compliance.validators.tin_validator import describe_tin_type, format_tin_for_display, validate_tin

logger = logging.getLogger(__name__)


class ComplianceValidator:
    """Command-line front end for the compliance engine"""

    def __init__(self, config_path: Optional[str] = None):
        self.config = load_config(config_path)

        setup_logging(
            log_level=self.config['logging']['level'],
            log_dir=self.config['logging']['log_dir']
        )

        self.industry_table = IndustryCodeTable.from_csv(self.config['data']['dir'])
        self.engine = ComplianceEngine(self.config, industry_table=self.industry_table)
        self.reporter = ReporterAgent(self.config, use_color=sys.stdout.isatty())

    def validate_file(self, invoice_file: str, as_json: bool = False) -> int:
        """Validate every invoice in a JSON file; exit code 1 if any has errors"""

        loader = InvoiceDataLoader(invoice_file)
        invoices = loader.get_invoices()

        if len(invoices) > 1 and not as_json:
            batch = self.engine.process_batch(invoices)
            print(self.reporter.generate_summary_report(batch))
            return 0 if batch['non_compliant'] == 0 else 1

        exit_code = 0
        for complete, org in invoices:
            report = self.engine.run_complete(complete, org)
            if as_json:
                print(self.reporter.generate_json_report(complete, org, report))
            else:
                print(self.reporter.generate_console_report(complete, org, report))
            if not report.is_submission_ready():
                exit_code = 1

        return exit_code

    def check_tin(self, tin: str) -> int:
        result = validate_tin(tin)

        if result.is_valid:
            print(f"✓ {format_tin_for_display(tin)} - {describe_tin_type(result.type)}")
        else:
            print(f"✗ {tin!r} is not a valid TIN")

        for error in result.errors:
            print(f"   error: {error}")
        for warning in result.warnings:
            print(f"   warning: {warning}")

        return 0 if result.is_valid else 1

    def check_industry(self, industry_code: str, line_count: Optional[int] = None) -> int:
        industry = self.industry_table.lookup(industry_code)
        label = f"{industry.code} {industry.description} ({industry.category})" if industry else industry_code
        print(f"Industry: {label}")
        print(f"SST applicable: {'yes' if self.industry_table.is_sst_applicable(industry_code) else 'no'}")

        eligibility = self.industry_table.is_consolidation_allowed(industry_code)
        print(f"B2C consolidation: {'allowed' if eligibility.allowed else 'not allowed'}")
        if eligibility.reason:
            print(f"   {eligibility.reason}")
        for restriction in eligibility.restrictions or []:
            print(f"   - {restriction}")

        if line_count is None:
            return 0 if eligibility.allowed else 1

        decision = validate_consolidation(industry_code, line_count)
        print(f"Batch of {line_count}: {'OK' if decision.allowed else 'NOT OK'}")
        if decision.reason:
            print(f"   {decision.reason}")
        if decision.action:
            print(f"   Action: {decision.action}")
        return 0 if decision.allowed else 1


def _pop_option(args: List[str], name: str) -> Optional[str]:
    """Remove ``name VALUE`` from args and return VALUE"""
    if name not in args:
        return None
    index = args.index(name)
    if index + 1 >= len(args):
        raise SystemExit(f"{name} requires a value")
    value = args[index + 1]
    del args[index:index + 2]
    return value


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""

    args = list(sys.argv[1:] if argv is None else argv)

    if not args or '--help' in args:
        print(__doc__)
        return 0

    config_path = _pop_option(args, '--config')
    tin = _pop_option(args, '--tin')
    industry = _pop_option(args, '--industry')
    lines = _pop_option(args, '--lines')
    as_json = '--json' in args
    if as_json:
        args.remove('--json')

    validator = ComplianceValidator(config_path)

    if tin is not None:
        return validator.check_tin(tin)

    if industry is not None:
        return validator.check_industry(industry, int(lines) if lines is not None else None)

    if len(args) != 1:
        print(__doc__)
        return 2

    return validator.validate_file(args[0], as_json=as_json)


if __name__ == "__main__":
    sys.exit(main())
