"""
Data loaders for reference tables and invoice files
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from myinvois_compliance.models.invoice import (
    Buyer,
    CompleteInvoice,
    Invoice,
    InvoiceLine,
    Organization,
)
from myinvois_compliance.models.validation import IndustryCode, IndustrySection
from myinvois_compliance.utils.config import PACKAGE_DATA_DIR

logger = logging.getLogger(__name__)

_TRUE_VALUES = {'true', 'yes', 'y', '1'}


def _as_bool(value) -> bool:
    return str(value).strip().lower() in _TRUE_VALUES


class MSICDataLoader:
    """Load MSIC 2008 industry codes and sections from CSV"""

    CODES_FILE = "msic_codes.csv"
    SECTIONS_FILE = "msic_sections.csv"

    def __init__(self, data_dir: Union[str, Path, None] = None):
        self.data_dir = Path(data_dir) if data_dir else PACKAGE_DATA_DIR

    def _read_csv(self, filename: str) -> pd.DataFrame:
        csv_file = self.data_dir / filename

        if not csv_file.exists():
            raise FileNotFoundError(f"Reference data file not found: {csv_file}")

        # Codes are identifiers, not numbers: keep leading zeros and short group codes
        return pd.read_csv(csv_file, dtype=str, keep_default_na=False)

    def load_codes(self) -> List[IndustryCode]:
        """Load industry codes"""
        df = self._read_csv(self.CODES_FILE)

        codes = [
            IndustryCode(
                code=row['code'].strip(),
                description=row['description'].strip(),
                category=row['category'].strip(),
                section=row['section'].strip().upper(),
                allows_b2c_consolidation=_as_bool(row['allows_b2c_consolidation']),
                sst_applicable=_as_bool(row['sst_applicable']),
                notes=row.get('notes', '').strip() or None,
            )
            for row in df.to_dict(orient='records')
        ]

        logger.info("Loaded %d MSIC industry codes from %s", len(codes), self.data_dir)
        return codes

    def load_sections(self) -> List[IndustrySection]:
        """Load MSIC sections A-U"""
        df = self._read_csv(self.SECTIONS_FILE)

        return [
            IndustrySection(
                code=row['code'].strip().upper(),
                title=row['title'].strip(),
                description=row['description'].strip(),
            )
            for row in df.to_dict(orient='records')
        ]


class InvoiceDataLoader:
    """
    Load invoices from JSON

    Expected document shape::

        {
            "organization": {...},
            "invoice": {...},
            "line_items": [{...}, ...],
            "buyer": {...}            # optional
        }

    A file may hold a single document or a list of them.
    """

    def __init__(self, invoice_file: Union[str, Path]):
        self.invoice_file = Path(invoice_file)
        self.documents = self._load_documents()

    def _load_documents(self) -> List[Dict]:
        with open(self.invoice_file) as f:
            data = json.load(f)

        if isinstance(data, dict):
            return [data]
        if isinstance(data, list):
            return data
        raise ValueError(f"Unsupported invoice document in {self.invoice_file}")

    @staticmethod
    def convert_json_to_model(document: Dict) -> Tuple[CompleteInvoice, Organization]:
        """Convert one JSON document to models"""

        if 'invoice' not in document or 'organization' not in document:
            raise ValueError("Invoice document requires 'invoice' and 'organization'")

        buyer_json: Optional[Dict] = document.get('buyer')

        complete = CompleteInvoice(
            invoice=Invoice(**document['invoice']),
            line_items=[InvoiceLine(**item) for item in document.get('line_items', [])],
            buyer=Buyer(**buyer_json) if buyer_json else None,
        )
        organization = Organization(**document['organization'])

        return complete, organization

    def get_invoices(self) -> List[Tuple[CompleteInvoice, Organization]]:
        return [self.convert_json_to_model(doc) for doc in self.documents]

    def get_invoice(self, invoice_number: str) -> Tuple[CompleteInvoice, Organization]:
        """Get specific invoice by number"""
        for doc in self.documents:
            if doc.get('invoice', {}).get('invoice_number') == invoice_number:
                return self.convert_json_to_model(doc)
        raise ValueError(f"Invoice {invoice_number} not found")
