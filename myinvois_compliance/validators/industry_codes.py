"""
Malaysian Standard Industrial Classification (MSIC 2008) lookups

The table is read-only once built. To pick up new reference data, build a
fresh IndustryCodeTable and swap the reference; never mutate one in place.
"""

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Optional, Tuple, Union

from myinvois_compliance.models.validation import ConsolidationCheck, IndustryCode, IndustrySection
from myinvois_compliance.utils.config import load_config
from myinvois_compliance.utils.data_loaders import MSICDataLoader
from myinvois_compliance.validators.consolidation_policy import (
    INDIVIDUAL_INVOICES_ACTION,
    is_prohibited,
    normalize_code,
)


DEFAULT_PROHIBITED_REASON = 'B2C consolidation not permitted for this industry'


class IndustryCodeTable:
    """Immutable MSIC code table with B2C consolidation and SST lookups"""

    def __init__(self, codes: Iterable[IndustryCode], sections: Iterable[IndustrySection] = ()):
        self._codes: Tuple[IndustryCode, ...] = tuple(codes)
        self._by_code = MappingProxyType({ic.code: ic for ic in self._codes})
        self._sections: Tuple[IndustrySection, ...] = tuple(sections)
        self._sections_by_code = MappingProxyType({s.code: s for s in self._sections})

    @classmethod
    def from_csv(cls, data_dir: Union[str, Path, None] = None) -> "IndustryCodeTable":
        loader = MSICDataLoader(data_dir)
        return cls(loader.load_codes(), loader.load_sections())

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    @property
    def codes(self) -> Tuple[IndustryCode, ...]:
        return self._codes

    @property
    def sections(self) -> Tuple[IndustrySection, ...]:
        return self._sections

    def lookup(self, code: Optional[str]) -> Optional[IndustryCode]:
        """Exact code match"""
        return self._by_code.get(normalize_code(code))

    def search(self, query: str) -> List[IndustryCode]:
        """Case-insensitive substring match on code, description and category"""
        term = (query or '').strip().lower()
        return [
            ic for ic in self._codes
            if term in ic.code.lower()
            or term in ic.description.lower()
            or term in ic.category.lower()
        ]

    def by_category(self, category: str) -> List[IndustryCode]:
        return [ic for ic in self._codes if ic.category == category]

    def by_section(self, section: str) -> List[IndustryCode]:
        return [ic for ic in self._codes if ic.section == section]

    def categories(self) -> List[str]:
        return sorted({ic.category for ic in self._codes})

    def section(self, section_code: str) -> Optional[IndustrySection]:
        return self._sections_by_code.get(section_code)

    def is_sst_applicable(self, code: Optional[str]) -> bool:
        """Unknown codes are treated as not SST applicable"""
        industry = self.lookup(code)
        return industry.sst_applicable if industry else False

    def is_consolidation_allowed(self, code: Optional[str]) -> ConsolidationCheck:
        """B2C consolidation eligibility for an industry"""
        industry = self.lookup(code)

        if is_prohibited(code) or (industry and not industry.allows_b2c_consolidation):
            return ConsolidationCheck(
                allowed=False,
                reason=(industry.notes if industry and industry.notes else DEFAULT_PROHIBITED_REASON),
                restrictions=[INDIVIDUAL_INVOICES_ACTION]
            )

        if industry is None:
            # Unknown codes are never rejected outright
            return ConsolidationCheck(
                allowed=True,
                reason='Industry code not found in database - proceed with caution',
                restrictions=['Verify with LHDN if consolidation is permitted for your industry']
            )

        restrictions = []

        if industry.category == 'Food & Beverage':
            restrictions.append('Consider monthly transaction volume limits')
            restrictions.append('Maximum recommended: 200 transactions per month per consolidated invoice')

        if industry.category == 'Retail Trade':
            restrictions.append('Consider transaction value limits')
            restrictions.append('Maximum recommended: RM50,000 per consolidated invoice')

        return ConsolidationCheck(allowed=True, restrictions=restrictions or None)


@lru_cache
def get_industry_table() -> IndustryCodeTable:
    """Table from the configured data directory, built once per process"""
    return IndustryCodeTable.from_csv(load_config()["data"]["dir"])


def lookup_industry(code: Optional[str]) -> Optional[IndustryCode]:
    return get_industry_table().lookup(code)


def search_industry_codes(query: str) -> List[IndustryCode]:
    return get_industry_table().search(query)


def is_sst_applicable(code: Optional[str]) -> bool:
    return get_industry_table().is_sst_applicable(code)


def is_consolidation_allowed(code: Optional[str]) -> ConsolidationCheck:
    return get_industry_table().is_consolidation_allowed(code)
