"""
Malaysian Tax Identification Number (TIN) validation

TIN formats:
- Corporate:  C + 10 digits (C1234567890)
- Individual: 12 digits     (123456789012)
- Government: G + 10 digits (G1234567890)
- Non-profit: N + 10 digits (N1234567890)

Matching is case-insensitive and ignores whitespace anywhere in the input.
"""

import re
from types import MappingProxyType
from typing import List, Optional

from myinvois_compliance.models.validation import TinType, TinValidationResult


TIN_PATTERNS = MappingProxyType({
    TinType.CORPORATE: re.compile(r'^C\d{10}$'),
    TinType.INDIVIDUAL: re.compile(r'^\d{12}$'),
    TinType.GOVERNMENT: re.compile(r'^G\d{10}$'),
    TinType.NONPROFIT: re.compile(r'^N\d{10}$'),
})

TIN_FORMATS = MappingProxyType({
    TinType.CORPORATE: 'C1234567890',
    TinType.INDIVIDUAL: '123456789012',
    TinType.GOVERNMENT: 'G1234567890',
    TinType.NONPROFIT: 'N1234567890',
})

TIN_DESCRIPTIONS = MappingProxyType({
    TinType.CORPORATE: 'Company/Corporate entity',
    TinType.INDIVIDUAL: 'Individual taxpayer',
    TinType.GOVERNMENT: 'Government entity',
    TinType.NONPROFIT: 'Non-profit organization',
})

_WHITESPACE = re.compile(r'\s+')


def clean_tin(tin: Optional[str]) -> str:
    """Strip whitespace and upper-case"""
    if not tin:
        return ''
    return _WHITESPACE.sub('', str(tin)).upper()


def classify_tin(tin: Optional[str]) -> TinType:
    cleaned = clean_tin(tin)
    for tin_type, pattern in TIN_PATTERNS.items():
        if pattern.match(cleaned):
            return tin_type
    return TinType.UNKNOWN


def validate_tin(tin: Optional[str]) -> TinValidationResult:
    """
    Validate a Malaysian TIN

    Invalid input gets "Invalid TIN format" plus, where the shape of the input
    allows it, one diagnostic hint. Valid input that looks like placeholder
    data gets warnings only; warnings never affect ``is_valid``.
    """
    result = TinValidationResult()

    cleaned = clean_tin(tin)
    if not cleaned:
        result.errors.append('TIN is required')
        return result

    tin_type = classify_tin(cleaned)

    if tin_type == TinType.UNKNOWN:
        result.errors.append('Invalid TIN format')
        hint = _diagnose(cleaned)
        if hint:
            result.errors.append(hint)
        return result

    result.is_valid = True
    result.type = tin_type
    result.format = TIN_FORMATS[tin_type]
    result.warnings.extend(_placeholder_warnings(cleaned))
    return result


def _diagnose(cleaned: str) -> Optional[str]:
    """Best-effort guidance for a TIN that matched no pattern"""
    length = len(cleaned)

    if length < 10:
        return 'TIN is too short'
    if length > 12:
        return 'TIN is too long'
    if length == 11 and cleaned[0] not in 'CGN':
        return '11-character TIN must start with C, G or N'
    if length == 12 and cleaned[0].isalpha():
        return '12-digit TIN should not start with a letter'
    return None


def _placeholder_warnings(cleaned: str) -> List[str]:
    warnings = []
    digits = ''.join(ch for ch in cleaned if ch.isdigit())

    if digits.startswith('000'):
        warnings.append('TIN appears to be a test number')

    if is_sequential(digits):
        warnings.append('TIN appears to be sequential test data')

    return warnings


def is_sequential(digits: str) -> bool:
    """Strictly ascending (1234...) or strictly descending (9876...) by one"""
    if len(digits) < 4:
        return False

    values = [int(d) for d in digits]
    steps = {b - a for a, b in zip(values, values[1:])}
    return steps == {1} or steps == {-1}


def format_tin_for_display(tin: Optional[str]) -> str:
    """
    Group digits for display:
    C1234567890 -> C 1234 567 890, 123456789012 -> 1234 5678 9012.
    Anything unrecognised comes back cleaned but ungrouped.
    """
    cleaned = clean_tin(tin)
    tin_type = classify_tin(cleaned)

    if tin_type in (TinType.CORPORATE, TinType.GOVERNMENT, TinType.NONPROFIT):
        return f"{cleaned[0]} {cleaned[1:5]} {cleaned[5:8]} {cleaned[8:]}"

    if tin_type == TinType.INDIVIDUAL:
        return f"{cleaned[:4]} {cleaned[4:8]} {cleaned[8:]}"

    return cleaned


def describe_tin_type(tin_type) -> str:
    try:
        return TIN_DESCRIPTIONS.get(TinType(tin_type), 'Unknown')
    except ValueError:
        return 'Unknown'


def suggest_tin_formats(partial: Optional[str]) -> List[str]:
    """Suggest complete TINs for partially typed input (at most 3)"""
    cleaned = clean_tin(partial)

    if not cleaned:
        return [
            'C1234567890 (Company)',
            '123456789012 (Individual)',
            'G1234567890 (Government)',
            'N1234567890 (Non-profit)',
        ]

    suggestions = []
    prefix_labels = {'C': 'Company', 'G': 'Government', 'N': 'Non-profit'}

    if cleaned[0] in prefix_labels:
        completed = cleaned.ljust(11, '0')[:11]
        suggestions.append(f"{completed} ({prefix_labels[cleaned[0]]} format)")
    elif cleaned[0].isdigit():
        completed = cleaned.ljust(12, '0')[:12]
        suggestions.append(f"{completed} (Individual format)")

        # Ten digits typed could be a company TIN missing its prefix
        if len(cleaned) <= 10 and cleaned.isdigit():
            suggestions.append(f"C{cleaned.ljust(10, '0')} (Company format)")

    return suggestions[:3]
