"""
Configuration management
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

DEFAULT_CONFIG: Dict[str, Any] = {
    'validation': {
        'tolerance': '0.01',
        'high_quantity_threshold': 10000,
        'max_payment_days': 90,
        'ruleset': 'standard',
    },
    'logging': {
        'level': 'INFO',
        'log_dir': None,
    },
    'data': {
        'dir': str(PACKAGE_DATA_DIR),
    },
}

RULESETS = ('standard', 'extended')


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file on top of the built-in defaults

    Args:
        config_path: Explicit YAML file. When omitted, ``config.yaml`` in the
            working directory is used if it exists.

    Raises:
        FileNotFoundError: an explicitly requested file does not exist
        ValueError: the ruleset name is unknown
    """

    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_file = Path("config.yaml")

    file_config: Dict[str, Any] = {}
    if config_file.exists():
        with open(config_file) as f:
            file_config = yaml.safe_load(f) or {}

    config = _merge(DEFAULT_CONFIG, file_config)

    # Override with environment variables if present
    if os.getenv('MYINVOIS_TOLERANCE'):
        config['validation']['tolerance'] = os.getenv('MYINVOIS_TOLERANCE')
    if os.getenv('MYINVOIS_RULESET'):
        config['validation']['ruleset'] = os.getenv('MYINVOIS_RULESET')
    if os.getenv('MYINVOIS_LOG_LEVEL'):
        config['logging']['level'] = os.getenv('MYINVOIS_LOG_LEVEL')
    if os.getenv('MYINVOIS_DATA_DIR'):
        config['data']['dir'] = os.getenv('MYINVOIS_DATA_DIR')

    ruleset = config['validation']['ruleset']
    if ruleset not in RULESETS:
        raise ValueError(f"Unknown ruleset '{ruleset}', expected one of {', '.join(RULESETS)}")

    return config

