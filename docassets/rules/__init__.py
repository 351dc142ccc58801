"""
Rules - YAML configuration for the asset engine, validated with pydantic.
"""

from .loader import DEFAULT_RULES_PATH, RULES_ENV_VAR, load_rules, resolve_rules
from .models import (
    MAX_FILE_SIZE,
    AssetRules,
    ConcurrencyRules,
    FormatRules,
    LocaleRules,
    ModernFormatRules,
    OptimizationRules,
    PathsRules,
    ResponsiveRules,
    SecurityRules,
)

__all__ = [
    "DEFAULT_RULES_PATH",
    "MAX_FILE_SIZE",
    "RULES_ENV_VAR",
    "AssetRules",
    "ConcurrencyRules",
    "FormatRules",
    "LocaleRules",
    "ModernFormatRules",
    "OptimizationRules",
    "PathsRules",
    "ResponsiveRules",
    "SecurityRules",
    "load_rules",
    "resolve_rules",
]
