import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from docassets.rules.models import AssetRules

DEFAULT_RULES_PATH = "rules.yaml"
RULES_ENV_VAR = "DOCASSETS_RULES"


def load_rules(path: Path) -> AssetRules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    # An empty file means "all defaults"
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Rules file must contain a mapping, got {type(data).__name__}")

    try:
        return AssetRules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def resolve_rules(path: str | Path | None = None) -> AssetRules:
    """
    Resolve configuration for a build.

    An explicit path (or $DOCASSETS_RULES) must exist; the implicit default
    rules.yaml is optional and falls back to built-in defaults.
    """
    if path is None:
        path = os.environ.get(RULES_ENV_VAR)

    if path is not None:
        return load_rules(Path(path))

    default = Path(DEFAULT_RULES_PATH)
    if default.exists():
        return load_rules(default)
    return AssetRules()
