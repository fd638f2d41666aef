"""Production constant overrides.

An override table maps identifiers to scalar values. Applying the table
rewrites every assignment to one of its identifiers, so that

    const API_ROOT = 'http://localhost:8000';

becomes, for `{"API_ROOT": "https://example.org"}`,

    const API_ROOT = 'https://example.org';

The identifier must not be preceded or followed by an identifier character,
and the rest of the line after `=` is replaced. Every occurrence is rewritten.
"""

import json
import re
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml
from loguru import logger

from site_deploy.exceptions import PreconditionError

OverrideValue = Union[str, int, float, bool, None]

IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

log = logger.bind(component="substitution")


def format_literal(value: OverrideValue) -> str:
    """Render a value as a script literal."""
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    if isinstance(value, (bool, int, float)) or value is None:
        return json.dumps(value)
    raise PreconditionError(f"Unsupported override value: {value!r}")


def validate_overrides(overrides: Mapping[str, object]) -> Dict[str, OverrideValue]:
    """Check keys are identifiers and values are scalars."""
    result: Dict[str, OverrideValue] = {}
    for key, value in overrides.items():
        if not isinstance(key, str) or not IDENTIFIER.match(key):
            raise PreconditionError(f"Invalid override name: {key!r}")
        if not (value is None or isinstance(value, (str, int, float, bool))):
            raise PreconditionError(f"Override {key} must be a string, number or boolean")
        result[key] = value
    return result


def _assignment_pattern(keys) -> "re.Pattern[str]":
    # Longest first so that a key never shadows a longer key it prefixes
    names = "|".join(re.escape(key) for key in sorted(keys, key=len, reverse=True))
    return re.compile(rf"(?<![\w$])(?P<key>{names})(?![\w$])[ \t]*=(?![=>])[^\r\n]*")


def apply_overrides(content: str, overrides: Mapping[str, OverrideValue]) -> str:
    """
    Rewrite every assignment to an overridden identifier in a single pass.

    Args:
        content: Script source
        overrides: Identifier to value table

    Returns:
        Content with assignments replaced
    """
    if not overrides:
        return content

    overrides = validate_overrides(overrides)
    literals = {key: format_literal(value) for key, value in overrides.items()}
    pattern = _assignment_pattern(literals)

    def replace(match: "re.Match[str]") -> str:
        key = match.group("key")
        return f"{key} = {literals[key]};"

    content, count = pattern.subn(replace, content)
    if count:
        log.debug(f"Applied {count} override(s)")
    return content


def load_overrides(path: Optional[Path]) -> Dict[str, OverrideValue]:
    """
    Load an override table from a YAML mapping file.

    Raises:
        PreconditionError: If the file is missing or is not a mapping of scalars
    """
    if path is None:
        return {}
    if not path.is_file():
        raise PreconditionError(f"Overrides file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise PreconditionError(f"Invalid YAML in overrides file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PreconditionError(f"Overrides file {path} must contain a mapping")
    return validate_overrides(data)
