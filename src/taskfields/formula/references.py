"""Field reference extraction for formulas."""

import re

from taskfields.core.exceptions import FormulaSyntaxError
from taskfields.formula.context import BUILTIN_ATTRIBUTES
from taskfields.formula.parser import get_parser

# Fallback scan for sources that do not parse; mirrors the FIELD_REF terminal
_REF_PATTERN = re.compile(r"\{\{([^{}]+)\}\}|\{([^{}]+)\}")
_FIELD_CALL_PATTERN = re.compile(r"""\bfield\s*\(\s*(?:"([^"]*)"|'([^']*)')\s*\)""", re.IGNORECASE)


def extract_field_refs(source: str | None) -> list[str]:
    """
    Custom field names a formula depends on.

    Names appear once, in order of first occurrence. Built-in task
    attributes are not custom fields and are left out. Sources that do not
    parse are scanned for reference tokens instead, so editors can still
    show dependencies of a formula being typed.

    Args:
        source: Formula source

    Returns:
        Referenced custom field names
    """
    if not source or not source.strip():
        return []
    try:
        names = get_parser().get_field_references(source)
    except FormulaSyntaxError:
        names = _scan_field_refs(source)
    return [name for name in dict.fromkeys(names) if name not in BUILTIN_ATTRIBUTES]


def _scan_field_refs(source: str) -> list[str]:
    found: list[tuple[int, str]] = []
    for match in _REF_PATTERN.finditer(source):
        found.append((match.start(), (match.group(1) or match.group(2)).strip()))
    for match in _FIELD_CALL_PATTERN.finditer(source):
        found.append((match.start(), (match.group(1) or match.group(2) or "").strip()))
    return [name for _, name in sorted(found) if name]
