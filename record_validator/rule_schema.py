"""
Rule set and message catalog structure checks.

A rule set maps field names to their checks:

    {
        "name":   {"label": {"en": "Name", "es": "Nombre"}, "maxLength": 5},
        "age":    {"isInt": True, "max": 25, "isNullable": True},
        "second": {"equal": "@value"},
    }

"label" and "isNullable" are configuration; every other key is a check name
with its parameter. A string parameter starting with "@" references another
field: the check receives that field's value and label instead of the string.

Structure is checked with JSON Schema. Reference targets are checked against
the fields known when a record is validated, so a dangling "@field" surfaces as
a RuleSetError before any check runs instead of silently comparing against an
empty value.
"""

from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional, Tuple

from jsonschema import Draft7Validator

RESERVED_KEYS = ("label", "isNullable")
REFERENCE_MARKER = "@"

RULESET_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "properties": {
            "label": {
                "oneOf": [
                    {"type": "string"},
                    {
                        "type": "object",
                        "additionalProperties": {"type": "string"},
                    },
                ]
            },
            "isNullable": {"type": "boolean"},
        },
    },
}

CATALOG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": {
        "oneOf": [
            {"type": "string"},
            {
                "type": "object",
                "additionalProperties": {"type": "string"},
            },
        ]
    },
}

_ruleset_validator = Draft7Validator(RULESET_SCHEMA)
_catalog_validator = Draft7Validator(CATALOG_SCHEMA)


class RuleSetError(ValueError):
    """Raised when a rule set or message catalog is malformed."""


def is_reference(param: Any) -> bool:
    return isinstance(param, str) and param.startswith(REFERENCE_MARKER)


def reference_target(param: str) -> str:
    return param.lstrip(REFERENCE_MARKER)


def find_references(rules: Mapping) -> Iterator[Tuple[str, str, str]]:
    """Yield (field, check, referenced field) for every "@field" parameter."""
    for field, entry in rules.items():
        for check_name, param in entry.items():
            if check_name in RESERVED_KEYS:
                continue
            if is_reference(param):
                yield field, check_name, reference_target(param)


def _describe(errors) -> str:
    messages = []
    for error in sorted(errors, key=lambda e: [str(p) for p in e.absolute_path]):
        path = "/".join(str(p) for p in error.absolute_path) or "<root>"
        messages.append(f"{path}: {error.message}")
    return "; ".join(messages)


def check_ruleset(rules: Any, fields: Optional[Iterable[str]] = None) -> None:
    """
    Verify the structure of a rule set and, optionally, its references.

    Args:
        rules: Rule set mapping
        fields: Field names a reference may point to; None skips the
            reference check (e.g. when no record is known yet)

    Raises:
        RuleSetError: If the rule set is malformed or references an unknown field
    """
    errors = list(_ruleset_validator.iter_errors(rules))
    if errors:
        raise RuleSetError(f"Invalid rule set: {_describe(errors)}")

    if fields is None:
        return
    known = set(fields)
    for field, check_name, target in find_references(rules):
        if not target or target not in known:
            raise RuleSetError(
                f"Rule '{check_name}' of field '{field}' references unknown field "
                f"'{REFERENCE_MARKER}{target}'"
            )


def check_catalog(messages: Any) -> None:
    """
    Verify that a message catalog is flat or keyed by language.

    Raises:
        RuleSetError: If the catalog is malformed
    """
    errors = list(_catalog_validator.iter_errors(messages))
    if errors:
        raise RuleSetError(f"Invalid message catalog: {_describe(errors)}")
