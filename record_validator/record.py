"""
Record validation against a rule set.

RecordValidator drives one ValueValidator per field of the rule set and merges
their errors:

    validator = RecordValidator(
        {"name": "izisaurio", "age": 30},
        {"name": {"label": "Name", "maxLength": 5}, "age": {"isInt": True, "max": 25}},
        RecordValidator.get_default_messages(),
        "en",
    )
    if not validator.validate():
        for error in validator.get_errors():
            print(error)

Per field, "isRequired" always runs first; when it fails the remaining checks
of that field are skipped but the other fields are still validated. Fields
flagged "isNullable" are skipped entirely when the record has no value for
them. Fields that are not in the rule set are never looked at.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from .messages import load_default_messages, make_formatter, select_catalog
from .rule_schema import (
    RESERVED_KEYS,
    check_ruleset,
    is_reference,
    reference_target,
)
from .value import ValueValidator

logger = logging.getLogger(__name__)


def _as_mapping(record: Any) -> Dict[str, Any]:
    if record is None:
        return {}
    if isinstance(record, Mapping):
        return dict(record)
    return dict(vars(record))


class RecordValidator:
    """Validates the fields of a record against a rule set"""

    def __init__(
        self,
        record: Any,
        rules: Mapping,
        messages: Optional[Mapping] = None,
        language: Optional[str] = None,
    ):
        """
        Initialize record validator.

        Args:
            record: Mapping (or plain object) of field name to value
            rules: Rule set mapping field name to {check name: parameter}
            messages: Message catalog, flat or keyed by language; None uses
                the fallback message format
            language: Active language for labels and for picking the catalog

        Raises:
            RuleSetError: If the rule set is malformed or an "@field" reference
                names a field that is neither in the rule set nor in the record
        """
        self.record = _as_mapping(record)
        self.rules = rules
        self.language = language
        check_ruleset(rules, fields=set(rules) | set(self.record))

        # The language-keyed catalog is narrowed once, not per message
        self.messages = select_catalog(messages, language)
        self.formatter = make_formatter(self.messages)

        self._errors: List[str] = []
        self._errors_by_key: Dict[str, List[str]] = {}

    @staticmethod
    def get_default_messages() -> Dict[str, Dict[str, str]]:
        """Return the bundled message catalog, keyed by language."""
        return load_default_messages()

    def validate(self) -> bool:
        """
        Validate every field of the rule set, in rule set order.

        Returns:
            True if no check failed
        """
        self._errors = []
        self._errors_by_key = {}

        for key, rule_set in self.rules.items():
            if "isNullable" in rule_set and self.record.get(key) is None:
                continue

            value = self.record.get(key, "")
            field = ValueValidator(value, self._get_label(key), self.formatter)
            field.is_required()
            if not field.validate():
                self._add_errors(key, field.get_errors())
                continue

            for rule, param in rule_set.items():
                if rule in RESERVED_KEYS:
                    continue
                if rule not in field.CHECKS:
                    logger.debug(
                        f"Skipping unknown check '{rule}'",
                        extra={"field": key},
                    )
                    continue
                field.run(rule, *self._resolve_params(param))

            if not field.validate():
                self._add_errors(key, field.get_errors())

        return not self._errors

    def get_errors(self) -> List[str]:
        """Return all error messages, field by field, in check order."""
        return list(self._errors)

    def get_errors_by_key(self) -> Dict[str, List[str]]:
        """Return error messages grouped by field name."""
        return {key: list(errors) for key, errors in self._errors_by_key.items()}

    def _resolve_params(self, param: Any) -> Tuple:
        """Turn a configured parameter into check arguments."""
        if is_reference(param):
            target = reference_target(param)
            return (self.record.get(target, ""), self._get_label(target))
        return (param,)

    def _get_label(self, key: str) -> str:
        """
        Resolve the display label of a field.

        An explicit string label wins; a language-keyed label is used when the
        active language has an entry; otherwise the field key itself.
        """
        entry = self.rules.get(key)
        if not entry or "label" not in entry:
            return key
        label = entry["label"]
        if not isinstance(label, Mapping):
            return label
        if self.language is not None and self.language in label:
            return label[self.language]
        return key

    def _add_errors(self, key: str, errors: List[str]):
        self._errors.extend(errors)
        self._errors_by_key.setdefault(key, []).extend(errors)
