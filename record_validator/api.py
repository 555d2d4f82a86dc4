"""
Public API for record-validator

This is the "front door" for hosts that keep their rule sets in configuration
rather than in code.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from .config_loader import ConfigLoader
from .files import FileValidator
from .messages import make_formatter, select_catalog
from .record import RecordValidator
from .value import ValueValidator

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Main validation service class.

    Validates records against named rule sets from the local config, or against
    rule sets passed inline, using the configured message catalog.

    Example:
        from record_validator import ValidationService

        service = ValidationService("config/validation.yaml")
        result = service.validate(form_data, "signup", language="es")
        if not result["valid"]:
            for field, errors in result["errors_by_field"].items():
                print(field, errors)
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize validation service.

        Args:
            config_path: Local config YAML; None uses the bundled config

        Raises:
            RuntimeError: If the config or message catalog cannot be loaded
        """
        self._config_path = config_path
        self._initialize()

    def _initialize(self):
        """Internal initialization logic (used by __init__ and reload_config)."""
        self.config_loader = ConfigLoader(self._config_path)
        self.default_language = self.config_loader.get_default_language()
        self.messages = self.config_loader.load_messages()
        self._rulesets: Dict[str, Dict[str, Any]] = {}

    def validate(self, record, ruleset, language=None):
        """
        Validate a record against a rule set.

        Args:
            record: Mapping of field name to value
            ruleset: Name of a configured rule set, or a rule set mapping
            language: Language for labels and messages (default from config)

        Returns:
            Dict with:
                - valid: True if every check passed
                - errors: Error messages in field/check order
                - errors_by_field: Error messages grouped by field

        Raises:
            KeyError: If a named rule set is not configured
            RuleSetError: If the rule set is malformed or has dangling references

        Example:
            result = service.validate(
                {"password": "abc", "confirm": "abd"},
                {"confirm": {"equal": "@password"}},
            )
        """
        rules = self._get_ruleset(ruleset)
        validator = RecordValidator(
            record, rules, self.messages, language or self.default_language
        )
        valid = validator.validate()
        return {
            "valid": valid,
            "errors": validator.get_errors(),
            "errors_by_field": validator.get_errors_by_key(),
        }

    def validate_value(self, value, checks, label="value", language=None):
        """
        Validate a single value.

        Checks run in the given order; unknown check names are ignored. Unlike
        validate(), "isRequired" only runs when listed.

        Args:
            value: Value to validate
            checks: Mapping of check name to parameter, e.g. {"isInt": True, "max": 25}
            label: Label used in error messages
            language: Language for messages (default from config)

        Returns:
            Dict with valid and errors
        """
        catalog = select_catalog(self.messages, language or self.default_language)
        validator = ValueValidator(value, label, make_formatter(catalog))
        for name, param in checks.items():
            if name not in ValueValidator.CHECKS:
                logger.debug(f"Skipping unknown check '{name}'")
                continue
            validator.run(name, param)
        return {"valid": validator.validate(), "errors": validator.get_errors()}

    def discover_checks(self):
        """
        List the check names usable in rule sets.

        Returns:
            Dict with "value" checks (records, single values) and "file" checks
            (upload descriptors)
        """
        return {
            "value": ValueValidator.checks(),
            "file": FileValidator.checks(),
        }

    def discover_rulesets(self):
        """
        Describe the configured rule sets.

        Returns:
            Dict mapping rule set name to {"uri": str, "fields": [field names]}
        """
        result = {}
        for name in self.config_loader.get_ruleset_names():
            rules = self._get_ruleset(name)
            result[name] = {
                "uri": self.config_loader.get_ruleset_uri(name),
                "fields": list(rules.keys()),
            }
        return result

    def reload_config(self):
        """
        Reload configuration, catalog and rule sets from source.

        Cached remote documents are dropped so they are fetched again.
        """
        self.config_loader.clear_cache()
        self._initialize()
        logger.info("Configuration reloaded")

    def get_config_age(self):
        """Get age of the loaded configuration in seconds."""
        return self.config_loader.get_config_age()

    def _get_ruleset(self, ruleset):
        if isinstance(ruleset, Mapping):
            return ruleset
        if ruleset not in self._rulesets:
            self._rulesets[ruleset] = self.config_loader.load_ruleset(ruleset)
        return self._rulesets[ruleset]
