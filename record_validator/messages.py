"""
Error message formatting.

A validator never builds message text itself. It hands the failed check's name,
the field label and the check parameters to a formatter:

- CatalogFormatter: looks the check name up in a flat catalog
  ({"isRequired": "{0} is required", ...}) and fills the positional
  placeholders with [label, *params].
- FallbackFormatter: no catalog; joins label and params and appends the check
  name, e.g. "Name, 5 maxLength".

A catalog may also be keyed by language first ({"en": {...}, "es": {...}});
select_catalog() picks the flat catalog once, before any formatting happens.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Sequence

from importlib.resources import files

import yaml

logger = logging.getLogger(__name__)


class MessageFormatter:
    """Formatting interface shared by the catalog and fallback strategies."""

    def format(self, check_name: str, label: str, params: Sequence[Any]) -> str:
        raise NotImplementedError


class FallbackFormatter(MessageFormatter):
    """Deterministic message used when no template is available."""

    def format(self, check_name: str, label: str, params: Sequence[Any]) -> str:
        attrs = ", ".join(str(attr) for attr in [label, *params])
        return f"{attrs} {check_name}"


class CatalogFormatter(MessageFormatter):
    """Formats messages from a flat check-name -> template catalog."""

    def __init__(self, catalog: Mapping):
        """
        Args:
            catalog: Mapping of check name to a template with positional
                placeholders ({0} is the label, {1}.. the check parameters)
        """
        self.catalog = catalog
        self._fallback = FallbackFormatter()

    def format(self, check_name: str, label: str, params: Sequence[Any]) -> str:
        template = self.catalog.get(check_name)
        if not isinstance(template, str):
            logger.debug(
                "No message template for check, using fallback format",
                extra={"check": check_name},
            )
            return self._fallback.format(check_name, label, params)
        try:
            return template.format(label, *params)
        except (IndexError, KeyError, ValueError) as e:
            logger.debug(
                f"Broken message template for '{check_name}': {e}",
                extra={"check": check_name},
            )
            return self._fallback.format(check_name, label, params)


def make_formatter(messages: Any = None) -> MessageFormatter:
    """
    Build the formatter for a validator.

    Args:
        messages: None, an existing MessageFormatter, or a flat catalog mapping

    Returns:
        MessageFormatter instance
    """
    if messages is None:
        return FallbackFormatter()
    if isinstance(messages, MessageFormatter):
        return messages
    if isinstance(messages, Mapping):
        return CatalogFormatter(messages)
    raise TypeError(
        f"Messages must be a mapping or a MessageFormatter, got {type(messages).__name__}"
    )


def select_catalog(messages: Optional[Mapping], language: Optional[str]) -> Optional[Mapping]:
    """
    Pick the flat catalog for a language from a language-keyed catalog.

    A catalog that has no entry for the language is returned unchanged, so a
    flat catalog can be combined with a language used only for labels.
    """
    if messages is None or language is None:
        return messages
    selected = messages.get(language)
    if isinstance(selected, Mapping):
        return selected
    return messages


def load_default_messages() -> Dict[str, Dict[str, str]]:
    """Load the bundled language-keyed message catalog (messages.yaml)."""
    catalog_file = files("record_validator").joinpath("messages.yaml")
    with catalog_file.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)
