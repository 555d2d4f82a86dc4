"""Configuration loading for rule sets and message catalogs, with URI fetching and caching."""

import hashlib
import json
import logging
import os
import time
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml

from .messages import load_default_messages
from .rule_schema import check_catalog, check_ruleset

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Loads the local config and the documents it points to.

    The local config (bundled local-config.yaml unless a path is given) names
    the rule sets and the message catalog:

        default_language: en
        messages_uri: null            # null -> bundled catalog
        cache_dir: ~/.cache/record-validator
        fetch_timeout_seconds: 10
        rulesets:
          signup: rulesets/signup.yaml

    Document URIs may be relative paths (resolved against the config file),
    file:// URIs or http(s):// URLs. Remote documents are cached on disk.
    """

    DEFAULT_CACHE_DIR = Path.home() / ".cache" / "record-validator"
    DEFAULT_TIMEOUT = 10

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Path to a local config YAML file; None uses the
                bundled local-config.yaml

        Raises:
            RuntimeError: If the config file cannot be read or parsed
        """
        if config_path is None:
            config_file = files("record_validator").joinpath("local-config.yaml")
            self.local_config_path = str(config_file)
            with config_file.open("r", encoding="utf-8") as f:
                self.local_config = yaml.safe_load(f) or {}
        else:
            self.local_config_path = str(Path(config_path).resolve())
            self.local_config = self._load_file(self.local_config_path) or {}

        if not isinstance(self.local_config, dict):
            raise RuntimeError(
                f"Failed to load config from {self.local_config_path}: "
                f"expected a mapping, got {type(self.local_config).__name__}"
            )

        cache_dir = self.local_config.get("cache_dir")
        self.cache_dir = (
            Path(os.path.expanduser(cache_dir)) if cache_dir else self.DEFAULT_CACHE_DIR
        )
        # Directory is created lazily, only when a remote document is fetched.
        self.timeout = self.local_config.get("fetch_timeout_seconds", self.DEFAULT_TIMEOUT)
        self.loaded_at = time.time()

        logger.info(
            "Config loaded",
            extra={
                "config_path": self.local_config_path,
                "rulesets": self.get_ruleset_names(),
            },
        )

    def get_local_config(self) -> Dict[str, Any]:
        """Get the local configuration."""
        return self.local_config

    def get_default_language(self) -> Optional[str]:
        """Get the language used when a caller does not pass one."""
        return self.local_config.get("default_language")

    def get_ruleset_names(self) -> List[str]:
        """Get the names of the configured rule sets."""
        return list((self.local_config.get("rulesets") or {}).keys())

    def get_ruleset_uri(self, name: str) -> str:
        """
        Get the URI of a named rule set.

        Raises:
            KeyError: If no rule set with that name is configured
        """
        rulesets = self.local_config.get("rulesets") or {}
        if name not in rulesets:
            raise KeyError(f"Unknown rule set: {name}")
        return rulesets[name]

    def load_ruleset(self, name: str) -> Dict[str, Any]:
        """
        Load and structurally check a named rule set.

        Raises:
            KeyError: If the rule set is not configured
            RuleSetError: If the document is not a valid rule set
            RuntimeError: If the document cannot be fetched or parsed
        """
        uri = self.get_ruleset_uri(name)
        rules = self.load_document(uri)
        check_ruleset(rules)
        logger.info("Rule set loaded", extra={"ruleset": name, "uri": uri})
        return rules

    def load_messages(self) -> Dict[str, Any]:
        """
        Load the message catalog named by messages_uri, or the bundled one.

        Raises:
            RuleSetError: If the document is not a valid catalog
            RuntimeError: If the document cannot be fetched or parsed
        """
        uri = self.local_config.get("messages_uri")
        if not uri:
            return load_default_messages()
        messages = self.load_document(uri)
        check_catalog(messages)
        logger.info("Message catalog loaded", extra={"uri": uri})
        return messages

    def load_document(self, uri: str) -> Any:
        """
        Load a YAML or JSON document from URI (with caching).

        Supports:
        - Relative paths - resolved against the local config directory
        - file:// - Local filesystem (absolute paths)
        - https:// / http:// - Remote, cached under cache_dir

        Args:
            uri: Document URI or relative path

        Returns:
            Parsed document
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            config_dir = os.path.dirname(os.path.abspath(self.local_config_path))
            return self._load_file(os.path.join(config_dir, uri))

        if parsed.scheme == "file":
            return self._load_file(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            suffix = ".json" if parsed.path.endswith(".json") else ".yaml"
            cache_path = self.cache_dir / f"doc_{cache_key}{suffix}"

            if cache_path.exists():
                return self._load_file(str(cache_path))

            content = self._fetch_uri(uri)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content, encoding="utf-8")
            return self._parse(content, uri)

        raise ValueError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def clear_cache(self):
        """Remove cached remote documents."""
        if not self.cache_dir.exists():
            return
        for cached in self.cache_dir.glob("doc_*"):
            cached.unlink()

    def get_config_age(self) -> float:
        """Get age of the loaded config in seconds."""
        return time.time() - self.loaded_at

    def _load_file(self, path: str) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise RuntimeError(f"Failed to load config from {path}: {e}") from e
        return self._parse(content, path)

    def _parse(self, content: str, source: str) -> Any:
        try:
            if source.endswith(".json"):
                return json.loads(content)
            return yaml.safe_load(content)
        except (ValueError, yaml.YAMLError) as e:
            raise RuntimeError(f"Failed to parse config from {source}: {e}") from e

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.timeout)
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to fetch config from {uri}: {e}") from e
