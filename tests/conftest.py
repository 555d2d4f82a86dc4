"""Shared fixtures: a local config with file-based rule sets under tmp_path."""
import json

import pytest
import yaml


SIGNUP_RULES = {
    "name": {"label": {"en": "Name", "es": "Nombre"}, "isSafeText": True, "maxLength": 20},
    "age": {"label": {"en": "Age", "es": "Edad"}, "isInt": True, "min": 18, "isNullable": True},
    "password": {"label": "Password", "mbMinLength": 8},
    "confirm": {"label": "Confirmation", "equal": "@password"},
}

EVENT_RULES = {
    "start": {"label": "Start", "isDate": True},
    "end": {"label": "End", "isDate": True, "greaterDate": "@start"},
}


@pytest.fixture
def config_dir(tmp_path):
    """Directory holding a local config, a YAML and a JSON rule set."""
    rules_dir = tmp_path / "rulesets"
    rules_dir.mkdir()
    (rules_dir / "signup.yaml").write_text(
        yaml.safe_dump(SIGNUP_RULES, allow_unicode=True, sort_keys=False), encoding="utf-8"
    )
    (rules_dir / "event.json").write_text(json.dumps(EVENT_RULES), encoding="utf-8")

    config = {
        "default_language": "en",
        "messages_uri": None,
        "cache_dir": str(tmp_path / "cache"),
        "fetch_timeout_seconds": 5,
        "rulesets": {
            "signup": "rulesets/signup.yaml",
            "event": (rules_dir / "event.json").as_uri(),
        },
    }
    (tmp_path / "validation.yaml").write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return tmp_path


@pytest.fixture
def config_path(config_dir):
    """Path to the local config file."""
    return str(config_dir / "validation.yaml")
