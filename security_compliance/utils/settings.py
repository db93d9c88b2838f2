from __future__ import annotations

import copy
import os
import pathlib
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = "config/settings.yml"

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "github": {
        "api_base": "https://api.github.com",
        "per_page": 100,
        "sort": "updated",
    },
    "report": {
        "output": "compliance-report.html",
        "formats": ["html"],
    },
}

VALID_SORTS = ("created", "updated", "pushed", "full_name")
VALID_FORMATS = ("html", "json", "md")


class ConfigError(ValueError):
    pass


def parse_formats(value: Any) -> list:
    if isinstance(value, str):
        value = [v for v in (p.strip().lower() for p in value.split(",")) if v]
    if not isinstance(value, list) or not value:
        raise ConfigError("report.formats must be a non-empty list")
    unknown = [v for v in value if v not in VALID_FORMATS]
    if unknown:
        raise ConfigError(f"Unsupported report format(s): {', '.join(map(str, unknown))}")
    # html is always produced
    return ["html"] + [v for v in dict.fromkeys(value) if v != "html"]


def validate_settings(raw: Any) -> Dict[str, Dict[str, Any]]:
    """Merge raw settings over the defaults, rejecting unknown keys."""
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if raw is None:
        return settings
    if not isinstance(raw, dict):
        raise ConfigError("Settings file must contain a mapping")

    for section, values in raw.items():
        if section not in settings:
            raise ConfigError(f"Unknown settings section '{section}'")
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Settings section '{section}' must be a mapping")
        for key, value in values.items():
            if key not in settings[section]:
                raise ConfigError(f"Unknown setting '{section}.{key}'")
            settings[section][key] = value

    gh = settings["github"]
    try:
        gh["per_page"] = int(gh["per_page"])
    except (TypeError, ValueError):
        raise ConfigError("github.per_page must be an integer")
    if not 1 <= gh["per_page"] <= 100:
        raise ConfigError("github.per_page must be between 1 and 100")
    if gh["sort"] not in VALID_SORTS:
        raise ConfigError(f"github.sort must be one of: {', '.join(VALID_SORTS)}")

    report = settings["report"]
    if not report["output"] or not str(report["output"]).strip():
        raise ConfigError("report.output must not be empty")
    report["output"] = str(report["output"])
    report["formats"] = parse_formats(report["formats"])

    return settings


def load_settings(path: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load YAML settings.

    Without an explicit path the default location is optional; an explicit
    path that does not exist is an error. GITHUB_API_BASE overrides
    github.api_base.
    """
    config_path = pathlib.Path(path or DEFAULT_CONFIG_PATH)
    raw = None
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    elif path:
        raise FileNotFoundError(f"Configuration file not found: {path}")

    settings = validate_settings(raw)

    api_base = os.environ.get("GITHUB_API_BASE")
    if api_base and api_base.strip():
        settings["github"]["api_base"] = api_base.strip()
    return settings
