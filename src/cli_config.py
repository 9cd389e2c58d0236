"""CLI configuration: merges the config file, environment and CLI flags.

Precedence, highest first: CLI flags, configuration file, environment,
built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ("jarresolve.yml", "jarresolve.yaml", "jarresolve.json")


@dataclass
class Settings:
    """Effective settings for one CLI invocation."""
    client: str = Constants.DEFAULT_CLIENT
    settings_dir: str = Constants.DEFAULT_SETTINGS_DIR
    sdk_path: Optional[str] = None
    repositories: List[str] = field(default_factory=list)
    use_latest: bool = False


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file.

    Without ``path`` the first default file present in the working directory
    is used. A missing default file yields an empty mapping.

    Raises:
        FileNotFoundError: If an explicit ``path`` does not exist.
        ValueError: If the file does not hold a mapping or cannot be parsed.
    """
    if not path:
        path = next((p for p in DEFAULT_CONFIG_FILES if os.path.isfile(p)), None)
        if path is None:
            return {}
    with open(path, "r", encoding="utf-8") as fh:
        try:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Cannot parse configuration file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    logger.debug("Loaded configuration from %s", path)
    return data


def build_settings(args, config: Optional[Dict[str, Any]] = None) -> Settings:
    """Combine parsed CLI arguments and configuration into Settings."""
    config = config or {}
    settings = Settings()

    settings.sdk_path = os.environ.get(Constants.ENV_SDK_PATH) or None
    if config.get("sdk"):
        settings.sdk_path = str(config["sdk"])
    if getattr(args, "SDK_PATH", None):
        settings.sdk_path = args.SDK_PATH

    settings.settings_dir = (getattr(args, "SETTINGS_DIR", None)
                             or config.get("settings_dir")
                             or Constants.DEFAULT_SETTINGS_DIR)
    settings.client = getattr(args, "CLIENT", None) or config.get("client") or Constants.DEFAULT_CLIENT

    repositories = config.get("repositories") or []
    if isinstance(repositories, str):
        repositories = [repositories]
    settings.repositories = [str(r) for r in repositories] + list(getattr(args, "REPOSITORIES", None) or [])

    use_latest = getattr(args, "USE_LATEST", None)
    settings.use_latest = bool(config.get("use_latest", False)) if use_latest is None else bool(use_latest)
    return settings
