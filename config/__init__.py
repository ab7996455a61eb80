"""Configuration loading utilities."""

from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR = Path(__file__).parent


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML config file from the config/ directory. Empty files give {}."""
    with open(CONFIG_DIR / filename) as f:
        return yaml.safe_load(f) or {}
