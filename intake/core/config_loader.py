"""Loader for global defaults stored in config/defaults.yaml.

The defaults file carries the scoring vocabulary, freshness bands and
eligibility limits so they can be tuned without a code change.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from intake.core.exceptions import ConfigError
from intake.core.logging import get_logger

logger = get_logger(__name__)

# Base config directory (project root/config)
_CONFIG_BASE_DIR = Path(__file__).parent.parent.parent / "config"


@lru_cache(maxsize=1)
def load_defaults() -> dict[str, Any]:
    """Load global defaults from config/defaults.yaml.

    Returns:
        Dictionary containing default values for scoring and eligibility.

    Raises:
        ConfigError: If the file doesn't exist or is invalid YAML.
    """
    return _load_yaml_file(_CONFIG_BASE_DIR / "defaults.yaml", "defaults")


def load_section(name: str) -> dict[str, Any]:
    """Load one top-level section of the defaults file.

    Args:
        name: Section key (e.g. "scoring")

    Returns:
        The section mapping, or an empty dict when absent
    """
    result = load_defaults().get(name, {})
    return result if isinstance(result, dict) else {}


def _load_yaml_file(path: Path, name: str) -> dict[str, Any]:
    """Load a YAML file from disk.

    Args:
        path: Path to the YAML file.
        name: Human-readable name for error messages.

    Returns:
        Parsed YAML content as dictionary.

    Raises:
        ConfigError: If file doesn't exist or parsing fails.
    """
    if not path.exists():
        logger.error("Config file not found", name=name, path=str(path))
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)

        if not isinstance(content, dict):
            raise ConfigError(f"Config file must contain a YAML object: {path}")

        logger.debug("Loaded config file", name=name, path=str(path))
        return content

    except yaml.YAMLError as e:
        logger.error("YAML parsing failed", name=name, path=str(path), error=str(e))
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def clear_global_config_cache() -> None:
    """Clear cached defaults so the next access re-reads the file."""
    load_defaults.cache_clear()
    logger.info("Global config cache cleared")
