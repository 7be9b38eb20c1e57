"""
YAML loading and saving for fit settings.

A config file is either a flat mapping of FitConfig fields or the same mapping
nested under a top-level ``fit`` key:

    fit:
      grid_resolution: 25
      max_iterations: 200
      tolerance: 1.0e-6
"""

import logging
from pathlib import Path

import yaml

from pylinefit.types.fitting import FitConfig

logger = logging.getLogger(__name__)


def load_fit_config(path: Path) -> FitConfig:
    """Load a FitConfig from YAML; unknown keys are ignored."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to load YAML file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config YAML must contain a mapping at the top level")
    section = data.get("fit", data)
    if not isinstance(section, dict):
        raise ValueError("Config YAML 'fit' section must be a mapping")

    config = FitConfig.from_dict(section)
    logger.debug("Loaded fit config from %s: %s", path, config)
    return config


def save_fit_config(config: FitConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump({"fit": config.to_dict()}, handle, sort_keys=False)
