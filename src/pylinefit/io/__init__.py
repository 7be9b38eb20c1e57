"""
IO utilities for samples, results and fit settings.
"""

from pylinefit.io.sample_csv import (
    load_grouped_samples_csv,
    load_sample_csv,
    write_results_csv,
)
from pylinefit.io.config_yaml import load_fit_config, save_fit_config

__all__ = [
    "load_sample_csv",
    "load_grouped_samples_csv",
    "write_results_csv",
    "load_fit_config",
    "save_fit_config",
]
