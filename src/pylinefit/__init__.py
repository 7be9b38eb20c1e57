"""
pylinefit: least-squares line fitting for small tabular datasets

- Analysis: grid scan → simplex descent → FitResult
- Exploration: frequency tables, binning and outlier handling (pandas)
- Exercises: fizzbuzz and temperature categorization
"""

__version__ = "0.1.0"
__author__ = "pylinefit Team"
