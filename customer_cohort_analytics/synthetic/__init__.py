"""Synthetic data generation utilities.

This package produces realistic-but-fake sales and customer tables to
exercise the cohort analytics pipeline without accessing production data.
"""

from .generator import (
    ScenarioConfig,
    generate_customers,
    generate_sales,
)

__all__ = [
    "ScenarioConfig",
    "generate_customers",
    "generate_sales",
]
