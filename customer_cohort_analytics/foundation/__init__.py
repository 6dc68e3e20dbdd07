"""Foundational building blocks for the cohort analytics stages.

This package exposes the raw record definitions, their validation and the
cohort view builder every downstream analysis reads from.
"""

from .cohort_view import CohortRecord, CohortView, CohortViewBuilder, build_cohort_view
from .records import CustomerRecord, RecordValidator, SaleRecord

__all__ = [
    "CohortRecord",
    "CohortView",
    "CohortViewBuilder",
    "CustomerRecord",
    "RecordValidator",
    "SaleRecord",
    "build_cohort_view",
]
