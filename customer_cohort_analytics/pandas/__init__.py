"""Pandas DataFrame adapters for cohort analytics components."""

from .records import (
    build_cohort_view_df,
    cohort_view_to_dataframe,
    dataframe_to_customers,
    dataframe_to_sales,
)
from .results import (
    cohort_retention_to_dataframe,
    cohort_revenue_to_dataframe,
    report_to_dataframes,
    run_customer_analytics_df,
    segment_summaries_to_dataframe,
)

__all__ = [
    # Record adapters
    "dataframe_to_sales",
    "dataframe_to_customers",
    "cohort_view_to_dataframe",
    "build_cohort_view_df",
    # Result adapters
    "segment_summaries_to_dataframe",
    "cohort_revenue_to_dataframe",
    "cohort_retention_to_dataframe",
    "report_to_dataframes",
    "run_customer_analytics_df",
]
