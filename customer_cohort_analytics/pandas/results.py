"""Pandas DataFrame adapters for analysis results."""

from datetime import date
from typing import Optional, Sequence

import pandas as pd  # type: ignore

from customer_cohort_analytics.analyses.cohort_revenue import CohortRevenue
from customer_cohort_analytics.analyses.retention import CohortRetention
from customer_cohort_analytics.analyses.segmentation import SegmentSummary
from customer_cohort_analytics.config import AnalysisConfig
from customer_cohort_analytics.pipeline import AnalyticsReport, run_customer_analytics
from ._utils import decimal_to_float, empty_frame
from .records import dataframe_to_customers, dataframe_to_sales

SEGMENT_COLUMNS = ["customer_segment", "total_ltv", "customer_count", "avg_ltv"]
COHORT_REVENUE_COLUMNS = [
    "cohort_year",
    "total_customers",
    "total_revenue",
    "customer_revenue",
]
COHORT_RETENTION_COLUMNS = [
    "cohort_year",
    "customer_status",
    "num_customers",
    "total_customers",
    "status_percentage",
]


def segment_summaries_to_dataframe(summaries: Sequence[SegmentSummary]) -> pd.DataFrame:
    """Convert segment summaries to a DataFrame, keeping their order (High first)."""
    if not summaries:
        return empty_frame(SEGMENT_COLUMNS)

    rows = [
        {
            "customer_segment": s.customer_segment.value,
            "total_ltv": decimal_to_float(s.total_ltv),
            "customer_count": s.customer_count,
            "avg_ltv": decimal_to_float(s.avg_ltv),
        }
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=SEGMENT_COLUMNS)


def cohort_revenue_to_dataframe(rows: Sequence[CohortRevenue]) -> pd.DataFrame:
    """Convert cohort revenue rows to a DataFrame ordered by cohort_year."""
    if not rows:
        return empty_frame(COHORT_REVENUE_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "cohort_year": r.cohort_year,
                "total_customers": r.total_customers,
                "total_revenue": decimal_to_float(r.total_revenue),
                "customer_revenue": decimal_to_float(r.customer_revenue),
            }
            for r in rows
        ],
        columns=COHORT_REVENUE_COLUMNS,
    )
    return df.sort_values("cohort_year").reset_index(drop=True)


def cohort_retention_to_dataframe(rows: Sequence[CohortRetention]) -> pd.DataFrame:
    """Convert cohort retention rows to a DataFrame."""
    if not rows:
        return empty_frame(COHORT_RETENTION_COLUMNS)

    return pd.DataFrame(
        [
            {
                "cohort_year": r.cohort_year,
                "customer_status": r.customer_status.value,
                "num_customers": r.num_customers,
                "total_customers": r.total_customers,
                "status_percentage": decimal_to_float(r.status_percentage),
            }
            for r in rows
        ],
        columns=COHORT_RETENTION_COLUMNS,
    )


def report_to_dataframes(report: AnalyticsReport) -> dict[str, pd.DataFrame]:
    """Return the three result tables keyed by table name."""
    return {
        "customer_segments": segment_summaries_to_dataframe(report.segmentation.summaries),
        "cohort_revenue": cohort_revenue_to_dataframe(report.cohort_revenue),
        "cohort_retention": cohort_retention_to_dataframe(report.cohort_retention),
    }


def run_customer_analytics_df(
    sales_df: pd.DataFrame,
    customers_df: Optional[pd.DataFrame] = None,
    config: Optional[AnalysisConfig] = None,
    reference_date: Optional[date] = None,
) -> dict[str, pd.DataFrame]:
    """Run every analysis over raw DataFrames.

    Convenience function that combines conversion, the pipeline and result
    conversion.

    Example:
        >>> tables = run_customer_analytics_df(sales_df, customers_df)
        >>> tables['customer_segments']
    """
    sales = dataframe_to_sales(sales_df)
    customers = dataframe_to_customers(customers_df) if customers_df is not None else []
    report = run_customer_analytics(sales, customers, config, reference_date)
    return report_to_dataframes(report)
