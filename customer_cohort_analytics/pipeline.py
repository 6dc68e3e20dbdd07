"""End-to-end run of the cohort analytics stages over one snapshot."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from customer_cohort_analytics.analyses.cohort_revenue import (
    CohortRevenue,
    analyze_cohort_revenue,
)
from customer_cohort_analytics.analyses.retention import (
    CohortRetention,
    analyze_cohort_retention,
)
from customer_cohort_analytics.analyses.segmentation import (
    SegmentationResult,
    analyze_customer_segments,
)
from customer_cohort_analytics.config import DEFAULT_CONFIG, AnalysisConfig
from customer_cohort_analytics.foundation.cohort_view import CohortView, CohortViewBuilder
from customer_cohort_analytics.foundation.records import CustomerRecord, SaleRecord

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsReport:
    """Results of all stages for one snapshot."""

    view: CohortView
    segmentation: SegmentationResult
    cohort_revenue: list[CohortRevenue]
    cohort_retention: list[CohortRetention]
    reference_date: date | None = None

    def as_dict(self) -> dict[str, object]:
        """Return JSON-serialisable representation of the three result tables."""

        thresholds = self.segmentation.thresholds
        return {
            "reference_date": (
                self.reference_date.isoformat() if self.reference_date else None
            ),
            "segment_thresholds": (
                {"low": str(thresholds.low), "high": str(thresholds.high)}
                if thresholds is not None
                else None
            ),
            "customer_segments": [
                {
                    "customer_segment": summary.customer_segment.value,
                    "total_ltv": str(summary.total_ltv),
                    "customer_count": summary.customer_count,
                    "avg_ltv": str(summary.avg_ltv),
                }
                for summary in self.segmentation.summaries
            ],
            "cohort_revenue": [
                {
                    "cohort_year": row.cohort_year,
                    "total_customers": row.total_customers,
                    "total_revenue": str(row.total_revenue),
                    "customer_revenue": str(row.customer_revenue),
                }
                for row in self.cohort_revenue
            ],
            "cohort_retention": [
                {
                    "cohort_year": row.cohort_year,
                    "customer_status": row.customer_status.value,
                    "num_customers": row.num_customers,
                    "total_customers": row.total_customers,
                    "status_percentage": str(row.status_percentage),
                }
                for row in self.cohort_retention
            ],
        }


def run_customer_analytics(
    sales: Iterable[SaleRecord],
    customers: Iterable[CustomerRecord] = (),
    config: AnalysisConfig | None = None,
    reference_date: date | None = None,
) -> AnalyticsReport:
    """Build the cohort view once and run every analysis against it.

    Parameters
    ----------
    sales:
        Validated sales lines.
    customers:
        Validated customer records. Sales of unknown customers are kept.
    config:
        Analysis configuration; defaults to :data:`DEFAULT_CONFIG`.
    reference_date:
        Date the churn window is measured from. Defaults to the latest order
        date of the snapshot.
    """
    config = config or DEFAULT_CONFIG

    start = time.perf_counter()
    view = CohortViewBuilder().build(sales, customers)
    logger.info("Cohort view built in %.3fs", time.perf_counter() - start)

    if reference_date is None:
        reference_date = view.global_max_order_date

    start = time.perf_counter()
    segmentation = analyze_customer_segments(view, config)
    logger.info(
        "Segmentation produced %d segments in %.3fs",
        len(segmentation.summaries),
        time.perf_counter() - start,
    )

    start = time.perf_counter()
    cohort_revenue = analyze_cohort_revenue(view, config)
    logger.info(
        "Cohort revenue produced %d cohorts in %.3fs",
        len(cohort_revenue),
        time.perf_counter() - start,
    )

    start = time.perf_counter()
    cohort_retention = analyze_cohort_retention(view, config, reference_date)
    logger.info(
        "Cohort retention produced %d rows in %.3fs",
        len(cohort_retention),
        time.perf_counter() - start,
    )

    return AnalyticsReport(
        view=view,
        segmentation=segmentation,
        cohort_revenue=cohort_revenue,
        cohort_retention=cohort_retention,
        reference_date=reference_date,
    )
