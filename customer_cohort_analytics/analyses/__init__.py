"""Customer analytics stages built on top of the cohort view.

The three analyses read the cohort view independently:

1. Customer segmentation - Low/Mid/High value tiers by lifetime value
2. Cohort revenue - first-purchase revenue per acquisition year
3. Cohort retention - Active/Churned shares per acquisition year
"""

from .cohort_revenue import CohortRevenue, analyze_cohort_revenue, first_purchase_records
from .retention import (
    CohortRetention,
    CustomerRetention,
    RetentionStatus,
    analyze_cohort_retention,
    churn_cutoff,
    classify_customers,
    latest_orders,
)
from .segmentation import (
    CustomerLTV,
    SegmentationResult,
    SegmentSummary,
    SegmentThresholds,
    ValueSegment,
    analyze_customer_segments,
    calculate_customer_ltv,
    calculate_segment_thresholds,
    classify_ltv,
    continuous_percentile,
)

__all__ = [
    # Segmentation
    "CustomerLTV",
    "SegmentationResult",
    "SegmentSummary",
    "SegmentThresholds",
    "ValueSegment",
    "analyze_customer_segments",
    "calculate_customer_ltv",
    "calculate_segment_thresholds",
    "classify_ltv",
    "continuous_percentile",
    # Cohort revenue
    "CohortRevenue",
    "analyze_cohort_revenue",
    "first_purchase_records",
    # Retention
    "CohortRetention",
    "CustomerRetention",
    "RetentionStatus",
    "analyze_cohort_retention",
    "churn_cutoff",
    "classify_customers",
    "latest_orders",
]
