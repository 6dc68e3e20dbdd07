"""Acquisition cohort revenue.

Reports, per acquisition year, how many customers were acquired and how much
they spent on their first purchase day. Only rows whose order date equals the
customer's first purchase date contribute.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from customer_cohort_analytics.config import DEFAULT_CONFIG, AnalysisConfig
from customer_cohort_analytics.foundation.cohort_view import CohortRecord


@dataclass(frozen=True)
class CohortRevenue:
    """First-purchase revenue of one acquisition cohort.

    Attributes
    ----------
    cohort_year:
        Year of first purchase
    total_customers:
        Distinct customers acquired in the year
    total_revenue:
        Revenue booked on the customers' first purchase day
    customer_revenue:
        ``total_revenue / total_customers`` at full precision unless
        ``AnalysisConfig.currency_precision`` is set
    """

    cohort_year: int
    total_customers: int
    total_revenue: Decimal
    customer_revenue: Decimal

    def __post_init__(self) -> None:
        if self.total_customers <= 0:
            raise ValueError(
                f"total_customers must be positive: {self.total_customers} "
                f"(cohort_year={self.cohort_year})"
            )


def first_purchase_records(records: Iterable[CohortRecord]) -> list[CohortRecord]:
    """Return the acquisition-day rows of every customer."""
    return [record for record in records if record.order_date == record.first_purchase_date]


def analyze_cohort_revenue(
    records: Iterable[CohortRecord],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> list[CohortRevenue]:
    """Aggregate first-purchase revenue by cohort year.

    Returns
    -------
    list[CohortRevenue]
        One entry per cohort year, ascending. Empty for empty input.
    """
    customers: dict[int, set[str]] = {}
    revenue: dict[int, Decimal] = {}
    for record in first_purchase_records(records):
        customers.setdefault(record.cohort_year, set()).add(record.customer_key)
        revenue[record.cohort_year] = (
            revenue.get(record.cohort_year, Decimal("0")) + record.total_net_revenue
        )

    results: list[CohortRevenue] = []
    for cohort_year in sorted(customers):
        total_customers = len(customers[cohort_year])
        total_revenue = revenue[cohort_year]
        results.append(
            CohortRevenue(
                cohort_year=cohort_year,
                total_customers=total_customers,
                total_revenue=total_revenue,
                customer_revenue=config.round_currency(total_revenue / total_customers),
            )
        )
    return results
