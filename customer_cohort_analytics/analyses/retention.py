"""Cohort retention and churn classification.

Each customer is classified once, from their most recent order, against a
cutoff of ``reference_date - churn_window_months`` where the reference date
defaults to the latest order date in the snapshot:

- customers first seen on or after the cutoff are too new to judge and are
  excluded;
- customers whose last order is before the cutoff are ``Churned``;
- everyone else is ``Active``.

Quick Start
-----------
>>> from customer_cohort_analytics.analyses.retention import analyze_cohort_retention
>>> rows = analyze_cohort_retention(view)  # doctest: +SKIP
>>> [(r.cohort_year, r.customer_status.value, r.status_percentage) for r in rows]  # doctest: +SKIP
[(2020, 'Active', Decimal('0.10')), (2020, 'Churned', Decimal('0.90'))]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable

import pandas as pd

from customer_cohort_analytics.config import DEFAULT_CONFIG, AnalysisConfig
from customer_cohort_analytics.foundation.cohort_view import CohortRecord

logger = logging.getLogger(__name__)


class RetentionStatus(str, Enum):
    ACTIVE = "Active"
    CHURNED = "Churned"


@dataclass(frozen=True)
class CustomerRetention:
    """Retention status of a single customer.

    Attributes
    ----------
    customer_key:
        Customer identifier
    cleaned_name:
        Customer display name, if known
    cohort_year:
        Year of first purchase
    first_purchase_date:
        Earliest order date of the customer
    last_purchase_date:
        Most recent order date of the customer
    customer_status:
        Active or Churned relative to the cutoff
    """

    customer_key: str
    cleaned_name: str | None
    cohort_year: int
    first_purchase_date: date
    last_purchase_date: date
    customer_status: RetentionStatus


@dataclass(frozen=True)
class CohortRetention:
    """Customer count of one status within one cohort.

    Attributes
    ----------
    cohort_year:
        Year of first purchase
    customer_status:
        Active or Churned
    num_customers:
        Customers of the cohort with this status
    total_customers:
        Eligible customers of the cohort across both statuses
    status_percentage:
        ``num_customers / total_customers`` as a fraction rounded half-up to
        two decimals (0.085 becomes 0.09)
    """

    cohort_year: int
    customer_status: RetentionStatus
    num_customers: int
    total_customers: int
    status_percentage: Decimal

    def __post_init__(self) -> None:
        if self.num_customers <= 0:
            raise ValueError(
                f"num_customers must be positive: {self.num_customers} "
                f"(cohort_year={self.cohort_year})"
            )
        if self.num_customers > self.total_customers:
            raise ValueError(
                f"num_customers ({self.num_customers}) cannot exceed "
                f"total_customers ({self.total_customers}) (cohort_year={self.cohort_year})"
            )
        if not 0 <= self.status_percentage <= 1:
            raise ValueError(
                f"status_percentage must be between 0 and 1: {self.status_percentage}"
            )


def churn_cutoff(reference_date: date, months: int = 6) -> date:
    """Return ``reference_date`` minus ``months`` calendar months.

    The day is clamped to the end of the target month, so 2024-08-31 minus
    six months is 2024-02-29.
    """
    return (pd.Timestamp(reference_date) - pd.DateOffset(months=months)).date()


def latest_orders(records: Iterable[CohortRecord]) -> dict[str, CohortRecord]:
    """Return the most recent row of every customer.

    Rows sharing the latest date are resolved in favour of the first one
    encountered, which makes the choice stable for a sorted cohort view.
    """
    latest: dict[str, CohortRecord] = {}
    for record in records:
        current = latest.get(record.customer_key)
        if current is None or record.order_date > current.order_date:
            latest[record.customer_key] = record
    return latest


def classify_customers(
    records: Iterable[CohortRecord],
    config: AnalysisConfig = DEFAULT_CONFIG,
    reference_date: date | None = None,
) -> list[CustomerRetention]:
    """Classify every eligible customer as Active or Churned.

    Parameters
    ----------
    records:
        Cohort records (or a cohort view).
    config:
        Provides ``churn_window_months``.
    reference_date:
        Date the inactivity window is measured from. Defaults to the latest
        order date found in ``records``.

    Returns
    -------
    list[CustomerRetention]
        Sorted by customer key. Customers acquired on or after the cutoff
        are omitted.
    """
    records = list(records)
    if not records:
        return []

    if reference_date is None:
        reference_date = max(record.order_date for record in records)
    cutoff = churn_cutoff(reference_date, config.churn_window_months)

    classified: list[CustomerRetention] = []
    excluded = 0
    for customer_key, last in sorted(latest_orders(records).items()):
        if not last.first_purchase_date < cutoff:
            excluded += 1
            continue
        status = (
            RetentionStatus.CHURNED if last.order_date < cutoff else RetentionStatus.ACTIVE
        )
        classified.append(
            CustomerRetention(
                customer_key=customer_key,
                cleaned_name=last.cleaned_name,
                cohort_year=last.cohort_year,
                first_purchase_date=last.first_purchase_date,
                last_purchase_date=last.order_date,
                customer_status=status,
            )
        )

    logger.info(
        "Classified %d customers against cutoff %s (%d too recent to classify)",
        len(classified),
        cutoff.isoformat(),
        excluded,
    )
    return classified


def analyze_cohort_retention(
    records: Iterable[CohortRecord],
    config: AnalysisConfig = DEFAULT_CONFIG,
    reference_date: date | None = None,
) -> list[CohortRetention]:
    """Aggregate retention status counts and shares per cohort year.

    Returns
    -------
    list[CohortRetention]
        One row per (cohort_year, status) present, ordered by cohort year and
        then status label. Empty for empty input.
    """
    counts: dict[tuple[int, RetentionStatus], int] = {}
    totals: dict[int, int] = {}
    for customer in classify_customers(records, config, reference_date):
        key = (customer.cohort_year, customer.customer_status)
        counts[key] = counts.get(key, 0) + 1
        totals[customer.cohort_year] = totals.get(customer.cohort_year, 0) + 1

    results: list[CohortRetention] = []
    for cohort_year, status in sorted(counts, key=lambda k: (k[0], k[1].value)):
        num_customers = counts[(cohort_year, status)]
        total_customers = totals[cohort_year]
        results.append(
            CohortRetention(
                cohort_year=cohort_year,
                customer_status=status,
                num_customers=num_customers,
                total_customers=total_customers,
                status_percentage=(
                    Decimal(num_customers) / Decimal(total_customers)
                ).quantize(config.percentage_precision, rounding=ROUND_HALF_UP),
            )
        )
    return results
