"""Customer value segmentation.

Customers are ranked by lifetime value (total net revenue across their whole
history) and split into three tiers using the 25th and 75th continuous
percentiles of the LTV distribution:

- below the 25th percentile: Low-Value
- from the 25th up to and including the 75th percentile: Mid-Value
- above the 75th percentile: High-Value

Quick Start
-----------
>>> from customer_cohort_analytics.foundation import build_cohort_view
>>> from customer_cohort_analytics.analyses.segmentation import analyze_customer_segments
>>> view = build_cohort_view(sales, customers)  # doctest: +SKIP
>>> result = analyze_customer_segments(view)  # doctest: +SKIP
>>> [s.customer_segment.value for s in result.summaries]  # doctest: +SKIP
['3 - High-Value', '2 - Mid-Value', '1 - Low-Value']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from customer_cohort_analytics.config import DEFAULT_CONFIG, AnalysisConfig
from customer_cohort_analytics.foundation.cohort_view import CohortRecord

logger = logging.getLogger(__name__)


class ValueSegment(str, Enum):
    """Value tiers. Labels sort High > Mid > Low when compared as text."""

    LOW = "1 - Low-Value"
    MID = "2 - Mid-Value"
    HIGH = "3 - High-Value"


@dataclass(frozen=True)
class CustomerLTV:
    """Lifetime value of a single customer."""

    customer_key: str
    cleaned_name: str | None
    total_ltv: Decimal


@dataclass(frozen=True)
class SegmentThresholds:
    """LTV percentile boundaries computed once per run."""

    low: Decimal
    high: Decimal

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(
                f"Low threshold ({self.low}) cannot exceed high threshold ({self.high})"
            )


@dataclass(frozen=True)
class SegmentSummary:
    """Aggregated LTV of one value segment.

    Attributes
    ----------
    customer_segment:
        Segment label
    total_ltv:
        Sum of the lifetime values of the segment's customers
    customer_count:
        Number of customers in the segment
    avg_ltv:
        ``total_ltv / customer_count`` at full precision unless
        ``AnalysisConfig.currency_precision`` is set
    """

    customer_segment: ValueSegment
    total_ltv: Decimal
    customer_count: int
    avg_ltv: Decimal

    def __post_init__(self) -> None:
        if self.customer_count <= 0:
            raise ValueError(
                f"customer_count must be positive: {self.customer_count} "
                f"(segment={self.customer_segment.value})"
            )


@dataclass(frozen=True)
class SegmentationResult:
    """Output of :func:`analyze_customer_segments`."""

    thresholds: SegmentThresholds | None
    assignments: dict[str, ValueSegment] = field(default_factory=dict)
    summaries: list[SegmentSummary] = field(default_factory=list)


def calculate_customer_ltv(records: Iterable[CohortRecord]) -> list[CustomerLTV]:
    """Sum revenue per customer. Output is sorted by customer key."""

    totals: dict[str, Decimal] = {}
    names: dict[str, str | None] = {}
    for record in records:
        totals[record.customer_key] = (
            totals.get(record.customer_key, Decimal("0")) + record.total_net_revenue
        )
        names.setdefault(record.customer_key, record.cleaned_name)

    return [
        CustomerLTV(customer_key=key, cleaned_name=names[key], total_ltv=totals[key])
        for key in sorted(totals)
    ]


def continuous_percentile(values: Sequence[Decimal], fraction: Decimal | float) -> Decimal:
    """Return the continuous (linearly interpolated) percentile of ``values``.

    Equivalent to SQL ``PERCENTILE_CONT``: the values are sorted and the
    result is interpolated between the two ranks surrounding
    ``fraction * (n - 1)``.

    Parameters
    ----------
    values:
        Population to take the percentile of. Must not be empty.
    fraction:
        Percentile expressed as a fraction in [0, 1].

    Raises
    ------
    ValueError
        If ``values`` is empty or ``fraction`` lies outside [0, 1].

    Examples
    --------
    >>> from decimal import Decimal
    >>> continuous_percentile([Decimal("10"), Decimal("20"), Decimal("30"), Decimal("40")], 0.25)
    Decimal('17.50')
    >>> continuous_percentile([Decimal("42")], 0.75)
    Decimal('42')
    """
    fraction = Decimal(str(fraction))
    if not Decimal("0") <= fraction <= Decimal("1"):
        raise ValueError(f"Percentile fraction must be between 0 and 1: {fraction}")
    if not values:
        raise ValueError("Cannot compute a percentile of an empty population")

    ordered = sorted(Decimal(value) for value in values)
    if len(ordered) == 1:
        return ordered[0]

    position = fraction * (len(ordered) - 1)
    lower = int(position)
    upper = min(lower + 1, len(ordered) - 1)
    weight = position - lower
    if weight == 0:
        return ordered[lower]
    return ordered[lower] + (ordered[upper] - ordered[lower]) * weight


def calculate_segment_thresholds(
    ltvs: Sequence[CustomerLTV],
    low_percentile: Decimal | float = Decimal("0.25"),
    high_percentile: Decimal | float = Decimal("0.75"),
) -> SegmentThresholds | None:
    """Compute the Low/Mid and Mid/High boundaries. ``None`` for no customers."""

    if not ltvs:
        return None
    values = [ltv.total_ltv for ltv in ltvs]
    return SegmentThresholds(
        low=continuous_percentile(values, low_percentile),
        high=continuous_percentile(values, high_percentile),
    )


def classify_ltv(value: Decimal, thresholds: SegmentThresholds) -> ValueSegment:
    """Map a lifetime value onto a segment.

    The upper boundary is inclusive: a value equal to the high threshold is
    Mid-Value.
    """
    if value < thresholds.low:
        return ValueSegment.LOW
    if value <= thresholds.high:
        return ValueSegment.MID
    return ValueSegment.HIGH


def analyze_customer_segments(
    records: Iterable[CohortRecord],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> SegmentationResult:
    """Segment customers by lifetime value and summarise each segment.

    Parameters
    ----------
    records:
        Cohort records (a :class:`~customer_cohort_analytics.foundation.CohortView`
        works as well).
    config:
        Percentile and rounding configuration.

    Returns
    -------
    SegmentationResult
        Thresholds, per-customer assignments and per-segment summaries ordered
        by segment label descending. An empty population returns no
        summaries and ``thresholds=None``.
    """
    ltvs = calculate_customer_ltv(records)
    thresholds = calculate_segment_thresholds(
        ltvs, config.low_percentile, config.high_percentile
    )
    if thresholds is None:
        return SegmentationResult(thresholds=None)

    assignments: dict[str, ValueSegment] = {}
    totals: dict[ValueSegment, Decimal] = {}
    counts: dict[ValueSegment, int] = {}
    for ltv in ltvs:
        segment = classify_ltv(ltv.total_ltv, thresholds)
        assignments[ltv.customer_key] = segment
        totals[segment] = totals.get(segment, Decimal("0")) + ltv.total_ltv
        counts[segment] = counts.get(segment, 0) + 1

    summaries = [
        SegmentSummary(
            customer_segment=segment,
            total_ltv=totals[segment],
            customer_count=counts[segment],
            avg_ltv=config.round_currency(totals[segment] / counts[segment]),
        )
        for segment in sorted(counts, key=lambda s: s.value, reverse=True)
    ]

    logger.info(
        "Segmented %d customers (p25=%s, p75=%s)",
        len(ltvs),
        thresholds.low,
        thresholds.high,
    )
    return SegmentationResult(
        thresholds=thresholds, assignments=assignments, summaries=summaries
    )
