"""Runtime configuration for the cohort analytics stages."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration shared by the segmentation and retention analyses.

    Attributes
    ----------
    churn_window_months:
        Months of inactivity (measured back from the reference date) after
        which a customer is considered churned. Customers acquired inside
        this window are not classified at all.
    low_percentile:
        Fraction used for the Low/Mid value boundary (default 25th percentile).
    high_percentile:
        Fraction used for the Mid/High value boundary (default 75th percentile).
    percentage_precision:
        Quantization step for status percentages (0.01 = two decimals).
    currency_precision:
        Optional quantization step for per-customer averages. ``None`` keeps
        the full ``total / count`` precision.
    """

    churn_window_months: int = 6
    low_percentile: Decimal = Decimal("0.25")
    high_percentile: Decimal = Decimal("0.75")
    percentage_precision: Decimal = Decimal("0.01")
    currency_precision: Decimal | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.churn_window_months < 0:
            raise ValueError(
                f"churn_window_months cannot be negative: {self.churn_window_months}"
            )
        for name in (
            "low_percentile",
            "high_percentile",
            "percentage_precision",
            "currency_precision",
        ):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Decimal):
                # frozen dataclass: bypass __setattr__ to normalise floats
                object.__setattr__(self, name, Decimal(str(value)))

        for name in ("low_percentile", "high_percentile"):
            value = getattr(self, name)
            if not Decimal("0") <= value <= Decimal("1"):
                raise ValueError(f"{name} must be between 0 and 1: {value}")
        if self.low_percentile > self.high_percentile:
            raise ValueError(
                f"low_percentile ({self.low_percentile}) cannot exceed "
                f"high_percentile ({self.high_percentile})"
            )
        for name in ("percentage_precision", "currency_precision"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive: {value}")

    def round_currency(self, value: Decimal) -> Decimal:
        """Apply ``currency_precision`` (half-up) when one is configured."""
        if self.currency_precision is None:
            return value
        return value.quantize(self.currency_precision, rounding=ROUND_HALF_UP)


DEFAULT_CONFIG = AnalysisConfig()
