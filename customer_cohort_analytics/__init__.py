"""Customer segmentation, cohort and retention analytics over sales snapshots."""

from .config import AnalysisConfig
from .pipeline import AnalyticsReport, run_customer_analytics

__all__ = ["AnalysisConfig", "AnalyticsReport", "run_customer_analytics"]

__version__ = "0.1.0"
