"""Export analysis results to JSON and CSV files.

The three result tables (customer segments, cohort revenue and cohort
retention) are written as-is; nothing here recomputes them.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from customer_cohort_analytics.pandas.results import report_to_dataframes
from customer_cohort_analytics.pipeline import AnalyticsReport

logger = logging.getLogger(__name__)


def export_report_json(
    report: AnalyticsReport,
    output_path: str | Path,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Export the result tables of ``report`` to a JSON document.

    Monetary values and percentages are written as strings so the Decimal
    values survive unchanged.

    Parameters
    ----------
    report:
        Output of :func:`~customer_cohort_analytics.pipeline.run_customer_analytics`
    output_path:
        Path where JSON file will be saved
    metadata:
        Optional metadata to include in the document (e.g., data source)

    Examples
    --------
    >>> report = run_customer_analytics(sales, customers)
    >>> export_report_json(report, "results/analytics.json", metadata={"source": "contoso"})
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": metadata or {},
        "generated_at": datetime.now().isoformat(),
        **report.as_dict(),
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(f"Analytics report exported to {output_path}")


def export_report_csv(report: AnalyticsReport, output_dir: str | Path) -> dict[str, Path]:
    """Export each result table of ``report`` to its own CSV file.

    Parameters
    ----------
    report:
        Output of :func:`~customer_cohort_analytics.pipeline.run_customer_analytics`
    output_dir:
        Directory receiving ``customer_segments.csv``, ``cohort_revenue.csv``
        and ``cohort_retention.csv``

    Returns
    -------
    dict[str, Path]
        Mapping of table name to the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: dict[str, Path] = {}
    for name, df in report_to_dataframes(report).items():
        path = output_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        written[name] = path
        logger.info(f"Exported {len(df)} rows of {name} to {path}")
    return written
