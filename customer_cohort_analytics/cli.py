"""Command line entry points for the cohort analytics toolkit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

import pandas as pd

from customer_cohort_analytics.config import AnalysisConfig
from customer_cohort_analytics.exports import export_report_csv, export_report_json
from customer_cohort_analytics.pandas import dataframe_to_customers, dataframe_to_sales
from customer_cohort_analytics.pipeline import run_customer_analytics

logger = logging.getLogger(__name__)


MAX_INPUT_BYTES = 512 * 1024 * 1024  # 512 MiB cap to avoid accidental OOM


def _load_csv(path: Path) -> pd.DataFrame:
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_INPUT_BYTES:
        raise ValueError(
            f"Input file {resolved} is {size} bytes; exceeds limit of {MAX_INPUT_BYTES} bytes"
        )
    return pd.read_csv(resolved)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date '{value}' (expected YYYY-MM-DD)"
        ) from None


def _non_negative_int(value: str) -> int:
    try:
        months = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer '{value}'") from None
    if months < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {months}")
    return months


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Customer segmentation, cohort revenue and retention analysis"
    )
    parser.add_argument("sales", type=Path, help="Path to CSV file with sales lines")
    parser.add_argument(
        "customers", type=Path, help="Path to CSV file with customer records"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for the result CSV files (customer_segments.csv, "
        "cohort_revenue.csv, cohort_retention.csv).",
    )
    parser.add_argument(
        "--json",
        dest="json_path",
        type=Path,
        help="Optional path for writing all result tables as JSON.",
    )
    parser.add_argument(
        "--churn-months",
        type=_non_negative_int,
        default=6,
        help="Months of inactivity before a customer counts as churned (default: 6)",
    )
    parser.add_argument(
        "--reference-date",
        type=_iso_date,
        help="Date the churn window is measured from (ISO format: YYYY-MM-DD). "
        "Defaults to the latest order date.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def run_analytics_cli(argv: list[str] | None = None) -> int:
    """Run all analyses over CSV exports of the sales and customer tables.

    Results go to ``--output-dir`` as CSV and/or ``--json``; with neither
    option the JSON document is printed to stdout.

    Returns
    -------
    int
        Exit code (0 for success, including a sales file with no rows).
        Invalid options exit with status 2 through argparse.
    """
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AnalysisConfig(churn_window_months=args.churn_months)

    logger.info(f"Loading sales from {args.sales}")
    sales = dataframe_to_sales(_load_csv(args.sales))
    if not sales:
        logger.warning("No sales found in input file; result tables will be empty")

    logger.info(f"Loading customers from {args.customers}")
    customers = dataframe_to_customers(_load_csv(args.customers))

    logger.info(f"Running analytics over {len(sales)} sales lines and {len(customers)} customers")
    report = run_customer_analytics(sales, customers, config, args.reference_date)

    if args.output_dir:
        export_report_csv(report, args.output_dir)
    if args.json_path:
        export_report_json(
            report,
            args.json_path,
            metadata={
                "sales_file": str(args.sales),
                "customers_file": str(args.customers),
                "churn_window_months": config.churn_window_months,
            },
        )
    if not args.output_dir and not args.json_path:
        # stdout fallback enables piping in shell usage.
        json.dump(report.as_dict(), fp=sys.stdout, indent=2)
        print()

    return 0


def main() -> None:
    raise SystemExit(run_analytics_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
