"""Integration tests for the analytics CLI.

Tests the complete workflow from CSV exports of the sales and customer
tables through the CLI to the result files.
"""

import json

import pandas as pd
import pytest

from customer_cohort_analytics.cli import run_analytics_cli


@pytest.fixture
def sales_csv(tmp_path):
    """Create a sales CSV with the usual warehouse column names."""
    path = tmp_path / "sales.csv"
    pd.DataFrame(
        [
            # Customer 1: acquired 2020, last seen mid 2020
            {"orderkey": 1, "customerkey": 1, "orderdate": "2020-01-01",
             "quantity": 1, "netprice": 100.0, "exchangerate": 1.0},
            {"orderkey": 2, "customerkey": 1, "orderdate": "2020-06-01",
             "quantity": 1, "netprice": 50.0, "exchangerate": 1.0},
            # Customer 2: acquired on the snapshot's last day
            {"orderkey": 3, "customerkey": 2, "orderdate": "2024-01-01",
             "quantity": 1, "netprice": 10.0, "exchangerate": 1.0},
            # Customer 3: acquired 2022, still buying late 2023
            {"orderkey": 4, "customerkey": 3, "orderdate": "2022-03-15",
             "quantity": 2, "netprice": 40.0, "exchangerate": 1.0},
            {"orderkey": 5, "customerkey": 3, "orderdate": "2023-11-20",
             "quantity": 1, "netprice": 60.0, "exchangerate": 1.0},
        ]
    ).to_csv(path, index=False)
    return path


@pytest.fixture
def customers_csv(tmp_path):
    path = tmp_path / "customer.csv"
    pd.DataFrame(
        [
            {"customerkey": 1, "givenname": "Ana", "surname": "Costa",
             "countryfull": "United States", "age": 34},
            {"customerkey": 3, "givenname": "Hugo", "surname": "Evans",
             "countryfull": "Germany", "age": 51},
        ]
    ).to_csv(path, index=False)
    return path


class TestRunAnalyticsCLI:
    """Test run_analytics_cli outputs."""

    def test_csv_outputs_are_written(self, tmp_path, sales_csv, customers_csv):
        """Each result table is written to its own CSV file."""
        output_dir = tmp_path / "results"

        exit_code = run_analytics_cli(
            [str(sales_csv), str(customers_csv), "--output-dir", str(output_dir)]
        )

        assert exit_code == 0
        for name in ("customer_segments", "cohort_revenue", "cohort_retention"):
            assert (output_dir / f"{name}.csv").exists()

        revenue = pd.read_csv(output_dir / "cohort_revenue.csv")
        assert list(revenue["cohort_year"]) == [2020, 2022, 2024]
        assert list(revenue["total_revenue"]) == [100.0, 80.0, 10.0]

        segments = pd.read_csv(output_dir / "customer_segments.csv")
        assert segments["customer_count"].sum() == 3

    def test_json_is_printed_without_outputs(self, sales_csv, customers_csv, capsys):
        """Without --output-dir or --json the report goes to stdout."""
        exit_code = run_analytics_cli([str(sales_csv), str(customers_csv)])

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["reference_date"] == "2024-01-01"
        assert payload["cohort_retention"] == [
            {
                "cohort_year": 2020,
                "customer_status": "Churned",
                "num_customers": 1,
                "total_customers": 1,
                "status_percentage": "1.00",
            },
            {
                "cohort_year": 2022,
                "customer_status": "Active",
                "num_customers": 1,
                "total_customers": 1,
                "status_percentage": "1.00",
            },
        ]

    def test_json_file_output(self, tmp_path, sales_csv, customers_csv):
        """--json writes the report with run metadata."""
        json_path = tmp_path / "report.json"

        exit_code = run_analytics_cli(
            [str(sales_csv), str(customers_csv), "--json", str(json_path)]
        )

        assert exit_code == 0
        payload = json.loads(json_path.read_text(encoding="utf-8"))
        assert payload["metadata"]["churn_window_months"] == 6
        assert [row["customer_segment"] for row in payload["customer_segments"]] == [
            "3 - High-Value",
            "2 - Mid-Value",
            "1 - Low-Value",
        ]

    def test_empty_sales_file_writes_header_only_tables(self, tmp_path, customers_csv):
        """A sales file with no rows succeeds with empty result tables."""
        sales_path = tmp_path / "empty.csv"
        sales_path.write_text(
            "orderkey,customerkey,orderdate,quantity,netprice,exchangerate\n",
            encoding="utf-8",
        )
        output_dir = tmp_path / "out"

        exit_code = run_analytics_cli(
            [str(sales_path), str(customers_csv), "--output-dir", str(output_dir)]
        )

        assert exit_code == 0
        expected_columns = {
            "customer_segments": ["customer_segment", "total_ltv", "customer_count", "avg_ltv"],
            "cohort_revenue": [
                "cohort_year",
                "total_customers",
                "total_revenue",
                "customer_revenue",
            ],
            "cohort_retention": [
                "cohort_year",
                "customer_status",
                "num_customers",
                "total_customers",
                "status_percentage",
            ],
        }
        for name, columns in expected_columns.items():
            table = pd.read_csv(output_dir / f"{name}.csv")
            assert table.empty
            assert list(table.columns) == columns


class TestRunAnalyticsCLIOptions:
    """Test run_analytics_cli option handling."""

    def test_reference_date_and_churn_window(self, sales_csv, customers_csv, capsys):
        """--reference-date and --churn-months move the churn cutoff."""
        exit_code = run_analytics_cli(
            [
                str(sales_csv),
                str(customers_csv),
                "--reference-date",
                "2020-12-31",
                "--churn-months",
                "3",
            ]
        )

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["reference_date"] == "2020-12-31"
        # cutoff 2020-09-30: customer 1 last bought 2020-06-01
        assert [
            (row["cohort_year"], row["customer_status"])
            for row in payload["cohort_retention"]
        ] == [(2020, "Churned")]

    def test_malformed_reference_date_is_a_usage_error(
        self, sales_csv, customers_csv, capsys
    ):
        with pytest.raises(SystemExit) as excinfo:
            run_analytics_cli(
                [str(sales_csv), str(customers_csv), "--reference-date", "31/12/2020"]
            )

        assert excinfo.value.code == 2
        assert "--reference-date" in capsys.readouterr().err

    def test_negative_churn_months_is_a_usage_error(
        self, sales_csv, customers_csv, capsys
    ):
        with pytest.raises(SystemExit) as excinfo:
            run_analytics_cli(
                [str(sales_csv), str(customers_csv), "--churn-months", "-1"]
            )

        assert excinfo.value.code == 2
        assert "must not be negative" in capsys.readouterr().err
