from datetime import date
from decimal import Decimal

import pytest

from customer_cohort_analytics import run_customer_analytics
from customer_cohort_analytics.analyses import RetentionStatus
from customer_cohort_analytics.synthetic import (
    ScenarioConfig,
    generate_customers,
    generate_sales,
)

START = date(2020, 1, 1)
END = date(2024, 12, 31)


@pytest.fixture(scope="module")
def synthetic_snapshot():
    customers = generate_customers(120, seed=7)
    sales = generate_sales(customers, START, END, scenario=ScenarioConfig(seed=42))
    return sales, customers


def test_generate_customers_basic() -> None:
    customers = generate_customers(25, seed=3)
    assert len(customers) == 25
    assert [c.customer_key for c in customers[:3]] == ["1", "2", "3"]
    assert all(c.cleaned_name() for c in customers)
    assert all(18 <= c.age <= 85 for c in customers)


def test_generation_is_deterministic_with_seed() -> None:
    customers = generate_customers(30, seed=11)
    assert customers == generate_customers(30, seed=11)

    scenario = ScenarioConfig(seed=5)
    first = generate_sales(customers, START, END, scenario=scenario)
    second = generate_sales(customers, START, END, scenario=scenario)
    assert first == second


def test_every_customer_buys_within_window(synthetic_snapshot) -> None:
    sales, customers = synthetic_snapshot
    assert {s.customer_key for s in sales} == {c.customer_key for c in customers}
    assert all(START <= s.order_date <= END for s in sales)
    assert all(s.net_revenue > 0 for s in sales)


def test_empty_inputs_are_handled() -> None:
    assert generate_customers(0) == []
    assert generate_sales([], START, END) == []


def test_scenario_config_validation() -> None:
    with pytest.raises(ValueError, match="churn_hazard"):
        ScenarioConfig(churn_hazard=1.0)
    with pytest.raises(ValueError, match="base_orders_per_month"):
        ScenarioConfig(base_orders_per_month=-0.1)
    with pytest.raises(ValueError, match="max_lines_per_order"):
        ScenarioConfig(max_lines_per_order=0)
    with pytest.raises(ValueError, match="start date"):
        generate_sales(generate_customers(1), END, START)


def test_first_purchase_is_each_customers_earliest_order(synthetic_snapshot) -> None:
    sales, customers = synthetic_snapshot
    view = run_customer_analytics(sales, customers).view

    for key in view.customer_keys:
        rows = view.for_customer(key)
        earliest = min(r.order_date for r in rows)
        assert {r.first_purchase_date for r in rows} == {earliest}
        assert {r.cohort_year for r in rows} == {earliest.year}


def test_segments_cover_every_customer(synthetic_snapshot) -> None:
    sales, customers = synthetic_snapshot
    report = run_customer_analytics(sales, customers)
    summaries = report.segmentation.summaries

    assert sum(s.customer_count for s in summaries) == len(customers)
    assert sum(s.total_ltv for s in summaries) == sum(
        r.total_net_revenue for r in report.view.records
    )
    assert [s.customer_segment.value for s in summaries] == sorted(
        (s.customer_segment.value for s in summaries), reverse=True
    )


def test_cohort_revenue_counts_every_customer_once(synthetic_snapshot) -> None:
    sales, customers = synthetic_snapshot
    report = run_customer_analytics(sales, customers)

    assert sum(r.total_customers for r in report.cohort_revenue) == len(customers)
    years = [r.cohort_year for r in report.cohort_revenue]
    assert years == sorted(years)


def test_retention_statuses_add_up(synthetic_snapshot) -> None:
    sales, customers = synthetic_snapshot
    report = run_customer_analytics(sales, customers)
    assert report.cohort_retention

    by_year = {}
    for row in report.cohort_retention:
        by_year.setdefault(row.cohort_year, []).append(row)

    for rows in by_year.values():
        assert sum(r.num_customers for r in rows) == rows[0].total_customers
        assert abs(sum(r.status_percentage for r in rows) - 1) <= Decimal("0.01")
        assert {r.customer_status for r in rows} <= set(RetentionStatus)


def test_reruns_are_identical(synthetic_snapshot) -> None:
    sales, customers = synthetic_snapshot
    assert (
        run_customer_analytics(sales, customers).as_dict()
        == run_customer_analytics(sales, customers).as_dict()
    )
