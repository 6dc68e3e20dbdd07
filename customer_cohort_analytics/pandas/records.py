"""Pandas DataFrame adapters for raw records and the cohort view."""

from typing import List, Optional

import pandas as pd  # type: ignore

from customer_cohort_analytics.foundation.cohort_view import CohortView, CohortViewBuilder
from customer_cohort_analytics.foundation.records import (
    CustomerRecord,
    RecordValidator,
    SaleRecord,
)
from ._utils import check_columns, decimal_to_float, empty_frame

COHORT_VIEW_COLUMNS = [
    "customerkey",
    "orderdate",
    "total_net_revenue",
    "num_orders",
    "countryfull",
    "age",
    "cleaned_name",
    "first_purchase_date",
    "cohort_year",
]


def dataframe_to_sales(
    sales_df: pd.DataFrame,
    customer_key_col: str = "customerkey",
    order_key_col: str = "orderkey",
    order_date_col: str = "orderdate",
    quantity_col: str = "quantity",
    net_price_col: str = "netprice",
    exchange_rate_col: str = "exchangerate",
) -> List[SaleRecord]:
    """Convert a sales DataFrame to validated SaleRecord objects.

    Args:
        sales_df: DataFrame with one row per sales line
        *_col: Column name mappings for flexibility

    Returns:
        List of SaleRecord objects in input order

    Raises:
        ValueError: If DataFrame missing required columns or a row is invalid
        TypeError: If an order date cannot be parsed

    Example:
        >>> sales_df = pd.read_csv('sales.csv')
        >>> sales = dataframe_to_sales(sales_df)
    """
    mapping = {
        "customer_key": customer_key_col,
        "order_key": order_key_col,
        "order_date": order_date_col,
        "quantity": quantity_col,
        "net_price": net_price_col,
        "exchange_rate": exchange_rate_col,
    }
    check_columns(sales_df, mapping)

    if sales_df.empty:
        return []

    rows = (
        {field: record[column] for field, column in mapping.items()}
        for record in sales_df.to_dict("records")
    )
    return RecordValidator().validate_sales(rows)


def dataframe_to_customers(
    customers_df: pd.DataFrame,
    customer_key_col: str = "customerkey",
    given_name_col: str = "givenname",
    surname_col: str = "surname",
    country_col: str = "countryfull",
    age_col: str = "age",
) -> List[CustomerRecord]:
    """Convert a customer DataFrame to validated CustomerRecord objects.

    Only the customer key column is required; absent attribute columns are
    treated as missing values.

    Raises:
        ValueError: If the key column is missing, a key is blank or keys repeat
    """
    check_columns(customers_df, {"customer_key": customer_key_col})

    if customers_df.empty:
        return []

    optional = {
        "given_name": given_name_col,
        "surname": surname_col,
        "country": country_col,
        "age": age_col,
    }
    present = {field: column for field, column in optional.items() if column in customers_df.columns}

    rows = (
        {
            "customer_key": record[customer_key_col],
            **{field: record[column] for field, column in present.items()},
        }
        for record in customers_df.to_dict("records")
    )
    return RecordValidator().validate_customers(rows)


def cohort_view_to_dataframe(view: CohortView) -> pd.DataFrame:
    """Convert a cohort view to a DataFrame.

    Returns:
        DataFrame with columns: customerkey, orderdate, total_net_revenue,
        num_orders, countryfull, age, cleaned_name, first_purchase_date,
        cohort_year. Sorted by customerkey then orderdate.
    """
    if not view.records:
        return empty_frame(COHORT_VIEW_COLUMNS)

    rows = [
        {
            "customerkey": record.customer_key,
            "orderdate": pd.Timestamp(record.order_date),
            "total_net_revenue": decimal_to_float(record.total_net_revenue),
            "num_orders": record.num_orders,
            "countryfull": record.country,
            "age": record.age,
            "cleaned_name": record.cleaned_name,
            "first_purchase_date": pd.Timestamp(record.first_purchase_date),
            "cohort_year": record.cohort_year,
        }
        for record in view.records
    ]
    df = pd.DataFrame(rows, columns=COHORT_VIEW_COLUMNS)
    # Attribute columns stay object dtype so unknown customers keep None.
    for column in ("countryfull", "cleaned_name"):
        df[column] = pd.Series(
            [row[column] for row in rows], index=df.index, dtype=object
        )
    return df


def build_cohort_view_df(
    sales_df: pd.DataFrame,
    customers_df: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """Build the cohort view from raw DataFrames.

    Convenience function that combines conversion and view construction.

    Example:
        >>> view_df = build_cohort_view_df(pd.read_csv('sales.csv'), pd.read_csv('customer.csv'))
        >>> view_df.groupby('cohort_year')['customerkey'].nunique()
    """
    sales = dataframe_to_sales(sales_df)
    customers = dataframe_to_customers(customers_df) if customers_df is not None else []
    view = CohortViewBuilder().build(sales, customers)
    return cohort_view_to_dataframe(view)
