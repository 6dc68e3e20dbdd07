"""Cohort view construction: one enriched row per customer and order date."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from customer_cohort_analytics.foundation.records import CustomerRecord, SaleRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CohortRecord:
    """Revenue of one customer on one order date, with cohort attributes.

    Attributes
    ----------
    customer_key:
        Customer identifier taken from the sales lines.
    order_date:
        Calendar date the revenue was booked on.
    total_net_revenue:
        Sum of ``quantity * net_price * exchange_rate`` over the day's lines.
    num_orders:
        Number of sales lines booked for the customer on that day.
    country, age, cleaned_name:
        Customer attributes. ``None`` when the customer is absent from the
        customer table.
    first_purchase_date:
        Earliest order date of the customer across the whole history.
    cohort_year:
        Year of ``first_purchase_date``.

    Notes
    -----
    ``first_purchase_date`` and ``cohort_year`` are identical on every row of
    a given customer regardless of the row's own ``order_date``.
    """

    customer_key: str
    order_date: date
    total_net_revenue: Decimal
    num_orders: int
    country: str | None
    age: int | None
    cleaned_name: str | None
    first_purchase_date: date
    cohort_year: int


@dataclass
class CohortView:
    """Container for the cohort records of a snapshot."""

    records: list[CohortRecord] = field(default_factory=list)
    global_max_order_date: date | None = None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    @property
    def customer_keys(self) -> set[str]:
        return {record.customer_key for record in self.records}

    def for_customer(self, customer_key: str) -> list[CohortRecord]:
        """Return the rows of one customer in order date order."""
        return [record for record in self.records if record.customer_key == customer_key]

    def as_dict(self) -> dict[str, object]:
        """Return JSON-serialisable representation of the view."""

        def serialise(record: CohortRecord) -> dict[str, object]:
            return {
                "customer_key": record.customer_key,
                "order_date": record.order_date.isoformat(),
                "total_net_revenue": str(record.total_net_revenue),
                "num_orders": record.num_orders,
                "country": record.country,
                "age": record.age,
                "cleaned_name": record.cleaned_name,
                "first_purchase_date": record.first_purchase_date.isoformat(),
                "cohort_year": record.cohort_year,
            }

        return {
            "global_max_order_date": (
                self.global_max_order_date.isoformat()
                if self.global_max_order_date is not None
                else None
            ),
            "records": [serialise(record) for record in self.records],
        }


class CohortViewBuilder:
    """Build the cohort view from raw sales and customer records."""

    def build(
        self,
        sales: Iterable[SaleRecord],
        customers: Iterable[CustomerRecord] = (),
    ) -> CohortView:
        customer_index = {customer.customer_key: customer for customer in customers}
        daily = self._aggregate_daily(sales)
        if not daily:
            return CohortView()

        first_purchase: dict[str, date] = {}
        for customer_key, order_date in daily:
            current = first_purchase.get(customer_key)
            if current is None or order_date < current:
                first_purchase[customer_key] = order_date

        unmatched: set[str] = set()
        records: list[CohortRecord] = []
        for (customer_key, order_date), payload in daily.items():
            # Left join: sales without a customer row keep null attributes.
            customer = customer_index.get(customer_key)
            if customer is None:
                unmatched.add(customer_key)
            first_date = first_purchase[customer_key]
            records.append(
                CohortRecord(
                    customer_key=customer_key,
                    order_date=order_date,
                    total_net_revenue=payload["total_net_revenue"],
                    num_orders=payload["num_orders"],
                    country=customer.country if customer else None,
                    age=customer.age if customer else None,
                    cleaned_name=customer.cleaned_name() if customer else None,
                    first_purchase_date=first_date,
                    cohort_year=first_date.year,
                )
            )

        if unmatched:
            logger.warning(
                "%d customer keys in sales have no customer record; "
                "their attributes are left empty",
                len(unmatched),
            )

        records.sort(key=lambda record: (record.customer_key, record.order_date))
        global_max = max(record.order_date for record in records)
        logger.info(
            "Built cohort view with %d rows for %d customers (max order date %s)",
            len(records),
            len(first_purchase),
            global_max.isoformat(),
        )
        return CohortView(records=records, global_max_order_date=global_max)

    @staticmethod
    def _aggregate_daily(
        sales: Iterable[SaleRecord],
    ) -> dict[tuple[str, date], dict[str, object]]:
        grouped: dict[tuple[str, date], dict[str, object]] = {}
        for sale in sales:
            key = (sale.customer_key, sale.order_date)
            bucket = grouped.setdefault(
                key, {"total_net_revenue": Decimal("0"), "num_orders": 0}
            )
            bucket["total_net_revenue"] += sale.net_revenue
            if sale.order_key:
                bucket["num_orders"] += 1
        return grouped


def build_cohort_view(
    sales: Iterable[SaleRecord], customers: Iterable[CustomerRecord] = ()
) -> CohortView:
    """Shortcut for ``CohortViewBuilder().build(sales, customers)``."""
    return CohortViewBuilder().build(sales, customers)
