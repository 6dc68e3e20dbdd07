"""Raw input record definitions and validation utilities.

Two immutable input tables feed every analysis in this package: sales lines
and customer reference records. The validator turns loosely typed rows (JSON
payloads, CSV rows, DataFrame records) into canonical records so downstream
stages can rely on consistent types.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

import pandas as pd


@dataclass(frozen=True)
class SaleRecord:
    """A single sales line.

    Attributes
    ----------
    customer_key:
        Customer the line was sold to. May reference a customer that is
        missing from the customer table.
    order_key:
        Order the line belongs to. Several lines can share an order.
    order_date:
        Calendar date of the order.
    quantity:
        Units sold on this line.
    net_price:
        Unit price after discounts, in the order currency.
    exchange_rate:
        Conversion rate from the order currency to the reporting currency.
    """

    customer_key: str
    order_key: str
    order_date: date
    quantity: Decimal
    net_price: Decimal
    exchange_rate: Decimal

    @property
    def net_revenue(self) -> Decimal:
        """Revenue of this line in the reporting currency."""
        return self.quantity * self.net_price * self.exchange_rate


@dataclass(frozen=True)
class CustomerRecord:
    """Customer reference data.

    Only ``customer_key`` is mandatory; attributes missing upstream are kept
    as ``None``.
    """

    customer_key: str
    given_name: str | None = None
    surname: str | None = None
    country: str | None = None
    age: int | None = None

    def cleaned_name(self) -> str | None:
        """Return ``"<given name> <surname>"`` with surrounding whitespace trimmed."""

        parts = [part.strip() for part in (self.given_name, self.surname) if part]
        parts = [part for part in parts if part]
        if not parts:
            return None
        return " ".join(parts)


def _is_missing(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):  # pragma: no cover - non-scalar values
        return False


def normalise_key(value: Any) -> str:
    """Return a canonical string key.

    Integral floats (as produced by pandas for columns containing NaN) are
    rendered without the trailing ``.0`` so ``15.0`` and ``15`` match.
    """

    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_order_date(value: Any) -> date:
    """Coerce ``value`` to a :class:`datetime.date`.

    Raises
    ------
    TypeError
        If the value is not a date, datetime or ISO formatted string.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise TypeError(
                "order_date must be an ISO formatted date string",
                {"value": value},
            ) from None
    raise TypeError("order_date must be a date, datetime or ISO string", {"value": value})


def _to_decimal(value: Any, field_name: str, idx: int) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(
            f"{field_name} must be numeric",
            {"record_index": idx, "value": value},
        ) from exc


class RecordValidator:
    """Validate raw sales and customer rows and return canonical records."""

    #: Fields every sales row must provide.
    SALE_FIELDS = (
        "customer_key",
        "order_key",
        "order_date",
        "quantity",
        "net_price",
        "exchange_rate",
    )

    def validate_sales(self, records: Iterable[Mapping[str, Any]]) -> list[SaleRecord]:
        """Validate raw sales rows.

        Parameters
        ----------
        records:
            Iterable of mappings providing at least :attr:`SALE_FIELDS`.

        Raises
        ------
        ValueError
            If a row misses a required field or carries a non-numeric amount.
        TypeError
            If ``order_date`` cannot be interpreted as a date.
        """

        canonical: list[SaleRecord] = []
        for idx, record in enumerate(records):
            missing = [
                name
                for name in self.SALE_FIELDS
                if name not in record or _is_missing(record[name])
            ]
            if missing:
                raise ValueError(
                    "Sales record missing required fields",
                    {"missing_fields": missing, "record_index": idx},
                )

            canonical.append(
                SaleRecord(
                    customer_key=normalise_key(record["customer_key"]),
                    order_key=normalise_key(record["order_key"]),
                    order_date=parse_order_date(record["order_date"]),
                    quantity=_to_decimal(record["quantity"], "quantity", idx),
                    net_price=_to_decimal(record["net_price"], "net_price", idx),
                    exchange_rate=_to_decimal(
                        record["exchange_rate"], "exchange_rate", idx
                    ),
                )
            )
        return canonical

    def validate_customers(
        self, records: Iterable[Mapping[str, Any]]
    ) -> list[CustomerRecord]:
        """Validate raw customer rows.

        Blank strings and NaN values are stored as ``None``. Customer keys
        must be unique across the input.
        """

        canonical: list[CustomerRecord] = []
        for idx, record in enumerate(records):
            if "customer_key" not in record or _is_missing(record["customer_key"]):
                raise ValueError(
                    "Customer record missing required fields",
                    {"missing_fields": ["customer_key"], "record_index": idx},
                )

            data = {
                name: None if _is_missing(record.get(name)) else record.get(name)
                for name in ("given_name", "surname", "country", "age")
            }
            age = data["age"]
            if age is not None:
                try:
                    age = int(age)
                except (TypeError, ValueError) as exc:
                    raise ValueError(
                        "age must be an integer",
                        {"record_index": idx, "value": age},
                    ) from exc

            canonical.append(
                CustomerRecord(
                    customer_key=normalise_key(record["customer_key"]),
                    given_name=None if data["given_name"] is None else str(data["given_name"]),
                    surname=None if data["surname"] is None else str(data["surname"]),
                    country=None if data["country"] is None else str(data["country"]),
                    age=age,
                )
            )

        key_counts = Counter(customer.customer_key for customer in canonical)
        duplicates = [key for key, count in key_counts.items() if count > 1]
        if duplicates:
            raise ValueError(
                f"Duplicate customer_key values detected: {duplicates[:5]}. "
                f"Each customer must appear exactly once."
            )
        return canonical
