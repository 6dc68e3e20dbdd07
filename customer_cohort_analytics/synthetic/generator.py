from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

from customer_cohort_analytics.foundation.records import CustomerRecord, SaleRecord

GIVEN_NAMES = ("Ana", "Ben", "Chloe", "Dmitri", "Elena", "Farid", "Grace", "Hugo")
SURNAMES = ("Adams", "Baker", "Costa", "Dubois", "Evans", "Fischer", "Garcia")
COUNTRIES: Tuple[Tuple[str, Decimal], ...] = (
    ("United States", Decimal("1.0")),
    ("United Kingdom", Decimal("1.27")),
    ("Germany", Decimal("1.09")),
    ("Canada", Decimal("0.74")),
    ("Australia", Decimal("0.66")),
)


@dataclass(frozen=True)
class ScenarioConfig:
    """Configuration for synthetic sales generation.

    Attributes
    ----------
    churn_hazard: Monthly probability that an acquired customer stops buying.
    base_orders_per_month: Average orders per active customer per month.
    mean_unit_price: Average net price of a sales line.
    price_variability: Coefficient in (0, 1] controlling price variance.
    quantity_mean: Average quantity per sales line.
    max_lines_per_order: Upper bound on lines sampled for one order.
    seed: Optional RNG seed for reproducibility.
    """

    churn_hazard: float = 0.08
    base_orders_per_month: float = 0.6
    mean_unit_price: float = 120.0
    price_variability: float = 0.5
    quantity_mean: float = 2.0
    max_lines_per_order: int = 3
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0 <= self.churn_hazard < 1:
            raise ValueError(f"churn_hazard must be in [0, 1): {self.churn_hazard}")
        if self.base_orders_per_month < 0:
            raise ValueError(
                f"base_orders_per_month cannot be negative: {self.base_orders_per_month}"
            )
        if self.max_lines_per_order < 1:
            raise ValueError(
                f"max_lines_per_order must be >= 1: {self.max_lines_per_order}"
            )


def generate_customers(n: int, *, seed: Optional[int] = None) -> List[CustomerRecord]:
    """Generate ``n`` customers with random names, countries and ages."""

    if n <= 0:
        return []
    rng = random.Random(seed)
    return [
        CustomerRecord(
            customer_key=str(i + 1),
            given_name=rng.choice(GIVEN_NAMES),
            surname=rng.choice(SURNAMES),
            country=rng.choice(COUNTRIES)[0],
            age=rng.randint(18, 85),
        )
        for i in range(n)
    ]


def _month_starts(start: date, end: date) -> List[date]:
    cur = date(start.year, start.month, 1)
    out: List[date] = []
    while cur <= end:
        out.append(cur)
        cur = date(cur.year + 1, 1, 1) if cur.month == 12 else date(cur.year, cur.month + 1, 1)
    return out


def _poisson(rng: random.Random, lam: float) -> int:
    # Knuth's algorithm; lambdas here are small
    if lam <= 0:
        return 0
    limit = math.exp(-lam)
    k = 0
    p = 1.0
    while p > limit:
        k += 1
        p *= rng.random()
    return k - 1


def _sample_price(rng: random.Random, mean: float, variability: float) -> Decimal:
    sigma = min(max(variability, 0.01), 1.0)
    mu = math.log(max(mean, 0.01)) - 0.5 * sigma * sigma
    price = math.exp(rng.normalvariate(mu, sigma))
    return Decimal(str(round(max(price, 0.01), 2)))


def _sample_quantity(rng: random.Random, mean_q: float) -> Decimal:
    q = max(1.0, rng.lognormvariate(mu=math.log(max(mean_q, 0.1)), sigma=0.5))
    return Decimal(max(1, int(round(q))))


def generate_sales(
    customers: Sequence[CustomerRecord],
    start: date,
    end: date,
    *,
    scenario: Optional[ScenarioConfig] = None,
) -> List[SaleRecord]:
    """Generate sales lines for ``customers`` between ``start`` and ``end``.

    Every customer is acquired on a random day of the window and always buys
    on that day, then keeps buying month by month until a churn draw removes
    them. The exchange rate follows the customer's country.
    """

    if start > end:
        raise ValueError("start date must be <= end date")
    scenario = scenario or ScenarioConfig()
    rng = random.Random(scenario.seed)
    total_days = (end - start).days + 1
    rates: Dict[str, Decimal] = dict(COUNTRIES)

    sales: List[SaleRecord] = []
    order_seq = 1

    def add_order(customer: CustomerRecord, order_date: date) -> None:
        nonlocal order_seq
        order_key = str(order_seq)
        order_seq += 1
        rate = rates.get(customer.country or "", Decimal("1.0"))
        for _line in range(1 + rng.randrange(scenario.max_lines_per_order)):
            sales.append(
                SaleRecord(
                    customer_key=customer.customer_key,
                    order_key=order_key,
                    order_date=order_date,
                    quantity=_sample_quantity(rng, scenario.quantity_mean),
                    net_price=_sample_price(
                        rng, scenario.mean_unit_price, scenario.price_variability
                    ),
                    exchange_rate=rate,
                )
            )

    for customer in customers:
        acquired = start + timedelta(days=rng.randrange(total_days))
        add_order(customer, acquired)

        for month_start in _month_starts(acquired, end):
            if rng.random() < scenario.churn_hazard:
                break
            for _ in range(_poisson(rng, scenario.base_orders_per_month)):
                next_month = (
                    date(month_start.year + 1, 1, 1)
                    if month_start.month == 12
                    else date(month_start.year, month_start.month + 1, 1)
                )
                first_day = max(month_start, acquired)
                last_day = min(next_month - timedelta(days=1), end)
                span = (last_day - first_day).days + 1
                add_order(customer, first_day + timedelta(days=rng.randrange(span)))

    sales.sort(key=lambda s: (s.customer_key, s.order_date, int(s.order_key)))
    return sales
