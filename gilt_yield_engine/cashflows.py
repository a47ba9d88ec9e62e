from __future__ import annotations

from dataclasses import dataclass
from typing import List

import pandas as pd

from .bonds import Bond, FACE
from .schedule import build_coupon_schedule
from .utils import to_timestamp


@dataclass(frozen=True)
class Cashflow:
    amount: float
    date: pd.Timestamp


def build_cashflows(bond: Bond, dirty_price: float, tax_rate: float, val_date) -> List[Cashflow]:
    """
    Investor cash flows for buying the bond at `dirty_price` on `val_date`.

    Coupons are reduced by `tax_rate`; the redemption at maturity is untaxed.
    The rate is not validated here (allow-lists belong to the caller).
    """
    val_date = to_timestamp(val_date)
    schedule = build_coupon_schedule(bond, val_date)
    taxed_coupon = bond.coupon_payment * (1.0 - float(tax_rate))

    flows = [Cashflow(amount=-float(dirty_price), date=val_date)]
    for d in schedule.future_coupons:
        principal = FACE if d.normalize() == schedule.maturity else 0.0
        flows.append(Cashflow(amount=taxed_coupon + principal, date=d))
    return flows


def cashflow_table(bond: Bond, dirty_price: float, tax_rate: float, val_date) -> pd.DataFrame:
    """Projected flows as a DataFrame: date, coupon, principal, amount."""
    flows = build_cashflows(bond, dirty_price, tax_rate, val_date)
    maturity = bond.maturity

    rows = []
    for i, cf in enumerate(flows):
        if i == 0:
            rows.append((cf.date, 0.0, 0.0, cf.amount))
            continue
        principal = FACE if cf.date.normalize() == maturity else 0.0
        rows.append((cf.date, cf.amount - principal, principal, cf.amount))

    return pd.DataFrame(rows, columns=["date", "coupon", "principal", "amount"])
