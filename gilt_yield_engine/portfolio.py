from __future__ import annotations

import logging
import math
from typing import Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from .bonds import Bond
from .config import DEFAULT_CONFIG, EngineConfig
from .utils import to_date, to_timestamp, whole_days_between
from .valuation import value_bond

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25

# English labels whatever the process locale
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

TABLE_COLUMNS = [
    "bond_id",
    "name",
    "code",
    "maturity",
    "maturity_display",
    "time_to_maturity",
    "time_to_maturity_days",
    "coupon_rate",
    "clean_price",
    "dirty_price",
    "gross_yield",
    "net_yield",
]


def maturity_display(maturity) -> str:
    """'07-Mar-30' style label."""
    d = to_date(maturity)
    return f"{d.day:02d}-{_MONTH_ABBR[d.month - 1]}-{d.year % 100:02d}"


def days_to_maturity(maturity, val_date) -> int:
    return max(0, whole_days_between(to_date(maturity), to_timestamp(val_date)))


def time_to_maturity_label(days: int) -> str:
    """Whole days as '<years>y <days>d' on a 365.25-day year."""
    years = int(math.floor(days / DAYS_PER_YEAR))
    remaining = max(0, int(round(days - years * DAYS_PER_YEAR)))
    return f"{years}y {remaining}d"


def filter_gilts(
    bonds: Iterable[Bond],
    coupon_min: Optional[float] = None,
    coupon_max: Optional[float] = None,
    maturity_from=None,
    maturity_to=None,
) -> List[Bond]:
    """
    Screen by coupon (in percent, e.g. 4.25) and maturity, bounds inclusive.
    """
    lo = to_timestamp(maturity_from) if maturity_from is not None else None
    hi = to_timestamp(maturity_to) if maturity_to is not None else None

    out: List[Bond] = []
    for b in bonds:
        pct = b.coupon_rate * 100.0
        if coupon_min is not None and pct < coupon_min:
            continue
        if coupon_max is not None and pct > coupon_max:
            continue
        if lo is not None and b.maturity < lo:
            continue
        if hi is not None and b.maturity > hi:
            continue
        out.append(b)
    return out


def value_gilts(
    bonds: Iterable[Bond],
    clean_prices: Mapping[str, float],
    val_date,
    tax_rate: float = 0.0,
    config: EngineConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """
    Value a gilt list against clean-price quotes keyed by bond_id (ISIN).

    Gilts without a quote are valued at config.default_clean_price. A gilt whose
    yield cannot be solved keeps its row with NaN yields; the batch carries on.
    Prices in the table are rounded to 3dp, yields are percentages.
    """
    val_date = to_timestamp(val_date)

    rows = []
    for b in bonds:
        quote = clean_prices.get(b.bond_id)
        if quote is None or pd.isna(quote):
            quote = config.default_clean_price
        clean = round(float(quote), 3)

        res = value_bond(b, clean, val_date, tax_rate, config.solver)
        if res.gross_yield is None or res.net_yield is None:
            logger.warning("%s: yield unavailable at clean %.3f (dirty %.4f).", b.bond_id or b.name, clean, res.dirty_price)

        days = days_to_maturity(b.maturity, val_date)
        rows.append(
            (
                b.bond_id,
                b.name,
                b.code,
                b.maturity,
                maturity_display(b.maturity),
                time_to_maturity_label(days),
                days,
                b.coupon_rate,
                clean,
                round(res.dirty_price, 3),
                np.nan if res.gross_yield is None else res.gross_yield,
                np.nan if res.net_yield is None else res.net_yield,
            )
        )

    return pd.DataFrame(rows, columns=TABLE_COLUMNS)
