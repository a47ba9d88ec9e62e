from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pandas as pd

from .bonds import Bond, COUPON_FREQ
from .utils import add_months, to_timestamp

logger = logging.getLogger(__name__)

COUPON_PERIOD_MONTHS = 12 // COUPON_FREQ
MAX_SCHEDULE_STEPS = 200  # ~100 years of semi-annual coupons


@dataclass(frozen=True)
class CouponSchedule:
    """
    Semi-annual coupon calendar of a bond as seen from a valuation instant.

    - future_coupons: coupon dates strictly after the valuation instant, ascending,
      the last one being the maturity.
    - next_coupon: first coupon after the valuation instant (synthesized for
      matured bonds).
    - last_coupon: next_coupon minus one period. A day-count anchor only, it is
      not checked against any payment history.

    Both are None when the walk back from maturity hit MAX_SCHEDULE_STEPS
    before reaching the valuation instant.
    """
    future_coupons: Tuple[pd.Timestamp, ...]
    last_coupon: Optional[pd.Timestamp]
    next_coupon: Optional[pd.Timestamp]
    maturity: pd.Timestamp


def coupon_date(maturity: pd.Timestamp, periods_back: int) -> pd.Timestamp:
    """
    Coupon date `periods_back` periods before maturity (negative = after).

    Always offset from maturity itself so the maturity's day-of-month survives
    short months: 31-Mar maturity gives 30-Sep, then 31-Mar again, not 30-Mar.
    """
    return add_months(maturity, -COUPON_PERIOD_MONTHS * periods_back)


def build_coupon_schedule(bond: Bond, val_date) -> CouponSchedule:
    """
    Reconstruct the coupon calendar by walking back from maturity in 6M steps.

    A coupon falling exactly on the valuation instant is treated as paid to the
    seller: it anchors accrual (last_coupon) and is not part of future_coupons.
    """
    val_date = to_timestamp(val_date)
    maturity = bond.maturity

    collected: List[pd.Timestamp] = []
    cursor = maturity
    steps = 0
    while cursor > val_date and steps < MAX_SCHEDULE_STEPS:
        collected.append(cursor)
        steps += 1
        cursor = coupon_date(maturity, steps)

    if steps == MAX_SCHEDULE_STEPS and cursor > val_date:
        # the coupon period around val_date was never reached: no accrual anchor
        logger.debug("%s: schedule walk stopped after %d steps above %s.", bond.bond_id, steps, val_date)
        next_coupon = last_coupon = None
    else:
        # steps == 0 means matured: next coupon is synthesized one period past maturity
        next_coupon = coupon_date(maturity, steps - 1)
        last_coupon = coupon_date(maturity, steps)

    return CouponSchedule(
        future_coupons=tuple(reversed(collected)),
        last_coupon=last_coupon,
        next_coupon=next_coupon,
        maturity=maturity,
    )
