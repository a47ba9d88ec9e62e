from __future__ import annotations

from typing import Optional

from .bonds import Bond
from .schedule import CouponSchedule, build_coupon_schedule
from .utils import diff_in_days, to_timestamp

PRICE_DECIMALS = 4


def accrued_interest(bond: Bond, val_date, schedule: Optional[CouponSchedule] = None) -> float:
    """
    Accrued interest per 100 nominal at the valuation instant.

    Linear in elapsed time over the coupon period:
        AI = coupon * (val - last) / (next - last)
    with both differences measured in fractional days. This is not an ISDA or
    ICMA basis; gilts quoted off this engine use it as is.
    """
    val_date = to_timestamp(val_date)
    if schedule is None:
        schedule = build_coupon_schedule(bond, val_date)

    if schedule.next_coupon is None or schedule.last_coupon is None:
        return 0.0

    days_since = diff_in_days(val_date, schedule.last_coupon)
    days_period = diff_in_days(schedule.next_coupon, schedule.last_coupon)
    if days_period <= 0:
        return 0.0

    return bond.coupon_payment * (days_since / days_period)


def dirty_price(bond: Bond, clean_price: float, val_date) -> float:
    """Clean price plus accrued interest, per 100 nominal, rounded to 4dp."""
    val_date = to_timestamp(val_date)
    schedule = build_coupon_schedule(bond, val_date)
    if schedule.next_coupon is None:
        return round(float(clean_price), PRICE_DECIMALS)

    ai = accrued_interest(bond, val_date, schedule)
    return round(float(clean_price) + ai, PRICE_DECIMALS)
