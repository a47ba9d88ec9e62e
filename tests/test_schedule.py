import pandas as pd
import pytest

from gilt_yield_engine.bonds import Bond
from gilt_yield_engine.schedule import MAX_SCHEDULE_STEPS, build_coupon_schedule
from gilt_yield_engine.utils import add_months, diff_in_days


@pytest.fixture(scope="module")
def gilt_2030():
    return Bond(maturity=pd.Timestamp("2030-03-07"), coupon_rate=0.04, bond_id="GILT_4PCT_2030")


def _month_index(d: pd.Timestamp) -> int:
    return d.year * 12 + d.month


@pytest.mark.parametrize(
    "start, months, expected",
    [
        ("2025-01-31", 6, "2025-07-31"),
        ("2025-03-31", -6, "2024-09-30"),
        ("2025-08-31", 6, "2026-02-28"),
        ("2027-08-31", 6, "2028-02-29"),
        ("2025-03-07", -6, "2024-09-07"),
        ("2025-03-07 13:45", 6, "2025-09-07"),
    ],
)
def test_add_months_is_month_safe(start, months, expected):
    assert add_months(pd.Timestamp(start), months) == pd.Timestamp(expected)


def test_diff_in_days_is_fractional():
    assert diff_in_days("2025-03-08 12:00", "2025-03-07") == pytest.approx(1.5)
    assert diff_in_days("2025-03-07", "2025-03-08") == pytest.approx(-1.0)


def test_schedule_on_coupon_date(gilt_2030):
    s = build_coupon_schedule(gilt_2030, pd.Timestamp("2025-03-07"))
    assert s.last_coupon == pd.Timestamp("2025-03-07")
    assert s.next_coupon == pd.Timestamp("2025-09-07")
    assert s.future_coupons[0] == pd.Timestamp("2025-09-07")
    assert s.future_coupons[-1] == gilt_2030.maturity
    assert len(s.future_coupons) == 10


def test_schedule_between_coupons(gilt_2030):
    s = build_coupon_schedule(gilt_2030, pd.Timestamp("2025-06-01"))
    assert s.last_coupon == pd.Timestamp("2025-03-07")
    assert s.next_coupon == pd.Timestamp("2025-09-07")
    assert s.last_coupon <= pd.Timestamp("2025-06-01") < s.next_coupon


@pytest.mark.parametrize("maturity", ["2030-03-31", "2030-08-31", "2031-01-30", "2030-03-07", "2029-02-28"])
def test_schedule_monotone_six_months_and_day_of_month(maturity):
    bond = Bond(maturity=pd.Timestamp(maturity), coupon_rate=0.035)
    s = build_coupon_schedule(bond, pd.Timestamp("2024-11-19"))
    coupons = list(s.future_coupons)

    assert coupons, "live bond must have future coupons"
    assert all(a < b for a, b in zip(coupons, coupons[1:])), "coupons must be strictly ascending"
    assert all(_month_index(b) - _month_index(a) == 6 for a, b in zip(coupons, coupons[1:]))

    day = bond.maturity.day
    for d in coupons + [s.last_coupon, s.next_coupon]:
        assert d.day == min(day, d.days_in_month), f"{d.date()} drifted from day {day}"


def test_month_end_maturity_does_not_drift():
    bond = Bond(maturity=pd.Timestamp("2030-03-31"), coupon_rate=0.05)
    s = build_coupon_schedule(bond, pd.Timestamp("2025-03-30 12:00"))
    # 31-Mar-2025 is still ahead of the valuation instant
    assert s.next_coupon == pd.Timestamp("2025-03-31")
    assert s.last_coupon == pd.Timestamp("2024-09-30")
    assert pd.Timestamp("2027-03-31") in s.future_coupons


def test_schedule_after_maturity_is_synthesized(gilt_2030):
    s = build_coupon_schedule(gilt_2030, pd.Timestamp("2031-01-01"))
    assert s.future_coupons == ()
    assert s.last_coupon == gilt_2030.maturity
    assert s.next_coupon == pd.Timestamp("2030-09-07")


def test_schedule_guard_bounds_walk():
    bond = Bond(maturity=pd.Timestamp("2200-01-15"), coupon_rate=0.02)
    s = build_coupon_schedule(bond, pd.Timestamp("2025-01-01"))
    assert len(s.future_coupons) == MAX_SCHEDULE_STEPS
    assert s.future_coupons[-1] == bond.maturity
    assert s.next_coupon is None and s.last_coupon is None, "no accrual anchor past the guard"
