from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import brentq

from .bonds import Bond
from .cashflows import Cashflow, build_cashflows
from .config import SolverConfig
from .utils import diff_in_days

logger = logging.getLogger(__name__)

DEFAULT_SOLVER = SolverConfig()


def npv_function(cashflows: Sequence[Cashflow], day_basis: float = 365.25) -> Callable[[float], float]:
    """
    NPV(r) = sum(amount_i / (1 + r) ** (days_i / day_basis)),
    days_i counted from the earliest cash-flow date.
    """
    ordered = sorted(cashflows, key=lambda cf: cf.date)
    start = ordered[0].date

    amounts = np.array([cf.amount for cf in ordered], dtype=float)
    exponents = np.array([diff_in_days(cf.date, start) for cf in ordered], dtype=float) / day_basis

    def npv(rate: float) -> float:
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            return float(np.sum(amounts / np.power(1.0 + rate, exponents)))

    return npv


def bracket_root(
    npv: Callable[[float], float],
    solver: SolverConfig = DEFAULT_SOLVER,
) -> Optional[Tuple[float, float, float, float]]:
    """
    Find [low, high] with a sign change in NPV, expanding `high` only.

    Returns (low, high, npv_low, npv_high) or None.
    """
    low, high = solver.low, solver.high
    f_low, f_high = npv(low), npv(high)

    expansions = 0
    while f_low * f_high > 0 and expansions < solver.max_expansions:
        high += solver.expansion_step
        f_high = npv(high)
        expansions += 1

    # +inf is fine (long-dated flows underflow the discount factor near r = -1); NaN is not
    if np.isnan(f_low) or np.isnan(f_high):
        return None
    if f_low * f_high > 0:
        return None
    return low, high, f_low, f_high


def _bisect(npv, low: float, high: float, f_low: float, solver: SolverConfig) -> float:
    mid = low
    for _ in range(solver.max_iterations):
        mid = (low + high) / 2.0
        f_mid = npv(mid)
        if abs(f_mid) < solver.tolerance:
            break
        if f_low * f_mid < 0:
            high = mid
        else:
            low, f_low = mid, f_mid
    return mid


def _brent(npv, low: float, high: float, f_low: float, f_high: float, solver: SolverConfig) -> float:
    # brentq interpolates on f, so halve towards the root until both ends are finite
    for _ in range(solver.max_iterations):
        if np.isfinite(f_low) and np.isfinite(f_high):
            break
        mid = (low + high) / 2.0
        f_mid = npv(mid)
        if f_mid == 0.0:
            return float(mid)
        if f_low * f_mid < 0:
            high, f_high = mid, f_mid
        else:
            low, f_low = mid, f_mid
    if not (np.isfinite(f_low) and np.isfinite(f_high)):
        return _bisect(npv, low, high, f_low, solver)
    if f_low == 0.0:
        return float(low)
    if f_high == 0.0:
        return float(high)
    root, _ = brentq(npv, low, high, maxiter=solver.max_iterations, full_output=True, disp=False)
    return float(root)


def xirr(cashflows: Sequence[Cashflow], solver: SolverConfig = DEFAULT_SOLVER) -> Optional[float]:
    """
    Annual rate (decimal) equating the dated cash flows to zero NPV.

    None when there are fewer than two flows or no sign change can be found;
    never raises for numerical trouble.
    """
    if len(cashflows) < 2:
        return None

    npv = npv_function(cashflows, solver.day_basis)
    bracket = bracket_root(npv, solver)
    if bracket is None:
        logger.debug("XIRR: no sign change in NPV over the expanded bracket.")
        return None

    low, high, f_low, f_high = bracket
    if solver.method == "brentq":
        return _brent(npv, low, high, f_low, f_high, solver)
    return _bisect(npv, low, high, f_low, solver)


def solve_yield(cashflows: Sequence[Cashflow], solver: SolverConfig = DEFAULT_SOLVER) -> Optional[float]:
    """XIRR as a percentage rounded to 3dp (e.g. 4.123), or None."""
    rate = xirr(cashflows, solver)
    if rate is None:
        return None
    return round(rate * 100.0, solver.yield_decimals)


def yield_to_maturity(
    bond: Bond,
    dirty_price: float,
    tax_rate: float,
    val_date,
    solver: SolverConfig = DEFAULT_SOLVER,
) -> Optional[float]:
    """Yield (percent) to an investor paying `dirty_price` whose coupons are taxed at `tax_rate`."""
    flows = build_cashflows(bond, dirty_price, tax_rate, val_date)
    ytm = solve_yield(flows, solver)
    if ytm is None:
        logger.debug("%s: yield unavailable (tax rate %s, dirty %s).", bond.bond_id, tax_rate, dirty_price)
    return ytm
