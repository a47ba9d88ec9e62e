from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .bonds import Bond
from .config import SolverConfig
from .pricing import accrued_interest, dirty_price
from .schedule import build_coupon_schedule
from .utils import to_timestamp
from .yields import DEFAULT_SOLVER, yield_to_maturity


@dataclass(frozen=True)
class ValuationResult:
    clean_price: float
    accrued_interest: float
    dirty_price: float
    gross_yield: Optional[float]  # percent, 3dp
    net_yield: Optional[float]    # percent after coupon tax, 3dp
    tax_rate: float


def value_bond(
    bond: Bond,
    clean_price: float,
    val_date,
    tax_rate: float = 0.0,
    solver: SolverConfig = DEFAULT_SOLVER,
) -> ValuationResult:
    """
    Dirty price plus gross and net yields for one bond and quote.

    `val_date` is required: nothing here reads the clock. Yields come back as
    None when the solver cannot bracket a root.
    """
    val_date = to_timestamp(val_date)
    schedule = build_coupon_schedule(bond, val_date)

    dirty = dirty_price(bond, clean_price, val_date)
    gross = yield_to_maturity(bond, dirty, 0.0, val_date, solver)
    net = gross if float(tax_rate) == 0.0 else yield_to_maturity(bond, dirty, tax_rate, val_date, solver)

    return ValuationResult(
        clean_price=float(clean_price),
        accrued_interest=accrued_interest(bond, val_date, schedule),
        dirty_price=dirty,
        gross_yield=gross,
        net_yield=net,
        tax_rate=float(tax_rate),
    )
