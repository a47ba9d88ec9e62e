"""
Gilt Yield Engine

Modules:
- bonds: gilt terms + helpers building them from raw descriptors
- schedule: semi-annual coupon calendar anchored at maturity
- pricing: accrued interest + clean -> dirty price
- cashflows: investor cash-flow projection (coupon tax aware)
- yields: XIRR solver + yield to maturity
- valuation: single-bond valuation result
- portfolio: gilt-list valuation table + screening
- config: solver/engine settings (YAML loadable)
- utils: month-safe date arithmetic

The valuation instant is always passed in; nothing here reads the clock.
"""
