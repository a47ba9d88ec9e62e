from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Tuple, Union

import pandas as pd

from .utils import to_date

FACE = 100.0
COUPON_FREQ = 2  # conventional gilts pay semi-annually

_VULGAR_FRACTIONS = {
    "¼": " 1/4",
    "½": " 1/2",
    "¾": " 3/4",
    "⅛": " 1/8",
    "⅜": " 3/8",
    "⅝": " 5/8",
    "⅞": " 7/8",
}

_INDEX_LINKED_MARKERS = ("index", "link", "rpi")
_STRIP_MARKER = "strip"


@dataclass(frozen=True)
class Bond:
    """
    Static terms of a fixed-coupon gilt.

    Only `maturity` and `coupon_rate` take part in pricing; the identifiers are
    carried through for the caller's tables.
    """
    maturity: pd.Timestamp
    coupon_rate: float  # decimal, e.g. 0.0425 = 4.25%
    bond_id: str = ""   # ISIN
    name: str = ""
    code: str = ""

    def __post_init__(self):
        object.__setattr__(self, "maturity", to_date(self.maturity))
        object.__setattr__(self, "coupon_rate", float(self.coupon_rate))
        if not self.coupon_rate >= 0.0:
            raise ValueError(f"{self.bond_id or 'bond'}: coupon rate must be >= 0, got {self.coupon_rate}.")

    @property
    def coupon_payment(self) -> float:
        """Gross coupon per 100 nominal paid on each coupon date."""
        return FACE * self.coupon_rate / COUPON_FREQ


def parse_coupon_rate(text: Union[str, float, None]) -> float:
    """
    Coupon text as quoted on gilt lists to a decimal rate.

    "4¼%", "4 1/4%" and "4.25" all give 0.0425. Empty input gives 0.0.
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return float(text) / 100.0

    cleaned = str(text)
    for glyph, fraction in _VULGAR_FRACTIONS.items():
        cleaned = cleaned.replace(glyph, fraction)
    cleaned = cleaned.replace("%", "").strip()

    total = 0.0
    for part in cleaned.split():
        if "/" in part:
            num, _, den = part.partition("/")
            try:
                n, d = float(num), float(den)
            except ValueError:
                continue
            if d != 0:
                total += n / d
            continue
        try:
            total += float(part)
        except ValueError:
            continue
    return total / 100.0


def looks_index_linked(text: str) -> bool:
    if not text:
        return False
    t = str(text).lower()
    return any(marker in t for marker in _INDEX_LINKED_MARKERS)


def looks_strip(text: str) -> bool:
    return bool(text) and _STRIP_MARKER in str(text).lower()


def coupon_months(maturity) -> Tuple[int, int]:
    """(maturity month, the month six months away), 1-based."""
    month = to_date(maturity).month
    return month, (month + 5) % 12 + 1


def _record_value(record: Mapping, *keys, default=None):
    for k in keys:
        if k in record and not (isinstance(record[k], float) and pd.isna(record[k])):
            return record[k]
    return default


def bonds_from_records(
    records: Union[pd.DataFrame, Iterable[Mapping]],
    skip_index_linked: bool = True,
    skip_strips: bool = True,
) -> List[Bond]:
    """
    Build Bond objects from gilt descriptors.

    Accepts a DataFrame or an iterable of mappings with `maturity` plus either
    `coupon_rate` / `couponRate` (decimal) or `coupon` (quoted text, "4¼%").
    Identifier columns `isin`/`bond_id`, `name`, `code` are optional.
    Index-linked names are dropped unless `skip_index_linked` is False, and
    strips unless `skip_strips` is False.
    """
    if isinstance(records, pd.DataFrame):
        records = records.to_dict(orient="records")

    bonds: List[Bond] = []
    for i, r in enumerate(records):
        bond_id = str(_record_value(r, "isin", "bond_id", default=""))
        name = str(_record_value(r, "name", default=""))

        if skip_index_linked and looks_index_linked(name):
            continue
        if skip_strips and looks_strip(name):
            continue

        raw_maturity = _record_value(r, "maturity", "maturity_date")
        try:
            maturity = to_date(raw_maturity)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Record {i} ({bond_id or name}): unparseable maturity {raw_maturity!r}.") from exc

        rate = _record_value(r, "coupon_rate", "couponRate")
        if rate is None:
            rate = parse_coupon_rate(_record_value(r, "coupon"))

        bonds.append(
            Bond(
                maturity=maturity,
                coupon_rate=float(rate),
                bond_id=bond_id,
                name=name,
                code=str(_record_value(r, "code", default="")),
            )
        )
    return bonds
