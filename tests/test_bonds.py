import pandas as pd
import pytest

from gilt_yield_engine.bonds import (
    Bond,
    bonds_from_records,
    coupon_months,
    looks_index_linked,
    looks_strip,
    parse_coupon_rate,
)


def test_bond_normalises_maturity_and_rejects_negative_coupon():
    b = Bond(maturity="2030-03-07T15:30:00", coupon_rate=0.04, bond_id="GB00TEST0001")
    assert b.maturity == pd.Timestamp("2030-03-07")
    assert b.coupon_payment == pytest.approx(2.0)

    aware = Bond(maturity=pd.Timestamp("2030-03-07", tz="UTC"), coupon_rate=0.04)
    assert aware.maturity.tzinfo is None

    with pytest.raises(ValueError):
        Bond(maturity="2030-03-07", coupon_rate=-0.01)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("4¼%", 0.0425),
        ("4 1/4%", 0.0425),
        ("0⅛%", 0.00125),
        ("3.75", 0.0375),
        ("", 0.0),
        (None, 0.0),
        (4.5, 0.045),
    ],
)
def test_parse_coupon_rate(text, expected):
    assert parse_coupon_rate(text) == pytest.approx(expected)


def test_index_linked_detection():
    assert looks_index_linked("0 1/8% Index-linked Treasury Gilt 2028")
    assert looks_index_linked("RPI linked 2030")
    assert not looks_index_linked("4 1/4% Treasury Gilt 2032")
    assert not looks_index_linked("")


def test_coupon_months_pair_is_six_months_apart():
    assert coupon_months("2030-03-07") == (3, 9)
    assert coupon_months("2030-12-07") == (12, 6)
    assert coupon_months("2030-09-07") == (9, 3)


def test_bonds_from_records_mixed_inputs():
    records = [
        {"isin": "GB00A", "name": "4% Treasury 2030", "maturity": "2030-03-07", "couponRate": 0.04, "code": "T30"},
        {"isin": "GB00B", "name": "4¼% Treasury 2032", "maturity": "2032-06-07", "coupon": "4¼%"},
        {"isin": "GB00C", "name": "0 1/8% Index-linked Treasury 2028", "maturity": "2028-08-10", "couponRate": 0.00125},
    ]
    bonds = bonds_from_records(records)
    assert [b.bond_id for b in bonds] == ["GB00A", "GB00B"], "index-linked gilts are skipped"
    assert bonds[0].code == "T30"
    assert bonds[1].coupon_rate == pytest.approx(0.0425)

    all_bonds = bonds_from_records(pd.DataFrame(records), skip_index_linked=False)
    assert len(all_bonds) == 3


def test_bonds_from_records_bad_maturity_names_record():
    with pytest.raises(ValueError, match="GB00X"):
        bonds_from_records([{"isin": "GB00X", "maturity": "not a date", "couponRate": 0.01}])


def test_strips_are_dropped_at_intake():
    assert looks_strip("Treasury Strip 2030")
    assert looks_strip("4% TREASURY 2030 STRIPS")
    assert not looks_strip("4% Treasury Gilt 2030")
    assert not looks_strip("")

    records = [
        {"isin": "GB00A", "name": "4% Treasury 2030", "maturity": "2030-03-07", "couponRate": 0.04},
        {"isin": "GB00S", "name": "Treasury Strip 2030", "maturity": "2030-03-07", "couponRate": 0.0},
    ]
    assert [b.bond_id for b in bonds_from_records(records)] == ["GB00A"], "strips are skipped"

    kept = bonds_from_records(records, skip_strips=False)
    assert [b.bond_id for b in kept] == ["GB00A", "GB00S"]
