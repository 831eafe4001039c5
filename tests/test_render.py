import json
from decimal import Decimal

import pytest

from loyalty_receipts.api import member_ranking, member_view
from loyalty_receipts.models import FilterSet, RankingQuery
from loyalty_receipts.normalizers import load_dataset
from loyalty_receipts.profiles import TOMODS, describe_profiles
from loyalty_receipts.render import (
    dumps,
    fmt_int,
    format_facet_options,
    format_member_view,
    format_ranking,
    format_requirements,
    round_half_up,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("0.5", 1), ("1.4999", 1), ("2.5", 3), ("-2.5", -2), ("-2.6", -3), ("1234567.5", 1234568)],
)
def test_round_half_up(value, expected):
    assert round_half_up(Decimal(value)) == expected


def test_fmt_int_groups_thousands():
    assert fmt_int(1200) == "1,200"
    assert fmt_int(Decimal("-98.4")) == "-98"


def test_format_ranking(tomods_csv):
    rows = member_ranking(load_dataset(tomods_csv), RankingQuery(limit=1))
    text = format_ranking(rows)
    assert text.splitlines() == [
        "rank\tmember\tsales\tqty\treceipts\tlast\tstores",
        "1\tM1\t1,500\t4\t2\t2024-01-07 09:30:00\t2",
    ]
    assert format_ranking([]) == "(no matching members)"


def test_format_member_view(tomods_csv):
    view = member_view(load_dataset(tomods_csv), "M1", FilterSet(store="渋谷店"))
    assert format_member_view(view).splitlines() == [
        "member=M1",
        "receipts=1 sales=300 qty=2 days=1 stores=1 avg=300",
        "[1/1] 2024-01-05 13:05:00 | 渋谷店 | sales=300 qty=2 items=2",
        "  Apple\t100\t1\t33.3%",
        "  Banana\t200\t1\t66.7%",
    ]


def test_format_member_view_without_receipts(tomods_csv):
    view = member_view(load_dataset(tomods_csv), "nobody")
    assert format_member_view(view).splitlines()[-1] == "(no receipts)"


def test_format_facet_options_uses_chain_labels():
    text = format_facet_options({"store": ["渋谷店"], "cat_l": []}, TOMODS)
    assert text.splitlines() == ["店舗 (store): 渋谷店", "大分類 (cat_l): -"]
    assert format_facet_options({}, TOMODS) == "(no member selected)"


def test_format_requirements_lists_missing_columns():
    text = format_requirements(describe_profiles(TOMODS, ["会員番号/匿名会員番号"]))
    first_block = text.split("\n\n")[0]
    assert first_block.startswith("[トモズ] (TOMODS)")
    assert "  missing: 買上日 / 買上時間 / 店舗名 / 商品名 / 買上金額（会員）" in first_block


def test_dumps_member_view_omits_lines(tomods_csv):
    view = member_view(load_dataset(tomods_csv), "M1")
    data = json.loads(dumps(view))
    assert data["member_id"] == "M1"
    assert data["filters"]["scope"] == "detail_only"
    receipt = data["receipts"][0]
    assert "lines" not in receipt
    assert receipt["line_count"] == 1
    assert receipt["items"] == [{"name": "Shampoo", "amount": 1200.0, "qty": 2.0}]


def test_dumps_decimal_amounts_as_numbers():
    data = json.loads(dumps({"whole": Decimal("1E+3"), "part": Decimal("0.1")}))
    assert data == {"whole": 1000, "part": 0.1}
    assert isinstance(data["whole"], int)


def test_dumps_keeps_non_ascii():
    assert "渋谷店" in dumps({"store": "渋谷店"})
