import pytest

from loyalty_receipts.profiles import (
    REGISTRY,
    SUMMIT,
    TOMODS,
    ChainProfile,
    ProfileRegistry,
    available_facets,
    column_requirements,
    describe_profiles,
    resolve_profile,
)

TOMODS_HEADERS = ["会員番号/匿名会員番号", "買上日", "買上時間", "店舗名", "商品名", "買上金額（会員）"]
SUMMIT_HEADERS = ["匿名会員番号", "買上日", "買上時間", "店舗名", "商品名", "買上金額（会員)"]


def test_member_plus_amount_selects_chain():
    assert resolve_profile(TOMODS_HEADERS) is TOMODS
    assert resolve_profile(SUMMIT_HEADERS) is SUMMIT


def test_member_plus_quantity_is_a_strong_signal():
    headers = ["匿名会員番号", "買上点数（会員)"]
    assert resolve_profile(headers) is SUMMIT


def test_strong_signal_beats_registry_order():
    # TOMODS member column alone (weak) vs SUMMIT member + amount (strong).
    headers = ["会員番号/匿名会員番号", "匿名会員番号", "買上金額（会員)"]
    assert resolve_profile(headers) is SUMMIT


def test_member_column_alone_selects_in_registry_order():
    assert resolve_profile(["匿名会員番号", "買上日"]) is SUMMIT
    assert resolve_profile(["会員番号/匿名会員番号", "匿名会員番号"]) is TOMODS


def test_unrecognized_headers_fall_back_to_default():
    assert resolve_profile(["foo", "bar"]) is REGISTRY.default
    assert REGISTRY.default is TOMODS


def test_missing_required_lists_every_absent_column():
    assert TOMODS.missing_required(["会員番号/匿名会員番号", "買上日"]) == [
        "買上時間",
        "店舗名",
        "商品名",
        "買上金額（会員）",
    ]


def test_column_rejects_unknown_logical_field():
    with pytest.raises(KeyError):
        TOMODS.column("receipt_no")


def test_registry_rejects_unknown_keys():
    with pytest.raises(ValueError):
        ProfileRegistry(profiles=(TOMODS,), strong_order=("SUMMIT",), default_key="TOMODS")
    with pytest.raises(ValueError):
        ProfileRegistry(profiles=(TOMODS, TOMODS), strong_order=(), default_key="TOMODS")


def test_registry_iterates_profiles_generically():
    extra = ChainProfile(
        key="OTHER",
        name="Other",
        member="card",
        date="day",
        time="clock",
        store_name="shop",
        item="product",
        amount="yen",
    )
    registry = ProfileRegistry(
        profiles=(TOMODS, extra), strong_order=("OTHER", "TOMODS"), default_key="TOMODS"
    )
    assert registry.resolve(["card", "yen"]) is extra
    assert resolve_profile(["card"], registry) is extra


def test_available_facets_depend_on_header_presence():
    headers = [*TOMODS_HEADERS, "メーカー/取引先", "JANコード", "コーナー名"]
    # コーナー名 is not a TOMODS column, so it never becomes a TOMODS facet.
    assert available_facets(TOMODS, headers) == ("maker", "jan")
    assert available_facets(SUMMIT, headers) == ("corner", "jan")


def test_labels_follow_the_chain():
    assert SUMMIT.label("cat_l") == "部門"
    assert SUMMIT.label("cat_m") == "カテゴリ"
    assert TOMODS.label("cat_l") == "大分類"
    assert TOMODS.label("store") == "店舗"


def test_column_requirements_against_headers():
    req = column_requirements(TOMODS, TOMODS_HEADERS[:-1])
    assert req.key == "TOMODS"
    assert req.required == tuple(TOMODS_HEADERS)
    assert "買上点数（会員）" in req.optional
    assert req.missing == ("買上金額（会員）",)
    assert "買上金額（会員）" not in req.present
    assert req.notices == TOMODS.notices


def test_column_requirements_without_headers_reports_no_presence():
    req = column_requirements(SUMMIT)
    assert req.present == ()
    assert req.missing == ()
    # SUMMIT exports no small category and no maker.
    assert all(c for c in req.optional)
    assert len(req.optional) == len(set(req.optional))


def test_describe_profiles_puts_active_first():
    reqs = describe_profiles(SUMMIT)
    assert [r.key for r in reqs] == ["SUMMIT", "TOMODS"]
    assert [r.key for r in describe_profiles()] == ["TOMODS", "SUMMIT"]
