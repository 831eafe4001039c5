from loyalty_receipts.normalizers import load_dataset
from loyalty_receipts.receipts import build_receipts
from loyalty_receipts.summary import facet_options, list_members, summarize_receipts


def test_list_members_sorted_distinct(tomods_csv):
    ds = load_dataset(tomods_csv)
    assert list_members(ds) == ["M1", "M2", "M3"]


def test_list_members_search_and_limit(tomods_csv):
    ds = load_dataset(tomods_csv)
    assert list_members(ds, search="2") == ["M2"]
    assert list_members(ds, search=" M ", limit=2) == ["M1", "M2"]
    assert list_members(ds, limit=0) == ["M1", "M2", "M3"]


def test_facet_options_for_tomods_member(tomods_csv):
    ds = load_dataset(tomods_csv)
    options = facet_options(ds, "M1")
    assert list(options) == ["store", "maker", "cat_l", "cat_m", "cat_s"]
    assert options["store"] == ["新宿店", "渋谷店"]
    assert options["maker"] == ["MakerA", "MakerB", "MakerC"]
    assert options["cat_l"] == ["日用品", "食品"]


def test_facet_options_for_summit_member(summit_csv):
    ds = load_dataset(summit_csv)
    options = facet_options(ds, "S1")
    assert list(options) == ["store", "line", "corner", "cat_l", "cat_m"]
    assert options["line"] == ["納豆", "豆腐"]


def test_facet_options_empty_member(tomods_csv):
    assert facet_options(load_dataset(tomods_csv), "") == {}


def test_summarize_receipts(tomods_csv):
    ds = load_dataset(tomods_csv)
    m1 = build_receipts(ln for ln in ds.lines if ln.member_id == "M1")
    summary = summarize_receipts(m1)
    assert summary.receipts == 2
    assert summary.sales == 1500
    assert summary.qty == 4
    assert summary.avg_ticket == 750
    assert summary.days == 2
    assert summary.stores == 2


def test_summarize_nothing():
    summary = summarize_receipts([])
    assert summary.receipts == 0
    assert summary.avg_ticket == 0.0
    assert summary.days == 0
