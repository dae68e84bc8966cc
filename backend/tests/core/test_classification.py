"""Classification code tests — base-code extraction, year coercion, ordering."""

from arsip.core.classification import (
    base_code, classification_sort_key, coerce_years, compare_codes,
)


def test_base_code_strips_suffix():
    assert base_code("045/IV") == "045"
    assert base_code(" 000.5.1 / A ") == "000.5.1"


def test_base_code_without_suffix():
    assert base_code("000.5.1") == "000.5.1"


def test_base_code_empty():
    assert base_code(None) == ""
    assert base_code("") == ""


def test_coerce_years():
    assert coerce_years(5) == 5
    assert coerce_years(" 3 ") == 3
    assert coerce_years("permanent") is None
    assert coerce_years(None) is None
    assert coerce_years(True) is None


def test_numeric_segments_compare_numerically():
    assert compare_codes("000.5.2", "000.5.10") < 0


def test_missing_segment_counts_as_zero():
    assert compare_codes("000.5", "000.5.0") == 0
    assert compare_codes("000.5", "000.5.1") < 0


def test_suffix_breaks_ties():
    assert compare_codes("045/I", "045/IV") < 0
    assert compare_codes("045", "045/I") < 0


def test_non_numeric_segments_sort_after_numeric():
    assert compare_codes("KP.1", "900.1") > 0


def test_sort_key_orders_a_listing():
    codes = ["045/IV", "000.1.2", "000.10", "000.2", "012"]
    assert sorted(codes, key=classification_sort_key) == [
        "000.1.2", "000.2", "000.10", "012", "045/IV",
    ]
