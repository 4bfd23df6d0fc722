"""Tests for price, unit, text and URL normalization helpers."""

import pytest

from pricecrawl.scrapers.utils import (
    DEFAULT_UNIT,
    absolute_url,
    browser_headers,
    clean_text,
    extract_unit,
    find_unit_label,
    parse_price,
)


# ============================================================================
# TESTS: PRICE PARSING
# ============================================================================

class TestParsePrice:
    """Tests for parse_price."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("45,000원", 45000),
            ("1,234,567원", 1234567),
            ("₩ 12,900", 12900),
            ("판매가 : 350000", 350000),
            ("0원", 0),
        ],
    )
    def test_digits_only(self, text, expected):
        """Every non-digit character is discarded."""
        assert parse_price(text) == expected

    @pytest.mark.parametrize("text", ["", None, "가격문의", "원"])
    def test_no_digits_is_zero(self, text):
        assert parse_price(text) == 0

    def test_decimal_point_is_not_special(self):
        """Separators of any kind are stripped, including a decimal point."""
        assert parse_price("12.50") == 1250


# ============================================================================
# TESTS: UNIT INFERENCE
# ============================================================================

class TestExtractUnit:
    """Tests for extract_unit and find_unit_label."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("포세린 타일 600x600 (1㎡)", "㎡"),
            ("실크 벽지 1롤", "롤"),
            ("wallpaper Roll", "롤"),
            ("욕실 악세사리 세트", "세트"),
            ("타카핀 10EA", "개"),
            ("몰딩 2.4M", "M"),
            ("몰딩 2미터", "M"),
            ("데코타일 1박스", "박스"),
            ("석고보드 1장", "장"),
            ("실리콘 1통", "통"),
            ("타일본드 20kg", "kg"),
        ],
    )
    def test_first_matching_pattern_wins(self, text, expected):
        assert extract_unit(text) == expected

    def test_area_is_checked_before_length(self):
        assert extract_unit("강마루 3.3㎡ 1M") == "㎡"

    def test_lowercase_m_reads_as_length(self):
        """Length matching is case-insensitive, so "12mm" yields M."""
        assert extract_unit("강마루 12mm") == "M"

    @pytest.mark.parametrize("text", ["", None, "양변기 투피스"])
    def test_defaults_to_piece(self, text):
        assert extract_unit(text) == DEFAULT_UNIT == "개"

    def test_unit_label(self):
        assert find_unit_label("<span>단위 : 1롤</span>") == "롤"
        assert find_unit_label("단위:평") == "평"
        assert find_unit_label("<span>판매가</span>") is None
        assert find_unit_label(None) is None


# ============================================================================
# TESTS: TEXT AND URL HELPERS
# ============================================================================

class TestTextHelpers:
    """Tests for clean_text, absolute_url and request headers."""

    def test_clean_text_collapses_whitespace(self):
        assert clean_text("  강마루 \n\t 12mm  ") == "강마루 12mm"
        assert clean_text(None) == ""

    @pytest.mark.parametrize(
        "href, expected",
        [
            ("//cdn.example.com/a.jpg", "https://cdn.example.com/a.jpg"),
            ("https://other.com/b.jpg", "https://other.com/b.jpg"),
            ("/web/product/1.jpg", "https://shop.example.com/web/product/1.jpg"),
            ("web/product/1.jpg", "https://shop.example.com/web/product/1.jpg"),
            ("javascript:void(0)", None),
            ("", None),
            (None, None),
        ],
    )
    def test_absolute_url(self, href, expected):
        assert absolute_url("https://shop.example.com", href) == expected

    def test_browser_headers_are_copies(self):
        headers = browser_headers(referer="https://zzro.kr/")
        headers["X-Test"] = "1"

        assert headers["Referer"] == "https://zzro.kr/"
        assert "X-Test" not in browser_headers()
        assert "ko-KR" in browser_headers()["Accept-Language"]
