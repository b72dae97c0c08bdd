import pytest

from domain.checks import CheckRecord, CheckStatus, Currency
from domain.search import SearchFilters, search_checks, sort_checks


@pytest.fixture
def records():
    return [
        CheckRecord(id=1, company_name="Acme Ltd", check_number="A-1", bank="X", amount_tl=100.0, due_date="2024-06-10"),
        CheckRecord(id=2, company_name="Zenith", bank="Acme Bank", amount_usd=50.0, status=CheckStatus.PAID),
        CheckRecord(id=3, company_name="beta", check_number="B-77", bank="X", amount_eur=20.0,
                    status=CheckStatus.CANCELLED, due_date="2024-05-01"),
        CheckRecord(id=4, company_name="Gamma", bank="NEARESTBANK", amount_tl=900.0, due_date="2024-06-02"),
    ]


class TestSearch:
    def test_query_matches_any_field_case_insensitive(self, records):
        assert [r.id for r in search_checks(records, "acme")] == [1, 2]

    def test_query_matches_check_number(self, records):
        assert [r.id for r in search_checks(records, " b-77 ")] == [3]

    def test_no_query_no_filters_returns_all(self, records):
        assert len(search_checks(records)) == 4

    def test_pending_bucket(self, records):
        result = search_checks(records, filters={"status": CheckStatus.PENDING})
        assert [r.id for r in result] == [1, 4]

    def test_exact_status(self, records):
        result = search_checks(records, filters=SearchFilters(status=CheckStatus.PAID))
        assert [r.id for r in result] == [2]

    def test_currency_filter(self, records):
        assert [r.id for r in search_checks(records, filters={"currency": "tl"})] == [1, 4]
        assert [r.id for r in search_checks(records, filters={"currency": Currency.EUR})] == [3]

    def test_bank_filter_is_exact(self, records):
        assert [r.id for r in search_checks(records, filters={"bank": "X"})] == [1, 3]
        assert search_checks(records, filters={"bank": "x"}) == []

    def test_amount_range_uses_max_amount_without_currency(self, records):
        result = search_checks(records, filters={"min_amount": 40, "max_amount": 100})
        assert [r.id for r in result] == [1, 2]

    def test_amount_range_uses_filtered_currency(self, records):
        result = search_checks(records, filters={"currency": "TL", "min_amount": 500})
        assert [r.id for r in result] == [4]

    def test_filters_and_query_compose(self, records):
        result = search_checks(records, "a", {"status": CheckStatus.PENDING, "bank": "X"})
        assert [r.id for r in result] == [1]

    def test_unknown_status_value_matches_nothing(self, records):
        assert search_checks(records, filters={"status": "KARSILIKSIZ"}) == []

    def test_status_filter_accepts_literal_and_name(self, records):
        assert [r.id for r in search_checks(records, filters={"status": "İPTAL EDİLDİ"})] == [3]
        assert [r.id for r in search_checks(records, filters={"status": "pending"})] == [1, 4]

    def test_unknown_filter_rejected(self, records):
        with pytest.raises(ValueError):
            search_checks(records, filters={"colour": "red"})


class TestSort:
    def test_date_column_missing_first(self, records):
        result = sort_checks(records, "vade_tarihi")
        assert [r.id for r in result] == [2, 3, 4, 1]

    def test_date_column_desc(self, records):
        result = sort_checks(records, "due_date", "desc")
        assert [r.id for r in result] == [1, 4, 3, 2]

    def test_numeric_column(self, records):
        assert [r.id for r in sort_checks(records, "tl")] == [2, 3, 1, 4]

    def test_string_column_case_insensitive(self, records):
        assert [r.id for r in sort_checks(records, "firma_adi")] == [1, 3, 4, 2]

    def test_stable_for_equal_keys(self, records):
        assert [r.id for r in sort_checks(records, "banka")] == [2, 4, 1, 3]
        assert [r.id for r in sort_checks(records, "banka", "desc")] == [1, 3, 4, 2]

    def test_none_sorts_first(self, records):
        assert [r.id for r in sort_checks(records, "cek_no")][:2] == [2, 4]

    def test_does_not_mutate_input(self, records):
        original = list(records)
        sort_checks(records, "id", "desc")
        assert records == original

    def test_invalid_direction(self, records):
        with pytest.raises(ValueError):
            sort_checks(records, "id", "up")
