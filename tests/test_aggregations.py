import re
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from spend_insights.aggregations import (
    all_records,
    category_totals,
    filter_by_date_range,
    list_categories,
    monthly_spending,
    relative_date_range,
    search_records,
    spending_summary,
    top_merchants,
)
from spend_insights.models import CategoryTotal, DateRange, Document, MerchantTotal, Record

# ---- Helpers -----------------------------------------------------------------

_counter = iter(range(10_000))


def _rec(
    description: str,
    amount: str,
    category: str = "Other",
    on: date = date(2024, 3, 1),
    *,
    city: str | None = None,
    state: str | None = None,
    document_id: str = "doc",
) -> Record:
    return Record(
        id=f"r{next(_counter)}",
        date=on,
        description=description,
        amount=Decimal(amount),
        category=category,
        city=city,
        state=state,
        document_id=document_id,
    )


RECORDS: tuple[Record, ...] = (
    _rec("WHOLE FOODS 102", "30.00", "Groceries", date(2024, 3, 20)),
    _rec("SAFEWAY 1811", "20.50", "Groceries", date(2024, 2, 2)),
    _rec("STARBUCKS #1234", "12.50", "Restaurant", date(2024, 3, 15), city="SEATTLE", state="WA"),
    _rec("STARBUCKS #99", "7.25", "Restaurant", date(2023, 12, 30)),
    _rec("SHELL OIL 5741", "45.10", "Gas & Fuel", date(2024, 1, 9), city="AUSTIN", state="TX"),
    _rec("NETFLIX.COM", "15.49", "Subscriptions", date(2024, 3, 3)),
)


# ---- Category totals ---------------------------------------------------------


def test_category_totals_groups_and_sorts_descending():
    totals = category_totals(RECORDS)

    assert totals[0] == CategoryTotal(
        category="Groceries", total=Decimal("50.50"), count=2, color="#f97316"
    )
    assert [t.category for t in totals] == ["Groceries", "Gas & Fuel", "Restaurant", "Subscriptions"]
    assert all(a.total >= b.total for a, b in zip(totals, totals[1:]))


def test_category_totals_preserve_grand_total():
    totals = category_totals(RECORDS)
    assert sum(t.total for t in totals) == sum(r.amount for r in RECORDS)
    assert sum(t.count for t in totals) == len(RECORDS)


def test_category_totals_tie_breaks_by_name():
    records = [_rec("B", "10", "Travel"), _rec("A", "10", "Health")]
    assert [t.category for t in category_totals(records)] == ["Health", "Travel"]


def test_category_totals_empty():
    assert category_totals([]) == []


# ---- Monthly spending --------------------------------------------------------


def test_monthly_spending_keys_and_order():
    months = monthly_spending(RECORDS)

    assert [m.month for m in months] == ["2023-12", "2024-01", "2024-02", "2024-03"]
    assert all(re.fullmatch(r"\d{4}-\d{2}", m.month) for m in months)
    march = months[-1]
    assert march.total == Decimal("30.00") + Decimal("12.50") + Decimal("15.49")


def test_monthly_spending_sorts_chronologically_across_years():
    records = [_rec("X", "1", on=date(2024, 10, 1)), _rec("Y", "1", on=date(2024, 9, 1)),
               _rec("Z", "1", on=date(999, 1, 1))]
    assert [m.month for m in monthly_spending(records)] == ["0999-01", "2024-09", "2024-10"]


# ---- Top merchants -----------------------------------------------------------


def test_top_merchants_buckets_by_prefix_and_limits():
    top = top_merchants(RECORDS, 2)

    assert top == [
        MerchantTotal(name="SHELL OIL", total=Decimal("45.10"), count=1),
        MerchantTotal(name="WHOLE FOODS", total=Decimal("30.00"), count=1),
    ]


def test_top_merchants_merges_same_bucket():
    top = top_merchants(RECORDS, 10)
    starbucks = next(m for m in top if m.name == "STARBUCKS #")
    assert starbucks.count == 2
    assert starbucks.total == Decimal("19.75")


def test_top_merchants_default_limit_is_ten():
    records = [_rec(f"SHOP {chr(65 + i)} 1", str(i + 1)) for i in range(15)]
    assert len(top_merchants(records)) == 10


@pytest.mark.parametrize("limit", [0, -3])
def test_top_merchants_non_positive_limit_is_empty(limit: int):
    assert top_merchants(RECORDS, limit) == []


def test_top_merchants_limit_above_bucket_count_returns_all():
    top = top_merchants(RECORDS, 100)
    assert len(top) == 5  # two STARBUCKS rows share a bucket
    assert all(a.total >= b.total for a, b in zip(top, top[1:]))
    assert sum(m.count for m in top) <= len(RECORDS)


# ---- Date range filter -------------------------------------------------------


def test_filter_by_date_range_is_inclusive():
    kept = filter_by_date_range(RECORDS, date(2024, 2, 2), date(2024, 3, 15))
    assert {r.description for r in kept} == {"SAFEWAY 1811", "STARBUCKS #1234", "NETFLIX.COM"}


def test_filter_by_date_range_open_bounds():
    assert filter_by_date_range(RECORDS) == list(RECORDS)
    assert {r.description for r in filter_by_date_range(RECORDS, start=date(2024, 3, 15))} == {
        "WHOLE FOODS 102",
        "STARBUCKS #1234",
    }
    assert [r.description for r in filter_by_date_range(RECORDS, end=date(2023, 12, 31))] == [
        "STARBUCKS #99"
    ]


def test_filter_by_date_range_is_idempotent_and_does_not_mutate():
    source = list(RECORDS)
    once = filter_by_date_range(source, date(2024, 1, 1), date(2024, 3, 10))
    twice = filter_by_date_range(once, date(2024, 1, 1), date(2024, 3, 10))
    assert once == twice
    assert source == list(RECORDS)
    assert once is not source


def test_relative_date_range_presets():
    today = date(2024, 3, 31)
    assert relative_date_range("7d", today=today) == DateRange(date(2024, 3, 25), today)
    assert relative_date_range("30d", today=today) == DateRange(date(2024, 3, 2), today)
    assert relative_date_range("90d", today=today) == DateRange(date(2024, 1, 2), today)
    assert relative_date_range("all", today=today) == DateRange(None, None)


@pytest.mark.parametrize("preset", ["7d", "30d", "90d"])
def test_relative_date_range_covers_exactly_n_days(preset: str):
    today = date(2024, 3, 31)
    days = int(preset.removesuffix("d"))
    first = today - timedelta(days=days - 1)
    records = [
        _rec("TODAY", "1", on=today),
        _rec("FIRST DAY", "1", on=first),
        _rec("TOO OLD", "1", on=today - timedelta(days=days)),
    ]

    bounds = relative_date_range(preset, today=today)
    kept = filter_by_date_range(records, bounds.start, bounds.end)

    assert [r.description for r in kept] == ["TODAY", "FIRST DAY"]


def test_relative_date_range_unknown_preset():
    with pytest.raises(ValueError, match="unknown date range preset"):
        relative_date_range("1y")


# ---- Summary / listings ------------------------------------------------------


def test_spending_summary():
    summary = spending_summary(RECORDS)
    assert summary.total == Decimal("130.84")
    assert summary.count == 6
    assert summary.average == Decimal("21.81")
    assert summary.top_category is not None
    assert summary.top_category.category == "Groceries"


def test_spending_summary_empty():
    summary = spending_summary([])
    assert summary.total == 0
    assert summary.count == 0
    assert summary.average == 0
    assert summary.top_category is None


def test_all_records_flattens_documents_newest_first():
    now = datetime.now(UTC)
    doc_a = Document(id="a", filename="a.csv", uploaded_at=now, records=RECORDS[:2])
    doc_b = Document(id="b", filename="b.csv", uploaded_at=now, records=RECORDS[2:])
    flat = all_records([doc_a, doc_b])
    assert len(flat) == len(RECORDS)
    assert [r.date for r in flat] == sorted((r.date for r in RECORDS), reverse=True)


def test_list_categories_sorted_distinct():
    assert list_categories(RECORDS) == ["Gas & Fuel", "Groceries", "Restaurant", "Subscriptions"]


def test_search_records_text_matches_description_category_and_location():
    assert {r.description for r in search_records(RECORDS, text="starbucks")} == {
        "STARBUCKS #1234",
        "STARBUCKS #99",
    }
    assert [r.description for r in search_records(RECORDS, text="gas &")] == ["SHELL OIL 5741"]
    assert [r.description for r in search_records(RECORDS, text="seattle")] == ["STARBUCKS #1234"]
    assert [r.description for r in search_records(RECORDS, text="tx")] == ["SHELL OIL 5741"]


def test_search_records_category_and_amount_bounds():
    out = search_records(
        RECORDS, category="Groceries", min_amount=Decimal("20.50"), max_amount=Decimal("25")
    )
    assert [r.description for r in out] == ["SAFEWAY 1811"]


def test_search_records_sorting():
    by_amount = search_records(RECORDS, sort_by="amount", descending=False)
    assert [r.amount for r in by_amount] == sorted(r.amount for r in RECORDS)

    by_category = search_records(RECORDS, sort_by="category", descending=False)
    assert [r.category for r in by_category] == sorted(r.category for r in RECORDS)

    by_date = search_records(RECORDS)
    assert by_date[0].description == "WHOLE FOODS 102"


def test_search_records_unknown_sort_field():
    with pytest.raises(ValueError):
        search_records(RECORDS, sort_by="merchant")  # type: ignore[arg-type]
