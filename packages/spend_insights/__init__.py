"""Public interface for the ``spend_insights`` package.

Symbol re-exports only: statement parsing (``parse_statement``,
``create_document``), category and merchant helpers, the aggregation views
and the domain models.
"""

from .aggregations import (
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
from .builder import create_document, parse_statement
from .categories import CANONICAL_CATEGORIES, category_color, normalize_category
from .export import export_csv
from .fields import parse_amount, parse_date
from .merchants import extract_merchant
from .models import (
    CategoryTotal,
    DateRange,
    Document,
    MerchantTotal,
    MonthlyTotal,
    Record,
    SpendingSummary,
)

__all__ = [
    # Pipeline
    "create_document",
    "parse_statement",
    "parse_amount",
    "parse_date",
    # Categories / merchants
    "CANONICAL_CATEGORIES",
    "category_color",
    "normalize_category",
    "extract_merchant",
    # Views
    "all_records",
    "category_totals",
    "filter_by_date_range",
    "list_categories",
    "monthly_spending",
    "relative_date_range",
    "search_records",
    "spending_summary",
    "top_merchants",
    "export_csv",
    # Models
    "CategoryTotal",
    "DateRange",
    "Document",
    "MerchantTotal",
    "MonthlyTotal",
    "Record",
    "SpendingSummary",
]
