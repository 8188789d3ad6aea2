from app.models.base import Base, TimestampMixin
from app.models.catalog import BrandAlias, PriceListEntry
from app.models.inquiry import Inquiry, InquiryItem, InquiryStatus
from app.models.quotation import MatchStatus, Quotation, QuotationItem, QuotationStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "BrandAlias",
    "PriceListEntry",
    "Inquiry",
    "InquiryItem",
    "InquiryStatus",
    "Quotation",
    "QuotationItem",
    "QuotationStatus",
    "MatchStatus",
]
