from app.inquiry_intake.normalizers import normalize_catalog, normalize_extraction, validate_extraction
from app.inquiry_intake.brand_resolver import BrandResolver
from app.inquiry_intake.price_matcher import PriceListMatcher
from app.inquiry_intake.persistence import PersistenceOrchestrator, SavedInquiry

__all__ = [
    "BrandResolver",
    "PriceListMatcher",
    "PersistenceOrchestrator",
    "SavedInquiry",
    "normalize_catalog",
    "normalize_extraction",
    "validate_extraction",
]
