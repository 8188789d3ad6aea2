"""Normalization of AI-extracted inquiries into drafts. Pure functions, no DB or Claude."""

import re
from typing import Any

from app.schemas.extraction import RawCustomer, RawDelivery, RawExtraction
from app.schemas.inquiry import Draft, DraftLine, RejectedLine, RejectionReason

_CATALOG_SEPARATORS = re.compile(r"[\s_-]+")
_LEADING_INTEGER = re.compile(r"^[+-]?\d+")
_REPLY_PREFIXES = re.compile(r"^\s*((re|fw|fwd)\s*:\s*)+", re.IGNORECASE)


def coerce_text(value: Any, fallback: str = "") -> str:
    """Render an arbitrary extracted value as trimmed text.

    ``None`` becomes empty, booleans render as ``true``/``false`` and integral
    floats drop their fractional part, so ``5.0`` and ``"5"`` read the same.
    """
    if value is None:
        rendered = ""
    elif isinstance(value, bool):
        rendered = "true" if value else "false"
    elif isinstance(value, float) and value.is_integer():
        rendered = str(int(value))
    else:
        rendered = str(value)
    return rendered.strip() or fallback


def optional_text(value: Any) -> str | None:
    return coerce_text(value) or None


def parse_quantity(value: Any) -> int | None:
    """Parse a positive base-10 quantity from the leading digits of the value.

    ``"12 pcs"`` gives 12 and ``"7.5"`` gives 7. Zero, negatives and values
    without leading digits give ``None``.
    """
    match = _LEADING_INTEGER.match(coerce_text(value))
    if match is None:
        return None
    quantity = int(match.group(0))
    return quantity if quantity > 0 else None


def normalize_catalog(catalog: str) -> str:
    return _CATALOG_SEPARATORS.sub("", catalog.upper())


def normalize_subject(subject: str) -> str:
    """Lower-case a subject and strip any chain of re:/fw:/fwd: prefixes."""
    return _REPLY_PREFIXES.sub("", coerce_text(subject).lower()).strip()


def _normalize_line(index: int, item: Any) -> DraftLine | RejectedLine:
    if not isinstance(item, dict):
        return RejectedLine(index=index, reasons=[RejectionReason.NOT_AN_OBJECT])

    brand = coerce_text(item.get("brand"))
    catalog = coerce_text(item.get("catalog_number"))
    quantity = parse_quantity(item.get("quantity"))

    reasons = []
    if not brand:
        reasons.append(RejectionReason.MISSING_BRAND)
    if not catalog:
        reasons.append(RejectionReason.MISSING_CATALOG_NUMBER)
    if quantity is None:
        reasons.append(RejectionReason.INVALID_QUANTITY)
    if reasons:
        return RejectedLine(index=index, reasons=reasons)

    return DraftLine(
        brand_input=brand.upper(),
        catalog_upper=catalog.upper(),
        normalized_catalog=normalize_catalog(catalog),
        quantity=quantity,
    )


def validate_extraction(raw: RawExtraction) -> tuple[Draft, list[RejectedLine]]:
    """Build a Draft from a raw extraction and report every dropped line.

    Never raises: missing or malformed values become empty or absent fields,
    and invalid lines are collected instead of failing the whole payload.
    """
    customer = raw.customer or RawCustomer()
    delivery = raw.delivery or RawDelivery()

    lines: list[DraftLine] = []
    rejected: list[RejectedLine] = []
    for index, item in enumerate(raw.items or []):
        result = _normalize_line(index, item)
        if isinstance(result, DraftLine):
            lines.append(result)
        else:
            rejected.append(result)

    draft = Draft(
        customer_name=coerce_text(customer.name),
        customer_country=coerce_text(customer.country),
        billing_address=optional_text(customer.billing_address),
        contact_person=optional_text(customer.contact_person),
        contact_phone=optional_text(customer.contact_phone),
        contact_email=optional_text(customer.contact_email),
        delivery_company_name=optional_text(delivery.company_name),
        delivery_address=optional_text(delivery.address),
        delivery_contact_person=optional_text(delivery.contact_person),
        delivery_phone=optional_text(delivery.phone),
        delivery_email=optional_text(delivery.email),
        lines=tuple(lines),
    )
    return draft, rejected


def normalize_extraction(raw: RawExtraction) -> Draft:
    draft, _ = validate_extraction(raw)
    return draft
