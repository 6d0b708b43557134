"""
Locale-aware mapping of seller detail text blocks to profile fields.

Seller profile pages render a "detailed seller information" box as loosely
structured `Label: value` lines whose labels are localized per storefront and
whose addresses wrap across several unlabeled lines. Everything here works on
plain text so it can be exercised without a browser.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from seller_scraper.domain.sellers import SellerProfile

LABEL_SEPARATOR = ":"
DISCLAIMER_PREFIX = "this seller"

ADDRESS_LABELS: tuple[str, ...] = (
    "business address",
    "customer services address",
    "geschäftsadresse",
    "kundenservice-adresse",
    "adresse",
    "dirección comercial",
    "indirizzo commerciale",
    "adres firmy",
    "iş adresi",
    "事業所の住所",
)

SINGLE_LINE_LABELS: tuple[str, ...] = (
    "vat",
    "ust",
    "iva",
    "nip",
    "kdv",
    "trade register",
    "handelsregister",
    "registro mercantil",
    "phone",
    "telefon",
    "email",
    "e-mail",
    "business type",
    "business name",
)

# Checked in order; the first field whose labels match a raw label wins.
PROFILE_FIELD_LABELS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("business_name", ("business name", "firmenname", "nombre comercial", "ragione sociale")),
    ("business_type", ("business type", "unternehmenstyp", "tipo de empresa")),
    ("trade_register_number", ("trade register", "handelsregister", "registro mercantil")),
    ("vat_number", ("vat", "ust", "iva", "nip", "kdv")),
    ("phone", ("phone", "telefon", "teléfono", "電話")),
    ("email", ("email", "e-mail", "メール")),
    ("business_address", ("business address", "geschäftsadresse", "dirección comercial")),
    ("customer_service_address", ("customer service", "kundenservice")),
)

VAT_PREFIXED_REGEX = re.compile(r"^[A-Z]{0,3}\d{5,}")
VAT_DIGITS_REGEX = re.compile(r"^\d{5,}")
VAT_MAX_PROSE_LENGTH = 30

CUSTOMER_SERVICE_PHONE_REGEX = re.compile(
    r"Customer Service Phone[:\s]+([^\n]+)",
    flags=re.IGNORECASE,
)


SHORT_LABEL_MAX_LENGTH = 3


def _label_matches(label: str, candidate: str) -> bool:
    # Short tax tokens must start a word: "ust" matches "USt-IdNr" but not "customer".
    if candidate.isascii() and len(candidate) <= SHORT_LABEL_MAX_LENGTH:
        return re.search(rf"(?<!\w){re.escape(candidate)}", label) is not None
    return candidate in label


def _contains_any(label: str, candidates: Sequence[str]) -> bool:
    return any(_label_matches(label, candidate) for candidate in candidates)


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_detail_lines(text: str) -> dict[str, str]:
    """
    Parse a seller details block into a raw `label -> value` mapping.

    Address labels absorb the following unlabeled lines (comma-joined) until a
    labeled line or the trailing "This seller ..." disclaimer is reached.
    """

    lines = split_lines(text)
    details: dict[str, str] = {}

    for index, line in enumerate(lines):
        if LABEL_SEPARATOR not in line:
            continue
        raw_label, value = line.split(LABEL_SEPARATOR, 1)
        label = raw_label.strip()
        value = value.strip()
        if not label:
            continue

        lowered = label.lower()
        if _contains_any(lowered, ADDRESS_LABELS):
            parts = [value] if value else []
            for continuation in lines[index + 1 :]:
                if LABEL_SEPARATOR in continuation:
                    break
                if continuation.lower().startswith(DISCLAIMER_PREFIX):
                    break
                parts.append(continuation)
            details[label] = ", ".join(parts)
        elif _contains_any(lowered, SINGLE_LINE_LABELS):
            if value:
                details[label] = value
        elif value:
            details[label] = value

    return details


def looks_like_vat(value: str) -> bool:
    """
    Return whether `value` is plausibly a tax identifier rather than prose.
    """

    return (
        VAT_PREFIXED_REGEX.match(value) is not None
        or VAT_DIGITS_REGEX.match(value) is not None
        or len(value) < VAT_MAX_PROSE_LENGTH
    )


def map_profile_fields(details: dict[str, str]) -> dict[str, str]:
    """
    Reduce raw localized labels to canonical profile field names.

    A VAT value that fails the identifier heuristic is kept as an empty string
    so consumers can tell "stated but unusable" from "not stated".
    """

    mapped: dict[str, str] = {}
    for raw_label, value in details.items():
        lowered = raw_label.lower()
        for field_name, labels in PROFILE_FIELD_LABELS:
            if not _contains_any(lowered, labels):
                continue
            if field_name == "vat_number" and not looks_like_vat(value):
                value = ""
            mapped[field_name] = value
            break
    return mapped


def find_customer_service_phone(body_text: str) -> str | None:
    match = CUSTOMER_SERVICE_PHONE_REGEX.search(body_text or "")
    if match is None:
        return None
    phone = match.group(1).strip()
    return phone or None


def build_profile(
    *,
    seller_name: str,
    details_text: str | None,
    body_text: str = "",
) -> SellerProfile:
    """
    Build a seller profile from the details block and the full page text.
    """

    fields = map_profile_fields(parse_detail_lines(details_text)) if details_text else {}

    fallback_phone = find_customer_service_phone(body_text)
    if fallback_phone:
        if not fields.get("phone"):
            fields["phone"] = fallback_phone
        elif fallback_phone != fields["phone"]:
            fields["customer_service_phone"] = fallback_phone

    return SellerProfile(seller_name=seller_name, **fields)
