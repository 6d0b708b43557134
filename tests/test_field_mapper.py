"""
tests/test_field_mapper.py

Pure-text tests for the locale-aware seller detail mapper.

Coverage
--------
- Line parsing: blank lines, first-separator split, empty labels
- Address continuation across unlabeled lines
- Disclaimer sentence ends an address
- VAT identifier heuristic
- Localized label reduction to profile fields
- Customer service phone fallback
- Determinism
"""

from __future__ import annotations

import pytest

from seller_scraper.scraping.field_mapper import (
    build_profile,
    find_customer_service_phone,
    looks_like_vat,
    map_profile_fields,
    parse_detail_lines,
)


# ---------------------------------------------------------------------------
# parse_detail_lines
# ---------------------------------------------------------------------------


class TestParseDetailLines:
    def test_address_continuation_stops_at_next_label(self) -> None:
        text = "\n".join(["Business Address: 1 High St", "London", "UK", "VAT: GB123456789"])

        details = parse_detail_lines(text)

        assert details["Business Address"] == "1 High St, London, UK"
        assert details["VAT"] == "GB123456789"

    def test_address_label_on_its_own_line(self) -> None:
        text = "Business Address:\n10 Rue de Rivoli\n75001\nParis\nFR\nEmail: x@y.fr"

        details = parse_detail_lines(text)

        assert details["Business Address"] == "10 Rue de Rivoli, 75001, Paris, FR"
        assert details["Email"] == "x@y.fr"

    def test_disclaimer_sentence_ends_address(self) -> None:
        text = (
            "Customer Services Address:\n2 Low Rd\nLeeds\n"
            "This seller has agreed to comply with the terms of use."
        )

        details = parse_detail_lines(text)

        assert details["Customer Services Address"] == "2 Low Rd, Leeds"

    def test_blank_lines_are_ignored_inside_address(self) -> None:
        text = "Geschäftsadresse:\n\n  Hauptstr. 5  \n\n10115 Berlin\n\nDE\n"

        details = parse_detail_lines(text)

        assert details["Geschäftsadresse"] == "Hauptstr. 5, 10115 Berlin, DE"

    def test_splits_on_first_separator_only(self) -> None:
        details = parse_detail_lines("Website: https://example.com")

        assert details["Website"] == "https://example.com"

    def test_single_line_label_without_value_is_dropped(self) -> None:
        details = parse_detail_lines("Phone number:\nEmail: a@b.com")

        assert "Phone number" not in details
        assert details["Email"] == "a@b.com"

    def test_empty_label_and_unlabeled_lines_are_skipped(self) -> None:
        details = parse_detail_lines(": orphan value\nDetailed Seller Information\n\n")

        assert details == {}

    def test_generic_labels_are_kept_when_valued(self) -> None:
        details = parse_detail_lines("Registered office: Dublin\nOpening hours:")

        assert details == {"Registered office": "Dublin"}


# ---------------------------------------------------------------------------
# VAT heuristic
# ---------------------------------------------------------------------------


class TestLooksLikeVat:
    @pytest.mark.parametrize(
        "value",
        ["GB123456789", "DE 123456789", "123456789", "ESB12345678", "IT01234567890"],
    )
    def test_identifiers_are_kept(self, value: str) -> None:
        assert looks_like_vat(value) is True

    def test_explanatory_prose_is_rejected(self) -> None:
        assert looks_like_vat("This seller has chosen not to provide a VAT number.") is False

    def test_short_text_passes_on_length_alone(self) -> None:
        assert looks_like_vat("not provided") is True


# ---------------------------------------------------------------------------
# map_profile_fields
# ---------------------------------------------------------------------------


class TestMapProfileFields:
    def test_english_labels(self) -> None:
        mapped = map_profile_fields(
            {
                "Business Name": "Acme Ltd",
                "Business Type": "Privately-owned business",
                "Trade Register Number": "0123456",
                "VAT Number": "GB123456789",
                "Phone number": "+44 20 0000 0000",
                "Email": "hello@acme.example",
                "Business Address": "1 High St, London, UK",
                "Customer Services Address": "2 Low Rd, Leeds",
            }
        )

        assert mapped == {
            "business_name": "Acme Ltd",
            "business_type": "Privately-owned business",
            "trade_register_number": "0123456",
            "vat_number": "GB123456789",
            "phone": "+44 20 0000 0000",
            "email": "hello@acme.example",
            "business_address": "1 High St, London, UK",
            "customer_service_address": "2 Low Rd, Leeds",
        }

    def test_german_labels(self) -> None:
        mapped = map_profile_fields(
            {
                "Firmenname": "Muster GmbH",
                "Handelsregisternummer": "HRB 12345",
                "USt-IdNr.": "DE123456789",
                "Telefonnummer": "+49 30 123456",
                "E-Mail-Adresse": "info@muster.example",
                "Geschäftsadresse": "Hauptstr. 5, 10115 Berlin, DE",
                "Kundenservice-Adresse": "Nebenstr. 1, Berlin",
            }
        )

        assert mapped["business_name"] == "Muster GmbH"
        assert mapped["trade_register_number"] == "HRB 12345"
        assert mapped["vat_number"] == "DE123456789"
        assert mapped["phone"] == "+49 30 123456"
        assert mapped["email"] == "info@muster.example"
        assert mapped["business_address"] == "Hauptstr. 5, 10115 Berlin, DE"
        assert mapped["customer_service_address"] == "Nebenstr. 1, Berlin"

    def test_prose_vat_value_is_emptied_but_present(self) -> None:
        mapped = map_profile_fields(
            {"VAT Number": "This seller has chosen not to provide their VAT registration details."}
        )

        assert mapped == {"vat_number": ""}

    def test_unknown_labels_are_dropped(self) -> None:
        assert map_profile_fields({"Opening hours": "9-5"}) == {}


# ---------------------------------------------------------------------------
# Phone fallback and profile assembly
# ---------------------------------------------------------------------------


class TestBuildProfile:
    def test_fallback_phone_backfills_missing_phone(self) -> None:
        profile = build_profile(
            seller_name="Acme",
            details_text="Business Name: Acme Ltd",
            body_text="Contact\nCustomer Service Phone: +44 1632 960000\nFooter",
        )

        assert profile.phone == "+44 1632 960000"
        assert profile.customer_service_phone == ""

    def test_fallback_phone_recorded_separately_when_different(self) -> None:
        profile = build_profile(
            seller_name="Acme",
            details_text="Phone number: +44 20 0000 0000",
            body_text="Customer Service Phone: +44 1632 960000",
        )

        assert profile.phone == "+44 20 0000 0000"
        assert profile.customer_service_phone == "+44 1632 960000"

    def test_fallback_phone_equal_to_phone_is_not_duplicated(self) -> None:
        profile = build_profile(
            seller_name="Acme",
            details_text="Phone number: +44 20 0000 0000",
            body_text="customer service phone +44 20 0000 0000",
        )

        assert profile.customer_service_phone == ""

    def test_missing_details_block_yields_empty_fields(self) -> None:
        profile = build_profile(seller_name="Acme", details_text=None)

        assert profile.seller_name == "Acme"
        assert profile.business_name == ""
        assert profile.vat_number == ""
        assert profile.business_address == ""

    def test_find_customer_service_phone_absent(self) -> None:
        assert find_customer_service_phone("Nothing to see here") is None

    def test_mapping_is_deterministic(self) -> None:
        text = "Business Name: Acme\nVAT: GB123456789\nBusiness Address: 1 High St\nLondon"

        first = build_profile(seller_name="Acme", details_text=text)
        second = build_profile(seller_name="Acme", details_text=text)

        assert first == second
