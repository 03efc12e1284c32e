from __future__ import annotations

import pytest

from invoice_export.domain.parser import (
    RecordValidationError,
    parse_bank_transactions,
    parse_incoming_invoices,
    parse_items,
    parse_matched_transactions,
    parse_products,
)


def test_items_default_missing_numbers_to_zero():
    items = parse_items([{"productCode": "A1", "productName": "Widget"}])
    assert items[0].quantity == 0
    assert items[0].unit_price == 0


def test_items_require_name():
    with pytest.raises(RecordValidationError) as exc:
        parse_items([{"productCode": "A1", "productName": "Widget"}, {"productCode": "B2"}])
    assert "items[1]" in str(exc.value)


def test_payload_must_be_array():
    with pytest.raises(RecordValidationError):
        parse_items({"productCode": "A1"})


def test_items_reject_boolean_quantity():
    with pytest.raises(RecordValidationError):
        parse_items([{"productCode": "A1", "productName": "W", "quantity": True}])


def test_products_parse_nested_collections():
    products = parse_products(
        [
            {
                "originalProductName": "bohrmaschine",
                "enrichedTitle": "Pro Drill",
                "description": "Drill",
                "imageUrl": "https://placehold.co/600x400.png",
                "specifications": [{"key": "Power", "value": "500W"}],
                "availability": [{"store": "Amazon", "price": "74,99 €", "inStock": True, "url": "u"}],
            }
        ]
    )
    assert products[0].specifications[0].value == "500W"
    assert products[0].availability[0].in_stock is True


def test_products_require_boolean_stock_flag():
    with pytest.raises(RecordValidationError):
        parse_products(
            [
                {
                    "originalProductName": "x",
                    "enrichedTitle": "x",
                    "description": "x",
                    "imageUrl": "x",
                    "availability": [{"store": "A", "price": "1 €", "inStock": "yes", "url": "u"}],
                }
            ]
        )


def test_products_report_specification_index():
    with pytest.raises(RecordValidationError) as exc:
        parse_products(
            [
                {
                    "originalProductName": "x",
                    "enrichedTitle": "x",
                    "description": "x",
                    "imageUrl": "x",
                    "specifications": [{"key": "Power", "value": "500W"}, {"value": "2 kg"}],
                }
            ]
        )
    assert str(exc.value) == "products[0].specifications[1].key must be a string"

def test_incoming_invoice_with_erp_fields():
    invoices = parse_incoming_invoices(
        [
            {
                "pdfFileName": "r1.pdf",
                "gesamtbetrag": "119,00",
                "istBezahlt": 1,
                "wahrung": "EUR",
                "rechnungspositionen": [{"productCode": "P1", "productName": "Schraube", "quantity": 3, "unitPrice": 1.5}],
            }
        ]
    )
    assert invoices[0].gesamtbetrag == 119.0
    assert invoices[0].ist_bezahlt == 1
    assert invoices[0].rechnungspositionen[0].quantity == 3


def test_bank_transaction_currency_defaults_to_eur():
    txs = parse_bank_transactions([{"id": "t1", "date": "2025-01-18", "description": "Miete", "amount": -850}])
    assert txs[0].currency == "EUR"
    assert txs[0].recipient_or_payer is None


def test_matched_transaction_without_invoice():
    matches = parse_matched_transactions(
        [
            {
                "transaction": {"id": "t1", "date": "2025-01-18", "description": "Miete", "amount": -850},
                "matchedInvoice": None,
                "status": "Unmatched",
            }
        ]
    )
    assert matches[0].matched_invoice is None
    assert matches[0].confidence is None
