"""Declarative export dialects.

A dialect is a table of columns. Each column has a header and an
extractor; nested columns name the sub-collection their extractor reads
from. Constant columns use ``literal`` so the flattener never needs to
special-case them.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..domain.models import Scalar
from ..domain.normalize import percent_or_na, posting_date, split_amount
from ..domain.parser import (
    parse_bank_transactions,
    parse_incoming_invoices,
    parse_items,
    parse_matched_transactions,
    parse_products,
)
from .escape import escape_csv_field, escape_tsv_field, raw_field

Extractor = Callable[[Any], Scalar]

CSV_MIME = "text/csv;charset=utf-8;"
TSV_MIME = "text/tab-separated-values;charset=utf-8;"
JSON_MIME = "application/json;charset=utf-8;"


class UnknownDialectError(KeyError):
    pass


class Expansion(Enum):
    """How base columns behave on the extra rows of a nested record."""

    BLANK_CONTINUATION = "blank_continuation"
    REPEAT_BASE = "repeat_base"


def lookup(record: Any, path: str) -> Any:
    """Read ``path`` (dotted for nested objects) from a mapping or an object."""
    current = record
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def field(path: str) -> Extractor:
    return lambda record: lookup(record, path)


def literal(value: Scalar) -> Extractor:
    return lambda _record: value


@dataclass(frozen=True)
class Column:
    header: str
    extract: Extractor
    collection: Optional[str] = None


@dataclass(frozen=True)
class RecordKind:
    """A record type that can be parsed from JSON and exported as JSON.

    ``json_row`` turns one record into the flat object written by the JSON
    export; without it the record's own ``to_dict`` is used.
    """

    name: str
    parse: Callable[[Any], List[Any]]
    json_file_name: str
    json_row: Optional[Callable[[Any], Dict[str, Any]]] = None


@dataclass(frozen=True)
class Dialect:
    name: str
    kind: str
    delimiter: str
    columns: Tuple[Column, ...]
    escape: Callable[[Scalar], str]
    file_name: str
    mime_type: str
    expansion: Expansion = Expansion.BLANK_CONTINUATION

    @property
    def header(self) -> List[str]:
        return [c.header for c in self.columns]

    @property
    def collections(self) -> Tuple[str, ...]:
        seen: List[str] = []
        for c in self.columns:
            if c.collection and c.collection not in seen:
                seen.append(c.collection)
        return tuple(seen)


# --------------- Column tables ---------------

_ITEM_COLUMNS = (
    ("Product Code", field("product_code")),
    ("Product Name", field("product_name")),
    ("Quantity", field("quantity")),
    ("Unit Price", field("unit_price")),
)

_ARTIKEL_COLUMNS = (
    Column("Artikel-Code", field("product_code")),
    Column("Artikelname", field("product_name")),
    Column("Artikelgruppe", literal("Produkte")),
    Column("Standardmaßeinheit", literal("Stk")),
)

_PRODUCT_COLUMNS = (
    Column("Original Product Name", field("original_product_name")),
    Column("Enriched Title", field("enriched_title")),
    Column("Description", field("description")),
    Column("Image URL", field("image_url")),
    Column("Spec Key", field("key"), collection="specifications"),
    Column("Spec Value", field("value"), collection="specifications"),
    Column("Store", field("store"), collection="availability"),
    Column("Price", field("price"), collection="availability"),
    Column("In Stock", field("in_stock"), collection="availability"),
    Column("URL", field("url"), collection="availability"),
)

_POSITION_COLUMNS = (
    ("Pos. Produkt Code", "Item Code", field("product_code")),
    ("Pos. Produkt Name", "Item Name", field("product_name")),
    ("Pos. Menge", "Qty", field("quantity")),
    ("Pos. Einzelpreis", "Rate", field("unit_price")),
)

_INCOMING_COLUMNS = (
    Column("PDF Datei", field("pdf_file_name")),
    Column("Rechnungsnummer", field("rechnungsnummer")),
    Column("Datum", field("datum")),
    Column("Lieferant Name", field("lieferant_name")),
    Column("Lieferant Adresse", field("lieferant_adresse")),
    Column("Zahlungsziel", field("zahlungsziel")),
    Column("Zahlungsart", field("zahlungsart")),
    Column("Gesamtbetrag", field("gesamtbetrag")),
    Column("MwSt-Satz", field("mwst_satz")),
) + tuple(Column(de, ex, collection="rechnungspositionen") for de, _en, ex in _POSITION_COLUMNS)


def _is_paid(invoice: Any) -> Scalar:
    paid = lookup(invoice, "ist_bezahlt")
    return 0 if paid is None else paid


_ERPNEXT_INVOICE_COLUMNS = (
    Column("Supplier Invoice No", field("rechnungsnummer")),
    Column("Posting Date", lambda inv: posting_date(lookup(inv, "datum"))),
    Column("Supplier", field("lieferant_name")),
    Column("Supplier Address", field("lieferant_adresse")),
    Column("Payment Terms Template", field("zahlungsziel")),
    Column("Payment Method", field("zahlungsart")),
    Column("Grand Total", field("gesamtbetrag")),
    Column("Total Taxes and Charges", field("mwst_satz")),
    Column("Is Paid", _is_paid),
    Column("Accounts Payable", field("kontenrahmen")),
    Column("Currency", lambda inv: lookup(inv, "wahrung") or "EUR"),
    Column("PDF File Name", field("pdf_file_name")),
) + tuple(Column(en, ex, collection="rechnungspositionen") for _de, en, ex in _POSITION_COLUMNS)

_BANK_COLUMNS = (
    Column("ID", field("id")),
    Column("Date", field("date")),
    Column("Description", field("description")),
    Column("Amount", field("amount")),
    Column("Currency", field("currency")),
    Column("Recipient/Payer", field("recipient_or_payer")),
)

_BANK_REC_COLUMNS = (
    Column("Datum", field("date")),
    Column("Einzahlung", lambda tx: split_amount(lookup(tx, "amount") or 0)[0]),
    Column("Auszahlung", lambda tx: split_amount(lookup(tx, "amount") or 0)[1]),
    Column("Beschreibung", field("description")),
    Column("Referenznummer", lambda tx: lookup(tx, "recipient_or_payer") or ""),
    Column("Bankkonto", literal("HAUPTKONTO")),
    Column("Währung", field("currency")),
)

_MATCHED_COLUMNS = (
    Column("Tx Date", field("transaction.date")),
    Column("Tx Description", field("transaction.description")),
    Column("Tx Amount", field("transaction.amount")),
    Column("Tx Currency", field("transaction.currency")),
    Column("Tx Payer/Recipient", field("transaction.recipient_or_payer")),
    Column("Match Status", field("status")),
    Column("Match Confidence", lambda m: percent_or_na(lookup(m, "confidence"))),
    Column("Matched Invoice PDF", field("matched_invoice.pdf_file_name")),
    Column("Matched Invoice No", field("matched_invoice.rechnungsnummer")),
    Column("Matched Invoice Supplier", field("matched_invoice.lieferant_name")),
    Column("Matched Invoice Date", field("matched_invoice.datum")),
    Column("Matched Invoice Total", field("matched_invoice.gesamtbetrag")),
    Column("Matched Invoice Currency", field("matched_invoice.wahrung")),
)


def json_key(header: str, *, keep_slash: bool = False) -> str:
    """'Recipient/Payer' -> 'recipient_payer'; 'Match Confidence' -> 'match_confidence'."""
    if not keep_slash:
        header = header.replace("/", "_")
    return re.sub(r"\s+", "_", header).lower()


def header_row(columns: Tuple[Column, ...], *, keep_slash: bool = False) -> Callable[[Any], Dict[str, Any]]:
    """JSON row builder keyed by the column headers, values as the columns extract them."""
    keys = [json_key(c.header, keep_slash=keep_slash) for c in columns]

    def build(record: Any) -> Dict[str, Any]:
        return {k: c.extract(record) for k, c in zip(keys, columns)}

    return build


RECORD_KINDS: Dict[str, RecordKind] = {
    k.name: k
    for k in (
        RecordKind("items", parse_items, "extracted_invoice_data.json"),
        RecordKind("products", parse_products, "produktkatalog.json"),
        RecordKind("incoming-invoices", parse_incoming_invoices, "extracted_incoming_invoices.json"),
        RecordKind(
            "bank-transactions", parse_bank_transactions, "extracted_bank_transactions.json",
            json_row=header_row(_BANK_COLUMNS),
        ),
        # Matcher keys only collapse whitespace: 'Tx Payer/Recipient' -> 'tx_payer/recipient'.
        RecordKind(
            "matched-transactions", parse_matched_transactions, "bank_matcher_results.json",
            json_row=header_row(_MATCHED_COLUMNS, keep_slash=True),
        ),
    )
}


def _csv(name: str, kind: str, columns: Tuple[Column, ...], file_name: str, **kw: Any) -> Dialect:
    return Dialect(name, kind, ",", columns, escape_csv_field, file_name, CSV_MIME, **kw)


def _tsv(name: str, kind: str, columns: Tuple[Column, ...], file_name: str, **kw: Any) -> Dialect:
    escape = kw.pop("escape", escape_tsv_field)
    return Dialect(name, kind, "\t", columns, escape, file_name, TSV_MIME, **kw)


_item_columns = tuple(Column(h, ex) for h, ex in _ITEM_COLUMNS)

DIALECTS: Dict[str, Dialect] = {
    d.name: d
    for d in (
        _csv("invoice-items-csv", "items", _item_columns, "extracted_invoice_data.csv"),
        # Written raw; callers paste this into spreadsheets.
        _tsv("invoice-items-tsv", "items", _item_columns, "extracted_invoice_data.tsv", escape=raw_field),
        _csv("artikel-csv", "items", _ARTIKEL_COLUMNS, "artikel_export.csv"),
        _csv("product-catalog-csv", "products", _PRODUCT_COLUMNS, "produktkatalog.csv"),
        _csv(
            "incoming-invoices-csv", "incoming-invoices", _INCOMING_COLUMNS,
            "extracted_incoming_invoices.csv", expansion=Expansion.REPEAT_BASE,
        ),
        _tsv(
            "incoming-invoices-tsv", "incoming-invoices", _INCOMING_COLUMNS,
            "extracted_incoming_invoices.tsv", expansion=Expansion.REPEAT_BASE,
        ),
        _csv(
            "incoming-invoices-erpnext-csv", "incoming-invoices", _ERPNEXT_INVOICE_COLUMNS,
            "erpnext_purchase_invoices.csv", expansion=Expansion.REPEAT_BASE,
        ),
        _tsv(
            "incoming-invoices-erpnext-tsv", "incoming-invoices", _ERPNEXT_INVOICE_COLUMNS,
            "erpnext_purchase_invoices.tsv", expansion=Expansion.REPEAT_BASE,
        ),
        _csv("bank-transactions-csv", "bank-transactions", _BANK_COLUMNS, "extracted_bank_transactions.csv"),
        _tsv("bank-transactions-tsv", "bank-transactions", _BANK_COLUMNS, "extracted_bank_transactions.tsv"),
        _csv("erpnext-bank-rec-csv", "bank-transactions", _BANK_REC_COLUMNS, "erpnext_bank_reconciliation.csv"),
        _csv("matched-transactions-csv", "matched-transactions", _MATCHED_COLUMNS, "bank_matcher_results.csv"),
        _tsv("matched-transactions-tsv", "matched-transactions", _MATCHED_COLUMNS, "bank_matcher_results.tsv"),
    )
}


def get_dialect(name: str) -> Dialect:
    try:
        return DIALECTS[name]
    except KeyError:
        raise UnknownDialectError(name) from None


def get_record_kind(name: str) -> RecordKind:
    try:
        return RECORD_KINDS[name]
    except KeyError:
        raise UnknownDialectError(name) from None
