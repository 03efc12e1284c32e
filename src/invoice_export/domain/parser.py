from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..logging import get_logger
from .models import (
    Availability,
    BankTransaction,
    EnrichedProduct,
    ExtractedItem,
    IncomingInvoice,
    MatchedTransaction,
    Specification,
)


LOG = get_logger("parser")

T = TypeVar("T")


class RecordValidationError(Exception):
    pass


def _require_obj(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise RecordValidationError(f"{where} must be an object")
    return value


def _str(obj: Dict[str, Any], key: str, where: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise RecordValidationError(f"{where}.{key} must be a string")
    return v


def _opt_str(obj: Dict[str, Any], key: str) -> Optional[str]:
    v = obj.get(key)
    if v is None:
        return None
    return v if isinstance(v, str) else str(v)


def _number(obj: Dict[str, Any], key: str, where: str, default: Optional[float] = None) -> Optional[float]:
    v = obj.get(key)
    if v is None:
        return default
    if isinstance(v, bool):
        raise RecordValidationError(f"{where}.{key} must be a number, not a boolean")
    if isinstance(v, (int, float)):
        return v
    if isinstance(v, str) and v.strip():
        try:
            return float(v.strip().replace(",", "."))
        except ValueError:
            raise RecordValidationError(f"{where}.{key} is not numeric: {v!r}")
    raise RecordValidationError(f"{where}.{key} must be a number")


def _parse_list(payload: Any, name: str, parse_one: Callable[[Dict[str, Any], str], T]) -> List[T]:
    if not isinstance(payload, list):
        raise RecordValidationError(f"{name} payload must be a JSON array")
    records = [parse_one(_require_obj(raw, f"{name}[{idx}]"), f"{name}[{idx}]") for idx, raw in enumerate(payload)]
    LOG.debug("Parsed %d %s record(s)", len(records), name)
    return records


def _item(obj: Dict[str, Any], where: str) -> ExtractedItem:
    # Quantity and unit price default to 0 like the processed line-item schema.
    return ExtractedItem(
        product_code=_str(obj, "productCode", where),
        product_name=_str(obj, "productName", where),
        quantity=_number(obj, "quantity", where, default=0),
        unit_price=_number(obj, "unitPrice", where, default=0),
    )


def _product(obj: Dict[str, Any], where: str) -> EnrichedProduct:
    specs_in = obj.get("specifications") or []
    avail_in = obj.get("availability") or []
    if not isinstance(specs_in, list) or not isinstance(avail_in, list):
        raise RecordValidationError(f"{where}: specifications and availability must be arrays")

    specs = []
    for i, raw in enumerate(specs_in):
        sub = f"{where}.specifications[{i}]"
        s = _require_obj(raw, sub)
        specs.append(Specification(key=_str(s, "key", sub), value=_str(s, "value", sub)))

    avails = []
    for i, raw in enumerate(avail_in):
        sub = f"{where}.availability[{i}]"
        a = _require_obj(raw, sub)
        in_stock = a.get("inStock")
        if not isinstance(in_stock, bool):
            raise RecordValidationError(f"{sub}.inStock must be a boolean")
        avails.append(
            Availability(
                store=_str(a, "store", sub),
                price=_str(a, "price", sub),
                in_stock=in_stock,
                url=_str(a, "url", sub),
            )
        )

    return EnrichedProduct(
        original_product_name=_str(obj, "originalProductName", where),
        enriched_title=_str(obj, "enrichedTitle", where),
        description=_str(obj, "description", where),
        image_url=_str(obj, "imageUrl", where),
        specifications=specs,
        availability=avails,
    )


def _incoming_invoice(obj: Dict[str, Any], where: str) -> IncomingInvoice:
    lines_in = obj.get("rechnungspositionen") or []
    if not isinstance(lines_in, list):
        raise RecordValidationError(f"{where}.rechnungspositionen must be an array")
    lines = [
        _item(_require_obj(raw, f"{where}.rechnungspositionen[{i}]"), f"{where}.rechnungspositionen[{i}]")
        for i, raw in enumerate(lines_in)
    ]
    paid = obj.get("istBezahlt")
    if paid is not None and paid not in (0, 1):
        raise RecordValidationError(f"{where}.istBezahlt must be 0 or 1")
    return IncomingInvoice(
        pdf_file_name=_str(obj, "pdfFileName", where),
        rechnungsnummer=_opt_str(obj, "rechnungsnummer"),
        datum=_opt_str(obj, "datum"),
        lieferant_name=_opt_str(obj, "lieferantName"),
        lieferant_adresse=_opt_str(obj, "lieferantAdresse"),
        zahlungsziel=_opt_str(obj, "zahlungsziel"),
        zahlungsart=_opt_str(obj, "zahlungsart"),
        gesamtbetrag=_number(obj, "gesamtbetrag", where),
        mwst_satz=_opt_str(obj, "mwstSatz"),
        rechnungspositionen=lines,
        erp_next_invoice_name=_opt_str(obj, "erpNextInvoiceName"),
        ist_bezahlt=int(paid) if paid is not None else None,
        kontenrahmen=_opt_str(obj, "kontenrahmen"),
        wahrung=_opt_str(obj, "wahrung"),
    )


def _bank_transaction(obj: Dict[str, Any], where: str) -> BankTransaction:
    amount = _number(obj, "amount", where)
    if amount is None:
        raise RecordValidationError(f"{where}.amount required")
    return BankTransaction(
        id=_str(obj, "id", where),
        date=_str(obj, "date", where),
        description=_str(obj, "description", where),
        amount=amount,
        currency=_opt_str(obj, "currency") or "EUR",
        recipient_or_payer=_opt_str(obj, "recipientOrPayer"),
    )


def _matched_transaction(obj: Dict[str, Any], where: str) -> MatchedTransaction:
    tx = _bank_transaction(_require_obj(obj.get("transaction"), f"{where}.transaction"), f"{where}.transaction")
    inv_raw = obj.get("matchedInvoice")
    invoice = None
    if inv_raw is not None:
        invoice = _incoming_invoice(_require_obj(inv_raw, f"{where}.matchedInvoice"), f"{where}.matchedInvoice")
    confidence = _number(obj, "confidence", where)
    return MatchedTransaction(
        transaction=tx,
        status=_str(obj, "status", where),
        matched_invoice=invoice,
        confidence=confidence,
    )


def parse_items(payload: Any) -> List[ExtractedItem]:
    """Parse a JSON array of extracted invoice line items."""
    return _parse_list(payload, "items", _item)


def parse_products(payload: Any) -> List[EnrichedProduct]:
    """Parse a JSON array of enriched products with specs and availability."""
    return _parse_list(payload, "products", _product)


def parse_incoming_invoices(payload: Any) -> List[IncomingInvoice]:
    return _parse_list(payload, "invoices", _incoming_invoice)


def parse_bank_transactions(payload: Any) -> List[BankTransaction]:
    return _parse_list(payload, "transactions", _bank_transaction)


def parse_matched_transactions(payload: Any) -> List[MatchedTransaction]:
    return _parse_list(payload, "matches", _matched_transaction)
