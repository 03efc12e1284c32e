"""Record types handed to the exporters by the extraction/enrichment pipelines.

Attribute names are snake_case; ``to_dict`` restores the camelCase keys
the pipelines and the JSON exports use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

Scalar = Union[str, int, float, Decimal, bool, None]


@dataclass
class ExtractedItem:
    product_code: str
    product_name: str
    quantity: float = 0
    unit_price: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productCode": self.product_code,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
        }


@dataclass
class Specification:
    key: str
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass
class Availability:
    store: str
    price: str  # formatted, e.g. "74,99 €"
    in_stock: bool
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"store": self.store, "price": self.price, "inStock": self.in_stock, "url": self.url}


@dataclass
class EnrichedProduct:
    original_product_name: str
    enriched_title: str
    description: str
    image_url: str
    specifications: List[Specification] = field(default_factory=list)
    availability: List[Availability] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalProductName": self.original_product_name,
            "enrichedTitle": self.enriched_title,
            "description": self.description,
            "specifications": [s.to_dict() for s in self.specifications],
            "availability": [a.to_dict() for a in self.availability],
            "imageUrl": self.image_url,
        }


@dataclass
class IncomingInvoice:
    pdf_file_name: str
    rechnungsnummer: Optional[str] = None
    datum: Optional[str] = None
    lieferant_name: Optional[str] = None
    lieferant_adresse: Optional[str] = None
    zahlungsziel: Optional[str] = None
    zahlungsart: Optional[str] = None
    gesamtbetrag: Optional[float] = None
    mwst_satz: Optional[str] = None
    rechnungspositionen: List[ExtractedItem] = field(default_factory=list)
    # ERPNext-only fields
    erp_next_invoice_name: Optional[str] = None
    ist_bezahlt: Optional[int] = None  # 0 | 1
    kontenrahmen: Optional[str] = None
    wahrung: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "pdfFileName": self.pdf_file_name,
            "rechnungsnummer": self.rechnungsnummer,
            "datum": self.datum,
            "lieferantName": self.lieferant_name,
            "lieferantAdresse": self.lieferant_adresse,
            "zahlungsziel": self.zahlungsziel,
            "zahlungsart": self.zahlungsart,
            "gesamtbetrag": self.gesamtbetrag,
            "mwstSatz": self.mwst_satz,
            "rechnungspositionen": [i.to_dict() for i in self.rechnungspositionen],
            "erpNextInvoiceName": self.erp_next_invoice_name,
            "istBezahlt": self.ist_bezahlt,
            "kontenrahmen": self.kontenrahmen,
            "wahrung": self.wahrung,
        }
        return {k: v for k, v in out.items() if v is not None}


@dataclass
class BankTransaction:
    id: str
    date: str  # YYYY-MM-DD
    description: str
    amount: float  # negative for payments, positive for income
    currency: str = "EUR"
    recipient_or_payer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "currency": self.currency,
        }
        if self.recipient_or_payer is not None:
            out["recipientOrPayer"] = self.recipient_or_payer
        return out


@dataclass
class MatchedTransaction:
    transaction: BankTransaction
    status: str  # Matched | Suspect | Unmatched | Refund | Rent Payment
    matched_invoice: Optional[IncomingInvoice] = None
    confidence: Optional[float] = None  # 0..1

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "transaction": self.transaction.to_dict(),
            "matchedInvoice": self.matched_invoice.to_dict() if self.matched_invoice else None,
            "status": self.status,
        }
        if self.confidence is not None:
            out["confidence"] = self.confidence
        return out
