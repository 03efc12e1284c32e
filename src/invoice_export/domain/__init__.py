"""Record types and JSON parsing for the exporters."""

from .models import (
    Availability,
    BankTransaction,
    EnrichedProduct,
    ExtractedItem,
    IncomingInvoice,
    MatchedTransaction,
    Scalar,
    Specification,
)
from .parser import (
    RecordValidationError,
    parse_bank_transactions,
    parse_incoming_invoices,
    parse_items,
    parse_matched_transactions,
    parse_products,
)

__all__ = [
    "Availability",
    "BankTransaction",
    "EnrichedProduct",
    "ExtractedItem",
    "IncomingInvoice",
    "MatchedTransaction",
    "Scalar",
    "Specification",
    "RecordValidationError",
    "parse_bank_transactions",
    "parse_incoming_invoices",
    "parse_items",
    "parse_matched_transactions",
    "parse_products",
]
