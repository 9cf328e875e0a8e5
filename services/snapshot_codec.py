"""
Payment snapshot codec.

Decodes the payment snapshot attached to every sale into PaymentComponents,
and renders the same snapshot for display.

Grammar:
    snapshot := clause (", " clause)*
    clause   := label [": " amount]
    label    := TYPE "|" method_name      (tagged)
              | method_name               (legacy, type inferred from the name)
    amount   := ["$"] digits with optional "," thousand separators and "." decimals

Failure semantics:
- Nothing in this module raises for snapshot content.
- A clause whose label is empty or whose amount is not a finite number below
  10**16 is skipped (logged at DEBUG).

Omitted amounts:
- A snapshot made of a single clause without an amount is a legacy
  single-method sale; the clause takes the sale total.
- In a multi-clause snapshot an omitted amount counts as 0, so the sale total
  is never attributed twice.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from domain.payment import PaymentComponent, PaymentType
from domain.sale import SaleRecord

logger = logging.getLogger(__name__)

CLAUSE_SEPARATOR = ", "
AMOUNT_SEPARATOR = ": "
TYPE_SEPARATOR = "|"

# Largest accepted amount exponent (amounts below 10**16).
MAX_AMOUNT_EXPONENT = 15

# Heuristics for untagged legacy labels, checked in this order.
# Short tokens are matched as whole words ("pos" must not match "deposito").
_LEGACY_TYPE_PATTERNS = (
    (PaymentType.CASH, re.compile(r"efectivo|caja|cash")),
    (PaymentType.CARD, re.compile(r"tarjeta|visa|mastercard|card|\bpos\b")),
    (
        PaymentType.TRANSFER,
        re.compile(
            r"transfer|banco|cuenta|dep[oó]sito|banrural|promerica|g&t|\bbac\b|\bbam\b|\bbi\b"
        ),
    ),
)


@dataclass(frozen=True, slots=True)
class _RawClause:
    type_tag: Optional[str]
    method_name: str
    raw_amount: Optional[str]


def _split_clauses(snapshot: Optional[str]) -> List[_RawClause]:
    """Tokenize a snapshot into clauses with a non-empty method name."""

    if not snapshot or not snapshot.strip():
        return []

    clauses: List[_RawClause] = []
    for part in snapshot.split(CLAUSE_SEPARATOR):
        raw_label, separator, raw_amount = part.partition(AMOUNT_SEPARATOR)
        if not separator:
            # "Efectivo" or "Efectivo:" both carry no amount.
            raw_label = raw_label.rstrip().rstrip(":")

        type_tag: Optional[str] = None
        if TYPE_SEPARATOR in raw_label:
            type_tag, _, method_name = raw_label.partition(TYPE_SEPARATOR)
            type_tag = type_tag.strip()
        else:
            method_name = raw_label
        method_name = method_name.strip()

        if not method_name:
            logger.debug("Skipping snapshot clause without method name", extra={"clause": part})
            continue

        amount_text = raw_amount.strip() if separator else ""
        clauses.append(_RawClause(type_tag or None, method_name, amount_text or None))
    return clauses


def infer_payment_type(method_name: str) -> PaymentType:
    """
    Classify an untagged legacy method name.

    Examples:
        >>> infer_payment_type("Efectivo Caja 1")
        <PaymentType.CASH: 'CASH'>
        >>> infer_payment_type("POS Visanet")
        <PaymentType.CARD: 'CARD'>
        >>> infer_payment_type("Banrural Monetaria")
        <PaymentType.TRANSFER: 'TRANSFER'>
        >>> infer_payment_type("Vale de regalo")
        <PaymentType.OTHER: 'OTHER'>
    """

    lowered = method_name.lower()
    for payment_type, pattern in _LEGACY_TYPE_PATTERNS:
        if pattern.search(lowered):
            return payment_type
    return PaymentType.OTHER


def parse_amount(raw_amount: str) -> Optional[Decimal]:
    """
    Parse ``"$1,250.50"`` style amounts.

    Returns None when the text is not a finite number, uses "_" digit
    grouping, or is 10**16 or larger in magnitude. Exponent notation
    ("1e5") is accepted.
    """

    text = raw_amount.replace("$", "").replace(",", "").strip()
    if "_" in text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    if amount and amount.adjusted() > MAX_AMOUNT_EXPONENT:
        return None
    return amount


def _resolve_type(type_tag: Optional[str], method_name: str) -> tuple[PaymentType, str]:
    """Return (type_key, type_label) for a clause."""

    if type_tag is None:
        payment_type = infer_payment_type(method_name)
        return payment_type, payment_type.label

    payment_type = PaymentType.parse(type_tag)
    if payment_type is None:
        # Unknown tags are grouped under their own text.
        return PaymentType.OTHER, type_tag
    return payment_type, payment_type.label


def decode_snapshot(
    snapshot: Optional[str],
    fallback_total: Optional[Decimal] = None,
) -> List[PaymentComponent]:
    """
    Decode a payment snapshot into its components.

    Args:
        snapshot: Snapshot text (None or blank yields no components)
        fallback_total: Sale total used when a single-clause snapshot omits its amount

    Returns:
        Components in clause order. Never raises for malformed input.

    Example:
        decode_snapshot("CASH|Efectivo: $50.00, CARD|Visa: $25.50")
        # [PaymentComponent(CASH, "Efectivo", Decimal("50.00")),
        #  PaymentComponent(CARD, "Visa", Decimal("25.50"))]
    """

    clauses = _split_clauses(snapshot)
    components: List[PaymentComponent] = []

    for clause in clauses:
        if clause.raw_amount is None:
            if len(clauses) == 1 and fallback_total is not None:
                amount: Optional[Decimal] = fallback_total
            else:
                amount = Decimal("0")
        else:
            amount = parse_amount(clause.raw_amount)
            if amount is None:
                logger.debug(
                    "Skipping snapshot clause with unparseable amount",
                    extra={"method_name": clause.method_name, "raw_amount": clause.raw_amount},
                )
                continue

        type_key, type_label = _resolve_type(clause.type_tag, clause.method_name)
        components.append(PaymentComponent(
            type_key=type_key,
            method_name=clause.method_name,
            amount=amount,
            type_label=type_label,
        ))

    return components


def decode_sale(sale: SaleRecord) -> List[PaymentComponent]:
    """Decode a sale's snapshot, using its total for a lone amount-less clause."""

    return decode_snapshot(sale.payment_snapshot, fallback_total=sale.total_amount)


def clean_snapshot(snapshot: Optional[str]) -> str:
    """
    Render a snapshot for display: type tags dropped, amounts untouched.

    Example:
        >>> clean_snapshot("CASH|Efectivo: $50.00, TRANSFER|Bac David: $10.00")
        'Efectivo: $50.00, Bac David: $10.00'
    """

    if not snapshot:
        return ""

    rendered: List[str] = []
    for part in snapshot.split(CLAUSE_SEPARATOR):
        raw_label, separator, raw_amount = part.partition(AMOUNT_SEPARATOR)
        if TYPE_SEPARATOR in raw_label:
            raw_label = raw_label.partition(TYPE_SEPARATOR)[2]
        rendered.append(f"{raw_label.strip()}{separator}{raw_amount}")
    return CLAUSE_SEPARATOR.join(rendered)


def list_payment_methods(sales: Iterable[SaleRecord]) -> List[str]:
    """
    Distinct display method names across the ledger, sorted alphabetically.

    Used to build filter options that line up with what the method filter
    matches (the cleaned snapshot).
    """

    names = {
        clause.method_name
        for sale in sales
        for clause in _split_clauses(sale.payment_snapshot)
    }
    return sorted(names, key=lambda name: (name.casefold(), name))


__all__ = [
    "clean_snapshot",
    "decode_sale",
    "decode_snapshot",
    "infer_payment_type",
    "list_payment_methods",
    "parse_amount",
]
