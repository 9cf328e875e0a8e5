"""
Domain: Payment classification.

A sale's payment is recorded as a compact snapshot string such as
``"CASH|Efectivo Caja 1: $100.00, TRANSFER|Bac David: $50.00"``. Each
comma-separated clause decodes into one PaymentComponent.

Rules captured here:
- Every component belongs to exactly one coarse PaymentType.
- The PaymentType → display label mapping is fixed and read-only.
- Tag text that is not a known PaymentType keeps its raw text as the label.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class PaymentType(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return PAYMENT_TYPE_LABELS[self]

    @staticmethod
    def parse(value: str) -> Optional["PaymentType"]:
        """Resolve a tag such as ``"CASH"``; returns None for unknown tags."""

        try:
            return PaymentType(value.strip().upper())
        except ValueError:
            return None


PAYMENT_TYPE_LABELS: Mapping[PaymentType, str] = MappingProxyType({
    PaymentType.CASH: "Efectivo",
    PaymentType.CARD: "Tarjeta / POS",
    PaymentType.TRANSFER: "Transferencia",
    PaymentType.OTHER: "Otros",
})


@dataclass(frozen=True, slots=True)
class PaymentComponent:
    """
    One decoded clause of a payment snapshot.

    ``type_label`` is the grouping label used in per-type breakdowns. It is
    the fixed label for known types, or the raw tag text when a clause was
    tagged with something outside the enumeration (``type_key`` is then
    ``PaymentType.OTHER``).
    """

    type_key: PaymentType
    method_name: str
    amount: Decimal
    type_label: str = ""

    def __post_init__(self) -> None:
        if not self.type_label:
            object.__setattr__(self, "type_label", self.type_key.label)

    @property
    def is_cash(self) -> bool:
        return self.type_key is PaymentType.CASH


__all__ = [
    "PAYMENT_TYPE_LABELS",
    "PaymentComponent",
    "PaymentType",
]
