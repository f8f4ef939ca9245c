"""
nlu/entities.py

Typed results of a classification.

Each intent family carries its own entity record so callers can rely on
attribute names instead of probing a free-form dict. ``as_dict()`` renders
the camelCase shape used on the wire (absent fields are omitted).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Union


UNKNOWN_INTENT = "unknown"


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class SendMoneyEntities:
    amount: Optional[float] = None
    currency: Optional[str] = None
    recipient: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return _compact({"amount": self.amount, "currency": self.currency, "recipient": self.recipient})


@dataclass(frozen=True)
class DepositEntities:
    amount: Optional[float] = None
    currency: Optional[str] = None
    payment_method: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return _compact({"amount": self.amount, "currency": self.currency, "paymentMethod": self.payment_method})


@dataclass(frozen=True)
class CheckRatesEntities:
    from_currency: Optional[str] = None
    to_currency: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return _compact({"fromCurrency": self.from_currency, "toCurrency": self.to_currency})


@dataclass(frozen=True)
class RecipientsEntities:
    action: str = "list"

    def as_dict(self) -> Dict[str, Any]:
        return {"action": self.action}


@dataclass(frozen=True)
class NoEntities:
    def as_dict(self) -> Dict[str, Any]:
        return {}


Entities = Union[SendMoneyEntities, DepositEntities, CheckRatesEntities, RecipientsEntities, NoEntities]

_WIRE_KEYS = {
    "fromCurrency": "from_currency",
    "toCurrency": "to_currency",
    "paymentMethod": "payment_method",
}


def entities_from_dict(intent: str, data: Optional[Dict[str, Any]]) -> Entities:
    """
    Build the typed entity record for ``intent`` from a loose dict, such as
    one returned by the remote classifier. Unknown keys are dropped and
    unparseable amounts become None.
    """
    data = {_WIRE_KEYS.get(k, k): v for k, v in (data or {}).items()}
    record_type = {
        "send_money": SendMoneyEntities,
        "deposit": DepositEntities,
        "check_rates": CheckRatesEntities,
        "manage_recipients": RecipientsEntities,
    }.get(intent, NoEntities)

    kwargs: Dict[str, Any] = {}
    for f in fields(record_type):
        if data.get(f.name) is None:
            continue
        value = data[f.name]
        if f.name == "amount":
            try:
                value = float(str(value).replace(",", "").lstrip("$"))
            except ValueError:
                continue
        elif f.name in ("currency", "from_currency", "to_currency"):
            value = str(value).upper()
        else:
            value = str(value)
        kwargs[f.name] = value
    return record_type(**kwargs)


@dataclass(frozen=True)
class RecognizedIntent:
    intent: str
    confidence: float = 0.0
    entities: Entities = field(default_factory=NoEntities)
    matched_pattern: Optional[str] = None
    source: str = "local"

    @property
    def is_unknown(self) -> bool:
        return self.intent == UNKNOWN_INTENT

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "intent": self.intent,
            "confidence": self.confidence,
            "entities": self.entities.as_dict(),
        }
        if self.matched_pattern is not None:
            payload["matchedPattern"] = self.matched_pattern
        return payload


def unknown_intent() -> RecognizedIntent:
    return RecognizedIntent(intent=UNKNOWN_INTENT, confidence=0.0, entities=NoEntities())
