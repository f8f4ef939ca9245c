"""
context/conversation_state.py

Per-session slot-filling state.

ConversationState is immutable; every transition builds a new value. At
most one slot is expected at a time and a pending action is always set
while a slot is expected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class DialogueState(str, Enum):
    IDLE = "idle"
    AWAITING_AMOUNT = "awaiting_amount"
    AWAITING_RECIPIENT = "awaiting_recipient"


class PendingAction(str, Enum):
    SEND = "send"
    DEPOSIT = "deposit"


def _frozen(data: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class ConversationState:
    expecting_amount: bool = False
    expecting_recipient: bool = False
    pending_action: Optional[PendingAction] = None
    partial_data: Mapping[str, Any] = field(default_factory=lambda: _frozen(None))

    def __post_init__(self) -> None:
        if self.expecting_amount and self.expecting_recipient:
            raise ValueError("only one slot may be expected at a time")
        if (self.expecting_amount or self.expecting_recipient) and self.pending_action is None:
            raise ValueError("a pending action is required while a slot is expected")
        if not isinstance(self.partial_data, MappingProxyType):
            object.__setattr__(self, "partial_data", _frozen(self.partial_data))

    @classmethod
    def idle(cls) -> "ConversationState":
        return cls()

    @classmethod
    def awaiting_amount(cls, action: PendingAction, partial: Optional[Mapping[str, Any]] = None) -> "ConversationState":
        return cls(expecting_amount=True, pending_action=action, partial_data=_frozen(partial))

    @classmethod
    def awaiting_recipient(cls, partial: Optional[Mapping[str, Any]] = None) -> "ConversationState":
        return cls(expecting_recipient=True, pending_action=PendingAction.SEND, partial_data=_frozen(partial))

    @property
    def dialogue_state(self) -> DialogueState:
        if self.expecting_amount:
            return DialogueState.AWAITING_AMOUNT
        if self.expecting_recipient:
            return DialogueState.AWAITING_RECIPIENT
        return DialogueState.IDLE

    @property
    def is_idle(self) -> bool:
        return self.dialogue_state is DialogueState.IDLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.dialogue_state.value,
            "expectingAmount": self.expecting_amount,
            "expectingRecipient": self.expecting_recipient,
            "pendingAction": self.pending_action.value if self.pending_action else None,
            "partialData": dict(self.partial_data),
        }


@dataclass(frozen=True)
class PendingTransaction:
    """Staging record handed to whoever executes the transaction."""

    amount: float
    currency: str = "USD"
    recipient: Optional[str] = None
    is_deposit: bool = False
    payment_method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"amount": self.amount, "currency": self.currency}
        if self.recipient is not None:
            payload["recipient"] = self.recipient
        if self.is_deposit:
            payload["isDeposit"] = True
        if self.payment_method is not None:
            payload["paymentMethod"] = self.payment_method
        return payload
