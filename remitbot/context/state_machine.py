"""
context/state_machine.py

Two-slot dialogue manager for money movement.

States: Idle -> AwaitingAmount -> AwaitingRecipient -> Idle. Only one
question is ever outstanding, so an answer always belongs to the slot the
machine is currently expecting. While a slot is pending the raw utterance
is consumed as that slot's answer and intent classification is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union
import logging
import re

from ..nlu.entities import DepositEntities, RecognizedIntent, SendMoneyEntities
from ..nlu.normalizer import normalize_currency
from .conversation_state import (
    ConversationState,
    DialogueState,
    PendingAction,
    PendingTransaction,
)


logger = logging.getLogger("remitbot.dialogue")

DEFAULT_CURRENCY = "USD"

_AMOUNT_ANSWER_RE = re.compile(r"\$?(\d+(?:,\d{3})*(?:\.\d+)?)")


@dataclass(frozen=True)
class IntentReply:
    """A recognized intent that needs no slot filling."""

    recognized: RecognizedIntent


@dataclass(frozen=True)
class SlotPrompt:
    """The machine is waiting for ``slot``; ``reprompt`` marks a rejected answer."""

    slot: DialogueState
    action: PendingAction
    partial_data: Dict[str, Any] = field(default_factory=dict)
    reprompt: bool = False
    recognized: Optional[RecognizedIntent] = None


@dataclass(frozen=True)
class Finalized:
    transaction: PendingTransaction
    recognized: Optional[RecognizedIntent] = None


@dataclass(frozen=True)
class Cancelled:
    had_pending: bool = False


Outcome = Union[IntentReply, SlotPrompt, Finalized, Cancelled]


def parse_amount_answer(utterance: str) -> Optional[float]:
    """Return the first positive number in ``utterance``, or None."""
    match = _AMOUNT_ANSWER_RE.search(utterance or "")
    if not match:
        return None
    value = float(match.group(1).replace(",", ""))
    return value if value > 0 else None


class ConversationStateMachine:
    """
    Owns the ConversationState of a single session.

    ``classifier`` is used by ``process()`` when no slot is pending.
    ``on_finalize`` receives each PendingTransaction; errors it raises are
    logged and do not undo the transition.
    """

    def __init__(
        self,
        classifier: Optional[Any] = None,
        on_finalize: Optional[Callable[[PendingTransaction], Any]] = None,
    ) -> None:
        self.classifier = classifier
        self.on_finalize = on_finalize
        self._state = ConversationState.idle()

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def expects_slot(self) -> bool:
        return not self._state.is_idle

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def process(self, utterance: str) -> Outcome:
        if self.expects_slot:
            return self.answer_slot(utterance)
        if self.classifier is None:
            raise RuntimeError("no classifier configured for fresh intents")
        return self.apply_intent(self.classifier.classify(utterance))

    def cancel(self) -> Cancelled:
        had_pending = self.expects_slot
        self._transition(ConversationState.idle(), "cancel")
        return Cancelled(had_pending=had_pending)

    def apply_intent(self, recognized: RecognizedIntent) -> Outcome:
        entities = recognized.entities
        if recognized.intent == "send_money" and isinstance(entities, SendMoneyEntities):
            return self._start_send(recognized, entities)
        if recognized.intent == "deposit" and isinstance(entities, DepositEntities):
            return self._start_deposit(recognized, entities)
        if not self._state.is_idle:
            self._transition(ConversationState.idle(), f"intent {recognized.intent}")
        return IntentReply(recognized=recognized)

    def answer_slot(self, utterance: str) -> Outcome:
        state = self._state
        if state.expecting_amount:
            return self._answer_amount(utterance)
        if state.expecting_recipient:
            return self._answer_recipient(utterance)
        raise RuntimeError("no slot is pending")

    # ------------------------------------------------------------------
    # Fresh intents
    # ------------------------------------------------------------------
    def _start_send(self, recognized: RecognizedIntent, entities: SendMoneyEntities) -> Outcome:
        amount = entities.amount if entities.amount and entities.amount > 0 else None
        partial: Dict[str, Any] = {}
        if amount is not None:
            partial["amount"] = amount
        if entities.currency:
            partial["currency"] = entities.currency

        if not entities.recipient:
            new_state = ConversationState.awaiting_recipient(partial)
            self._transition(new_state, "send_money without recipient")
            return SlotPrompt(
                slot=DialogueState.AWAITING_RECIPIENT,
                action=PendingAction.SEND,
                partial_data=dict(new_state.partial_data),
                recognized=recognized,
            )

        if amount is None:
            partial["recipient"] = entities.recipient
            new_state = ConversationState.awaiting_amount(PendingAction.SEND, partial)
            self._transition(new_state, "send_money without amount")
            return SlotPrompt(
                slot=DialogueState.AWAITING_AMOUNT,
                action=PendingAction.SEND,
                partial_data=dict(new_state.partial_data),
                recognized=recognized,
            )

        transaction = PendingTransaction(
            amount=amount,
            currency=entities.currency or DEFAULT_CURRENCY,
            recipient=entities.recipient,
        )
        return self._finalize(transaction, recognized)

    def _start_deposit(self, recognized: RecognizedIntent, entities: DepositEntities) -> Outcome:
        if entities.amount and entities.amount > 0:
            transaction = PendingTransaction(
                amount=entities.amount,
                currency=entities.currency or DEFAULT_CURRENCY,
                is_deposit=True,
                payment_method=entities.payment_method,
            )
            return self._finalize(transaction, recognized)

        partial: Dict[str, Any] = {}
        if entities.currency:
            partial["currency"] = entities.currency
        if entities.payment_method:
            partial["paymentMethod"] = entities.payment_method
        new_state = ConversationState.awaiting_amount(PendingAction.DEPOSIT, partial)
        self._transition(new_state, "deposit without amount")
        return SlotPrompt(
            slot=DialogueState.AWAITING_AMOUNT,
            action=PendingAction.DEPOSIT,
            partial_data=dict(new_state.partial_data),
            recognized=recognized,
        )

    # ------------------------------------------------------------------
    # Slot answers
    # ------------------------------------------------------------------
    def _answer_amount(self, utterance: str) -> Outcome:
        state = self._state
        amount = parse_amount_answer(utterance)
        if amount is None:
            logger.info("Amount answer %r rejected; re-prompting", utterance)
            return SlotPrompt(
                slot=DialogueState.AWAITING_AMOUNT,
                action=state.pending_action,  # type: ignore[arg-type]
                partial_data=dict(state.partial_data),
                reprompt=True,
            )

        partial = dict(state.partial_data)
        partial["amount"] = amount
        currency = normalize_currency(utterance)
        if currency:
            partial["currency"] = currency

        if state.pending_action is PendingAction.DEPOSIT:
            return self._finalize(
                PendingTransaction(
                    amount=amount,
                    currency=partial.get("currency") or DEFAULT_CURRENCY,
                    is_deposit=True,
                    payment_method=partial.get("paymentMethod"),
                )
            )

        if partial.get("recipient"):
            return self._finalize(
                PendingTransaction(
                    amount=amount,
                    currency=partial.get("currency") or DEFAULT_CURRENCY,
                    recipient=partial["recipient"],
                )
            )

        new_state = ConversationState.awaiting_recipient(partial)
        self._transition(new_state, "amount collected")
        return SlotPrompt(
            slot=DialogueState.AWAITING_RECIPIENT,
            action=PendingAction.SEND,
            partial_data=dict(new_state.partial_data),
        )

    def _answer_recipient(self, utterance: str) -> Outcome:
        state = self._state
        recipient = (utterance or "").strip()
        if not recipient:
            return SlotPrompt(
                slot=DialogueState.AWAITING_RECIPIENT,
                action=PendingAction.SEND,
                partial_data=dict(state.partial_data),
                reprompt=True,
            )
        return self._finalize(
            PendingTransaction(
                amount=state.partial_data.get("amount", 0.0),
                currency=state.partial_data.get("currency") or DEFAULT_CURRENCY,
                recipient=recipient,
            )
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _finalize(self, transaction: PendingTransaction, recognized: Optional[RecognizedIntent] = None) -> Finalized:
        self._transition(ConversationState.idle(), "finalized")
        logger.info("Finalized pending transaction %s", transaction.to_dict())
        if self.on_finalize is not None:
            try:
                self.on_finalize(transaction)
            except Exception:
                logger.exception("Finalization handler failed for %s", transaction.to_dict())
        return Finalized(transaction=transaction, recognized=recognized)

    def _transition(self, new_state: ConversationState, reason: str) -> None:
        old = self._state.dialogue_state
        self._state = new_state
        if old is not new_state.dialogue_state:
            logger.info("Dialogue %s -> %s (%s)", old.value, new_state.dialogue_state.value, reason)
