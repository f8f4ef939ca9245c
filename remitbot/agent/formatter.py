"""
agent/formatter.py

Turns a dialogue outcome (or a bare RecognizedIntent) into display text.
Pure functions: no I/O, no state.
"""

from typing import Any, Mapping, Union

from ..context.conversation_state import DialogueState, PendingAction
from ..context.state_machine import Cancelled, Finalized, IntentReply, Outcome, SlotPrompt
from ..nlu.entities import RecognizedIntent
from ..prompts import templates
from .helpers import format_money


DEFAULT_AMOUNT_TEXT = "some money"
DEFAULT_CURRENCY = "USD"
DEFAULT_RECIPIENT = "someone"


def _money(amount: Any, currency: Any) -> str:
    return format_money(amount, currency, DEFAULT_CURRENCY) or DEFAULT_AMOUNT_TEXT


def format_intent(recognized: RecognizedIntent) -> str:
    entities = recognized.entities.as_dict()
    intent = recognized.intent

    if intent == "send_money":
        return templates.format_prompt_template(
            templates.INTENT_TEMPLATES["send_money"],
            {
                "money": _money(entities.get("amount"), entities.get("currency")),
                "recipient": entities.get("recipient") or DEFAULT_RECIPIENT,
            },
        )
    if intent == "deposit":
        return templates.format_prompt_template(
            templates.INTENT_TEMPLATES["deposit"], {"money": _money(entities.get("amount"), entities.get("currency"))}
        )
    if intent == "check_rates":
        return templates.format_prompt_template(
            templates.INTENT_TEMPLATES["check_rates"],
            {
                "from_currency": entities.get("fromCurrency") or DEFAULT_CURRENCY,
                "to_currency": entities.get("toCurrency") or "EUR",
            },
        )
    if intent == "manage_recipients":
        key = "manage_recipients_add" if entities.get("action") == "add" else "manage_recipients_list"
        return templates.INTENT_TEMPLATES[key]
    return templates.INTENT_TEMPLATES.get(intent, templates.INTENT_TEMPLATES["unknown"])


def format_slot_prompt(prompt: SlotPrompt) -> str:
    partial: Mapping[str, Any] = prompt.partial_data

    if prompt.slot is DialogueState.AWAITING_RECIPIENT:
        if prompt.reprompt:
            return templates.MISSING_RECIPIENT_REPROMPT
        money = format_money(partial.get("amount"), partial.get("currency"), DEFAULT_CURRENCY)
        if money is None:
            return templates.get_flow_step("send_money_flow", "start")
        return templates.format_prompt_template(
            templates.get_flow_step("send_money_flow", "recipient_collection"),
            {"money": money},
        )

    if prompt.action is PendingAction.DEPOSIT:
        step = "amount_collection" if prompt.reprompt or prompt.recognized is None else "start"
        question = templates.get_flow_step("deposit_flow", step)
    else:
        question = templates.format_prompt_template(
            templates.get_flow_step("send_money_flow", "amount_collection"),
            {"recipient": partial.get("recipient") or DEFAULT_RECIPIENT},
        )
    if prompt.reprompt:
        return f"{templates.INVALID_AMOUNT_REPROMPT} {question}"
    return question


def format_finalized(outcome: Finalized) -> str:
    tx = outcome.transaction
    money = format_money(tx.amount, tx.currency, DEFAULT_CURRENCY) or DEFAULT_AMOUNT_TEXT
    if tx.is_deposit:
        if tx.payment_method:
            return templates.format_prompt_template(
                templates.DEPOSIT_READY_WITH_METHOD, {"money": money, "payment_method": tx.payment_method}
            )
        return templates.format_prompt_template(templates.DEPOSIT_READY, {"money": money})
    recipient = tx.recipient or DEFAULT_RECIPIENT
    if not tx.amount:
        return templates.format_prompt_template(templates.TRANSFER_READY_NO_AMOUNT, {"recipient": recipient})
    return templates.format_prompt_template(templates.TRANSFER_READY, {"money": money, "recipient": recipient})


def format_response(outcome: Union[Outcome, RecognizedIntent]) -> str:
    """Render any dialogue outcome as display text."""
    if isinstance(outcome, RecognizedIntent):
        return format_intent(outcome)
    if isinstance(outcome, IntentReply):
        return format_intent(outcome.recognized)
    if isinstance(outcome, SlotPrompt):
        return format_slot_prompt(outcome)
    if isinstance(outcome, Finalized):
        return format_finalized(outcome)
    if isinstance(outcome, Cancelled):
        return templates.CANCELLED_PENDING if outcome.had_pending else templates.CANCELLED_IDLE
    raise TypeError(f"cannot format {type(outcome).__name__}")
