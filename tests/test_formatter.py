"""
Tests for reply formatting.
"""

import pytest

from remitbot.agent.formatter import format_response
from remitbot.agent.helpers import format_amount, format_money
from remitbot.context.conversation_state import DialogueState, PendingAction, PendingTransaction
from remitbot.context.state_machine import Cancelled, Finalized, IntentReply, SlotPrompt
from remitbot.nlu.entities import (
    CheckRatesEntities,
    DepositEntities,
    RecipientsEntities,
    RecognizedIntent,
    SendMoneyEntities,
)
from remitbot.prompts import templates


class TestHelpers:
    @pytest.mark.parametrize("value, expected", [(50, "50"), (12.5, "12.50"), ("$1,000", "1000"), (None, None)])
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected

    def test_format_money(self):
        assert format_money(50, "EUR") == "50 EUR"
        assert format_money(50, None) == "50 USD"
        assert format_money(None, "EUR") is None


class TestIntentReplies:
    def test_send_money_defaults(self):
        text = format_response(RecognizedIntent(intent="send_money", entities=SendMoneyEntities()))
        assert text == "I can help you send some money to someone. Would you like to proceed?"

    def test_send_money_entities(self):
        recognized = RecognizedIntent(
            intent="send_money",
            entities=SendMoneyEntities(amount=50.0, currency="EUR", recipient="Bob"),
        )
        assert format_response(IntentReply(recognized)) == "I can help you send 50 EUR to Bob. Would you like to proceed?"

    def test_deposit_amount_formatting(self):
        recognized = RecognizedIntent(intent="deposit", entities=DepositEntities(amount=12.5))
        assert "deposit 12.50 USD" in format_response(recognized)

    def test_check_rates_defaults(self):
        text = format_response(RecognizedIntent(intent="check_rates", entities=CheckRatesEntities()))
        assert "from USD to EUR" in text

    def test_check_rates_pair(self):
        recognized = RecognizedIntent(
            intent="check_rates", entities=CheckRatesEntities(from_currency="GBP", to_currency="INR")
        )
        assert "from GBP to INR" in format_response(recognized)

    def test_manage_recipients_add(self):
        recognized = RecognizedIntent(intent="manage_recipients", entities=RecipientsEntities(action="add"))
        assert format_response(recognized) == templates.INTENT_TEMPLATES["manage_recipients_add"]

    def test_unknown_and_unlisted_intents(self):
        assert format_response(RecognizedIntent(intent="unknown")) == templates.INTENT_TEMPLATES["unknown"]
        assert format_response(RecognizedIntent(intent="close_account")) == templates.INTENT_TEMPLATES["unknown"]


class TestSlotPrompts:
    def test_recipient_prompt_with_amount(self):
        prompt = SlotPrompt(
            slot=DialogueState.AWAITING_RECIPIENT,
            action=PendingAction.SEND,
            partial_data={"amount": 50.0},
        )
        assert format_response(prompt) == "Who would you like to send 50 USD to?"

    def test_recipient_prompt_without_amount(self):
        prompt = SlotPrompt(slot=DialogueState.AWAITING_RECIPIENT, action=PendingAction.SEND)
        assert format_response(prompt) == templates.SEND_MONEY_FLOW["start"]

    def test_recipient_reprompt(self):
        prompt = SlotPrompt(slot=DialogueState.AWAITING_RECIPIENT, action=PendingAction.SEND, reprompt=True)
        assert format_response(prompt) == templates.MISSING_RECIPIENT_REPROMPT

    def test_send_amount_prompt(self):
        prompt = SlotPrompt(
            slot=DialogueState.AWAITING_AMOUNT,
            action=PendingAction.SEND,
            partial_data={"recipient": "Alice"},
        )
        assert format_response(prompt) == "How much would you like to send to Alice?"

    def test_deposit_amount_reprompt(self):
        prompt = SlotPrompt(slot=DialogueState.AWAITING_AMOUNT, action=PendingAction.DEPOSIT, reprompt=True)
        text = format_response(prompt)
        assert text.startswith(templates.INVALID_AMOUNT_REPROMPT)
        assert text.endswith(templates.DEPOSIT_FLOW["amount_collection"])


class TestFinalizedAndCancelled:
    def test_transfer_ready(self):
        outcome = Finalized(PendingTransaction(amount=50.0, currency="USD", recipient="Alice"))
        assert format_response(outcome) == "Got it. Your transfer of 50 USD to Alice is ready to complete."

    def test_transfer_without_amount(self):
        outcome = Finalized(PendingTransaction(amount=0.0, recipient="Bob"))
        assert format_response(outcome) == templates.TRANSFER_READY_NO_AMOUNT.replace("{recipient}", "Bob")

    def test_deposit_with_method(self):
        outcome = Finalized(PendingTransaction(amount=200.0, is_deposit=True, payment_method="card"))
        assert format_response(outcome) == "Got it. Your deposit of 200 USD by card is ready to complete."

    def test_cancelled(self):
        assert format_response(Cancelled(had_pending=True)) == templates.CANCELLED_PENDING
        assert format_response(Cancelled()) == templates.CANCELLED_IDLE

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            format_response(object())  # type: ignore[arg-type]
