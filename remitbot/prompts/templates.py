"""
prompts/templates.py

Display templates for recognized intents and slot-filling prompts.
Placeholders use ``{name}`` and are filled by ``format_prompt_template``.
"""

from typing import Any, Dict, Mapping


SEND_MONEY_FLOW: Dict[str, str] = {
    "start": "I can help you send money. Who would you like to send money to?",
    "recipient_collection": "Who would you like to send {money} to?",
    "amount_collection": "How much would you like to send to {recipient}?",
}

DEPOSIT_FLOW: Dict[str, str] = {
    "start": "I can help you deposit money. How much would you like to deposit?",
    "amount_collection": "How much would you like to deposit?",
}

FLOWS: Dict[str, Dict[str, str]] = {
    "send_money_flow": SEND_MONEY_FLOW,
    "deposit_flow": DEPOSIT_FLOW,
}

GENERIC_PROMPT = "How can I help you today?"

FLOW_DEFAULT_PROMPTS: Dict[str, str] = {
    "send_money_flow": "How can I help you send money today?",
    "deposit_flow": "How can I help you deposit money today?",
}

INVALID_AMOUNT_REPROMPT = "Sorry, I didn't catch a valid amount. Please enter a number greater than zero, like 50 or 120.50."
MISSING_RECIPIENT_REPROMPT = "Please tell me the name of the person you'd like to send money to."

INTENT_TEMPLATES: Dict[str, str] = {
    "greeting": "Hello! How can I help you with your money transfers today?",
    "send_money": "I can help you send {money} to {recipient}. Would you like to proceed?",
    "deposit": "I can help you deposit {money} to your account. Would you like to proceed?",
    "check_balance": "I can check your current balance for you. Would you like me to do that?",
    "check_rates": "I can check the current exchange rate from {from_currency} to {to_currency} for you. Would you like me to do that?",
    "manage_recipients_list": "Here are your saved recipients. You can send money to any of them or add a new one.",
    "manage_recipients_add": "I can help you add a new recipient. Please provide their name, account number, bank name and country.",
    "check_status": "I can look up the status of your recent transfers. Would you like me to do that?",
    "help": "I can help you send money, deposit funds, check your balance, and get exchange rates. What would you like to do?",
    "unknown": (
        "I'm not sure I understand. Could you rephrase or tell me if you want to send money, "
        "deposit funds, check your balance, or get exchange rates?"
    ),
}

DEPOSIT_READY = "Got it. Your deposit of {money} is ready to complete."
DEPOSIT_READY_WITH_METHOD = "Got it. Your deposit of {money} by {payment_method} is ready to complete."
TRANSFER_READY = "Got it. Your transfer of {money} to {recipient} is ready to complete."
TRANSFER_READY_NO_AMOUNT = "Got it. I'll set up a transfer to {recipient}. You can enter the amount on the next step."
CANCELLED_PENDING = "Okay, I've cancelled that. What else can I help you with?"
CANCELLED_IDLE = "There's nothing in progress to cancel. How can I help you today?"


def get_flow_step(flow_type: str, step_name: str) -> str:
    """Return the prompt for a flow step, falling back to the flow default."""
    flow = FLOWS.get(flow_type)
    if flow is None:
        return GENERIC_PROMPT
    return flow.get(step_name) or FLOW_DEFAULT_PROMPTS[flow_type]


def format_prompt_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute ``{key}`` placeholders present in ``values``; others stay as-is."""
    formatted = template
    for key, value in values.items():
        placeholder = "{" + key + "}"
        if placeholder in formatted:
            formatted = formatted.replace(placeholder, str(value))
    return formatted
