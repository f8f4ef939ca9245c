"""
nlu/patterns.py

Pattern records shared by the remote pattern store and the built-in
fallback tables. Remote payloads use camelCase keys (``intentType``,
``entityType``); both spellings are accepted so the classifier never
needs to know where a pattern came from.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class IntentPattern(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    intent_type: str = Field(alias="intentType", min_length=1)
    pattern: str = Field(min_length=1)
    priority: int = Field(ge=0)


class EntityPattern(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    entity_type: str = Field(alias="entityType", min_length=1)
    pattern: str = Field(min_length=1)
    priority: int = Field(ge=0)


# Currency words accepted between an amount and the rest of a command
_CURRENCY_WORDS = r"(?:dollars?|euros?|pounds?|rupees?|usd|eur|gbp|inr)"
_AMOUNT = r"\$?\s*(\d+(?:\.\d+)?)"

# Declaration order matters: on equal confidence the earlier pattern wins.
_BUILTIN_INTENTS = (
    # Send money
    ("send_money", r"\b(?:send|transfer|remit)\s+(?:" + _AMOUNT + r"\s*)?" + _CURRENCY_WORDS + r"?\s*(?:to\s+)?([a-z]+)", 10),
    ("send_money", r"\bpay\s+(?:" + _AMOUNT + r"\s*)?" + _CURRENCY_WORDS + r"?\s*(?:to\s+)?([a-z]+)", 9),
    ("send_money", r"\b(?:send|transfer|remit|pay)(?:\s+(?:money|funds|cash))?\b", 5),
    # Deposit
    ("deposit", r"\b(?:deposit|add\s+money|add\s+funds|load\s+money|top\s+up)\s+" + _AMOUNT + r"\s*" + _CURRENCY_WORDS + r"?", 10),
    ("deposit", r"\b(?:deposit|add|load|top\s+up)(?:\s+(?:money|funds))?\b", 5),
    # Balance
    ("check_balance", r"\b(?:what'?s\s+my\s+balance|account\s+balance|available\s+funds|balance|how\s+much)\b", 10),
    # Exchange rates
    ("check_rates", r"\b(?:exchange\s+rates?|rates?|exchange|conversion|convert)\b(?:\s+(?:from|between|for|of))?(?:\s+([a-z]{3}))?(?:\s+(?:to|and|into)\s+([a-z]{3})\b)?", 10),
    # Recipients
    ("manage_recipients", r"\b(?:(?:add|new|show|list|manage|my)\s+)?(?:recipients?|beneficiar(?:y|ies)|payees?)\b", 8),
    # Transaction status
    ("check_status", r"\b(?:check\s+)?(?:status|track)\b(?:.*?\b(?:transactions?|transfers?|payments?|money)\b)?", 8),
    # Help
    ("help", r"\b(?:help|support|how\s+to|guide|explain|what\s+can\s+you\s+do|commands)\b", 5),
    # Greeting
    ("greeting", r"\b(?:hello|hi|hey|greetings|howdy|good\s+(?:morning|afternoon|evening))\b", 3),
)

_BUILTIN_ENTITIES = (
    ("amount", r"\$?(\d+(?:,\d{3})*(?:\.\d{1,2})?)", 10),
    ("recipient", r"\bto\s+([a-zA-Z]+(?:\s+[a-zA-Z]+)?)", 10),
)

BUILTIN_INTENT_PATTERNS: Tuple[IntentPattern, ...] = tuple(
    IntentPattern(id=i, intent_type=intent, pattern=pattern, priority=priority)
    for i, (intent, pattern, priority) in enumerate(_BUILTIN_INTENTS)
)

BUILTIN_ENTITY_PATTERNS: Tuple[EntityPattern, ...] = tuple(
    EntityPattern(id=i, entity_type=entity, pattern=pattern, priority=priority)
    for i, (entity, pattern, priority) in enumerate(_BUILTIN_ENTITIES)
)
