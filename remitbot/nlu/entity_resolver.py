"""
Entity Resolution Module
Extracts amounts, currencies, recipients and currency pairs from an
utterance once its intent is known.
"""

from typing import Optional, Sequence, Tuple
import logging
import re

from .entities import (
    CheckRatesEntities,
    DepositEntities,
    Entities,
    NoEntities,
    RecipientsEntities,
    SendMoneyEntities,
)
from .normalizer import (
    KNOWN_CURRENCY_CODES,
    normalize_currency,
    normalize_payment_method,
)
from .pattern_library import CompiledPattern


logger = logging.getLogger("remitbot.nlu.entities")

# Trailing words that never name a recipient
RECIPIENT_STOPWORDS = frozenset(
    {"now", "today", "please", "immediately", "asap", "money", "funds", "dollars", "euros", "pounds"}
)
# Command verbs and currency codes are not names either ("want to send", "send 50 usd")
_NON_NAME_WORDS = frozenset({"send", "transfer", "remit", "pay", "deposit"}) | {c.lower() for c in KNOWN_CURRENCY_CODES}

_PAIR_RE = re.compile(r"(\S+)\s+(?:to|and|into|in)\s+(\S+)", re.IGNORECASE)
_CODE_PAIR_RE = re.compile(
    r"\b(" + "|".join(KNOWN_CURRENCY_CODES) + r")\b.*?\b(" + "|".join(KNOWN_CURRENCY_CODES) + r")\b",
    re.IGNORECASE,
)
_ADD_RECIPIENT_RE = re.compile(r"\b(?:add|new|create)\b.*\b(?:recipient|beneficiary|payee)", re.IGNORECASE)


def _best_pattern(entity_patterns: Sequence[CompiledPattern], entity_type: str) -> Optional[CompiledPattern]:
    best: Optional[CompiledPattern] = None
    for compiled in entity_patterns:
        if compiled.record.entity_type != entity_type:  # type: ignore[union-attr]
            continue
        if best is None or compiled.record.priority > best.record.priority:
            best = compiled
    return best


def _capture(match: "re.Match[str]") -> str:
    """First non-empty group of a match, or the whole match."""
    for group in match.groups():
        if group:
            return group
    return match.group(0)


class EntityResolver:
    """
    Extracts entities relevant to a recognized intent. Regexes for amount
    and recipient come from the active entity pattern set so remote tuning
    applies here too.
    """

    def extract_entities(
        self,
        transcript: str,
        intent: str,
        entity_patterns: Sequence[CompiledPattern],
    ) -> Entities:
        if intent == "send_money":
            return SendMoneyEntities(
                amount=self.extract_amount(transcript, entity_patterns),
                currency=normalize_currency(transcript),
                recipient=self.extract_recipient(transcript, entity_patterns),
            )
        if intent == "deposit":
            return DepositEntities(
                amount=self.extract_amount(transcript, entity_patterns),
                currency=normalize_currency(transcript),
                payment_method=normalize_payment_method(transcript),
            )
        if intent == "check_rates":
            from_currency, to_currency = self.extract_currency_pair(transcript)
            return CheckRatesEntities(from_currency=from_currency, to_currency=to_currency)
        if intent == "manage_recipients":
            action = "add" if _ADD_RECIPIENT_RE.search(transcript) else "list"
            return RecipientsEntities(action=action)
        return NoEntities()

    def extract_amount(self, transcript: str, entity_patterns: Sequence[CompiledPattern]) -> Optional[float]:
        compiled = _best_pattern(entity_patterns, "amount")
        if compiled is None:
            return None
        match = compiled.regex.search(transcript)
        if not match:
            return None
        raw = _capture(match).replace("$", "").replace(",", "").strip()
        try:
            return float(raw)
        except ValueError:
            logger.debug("Amount pattern id=%s captured non-numeric %r", compiled.record.id, raw)
            return None

    def extract_recipient(self, transcript: str, entity_patterns: Sequence[CompiledPattern]) -> Optional[str]:
        # Prefer an explicit "to <name>" capture; "to send" and the like are skipped
        compiled = _best_pattern(entity_patterns, "recipient")
        if compiled is not None:
            for match in compiled.regex.finditer(transcript):
                words = _capture(match).split()
                while words and words[-1].lower() in RECIPIENT_STOPWORDS:
                    words.pop()
                if words and words[0].lower() not in _NON_NAME_WORDS:
                    return " ".join(words)

        # Otherwise fall back to the trailing word
        words = transcript.split()
        if len(words) < 2:
            return None
        last = words[-1].strip(".,!?;:")
        lowered = last.lower()
        if not last.isalpha() or lowered in RECIPIENT_STOPWORDS or lowered in _NON_NAME_WORDS:
            return None
        return last

    def extract_currency_pair(self, transcript: str) -> Tuple[Optional[str], Optional[str]]:
        for match in _PAIR_RE.finditer(transcript):
            from_currency = normalize_currency(match.group(1))
            to_currency = normalize_currency(match.group(2))
            if from_currency and to_currency:
                return from_currency, to_currency

        match = _CODE_PAIR_RE.search(transcript)
        if match:
            return match.group(1).upper(), match.group(2).upper()
        return None, None
