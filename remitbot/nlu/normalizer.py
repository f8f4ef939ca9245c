"""
nlu/normalizer.py

Maps lexical variants of currencies and payment methods onto canonical
codes. Pure lookups, no state.

Lookup rule: the synonym tables are scanned in declaration order and the
first entry found as a substring of the (lowercased) text wins. For
currencies, an explicit three-letter code from ``KNOWN_CURRENCY_CODES``
anywhere in the text takes precedence over any synonym.
"""

from typing import Optional, Tuple
import re


KNOWN_CURRENCY_CODES: Tuple[str, ...] = ("USD", "EUR", "GBP", "INR", "CAD", "AUD", "JPY")

CURRENCY_SYNONYMS: Tuple[Tuple[str, str], ...] = (
    ("dollar", "USD"),
    ("dollars", "USD"),
    ("usd", "USD"),
    ("us dollar", "USD"),
    ("us dollars", "USD"),
    ("$", "USD"),
    ("euro", "EUR"),
    ("euros", "EUR"),
    ("eur", "EUR"),
    ("€", "EUR"),
    ("pound", "GBP"),
    ("pounds", "GBP"),
    ("gbp", "GBP"),
    ("£", "GBP"),
    ("rupee", "INR"),
    ("rupees", "INR"),
    ("inr", "INR"),
    ("₹", "INR"),
)

PAYMENT_METHOD_SYNONYMS: Tuple[Tuple[str, str], ...] = (
    ("card", "card"),
    ("credit card", "card"),
    ("debit card", "card"),
    ("credit", "card"),
    ("debit", "card"),
    ("bank", "bank"),
    ("bank transfer", "bank"),
    ("transfer", "bank"),
    ("wire", "bank"),
    ("wire transfer", "bank"),
    ("wallet", "wallet"),
    ("digital wallet", "wallet"),
    ("e-wallet", "wallet"),
    ("paypal", "wallet"),
    ("apple pay", "wallet"),
    ("applepay", "wallet"),
    ("google pay", "wallet"),
    ("googlepay", "wallet"),
)

_CURRENCY_CODE_RE = re.compile(r"\b(" + "|".join(KNOWN_CURRENCY_CODES) + r")\b", re.IGNORECASE)
_PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
_WHITESPACE_RE = re.compile(r"\s+")


def _first_synonym(text: str, table: Tuple[Tuple[str, str], ...]) -> Optional[str]:
    lowered = text.lower()
    for keyword, code in table:
        if keyword in lowered:
            return code
    return None


def find_currency_code(text: str) -> Optional[str]:
    """Return the first explicit currency code token in ``text``, upper-cased."""
    if not text:
        return None
    match = _CURRENCY_CODE_RE.search(text)
    return match.group(1).upper() if match else None


def normalize_currency(text: str) -> Optional[str]:
    """
    Resolve a currency mentioned in ``text`` to its ISO code.

    "50 euros" -> "EUR"; "send 20 pounds in USD" -> "USD" (explicit code wins).
    """
    if not text:
        return None
    code = find_currency_code(text)
    if code:
        return code
    return _first_synonym(text, CURRENCY_SYNONYMS)


def normalize_payment_method(text: str) -> Optional[str]:
    """Resolve a payment method mention to one of card | bank | wallet."""
    if not text:
        return None
    return _first_synonym(text, PAYMENT_METHOD_SYNONYMS)


def normalize_text(text: str) -> str:
    """Lowercase, collapse whitespace and strip common punctuation."""
    if not text:
        return ""
    normalized = _WHITESPACE_RE.sub(" ", text.lower()).strip()
    return _PUNCTUATION_RE.sub("", normalized)
