"""
Tests for intent classification and entity extraction.
"""

from unittest.mock import Mock

import pytest

from conftest import make_source
from remitbot.nlu.entities import (
    CheckRatesEntities,
    DepositEntities,
    NoEntities,
    RecipientsEntities,
    SendMoneyEntities,
)
from remitbot.nlu.entity_resolver import EntityResolver
from remitbot.nlu.intent_classifier import IntentClassifier, RecognitionEvent, score_match
from remitbot.nlu.pattern_library import PatternLibrary


async def _library_with(intents, entities=None) -> PatternLibrary:
    library = PatternLibrary(source=make_source(intents, entities))
    await library.refresh()
    return library


class TestScoring:
    def test_score_is_coverage_times_priority(self):
        assert score_match(5, 10, 10) == pytest.approx(0.5)
        assert score_match(10, 10, 5) == pytest.approx(0.5)

    def test_zero_length_utterance(self):
        assert score_match(0, 0, 10) == 0.0


class TestBuiltinClassification:
    def test_send_money_fully_specified(self, classifier):
        result = classifier.classify("send 50 to Alice")

        assert result.intent == "send_money"
        assert result.confidence == pytest.approx(1.0)
        assert result.entities == SendMoneyEntities(amount=50.0, recipient="Alice")
        assert result.entities.as_dict() == {"amount": 50.0, "recipient": "Alice"}

    def test_send_money_with_currency_synonym(self, classifier):
        result = classifier.classify("send 50 euros to Bob")
        assert result.entities == SendMoneyEntities(amount=50.0, currency="EUR", recipient="Bob")

    def test_explicit_code_overrides_synonym(self, classifier):
        result = classifier.classify("send 20 pounds in USD to Bob")
        assert result.intent == "send_money"
        assert result.entities.currency == "USD"

    def test_send_money_without_recipient(self, classifier):
        result = classifier.classify("send money")
        assert result.intent == "send_money"
        assert result.entities == SendMoneyEntities()

    def test_infinitive_to_is_not_a_recipient(self, classifier):
        result = classifier.classify("I want to send 50 to Bob")
        assert result.intent == "send_money"
        assert result.entities == SendMoneyEntities(amount=50.0, recipient="Bob")

    def test_infinitive_to_without_recipient(self, classifier):
        result = classifier.classify("I'd like to transfer 50 dollars")
        assert result.intent == "send_money"
        assert result.entities == SendMoneyEntities(amount=50.0, currency="USD")

    def test_infinitive_to_before_named_recipient(self, classifier):
        result = classifier.classify("I want to send money to Bob")
        assert result.intent == "send_money"
        assert result.entities == SendMoneyEntities(recipient="Bob")

    def test_pay_name(self, classifier):
        result = classifier.classify("pay Alice")
        assert result.intent == "send_money"
        assert result.confidence == pytest.approx(0.9)
        assert result.entities.recipient == "Alice"
        assert result.entities.amount is None

    def test_deposit_with_payment_method(self, classifier):
        result = classifier.classify("deposit 200 by card")
        assert result.intent == "deposit"
        assert result.entities == DepositEntities(amount=200.0, payment_method="card")

    def test_check_rates_pair(self, classifier):
        result = classifier.classify("rate USD to EUR")
        assert result.intent == "check_rates"
        assert result.entities == CheckRatesEntities(from_currency="USD", to_currency="EUR")
        assert result.entities.as_dict() == {"fromCurrency": "USD", "toCurrency": "EUR"}

    def test_check_balance(self, classifier):
        result = classifier.classify("what's my balance")
        assert result.intent == "check_balance"
        assert result.entities == NoEntities()

    @pytest.mark.parametrize(
        "utterance, action",
        [("add a new recipient", "add"), ("show my recipients", "list")],
    )
    def test_manage_recipients(self, classifier, utterance, action):
        result = classifier.classify(utterance)
        assert result.intent == "manage_recipients"
        assert result.entities == RecipientsEntities(action=action)

    def test_greeting_partial_coverage(self, classifier):
        result = classifier.classify("hello there")
        assert result.intent == "greeting"
        assert result.confidence == pytest.approx((5 / 11) * 0.3)

    @pytest.mark.parametrize("utterance", ["", "   ", "xyzzy plugh"])
    def test_unknown(self, classifier, utterance):
        result = classifier.classify(utterance)
        assert result.is_unknown
        assert result.confidence == 0.0
        assert result.entities == NoEntities()


class TestRanking:
    @pytest.mark.asyncio
    async def test_first_declared_wins_exact_tie(self):
        library = await _library_with(
            [
                {"id": 1, "intentType": "help", "pattern": "abc", "priority": 5},
                {"id": 2, "intentType": "greeting", "pattern": "abc", "priority": 5},
            ]
        )
        assert IntentClassifier(library=library).classify("abc").intent == "help"

    @pytest.mark.asyncio
    async def test_higher_priority_wins_same_match(self):
        library = await _library_with(
            [
                {"id": 1, "intentType": "greeting", "pattern": "abc", "priority": 5},
                {"id": 2, "intentType": "help", "pattern": "abc", "priority": 6},
            ]
        )
        assert IntentClassifier(library=library).classify("abc").intent == "help"

    @pytest.mark.asyncio
    async def test_longer_match_wins_same_priority(self):
        library = await _library_with(
            [
                {"id": 1, "intentType": "greeting", "pattern": "ab", "priority": 5},
                {"id": 2, "intentType": "help", "pattern": "abcd", "priority": 5},
            ]
        )
        result = IntentClassifier(library=library).classify("abcd")
        assert result.intent == "help"
        assert result.matched_pattern == "abcd"

    @pytest.mark.asyncio
    async def test_empty_match_does_not_count(self):
        library = await _library_with([{"id": 1, "intentType": "help", "pattern": "x*", "priority": 10}])
        assert IntentClassifier(library=library).classify("abc").is_unknown

    @pytest.mark.asyncio
    async def test_confidence_clamped_by_default(self):
        library = await _library_with([{"id": 1, "intentType": "help", "pattern": "help", "priority": 20}])
        assert IntentClassifier(library=library).classify("help").confidence == 1.0
        unclamped = IntentClassifier(library=library, clamp_confidence=False)
        assert unclamped.classify("help").confidence == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_negative_priority_patterns_rejected(self):
        library = await _library_with([{"id": 1, "intentType": "greeting", "pattern": "help", "priority": -5}])
        assert library.is_remote is False

        result = IntentClassifier(library=library).classify("help")
        assert result.intent == "help"
        assert 0.0 <= result.confidence <= 1.0

    @pytest.mark.asyncio
    async def test_remote_entity_patterns_used(self):
        library = await _library_with(
            [{"id": 1, "intentType": "send_money", "pattern": "send", "priority": 10}],
            [{"id": 2, "entityType": "recipient", "pattern": r"for\s+(\w+)", "priority": 10}],
        )
        result = IntentClassifier(library=library).classify("send this for Carol")
        assert result.entities.recipient == "Carol"
        assert result.entities.amount is None


class TestReporting:
    def test_reporter_receives_event(self, library):
        reporter = Mock()
        IntentClassifier(library=library, reporter=reporter).classify("send 50 to Alice")

        (event,), _ = reporter.call_args
        assert isinstance(event, RecognitionEvent)
        assert event.intent == "send_money"
        assert event.entities == {"amount": 50.0, "recipient": "Alice"}
        assert event.is_failure is False

    def test_unknown_reported_as_failure(self, library):
        reporter = Mock()
        IntentClassifier(library=library, reporter=reporter).classify("xyzzy")
        assert reporter.call_args[0][0].is_failure is True

    def test_low_confidence_is_failure(self):
        assert RecognitionEvent(utterance="hi", intent="greeting", confidence=0.29).is_failure
        assert not RecognitionEvent(utterance="hi", intent="greeting", confidence=0.3).is_failure

    def test_reporter_errors_ignored(self, library):
        reporter = Mock(side_effect=RuntimeError("sink down"))
        result = IntentClassifier(library=library, reporter=reporter).classify("send 50 to Alice")
        assert result.intent == "send_money"


class TestEntityResolver:
    @pytest.fixture
    def resolver(self):
        return EntityResolver()

    @pytest.fixture
    def entity_patterns(self, library):
        return library.snapshot().entities

    def test_amount_strips_symbol_and_commas(self, resolver, entity_patterns):
        assert resolver.extract_amount("send $1,250.50 to Bob", entity_patterns) == 1250.5

    def test_recipient_trailing_stopwords_dropped(self, resolver, entity_patterns):
        assert resolver.extract_recipient("send money to Bob now", entity_patterns) == "Bob"

    def test_recipient_two_word_name(self, resolver, entity_patterns):
        assert resolver.extract_recipient("transfer 100 to John Smith", entity_patterns) == "John Smith"

    @pytest.mark.parametrize("utterance", ["send money now", "send 50 usd", "send", "send 50"])
    def test_trailing_word_rejected(self, resolver, entity_patterns, utterance):
        assert resolver.extract_recipient(utterance, entity_patterns) is None

    def test_currency_pair_synonyms(self, resolver):
        assert resolver.extract_currency_pair("convert euros to pounds") == ("EUR", "GBP")

    def test_currency_pair_missing(self, resolver):
        assert resolver.extract_currency_pair("exchange rates") == (None, None)

    def test_extraction_conditioned_on_intent(self, resolver, entity_patterns):
        assert resolver.extract_entities("hello 50 to Bob", "greeting", entity_patterns) == NoEntities()
