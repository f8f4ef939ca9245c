"""
remitbot/nlu

Recognition layer:
- normalizer.py: currency / payment-method lookups
- patterns.py + pattern_library.py: pattern records and the active sets
- entity_resolver.py: typed entity extraction
- intent_classifier.py: IntentClassifier
"""

from .entities import RecognizedIntent  # noqa: F401
from .intent_classifier import IntentClassifier  # noqa: F401
from .pattern_library import PatternLibrary  # noqa: F401
