from .pattern_source import HttpPatternSource, LocalPatternSource, PatternSourceError  # noqa: F401
from .remote_classifier import RemoteClassifier  # noqa: F401
