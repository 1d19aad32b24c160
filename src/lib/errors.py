"""Error taxonomy shared by the ASO analysis pipeline."""


class ASOAnalyzerError(Exception):
    """
    Base class for all errors raised by the analyzer
    """
    pass


class ValidationError(ASOAnalyzerError):
    """
    Thrown when caller input is malformed or missing (bad app id, empty keyword list)
    """
    pass


class ConfigError(ASOAnalyzerError):
    """
    Thrown when configuration cannot be used (missing API key, unknown provider)
    """
    pass


class NotFoundError(ASOAnalyzerError):
    """
    Thrown when the requested app does not exist in the store
    """
    pass


class ProviderError(ASOAnalyzerError):
    """
    Thrown when an AI provider call fails or its response cannot be parsed
    """
    pass


class ScoringError(ASOAnalyzerError):
    """
    Thrown by the keyword lookup client; always absorbed by the scoring engine
    """
    pass


class NetworkError(ASOAnalyzerError):
    """
    Thrown when fetching store metadata or an image fails
    """
    pass
