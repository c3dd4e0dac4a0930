from __future__ import annotations


class TranslatorError(Exception):
    """Base class for errors raised by the translator."""


class ConfigurationError(TranslatorError):
    """Bad configuration. Never retried."""


class UnknownServiceError(ConfigurationError):
    def __init__(self, service: str) -> None:
        super().__init__(f"Unknown translation service: {service}")
        self.service = service


class ProviderError(TranslatorError):
    """A translation backend failed or answered with something unusable."""

    def __init__(self, provider: str, message: str, *, status: int | None = None) -> None:
        detail = f"{provider}: {message}" if status is None else f"{provider} ({status}): {message}"
        super().__init__(detail)
        self.provider = provider
        self.message = message
        self.status = status


class PersistenceError(TranslatorError):
    """The whitelist could not be written to disk."""
