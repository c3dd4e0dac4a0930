from __future__ import annotations

from collections.abc import Mapping

import structlog

from translator.errors import ProviderError, UnknownServiceError
from translator.models import NO_PRONOUNS, Service
from translator.providers.base import TranslationProvider

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


class TranslationDispatcher:
    """Routes a translation to the provider for ``service`` and retries it.

    Attempts run back to back, without delay. An unknown service fails on the
    first attempt; provider errors are retried until MAX_ATTEMPTS is reached,
    then the last one is raised.
    """

    def __init__(self, providers: Mapping[Service, TranslationProvider]) -> None:
        self._providers = dict(providers)

    def _resolve(self, service: str) -> TranslationProvider:
        try:
            provider = self._providers.get(Service(service.lower()))
        except ValueError:
            provider = None
        if provider is None:
            raise UnknownServiceError(service)
        return provider

    async def translate(
        self,
        text: str,
        target_lang: str,
        service: str,
        context_text: str = "",
        pronouns: str = NO_PRONOUNS,
    ) -> str:
        last_error: ProviderError | None = None

        for attempt in range(1, MAX_ATTEMPTS + 1):
            logger.debug(
                "translation_attempt",
                attempt=attempt,
                max_attempts=MAX_ATTEMPTS,
                service=service,
            )
            try:
                provider = self._resolve(service)
            except UnknownServiceError as e:
                logger.error("translation_attempt_failed", attempt=attempt, error=str(e))
                raise

            try:
                return await provider.translate(
                    text,
                    target_lang,
                    context_text=context_text,
                    pronouns=pronouns,
                )
            except ProviderError as e:
                logger.error(
                    "translation_attempt_failed",
                    attempt=attempt,
                    service=service,
                    status=e.status,
                    error=str(e),
                )
                last_error = e

        assert last_error is not None
        raise last_error

    async def aclose(self) -> None:
        for provider in self._providers.values():
            await provider.aclose()
