from __future__ import annotations

from abc import ABC, abstractmethod

from translator.models import NO_PRONOUNS


class TranslationProvider(ABC):
    """Uniform call contract for a translation backend.

    Implementations make a single attempt and raise ProviderError on any
    failure; retries belong to the dispatcher.
    """

    name: str

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_lang: str,
        *,
        context_text: str = "",
        pronouns: str = NO_PRONOUNS,
    ) -> str: ...

    async def aclose(self) -> None:
        return None
