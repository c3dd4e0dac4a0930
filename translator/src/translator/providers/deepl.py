from __future__ import annotations

import httpx
import structlog

from translator.errors import ProviderError
from translator.models import NO_PRONOUNS
from translator.providers.base import TranslationProvider

logger = structlog.get_logger(__name__)

DEEPL_FREE_API_URL = "https://api-free.deepl.com/v2/translate"
DEEPL_TIMEOUT_SECONDS = 10.0


class DeepLProvider(TranslationProvider):
    """DeepL REST API, one request per call."""

    name = "deepl"

    def __init__(
        self,
        auth_key: str,
        *,
        api_url: str = DEEPL_FREE_API_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._auth_key = auth_key
        self._api_url = api_url
        self._client = client or httpx.AsyncClient(timeout=DEEPL_TIMEOUT_SECONDS)

    async def translate(
        self,
        text: str,
        target_lang: str,
        *,
        context_text: str = "",
        pronouns: str = NO_PRONOUNS,
    ) -> str:
        try:
            response = await self._client.post(
                self._api_url,
                headers={"Authorization": f"DeepL-Auth-Key {self._auth_key}"},
                json={"text": [text], "target_lang": target_lang},
                timeout=DEEPL_TIMEOUT_SECONDS,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(self.name, "request timed out") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"transport error: {e}") from e

        if not response.is_success:
            raise ProviderError(
                self.name, response.text[:200] or response.reason_phrase,
                status=response.status_code,
            )

        try:
            translated = response.json()["translations"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, "invalid response format") from e
        if not isinstance(translated, str) or not translated:
            raise ProviderError(self.name, "invalid response format")

        logger.debug("deepl_translated", target_lang=target_lang, chars=len(text))
        return translated

    async def aclose(self) -> None:
        await self._client.aclose()
