from __future__ import annotations

import json

import httpx
import pytest

from translator.errors import ProviderError
from translator.providers.base import TranslationProvider
from translator.providers.deepl import DEEPL_TIMEOUT_SECONDS, DeepLProvider


def _provider(handler) -> DeepLProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DeepLProvider("secret-key", api_url="https://deepl.test/v2/translate", client=client)


class TestDeepLProvider:
    def test_is_translation_provider(self):
        assert isinstance(DeepLProvider("k"), TranslationProvider)

    @pytest.mark.asyncio
    async def test_translate_sends_request(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"translations": [{"text": "bonjour"}]})

        result = await _provider(handler).translate("hello", "FR")

        assert result == "bonjour"
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://deepl.test/v2/translate"
        assert request.headers["Authorization"] == "DeepL-Auth-Key secret-key"
        assert json.loads(request.content) == {"text": ["hello"], "target_lang": "FR"}
        assert request.extensions["timeout"]["read"] == DEEPL_TIMEOUT_SECONDS

    @pytest.mark.asyncio
    async def test_context_and_pronouns_are_not_sent(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"translations": [{"text": "hallo"}]})

        await _provider(handler).translate(
            "hello", "DE", context_text="earlier", pronouns="she/her",
        )
        assert bodies == [{"text": ["hello"], "target_lang": "DE"}]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        provider = _provider(lambda request: httpx.Response(456, text="Quota exceeded"))
        with pytest.raises(ProviderError) as exc_info:
            await provider.translate("hello", "FR")
        assert exc_info.value.status == 456
        assert exc_info.value.provider == "deepl"
        assert "Quota exceeded" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {},
        {"translations": []},
        {"translations": [{"text": ""}]},
        {"translations": [{"detected_source_language": "EN"}]},
        ["not", "a", "dict"],
    ])
    async def test_invalid_response_format(self, body):
        provider = _provider(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ProviderError, match="invalid response format") as exc_info:
            await provider.translate("hello", "FR")
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_non_json_body_is_invalid_format(self):
        provider = _provider(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderError, match="invalid response format"):
            await provider.translate("hello", "FR")

    @pytest.mark.asyncio
    async def test_timeout_becomes_provider_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProviderError, match="timed out"):
            await _provider(handler).translate("hello", "FR")

    @pytest.mark.asyncio
    async def test_transport_error_becomes_provider_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError, match="transport error"):
            await _provider(handler).translate("hello", "FR")

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self):
        provider = _provider(lambda request: httpx.Response(200))
        await provider.aclose()
        assert provider._client.is_closed
