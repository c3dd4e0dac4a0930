from __future__ import annotations

import time

import structlog
from litellm import acompletion

from translator.errors import ProviderError
from translator.models import NO_PRONOUNS
from translator.providers.base import TranslationProvider

logger = structlog.get_logger(__name__)

CONTEXT_BEGIN = "<<<CONTEXT>>>"
CONTEXT_END = "<<<END CONTEXT>>>"

_SYSTEM_PROMPT = (
    "You are a helpful AI that translates user content into language code {target_lang}. "
    "Rules:\n"
    "- the content is a chat message, so slang and informal wording are acceptable, "
    "be casual but precise\n"
    "- output only the translated message and nothing else\n"
    "- if the text is already in that language, return it as-is"
)

_CONTEXT_CLAUSE = (
    "\n- the message is a reply; the earlier message between "
    f"{CONTEXT_BEGIN} and {CONTEXT_END} is the message being replied to. "
    "Use it only to disambiguate meaning, never translate or repeat it"
)

_PRONOUN_CLAUSE = (
    "\n- the author of the message uses the pronouns \"{pronouns}\"; "
    "where the target language marks gender, use forms that match them"
)


def build_messages(
    text: str,
    target_lang: str,
    *,
    context_text: str = "",
    pronouns: str = NO_PRONOUNS,
    use_context: bool = False,
) -> list[dict[str, str]]:
    with_context = use_context and bool(context_text)

    system_prompt = _SYSTEM_PROMPT.format(target_lang=target_lang)
    if with_context:
        system_prompt += _CONTEXT_CLAUSE
    if pronouns != NO_PRONOUNS:
        system_prompt += _PRONOUN_CLAUSE.format(pronouns=pronouns)

    messages = [{"role": "system", "content": system_prompt}]
    if with_context:
        messages.append({
            "role": "user",
            "content": f"{CONTEXT_BEGIN}\n{context_text}\n{CONTEXT_END}",
        })
    messages.append({"role": "user", "content": text})
    return messages


class LLMProvider(TranslationProvider):
    """Chat-completion translation via LiteLLM."""

    name = "chatgpt"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.2,
        api_base: str | None = None,
        timeout: float = 60.0,
        use_context: bool = False,
    ) -> None:
        self.model = model
        self._api_key = api_key
        self._temperature = temperature
        self._api_base = api_base
        self._timeout = timeout
        self._use_context = use_context

    async def translate(
        self,
        text: str,
        target_lang: str,
        *,
        context_text: str = "",
        pronouns: str = NO_PRONOUNS,
    ) -> str:
        messages = build_messages(
            text,
            target_lang,
            context_text=context_text,
            pronouns=pronouns,
            use_context=self._use_context,
        )
        start = time.monotonic()

        try:
            response = await acompletion(
                model=self.model,
                messages=messages,
                temperature=self._temperature,
                api_key=self._api_key,
                api_base=self._api_base,
                timeout=self._timeout,
            )
        except Exception as e:
            raise ProviderError(
                self.name, str(e) or type(e).__name__,
                status=getattr(e, "status_code", None),
            ) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError(self.name, "invalid response format") from e
        if not isinstance(content, str) or not content.strip():
            raise ProviderError(self.name, "invalid response format")

        logger.info(
            "llm_call_complete",
            model=self.model,
            context_used=len(messages) > 2,
            latency_ms=int((time.monotonic() - start) * 1000),
        )
        return content.strip()
