from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import Any

import structlog
import uvicorn

from translator.config import Settings
from translator.dispatcher import TranslationDispatcher
from translator.logging import setup_logging
from translator.models import Service
from translator.providers.deepl import DeepLProvider
from translator.providers.llm import LLMProvider
from translator.server import create_server
from translator.storage.whitelist import WhitelistStore
from translator.telegram.bot import TranslatorBot
from translator.telegram.formatters import format_whitelist
from translator.telegram.router import MessageRouter

logger = structlog.get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="translator", description="Telegram group-chat translator bot"
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("whitelist", help="Print the current whitelist and exit")
    return parser.parse_args(argv)


def create_app_components(
    *,
    telegram_bot_token: str,
    whitelist_path: str,
    admin_user_id: int | None = None,
    deepl_auth_key: str = "",
    deepl_api_url: str = "https://api-free.deepl.com/v2/translate",
    openai_api_key: str = "",
    llm_model: str = "gpt-3.5-turbo",
    llm_temperature: float = 0.2,
    llm_api_base: str | None = None,
    llm_timeout: float = 60.0,
    use_context: bool = False,
) -> dict[str, Any]:
    # Whitelist
    store = WhitelistStore(whitelist_path)
    store.load()

    # Providers
    dispatcher = TranslationDispatcher({
        Service.DEEPL: DeepLProvider(deepl_auth_key, api_url=deepl_api_url),
        Service.CHATGPT: LLMProvider(
            openai_api_key,
            model=llm_model,
            temperature=llm_temperature,
            api_base=llm_api_base,
            timeout=llm_timeout,
            use_context=use_context,
        ),
    })

    # Telegram
    router = MessageRouter(store=store, dispatcher=dispatcher, admin_id=admin_user_id)
    bot = TranslatorBot(token=telegram_bot_token, router=router)

    return {
        "store": store,
        "dispatcher": dispatcher,
        "router": router,
        "bot": bot,
    }


def _build_components(settings: Settings) -> dict[str, Any]:
    return create_app_components(
        telegram_bot_token=settings.telegram_bot_token,
        whitelist_path=settings.whitelist_path,
        admin_user_id=settings.admin_user_id,
        deepl_auth_key=settings.deepl_auth_key,
        deepl_api_url=settings.deepl_api_url,
        openai_api_key=settings.openai_api_key,
        llm_model=settings.llm_model,
        llm_temperature=settings.llm_temperature,
        llm_api_base=settings.llm_api_base,
        llm_timeout=settings.llm_timeout,
        use_context=settings.use_context,
    )


def _run_whitelist(components: dict[str, Any]) -> None:
    store: WhitelistStore = components["store"]
    print(format_whitelist(store.entries()))


def _run_webhook(components: dict[str, Any], settings: Settings) -> None:
    bot: TranslatorBot = components["bot"]
    bot.build()
    server = create_server(
        bot,
        webhook_url=settings.webhook_url,
        webhook_secret=settings.webhook_secret,
        dispatcher=components["dispatcher"],
    )
    logger.info("serving_webhooks", host=settings.host, port=settings.port)
    uvicorn.run(server, host=settings.host, port=settings.port)


async def _run_polling(components: dict[str, Any]) -> None:
    bot: TranslatorBot = components["bot"]
    dispatcher: TranslationDispatcher = components["dispatcher"]

    app = bot.build(polling=True)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with app:
        await app.bot.delete_webhook()
        await app.start()
        await app.updater.start_polling()
        logger.info("bot_ready", mode="polling")

        await stop.wait()

        logger.info("shutting_down")
        await app.updater.stop()
        await app.stop()
    await dispatcher.aclose()


def main() -> None:
    args = parse_args()
    settings = Settings()  # type: ignore[call-arg]
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    logger.info("starting_translator")

    try:
        components = _build_components(settings)

        if args.command == "whitelist":
            _run_whitelist(components)
            return

        if settings.webhook_url:
            _run_webhook(components, settings)
        else:
            asyncio.run(_run_polling(components))
    except Exception:
        logger.exception("fatal_error")
        sys.exit(1)


if __name__ == "__main__":
    main()
