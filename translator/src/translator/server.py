"""Webhook gateway: receives Telegram updates over HTTP and hands them to the bot."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from translator.telegram.bot import WEBHOOK_PATH

if TYPE_CHECKING:
    from translator.dispatcher import TranslationDispatcher
    from translator.telegram.bot import TranslatorBot

logger = structlog.get_logger(__name__)


def create_server(
    bot: TranslatorBot,
    *,
    webhook_url: str = "",
    webhook_secret: str = "",
    dispatcher: TranslationDispatcher | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        app = bot.app
        async with app:
            await app.start()
            if webhook_url:
                await bot.set_webhook(webhook_url, secret_token=webhook_secret)
            logger.info("bot_ready", webhook_url=webhook_url)
            yield
            logger.info("shutting_down")
            await app.stop()
        if dispatcher is not None:
            await dispatcher.aclose()

    server = FastAPI(title="Group-chat Translator", lifespan=lifespan)

    @server.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @server.post(WEBHOOK_PATH)
    async def webhook(
        request: Request,
        x_telegram_bot_api_secret_token: str | None = Header(None),
    ) -> JSONResponse:
        if webhook_secret and x_telegram_bot_api_secret_token != webhook_secret:
            raise HTTPException(status_code=403, detail="Invalid secret token")

        try:
            data = await request.json()
            bot.enqueue_update(data)
        except Exception as e:
            logger.error("update_handoff_failed", error=str(e))
            return JSONResponse({"ok": False}, status_code=500)

        return JSONResponse({"ok": True})

    return server
