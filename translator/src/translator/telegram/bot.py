from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import structlog
from telegram import Message, ReplyParameters, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from translator.models import IncomingMessage

if TYPE_CHECKING:
    from translator.models import Reply
    from translator.telegram.router import MessageRouter

logger = structlog.get_logger(__name__)

WEBHOOK_PATH = "/webhook"


def incoming_from_message(message: Message) -> IncomingMessage:
    reply_to = message.reply_to_message
    reply_to_text = ""
    if reply_to is not None:
        reply_to_text = reply_to.text or reply_to.caption or ""

    return IncomingMessage(
        message_id=message.message_id,
        chat_id=message.chat.id,
        chat_type=message.chat.type,
        sender_id=message.from_user.id if message.from_user else None,
        text=message.text or message.caption or "",
        reply_to_text=reply_to_text,
    )


class TranslatorBot:
    def __init__(self, token: str, router: MessageRouter) -> None:
        self.token = token
        self._router = router
        self._app: Application | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def app(self) -> Application:
        if self._app is None:
            raise RuntimeError("bot application not built")
        return self._app

    def build(self, *, polling: bool = False) -> Application:
        builder = Application.builder().token(self.token)
        if not polling:
            builder = builder.updater(None)
        self._app = builder.build()
        self._app.add_handler(
            MessageHandler(filters.UpdateType.MESSAGE, self._message_handler)
        )
        self._app.add_error_handler(self._error_handler)
        return self._app

    async def set_webhook(self, base_url: str, *, secret_token: str = "") -> None:
        url = f"{base_url.rstrip('/')}{WEBHOOK_PATH}"
        try:
            await self.app.bot.set_webhook(url, secret_token=secret_token or None)
            logger.info("webhook_set", url=url)
        except Exception as e:
            logger.error("webhook_set_failed", url=url, error=str(e))

    # --- Update intake ---

    def enqueue_update(self, data: dict[str, Any]) -> None:
        """Schedule processing of a raw webhook payload and return immediately."""
        update = Update.de_json(data, self.app.bot)
        task = asyncio.create_task(self.app.process_update(update))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # --- Handlers ---

    async def _message_handler(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        if update.message is None:
            return
        reply = await self._router.route(incoming_from_message(update.message))
        if reply is not None:
            await self._send_reply(update.message.chat.id, reply)

    async def _send_reply(self, chat_id: int, reply: Reply) -> None:
        reply_parameters = None
        if reply.reply_to_message_id is not None:
            reply_parameters = ReplyParameters(message_id=reply.reply_to_message_id)
        await self.app.bot.send_message(
            chat_id=chat_id, text=reply.text, reply_parameters=reply_parameters,
        )

    async def _error_handler(
        self, update: object, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        logger.error("update_handling_failed", error=str(context.error), exc_info=context.error)
