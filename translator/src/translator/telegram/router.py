from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from translator.models import ChatType, IncomingMessage, Reply, is_group_like
from translator.telegram.admin import AdminCommands, is_admin_command, split_command
from translator.telegram.formatters import TRANSLATION_FAILED, format_welcome

if TYPE_CHECKING:
    from translator.dispatcher import TranslationDispatcher
    from translator.storage.whitelist import WhitelistStore

logger = structlog.get_logger(__name__)

_GREETING_COMMANDS = ("/start", "/help")


def is_admin(user_id: int | None, *, admin_id: int | None) -> bool:
    return admin_id is not None and user_id == admin_id


class MessageRouter:
    """Decides what, if anything, to answer to one incoming message."""

    def __init__(
        self,
        *,
        store: WhitelistStore,
        dispatcher: TranslationDispatcher,
        admin_id: int | None = None,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._admin_id = admin_id
        self._admin_commands = AdminCommands(store)

    async def route(self, message: IncomingMessage) -> Reply | None:
        text = message.text
        logger.info(
            "message_received",
            user_id=message.sender_id,
            chat_type=message.chat_type,
        )

        if not text:
            logger.debug("message_without_text", message_id=message.message_id)
            return None

        if message.chat_type == ChatType.PRIVATE:
            return self._route_private(message)

        if is_group_like(message.chat_type):
            return await self._route_group(message)

        return None

    def _route_private(self, message: IncomingMessage) -> Reply | None:
        text = message.text.strip()
        command, args = split_command(text)

        if command in _GREETING_COMMANDS and not args:
            logger.info("greeting", user_id=message.sender_id)
            return Reply(text=format_welcome(message.sender_id))

        if is_admin(message.sender_id, admin_id=self._admin_id) and is_admin_command(text):
            reply_text = self._admin_commands.handle(text)
            return Reply(text=reply_text) if reply_text else None

        return None

    async def _route_group(self, message: IncomingMessage) -> Reply | None:
        if message.text.lstrip().startswith("/"):
            return None

        entry = self._store.get(message.sender_id) if message.sender_id is not None else None
        if entry is None:
            logger.info("user_not_whitelisted", user_id=message.sender_id)
            return None

        logger.debug(
            "translating",
            user_id=message.sender_id,
            service=entry.service,
            target_lang=entry.target_lang,
            has_context=bool(message.reply_to_text),
        )
        try:
            translated = await self._dispatcher.translate(
                message.text,
                entry.target_lang,
                entry.service,
                context_text=message.reply_to_text,
                pronouns=entry.pronouns,
            )
        except Exception as e:
            logger.error("translation_failed", user_id=message.sender_id, error=str(e))
            return Reply(text=TRANSLATION_FAILED, reply_to_message_id=message.message_id)

        if translated == message.text:
            logger.info("translation_unchanged", user_id=message.sender_id)
            return None

        return Reply(text=translated, reply_to_message_id=message.message_id)
