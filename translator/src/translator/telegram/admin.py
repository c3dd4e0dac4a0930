from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from translator.errors import PersistenceError
from translator.models import NO_PRONOUNS, Service, WhitelistEntry
from translator.telegram.formatters import (
    USAGE_WHITELIST_ADD,
    USAGE_WHITELIST_REMOVE,
    format_entry_saved,
    format_not_persisted,
    format_whitelist,
)

if TYPE_CHECKING:
    from translator.storage.whitelist import WhitelistStore

logger = structlog.get_logger(__name__)

_USER_ID_RE = re.compile(r"^\d+$")
_TARGET_LANG_RE = re.compile(r"^[a-zA-Z-]+$")

CMD_WHITELIST = "/whitelist"
CMD_WHITELIST_ADD = "/whitelist_add"
CMD_WHITELIST_REMOVE = "/whitelist_remove"


def split_command(text: str) -> tuple[str, list[str]]:
    """Split ``/cmd@botname arg ...`` into (``/cmd``, args)."""
    tokens = text.split()
    if not tokens:
        return "", []
    command = tokens[0].split("@", 1)[0].lower()
    return command, tokens[1:]


def is_admin_command(text: str) -> bool:
    command, _ = split_command(text)
    return command in (CMD_WHITELIST, CMD_WHITELIST_ADD, CMD_WHITELIST_REMOVE)


class AdminCommands:
    """Whitelist management commands, available to the admin in private chat."""

    def __init__(self, store: WhitelistStore) -> None:
        self._store = store

    def handle(self, text: str) -> str | None:
        command, args = split_command(text)
        if command == CMD_WHITELIST_ADD:
            return self._add(args)
        if command == CMD_WHITELIST_REMOVE:
            return self._remove(args)
        if command == CMD_WHITELIST:
            return format_whitelist(self._store.entries())
        return None

    def _add(self, args: list[str]) -> str:
        if len(args) < 3:
            return USAGE_WHITELIST_ADD

        user_id_arg, target_lang, service_arg = args[0], args[1], args[2]
        if not _USER_ID_RE.match(user_id_arg):
            return f"Invalid USER_ID '{user_id_arg}': must be numeric.\n{USAGE_WHITELIST_ADD}"
        if not _TARGET_LANG_RE.match(target_lang):
            return (
                f"Invalid TARGET_LANG '{target_lang}': letters and hyphens only.\n"
                f"{USAGE_WHITELIST_ADD}"
            )
        try:
            service = Service(service_arg.lower())
        except ValueError:
            allowed = ", ".join(s.value for s in Service)
            return f"Invalid SERVICE '{service_arg}': must be one of {allowed}.\n{USAGE_WHITELIST_ADD}"

        entry = WhitelistEntry(
            target_lang=target_lang,
            service=service.value,
            pronouns=args[3] if len(args) > 3 else NO_PRONOUNS,
            comment=" ".join(args[4:]),
        )
        user_id = int(user_id_arg)
        self._store.upsert(user_id, entry)
        logger.info(
            "whitelist_user_upserted",
            user_id=user_id,
            target_lang=entry.target_lang,
            service=entry.service,
        )
        return self._persist(format_entry_saved(user_id, entry))

    def _remove(self, args: list[str]) -> str:
        if len(args) != 1 or not _USER_ID_RE.match(args[0]):
            return USAGE_WHITELIST_REMOVE

        user_id = int(args[0])
        if not self._store.remove(user_id):
            return f"User {user_id} not found in the whitelist."

        logger.info("whitelist_user_removed", user_id=user_id)
        return self._persist(f"User {user_id} removed from the whitelist.")

    def _persist(self, msg: str) -> str:
        try:
            self._store.save()
        except PersistenceError:
            return format_not_persisted(msg)
        return msg
