from __future__ import annotations

import json
from collections.abc import Mapping

from translator.models import NO_PRONOUNS, WhitelistEntry

PROJECT_URL = "https://github.com/deseven/telegram-groupchat-translator"

TRANSLATION_FAILED = "Translation failed"

USAGE_WHITELIST_ADD = "Usage: /whitelist_add USER_ID TARGET_LANG SERVICE [PRONOUNS] [COMMENT]"
USAGE_WHITELIST_REMOVE = "Usage: /whitelist_remove USER_ID"


# ---------------------------------------------------------------------------
# Static messages
# ---------------------------------------------------------------------------

def format_welcome(user_id: int | None) -> str:
    return (
        "Hello! This is a private translation bot. "
        "If you have admin rights you can use these commands:\n"
        "/whitelist - to display current whitelist\n"
        "/whitelist_add - to add or edit a user in the whitelist\n"
        "/whitelist_remove - to remove a user from the whitelist\n\n"
        "Otherwise you can set up your own instance, more info here:\n"
        f"{PROJECT_URL}\n\n"
        f"Your User ID is {user_id}."
    )


# ---------------------------------------------------------------------------
# Whitelist
# ---------------------------------------------------------------------------

def format_whitelist(entries: Mapping[int, WhitelistEntry]) -> str:
    if not entries:
        return "The whitelist is empty."
    rows = [{"id": user_id, **entry.model_dump()} for user_id, entry in entries.items()]
    return "Current whitelist:\n" + json.dumps(rows, indent=2, ensure_ascii=False)


def format_entry_saved(user_id: int, entry: WhitelistEntry) -> str:
    msg = (
        f"User {user_id} added/updated. "
        f"target_lang={entry.target_lang}, service={entry.service}"
    )
    if entry.pronouns != NO_PRONOUNS:
        msg += f", pronouns={entry.pronouns}"
    if entry.comment:
        msg += f", comment={entry.comment}"
    return msg


def format_not_persisted(msg: str) -> str:
    return msg + "\nWarning: the whitelist file could not be saved, the change is active until restart."
