from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, BaseModel, Field, field_validator

NO_PRONOUNS = "none"


# --- Enums ---


class Service(StrEnum):
    DEEPL = "deepl"
    CHATGPT = "chatgpt"


class ChatType(StrEnum):
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


def is_group_like(chat_type: str) -> bool:
    return chat_type.endswith("group")


# --- Whitelist ---


class WhitelistEntry(BaseModel, frozen=True):
    target_lang: str = Field(
        min_length=1, validation_alias=AliasChoices("target_lang", "targetLanguage")
    )
    service: str
    pronouns: str = NO_PRONOUNS
    comment: str = ""

    @field_validator("service")
    @classmethod
    def _lower_service(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("service must not be empty")
        return value


# --- Messages ---


class IncomingMessage(BaseModel, frozen=True):
    message_id: int
    chat_id: int
    chat_type: str
    sender_id: int | None = None
    text: str = ""
    reply_to_text: str = ""


class Reply(BaseModel, frozen=True):
    text: str
    reply_to_message_id: int | None = None
