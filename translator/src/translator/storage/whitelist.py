from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import ValidationError

from translator.errors import PersistenceError
from translator.models import WhitelistEntry

logger = structlog.get_logger(__name__)


class WhitelistStore:
    """Per-user translation settings backed by a JSON document.

    The in-memory mapping is the source of truth between saves. ``upsert`` and
    ``remove`` only touch memory; callers persist with ``save``.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._entries: dict[int, WhitelistEntry] = {}
        self.degraded = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[int, WhitelistEntry]:
        self._entries = self._read()
        return dict(self._entries)

    def _read(self) -> dict[int, WhitelistEntry]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("whitelist_read_failed", path=str(self._path), error=str(e))
            return {}

        users = raw.get("users") if isinstance(raw, dict) else None
        if not isinstance(users, list):
            logger.error("whitelist_malformed", path=str(self._path))
            return {}

        entries: dict[int, WhitelistEntry] = {}
        for user in users:
            if not isinstance(user, dict):
                continue
            try:
                user_id = int(user["id"])
                entry = WhitelistEntry.model_validate(user)
            except (KeyError, TypeError, ValueError, ValidationError):
                logger.warning("whitelist_entry_skipped", entry=user)
                continue
            entries[user_id] = entry

        logger.info("whitelist_loaded", path=str(self._path), users=len(entries))
        return entries

    def save(self) -> None:
        """Rewrite the whole document atomically.

        Raises PersistenceError on failure; the in-memory mapping is kept and
        the store stays ``degraded`` until a later save succeeds.
        """
        document = {
            "users": [
                {"id": user_id, **entry.model_dump()}
                for user_id, entry in self._entries.items()
            ]
        }
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self._path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            self.degraded = True
            logger.error("whitelist_write_failed", path=str(self._path), error=str(e))
            raise PersistenceError(f"Could not write {self._path}: {e}") from e

        self.degraded = False
        logger.info("whitelist_saved", path=str(self._path), users=len(self._entries))

    def get(self, user_id: int) -> WhitelistEntry | None:
        return self._entries.get(user_id)

    def upsert(self, user_id: int, entry: WhitelistEntry) -> None:
        self._entries[user_id] = entry

    def remove(self, user_id: int) -> bool:
        return self._entries.pop(user_id, None) is not None

    def entries(self) -> dict[int, WhitelistEntry]:
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
