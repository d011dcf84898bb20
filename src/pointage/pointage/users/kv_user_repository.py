from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, ContextManager, List, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_USER_LIST_LIMIT, USER_PREFIX
from ..core.exceptions import ConflictError
from ..database.kv_base import Record, fetch_records, merge_patch, stamp_new
from ..database.kv_store import KeyValueStore, read_json, write_json
from ..indexing import keys
from ..indexing.index import KeyLocks, UniqueIndex
from ..indexing.journal import WriteJournal
from .repository import UserRepository

logger = logging.getLogger(__name__)


class KVUserRepository(UserRepository):
    def __init__(
        self,
        store: KeyValueStore,
        *,
        locks: Optional[KeyLocks] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._store = store
        self._emails = UniqueIndex(store)
        self._locks = locks or KeyLocks()
        self._clock = clock

    def create(self, data: Record) -> Record:
        record = stamp_new(data, self._clock())
        user_id = keys.check_key_part(record["id"], "User id")
        if data.get("id") and self.get_by_id(user_id) is not None:
            raise ConflictError(f"User {user_id!r} already exists")

        email = record.get("email")
        key = keys.user_key(user_id)
        with self._email_lock(email):
            if email:
                self._ensure_email_free(email, user_id)
            with WriteJournal("user.create", user_id) as journal:
                journal.run("put user", lambda: write_json(self._store, key, record), undo=lambda: self._store.delete(key))
                if email:
                    self._index_email(journal, email, user_id)

        logger.debug("Created user %s", user_id)
        return record

    def get_by_id(self, user_id: str) -> Optional[Record]:
        return read_json(self._store, keys.user_key(user_id))

    def get_by_email(self, email: str) -> Optional[Record]:
        if not email:
            return None
        user_id = self._emails.get(keys.user_email_key(email))
        if not user_id:
            return None
        user = self.get_by_id(user_id)
        if user is None or user.get("email") != email:
            logger.debug("Email index for %s is stale (points to %s)", email, user_id)
            return None
        return user

    def update(self, user_id: str, patch: Record) -> Optional[Record]:
        existing = self.get_by_id(user_id)
        if not existing:
            return None

        updated = merge_patch(existing, patch, self._clock())
        old_email = existing.get("email")
        new_email = updated.get("email")
        email_changed = old_email != new_email

        key = keys.user_key(user_id)
        with self._email_lock(new_email if email_changed else None):
            if email_changed and new_email:
                self._ensure_email_free(new_email, user_id)
            with WriteJournal("user.update", user_id) as journal:
                if email_changed:
                    if old_email:
                        self._unindex_email(journal, old_email, user_id)
                    if new_email:
                        self._index_email(journal, new_email, user_id)
                    logger.debug("Moved user %s email index %s -> %s", user_id, old_email, new_email)
                journal.run(
                    "put user",
                    lambda: write_json(self._store, key, updated),
                    undo=lambda: write_json(self._store, key, existing),
                )
        return updated

    def delete(self, user_id: str) -> bool:
        existing = self.get_by_id(user_id)
        if not existing:
            return False

        key = keys.user_key(user_id)
        with WriteJournal("user.delete", user_id) as journal:
            if existing.get("email"):
                self._unindex_email(journal, existing["email"], user_id)
            journal.run(
                "delete user",
                lambda: self._store.delete(key),
                undo=lambda: write_json(self._store, key, existing),
            )

        logger.debug("Deleted user %s", user_id)
        return True

    def list_all(self, limit: int = DEFAULT_USER_LIST_LIMIT) -> List[Record]:
        # Index keys share the `user:` prefix; keep only primary keys.
        user_keys = [k for k in self._store.list_keys(USER_PREFIX) if keys.is_user_primary_key(k)]
        ids = [k[len(USER_PREFIX):] for k in user_keys[: int(limit)]]
        return fetch_records(self._store, ids, keys.user_key)

    def _email_lock(self, email: Optional[str]) -> ContextManager:
        """Serializes the uniqueness check and the index write for one email."""
        if not email:
            return nullcontext()
        return self._locks.for_key(keys.user_email_key(email))

    def _ensure_email_free(self, email: str, user_id: str) -> None:
        owner_id = self._emails.get(keys.user_email_key(email))
        if not owner_id or owner_id == user_id:
            return
        owner = self.get_by_id(owner_id)
        if owner is not None and owner.get("email") == email:
            raise ConflictError(f"Email {email!r} is already in use")
        logger.debug("Overwriting stale email index for %s (was %s)", email, owner_id)

    def _index_email(self, journal: WriteJournal, email: str, user_id: str) -> None:
        email_key = keys.user_email_key(email)
        previous = self._emails.get(email_key)

        def undo() -> None:
            if previous:
                self._emails.set(email_key, previous)
            else:
                self._emails.remove(email_key, expected_id=user_id)

        journal.run("index email", lambda: self._emails.set(email_key, user_id), undo=undo)

    def _unindex_email(self, journal: WriteJournal, email: str, user_id: str) -> None:
        email_key = keys.user_email_key(email)
        journal.run(
            "unindex email",
            lambda: self._emails.remove(email_key, expected_id=user_id),
            undo=lambda: self._emails.set(email_key, user_id),
        )
