"""
User record storage: a remote key-value REST service or a local JSON file.

The backend is chosen once at startup (see dependencies.init_user_store) and
every access goes through user_key() so usernames compare case-insensitively.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

from shared.errors import StoreWriteError
from shared.types import UserRecord

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "user:"


def user_key(username: str) -> str:
    """Storage key for a username; the only place usernames are normalized."""
    return f"{USER_KEY_PREFIX}{username.lower()}"


class UserStore(Protocol):
    """Operations the service needs from the user record store."""

    def get(self, username: str) -> Optional[UserRecord]:
        ...

    def put(self, record: UserRecord) -> None:
        ...


class LocalFileUserStore:
    """
    In-memory map of user records mirrored to a flat JSON file.

    The file holds one object mapping user keys to records. It is read once
    on construction and rewritten wholesale on every put. Write failures are
    logged and otherwise ignored. With no data_file the store is memory-only.
    """

    def __init__(self, data_file: str | None = None):
        self.data_file = data_file
        self.records: dict[str, dict] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if not self.data_file or not os.path.exists(self.data_file):
            return
        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Failed to load local db from %s", self.data_file)
            return
        if not isinstance(data, dict):
            logger.error("Ignoring local db %s: not a JSON object", self.data_file)
            return
        self.records.update(data)
        logger.info("Loaded local database (%d users).", len(self.records))

    def _save(self) -> None:
        if not self.data_file:
            return
        try:
            with open(self.data_file, "w", encoding="utf-8") as f:
                json.dump(self.records, f)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save local db to %s", self.data_file)

    def get(self, username: str) -> Optional[UserRecord]:
        raw = self.records.get(user_key(username))
        if raw is None:
            return None
        return UserRecord.from_json(raw)

    def put(self, record: UserRecord) -> None:
        with self._lock:
            # Round-trip through JSON so callers never share state with the store.
            self.records[user_key(record.username)] = json.loads(
                json.dumps(record.to_json())
            )
            self._save()


@dataclass
class RemoteKvUserStore:
    """
    User records kept in a key-value service speaking the Upstash REST dialect.

    GET {url}/get/{key} answers {"result": <json string or null>};
    POST {url}/set/{key} stores the request body. A failed read is reported
    as a missing user; a failed write raises StoreWriteError.
    """

    url: str
    token: str
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self):
        self.url = self.url.rstrip("/")
        self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def get(self, username: str) -> Optional[UserRecord]:
        key = user_key(username)
        try:
            response = self.session.get(f"{self.url}/get/{key}")
            if not response.ok:
                return None
            result = response.json().get("result")
            return UserRecord.from_json(json.loads(result)) if result else None
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError):
            logger.exception("KV get failed for %s", key)
            return None

    def put(self, record: UserRecord) -> None:
        key = user_key(record.username)
        try:
            response = self.session.post(
                f"{self.url}/set/{key}", data=json.dumps(record.to_json())
            )
        except requests.RequestException as e:
            raise StoreWriteError("Failed to write to KV", details=str(e)) from e
        if not response.ok:
            raise StoreWriteError(
                "Failed to write to KV", details=f"KV responded {response.status_code}"
            )
