"""
Registration and login against the user store.

Credentials are stored and compared as given; hardening them is out of scope.
"""

from __future__ import annotations

import logging

from deckproxy.store import UserStore
from shared.errors import AuthenticationError, ConflictError
from shared.types import DataBundle, UserRecord

logger = logging.getLogger(__name__)


def register(store: UserStore, username: str, password: str) -> UserRecord:
    if store.get(username) is not None:
        raise ConflictError("Username taken")
    record = UserRecord(username=username, password=password, data=DataBundle())
    store.put(record)
    logger.info("Registered user %s", username)
    return record


def login(store: UserStore, username: str, password: str) -> UserRecord:
    record = store.get(username)
    if record is None or record.password != password:
        raise AuthenticationError("Invalid credentials")
    return record
