# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import json
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from shared.errors import ValidationError

ID_FIELD = "id"
UPDATED_AT_FIELD = "updatedAt"
IS_DELETED_FIELD = "isDeleted"

# Fields identifying a study log entry.
LOG_KEY_FIELDS = ("cardId", "date", "rating")

EPOCH_MS = 0.0


def parse_updated_at(value: Any) -> float:
    """
    Converts an entity's updatedAt value into epoch milliseconds.

    Args:
        value (Any): An ISO-8601 string, a number of epoch milliseconds, or
            anything else.

    Returns:
        float: The timestamp in milliseconds. Missing or unparsable values
            map to 0 so they lose against any real update.
    """
    if isinstance(value, bool) or value is None:
        return EPOCH_MS
    if isinstance(value, (int, float)):
        return float(value) if value == value else EPOCH_MS
    if not isinstance(value, str) or not value.strip():
        return EPOCH_MS
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return EPOCH_MS
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000


def _entity_id(entity: dict, collection: str) -> Any:
    entity_id = entity.get(ID_FIELD) if isinstance(entity, dict) else None
    if isinstance(entity_id, bool) or not isinstance(entity_id, (str, int, float)):
        raise ValidationError(
            "Entity is missing an id",
            details=f"Every item in '{collection}' needs an '{ID_FIELD}'.",
        )
    return entity_id


def reconcile(
    server_list: Optional[Iterable[dict]],
    client_list: Optional[Iterable[dict]],
    collection: str = "entities",
) -> List[dict]:
    """
    Merges two lists of id-bearing, timestamped, soft-deletable entities.

    Server entities seed the result in order. Each client entity is either
    appended (new id) or resolved against the stored version: the later
    updatedAt wins, ties go to the client, and the deletion flag of the
    result is the OR of both versions, written only when either version
    carries one. Deleted entities are kept.

    Args:
        server_list: Entities from the stored snapshot.
        client_list: Entities sent by the client.
        collection (str): Name used in error messages.

    Returns:
        List[dict]: One entity per id, server order first, then new client ids.
    """
    merged: dict[Any, dict] = {}
    for entity in server_list or []:
        merged[_entity_id(entity, collection)] = entity

    for entity in client_list or []:
        entity_id = _entity_id(entity, collection)
        existing = merged.get(entity_id)
        if existing is None:
            merged[entity_id] = entity
            continue

        server_time = parse_updated_at(existing.get(UPDATED_AT_FIELD))
        client_time = parse_updated_at(entity.get(UPDATED_AT_FIELD))
        winner = entity if client_time >= server_time else existing
        # Neither version carries the flag: keep the winner as sent so an
        # unchanged entity merges to the same value every time.
        if IS_DELETED_FIELD not in existing and IS_DELETED_FIELD not in entity:
            merged[entity_id] = winner
            continue
        is_deleted = bool(existing.get(IS_DELETED_FIELD)) or bool(
            entity.get(IS_DELETED_FIELD)
        )
        merged[entity_id] = {**winner, IS_DELETED_FIELD: is_deleted}

    return list(merged.values())


def _log_value(value: Any) -> str:
    # 3 and 3.0 are the same rating.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return json.dumps(value, sort_keys=True, default=str)


def _log_key(entry: dict) -> tuple:
    if not isinstance(entry, dict):
        raise ValidationError(
            "Invalid study log entry", details="Log entries must be objects."
        )
    return tuple(_log_value(entry.get(name)) for name in LOG_KEY_FIELDS)


def merge_logs(
    server_log: Optional[Iterable[dict]], client_log: Optional[Iterable[dict]]
) -> List[dict]:
    """Concatenates server then client log entries, dropping repeats of
    (cardId, date, rating) so re-submitting a log never duplicates it."""
    seen = set()
    merged = []
    for entry in [*(server_log or []), *(client_log or [])]:
        key = _log_key(entry)
        if key in seen:
            continue
        seen.add(key)
        merged.append(entry)
    return merged


def resolve_profile(
    server_profile: Optional[dict], client_profile: Optional[dict]
) -> Optional[dict]:
    # The client's profile replaces the stored one whenever it is sent.
    return client_profile if client_profile is not None else server_profile
