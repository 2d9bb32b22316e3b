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

import logging
from typing import Optional

from deckproxy.store import UserStore
from shared.errors import UserNotFound
from shared.types import DataBundle
from sync.reconcile import merge_logs, reconcile, resolve_profile

logger = logging.getLogger(__name__)


def merge_bundles(server: DataBundle, client: DataBundle) -> DataBundle:
    """
    Reconciles a stored bundle with one sent by the client.

    Args:
        server (DataBundle): The bundle currently stored for the user.
        client (DataBundle): The bundle sent by the client.

    Returns:
        DataBundle: Entity lists reconciled per id, the study log
            deduplicated, and the client profile preferred when present.
    """
    return DataBundle(
        decks=reconcile(server.decks, client.decks, "decks"),
        cards=reconcile(server.cards, client.cards, "cards"),
        study_history=merge_logs(server.study_history, client.study_history),
        user_profile=resolve_profile(server.user_profile, client.user_profile),
        user_achievements=reconcile(
            server.user_achievements, client.user_achievements, "userAchievements"
        ),
    )


class SyncEngine:
    """Read-merge-write of a user's bundle against the user store.

    There is no locking or version check: two merges for the same user that
    overlap both read the same snapshot and the later put replaces the
    earlier one in full.
    """

    def __init__(self, store: UserStore):
        self.store = store

    def load(self, username: str) -> Optional[DataBundle]:
        record = self.store.get(username)
        return record.data if record else None

    def merge(self, username: str, client_bundle: DataBundle) -> DataBundle:
        record = self.store.get(username)
        if record is None:
            raise UserNotFound(username)

        merged = merge_bundles(record.data, client_bundle)
        record.data = merged
        self.store.put(record)
        logger.info(
            "Merged sync data for %s: %d decks, %d cards, %d log entries, %d achievements",
            username,
            len(merged.decks),
            len(merged.cards),
            len(merged.study_history),
            len(merged.user_achievements),
        )
        return merged
