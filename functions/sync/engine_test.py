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

import concurrent.futures
import threading
import unittest

from deckproxy.store import LocalFileUserStore
from shared.errors import UserNotFound, ValidationError
from shared.types import DataBundle, UserRecord
from sync.engine import SyncEngine, merge_bundles


def _client_bundle() -> DataBundle:
    return DataBundle.from_json(
        {
            "decks": [
                {"id": "d1", "name": "Verbs", "updatedAt": "2024-05-02T00:00:00Z"}
            ],
            "cards": [
                {"id": "c1", "deckId": "d1", "front": "laufen"},
                {"id": "c2", "deckId": "d1", "front": "gehen", "isDeleted": True},
            ],
            "studyHistory": [
                {"cardId": "c1", "date": "2024-05-02", "rating": 3},
                {"cardId": "c1", "date": "2024-05-03", "rating": 4},
            ],
            "userProfile": {"theme": "light"},
            "userAchievements": [{"id": "first-review", "unlockedAt": "2024-05-02"}],
        }
    )


class _RacingStore(LocalFileUserStore):
    """Holds every reader until `parties` readers have loaded the record."""

    def __init__(self, parties: int):
        super().__init__()
        self.barrier = threading.Barrier(parties)
        self.racing = False

    def get(self, username):
        record = super().get(username)
        if self.racing:
            self.barrier.wait(timeout=5)
        return record


class SyncEngineTest(unittest.TestCase):

    def setUp(self):
        self.store = LocalFileUserStore()
        self.store.put(UserRecord(username="Alice", password="pw"))
        self.engine = SyncEngine(self.store)

    def test_merge_requires_existing_user(self):
        with self.assertRaises(UserNotFound):
            self.engine.merge("nobody", _client_bundle())
        self.assertIsNone(self.store.get("nobody"))

    def test_first_merge_stores_client_bundle(self):
        merged = self.engine.merge("alice", _client_bundle())

        self.assertEqual([d["id"] for d in merged.decks], ["d1"])
        self.assertEqual([c["id"] for c in merged.cards], ["c1", "c2"])
        self.assertEqual(len(merged.study_history), 2)
        self.assertEqual(merged.user_profile, {"theme": "light"})
        self.assertEqual(self.engine.load("ALICE"), merged)

    def test_merge_is_idempotent(self):
        first = self.engine.merge("alice", _client_bundle())
        second = self.engine.merge("alice", _client_bundle())

        self.assertEqual(second, first)
        self.assertEqual(self.engine.load("alice"), first)

    def test_stored_record_without_data_merges(self):
        self.store.records["user:bob"] = {"username": "Bob", "password": "pw"}

        merged = self.engine.merge("bob", DataBundle())

        self.assertEqual(merged, DataBundle())

    def test_absent_client_profile_keeps_stored_profile(self):
        self.engine.merge("alice", DataBundle(user_profile={"theme": "dark"}))

        merged = self.engine.merge("alice", DataBundle(user_profile=None))

        self.assertEqual(merged.user_profile, {"theme": "dark"})

    def test_preserves_entities_from_both_sides(self):
        self.engine.merge("alice", DataBundle(decks=[{"id": "server-deck"}]))

        merged = self.engine.merge(
            "alice", DataBundle(decks=[{"id": "client-deck"}])
        )

        self.assertEqual(
            [d["id"] for d in merged.decks], ["server-deck", "client-deck"]
        )

    def test_load_unknown_user(self):
        self.assertIsNone(self.engine.load("nobody"))

    def test_concurrent_merges_lose_updates(self):
        # Both merges read the same snapshot; the second put replaces the
        # first in full, so one client's deck is lost.
        store = _RacingStore(parties=2)
        store.put(UserRecord(username="carol", password="pw"))
        engine = SyncEngine(store)
        store.racing = True

        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(
                    engine.merge, "carol", DataBundle(decks=[{"id": deck_id}])
                )
                for deck_id in ("deck-a", "deck-b")
            ]
            results = [f.result(timeout=10) for f in futures]
        store.racing = False

        stored_ids = [d["id"] for d in store.get("carol").data.decks]
        self.assertEqual(len(stored_ids), 1)
        self.assertIn(stored_ids, [["deck-a"], ["deck-b"]])
        # Each caller was told its own merge succeeded.
        self.assertEqual(
            sorted(r.decks[0]["id"] for r in results), ["deck-a", "deck-b"]
        )


class MergeBundlesTest(unittest.TestCase):

    def test_fields_merge_independently(self):
        server = DataBundle(
            decks=[{"id": 1, "updatedAt": 10}],
            cards=[{"id": 1, "updatedAt": 10, "front": "server"}],
            study_history=[{"cardId": 1, "date": "d", "rating": 1}],
            user_profile={"theme": "dark"},
            user_achievements=[{"id": "a1"}],
        )
        client = DataBundle(
            cards=[{"id": 1, "updatedAt": 20, "front": "client"}],
            user_achievements=[{"id": "a1", "isDeleted": True}],
        )

        merged = merge_bundles(server, client)

        self.assertEqual(merged.decks, server.decks)
        self.assertEqual(merged.cards[0]["front"], "client")
        self.assertEqual(merged.study_history, server.study_history)
        self.assertEqual(merged.user_profile, {"theme": "dark"})
        self.assertTrue(merged.user_achievements[0]["isDeleted"])

    def test_entity_without_id_is_rejected(self):
        with self.assertRaises(ValidationError):
            merge_bundles(DataBundle(), DataBundle(decks=[{"name": "no id"}]))

    def test_non_list_field_is_rejected(self):
        with self.assertRaises(ValidationError):
            DataBundle.from_json({"cards": {"id": 1}})


if __name__ == "__main__":
    unittest.main()
