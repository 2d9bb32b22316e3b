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

from dataclasses import dataclass, field
from typing import Any, List, Optional

from dacite import Config, from_dict

from shared.errors import ValidationError

# Wire (camelCase) name -> dataclass field name for DataBundle.
BUNDLE_FIELDS = {
    "decks": "decks",
    "cards": "cards",
    "studyHistory": "study_history",
    "userProfile": "user_profile",
    "userAchievements": "user_achievements",
}

# Bundle fields reconciled per entity id.
ENTITY_LIST_FIELDS = ("decks", "cards", "userAchievements")

# Bundle fields that must hold a JSON array.
LIST_FIELDS = (*ENTITY_LIST_FIELDS, "studyHistory")


@dataclass
class DataBundle:
    """A user's synced data: decks, cards, study log, profile, achievements.

    Entities are kept as plain dicts so that fields owned by the client pass
    through untouched.
    """

    decks: List[dict] = field(default_factory=list)
    cards: List[dict] = field(default_factory=list)
    study_history: List[dict] = field(default_factory=list)
    user_profile: Optional[dict] = None
    user_achievements: List[dict] = field(default_factory=list)

    @classmethod
    def from_json(cls, raw: Optional[dict]) -> "DataBundle":
        """Builds a bundle from its wire form, defaulting absent fields.

        A null field is treated the same as a missing one; list fields that
        are not lists raise ValidationError.
        """
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ValidationError(
                "Invalid sync data", details="Data must be an object."
            )
        for key in LIST_FIELDS:
            if raw.get(key) is not None and not isinstance(raw[key], list):
                raise ValidationError(
                    "Invalid sync data", details=f"'{key}' must be a list."
                )
        data = {
            attr: raw[key]
            for key, attr in BUNDLE_FIELDS.items()
            if raw.get(key) is not None
        }
        return from_dict(data_class=cls, data=data, config=Config(check_types=False))

    def to_json(self) -> dict:
        return {key: getattr(self, attr) for key, attr in BUNDLE_FIELDS.items()}


@dataclass
class UserRecord:
    """One stored user: identity, credential and synced data."""

    username: str
    password: str
    data: DataBundle = field(default_factory=DataBundle)

    @classmethod
    def from_json(cls, raw: dict) -> "UserRecord":
        return cls(
            username=raw["username"],
            password=raw.get("password", ""),
            data=DataBundle.from_json(raw.get("data")),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "password": self.password,
            "data": self.data.to_json(),
        }
