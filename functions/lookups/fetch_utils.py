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

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from shared.errors import UpstreamError

FREE_DICTIONARY_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/"
MERRIAM_WEBSTER_URL = (
    "https://www.dictionaryapi.com/api/v3/references/collegiate/json/"
)
DEFAULT_AUDIO_CONTENT_TYPE = "application/octet-stream"


@dataclass
class UpstreamJson:
    """An upstream JSON body relayed with the upstream status code."""

    status_code: int
    body: Any


@dataclass
class AudioBytes:
    content: bytes
    content_type: str


def _relay_json(url: str, source: str, params: dict | None = None) -> UpstreamJson:
    try:
        response = requests.get(url, params=params)
        return UpstreamJson(status_code=response.status_code, body=response.json())
    except (requests.RequestException, ValueError) as e:
        raise UpstreamError(f"Failed to fetch from {source}", details=str(e)) from e


def lookup_free_dictionary(word: str) -> UpstreamJson:
    """
    Looks up a word in the Free Dictionary API.

    Args:
        word (str): The word to look up.

    Returns:
        UpstreamJson: The upstream status and JSON body, whatever the status.
    """
    return _relay_json(FREE_DICTIONARY_URL + quote(word, safe=""), "Free Dictionary")


def lookup_merriam_webster(word: str, api_key: str | None) -> UpstreamJson:
    """Looks up a word in the Merriam-Webster collegiate dictionary."""
    return _relay_json(
        MERRIAM_WEBSTER_URL + quote(word, safe=""),
        "Merriam-Webster",
        params={"key": api_key},
    )


def fetch_audio(url: str) -> AudioBytes:
    """
    Fetches audio bytes from a URL.

    Raises:
        UpstreamError: With the upstream status when it is not a success,
            or 500 when the request itself fails.
    """
    try:
        response = requests.get(url)
    except requests.RequestException as e:
        raise UpstreamError(
            "Internal server error while fetching audio.", details=str(e)
        ) from e

    if not response.ok:
        raise UpstreamError(
            "Failed to fetch audio from source.",
            details=response.text,
            status_code=response.status_code,
        )
    return AudioBytes(
        content=response.content,
        content_type=response.headers.get("Content-Type")
        or DEFAULT_AUDIO_CONTENT_TYPE,
    )
