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
import time
from typing import Any, Optional

import pydantic
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from shared.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

GOOGLE_API_ERROR = "Google API Error"


def normalize_contents(contents: Any) -> list:
    """
    Coerces client-provided contents into a list of Content objects.

    Args:
        contents (Any): A list of contents, a single content object with
            "parts", or anything else, which is sent as one text part.

    Returns:
        list: Contents suitable for generate_content.
    """
    if isinstance(contents, list):
        return contents
    if isinstance(contents, dict) and contents.get("parts"):
        return [contents]
    return [{"parts": [{"text": contents}]}]


def build_config(config: Optional[dict]) -> Optional[types.GenerateContentConfig]:
    """Builds the request config from the client's camelCase settings.

    systemInstruction, responseModalities and speechConfig sit beside the
    generation settings (temperature, maxOutputTokens, ...) in one object.
    """
    if not config:
        return None
    try:
        return types.GenerateContentConfig.model_validate(config)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid generation config", details=str(e)) from e


def generate(
    model: str,
    contents: Any,
    config: Optional[dict] = None,
    api_key: str | None = None,
) -> dict:
    """
    Forwards a generateContent request to Gemini.

    Returns:
        dict: {"text": first candidate text or "", "candidates": [...]}.

    Raises:
        UpstreamError: On any API error, carrying its status code.
    """
    if not api_key:
        raise UpstreamError(
            GOOGLE_API_ERROR, details="Gemini API key is not configured"
        )

    request_config = build_config(config)
    client = genai.Client(api_key=api_key)
    start_time = time.time()
    try:
        response = client.models.generate_content(
            model=model,
            contents=normalize_contents(contents),
            config=request_config,
        )
    except genai_errors.APIError as e:
        logger.error("Google API Error (%s): %s", e.code, e.message)
        raise UpstreamError(
            GOOGLE_API_ERROR, details=e.message or str(e), status_code=e.code or 500
        ) from e
    logger.info("Gemini %s call took %.2fs", model, time.time() - start_time)

    candidates = [
        candidate.model_dump(mode="json", by_alias=True, exclude_none=True)
        for candidate in response.candidates or []
    ]
    return {"text": _first_text(response), "candidates": candidates}


def _first_text(response: types.GenerateContentResponse) -> str:
    if not response.candidates:
        return ""
    content = response.candidates[0].content
    if not content or not content.parts:
        return ""
    return content.parts[0].text or ""
