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

from typing import Any, Optional


class DeckProxyError(Exception):
    """Base error that maps onto an HTTP status and a JSON error body."""

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(DeckProxyError):
    status_code = 400


class AuthenticationError(DeckProxyError):
    status_code = 401


class NotFoundError(DeckProxyError):
    status_code = 404


class UserNotFound(NotFoundError):
    def __init__(self, username: str):
        super().__init__("User not found")
        self.username = username


class ConflictError(DeckProxyError):
    status_code = 409


class UpstreamError(DeckProxyError):
    """A non-success response or transport failure from an external API."""

    status_code = 500


class StoreWriteError(DeckProxyError):
    status_code = 500


class InternalError(DeckProxyError):
    status_code = 500
