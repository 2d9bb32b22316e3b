"""
Pydantic schemas for proxy action payloads.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class GeminiGeneratePayload(BaseModel):
    model: str = Field(..., min_length=1)
    contents: Any = None
    config: Optional[dict] = None


class WordPayload(BaseModel):
    word: str = Field(..., min_length=1)


class AudioPayload(BaseModel):
    url: str = Field(..., min_length=1)


class CredentialsPayload(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginPayload(BaseModel):
    username: str = Field(..., min_length=1)
    password: Optional[str] = None


class UsernamePayload(BaseModel):
    username: str = Field(..., min_length=1)


class SyncMergePayload(BaseModel):
    username: str = Field(..., min_length=1)
    data: Optional[dict] = None


class MessageResponse(BaseModel):
    message: str


class SyncDataResponse(BaseModel):
    data: Optional[dict] = None


class GeminiGenerateResponse(BaseModel):
    text: str = ""
    candidates: Optional[list] = None
