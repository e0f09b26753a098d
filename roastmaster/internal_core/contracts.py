from __future__ import annotations

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict


class ModelState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"


class TranscriptionResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str


class RoastResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    transcript: str
    roast: str
    category: str
    success: bool = True


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str
    success: bool = False


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", protected_namespaces=())

    status: str
    model_loaded: bool
    model_loading: bool
    timestamp: str
    service: str


class ServiceInfoResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    version: str
    endpoints: Dict[str, str]
    status: str
