from __future__ import annotations

"""
HTTP surface for the Roast Master service.

Design intent:
- Keep handlers thin: validate input, call the adapter, call the classifier.
- Reject audio requests with 503 until the background model load finishes.
- Serialize every failure as {"error": ..., "success": false}.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from roastmaster.internal_core.asr import (
    ModelNotReadyError,
    TranscriptionAdapter,
    TranscriptionEmptyError,
    TranscriptionFailedError,
    build_provider,
)
from roastmaster.internal_core.audio_utils import enforce_max_size_bytes, is_allowed_audio_mime
from roastmaster.internal_core.config import RoastConfig, load_config
from roastmaster.internal_core.contracts import (
    ErrorResponse,
    HealthResponse,
    RoastResponse,
    ServiceInfoResponse,
)
from roastmaster.roast.classifier import classify

SERVICE_NAME = "AI Roast Master API"
SERVICE_VERSION = "1.0.0"

MODEL_NOT_READY_MESSAGE = "Model not loaded yet. Please try again in a moment."
EMPTY_TRANSCRIPT_MESSAGE = "Could not transcribe audio. Please try again with clearer audio."

logger = logging.getLogger(__name__)
_CONFIG = load_config()


def _get_config() -> RoastConfig:
    existing = getattr(app.state, "roast_config", None)
    if isinstance(existing, RoastConfig):
        return existing
    setattr(app.state, "roast_config", _CONFIG)
    return _CONFIG


def _get_transcription_adapter() -> TranscriptionAdapter:
    existing = getattr(app.state, "transcription_adapter", None)
    if isinstance(existing, TranscriptionAdapter):
        return existing
    cfg = _get_config()
    created = TranscriptionAdapter(build_provider(cfg), language=cfg.ROAST_ASR_LANGUAGE)
    setattr(app.state, "transcription_adapter", created)
    return created


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    cfg = _get_config()
    if cfg.ROAST_AUTOLOAD_MODEL:
        logger.info("loading ASR model in background (this may take a few minutes)")
        _get_transcription_adapter().load_in_background()
    yield
    logger.info("shutting down %s", SERVICE_NAME)


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_CONFIG.ROAST_CORS_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error_response(404, "Endpoint not found")
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("rejected invalid payload path=%s errors=%s", request.url.path, exc.errors()[:3])
    return _error_response(400, "Invalid request payload.")


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error path=%s", request.url.path)
    return _error_response(500, "Internal server error")


async def _read_text_payload(request: Request) -> dict[str, Any]:
    content_type = str(request.headers.get("content-type", "")).lower()
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return {key: value for key, value in form.items()}
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@app.get("/", response_model=ServiceInfoResponse)
async def service_info() -> ServiceInfoResponse:
    return ServiceInfoResponse(
        message=SERVICE_NAME,
        version=SERVICE_VERSION,
        endpoints={
            "health": "/api/health",
            "textRoast": "POST /api/roast/text",
            "audioRoast": "POST /api/roast/audio",
        },
        status="operational",
    )


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    status = _get_transcription_adapter().status()
    return HealthResponse(
        status="OK",
        model_loaded=bool(status["model_loaded"]),
        model_loading=bool(status["model_loading"]),
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        service=SERVICE_NAME,
    )


@app.post("/api/roast/text", response_model=RoastResponse)
async def roast_text(request: Request) -> RoastResponse:
    payload = await _read_text_payload(request)
    text = payload.get("text")
    # Falsy scalars (None, "", 0, false) count as missing text.
    if text is None or (isinstance(text, (str, bool, int, float)) and not text):
        raise HTTPException(status_code=400, detail="Text is required")
    if not isinstance(text, str):
        raise HTTPException(status_code=400, detail="Text must be a string")

    result = classify(text)
    return RoastResponse(transcript=text, roast=result.roast, category=result.category.value)


@app.post("/api/roast/audio", response_model=RoastResponse)
async def roast_audio(audio: UploadFile | None = File(default=None)) -> RoastResponse:
    if audio is None:
        raise HTTPException(status_code=400, detail="Audio file is required")
    if not is_allowed_audio_mime(audio.content_type):
        raise HTTPException(status_code=400, detail="Only audio files are allowed!")

    cfg = _get_config()
    max_bytes = cfg.ROAST_MAX_UPLOAD_BYTES
    data = await audio.read(max_bytes + 1)
    try:
        enforce_max_size_bytes(len(data), max_bytes)
    except ValueError as exc:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {cfg.max_upload_mb}MB.",
        ) from exc
    if not data:
        raise HTTPException(status_code=400, detail="Audio file is required")

    adapter = _get_transcription_adapter()
    if not adapter.is_loaded:
        raise HTTPException(status_code=503, detail=MODEL_NOT_READY_MESSAGE)

    logger.info(
        "processing audio filename=%s mime=%s size_bytes=%d",
        audio.filename,
        audio.content_type,
        len(data),
    )
    try:
        transcription = await run_in_threadpool(adapter.transcribe, data)
    except ModelNotReadyError as exc:
        raise HTTPException(status_code=503, detail=MODEL_NOT_READY_MESSAGE) from exc
    except TranscriptionEmptyError as exc:
        logger.info("empty transcription provider=%s", exc.provider_name)
        raise HTTPException(status_code=400, detail=EMPTY_TRANSCRIPT_MESSAGE) from exc
    except TranscriptionFailedError as exc:
        logger.error(
            "transcription failed provider=%s detail=%s", exc.provider_name, exc.message
        )
        raise HTTPException(
            status_code=500, detail=f"Error processing audio: {exc.message}"
        ) from exc

    logger.info("transcription done chars=%d", len(transcription.text))
    result = classify(transcription.text)
    return RoastResponse(
        transcript=transcription.text,
        roast=result.roast,
        category=result.category.value,
    )
