from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, Optional

from ..contracts import ModelState, TranscriptionResult
from .base import (
    ASRProvider,
    ModelNotReadyError,
    TranscriptionEmptyError,
    TranscriptionFailedError,
)

logger = logging.getLogger(__name__)


class TranscriptionAdapter:
    """
    Process-wide wrapper around one ASR provider.

    Load state moves NOT_LOADED -> LOADING -> LOADED, or LOADING -> NOT_LOADED
    when loading fails. All transitions happen under ``self._lock``;
    ``transcribe`` itself is not serialized.
    """

    def __init__(self, provider: ASRProvider, language: str = "english") -> None:
        self._provider = provider
        self._language = language
        self._lock = threading.Lock()
        self._state = ModelState.NOT_LOADED
        self._last_error: Optional[str] = None
        self._loader: Optional[threading.Thread] = None

    @property
    def provider(self) -> ASRProvider:
        return self._provider

    @property
    def state(self) -> ModelState:
        with self._lock:
            return self._state

    @property
    def is_loaded(self) -> bool:
        return self.state is ModelState.LOADED

    @property
    def is_loading(self) -> bool:
        return self.state is ModelState.LOADING

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def _transition(self, expected: ModelState, target: ModelState) -> bool:
        with self._lock:
            if self._state is not expected:
                return False
            self._state = target
            return True

    def initialize(self) -> None:
        if not self._transition(ModelState.NOT_LOADED, ModelState.LOADING):
            return

        logger.info("asr model loading provider=%s", self._provider.name())
        started = time.monotonic()
        try:
            self._provider.load()
        except Exception as e:
            with self._lock:
                self._last_error = str(e)
            self._transition(ModelState.LOADING, ModelState.NOT_LOADED)
            logger.exception("asr model load failed provider=%s", self._provider.name())
            return

        with self._lock:
            self._last_error = None
        self._transition(ModelState.LOADING, ModelState.LOADED)
        logger.info(
            "asr model loaded provider=%s duration_ms=%d",
            self._provider.name(),
            int((time.monotonic() - started) * 1000),
        )

    def load_in_background(self) -> threading.Thread:
        with self._lock:
            if self._loader is not None and self._loader.is_alive():
                return self._loader
            worker = threading.Thread(
                target=self.initialize, name="asr-model-loader", daemon=True
            )
            self._loader = worker
        worker.start()
        return worker

    def transcribe(self, audio_bytes: bytes) -> TranscriptionResult:
        if not self.is_loaded:
            raise ModelNotReadyError(self._provider.name())

        try:
            text = self._provider.transcribe(audio_bytes, language=self._language)
        except Exception as e:
            message = getattr(e, "message", "") or str(e) or e.__class__.__name__
            raise TranscriptionFailedError(self._provider.name(), message) from e

        if not text or not str(text).strip():
            raise TranscriptionEmptyError(self._provider.name())
        return TranscriptionResult(text=str(text))

    def status(self) -> Dict[str, Any]:
        state = self.state
        return {
            "provider": self._provider.name(),
            "state": state.value,
            "model_loaded": state is ModelState.LOADED,
            "model_loading": state is ModelState.LOADING,
        }
