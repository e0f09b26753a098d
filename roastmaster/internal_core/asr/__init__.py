from __future__ import annotations

from typing import TYPE_CHECKING

from .adapter import TranscriptionAdapter
from .base import (
    ASRError,
    ASRProvider,
    ModelNotReadyError,
    TranscriptionEmptyError,
    TranscriptionFailedError,
)
from .mock import MockASRProvider
from .whisper_hf import WhisperHFProvider

if TYPE_CHECKING:
    from ..config import RoastConfig


def build_provider(cfg: "RoastConfig") -> ASRProvider:
    provider = cfg.ROAST_ASR_PROVIDER
    if provider == "mock":
        return MockASRProvider()
    if provider == "whisper_hf":
        return WhisperHFProvider(
            model_ref=cfg.ROAST_WHISPER_MODEL,
            device=cfg.ROAST_WHISPER_DEVICE or None,
            fp16=cfg.ROAST_WHISPER_FP16,
            chunk_length_s=cfg.ROAST_ASR_CHUNK_LENGTH_S,
            stride_length_s=cfg.ROAST_ASR_STRIDE_LENGTH_S,
            cache_dir=str(cfg.model_cache_dir_path()),
        )
    raise ValueError(f"Unsupported ROAST_ASR_PROVIDER: {provider!r} (expected whisper_hf or mock)")


__all__ = [
    "ASRError",
    "ASRProvider",
    "MockASRProvider",
    "ModelNotReadyError",
    "TranscriptionAdapter",
    "TranscriptionEmptyError",
    "TranscriptionFailedError",
    "WhisperHFProvider",
    "build_provider",
]
