from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..audio_utils import TARGET_SAMPLE_RATE, decode_audio_bytes
from .base import ASRError, ASRProvider

logger = logging.getLogger(__name__)


@dataclass
class _WhisperRuntime:
    pipe: object
    device: str


class WhisperHFProvider(ASRProvider):
    def __init__(
        self,
        model_ref: str = "openai/whisper-small",
        device: Optional[str] = None,
        fp16: bool = False,
        *,
        chunk_length_s: float = 30.0,
        stride_length_s: float = 5.0,
        cache_dir: Optional[str] = None,
    ):
        self._model_ref = model_ref
        self._device_override = device
        self._fp16 = fp16
        self._chunk_length_s = chunk_length_s
        self._stride_length_s = stride_length_s
        self._cache_dir = cache_dir
        self._rt: Optional[_WhisperRuntime] = None

    def name(self) -> str:
        return "whisper_hf"

    def _pick_device(self, torch_mod) -> str:
        if self._device_override:
            return self._device_override
        if getattr(torch_mod.cuda, "is_available", lambda: False)():
            return "cuda"
        backends = getattr(torch_mod, "backends", None)
        mps = getattr(backends, "mps", None) if backends else None
        if mps is not None and getattr(mps, "is_available", lambda: False)():
            return "mps"
        return "cpu"

    def _resolve_model_path(self) -> str:
        # Model, tokenizer and feature extractor all come from one snapshot
        # under the configured cache dir.
        if not self._cache_dir or Path(self._model_ref).exists():
            return self._model_ref
        from huggingface_hub import snapshot_download  # type: ignore

        return str(snapshot_download(repo_id=self._model_ref, cache_dir=self._cache_dir))

    def load(self) -> None:
        if self._rt is not None:
            return

        try:
            import torch  # type: ignore
            from transformers import pipeline  # type: ignore
        except Exception as e:
            raise ASRError(
                "WHISPER_NOT_CONFIGURED",
                f"Whisper requires torch+transformers installed: {e}",
                self.name(),
            )

        if not self._model_ref:
            raise ASRError(
                "WHISPER_NOT_CONFIGURED",
                "Whisper model is not configured (set ROAST_WHISPER_MODEL).",
                self.name(),
            )

        device = self._pick_device(torch)
        logger.info("loading whisper model=%s device=%s", self._model_ref, device)
        try:
            model_path = self._resolve_model_path()
            pipe_kwargs: dict[str, object] = {"model": model_path, "device": device}
            if self._fp16 and device in {"cuda", "mps"}:
                pipe_kwargs["torch_dtype"] = torch.float16
            pipe = pipeline("automatic-speech-recognition", **pipe_kwargs)
        except Exception as e:
            raise ASRError(
                "WHISPER_LOAD_FAILED",
                f"Failed to load Whisper pipeline: {e}",
                self.name(),
            ) from e

        self._rt = _WhisperRuntime(pipe=pipe, device=device)

    def transcribe(self, audio_bytes: bytes, language: str = "english") -> str:
        rt = self._rt
        if rt is None:
            raise ASRError("WHISPER_NOT_LOADED", "Whisper pipeline is not loaded", self.name())

        try:
            speech, sr = decode_audio_bytes(audio_bytes, sample_rate=TARGET_SAMPLE_RATE)
        except ValueError as e:
            raise ASRError("WHISPER_AUDIO_DECODE_FAILED", str(e), self.name()) from e

        try:
            out = rt.pipe(
                {"raw": speech, "sampling_rate": sr},
                chunk_length_s=self._chunk_length_s,
                stride_length_s=self._stride_length_s,
                generate_kwargs={"language": language, "task": "transcribe"},
            )
        except Exception as e:
            raise ASRError("WHISPER_INFER_FAILED", str(e), self.name()) from e

        if isinstance(out, dict):
            return str(out.get("text") or "")
        return str(out or "")
