from __future__ import annotations

from abc import ABC, abstractmethod


class ASRError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


class ModelNotReadyError(ASRError):
    def __init__(self, provider_name: str, message: str = "Model not loaded yet."):
        super().__init__("MODEL_NOT_READY", message, provider_name)


class TranscriptionEmptyError(ASRError):
    def __init__(self, provider_name: str, message: str = "No speech detected."):
        super().__init__("TRANSCRIPTION_EMPTY", message, provider_name)


class TranscriptionFailedError(ASRError):
    def __init__(self, provider_name: str, message: str):
        super().__init__("TRANSCRIPTION_FAILED", message, provider_name)


class ASRProvider(ABC):
    @abstractmethod
    def load(self) -> None: ...

    @abstractmethod
    def transcribe(self, audio_bytes: bytes, language: str = "english") -> str: ...

    @abstractmethod
    def name(self) -> str: ...
