from __future__ import annotations

from .base import ASRProvider


class MockASRProvider(ASRProvider):
    def __init__(self, text: str = "(mock) my pizza tastes like code.") -> None:
        self._text = text
        self.calls = 0
        self.loaded = False

    def load(self) -> None:
        self.loaded = True

    def transcribe(self, audio_bytes: bytes, language: str = "english") -> str:
        self.calls += 1
        return self._text

    def name(self) -> str:
        return "mock"
