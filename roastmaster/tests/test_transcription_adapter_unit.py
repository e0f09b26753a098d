import sys
import threading
from types import SimpleNamespace

import numpy as np
import pytest

from roastmaster.internal_core.asr import (
    ASRError,
    ASRProvider,
    MockASRProvider,
    ModelNotReadyError,
    TranscriptionAdapter,
    TranscriptionEmptyError,
    TranscriptionFailedError,
    WhisperHFProvider,
)
from roastmaster.internal_core.contracts import ModelState


class _BlockingProvider(ASRProvider):
    def __init__(self) -> None:
        self.release = threading.Event()
        self.started = threading.Event()
        self.load_calls = 0
        self.transcribe_calls = 0

    def load(self) -> None:
        self.load_calls += 1
        self.started.set()
        self.release.wait(timeout=5)

    def transcribe(self, audio_bytes: bytes, language: str = "english") -> str:
        self.transcribe_calls += 1
        return "hello"

    def name(self) -> str:
        return "blocking"


class _FailingLoadProvider(MockASRProvider):
    def __init__(self) -> None:
        super().__init__()
        self.attempts = 0

    def load(self) -> None:
        self.attempts += 1
        if self.attempts == 1:
            raise RuntimeError("weights missing")
        super().load()


class _RaisingProvider(MockASRProvider):
    def transcribe(self, audio_bytes: bytes, language: str = "english") -> str:
        raise RuntimeError("decoder exploded")


def test_transcribe_before_initialize_is_not_ready_and_skips_provider() -> None:
    provider = MockASRProvider()
    adapter = TranscriptionAdapter(provider)

    assert adapter.state is ModelState.NOT_LOADED
    with pytest.raises(ModelNotReadyError) as exc_info:
        adapter.transcribe(b"RIFF")
    assert exc_info.value.code == "MODEL_NOT_READY"
    assert provider.calls == 0


def test_transcribe_while_loading_is_not_ready_and_second_initialize_is_noop() -> None:
    provider = _BlockingProvider()
    adapter = TranscriptionAdapter(provider)

    worker = adapter.load_in_background()
    assert provider.started.wait(timeout=5)
    assert adapter.is_loading
    assert not adapter.is_loaded

    with pytest.raises(ModelNotReadyError):
        adapter.transcribe(b"audio")
    assert provider.transcribe_calls == 0

    adapter.initialize()
    assert provider.load_calls == 1

    provider.release.set()
    worker.join(timeout=5)
    assert adapter.state is ModelState.LOADED
    assert adapter.transcribe(b"audio").text == "hello"


def test_initialize_is_idempotent_once_loaded() -> None:
    provider = _BlockingProvider()
    provider.release.set()
    adapter = TranscriptionAdapter(provider)

    adapter.initialize()
    adapter.initialize()

    assert adapter.is_loaded
    assert provider.load_calls == 1


def test_load_failure_returns_to_not_loaded_and_allows_retry() -> None:
    provider = _FailingLoadProvider()
    adapter = TranscriptionAdapter(provider)

    adapter.initialize()
    assert adapter.state is ModelState.NOT_LOADED
    assert adapter.last_error == "weights missing"

    adapter.initialize()
    assert adapter.state is ModelState.LOADED
    assert adapter.last_error is None
    assert provider.attempts == 2


def test_whitespace_transcript_is_empty_error() -> None:
    adapter = TranscriptionAdapter(MockASRProvider(text="   "))
    adapter.initialize()

    with pytest.raises(TranscriptionEmptyError) as exc_info:
        adapter.transcribe(b"audio")
    assert exc_info.value.code == "TRANSCRIPTION_EMPTY"


def test_provider_exception_is_wrapped_with_message() -> None:
    adapter = TranscriptionAdapter(_RaisingProvider())
    adapter.initialize()

    with pytest.raises(TranscriptionFailedError) as exc_info:
        adapter.transcribe(b"audio")
    assert exc_info.value.code == "TRANSCRIPTION_FAILED"
    assert "decoder exploded" in exc_info.value.message
    assert exc_info.value.provider_name == "mock"


def test_successful_transcript_keeps_text_as_recognized() -> None:
    adapter = TranscriptionAdapter(MockASRProvider(text=" I love pizza"))
    adapter.initialize()

    assert adapter.transcribe(b"audio").text == " I love pizza"


def test_status_projects_state_machine() -> None:
    adapter = TranscriptionAdapter(MockASRProvider())
    assert adapter.status() == {
        "provider": "mock",
        "state": "not_loaded",
        "model_loaded": False,
        "model_loading": False,
    }
    adapter.initialize()
    assert adapter.status()["model_loaded"] is True


def _install_fake_hf(monkeypatch, pipeline_factory) -> None:
    fake_torch = SimpleNamespace(
        cuda=SimpleNamespace(is_available=lambda: False),
        backends=SimpleNamespace(mps=SimpleNamespace(is_available=lambda: False)),
        float16="float16",
    )
    monkeypatch.setitem(sys.modules, "torch", fake_torch)
    monkeypatch.setitem(sys.modules, "transformers", SimpleNamespace(pipeline=pipeline_factory))


def test_whisper_hf_provider_builds_pipeline_and_transcribes(monkeypatch) -> None:
    created = {}

    def fake_pipeline(task, **kwargs):
        created["task"] = task
        created["kwargs"] = kwargs

        def run(inputs, **call_kwargs):
            created["inputs"] = inputs
            created["call_kwargs"] = call_kwargs
            return {"text": " my outfit is great"}

        return run

    _install_fake_hf(monkeypatch, fake_pipeline)

    def fake_snapshot_download(repo_id, cache_dir):
        created["snapshot"] = (repo_id, cache_dir)
        return f"{cache_dir}/snapshots/abc123"

    monkeypatch.setitem(
        sys.modules,
        "huggingface_hub",
        SimpleNamespace(snapshot_download=fake_snapshot_download),
    )
    monkeypatch.setattr(
        "roastmaster.internal_core.asr.whisper_hf.decode_audio_bytes",
        lambda data, sample_rate=16000: (np.zeros(1600, dtype=np.float32), 16000),
    )

    provider = WhisperHFProvider(model_ref="openai/whisper-small", cache_dir="/tmp/roast-cache")
    provider.load()
    text = provider.transcribe(b"fake-audio", language="english")

    assert text == " my outfit is great"
    assert created["task"] == "automatic-speech-recognition"
    assert created["kwargs"]["device"] == "cpu"
    assert created["snapshot"] == ("openai/whisper-small", "/tmp/roast-cache")
    assert created["kwargs"]["model"] == "/tmp/roast-cache/snapshots/abc123"
    assert "model_kwargs" not in created["kwargs"]
    assert "torch_dtype" not in created["kwargs"]
    assert created["inputs"]["sampling_rate"] == 16000
    assert created["call_kwargs"]["generate_kwargs"] == {"language": "english", "task": "transcribe"}
    assert created["call_kwargs"]["chunk_length_s"] == 30.0
    assert created["call_kwargs"]["stride_length_s"] == 5.0


def test_whisper_hf_provider_without_cache_dir_passes_model_ref_through(monkeypatch) -> None:
    created = {}

    def fake_pipeline(task, **kwargs):
        created.update(kwargs)
        return lambda inputs, **call_kwargs: {"text": "x"}

    def unexpected_download(**kwargs):
        raise AssertionError("snapshot_download should not be called")

    _install_fake_hf(monkeypatch, fake_pipeline)
    monkeypatch.setitem(
        sys.modules, "huggingface_hub", SimpleNamespace(snapshot_download=unexpected_download)
    )

    WhisperHFProvider(model_ref="openai/whisper-tiny").load()
    assert created["model"] == "openai/whisper-tiny"


class _RecordingProvider(MockASRProvider):
    def __init__(self) -> None:
        super().__init__(text="hello")
        self.languages = []

    def transcribe(self, audio_bytes: bytes, language: str = "english") -> str:
        self.languages.append(language)
        return super().transcribe(audio_bytes, language=language)


def test_adapter_forwards_configured_language_defaulting_to_english() -> None:
    default_provider = _RecordingProvider()
    default_adapter = TranscriptionAdapter(default_provider)
    default_adapter.initialize()
    default_adapter.transcribe(b"audio")

    custom_provider = _RecordingProvider()
    custom_adapter = TranscriptionAdapter(custom_provider, language="en")
    custom_adapter.initialize()
    custom_adapter.transcribe(b"audio")

    assert default_provider.languages == ["english"]
    assert custom_provider.languages == ["en"]


def test_whisper_hf_provider_load_failure_raises_asr_error(monkeypatch) -> None:
    def broken_pipeline(task, **kwargs):
        raise OSError("no such model")

    _install_fake_hf(monkeypatch, broken_pipeline)
    provider = WhisperHFProvider(model_ref="missing/model")

    with pytest.raises(ASRError) as exc_info:
        provider.load()
    assert exc_info.value.code == "WHISPER_LOAD_FAILED"

    adapter = TranscriptionAdapter(WhisperHFProvider(model_ref="missing/model"))
    adapter.initialize()
    assert adapter.state is ModelState.NOT_LOADED
    assert "no such model" in (adapter.last_error or "")


def test_whisper_hf_provider_decode_failure_surfaces_through_adapter(monkeypatch) -> None:
    _install_fake_hf(monkeypatch, lambda task, **kwargs: (lambda inputs, **kw: {"text": "x"}))

    def bad_decode(data, sample_rate=16000):
        raise ValueError("Audio decoding failed (not audio)")

    monkeypatch.setattr("roastmaster.internal_core.asr.whisper_hf.decode_audio_bytes", bad_decode)
    adapter = TranscriptionAdapter(WhisperHFProvider())
    adapter.initialize()

    with pytest.raises(TranscriptionFailedError) as exc_info:
        adapter.transcribe(b"not audio")
    assert "Audio decoding failed" in exc_info.value.message
