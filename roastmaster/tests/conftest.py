import pytest

from roastmaster.api.main import app
from roastmaster.internal_core.asr import MockASRProvider, TranscriptionAdapter


def _clear_injected_state() -> None:
    for name in ("transcription_adapter", "roast_config"):
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture(autouse=True)
def isolated_app_state():
    """Each test starts without a cached adapter or config override."""
    _clear_injected_state()
    yield
    _clear_injected_state()


@pytest.fixture
def loaded_adapter():
    def _make(text: str = "my pizza is amazing") -> TranscriptionAdapter:
        adapter = TranscriptionAdapter(MockASRProvider(text=text))
        adapter.initialize()
        app.state.transcription_adapter = adapter
        return adapter

    return _make
