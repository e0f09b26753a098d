from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_CORS_ORIGINS = (
    "https://broofnotascammer.github.io",
    "http://localhost:8000",
    "http://127.0.0.1:5500",
    "http://localhost:3000",
)


def _project_root() -> Path:
    # roastmaster/internal_core/config.py -> roastmaster -> project root
    return Path(__file__).resolve().parents[2]


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _getenv_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class RoastConfig:
    PORT: int
    ROAST_HOST: str
    ROAST_ASR_PROVIDER: str
    ROAST_WHISPER_MODEL: str
    ROAST_WHISPER_DEVICE: str
    ROAST_WHISPER_FP16: bool
    ROAST_ASR_LANGUAGE: str
    ROAST_ASR_CHUNK_LENGTH_S: float
    ROAST_ASR_STRIDE_LENGTH_S: float
    ROAST_MODEL_CACHE_DIR: str
    ROAST_MAX_UPLOAD_BYTES: int
    ROAST_CORS_ORIGINS: tuple[str, ...]
    ROAST_AUTOLOAD_MODEL: bool
    ROAST_LOG_LEVEL: str

    def model_cache_dir_path(self, repo_root: Optional[Path] = None) -> Path:
        root = repo_root if repo_root is not None else _project_root()
        return (root / self.ROAST_MODEL_CACHE_DIR).resolve()

    @property
    def max_upload_mb(self) -> int:
        return max(1, self.ROAST_MAX_UPLOAD_BYTES // (1024 * 1024))


def load_config() -> RoastConfig:
    return RoastConfig(
        PORT=_getenv_int("PORT", 3001),
        ROAST_HOST=_getenv_str("ROAST_HOST", "0.0.0.0"),
        ROAST_ASR_PROVIDER=_getenv_str("ROAST_ASR_PROVIDER", "whisper_hf").strip().lower(),
        ROAST_WHISPER_MODEL=_getenv_str("ROAST_WHISPER_MODEL", "openai/whisper-small"),
        ROAST_WHISPER_DEVICE=_getenv_str("ROAST_WHISPER_DEVICE", ""),
        ROAST_WHISPER_FP16=_getenv_bool("ROAST_WHISPER_FP16", False),
        ROAST_ASR_LANGUAGE=_getenv_str("ROAST_ASR_LANGUAGE", "english"),
        ROAST_ASR_CHUNK_LENGTH_S=_getenv_float("ROAST_ASR_CHUNK_LENGTH_S", 30.0),
        ROAST_ASR_STRIDE_LENGTH_S=_getenv_float("ROAST_ASR_STRIDE_LENGTH_S", 5.0),
        ROAST_MODEL_CACHE_DIR=_getenv_str("ROAST_MODEL_CACHE_DIR", ".cache"),
        ROAST_MAX_UPLOAD_BYTES=_getenv_int("ROAST_MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        ROAST_CORS_ORIGINS=_getenv_list("ROAST_CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        ROAST_AUTOLOAD_MODEL=_getenv_bool("ROAST_AUTOLOAD_MODEL", True),
        ROAST_LOG_LEVEL=_getenv_str("ROAST_LOG_LEVEL", "INFO"),
    )
