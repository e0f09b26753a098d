from __future__ import annotations

import io
import logging
import shutil
import subprocess
from typing import Optional, Tuple

import numpy as np


TARGET_SAMPLE_RATE = 16000
ALLOWED_EXTRA_MIME_TYPES = {"application/octet-stream"}

logger = logging.getLogger(__name__)


def _which(cmd: str) -> Optional[str]:
    return shutil.which(cmd)


def is_allowed_audio_mime(mime_type: Optional[str]) -> bool:
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if not mime:
        return False
    return mime.startswith("audio/") or mime in ALLOWED_EXTRA_MIME_TYPES


def enforce_max_size_bytes(size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise ValueError(
            f"Audio file too large ({size / (1024 * 1024):.1f}MB), "
            f"max allowed is {max_bytes / (1024 * 1024):.1f}MB"
        )


def _to_mono_float32(audio: np.ndarray) -> np.ndarray:
    audio = np.asarray(audio, dtype=np.float32)
    if audio.ndim > 1:
        audio = audio.mean(axis=1)
    return audio.clip(-1.0, 1.0)


def _decode_with_ffmpeg(ffmpeg: str, data: bytes, sample_rate: int) -> np.ndarray:
    cmd = [
        ffmpeg,
        "-hide_banner",
        "-loglevel",
        "error",
        "-i",
        "pipe:0",
        "-ac",
        "1",
        "-ar",
        str(sample_rate),
        "-f",
        "f32le",
        "pipe:1",
    ]
    res = subprocess.run(
        cmd, input=data, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE
    )
    audio = np.frombuffer(res.stdout, dtype="<f4")
    if audio.size == 0:
        raise ValueError("ffmpeg produced no samples")
    return audio.astype(np.float32).clip(-1.0, 1.0)


def decode_audio_bytes(
    data: bytes, sample_rate: int = TARGET_SAMPLE_RATE
) -> Tuple[np.ndarray, int]:
    """
    Decode an encoded audio buffer into mono float32 samples.
    Prefers ffmpeg when present (covers webm/ogg/mp4 from browser recorders);
    then miniaudio (wav/mp3/flac/vorbis, resampled to ``sample_rate``);
    then soundfile at the file's native rate.
    """
    if not data:
        raise ValueError("Audio buffer is empty.")

    errors: list[str] = []
    ffmpeg = _which("ffmpeg")
    if ffmpeg:
        try:
            return _decode_with_ffmpeg(ffmpeg, data, sample_rate), sample_rate
        except subprocess.CalledProcessError as e:
            stderr = (
                e.stderr.decode("utf-8", "ignore")
                if isinstance(e.stderr, (bytes, bytearray))
                else str(e.stderr)
            )
            errors.append(f"ffmpeg: {stderr.strip() or 'unknown error'}")
        except (OSError, ValueError) as e:
            errors.append(f"ffmpeg: {e}")
        logger.debug("ffmpeg decode failed, trying miniaudio: %s", errors[-1])

    try:
        import miniaudio  # type: ignore

        decoded = miniaudio.decode(
            data,
            output_format=miniaudio.SampleFormat.FLOAT32,
            nchannels=1,
            sample_rate=sample_rate,
        )
        return np.asarray(decoded.samples, dtype=np.float32), sample_rate
    except Exception as e:
        errors.append(f"miniaudio: {e}")

    try:
        import soundfile as sf  # type: ignore

        speech, sr = sf.read(io.BytesIO(data), dtype="float32", always_2d=False)
        return _to_mono_float32(speech), int(sr)
    except Exception as e:
        errors.append(f"soundfile: {e}")
        if not ffmpeg:
            errors.append("install `ffmpeg` to decode webm/mp4 recordings")
        raise ValueError(f"Audio decoding failed ({'; '.join(errors)})") from e
