"""Audio sample formats, per-component conversion and mixing of frames.

Frames are numpy arrays of shape (frame_count, channels): int16 samples for
16-bit audio and float32 samples in [-1, 1] for 32-bit audio.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import numpy as np

S16_MIN = -32768
S16_MAX = 32767


class AudioBits(IntEnum):
    """Width of one sample component: signed 16-bit or 32-bit float."""

    BITS_16 = 0
    BITS_32 = 1

    def byte_size(self) -> int:
        """Return the number of bytes one component occupies."""
        return 4 if self is AudioBits.BITS_32 else 2

    @property
    def dtype(self) -> np.dtype:
        """The numpy dtype used for components of this width."""
        return np.dtype(np.float32) if self is AudioBits.BITS_32 else np.dtype(np.int16)


@dataclass(frozen=True)
class AudioFormat:
    """Bit width, channel count and sample rate of a stream of frames."""

    bit_width: AudioBits
    channels: int
    sample_rate: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "bit_width", AudioBits(self.bit_width))
        if self.channels <= 0:
            raise ValueError(f"channel count must be positive, got {self.channels}")

    def frame_size(self) -> int:
        """Return the number of bytes in one frame."""
        return self.bit_width.byte_size() * self.channels


def _coerce_frames(data: Any, audio_format: AudioFormat) -> np.ndarray:
    """Return data as a (frames, channels) array of the format's dtype."""
    frames = np.asarray(data, dtype=audio_format.bit_width.dtype)
    if frames.ndim == 1 and audio_format.channels == 1:
        frames = frames.reshape(-1, 1)
    if frames.ndim != 2 or frames.shape[1] != audio_format.channels:
        raise ValueError(
            f"expected frames of shape (n, {audio_format.channels}), got {frames.shape}"
        )
    return frames


def convert_component(value: Any, dst_bits: AudioBits, src_bits: AudioBits) -> Any:
    """Convert one component, or an array of them, between bit widths."""
    dst_bits = AudioBits(dst_bits)
    src_bits = AudioBits(src_bits)
    data = np.asarray(value, dtype=src_bits.dtype)
    if dst_bits is src_bits:
        result = data.copy()
    elif dst_bits is AudioBits.BITS_32:
        result = (data.astype(np.float64) * (1.0 / 32768.0)).astype(np.float32)
    else:
        scaled = np.trunc(data.astype(np.float32) * np.float32(32768.0))
        result = np.clip(scaled, S16_MIN, S16_MAX).astype(np.int16)
    return result[()] if result.ndim == 0 else result


def mix_frames(dst: Any, src: Any, audio_format: AudioFormat) -> np.ndarray:
    """Return the sum of two blocks of frames; 16-bit sums saturate."""
    a = _coerce_frames(dst, audio_format)
    b = _coerce_frames(src, audio_format)
    if a.shape != b.shape:
        raise ValueError(f"cannot mix frames of shapes {a.shape} and {b.shape}")
    if audio_format.bit_width is AudioBits.BITS_32:
        return (a + b).astype(np.float32)
    total = a.astype(np.int32) + b.astype(np.int32)
    return np.clip(total, S16_MIN, S16_MAX).astype(np.int16)