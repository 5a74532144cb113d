"""Conversion of frames between channel counts, bit widths and sample rates."""

from __future__ import annotations

from typing import Any

import numpy as np

from booga.audio_format import (
    S16_MAX,
    S16_MIN,
    AudioBits,
    AudioFormat,
    _coerce_frames,
    convert_component,
)


def _round_half_away(x: Any) -> Any:
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def _round_count(x: float) -> int:
    return int(_round_half_away(x))


def resample_frames(
    frames: Any, dst_format: AudioFormat, src_format: AudioFormat
) -> np.ndarray:
    """Linearly resample frames from the source to the destination sample rate."""
    if dst_format.channels != src_format.channels:
        raise ValueError("Channel count must be the same for sample rate conversion")
    if dst_format.bit_width != src_format.bit_width:
        raise ValueError("Types must be the same for sample rate conversion")

    src = _coerce_frames(frames, src_format)
    src_count = src.shape[0]
    dtype = dst_format.bit_width.dtype
    if src_count == 0:
        return np.zeros((0, dst_format.channels), dtype=dtype)

    src_ratio = src_format.sample_rate / dst_format.sample_rate
    dst_count = _round_count(src_count / src_ratio)

    positions = (np.arange(dst_count, dtype=np.float64) * src_ratio).astype(np.float32)
    index_1 = np.minimum(positions.astype(np.int64), src_count - 1)
    index_2 = np.minimum(index_1 + 1, src_count - 1)
    lerp = (positions - index_1.astype(np.float32))[:, None]

    s1 = src[index_1].astype(np.float32)
    s2 = src[index_2].astype(np.float32)
    mixed = s1 + lerp * (s2 - s1)

    if dst_format.bit_width is AudioBits.BITS_32:
        return mixed.astype(np.float32)
    return np.clip(np.trunc(mixed), S16_MIN, S16_MAX).astype(np.int16)


def _convert_samples(
    src: np.ndarray, dst_format: AudioFormat, src_format: AudioFormat
) -> np.ndarray:
    dst_bits = dst_format.bit_width
    src_ch, dst_ch = src_format.channels, dst_format.channels
    converted = np.asarray(
        convert_component(src, dst_bits, src_format.bit_width), dtype=dst_bits.dtype
    ).reshape(src.shape)
    count = converted.shape[0]

    avg = None
    if src_ch > 1:
        mean = converted.astype(np.float32).sum(axis=1) / np.float32(src_ch)
        if dst_bits is AudioBits.BITS_32:
            avg = mean.astype(np.float32)
        else:
            avg = np.clip(_round_half_away(mean), S16_MIN, S16_MAX).astype(np.int16)

    if src_ch > dst_ch:
        return np.repeat(avg[:, None], dst_ch, axis=1)
    if src_ch == 1:
        return np.repeat(converted[:, :1], dst_ch, axis=1)
    if dst_ch > src_ch:
        out = np.empty((count, dst_ch), dtype=dst_bits.dtype)
        out[:, :src_ch] = converted
        out[:, src_ch:] = avg[:, None]
        return out
    return converted


def convert_frames(
    frames: Any,
    dst_format: AudioFormat,
    src_format: AudioFormat,
    output_frame_count: int,
) -> np.ndarray:
    """Convert frames into dst_format, producing output_frame_count frames."""
    if output_frame_count < 0:
        raise ValueError("output_frame_count must not be negative")
    src = _coerce_frames(frames, src_format)

    src_frame_count = output_frame_count
    if dst_format.sample_rate != src_format.sample_rate:
        ratio = src_format.sample_rate / dst_format.sample_rate
        src_frame_count = _round_count(output_frame_count * ratio)

    if src.shape[0] < src_frame_count:
        raise ValueError(
            f"need {src_frame_count} source frames, only {src.shape[0]} given"
        )
    src = src[:src_frame_count]

    if dst_format == src_format:
        return src.copy()

    need_sample_conversion = (
        dst_format.channels != src_format.channels
        or dst_format.bit_width != src_format.bit_width
    )
    if need_sample_conversion:
        stage = _convert_samples(src, dst_format, src_format)
        stage_format = AudioFormat(
            dst_format.bit_width, dst_format.channels, src_format.sample_rate
        )
    else:
        stage = src
        stage_format = src_format

    if dst_format.sample_rate == src_format.sample_rate:
        return stage.copy()

    resampled = resample_frames(stage, dst_format, stage_format)
    out = np.zeros((output_frame_count, dst_format.channels), dtype=dst_format.bit_width.dtype)
    n = min(output_frame_count, resampled.shape[0])
    out[:n] = resampled[:n]
    return out