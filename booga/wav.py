"""Streaming reader for RIFF/WAVE files holding integer or float PCM."""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np

from booga.audio_format import S16_MAX, S16_MIN, AudioBits, AudioFormat
from booga.convert import _round_count, convert_frames

logger = logging.getLogger(__name__)

WAV_FORMAT_PCM = 0x0001
WAV_FORMAT_IEEE_FLOAT = 0x0003
WAV_FORMAT_EXTENSIBLE = 0xFFFE

_GUID_TAIL = bytes((0x80, 0x00, 0x00, 0xAA, 0x00, 0x38, 0x9B, 0x71))
WAV_SUBTYPE_PCM = struct.pack("<IHH", 0x00000001, 0x0000, 0x0010) + _GUID_TAIL
WAV_SUBTYPE_IEEE_FLOAT = struct.pack("<IHH", 0x00000003, 0x0000, 0x0010) + _GUID_TAIL

NON_DATA_CHUNK_MAX_SIZE = 40
_IGNORED_CHUNKS = frozenset((b"bext", b"fact", b"junk"))


class WavError(ValueError):
    """The file is not a wave file this reader can handle."""


class WavStream:
    """An open wave file positioned inside its PCM data."""

    def __init__(self, file: BinaryIO, path: str) -> None:
        self.file = file
        self.path = path
        self.channels = 0
        self.sample_rate = 0
        self.format = 0
        self.bits_per_sample = 0
        self.valid_bits_per_sample = 0
        self.sub_format = bytes(16)
        self.number_of_frames = 0
        self.pcm_start = 0
        self.output_frames = 0

    @classmethod
    def open(cls, path: Union[str, Path], sample_rate: int) -> "WavStream":
        """Open path and parse its header; output_frames counts frames at sample_rate."""
        file = Path(path).open("rb")
        stream = cls(file, str(path))
        try:
            stream._parse(sample_rate)
        except BaseException:
            file.close()
            raise
        return stream

    def _read_exact(self, size: int, what: str) -> bytes:
        data = self.file.read(size)
        if len(data) != size:
            raise WavError(f"Truncated {what} in wave file @ {self.path}")
        return data

    def _parse(self, sample_rate: int) -> None:
        header = self._read_exact(12, "header")
        if header[:4] != b"RIFF":
            raise WavError(f"Missing RIFF header in wave file @ {self.path}")
        if header[8:12] != b"WAVE":
            raise WavError(f"Invalid header in wave file @ {self.path}")

        riff_size = struct.unpack_from("<I", header, 4)[0]
        sub_chunk_bytes = (riff_size - 4) & 0xFFFFFFFF

        found_fmt = False
        found_data = False
        position = 4
        while position < sub_chunk_bytes:
            chunk_header = self._read_exact(8, "chunk header")
            chunk_id = chunk_header[:4]
            chunk_size = struct.unpack_from("<I", chunk_header, 4)[0]
            position += 8 + chunk_size

            if chunk_id in _IGNORED_CHUNKS:
                self.file.seek(chunk_size, io.SEEK_CUR)
                continue

            chunk = b""
            if chunk_id != b"data" and chunk_size <= NON_DATA_CHUNK_MAX_SIZE:
                chunk = self._read_exact(chunk_size, "chunk")

            if chunk_id == b"fmt ":
                if chunk_size not in (16, 18, 40):
                    raise WavError(f"Invalid wav fmt chunk, bad size {chunk_size}")
                (
                    self.format,
                    self.channels,
                    self.sample_rate,
                    _avg_bytes_per_sec,
                    _block_align,
                    self.bits_per_sample,
                ) = struct.unpack_from("<HHIIHH", chunk)
                self.valid_bits_per_sample = self.bits_per_sample
                if chunk_size == 40:
                    self.valid_bits_per_sample = struct.unpack_from("<H", chunk, 18)[0]
                    self.sub_format = bytes(chunk[24:40])
                found_fmt = True
            elif chunk_id == b"data":
                if not found_fmt:
                    raise WavError(f"Data chunk before fmt chunk in wave file @ {self.path}")
                comp_size = self.bits_per_sample // 8
                if comp_size == 0 or self.channels == 0:
                    raise WavError(f"Invalid sample layout in wave file @ {self.path}")
                number_of_bytes = chunk_size - chunk_size % 2
                number_of_samples = number_of_bytes // comp_size
                self.pcm_start = self.file.tell()
                self.number_of_frames = number_of_samples // self.channels
                self.file.seek(chunk_size, io.SEEK_CUR)
                found_data = True
            else:
                logger.warning(
                    "Unhandled chunk id '%s' in wave file @ %s",
                    chunk_id.decode("latin-1"),
                    self.path,
                )
                if chunk_size > NON_DATA_CHUNK_MAX_SIZE:
                    self.file.seek(chunk_size, io.SEEK_CUR)

        if not found_fmt or not found_data:
            raise WavError(f"Missing fmt or data chunk in wave file @ {self.path}")

        if self.format == WAV_FORMAT_EXTENSIBLE:
            if self.sub_format == WAV_SUBTYPE_PCM:
                self.format = WAV_FORMAT_PCM
            elif self.sub_format == WAV_SUBTYPE_IEEE_FLOAT:
                self.format = WAV_FORMAT_IEEE_FLOAT
            else:
                raise WavError(f"Unsupported extensible sub format in wave file @ {self.path}")

        if self.format not in (WAV_FORMAT_PCM, WAV_FORMAT_IEEE_FLOAT) or (
            self.format == WAV_FORMAT_IEEE_FLOAT and self.valid_bits_per_sample != 32
        ):
            raise WavError(
                f"Wav file @ '{self.path}' format 0x{self.format:x} "
                f"({self.valid_bits_per_sample} bits) is not supported."
            )
        if self.valid_bits_per_sample <= 0:
            raise WavError(f"Invalid valid bits per sample in wave file @ {self.path}")
        if self.valid_bits_per_sample in (16, 24, 32):
            if self.bits_per_sample // 8 < self.valid_bits_per_sample // 8:
                raise WavError(f"Sample container too small in wave file @ {self.path}")

        if self.valid_bits_per_sample == 24:
            logger.warning(
                "The current support for 24-bit wave audio is hit-or-miss. If the audio "
                "sounds weird, you should convert it to another bit-width (or vorbis)."
            )

        self.output_frames = self.number_of_frames
        if self.sample_rate != sample_rate:
            ratio = sample_rate / self.sample_rate
            self.output_frames = _round_count(self.number_of_frames * ratio)

        self.file.seek(self.pcm_start)

    @property
    def _frame_size(self) -> int:
        return self.channels * (self.bits_per_sample // 8)

    def close(self) -> None:
        """Close the underlying file."""
        self.file.close()

    def set_frame_pos(self, output_sample_rate: int, frame_index: int) -> None:
        """Seek to frame_index, counted in frames at output_sample_rate."""
        ratio = self.sample_rate / output_sample_rate
        index = _round_count(ratio * frame_index)
        self.file.seek(self.pcm_start + index * self._frame_size)

    def read_frames(self, audio_format: AudioFormat, number_of_frames: int) -> np.ndarray:
        """Read up to number_of_frames frames converted into audio_format."""
        if number_of_frames < 0:
            raise ValueError("number_of_frames must not be negative")
        empty = np.zeros((0, audio_format.channels), dtype=audio_format.bit_width.dtype)

        pos = self.file.tell()
        if pos < self.pcm_start:
            return empty

        frame_size = self._frame_size
        end = self.pcm_start + frame_size * self.number_of_frames
        remaining = max(end - pos, 0) // frame_size

        ratio = self.sample_rate / audio_format.sample_rate
        frames_to_output = min(_round_count(remaining / ratio), number_of_frames)
        frames_to_read = frames_to_output
        if self.sample_rate != audio_format.sample_rate:
            frames_to_read = _round_count(ratio * frames_to_output)

        raw = self.file.read(frames_to_read * frame_size)
        if len(raw) != frames_to_read * frame_size:
            self.file.seek(pos)
            return empty

        decoded = self._decode(raw, frames_to_read, audio_format.bit_width)
        return convert_frames(
            decoded,
            audio_format,
            AudioFormat(audio_format.bit_width, self.channels, self.sample_rate),
            frames_to_output,
        )

    def _decode(self, raw: bytes, frames: int, bits: AudioBits) -> np.ndarray:
        comp_size = self.bits_per_sample // 8
        data = np.frombuffer(raw, dtype=np.uint8).reshape(frames, self.channels, comp_size)

        if self.format == WAV_FORMAT_IEEE_FLOAT:
            samples = np.ascontiguousarray(data[..., :4]).view("<f4")[..., 0]
            if bits is AudioBits.BITS_32:
                return samples.astype(np.float32)
            scaled = np.trunc(samples.astype(np.float32) * np.float32(32768.0))
            return np.clip(scaled, S16_MIN, S16_MAX).astype(np.int16)

        ints = self._decode_ints(data)
        valid = self.valid_bits_per_sample
        if bits is AudioBits.BITS_16 and valid == 16:
            return ints.astype(np.int16)
        maximum = (1 << (valid - 1)) - 1
        if bits is AudioBits.BITS_32:
            return (ints.astype(np.float64) / maximum).astype(np.float32)
        factor = (ints.astype(np.float64) * (1.0 / maximum)).astype(np.float32)
        scaled = np.trunc(factor * np.float32(32768.0))
        return np.clip(scaled, S16_MIN, S16_MAX).astype(np.int16)

    def _decode_ints(self, data: np.ndarray) -> np.ndarray:
        valid = self.valid_bits_per_sample
        if valid not in (16, 24, 32):
            return np.zeros(data.shape[:2], dtype=np.int64)
        nbytes = valid // 8
        weights = np.int64(256) ** np.arange(nbytes, dtype=np.int64)
        value = (data[..., :nbytes].astype(np.int64) * weights).sum(axis=-1)
        sign_bit = np.int64(1) << (8 * nbytes - 1)
        return np.where(value & sign_bit, value - (np.int64(1) << (8 * nbytes)), value)

    def __enter__(self) -> "WavStream":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_wav(path: Union[str, Path], audio_format: AudioFormat) -> np.ndarray:
    """Read a whole wave file into frames of audio_format."""
    with WavStream.open(path, audio_format.sample_rate) as wav:
        expected: Optional[int] = wav.output_frames
        frames = wav.read_frames(audio_format, wav.output_frames)
    if frames.shape[0] != expected:
        raise WavError(f"Could not read all frames from wave file @ {path}")
    return frames