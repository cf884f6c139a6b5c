import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np
import soundfile as sf

from spectroview.config import SUPPORTED_EXTENSIONS
from spectroview.errors import ChannelMismatchError, DecodeError

logger = logging.getLogger(__name__)

AudioSource = Union[str, Path, io.BytesIO]


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """Decoded audio: one float64 array per channel, all of equal length."""

    sample_rate: int
    channels: Tuple[np.ndarray, ...]

    @classmethod
    def from_channels(cls, sample_rate: int, channels: Sequence) -> "SampleBuffer":
        if int(sample_rate) <= 0:
            raise DecodeError(f"sample rate must be positive, got {sample_rate}")
        arrays = tuple(np.asarray(channel, dtype=np.float64) for channel in channels)
        if any(array.ndim != 1 for array in arrays):
            shapes = [array.shape for array in arrays]
            raise ChannelMismatchError(f"each channel must be a 1-D sample sequence, got shapes {shapes}")
        return cls(sample_rate=int(sample_rate), channels=arrays)

    @classmethod
    def mono(cls, samples, sample_rate: int) -> "SampleBuffer":
        return cls.from_channels(sample_rate, [samples])

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration(self) -> float:
        return self.frame_count / float(self.sample_rate)


def is_supported_file(path: Union[str, Path]) -> bool:
    return str(path).lower().endswith(SUPPORTED_EXTENSIONS)


def load_audio(source: AudioSource) -> SampleBuffer:
    """
    Decode an audio file with soundfile, keeping every channel.
    Any decoder or I/O failure is reported as DecodeError.
    """
    try:
        data, sample_rate = sf.read(source, dtype="float64", always_2d=True)
    except (sf.SoundFileError, RuntimeError, OSError, TypeError) as exc:
        raise DecodeError(f"Failed to load audio from {source}: {exc}") from exc

    logger.debug("Decoded %s: %d frames, %d channel(s) at %d Hz", source, data.shape[0], data.shape[1], sample_rate)
    return SampleBuffer.from_channels(sample_rate, [data[:, index] for index in range(data.shape[1])])


def mixdown(buffer: SampleBuffer) -> SampleBuffer:
    """Average all channels into one. A mono buffer is returned as-is."""
    if buffer.channel_count == 0:
        raise ChannelMismatchError("sample buffer has no channels")

    lengths = {len(channel) for channel in buffer.channels}
    if len(lengths) > 1:
        raise ChannelMismatchError(f"channel lengths differ: {[len(c) for c in buffer.channels]}")

    if buffer.channel_count == 1:
        return buffer

    mixed = np.mean(np.stack(buffer.channels), axis=0)
    return SampleBuffer(sample_rate=buffer.sample_rate, channels=(mixed,))


def audio_info(path: Union[str, Path]) -> dict:
    try:
        meta = sf.info(str(path))
    except (sf.SoundFileError, RuntimeError, OSError) as exc:
        raise DecodeError(f"Failed to read audio header from {path}: {exc}") from exc
    duration = meta.frames / float(meta.samplerate) if meta.samplerate else 0.0
    return {
        "sample_rate": int(meta.samplerate),
        "frames": int(meta.frames),
        "channels": int(meta.channels),
        "duration": duration,
        "path": Path(path),
    }
