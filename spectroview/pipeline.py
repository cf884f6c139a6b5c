"""
Spectrogram pipeline entry points.

decode -> mixdown -> STFT magnitudes -> dB scaling -> colormap + layout.
The first failing stage raises and nothing after it runs, so a caller either
gets a complete PixelImage or a PipelineError.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from spectroview.audio_loader import AudioSource, SampleBuffer, load_audio, mixdown
from spectroview.colormap import ColormapKind
from spectroview.config import SpectrogramConfig
from spectroview.errors import InsufficientSamplesError
from spectroview.image import PixelImage, assemble_image
from spectroview.spectrogram_engine import compute_magnitudes, magnitude_to_db

logger = logging.getLogger(__name__)

Source = Union[AudioSource, SampleBuffer]


@dataclass(frozen=True, eq=False)
class SpectrogramData:
    """Scaled (frames, bins) values plus what is needed to label their axes."""

    values: np.ndarray
    sample_rate: int
    config: SpectrogramConfig


def _decode(source: Source) -> SampleBuffer:
    if isinstance(source, SampleBuffer):
        return source
    logger.debug("Decoding %s", source)
    return load_audio(source)


def analyze(source: Source, config: Optional[SpectrogramConfig] = None) -> SpectrogramData:
    """
    Run every stage except coloring.

    The configuration is validated before anything is decoded, so an invalid
    fft_size fails without reading the file.
    """
    config = (config or SpectrogramConfig()).validate()
    mono = mixdown(_decode(source))
    samples = mono.channels[0]
    if samples.size < config.fft_size:
        raise InsufficientSamplesError(
            f"{samples.size} sample(s) is shorter than fft_size {config.fft_size}"
        )

    magnitudes = compute_magnitudes(samples, config.fft_size, config.effective_hop_size)
    values = magnitude_to_db(magnitudes, db_floor=config.db_floor, normalize=config.normalize)
    return SpectrogramData(values=values, sample_rate=mono.sample_rate, config=config)


def render(data: SpectrogramData) -> PixelImage:
    kind = ColormapKind.parse(data.config.colormap)
    image = assemble_image(data.values, kind)
    logger.debug(
        "Spectrogram %dx%d (fft %d, hop %d, normalize=%s, colormap=%s)",
        image.width,
        image.height,
        data.config.fft_size,
        data.config.effective_hop_size,
        data.config.normalize,
        kind.value,
    )
    return image


def generate(source: Source, config: Optional[SpectrogramConfig] = None) -> PixelImage:
    """Build a spectrogram image from a file path, file object or SampleBuffer."""
    return render(analyze(source, config))


def generate_from_buffer(buffer: SampleBuffer, config: Optional[SpectrogramConfig] = None) -> PixelImage:
    if not isinstance(buffer, SampleBuffer):
        raise TypeError(f"expected a SampleBuffer, got {type(buffer).__name__}")
    return generate(buffer, config)
