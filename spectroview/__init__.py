"""
Spectrogram image pipeline.

Turns a decoded audio file into a false-color RGBA spectrogram: Hann-windowed
STFT, decibel scaling with a floor, one of five fixed palettes, and a row-major
pixel buffer with the lowest frequency on the bottom row. No UI code lives here;
callers hand in a path or a sample buffer and get back an image or an error.
"""
from spectroview.colormap import ColormapKind
from spectroview.config import SpectrogramConfig
from spectroview.errors import (
    ChannelMismatchError,
    ConfigError,
    DecodeError,
    InsufficientSamplesError,
    InvalidFftSizeError,
    PipelineError,
)
from spectroview.image import PixelImage
from spectroview.pipeline import generate, generate_from_buffer

__all__ = [
    "ChannelMismatchError",
    "ColormapKind",
    "ConfigError",
    "DecodeError",
    "InsufficientSamplesError",
    "InvalidFftSizeError",
    "PipelineError",
    "PixelImage",
    "SpectrogramConfig",
    "generate",
    "generate_from_buffer",
]
