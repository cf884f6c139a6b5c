class PipelineError(Exception):
    """Base class for every recoverable spectrogram pipeline failure."""


class DecodeError(PipelineError):
    """Raised when an audio file cannot be decoded."""


class ChannelMismatchError(PipelineError):
    """Raised when the channels of a sample buffer differ in length."""


class ConfigError(PipelineError, ValueError):
    """Raised for an invalid pipeline configuration value."""


class InvalidFftSizeError(ConfigError):
    """Raised when fft_size is not a positive power of two."""


class InsufficientSamplesError(PipelineError):
    """Raised when there are fewer samples than a single FFT frame."""
