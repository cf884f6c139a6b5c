import logging

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy import fft, signal

from spectroview.config import DEFAULT_DB_FLOOR, is_power_of_two
from spectroview.errors import ConfigError, InsufficientSamplesError, InvalidFftSizeError

logger = logging.getLogger(__name__)


def hann_window(size: int) -> np.ndarray:
    """Symmetric Hann window: 0.5 * (1 - cos(2*pi*n / (size - 1)))."""
    if size == 1:
        return np.ones(1)
    return signal.get_window("hann", size, fftbins=False)


def bin_count(fft_size: int) -> int:
    return fft_size // 2 + 1


def frame_count(sample_count: int, fft_size: int, hop_size: int) -> int:
    if sample_count < fft_size:
        return 0
    return (sample_count - fft_size) // hop_size + 1


def _check_sizes(fft_size: int, hop_size: int) -> None:
    if not is_power_of_two(fft_size):
        raise InvalidFftSizeError(f"fft_size must be a positive power of two, got {fft_size!r}")
    if isinstance(hop_size, bool) or not isinstance(hop_size, (int, np.integer)) or hop_size <= 0:
        raise ConfigError(f"hop_size must be a positive integer, got {hop_size!r}")


def frame_signal(samples: np.ndarray, fft_size: int, hop_size: int) -> np.ndarray:
    """
    Slice a mono signal into overlapping frames of fft_size samples.

    Frame k starts at k * hop_size. Only whole frames are returned, so trailing
    samples that do not fill a frame are dropped. The result is a read-only
    view of shape (frames, fft_size).
    """
    _check_sizes(fft_size, hop_size)
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim != 1:
        raise ValueError("samples must be mono")
    if samples.size < fft_size:
        raise InsufficientSamplesError(
            f"need at least {fft_size} samples for one frame, got {samples.size}"
        )
    return sliding_window_view(samples, fft_size)[::hop_size]


def compute_magnitudes(samples: np.ndarray, fft_size: int, hop_size: int) -> np.ndarray:
    """
    Hann-windowed real STFT magnitudes, shape (frames, fft_size // 2 + 1).
    Phase is discarded.
    """
    frames = frame_signal(samples, fft_size, hop_size)
    windowed = frames * hann_window(fft_size)
    spectrum = fft.rfft(windowed, n=fft_size, axis=-1)
    magnitudes = np.abs(spectrum)
    logger.debug("STFT: %d frame(s) x %d bin(s), hop %d", magnitudes.shape[0], magnitudes.shape[1], hop_size)
    return magnitudes


def magnitude_to_db(
    magnitudes: np.ndarray,
    db_floor: float = DEFAULT_DB_FLOOR,
    normalize: bool = True,
) -> np.ndarray:
    """
    Convert magnitudes to decibels clipped at db_floor.

    With normalize=True the reference is the global maximum magnitude and the
    result is rescaled from [db_floor, 0] to [0, 1]: the loudest bin becomes
    exactly 1.0 and silent bins exactly 0.0. Otherwise the reference is 1.0 and
    the raw (unbounded above) dB values are returned.
    """
    if not np.isfinite(db_floor) or db_floor >= 0:
        raise ConfigError(f"db_floor must be a finite negative number, got {db_floor!r}")

    magnitudes = np.asarray(magnitudes, dtype=np.float64)
    reference = float(np.max(magnitudes)) if normalize and magnitudes.size else 1.0

    db = np.full(magnitudes.shape, float(db_floor))
    if reference > 0:
        ratio = magnitudes / reference
        positive = ratio > 0
        db[positive] = 20.0 * np.log10(ratio[positive])
    db = np.maximum(db, db_floor)

    if normalize:
        db = (db - db_floor) / (0.0 - db_floor)
    return db
