import io
from pathlib import Path
from typing import Tuple, Union

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.ticker import MaxNLocator  # noqa: E402

from spectroview.colormap import to_matplotlib  # noqa: E402
from spectroview.image import PixelImage  # noqa: E402
from spectroview.pipeline import SpectrogramData  # noqa: E402

DEFAULT_DPI = 140
DEFAULT_FIGSIZE = (10.0, 4.0)


def save_png(image: PixelImage, output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.to_pil().save(output_path, format="PNG")
    return output_path


def render_matplotlib(
    data: SpectrogramData,
    *,
    figsize: Tuple[float, float] = DEFAULT_FIGSIZE,
    dpi: int = DEFAULT_DPI,
) -> bytes:
    """
    Render scaled spectrogram values with time/frequency axes and a colorbar.
    Returns PNG bytes.
    """
    config = data.config
    sample_rate, fft_size, hop_size = data.sample_rate, config.fft_size, config.effective_hop_size
    normalize, db_floor = config.normalize, config.db_floor
    values = data.values
    frames, bins = values.shape
    times = (np.arange(frames) * hop_size + fft_size / 2.0) / float(sample_rate)
    freqs = np.arange(bins) * float(sample_rate) / float(fft_size)
    vmin, vmax = (0.0, 1.0) if normalize else (db_floor, 0.0)

    fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
    mesh = ax.pcolormesh(times, freqs, values.T, shading="auto", cmap=to_matplotlib(config.colormap), vmin=vmin, vmax=vmax)
    ax.set_ylabel("Frequency (Hz)")
    ax.set_xlabel("Time (s)")
    ax.xaxis.set_major_locator(MaxNLocator(nbins=8))
    ax.yaxis.set_major_locator(MaxNLocator(nbins=8))
    cbar = fig.colorbar(mesh, ax=ax)
    cbar.set_label("Level (normalized)" if normalize else "Amplitude (dB)")
    cbar.set_ticks(np.linspace(vmin, vmax, num=3))
    fig.tight_layout()
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    buffer.seek(0)
    return buffer.read()


def save_bytes(png_bytes: bytes, output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    return output_path
