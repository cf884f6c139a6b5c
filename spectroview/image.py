from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from spectroview.colormap import ColormapKind, apply_colormap
from spectroview.errors import InsufficientSamplesError


@dataclass(frozen=True)
class PixelImage:
    """Row-major RGBA pixels, 4 bytes each. Row 0 is the top of the image."""

    width: int
    height: int
    pixels: bytes

    def __post_init__(self):
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(f"pixel buffer has {len(self.pixels)} bytes, expected {expected}")

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        offset = (y * self.width + x) * 4
        r, g, b, a = self.pixels[offset:offset + 4]
        return r, g, b, a

    def to_array(self) -> np.ndarray:
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(self.height, self.width, 4)

    def to_pil(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.pixels)


def assemble_image(values: np.ndarray, kind: ColormapKind = ColormapKind.VIRIDIS) -> PixelImage:
    """
    Color a (frames, bins) grid and lay it out as an image.

    Frame x becomes pixel column x and bin y becomes row height - 1 - y, so the
    lowest frequency ends up on the bottom row.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.ndim != 2:
        raise ValueError(f"expected a 2-D (frames, bins) array, got shape {values.shape}")
    width, height = values.shape
    if width == 0 or height == 0:
        raise InsufficientSamplesError("spectrogram has no frames or no bins to draw")

    rgb = apply_colormap(values, kind)
    # (frames, bins, 3) -> (bins, frames, 3), then flip so bin 0 is the last row
    rgb = rgb.transpose(1, 0, 2)[::-1]

    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = rgb
    rgba[..., 3] = 255
    return PixelImage(width=width, height=height, pixels=rgba.tobytes())
