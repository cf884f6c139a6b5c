from enum import Enum
from typing import Dict, Tuple, Union

import numpy as np
from matplotlib.colors import ListedColormap

RGB = Tuple[int, int, int]


class ColormapKind(Enum):
    VIRIDIS = "viridis"
    MAGMA = "magma"
    INFERNO = "inferno"
    GRAYSCALE = "grayscale"
    BLUE_TO_RED = "blue_to_red"

    @classmethod
    def parse(cls, value: Union[str, "ColormapKind"]) -> "ColormapKind":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == key:
                return kind
        names = ", ".join(kind.value for kind in cls)
        raise ValueError(f"Unsupported colormap '{value}' (choose from: {names})")


# Anchors are evenly spaced over [0, 1]; each adjacent pair is one segment.
ANCHORS: Dict[ColormapKind, Tuple[RGB, ...]] = {
    ColormapKind.VIRIDIS: ((68, 1, 84), (33, 144, 140), (73, 211, 121), (190, 206, 86), (253, 231, 37)),
    ColormapKind.MAGMA: ((0, 0, 0), (88, 24, 69), (188, 80, 144), (249, 163, 137), (253, 231, 240)),
    ColormapKind.INFERNO: ((0, 0, 0), (73, 11, 68), (184, 71, 55), (253, 173, 47), (252, 255, 164)),
    ColormapKind.GRAYSCALE: ((0, 0, 0), (255, 255, 255)),
    ColormapKind.BLUE_TO_RED: ((0, 0, 255), (255, 0, 0)),
}

_ANCHOR_ARRAYS = {kind: np.asarray(table, dtype=np.float64) for kind, table in ANCHORS.items()}


def _blend(start: np.ndarray, end: np.ndarray, t) -> np.ndarray:
    # Truncate toward zero; everything here is non-negative so this is floor.
    return np.trunc(start * (1.0 - t) + end * t).astype(np.uint8)


def _interpolate(values: np.ndarray, anchors: np.ndarray) -> np.ndarray:
    segments = anchors.shape[0] - 1
    scaled = values * segments
    index = np.minimum(np.floor(scaled).astype(np.intp), segments - 1)
    t = (scaled - index)[..., np.newaxis]
    return _blend(anchors[index], anchors[index + 1], t)


def apply_colormap(values, kind: ColormapKind = ColormapKind.VIRIDIS) -> np.ndarray:
    """
    Map an array of scalars to 8-bit RGB.

    Values are clamped to [0, 1] (NaN counts as 0) and the result has the input
    shape plus a trailing axis of length 3.
    """
    kind = ColormapKind.parse(kind)
    data = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    data = np.clip(data, 0.0, 1.0)
    return _interpolate(data, _ANCHOR_ARRAYS[kind])


def map_value(value: float, kind: ColormapKind = ColormapKind.VIRIDIS) -> RGB:
    r, g, b = apply_colormap(np.array([value]), kind)[0]
    return int(r), int(g), int(b)


def to_matplotlib(kind: ColormapKind, n: int = 256) -> ListedColormap:
    kind = ColormapKind.parse(kind)
    colors = apply_colormap(np.linspace(0.0, 1.0, n), kind) / 255.0
    return ListedColormap(colors, name=f"spectroview_{kind.value}")
