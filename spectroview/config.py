import json
import math
from dataclasses import dataclass, field, replace
from numbers import Integral
from pathlib import Path
from typing import Any, Dict, Optional, Union

from spectroview.colormap import ColormapKind
from spectroview.errors import ConfigError, InvalidFftSizeError

DEFAULT_FFT_SIZE = 2048
DEFAULT_NORMALIZE = True
DEFAULT_DB_FLOOR = -120.0
DEFAULT_COLORMAP = ColormapKind.VIRIDIS
SUPPORTED_EXTENSIONS = (".wav", ".flac", ".ogg", ".mp3")


def is_power_of_two(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Integral):
        return False
    return value > 0 and (value & (value - 1)) == 0


def _as_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class SpectrogramConfig:
    """
    Parameters for one pipeline run.

    hop_size of None means half of fft_size (50% overlap). Values are not
    checked on construction; the pipeline calls validate() before touching
    any samples.
    """

    fft_size: int = DEFAULT_FFT_SIZE
    hop_size: Optional[int] = None
    normalize: bool = DEFAULT_NORMALIZE
    db_floor: float = DEFAULT_DB_FLOOR
    colormap: ColormapKind = field(default=DEFAULT_COLORMAP)

    @property
    def effective_hop_size(self) -> int:
        if self.hop_size is None:
            return max(self.fft_size // 2, 1)
        return self.hop_size

    def validate(self) -> "SpectrogramConfig":
        if not is_power_of_two(self.fft_size):
            raise InvalidFftSizeError(f"fft_size must be a positive power of two, got {self.fft_size!r}")
        if self.hop_size is not None:
            if isinstance(self.hop_size, bool) or not isinstance(self.hop_size, Integral) or self.hop_size <= 0:
                raise ConfigError(f"hop_size must be a positive integer, got {self.hop_size!r}")
        if not isinstance(self.db_floor, (int, float)) or not math.isfinite(self.db_floor) or self.db_floor >= 0:
            raise ConfigError(f"db_floor must be a finite negative number, got {self.db_floor!r}")
        try:
            ColormapKind.parse(self.colormap)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return self

    def with_overrides(self, **overrides: Any) -> "SpectrogramConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "colormap" in changes:
            changes["colormap"] = ColormapKind.parse(changes["colormap"])
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpectrogramConfig":
        try:
            return cls(
                fft_size=int(data.get("fft_size", DEFAULT_FFT_SIZE)),
                hop_size=None if data.get("hop_size") in (None, "") else int(data["hop_size"]),
                normalize=_as_bool(data.get("normalize", DEFAULT_NORMALIZE), "normalize"),
                db_floor=float(data.get("db_floor", DEFAULT_DB_FLOOR)),
                colormap=ColormapKind.parse(data.get("colormap", DEFAULT_COLORMAP)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fft_size": self.fft_size,
            "hop_size": self.hop_size,
            "normalize": self.normalize,
            "db_floor": self.db_floor,
            "colormap": ColormapKind.parse(self.colormap).value,
        }


def load_config(config_path: Union[str, Path]) -> SpectrogramConfig:
    path = Path(config_path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed config file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return SpectrogramConfig.from_dict(raw)


def save_config(config: SpectrogramConfig, config_path: Union[str, Path]) -> Path:
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    return path
