import json

import pytest

from spectroview.colormap import ColormapKind
from spectroview.config import SpectrogramConfig, is_power_of_two, load_config, save_config
from spectroview.errors import ConfigError, InvalidFftSizeError


def test_defaults():
    config = SpectrogramConfig()
    assert config.fft_size == 2048
    assert config.effective_hop_size == 1024
    assert config.normalize is True
    assert config.db_floor == -120.0
    assert config.colormap is ColormapKind.VIRIDIS
    assert config.validate() is config


def test_explicit_hop_overrides_default():
    assert SpectrogramConfig(fft_size=512, hop_size=100).effective_hop_size == 100


@pytest.mark.parametrize("value", [1, 2, 256, 2048, 65536])
def test_powers_of_two(value):
    assert is_power_of_two(value)


@pytest.mark.parametrize("value", [0, -2, 3, 2047, 1000, True, 2048.0, "2048"])
def test_not_powers_of_two(value):
    assert not is_power_of_two(value)


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"fft_size": 2047}, InvalidFftSizeError),
        ({"fft_size": 0}, InvalidFftSizeError),
        ({"fft_size": -1024}, InvalidFftSizeError),
        ({"hop_size": 0}, ConfigError),
        ({"hop_size": -5}, ConfigError),
        ({"db_floor": 0.0}, ConfigError),
        ({"db_floor": 12.0}, ConfigError),
        ({"db_floor": float("-inf")}, ConfigError),
        ({"colormap": "rainbow"}, ConfigError),
    ],
)
def test_validate_rejects_bad_values(kwargs, error):
    with pytest.raises(error):
        SpectrogramConfig(**kwargs).validate()


def test_with_overrides_skips_none():
    config = SpectrogramConfig().with_overrides(fft_size=4096, hop_size=None, colormap="magma")
    assert config.fft_size == 4096
    assert config.hop_size is None
    assert config.colormap is ColormapKind.MAGMA


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "spectroview.json"
    original = SpectrogramConfig(fft_size=1024, hop_size=256, normalize=False, db_floor=-90.0, colormap=ColormapKind.INFERNO)
    save_config(original, path)
    assert json.loads(path.read_text())["colormap"] == "inferno"
    assert load_config(path) == original


def test_missing_keys_take_defaults(tmp_path):
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"colormap": "grayscale", "unknown": 1}))
    config = load_config(path)
    assert config.colormap is ColormapKind.GRAYSCALE
    assert config.fft_size == 2048
    assert config.hop_size is None


def test_bad_config_files(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigError):
        load_config(broken)

    wrong_type = tmp_path / "list.json"
    wrong_type.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_config(wrong_type)

    bad_value = tmp_path / "bad.json"
    bad_value.write_text(json.dumps({"fft_size": "big"}))
    with pytest.raises(ConfigError):
        load_config(bad_value)


@pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
def test_normalize_must_be_a_json_boolean(tmp_path, value):
    path = tmp_path / "flag.json"
    path.write_text(json.dumps({"normalize": value}))
    with pytest.raises(ConfigError):
        load_config(path)


def test_normalize_false_is_kept(tmp_path):
    path = tmp_path / "flag.json"
    path.write_text(json.dumps({"normalize": False}))
    assert load_config(path).normalize is False
