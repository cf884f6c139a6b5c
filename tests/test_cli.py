import json
import logging

import numpy as np
import pytest
import soundfile as sf
from PIL import Image

import spectroview.cli as cli
from spectroview.cli import build_parser, collect_inputs, configure_logging, main


def _write_tone(path, n_samples=8000, sr=8000):
    t = np.arange(n_samples) / float(sr)
    sf.write(path, 0.5 * np.sin(2 * np.pi * 440.0 * t), sr)
    return path


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_renders_png(tmp_path):
    wav = _write_tone(tmp_path / "tone.wav")
    out = tmp_path / "out"
    assert main([str(wav), "-o", str(out), "--fft-size", "512", "--colormap", "grayscale"]) == 0

    png = out / "tone_spectrogram.png"
    with Image.open(png) as img:
        assert img.size == ((8000 - 512) // 256 + 1, 257)
        assert img.mode == "RGBA"


def test_directory_input_and_annotated_preview(tmp_path):
    audio_dir = tmp_path / "audio"
    audio_dir.mkdir()
    _write_tone(audio_dir / "b.wav")
    _write_tone(audio_dir / "a.wav")
    (audio_dir / "readme.txt").write_text("skip me")

    assert collect_inputs([audio_dir]) == [audio_dir / "a.wav", audio_dir / "b.wav"]

    out = tmp_path / "out"
    assert main([str(audio_dir), "-o", str(out), "--annotated", "--fft-size", "256"]) == 0
    assert (out / "a_spectrogram.png").exists()
    assert (out / "b_annotated.png").read_bytes().startswith(b"\x89PNG\r\n\x1a\n")


def test_failed_file_sets_exit_code(tmp_path, caplog, monkeypatch):
    # keep pytest's capture handler on the root logger
    monkeypatch.setattr(cli, "configure_logging", lambda level_name: None)
    good = _write_tone(tmp_path / "good.wav")
    short = _write_tone(tmp_path / "short.wav", n_samples=100)
    out = tmp_path / "out"

    with caplog.at_level(logging.ERROR):
        assert main([str(good), str(short), "-o", str(out)]) == 1

    assert (out / "good_spectrogram.png").exists()
    assert not (out / "short_spectrogram.png").exists()
    assert any("short.wav" in record.getMessage() for record in caplog.records)


def test_invalid_fft_size_exits_early(tmp_path):
    wav = _write_tone(tmp_path / "tone.wav")
    out = tmp_path / "out"
    assert main([str(wav), "-o", str(out), "--fft-size", "2047"]) == 2
    assert not out.exists()


def test_config_file_with_cli_override(tmp_path):
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps({"fft_size": 256, "hop_size": 64, "colormap": "magma"}))
    wav = _write_tone(tmp_path / "tone.wav", n_samples=2000)
    out = tmp_path / "out"

    assert main([str(wav), "-o", str(out), "--config", str(config_path), "--hop-size", "128"]) == 0
    with Image.open(out / "tone_spectrogram.png") as img:
        assert img.size == ((2000 - 256) // 128 + 1, 129)


def test_no_inputs_found(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert main([str(empty), "-o", str(tmp_path / "out")]) == 1


def test_parser_defaults():
    args = build_parser().parse_args(["x.wav"])
    assert args.normalize is None
    assert args.colormap is None
    assert build_parser().parse_args(["x.wav", "--no-normalize"]).normalize is False


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("loud")


def test_unwritable_output_does_not_stop_the_batch(tmp_path, caplog, monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda level_name: None)
    first = _write_tone(tmp_path / "first.wav")
    second = _write_tone(tmp_path / "second.wav")
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied")

    with caplog.at_level(logging.ERROR):
        assert main([str(first), str(second), "-o", str(blocker), "--fft-size", "256"]) == 1

    messages = [record.getMessage() for record in caplog.records]
    assert any("first.wav" in message for message in messages)
    assert any("second.wav" in message for message in messages)
