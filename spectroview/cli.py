"""
Batch harness: turn audio files into spectrogram PNGs.

Each input is processed independently; a file that fails to decode, is too
short or cannot be written is logged and skipped, and the exit status reports
whether anything failed.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from spectroview.audio_loader import is_supported_file
from spectroview.colormap import ColormapKind
from spectroview.config import SpectrogramConfig, load_config
from spectroview.errors import PipelineError
from spectroview.pipeline import analyze, render
from spectroview.renderer import render_matplotlib, save_bytes, save_png

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def configure_logging(level_name: str, fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s") -> None:
    level = LOG_LEVELS.get(level_name.lower())
    if level is None:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Invalid log level '{level_name}'. Choose from: {valid}")

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%H:%M:%S"))
    root.addHandler(handler)

    # matplotlib and PIL are chatty at DEBUG
    for name in ("matplotlib", "PIL"):
        logging.getLogger(name).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spectroview", description="Render audio files as spectrogram PNGs.")
    parser.add_argument("inputs", nargs="+", type=Path, help="Audio files or directories containing audio files")
    parser.add_argument("-o", "--output-dir", type=Path, default=Path("spectrograms"), help="Where PNGs are written")
    parser.add_argument("--config", type=Path, help="JSON file with pipeline settings")
    parser.add_argument("--fft-size", type=int, help="FFT size, a power of two (default 2048)")
    parser.add_argument("--hop-size", type=int, help="Samples between frames (default fft-size / 2)")
    parser.add_argument("--db-floor", type=float, help="Lowest dB level (default -120)")
    parser.add_argument(
        "--no-normalize",
        dest="normalize",
        action="store_false",
        default=None,
        help="Keep raw dB values instead of scaling to [0, 1]",
    )
    parser.add_argument("--colormap", choices=[kind.value for kind in ColormapKind], help="Palette (default viridis)")
    parser.add_argument("--annotated", action="store_true", help="Also write a preview with axes and a colorbar")
    parser.add_argument("--log-level", default="info", choices=sorted(LOG_LEVELS), help="Logging verbosity")
    return parser


def collect_inputs(paths: Iterable[Path]) -> List[Path]:
    files: List[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.iterdir() if p.is_file() and is_supported_file(p)))
        else:
            files.append(path)
    return files


def process_file(path: Path, config: SpectrogramConfig, output_dir: Path, annotated: bool = False) -> Path:
    data = analyze(path, config)
    output_path = save_png(render(data), output_dir / f"{path.stem}_spectrogram.png")
    if annotated:
        save_bytes(render_matplotlib(data), output_dir / f"{path.stem}_annotated.png")
    return output_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        base = load_config(args.config) if args.config else SpectrogramConfig()
        config = base.with_overrides(
            fft_size=args.fft_size,
            hop_size=args.hop_size,
            db_floor=args.db_floor,
            normalize=args.normalize,
            colormap=args.colormap,
        ).validate()
    except (OSError, PipelineError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    files = collect_inputs(args.inputs)
    if not files:
        logger.warning("No audio files found in %s", ", ".join(str(p) for p in args.inputs))
        return 1

    failures = 0
    for path in files:
        try:
            output = process_file(path, config, args.output_dir, annotated=args.annotated)
        except (PipelineError, OSError) as exc:
            failures += 1
            logger.error("%s: %s", path, exc)
            continue
        logger.info("%s -> %s", path.name, output)

    logger.info("Done: %d of %d file(s) rendered into %s", len(files) - failures, len(files), args.output_dir)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
