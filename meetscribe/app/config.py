from __future__ import annotations

import argparse
import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

APP_NAME = "meetscribe"

DEFAULTS: dict[str, Any] = {
    "list_devices": False,
    "device": None,
    "model": "base",
    "whisper_device": "cpu",
    "compute_type": "int8",
    "language": None,
    "chunk_seconds": 5,
    "echo": True,
    "debug": False,
    "output_dir": None,
}
CONFIG_KEYS: tuple[str, ...] = tuple(DEFAULTS.keys())


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    config_path: Path


def app_paths() -> AppPaths:
    config_dir = Path(user_config_dir(APP_NAME, APP_NAME))
    return AppPaths(config_dir=config_dir, config_path=config_dir / "config.json")


def _load_json_dict(path: Path) -> dict[str, Any]:
    # Accept UTF-8 with or without BOM for Windows-edited config files.
    with path.open("r", encoding="utf-8-sig") as f:
        loaded = json.load(f)
    if not isinstance(loaded, dict):
        raise ValueError(f"config must be a JSON object: {path}")
    return loaded


def _write_json_dict(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _known_only(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: payload[key] for key in CONFIG_KEYS if key in payload}


def ensure_user_config_exists(defaults: dict[str, Any] | None = None) -> Path:
    paths = app_paths()
    if paths.config_path.exists():
        return paths.config_path
    _write_json_dict(paths.config_path, defaults or copy.deepcopy(DEFAULTS))
    return paths.config_path


def load_user_config(config_path: str | None = None) -> tuple[dict[str, Any], Path]:
    if config_path:
        chosen = Path(config_path)
        if not chosen.exists():
            raise SystemExit(f"Config file not found: {chosen}")
    else:
        chosen = ensure_user_config_exists()
    merged = copy.deepcopy(DEFAULTS)
    merged.update(_known_only(_load_json_dict(chosen)))
    return merged, chosen


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return value


def parser_with_defaults(defaults: dict[str, Any]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="meetscribe",
        description="Transcribe audio files or live microphone input to text for meeting minutes",
    )
    p.add_argument("--config", default=None, help="JSON config path (CLI flags override config)")
    p.add_argument("-i", "--input", default=None, help="audio file to transcribe (omit for live recording)")
    p.add_argument("-l", "--live", action="store_true", help="record from the microphone instead of a file")
    p.add_argument("-o", "--output", default=None, help="output text file")
    p.add_argument("-m", "--model", default=defaults["model"], help="faster-whisper model size or model path")
    p.add_argument(
        "--language",
        default=defaults["language"],
        help='language code, e.g. "en", "es", "fr" (default: auto-detect)',
    )
    p.add_argument(
        "-c",
        "--chunk-seconds",
        type=_positive_int,
        default=defaults["chunk_seconds"],
        help="chunk size in seconds for live transcription",
    )
    p.add_argument("--list-devices", action="store_true", help="print audio devices and exit")
    p.add_argument("--device", type=int, default=defaults["device"], help="sounddevice input device id")
    p.add_argument("--whisper-device", default=defaults["whisper_device"], help="cpu | cuda | auto")
    p.add_argument("--compute-type", default=defaults["compute_type"], help="ctranslate2 compute type")
    p.add_argument(
        "--echo",
        action=argparse.BooleanOptionalAction,
        default=defaults["echo"],
        help="print transcript lines to the console as they are written",
    )
    p.add_argument("--output-dir", default=defaults["output_dir"], help="directory for default output names")
    p.add_argument("--debug", action="store_true", help="log skipped ticks and per-chunk timings")
    return p


def resolve_args(argv: list[str] | None = None) -> argparse.Namespace:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", default=None)
    pre_args, _ = pre.parse_known_args(argv)
    defaults, _ = load_user_config(config_path=pre_args.config)
    parser = parser_with_defaults(defaults)
    args = parser.parse_args(argv)
    if defaults.get("list_devices"):
        args.list_devices = True
    if defaults.get("debug"):
        args.debug = True
    if args.language in ("", "auto"):
        args.language = None
    return args
