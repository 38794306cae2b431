from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from meetscribe.asr.model_path import resolve_model
from meetscribe.asr.whisper_engine import TranscribeOptions, WhisperEngine
from meetscribe.audio.mic import SoundDeviceInput, open_default_input


@dataclass(frozen=True)
class TranscriptionServices:
    engine: WhisperEngine
    options: TranscribeOptions


def build_transcribe_options(args: Any) -> TranscribeOptions:
    language = getattr(args, "language", None) or None
    return TranscribeOptions(language=language)


def build_services(args: Any, logger: logging.Logger | None = None) -> TranscriptionServices:
    options = build_transcribe_options(args)
    engine = WhisperEngine(
        resolve_model(str(args.model)),
        device=str(args.whisper_device),
        compute_type=str(args.compute_type),
        options=options,
        logger=logger,
    )
    return TranscriptionServices(engine=engine, options=options)


def build_capture(args: Any, logger: logging.Logger | None = None) -> SoundDeviceInput:
    return open_default_input(device=args.device, logger=logger)


def default_output_path(args: Any, now: datetime | None = None) -> Path:
    if args.output:
        return Path(args.output)
    out_dir = getattr(args, "output_dir", None)
    if args.input and not args.live:
        src = Path(args.input).with_suffix(".txt")
        return Path(out_dir) / src.name if out_dir else src
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return Path(out_dir or ".") / f"live_transcription_{stamp}.txt"
