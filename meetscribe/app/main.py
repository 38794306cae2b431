from __future__ import annotations

import traceback

from meetscribe.app.config import resolve_args
from meetscribe.app.diagnostics import hint_for_exception, summarize_exception
from meetscribe.app.file_mode import transcribe_file
from meetscribe.app.logging_setup import setup_app_logger
from meetscribe.app.services import build_capture, build_services, default_output_path
from meetscribe.audio.mic import list_devices
from meetscribe.errors import MeetscribeError
from meetscribe.live.session import LiveConfig, LiveSession, wait_for_enter


def _run_live(args, logger) -> int:
    output_path = default_output_path(args)
    services = build_services(args, logger=logger)
    capture = build_capture(args, logger=logger)

    def _wait_with_banner() -> None:
        cfg = session.capture_config
        if cfg is not None:
            print(f"Sample rate: {cfg.sample_rate} Hz, channels: {cfg.channels}")
        print("\nRecording... Press Enter to stop.")
        print(f"Transcribing in {int(args.chunk_seconds)} second chunks...\n")
        wait_for_enter()

    print("=== Live Recording & Transcription ===")
    print(f"Recording from: {capture.name}")
    session = LiveSession(
        engine=services.engine,
        capture=capture,
        config=LiveConfig(
            output_path=output_path,
            chunk_seconds=int(args.chunk_seconds),
            language=services.options.language,
            echo=bool(args.echo),
        ),
        wait_for_stop=_wait_with_banner,
        logger=logger,
    )
    summary = session.run()

    print("\nRecording stopped.")
    if summary.failed_chunks:
        print(f"{summary.failed_chunks} chunk(s) could not be transcribed; see log.")
    print(f"Transcription saved to: {summary.output_path}")
    return 0


def _run_file(args, logger) -> int:
    output_path = default_output_path(args)
    print("=== Audio Transcription Tool ===")
    print(f"Input: {args.input}")
    print(f"Output: {output_path}\n")

    services = build_services(args, logger=logger)
    count = transcribe_file(
        services.engine,
        args.input,
        output_path,
        language=services.options.language,
        echo=bool(args.echo),
        logger=logger,
    )
    print(f"Transcription complete: {count} line(s).")
    print(f"Saved to: {output_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(debug=bool(args.debug))
    logger.info("app_start", extra={"config_path": str(getattr(args, "config", "")), "argv": argv or []})

    try:
        if args.list_devices:
            print(list_devices())
            return 0
        if args.live or not args.input:
            return _run_live(args, logger)
        return _run_file(args, logger)
    except MeetscribeError as e:
        logger.error("app_failed", extra={"detail": traceback.format_exc()})
        first_line = (str(e).splitlines() or [""])[0]
        summary = summarize_exception(f"{type(e).__name__}: {first_line}")
        print(f"Error: {e}")
        print(hint_for_exception(summary))
        print(f"Logs: {log_path}")
        return 1
    except Exception as e:
        logger.error("app_failed", extra={"error": type(e).__name__, "detail": traceback.format_exc()})
        raise


if __name__ == "__main__":
    raise SystemExit(main())
