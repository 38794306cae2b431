from __future__ import annotations

from meetscribe.app.diagnostics import hint_for_exception, summarize_exception


def test_summarize_exception_picks_last_meaningful_line() -> None:
    detail = (
        "Traceback (most recent call last):\n"
        '  File "x.py", line 1, in <module>\n'
        "    boom()\n"
        "MicError: Failed to open microphone stream."
    )
    assert summarize_exception(detail) == "MicError: Failed to open microphone stream."


def test_summarize_exception_truncates_long_line() -> None:
    detail = "ValueError: " + ("x" * 500)
    out = summarize_exception(detail, max_len=60)
    assert out.startswith("ValueError: ")
    assert out.endswith("...")
    assert len(out) <= 60


def test_summarize_exception_empty() -> None:
    assert summarize_exception("") == "Unknown error."


def test_hint_for_missing_model() -> None:
    assert "model size" in hint_for_exception("ModelNotFoundError: Model not found: models/x")


def test_hint_for_microphone() -> None:
    assert "--list-devices" in hint_for_exception("MicError: No input device available.")


def test_hint_for_exception_default() -> None:
    assert hint_for_exception("RuntimeError: unknown") == "Check logs for full traceback."
