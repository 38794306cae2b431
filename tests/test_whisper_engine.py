from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from meetscribe.asr.whisper_engine import TranscribeOptions, WhisperEngine, WhisperSession
from meetscribe.contracts import Segment
from meetscribe.errors import EngineError, StartupError


def _fake_model(*segments) -> MagicMock:
    model = MagicMock()
    model.transcribe.return_value = (iter(segments), MagicMock())
    return model


def test_transcribe_converts_seconds_to_centiseconds() -> None:
    model = _fake_model(
        MagicMock(start=0.0, end=2.5, text=" hello world"),
        MagicMock(start=2.5, end=4.04, text="again "),
    )
    session = WhisperSession(model, TranscribeOptions())

    out = session.transcribe(np.zeros(16000, dtype=np.float32), "en")

    assert out == [Segment(0, 250, "hello world"), Segment(250, 404, "again")]
    kwargs = model.transcribe.call_args.kwargs
    assert kwargs["language"] == "en"
    assert kwargs["beam_size"] == 1
    assert kwargs["task"] == "transcribe"
    assert kwargs["vad_filter"] is False
    audio = model.transcribe.call_args.args[0]
    assert audio.dtype == np.float32


def test_language_falls_back_to_options() -> None:
    model = _fake_model()
    session = WhisperSession(model, TranscribeOptions(language="fr"))
    session.transcribe(np.zeros(10, dtype=np.float32))
    assert model.transcribe.call_args.kwargs["language"] == "fr"


def test_auto_detect_passes_none() -> None:
    model = _fake_model()
    WhisperSession(model, TranscribeOptions()).transcribe(np.zeros(10, dtype=np.float32), None)
    assert model.transcribe.call_args.kwargs["language"] is None


def test_bad_segment_is_skipped_and_siblings_kept() -> None:
    model = _fake_model(
        MagicMock(start=0.0, end=1.0, text="kept one"),
        MagicMock(start=None, end=1.0, text="broken"),
        MagicMock(start=3.0, end=2.0, text="backwards"),
        MagicMock(start=2.0, end=3.0, text="   "),
        MagicMock(start=3.0, end=4.0, text="kept two"),
    )
    out = WhisperSession(model, TranscribeOptions()).transcribe(np.zeros(10, dtype=np.float32))
    assert [s.text for s in out] == ["kept one", "kept two"]


def test_engine_failure_raises_engine_error() -> None:
    model = MagicMock()
    model.transcribe.side_effect = RuntimeError("cuda out of memory")
    with pytest.raises(EngineError):
        WhisperSession(model, TranscribeOptions()).transcribe(np.zeros(10, dtype=np.float32))


def test_failure_while_decoding_segments_raises_engine_error() -> None:
    def broken_segments():
        yield MagicMock(start=0.0, end=1.0, text="partial")
        raise RuntimeError("decoder fault")

    model = MagicMock()
    model.transcribe.return_value = (broken_segments(), MagicMock())
    with pytest.raises(EngineError):
        WhisperSession(model, TranscribeOptions()).transcribe(np.zeros(10, dtype=np.float32))


def test_empty_audio_skips_the_model() -> None:
    model = MagicMock()
    assert WhisperSession(model, TranscribeOptions()).transcribe(np.zeros(0, dtype=np.float32)) == []
    model.transcribe.assert_not_called()


def test_session_rejects_concurrent_use() -> None:
    session = WhisperSession(_fake_model(), TranscribeOptions())
    session._busy.acquire()
    try:
        with pytest.raises(EngineError):
            session.transcribe(np.zeros(10, dtype=np.float32))
    finally:
        session._busy.release()


def test_engine_sessions_share_one_model(monkeypatch) -> None:
    engine = WhisperEngine("tiny")
    fake_model = _fake_model()
    calls = []

    def fake_get_model():
        calls.append(1)
        return fake_model

    monkeypatch.setattr(engine, "_get_model", fake_get_model)
    a = engine.new_session()
    b = engine.new_session()
    assert a is not b
    assert a._model is b._model is fake_model
    assert a.options is engine.options


def test_engine_load_failure_is_startup_error(monkeypatch) -> None:
    engine = WhisperEngine("missing-model")

    def boom():
        raise RuntimeError("Invalid model size")

    monkeypatch.setattr(engine, "_get_model", boom)
    with pytest.raises(StartupError, match="Failed to load Whisper model"):
        engine.load()


def test_new_session_failure_is_engine_error(monkeypatch) -> None:
    engine = WhisperEngine("tiny")

    def boom():
        raise RuntimeError("no memory")

    monkeypatch.setattr(engine, "_get_model", boom)
    with pytest.raises(EngineError):
        engine.new_session()
