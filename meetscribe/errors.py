from __future__ import annotations


class MeetscribeError(RuntimeError):
    pass


class StartupError(MeetscribeError):
    """Fatal before recording begins: no device, no config, model load failure."""


class MicError(StartupError):
    pass


class ModelNotFoundError(StartupError):
    pass


class AudioFileError(StartupError):
    pass


class EngineError(MeetscribeError):
    """Recognition engine failed for one request (session creation or transcription)."""


class SegmentError(EngineError):
    pass


class StreamRuntimeError(MeetscribeError):
    """Driver-level capture fault. Reported, never fatal."""
