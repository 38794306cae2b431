from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

import numpy as np

from meetscribe.contracts import CaptureConfig, SupportedConfig
from meetscribe.errors import MicError, StreamRuntimeError

STANDARD_RATES = (8000, 11025, 16000, 22050, 24000, 32000, 44100, 48000, 88200, 96000)

BlockCallback = Callable[[np.ndarray], None]
ErrorCallback = Callable[[StreamRuntimeError], None]


def _import_sounddevice():
    try:
        import sounddevice as sd
    except (ImportError, OSError) as e:
        raise MicError(
            "sounddevice is not available. Install with: python -m pip install sounddevice"
        ) from e
    return sd


def list_devices() -> str:
    sd = _import_sounddevice()
    return str(sd.query_devices())


class CaptureHandle:
    """A running input stream. stop() is safe to call more than once."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            try:
                self._stream.stop()
            finally:
                self._stream.close()


class SoundDeviceInput:
    """
    Live microphone input using the `sounddevice` package (PortAudio).
    Delivers float32 interleaved blocks to a callback at the driver's cadence.
    """

    def __init__(self, sd: Any, info: dict, device: Optional[int] = None,
                 logger: Optional[logging.Logger] = None) -> None:
        self._sd = sd
        self.info = info
        self.device = device
        self._logger = logger or logging.getLogger("meetscribe.audio")

    @classmethod
    def open_default(cls, device: Optional[int] = None,
                     logger: Optional[logging.Logger] = None) -> "SoundDeviceInput":
        sd = _import_sounddevice()
        try:
            info = sd.query_devices(device, kind="input")
        except Exception as e:
            raise MicError("No input device available. Try --list-devices and pass --device.") from e
        if not info or int(info.get("max_input_channels", 0)) <= 0:
            raise MicError("No input device available. Try --list-devices and pass --device.")
        return cls(sd, dict(info), device=device, logger=logger)

    @property
    def name(self) -> str:
        return str(self.info.get("name", "unknown"))

    def _rate_supported(self, rate: int, channels: int) -> bool:
        try:
            self._sd.check_input_settings(
                device=self.device, channels=channels, dtype="float32", samplerate=rate
            )
        except Exception:
            return False
        return True

    def supported_configs(self) -> List[SupportedConfig]:
        native = min(int(self.info.get("max_input_channels", 1)), 2)
        channel_options = [native] if native == 1 else [native, 1]

        rates = set(STANDARD_RATES)
        default_rate = self.info.get("default_samplerate")
        if default_rate:
            rates.add(int(default_rate))

        out: List[SupportedConfig] = []
        for channels in channel_options:
            ok = sorted(r for r in rates if self._rate_supported(r, channels))
            if ok:
                out.append(SupportedConfig(channels=channels, min_sample_rate=ok[0], max_sample_rate=ok[-1]))
        return out

    def default_config(self) -> CaptureConfig:
        configs = self.supported_configs()
        if not configs:
            raise MicError(f"No supported input config for device: {self.name}")
        return configs[0].with_max_sample_rate()

    def start(self, config: CaptureConfig, on_block: BlockCallback,
              on_error: Optional[ErrorCallback] = None) -> CaptureHandle:
        def _callback(indata, frames, time_info, status) -> None:
            if status and on_error is not None:
                on_error(StreamRuntimeError(f"Audio stream error: {status}"))
            # indata is (frames, channels); row-major flatten keeps it interleaved.
            on_block(np.array(indata, dtype=np.float32, copy=True).reshape(-1))

        try:
            stream = self._sd.InputStream(
                samplerate=config.sample_rate,
                channels=config.channels,
                dtype="float32",
                device=self.device,
                blocksize=0,  # let PortAudio choose
                callback=_callback,
            )
            stream.start()
        except Exception as e:
            raise MicError(
                "Failed to open microphone stream. "
                "Try --list-devices and select a device id with --device."
            ) from e

        self._logger.info(
            "capture_started",
            extra={"device": self.name, "sample_rate": config.sample_rate, "channels": config.channels},
        )
        return CaptureHandle(stream)


def open_default_input(device: Optional[int] = None,
                       logger: Optional[logging.Logger] = None) -> SoundDeviceInput:
    return SoundDeviceInput.open_default(device=device, logger=logger)
