from __future__ import annotations


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    text = str(detail or "").strip()
    if not text:
        return "Unknown error."
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return "Unknown error."
    for ln in reversed(lines):
        if ln.startswith(("File ", "^", "Traceback ")):
            continue
        out = ln
        break
    else:
        out = lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "model not found" in s:
        return "Pass a model size (tiny, base, small, ...) or the path to a converted faster-whisper model."
    if "failed to load whisper model" in s:
        return "Model load failed. Check --model, --whisper-device and --compute-type for this machine."
    if "no module named" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "sounddevice" in s or "input device" in s or "microphone" in s or "input config" in s:
        return "Microphone init failed. Check input device selection (--list-devices) and mic permissions."
    if "audio file" in s:
        return "Check the input path and that the format is supported by libsndfile (wav, flac, ogg, mp3)."
    return "Check logs for full traceback."
