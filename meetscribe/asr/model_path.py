from __future__ import annotations

from pathlib import Path
from typing import Optional

from meetscribe.errors import ModelNotFoundError

# Names faster-whisper downloads on demand; these are not filesystem paths.
MODEL_SIZES = frozenset(
    {
        "tiny", "tiny.en", "base", "base.en", "small", "small.en",
        "distil-small.en", "medium", "medium.en", "distil-medium.en",
        "large-v1", "large-v2", "large-v3", "large", "distil-large-v2",
        "distil-large-v3", "large-v3-turbo", "turbo",
    }
)


def _project_root(start: Path) -> Optional[Path]:
    for candidate in (start, *start.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return None


def resolve_model(model: str, cwd: Optional[Path] = None) -> str:
    """
    Return a value WhisperModel accepts: a known size name unchanged, or an
    absolute path to an existing model directory/file.
    """
    if model in MODEL_SIZES:
        return model

    here = Path(cwd) if cwd is not None else Path.cwd()
    path = Path(model).expanduser()
    if path.is_absolute():
        if path.exists():
            return str(path)
        raise ModelNotFoundError(f"Model not found: {path}")

    searched = [here / path]
    if searched[0].exists():
        return str(searched[0].resolve())

    root = _project_root(here)
    if root is not None:
        candidate = root / path
        searched.append(candidate)
        if candidate.exists():
            return str(candidate.resolve())

    lines = "\n".join(f"  - {p}" for p in searched)
    raise ModelNotFoundError(
        f"Model not found: {model}\nSearched in:\n{lines}\n"
        "Pass a faster-whisper size name (tiny, base, small, ...) or an existing model path."
    )
