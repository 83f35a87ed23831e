import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

_log_lock = threading.Lock()
_log_path: Optional[Path] = None
_last_error: Optional[str] = None


def configure(path: str | Path | None) -> None:
    """Point the log at ``path``; ``None`` or an empty string turns logging off."""
    global _log_path, _last_error
    with _log_lock:
        _log_path = Path(path).expanduser() if path else None
        _last_error = None


def get_log_path() -> Optional[Path]:
    return _log_path


def last_error() -> Optional[str]:
    """Most recent write failure; logging never raises into its callers."""
    return _last_error


def _write(mode: str, text: str) -> None:
    global _last_error
    if _log_path is None:
        return
    try:
        with _log_path.open(mode, encoding="utf-8") as log:
            log.write(text)
    except OSError as exc:
        _last_error = f"{_log_path}: {exc}"


def reset_activity_log() -> None:
    with _log_lock:
        _write("w", "")


def log_event(status: str, detail: str | None = None) -> None:
    timestamp = datetime.now().isoformat(timespec="seconds")
    message = detail.strip() if detail else ""
    line = f"{timestamp}\t{status.upper()}"
    if message:
        line = f"{line}\t{message}"
    with _log_lock:
        _write("a", line + "\n")
