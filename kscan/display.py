"""Console messages and a progress spinner."""

from __future__ import annotations

import os
import sys
import threading
from typing import TextIO

_silent = False

_BOLD = "1"
_FAINT = "2"
_FG_CYAN = "36"
_FG_HI_RED = "91"
_FG_HI_GREEN = "92"
_FG_HI_YELLOW = "93"

_INFO = (_BOLD, _FG_HI_YELLOW)
_SUCCESS = (_BOLD, _FG_HI_GREEN)
_WARNING = (_BOLD, _FG_CYAN)

_SPINNER_FRAMES = ("◐", "◓", "◑", "◒")
_SPINNER_INTERVAL = 0.1


def set_silent_mode(silent: bool) -> None:
    """Turn progress messages off or on."""
    global _silent
    _silent = bool(silent)


def is_silent() -> bool:
    """Return whether progress messages are suppressed."""
    return _silent


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        return False


def _color_enabled(stream: TextIO) -> bool:
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        return False
    return _is_terminal(stream)


def _write(stream: TextIO, text: str, codes: tuple[str, ...] = ()) -> None:
    if codes and _color_enabled(stream):
        text = f"\x1b[{';'.join(codes)}m{text}\x1b[0m"
    stream.write(text)
    stream.flush()


def _target(stream: TextIO | None) -> TextIO:
    return sys.stdout if stream is None else stream


def scan_start_display(stream: TextIO | None = None) -> None:
    """Announce the start of a scan."""
    if is_silent():
        return
    _write(_target(stream), "ARMO security scanner starting\n", _INFO)


def success_text_display(text: str, stream: TextIO | None = None) -> None:
    """Print a success line."""
    if is_silent():
        return
    out = _target(stream)
    _write(out, "[success] ", _SUCCESS)
    _write(out, f"{text}\n")


def error_display(text: str, stream: TextIO | None = None) -> None:
    """Print an error line."""
    if is_silent():
        return
    out = _target(stream)
    _write(out, "[Error] ", _SUCCESS)
    _write(out, f"{text}\n")


def progress_text_display(text: str, stream: TextIO | None = None) -> None:
    """Print a progress line."""
    if is_silent():
        return
    out = _target(stream)
    _write(out, "[progress] ", _INFO)
    _write(out, f"{text}\n")


def warning_display(text: str, stream: TextIO | None = None) -> None:
    """Print a warning; warnings are shown even in silent mode."""
    _write(_target(stream), text, _WARNING)


class _Spinner:
    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        frame = 0
        while True:
            self._stream.write(f"\r{_SPINNER_FRAMES[frame % len(_SPINNER_FRAMES)]} ")
            self._stream.flush()
            frame += 1
            if self._stop.wait(_SPINNER_INTERVAL):
                break

    def stop(self) -> None:
        self._stop.set()
        self._thread.join()
        self._stream.write("\r  \r")
        self._stream.flush()


_spinner: _Spinner | None = None


def start_spinner() -> None:
    """Start a spinner on stdout when it is a terminal and not silent."""
    global _spinner
    if is_silent() or not _is_terminal(sys.stdout):
        return
    if _spinner is not None:
        _spinner.stop()
    _spinner = _Spinner(sys.stdout)
    _spinner.start()


def stop_spinner() -> None:
    """Stop the running spinner, if any."""
    global _spinner
    if _spinner is None:
        return
    _spinner.stop()
    _spinner = None