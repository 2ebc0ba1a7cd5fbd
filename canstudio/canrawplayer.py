"""Component that replays frames from a trace log at their recorded times."""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .common import CanFrame, ComponentBase, PropertySpec, Signal

logger = logging.getLogger(__name__)

_NAME = "name"
_FILE = "file"
_TICK = "timer tick [ms]"

_DEFAULT_TICK_MS = 10
_UINT32_MAX = 0xFFFFFFFF

_TRACE_LINE = re.compile(
    r"\((\d+\.\d{6})\)\s*\w*\s*([0-9,A-F]{1,8})\s*\[(\d)\]\s*((\s*[0-9,A-F]{2}){0,8})"
)
_HEX_DIGITS = re.compile(r"[^0-9A-Fa-f]")


def _path_field() -> dict[str, Any]:
    """Editor description for a file chooser."""
    return {"kind": "path", "directory": False}


def _numeric_text_field() -> dict[str, Any]:
    """Editor description for a text field that accepts numbers only."""
    return {"kind": "text", "numeric": True}


_SUPPORTED_PROPERTIES = (
    PropertySpec(_NAME),
    PropertySpec(_FILE, field=_path_field),
    PropertySpec(_TICK, field=_numeric_text_field),
)

_DEFAULTS = {_TICK: _DEFAULT_TICK_MS}


@dataclass(frozen=True)
class TraceEntry:
    """A frame from a trace and the time, in milliseconds, at which it is sent."""

    time_ms: int
    frame: CanFrame


def _to_uint(value: Any) -> int:
    """Convert a property value to an unsigned 32-bit number; invalid text gives 0."""
    if value is None:
        return 0
    text = str(value).strip()
    if not text.isdigit():
        return 0
    number = int(text)
    return number if number <= _UINT32_MAX else 0


def _parse_payload(text: str) -> bytes:
    digits = _HEX_DIGITS.sub("", text)
    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)


def _parse_line(line: str) -> Optional[TraceEntry]:
    match = _TRACE_LINE.search(line)
    if match is None:
        return None
    id_text = match.group(2).split(",")[0]
    if not id_text:
        logger.warning("Invalid frame id in trace line '%s'", line)
        return None
    time_ms = int(float(match.group(1)) * 1000 + 0.5)
    frame = CanFrame(int(id_text, 16), _parse_payload(match.group(4)))
    return TraceEntry(time_ms, frame)


def parse_trace(lines: Iterable[str]) -> list[TraceEntry]:
    """Parse trace log lines; lines that do not hold a frame are skipped."""
    entries = (_parse_line(line.rstrip("\r\n")) for line in lines)
    return [entry for entry in entries if entry is not None]


class _PeriodicTimer:
    """Calls a function repeatedly from a background thread until stopped."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def start(self, interval_ms: int) -> None:
        self.stop()
        stop_event = threading.Event()
        interval = max(interval_ms, 1) / 1000.0
        thread = threading.Thread(target=self._run, args=(stop_event, interval), daemon=True)
        self._stop = stop_event
        self._thread = thread
        thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self, stop_event: threading.Event, interval: float) -> None:
        while not stop_event.wait(interval):
            self._callback()


class CanRawPlayer(ComponentBase):
    """Plays back a trace file, emitting ``send_frame(frame)`` when each frame is due."""

    def __init__(self) -> None:
        super().__init__(_SUPPORTED_PROPERTIES, _DEFAULTS)
        self._sim_started = False
        self._tick = _DEFAULT_TICK_MS
        self._entries: list[TraceEntry] = []
        self._frame_ndx = 0
        self._ticks = 0
        self._lock = threading.Lock()
        self._timer = _PeriodicTimer(self.timeout)
        self.send_frame = Signal()

    @property
    def entries(self) -> tuple[TraceEntry, ...]:
        """The frames loaded for playback."""
        return tuple(self._entries)

    @property
    def tick(self) -> int:
        """Timer period in milliseconds."""
        return self._tick

    def load_trace_file(self, filename: str) -> None:
        """Replace the playback frames with those read from a trace file."""
        with self._lock:
            self._entries = []
        if not filename or not os.path.isfile(filename):
            logger.error("File: '%s' does not exist", filename)
            return
        try:
            with open(filename, encoding="utf-8", errors="replace") as trace:
                entries = parse_trace(trace)
        except OSError:
            logger.error("Failed to open file '%s' for reading", filename)
            return
        with self._lock:
            self._entries = entries
        logger.info("Number of frames to play: %d", len(entries))

    def config_changed(self) -> None:
        filename = self._text(_FILE)
        logger.info("File to open: '%s'", filename)
        self.load_trace_file(filename)
        self._tick = _to_uint(self._props.get(_TICK))
        logger.debug("Tick set to %d", self._tick)

    def start_simulation(self) -> None:
        self._sim_started = True
        with self._lock:
            self._frame_ndx = 0
            self._ticks = 0
        self._timer.start(self._tick)

    def stop_simulation(self) -> None:
        self._sim_started = False
        self._timer.stop()

    def timeout(self) -> None:
        """Advance playback by one tick and send every frame that is due."""
        with self._lock:
            self._ticks += self._tick
            due = []
            while self._frame_ndx < len(self._entries) and self._entries[self._frame_ndx].time_ms <= self._ticks:
                due.append(self._entries[self._frame_ndx].frame)
                self._frame_ndx += 1
        for frame in due:
            self.send_frame.emit(frame)