"""Component that writes the frames passing through it to a trace log file."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Optional, Union

from .common import CanFrame, ComponentBase, PropertySpec

logger = logging.getLogger(__name__)

_NAME = "name"
_DIRECTORY = "directory"


def _path_field() -> dict[str, Any]:
    """Editor description for a directory chooser."""
    return {"kind": "path", "directory": True}


_SUPPORTED_PROPERTIES = (
    PropertySpec(_NAME),
    PropertySpec(_DIRECTORY, field=_path_field),
)

_DEFAULTS = {_DIRECTORY: "."}


def format_log_line(frame: CanFrame, direction: str, elapsed_ns: int) -> str:
    """Format one trace line: time since start, direction, id, length and payload."""
    seconds, rest = divmod(elapsed_ns, 1_000_000_000)
    micros = rest // 1000
    width = 8 if frame.extended else 3
    data = " ".join(f"{byte:02X}" for byte in frame.payload)
    return (
        f" ({seconds:03}.{micros:06})  {direction}  {frame.frame_id:0{width}X}"
        f"   [{len(frame.payload)}]  {data}\n"
    )


def log_file_path(directory: Union[str, Path], name: str, when: datetime) -> Path:
    """Build the log file path from the component name and a timestamp."""
    stem = (name or "").replace(" ", "_")
    return Path(directory) / f"{stem}_{when:%Y%m%d_%H%M%S}.log"


def _unique_path(path: Path) -> Path:
    candidate = path
    number = 1
    while candidate.exists():
        logger.warning("Log file '%s' already exists!", candidate)
        candidate = path.with_name(f"{path.stem}({number}).log")
        number += 1
    if candidate != path:
        logger.warning("New name for log file '%s'", candidate)
    return candidate


class CanRawLogger(ComponentBase):
    """Logs received frames and successfully sent frames while the simulation runs."""

    def __init__(self) -> None:
        super().__init__(_SUPPORTED_PROPERTIES, _DEFAULTS)
        self._sim_started = False
        self._filename: Optional[Path] = None
        self._file: Optional[IO[str]] = None
        self._start_ns = 0

    @property
    def filename(self) -> Optional[Path]:
        """Path of the current log file, if the simulation has started."""
        return self._filename

    def start_simulation(self) -> None:
        now = datetime.now()
        directory = Path(self._text(_DIRECTORY))
        if not directory.exists():
            logger.info("Dir %s does not exist", directory)
            try:
                directory.mkdir()
            except OSError:
                logger.error("Failed to create '%s' directory", directory)
            else:
                logger.info("Directory '%s' created", directory)

        path = log_file_path(directory, self._text(_NAME), now)
        logger.debug("Log filename '%s'", path)
        self._filename = _unique_path(path)

        self._close_file()
        try:
            self._file = open(self._filename, "w", encoding="utf-8", newline="")
        except OSError:
            logger.error("Failed to open log file '%s'", self._filename)
            self._file = None

        self._sim_started = True
        self._start_ns = time.monotonic_ns()

    def stop_simulation(self) -> None:
        self._sim_started = False
        self._close_file()
        self._filename = None

    def frame_received(self, frame: CanFrame) -> None:
        if self._sim_started:
            self._log_frame(frame, "RX")

    def frame_sent(self, status: bool, frame: CanFrame) -> None:
        if status and self._sim_started:
            self._log_frame(frame, "TX")

    def _log_frame(self, frame: CanFrame, direction: str) -> None:
        elapsed = time.monotonic_ns() - self._start_ns
        if self._file is None or self._filename is None or not self._filename.exists():
            logger.warning("Frame received, but file does not exist!")
            return
        self._file.write(format_log_line(frame, direction, elapsed))
        self._file.flush()

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None