"""Component that measures the bus load caused by the frames passing through it."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from .common import CanFrame, ComponentBase, PropertySpec, Signal

logger = logging.getLogger(__name__)

_NAME = "name"
_PERIOD = "period [ms]"
_BITRATE = "bitrate [bps]"

_UINT32_MASK = 0xFFFFFFFF
_UINT8_MASK = 0xFF

_EXTENDED_FRAME_BITS = 80
_STANDARD_FRAME_BITS = 55
_BITS_PER_PAYLOAD_BYTE = 10


def _numeric_text_field() -> dict[str, Any]:
    """Editor description for a text field that accepts numbers only."""
    return {"kind": "text", "numeric": True}


_SUPPORTED_PROPERTIES = (
    PropertySpec(_NAME),
    PropertySpec(_BITRATE, field=_numeric_text_field),
    PropertySpec(_PERIOD, field=_numeric_text_field),
)

_DEFAULTS = {_PERIOD: "1000", _BITRATE: "500000"}


def frame_bits(frame: CanFrame) -> int:
    """Worst-case number of bits a frame occupies on the bus, bit stuffing included."""
    header = _EXTENDED_FRAME_BITS if frame.extended else _STANDARD_FRAME_BITS
    return header + len(frame.payload) * _BITS_PER_PAYLOAD_BYTE


def _to_uint32(value: Any) -> int:
    """Convert a property value to an unsigned 32-bit number; invalid text gives 0."""
    if value is None:
        return 0
    try:
        number = int(str(value).strip())
    except ValueError:
        return 0
    return number & _UINT32_MASK


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


class CanLoad(ComponentBase):
    """Counts the bits of incoming frames and reports the bus load once per period.

    Emits ``current_load(percent)`` at every timer period while the simulation
    runs and ``current_load(0)`` when it stops.
    """

    def __init__(self) -> None:
        self._bitrate = 0
        self._period = 0
        self._div = 0
        self._total_bits = 0
        self._sim_started = False
        self._lock = threading.Lock()
        self._timer = _PeriodicTimer(self.timeout)
        self.current_load = Signal()
        super().__init__(_SUPPORTED_PROPERTIES, _DEFAULTS)
        self._properties_updated()

    def _properties_updated(self) -> None:
        self._bitrate = _to_uint32(self._props.get(_BITRATE))
        self._period = _to_uint32(self._props.get(_PERIOD))

    def start_simulation(self) -> None:
        with self._lock:
            self._total_bits = 0
            self._div = int(float(self._bitrate) * float(self._period) / 1000) & _UINT32_MASK
        self._sim_started = True
        self._timer.start(self._period)

    def stop_simulation(self) -> None:
        self._timer.stop()
        self._sim_started = False
        self.current_load.emit(0)

    def frame_in(self, frame: CanFrame) -> None:
        if not self._sim_started:
            return
        with self._lock:
            self._total_bits += frame_bits(frame)

    def timeout(self) -> None:
        """Report the load of the finished period and start counting afresh."""
        with self._lock:
            if not self._div:
                return
            load = ((self._total_bits * 100) // self._div) & _UINT8_MASK
            self._total_bits = 0
        self.current_load.emit(load)