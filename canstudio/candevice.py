"""Component that connects the simulation to a CAN bus backend."""

from __future__ import annotations

import enum
import logging
import re
from collections import deque
from typing import Any, Optional

from .common import CanDeviceInterface, CanFrame, ComponentBase, PropertySpec, Signal

logger = logging.getLogger(__name__)


class ConfigurationKey(enum.IntEnum):
    RAW_FILTER = 0
    ERROR_FILTER = 1
    LOOPBACK = 2
    RECEIVE_OWN = 3
    BIT_RATE = 4
    CAN_FD = 5
    DATA_BIT_RATE = 6
    USER = 30


class DeviceErrorCode(enum.IntEnum):
    NO_ERROR = 0
    READ_ERROR = 1
    WRITE_ERROR = 2
    CONNECTION_ERROR = 3
    CONFIGURATION_ERROR = 4
    UNKNOWN_ERROR = 5


_BOOL_KEYS = {
    "LoopbackKey": ConfigurationKey.LOOPBACK,
    "ReceiveOwnKey": ConfigurationKey.RECEIVE_OWN,
    "CanFdKey": ConfigurationKey.CAN_FD,
}
_UINT_KEYS = {
    "BitRateKey": ConfigurationKey.BIT_RATE,
    "DataBitRateKey": ConfigurationKey.DATA_BIT_RATE,
}
_UNSUPPORTED_KEYS = {"RawFilterKey", "ErrorFilterKey"}
_UINT_MAX = 0xFFFFFFFF
_UINT_RE = re.compile(r"\+?\d+")


def _parse_uint(text: str) -> Optional[int]:
    if not _UINT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _UINT_MAX else None


def _parse_pair(item: str) -> Optional[tuple[ConfigurationKey, Any]]:
    parts = item.split("=")
    if len(parts) != 2 or not parts[1]:
        logger.error("Config parameter parse error")
        return None
    name, raw = parts
    if name in _UNSUPPORTED_KEYS:
        logger.error("%s not supported", name)
        return None
    if name in _BOOL_KEYS:
        return _BOOL_KEYS[name], raw.upper() == "TRUE"
    if name in _UINT_KEYS:
        value = _parse_uint(raw)
        if value is None:
            logger.error("Invalid unsigned value '%s' for %s", raw, name)
            return None
        return _UINT_KEYS[name], value
    if name == "UserKey":
        return ConfigurationKey.USER, raw
    logger.error("Failed to convert '%s' to ConfigurationKey", name)
    return None


def parse_device_config(text: str) -> list[tuple[ConfigurationKey, Any]]:
    """Parse 'Key=value;Key=value' device settings, skipping invalid entries."""
    compact = "".join((text or "").split())
    if not compact:
        return []
    pairs = (_parse_pair(item) for item in compact.split(";"))
    return [pair for pair in pairs if pair is not None]


_NAME = "name"
_BACKEND = "backend"
_INTERFACE = "interface"
_CONFIGURATION = "configuration"

_SUPPORTED_PROPERTIES = tuple(PropertySpec(n) for n in (_NAME, _BACKEND, _INTERFACE, _CONFIGURATION))


class CanDevice(ComponentBase):
    """Sends and receives frames through a CAN device backend.

    Emits ``frame_received(frame)`` for each frame read from the bus and
    ``frame_sent(status, frame)`` once the backend reports a write result.
    """

    def __init__(self, device: Optional[CanDeviceInterface] = None) -> None:
        super().__init__(_SUPPORTED_PROPERTIES)
        self._device = device
        self._send_queue: deque[CanFrame] = deque()
        self._initialized = False
        self._sim_started = False
        self.frame_received = Signal()
        self.frame_sent = Signal()

    def init(self) -> bool:
        """Create the backend device from the backend and interface properties."""
        backend = self._text(_BACKEND)
        interface = self._text(_INTERFACE)
        if not backend or not interface:
            return self._initialized

        if self._device is None:
            logger.error("Failed to create candevice")
            self._initialized = False
            return False

        if self._initialized:
            self._device.clear_callbacks()
        self._initialized = False

        if self._device.init(backend, interface):
            self._device.set_frames_written_callback(self.frames_written)
            self._device.set_frames_received_callback(self.frames_received)
            self._device.set_error_occurred_callback(self.error_occurred)
            for key, value in parse_device_config(self._text(_CONFIGURATION)):
                self._device.set_configuration_parameter(key, value)
            self._initialized = True

        return self._initialized

    def send_frame(self, frame: CanFrame) -> None:
        if not self._initialized:
            return
        # The result arrives later through frames_written or error_occurred.
        self._send_queue.append(frame)
        self._device.write_frame(frame)

    def frames_received(self) -> None:
        if not self._initialized:
            return
        while self._device.frames_available():
            self.frame_received.emit(self._device.read_frame())

    def frames_written(self, count: int) -> None:
        for _ in range(count):
            if self._send_queue:
                self.frame_sent.emit(True, self._send_queue.popleft())
            else:
                logger.warning("Send queue is empty!")

    def error_occurred(self, error: int) -> None:
        logger.warning("Error occurred. Send queue size %d", len(self._send_queue))
        if error == DeviceErrorCode.WRITE_ERROR and self._send_queue:
            self.frame_sent.emit(False, self._send_queue.popleft())

    def start_simulation(self) -> None:
        self._sim_started = True
        if not self._initialized:
            logger.info("CanDevice not initialized")
            return

        if not self._device.connect_device():
            logger.error("Failed to connect device. Trying to init the device again...")
            # Some backends cannot reconnect after a disconnect without a fresh init.
            if self.init():
                logger.info("Re-init successful")
                if self._device.connect_device():
                    logger.info("Re-connection successful")
                else:
                    logger.error("Failed to re-connect device")

        self._send_queue.clear()

    def stop_simulation(self) -> None:
        self._sim_started = False
        if not self._initialized:
            logger.info("CanDevice not initialized")
            return
        self._device.disconnect_device()

    def config_changed(self) -> None:
        self.init()
        if self._sim_started:
            self.start_simulation()