"""Graph node wrapping a CanDevice component."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .candevice import CanDevice
from .common import (
    RAW_FRAME_TYPE,
    CanFrame,
    CanRawData,
    Direction,
    FrameQueue,
    NodeDataType,
    PortType,
    Signal,
)

logger = logging.getLogger(__name__)

_PORT_MAPPINGS: dict[PortType, tuple[NodeDataType, ...]] = {
    PortType.IN: (RAW_FRAME_TYPE,),
    PortType.OUT: (RAW_FRAME_TYPE,),
    PortType.NONE: (),
}


class CanDeviceModel:
    """Node with one raw-frame input and one raw-frame output.

    Frames arriving on the input are sent through the device; frames received
    or sent by the device are queued for the output, announced by
    ``data_updated(port)``.
    """

    name = "CanDevice"
    caption = "CanDevice"
    section = "Device Layer"
    section_color = 0xF7AA1B
    queue_capacity = 127

    def __init__(self, component: Optional[CanDevice] = None) -> None:
        self.component = component if component is not None else CanDevice()
        self.data_updated = Signal()
        self.send_frame = Signal()
        self._rx_queue = FrameQueue(self.queue_capacity)

        self.component.frame_sent.connect(self.frame_sent)
        self.component.frame_received.connect(self.frame_received)
        self.send_frame.connect(self.component.send_frame)

    def n_ports(self, port_type: PortType) -> int:
        try:
            return len(_PORT_MAPPINGS[port_type])
        except KeyError:
            raise ValueError(f"unknown port type {port_type!r}") from None

    def data_type(self, port_type: PortType, index: int) -> NodeDataType:
        if port_type not in (PortType.IN, PortType.OUT):
            raise ValueError(f"no data type for port type {port_type}")
        return RAW_FRAME_TYPE

    def out_data(self, index: int) -> Optional[CanRawData]:
        data = self._rx_queue.try_get()
        if data is None:
            logger.error("No data available on rx queue")
        return data

    def set_in_data(self, data: Any, index: int) -> None:
        if data is None:
            logger.warning("Incorrect nodeData")
            return
        if not isinstance(data, CanRawData):
            raise TypeError(f"expected CanRawData, got {type(data).__name__}")
        self.send_frame.emit(data.frame)

    def frame_received(self, frame: CanFrame) -> None:
        self._enqueue(CanRawData(frame, Direction.RX))

    def frame_sent(self, status: bool, frame: CanFrame) -> None:
        self._enqueue(CanRawData(frame, Direction.TX, status))

    def save(self) -> dict[str, Any]:
        return {"name": self.name, "config": self.component.get_config()}

    def has_separate_thread(self) -> bool:
        return True

    def _enqueue(self, data: CanRawData) -> None:
        if self._rx_queue.try_put(data):
            self.data_updated.emit(0)
        else:
            logger.warning("Queue full. Frame dropped")