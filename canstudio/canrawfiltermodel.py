"""Graph node wrapping a CanRawFilter component."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .canrawfilter import CanRawFilter
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
}


class CanRawFilterModel:
    """Node with one raw-frame input and one raw-frame output.

    Frames arriving on the input are handed to the filter through
    ``filter_tx(frame)`` (successfully sent frames only) or
    ``filter_rx(frame)``; frames the filter passes on are queued for the
    output and announced by ``data_updated(port)``.
    """

    name = "CanRawFilter"
    caption = "CanRawFilter"
    section = "Raw Layer"
    section_color = 0x90BB3E
    queue_capacity = 127

    def __init__(self, component: Optional[CanRawFilter] = None) -> None:
        self.component = component if component is not None else CanRawFilter()
        self.filter_tx = Signal()
        self.filter_rx = Signal()
        self.data_updated = Signal()
        self.request_redraw = Signal()
        self._fwd_queue = FrameQueue(self.queue_capacity)

        self.filter_tx.connect(self.component.tx_frame_in)
        self.filter_rx.connect(self.component.rx_frame_in)
        self.component.tx_frame_out.connect(self.filtered_tx)
        self.component.rx_frame_out.connect(self.filtered_rx)

    def n_ports(self, port_type: PortType) -> int:
        return len(_PORT_MAPPINGS[port_type])

    def data_type(self, port_type: PortType, index: int) -> NodeDataType:
        mapping = _PORT_MAPPINGS[port_type]
        if 0 <= index < len(mapping):
            return mapping[index]
        logger.error("No port mapping for ndx: %d", index)
        return NodeDataType()

    def out_data(self, index: int) -> Optional[CanRawData]:
        data = self._fwd_queue.try_get()
        if data is None:
            logger.error("No data available on fwd queue")
        return data

    def set_in_data(self, data: Any, index: int) -> None:
        if data is None:
            logger.warning("Incorrect nodeData")
            return
        if not isinstance(data, CanRawData):
            raise TypeError(f"expected CanRawData, got {type(data).__name__}")
        if data.direction is Direction.TX:
            if data.status:
                self.filter_tx.emit(data.frame)
        elif data.direction is Direction.RX:
            self.filter_rx.emit(data.frame)
        else:
            logger.warning("Incorrect direction")

    def filtered_tx(self, frame: CanFrame) -> None:
        self._enqueue(CanRawData(frame, Direction.TX))

    def filtered_rx(self, frame: CanFrame) -> None:
        self._enqueue(CanRawData(frame, Direction.RX))

    def has_separate_thread(self) -> bool:
        return False

    def _enqueue(self, data: CanRawData) -> None:
        if self._fwd_queue.try_put(data):
            self.data_updated.emit(0)
        else:
            logger.warning("Queue full. Frame dropped")