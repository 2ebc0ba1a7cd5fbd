"""Graph node wrapping a CanRawLogger component."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .canrawlogger import CanRawLogger
from .common import RAW_FRAME_TYPE, CanRawData, Direction, NodeDataType, PortType, Signal

logger = logging.getLogger(__name__)

_PORT_MAPPINGS: dict[PortType, tuple[NodeDataType, ...]] = {
    PortType.IN: (RAW_FRAME_TYPE,),
    PortType.OUT: (),
}


class CanRawLoggerModel:
    """Node with one raw-frame input whose frames are written to a log.

    Emits ``frame_received(frame)`` for RX data and
    ``frame_sent(status, frame)`` for TX data arriving on the input.
    """

    name = "CanRawLogger"
    caption = "CanRawLogger"
    section = "Raw Layer"
    section_color = 0x90BB3E

    def __init__(self, component: Optional[CanRawLogger] = None) -> None:
        self.component = component if component is not None else CanRawLogger()
        self.frame_received = Signal()
        self.frame_sent = Signal()
        self.request_redraw = Signal()

        self.frame_sent.connect(self.component.frame_sent)
        self.frame_received.connect(self.component.frame_received)

    def n_ports(self, port_type: PortType) -> int:
        return len(_PORT_MAPPINGS[port_type])

    def data_type(self, port_type: PortType, index: int) -> NodeDataType:
        mapping = _PORT_MAPPINGS[port_type]
        if 0 <= index < len(mapping):
            return mapping[index]
        logger.error("No port mapping for ndx: %d", index)
        return NodeDataType()

    def out_data(self, index: int) -> None:
        """The node has no outputs, so there is never data to hand on."""
        if not 0 <= index < self.n_ports(PortType.OUT):
            logger.debug("No output port %d", index)
        return None

    def set_in_data(self, data: Any, index: int) -> None:
        if data is None:
            logger.warning("Incorrect nodeData")
            return
        if not isinstance(data, CanRawData):
            raise TypeError(f"expected CanRawData, got {type(data).__name__}")
        if data.direction is Direction.TX:
            self.frame_sent.emit(data.status, data.frame)
        elif data.direction is Direction.RX:
            self.frame_received.emit(data.frame)
        else:
            logger.warning("Incorrect direction")

    def has_separate_thread(self) -> bool:
        return False