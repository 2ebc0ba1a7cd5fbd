"""Graph node wrapping a CanRawPlayer component."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .canrawplayer import CanRawPlayer
from .common import RAW_FRAME_TYPE, CanFrame, CanRawData, FrameQueue, NodeDataType, PortType, Signal

logger = logging.getLogger(__name__)

_PORT_MAPPINGS: dict[PortType, tuple[NodeDataType, ...]] = {
    PortType.IN: (),
    PortType.OUT: (RAW_FRAME_TYPE,),
}


class CanRawPlayerModel:
    """Node with one raw-frame output carrying the frames the player replays.

    Queued frames are announced by ``data_updated(port)``.
    """

    name = "CanRawPlayer"
    caption = "CanRawPlayer"
    section = "Raw Layer"
    section_color = 0x90BB3E
    queue_capacity = 127

    def __init__(self, component: Optional[CanRawPlayer] = None) -> None:
        self.component = component if component is not None else CanRawPlayer()
        self.data_updated = Signal()
        self.request_redraw = Signal()
        self._msg_queue = FrameQueue(self.queue_capacity)

        self.component.send_frame.connect(self.send_frame)

    def n_ports(self, port_type: PortType) -> int:
        return len(_PORT_MAPPINGS[port_type])

    def data_type(self, port_type: PortType, index: int) -> NodeDataType:
        mapping = _PORT_MAPPINGS[port_type]
        if 0 <= index < len(mapping):
            return mapping[index]
        logger.error("No port mapping for ndx: %d", index)
        return NodeDataType()

    def out_data(self, index: int) -> Optional[CanRawData]:
        data = self._msg_queue.try_get()
        if data is None:
            logger.error("No data available on rx queue")
        return data

    def set_in_data(self, data: Any, index: int) -> None:
        """The node has no inputs; incoming data is dropped."""
        if data is not None and not 0 <= index < self.n_ports(PortType.IN):
            logger.debug("No input port %d, data dropped", index)

    def send_frame(self, frame: CanFrame) -> None:
        if self._msg_queue.try_put(CanRawData(frame)):
            self.data_updated.emit(0)
        else:
            logger.warning("Queue full. Frame dropped")

    def has_separate_thread(self) -> bool:
        return True