"""Graph node wrapping a CanLoad component."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .canload import CanLoad
from .common import RAW_FRAME_TYPE, CanRawData, NodeDataType, PortType, Signal

logger = logging.getLogger(__name__)

_PORT_MAPPINGS: dict[PortType, tuple[NodeDataType, ...]] = {
    PortType.IN: (RAW_FRAME_TYPE,),
    PortType.OUT: (),
}


class CanLoadModel:
    """Node with one raw-frame input that shows the bus load it measures.

    Emits ``frame_in(frame)`` for every frame arriving on the input and
    ``request_redraw()`` whenever the displayed load changes.
    """

    name = "CanLoad"
    caption = "CanLoad"
    section = "Raw Layer"
    section_color = 0x90BB3E

    def __init__(self, component: Optional[CanLoad] = None) -> None:
        self.component = component if component is not None else CanLoad()
        self.frame_in = Signal()
        self.request_redraw = Signal()
        self._current_load = 0

        self.frame_in.connect(self.component.frame_in)
        self.component.current_load.connect(self.current_load)

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
        self.frame_in.emit(data.frame)

    def current_load(self, load: int) -> None:
        changed = self._current_load != load
        self._current_load = load
        if changed:
            self.request_redraw.emit()

    def load_label(self) -> str:
        """Text drawn inside the node."""
        return f"{self._current_load}%"

    def has_separate_thread(self) -> bool:
        return False