"""Shared building blocks: signals, CAN frames, node data, queues and component properties."""

from __future__ import annotations

import abc
import enum
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

STANDARD_ID_MAX = 0x7FF


class Signal:
    """A list of callables that are invoked, in connection order, on emit."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        try:
            self._slots.remove(slot)
        except ValueError:
            raise ValueError("slot is not connected") from None

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)


@dataclass(frozen=True)
class CanFrame:
    """A raw CAN frame. Ids above the 11-bit range use the extended format."""

    frame_id: int = 0
    payload: bytes = b""
    extended: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.frame_id < 0:
            raise ValueError(f"negative frame id: {self.frame_id}")
        object.__setattr__(self, "payload", bytes(self.payload))
        if self.extended is None:
            object.__setattr__(self, "extended", self.frame_id > STANDARD_ID_MAX)


class Direction(enum.Enum):
    UNINITIALIZED = "uninitialized"
    RX = "rx"
    TX = "tx"


class PortType(enum.Enum):
    NONE = "none"
    IN = "in"
    OUT = "out"


@dataclass(frozen=True)
class NodeDataType:
    id: str = ""
    name: str = ""


RAW_FRAME_TYPE = NodeDataType("rawframe", "RAW")


@dataclass(frozen=True)
class CanRawData:
    """A frame travelling between nodes, with its direction and send status."""

    frame: CanFrame
    direction: Direction = Direction.TX
    status: bool = True

    def data_type(self) -> NodeDataType:
        return RAW_FRAME_TYPE


@dataclass(frozen=True)
class PropertySpec:
    """Description of one configurable component property."""

    name: str
    type: type = str
    editable: bool = True
    field: Optional[Callable[[], Any]] = None


class FrameQueue:
    """A bounded FIFO whose put fails instead of blocking when full."""

    def __init__(self, capacity: int = 127) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: deque[Any] = deque()

    def try_put(self, item: Any) -> bool:
        if len(self._items) >= self.capacity:
            return False
        self._items.append(item)
        return True

    def try_get(self) -> Any:
        return self._items.popleft() if self._items else None

    def __len__(self) -> int:
        return len(self._items)


class CanDeviceInterface(abc.ABC):
    """Backend that talks to a CAN bus."""

    @abc.abstractmethod
    def set_frames_written_callback(self, callback: Callable[[int], None]) -> None: ...

    @abc.abstractmethod
    def set_frames_received_callback(self, callback: Callable[[], None]) -> None: ...

    @abc.abstractmethod
    def set_error_occurred_callback(self, callback: Callable[[int], None]) -> None: ...

    @abc.abstractmethod
    def init(self, backend: str, interface: str) -> bool: ...

    @abc.abstractmethod
    def write_frame(self, frame: CanFrame) -> bool: ...

    @abc.abstractmethod
    def connect_device(self) -> bool: ...

    @abc.abstractmethod
    def disconnect_device(self) -> None: ...

    @abc.abstractmethod
    def frames_available(self) -> int: ...

    @abc.abstractmethod
    def clear_callbacks(self) -> None: ...

    @abc.abstractmethod
    def set_configuration_parameter(self, key: int, value: Any) -> None: ...

    @abc.abstractmethod
    def read_frame(self) -> CanFrame: ...


class ComponentBase:
    """Property storage shared by all simulation components."""

    def __init__(self, specs: Iterable[PropertySpec], defaults: Optional[Mapping[str, Any]] = None) -> None:
        self._specs = tuple(specs)
        self._props: dict[str, Any] = {spec.name: None for spec in self._specs}
        if defaults:
            for name, value in defaults.items():
                if name in self._props:
                    self._props[name] = value

    def supported_properties(self) -> tuple[PropertySpec, ...]:
        return self._specs

    def set_config(self, config: Mapping[str, Any]) -> None:
        """Restore properties from a saved configuration; unknown keys are ignored."""
        self._update(config)

    def get_config(self) -> dict[str, Any]:
        return dict(self._props)

    def set_properties(self, properties: Mapping[str, Any]) -> None:
        """Apply values edited by the user; unknown keys are ignored."""
        self._update(properties)

    def get_properties(self) -> dict[str, Any]:
        return dict(self._props)

    def main_widget_docked(self) -> bool:
        return True

    def config_changed(self) -> None:
        """React to a finished configuration edit. The base component has nothing to do."""

    def _update(self, values: Mapping[str, Any]) -> None:
        for spec in self._specs:
            if spec.name in values:
                self._props[spec.name] = values[spec.name]
        self._properties_updated()

    def _properties_updated(self) -> None:
        """Hook for subclasses that cache derived values."""

    def _text(self, name: str) -> str:
        value = self._props.get(name)
        return "" if value is None else str(value)