import pytest

from canstudio.common import (
    CanDeviceInterface,
    CanFrame,
    CanRawData,
    ComponentBase,
    Direction,
    FrameQueue,
    NodeDataType,
    PropertySpec,
    Signal,
)


def test_signal_calls_slots_in_order():
    calls = []
    sig = Signal()
    sig.connect(lambda x: calls.append(("a", x)))
    sig.connect(lambda x: calls.append(("b", x)))
    sig.emit(5)
    assert calls == [("a", 5), ("b", 5)]


def test_signal_disconnect():
    calls = []
    sig = Signal()
    sig.connect(calls.append)
    sig.disconnect(calls.append)
    sig.emit(1)
    assert calls == []
    with pytest.raises(ValueError):
        sig.disconnect(calls.append)


def test_frame_extended_detection():
    assert CanFrame(0x12345678).extended is True
    assert CanFrame(0x123).extended is False
    assert CanFrame(0x123, extended=True).extended is True


def test_frame_payload_is_bytes_and_negative_id_rejected():
    frame = CanFrame(1, bytearray(b"\x01\x02"))
    assert frame.payload == b"\x01\x02"
    assert isinstance(frame.payload, bytes)
    with pytest.raises(ValueError):
        CanFrame(-1)


def test_raw_data_defaults_and_type():
    data = CanRawData(CanFrame(7))
    assert data.direction is Direction.TX
    assert data.status is True
    assert data.data_type() == NodeDataType("rawframe", "RAW")


def test_frame_queue_bounded_fifo():
    q = FrameQueue(2)
    assert q.try_put("a") is True
    assert q.try_put("b") is True
    assert q.try_put("c") is False
    assert len(q) == 2
    assert q.try_get() == "a"
    assert q.try_get() == "b"
    assert q.try_get() is None


def test_frame_queue_rejects_bad_capacity():
    with pytest.raises(ValueError):
        FrameQueue(0)


def test_device_interface_is_abstract():
    with pytest.raises(TypeError):
        CanDeviceInterface()


class _Component(ComponentBase):
    def __init__(self):
        super().__init__([PropertySpec("name"), PropertySpec("dir")], {"dir": ".", "other": 1})


def test_component_defaults_and_config_roundtrip():
    c = _Component()
    assert ComponentBase.get_config(c) == {"name": None, "dir": "."}
    ComponentBase.set_config(c, {"name": "CAN1", "fake": "x"})
    assert ComponentBase.get_properties(c) == {"name": "CAN1", "dir": "."}
    other = _Component()
    ComponentBase.set_config(other, ComponentBase.get_config(c))
    assert ComponentBase.get_config(other) == {"name": "CAN1", "dir": "."}


def test_component_properties_and_specs():
    c = _Component()
    ComponentBase.set_properties(c, {"dir": "logs"})
    assert ComponentBase.get_properties(c)["dir"] == "logs"
    assert [s.name for s in ComponentBase.supported_properties(c)] == ["name", "dir"]
    assert ComponentBase.main_widget_docked(c) is True