import pytest

from canstudio.canrawfilter import CanRawFilter, accept_frame
from canstudio.common import CanFrame
from canstudio.filtertable import FilterRule as I


class FakeGui:
    """Gui stand-in that records lists and keeps the callbacks it is given."""

    def __init__(self):
        self.rx_cb = None
        self.tx_cb = None
        self.rx_sizes = []
        self.tx_sizes = []

    def set_rx_list_callback(self, callback):
        self.rx_cb = callback

    def set_tx_list_callback(self, callback):
        self.tx_cb = callback

    def set_rx_list(self, rules):
        self.rx_sizes.append(len(rules))

    def set_tx_list(self, rules):
        self.tx_sizes.append(len(rules))


def _spy(signal):
    received = []
    signal.connect(lambda *args: received.append(args))
    return received


def _from_hex(text):
    # Odd-length hex keeps the leading digit as its own byte.
    if len(text) % 2:
        text = "0" + text
    return bytes.fromhex(text)


def test_stubbed_methods():
    c = CanRawFilter()
    assert c.main_widget_docked() is True


def test_set_properties_name():
    c = CanRawFilter()
    c.set_properties({"name": "Test Name"})
    assert c.get_properties()["name"] == "Test Name"


def test_set_config_json_list_sizes():
    gui = FakeGui()
    c = CanRawFilter(gui)

    obj = {"name": "Test Name"}
    c.set_config(obj)

    obj["rxList"] = 0
    obj["txList"] = 0
    c.set_config(obj)

    obj["rxList"] = [1, 2]
    obj["txList"] = [1, 2]
    c.set_config(obj)

    obj["rxList"] = [{"a": 10}]
    obj["txList"] = [{"a": 10}]
    c.set_config(obj)

    assert gui.rx_sizes == [0, 0, 0, 1]
    assert gui.tx_sizes == [0, 0, 0, 1]
    assert c.get_config()["name"] == "Test Name"


def test_get_config_contains_lists():
    c = CanRawFilter()
    config = c.get_config()
    assert config["rxList"] == [{"id": ".*", "payload": ".*", "policy": True}]
    assert config["txList"] == [{"id": ".*", "payload": ".*", "policy": True}]
    assert "name" in config


def test_config_round_trip_drives_filtering():
    c = CanRawFilter()
    rx_list = [
        {"id": "^1$", "payload": ".*", "policy": True},
        {"id": ".*", "payload": ".*", "policy": False},
    ]
    c.set_config({"name": "f", "rxList": rx_list, "txList": []})
    assert c.get_config()["rxList"] == rx_list
    out = _spy(c.rx_frame_out)
    c.start_simulation()
    c.rx_frame_in(CanFrame(1))
    c.rx_frame_in(CanFrame(2))
    assert out == [(CanFrame(1),)]


def test_supported_properties():
    names = [p.name for p in CanRawFilter().supported_properties()]
    assert "name" in names
    assert "dummy" not in names


def test_default_accept_list_rx():
    c = CanRawFilter()
    frame = CanFrame()
    spy = _spy(c.rx_frame_out)
    c.start_simulation()
    c.rx_frame_in(frame)
    c.stop_simulation()
    c.rx_frame_in(frame)
    assert len(spy) == 1


def test_empty_accept_list_rx():
    c = CanRawFilter(FakeGui())
    spy = _spy(c.rx_frame_out)
    c.start_simulation()
    c.rx_frame_in(CanFrame())
    assert len(spy) == 0


def test_empty_accept_list_tx():
    c = CanRawFilter(FakeGui())
    spy = _spy(c.tx_frame_out)
    c.start_simulation()
    c.tx_frame_in(CanFrame())
    assert len(spy) == 0


ID_CASES = [
    (0, 0x7FF, 0x700, [I("1[0-9,A-F]{2}", ".*", False), I(".*", ".*", True)]),
    (
        0,
        0x7FF,
        0x500,
        [
            I("^[0-9,A-F]{1}$", ".*", False),
            I("^[0-9,A-F]{2}$", ".*", False),
            I("3[0-9,A-F]{2}", ".*", False),
            I("7[0-9,A-F]{2}", ".*", False),
            I(".*", ".*", True),
        ],
    ),
    (
        0,
        0x7FF,
        0x300,
        [
            I("1[0-9,A-F]{2}", ".*", True),
            I("2[0-9,A-F]{2}", ".*", True),
            I("3[0-9,A-F]{2}", ".*", True),
            I(".*", ".*", False),
        ],
    ),
    (
        0x1000,
        0x2000,
        0x300,
        [
            I("11[0-9,A-F]{2}", ".*", True),
            I("12[0-9,A-F]{2}", ".*", True),
            I("13[0-9,A-F]{2}", ".*", True),
            I(".*", ".*", False),
        ],
    ),
    (0x1FFF8FFF, 0x1FFFFFFF, 0x1000, [I("1f{3}9[0-9,A-F]{3}", ".*", True), I(".*", ".*", False)]),
    (0x20000000, 0x20001000, 0, [I("0", ".*", False), I(".*", ".*", True)]),
]


@pytest.mark.parametrize("direction", ["rx", "tx"])
@pytest.mark.parametrize("start,end,count,rules", ID_CASES)
def test_custom_id_lists(direction, start, end, count, rules):
    gui = FakeGui()
    c = CanRawFilter(gui)
    c.start_simulation()
    if direction == "rx":
        gui.rx_cb(rules)
        spy = _spy(c.rx_frame_out)
        feed = c.rx_frame_in
    else:
        gui.tx_cb(rules)
        spy = _spy(c.tx_frame_out)
        feed = c.tx_frame_in
    for frame_id in range(start, end + 1):
        feed(CanFrame(frame_id))
    assert len(spy) == count


PAYLOADS = [
    "", "1", "11", "112", "1122", "11223", "112233", "1122334", "11223344",
    "112233445", "1122334455", "11223344556", "112233445566", "1122334455667",
    "11223344556677", "112233445566778", "1122334455667788", "aa", "AA", "aaBB",
    "AAbb", "AAbbCC", "AAbbCCdd", "AAbbCCddEE", "AAbbCCddEEff",
]

PAYLOAD_CASES = [
    (25, [I(".*", ".*", True)]),
    (1, [I(".*", "^$", True), I(".*", ".*", False)]),
    (0, [I(".*", "^1$", True), I(".*", ".*", False)]),
    *[
        (cnt, [I(".*", "^[0-9,a-f]{" + str((i + 1) * 2) + "}$", True), I(".*", ".*", False)])
        for i, cnt in enumerate([4, 4, 3, 3, 3, 3, 2, 2])
    ],
    (8, [I(".*", "A", True), I(".*", ".*", False)]),
    (8, [I(".*", "a", True), I(".*", ".*", False)]),
    (3, [I(".*", "CD", True), I(".*", ".*", False)]),
]


@pytest.mark.parametrize("count,rules", PAYLOAD_CASES)
def test_payload_filtering(count, rules):
    gui = FakeGui()
    c = CanRawFilter(gui)
    frames = [CanFrame(0, _from_hex(p)) for p in PAYLOADS]
    spy_rx = _spy(c.rx_frame_out)
    spy_tx = _spy(c.tx_frame_out)
    c.start_simulation()
    gui.rx_cb(rules)
    gui.tx_cb(rules)

    for frame in frames:
        c.tx_frame_in(frame)
    assert len(spy_rx) == 0
    assert len(spy_tx) == count

    for frame in frames:
        c.rx_frame_in(frame)
    assert len(spy_rx) == count
    assert len(spy_tx) == count


def test_accept_frame_first_match_wins():
    rules = [I("12", ".*", False), I(".*", ".*", True)]
    assert accept_frame(rules, CanFrame(0x123)) is False
    assert accept_frame(rules, CanFrame(0x456)) is True


def test_accept_frame_empty_list_drops():
    assert accept_frame([], CanFrame(1)) is False


def test_accept_frame_invalid_pattern_never_matches():
    rules = [I("[", ".*", True), I(".*", ".*", False)]
    assert accept_frame(rules, CanFrame(1)) is False