# canstudio

Building blocks for simulating and inspecting CAN bus traffic. Each
component is a plain Python object. Its outputs are `canstudio.common.Signal`
objects, and you attach a callable to one with `connect`. Each component also
has a node model that takes `CanRawData` items in through ports and hands them
on through ports, so components can be wired into a processing graph.

## Components

All components keep their settings as named properties. `set_config` and
`get_config` load and save them as a plain dict. `set_properties` and
`get_properties` apply and read values that a user has edited.
`supported_properties()` lists the names that are accepted. Unknown keys are
ignored.

- `canstudio.candevice.CanDevice(device)` wraps a CAN backend, which is any
  object implementing `canstudio.common.CanDeviceInterface`.
  - Properties: `name`, `backend`, `interface`, `configuration`.
  - `init()` returns `True` once the backend has been initialised with the
    backend and interface you configured.
  - The `configuration` string looks like
    `"BitRateKey=500000;LoopbackKey=true"`. It is parsed by
    `parse_device_config`, which returns `(ConfigurationKey, value)` pairs and
    skips entries that are unsupported or malformed.
  - `send_frame(frame)` queues a frame for writing. Once the backend reports a
    result, the frame is reported through `frame_sent(status, frame)`.
  - Frames read from the bus are emitted through `frame_received(frame)`.
- `canstudio.canload.CanLoad` estimates bus load in percent.
  - Properties: `name`, `bitrate [bps]` (default `500000`), `period [ms]`
    (default `1000`).
  - It counts worst-case bits per frame, as given by `frame_bits`, which
    includes bit stuffing.
  - While the simulation runs, it emits `current_load(percent)` once per
    period. It emits `current_load(0)` on stop.
- `canstudio.canrawfilter.CanRawFilter` passes on RX and TX frames according to
  ordered accept lists of `FilterRule(id_pattern, payload_pattern, accept)`.
  - The patterns are regular expressions searched in the lower-case hex id and
    the hex payload. The first rule that matches decides.
  - `accept_frame(rules, frame)` applies one list.
  - The lists are saved in the config under `rxList` and `txList`, as items of
    the form `{"id", "payload", "policy"}`.
  - `canstudio.filtertable.FilterTable` and `FilterGui` hold the editable rule
    tables. A table holds its rules plus a default policy, which is appended as
    a catch-all rule.
- `canstudio.canrawlogger.CanRawLogger` writes frames to a log file while the
  simulation runs.
  - Properties: `name`, `directory` (default `.`).
  - The file is named `<name>_YYYYMMDD_HHMMSS.log`, with `(1)`, `(2)` and so on
    added if that name is taken.
  - Received frames and successfully sent frames are written as lines built by
    `format_log_line`, for example
    ` (000.001103)  RX  4A1   [2]  C7 B2`.
- `canstudio.canrawplayer.CanRawPlayer` replays a trace file.
  - Properties: `name`, `file`, `timer tick [ms]` (default `10`).
  - `config_changed()` loads the file and applies the tick.
  - `parse_trace` reads lines such as `(000.001103)  can0  4A1   [2]  C7 B2`
    into `TraceEntry(time_ms, frame)` items.
  - During playback, `send_frame(frame)` is emitted for each frame once its
    time is due.

The node models are `CanDeviceModel`, `CanLoadModel`, `CanRawFilterModel`,
`CanRawLoggerModel` and `CanRawPlayerModel`. Each has `n_ports`, `data_type`,
`out_data` and `set_in_data`. The models with outputs queue up to 127 items and
announce each one with `data_updated(port)`.

## Example

```python
from canstudio.common import CanFrame
from canstudio.canrawfilter import accept_frame
from canstudio.filtertable import FilterRule

rules = [
    FilterRule("1[0-9a-f]{2}", ".*", False),
    FilterRule(".*", ".*", True),
]
accept_frame(rules, CanFrame(0x123))   # False
accept_frame(rules, CanFrame(0x223))   # True
```

Parsing device settings:

```python
from canstudio.candevice import parse_device_config

parse_device_config("BitRateKey=500000; LoopbackKey=true")
# [(ConfigurationKey.BIT_RATE, 500000), (ConfigurationKey.LOOPBACK, True)]
```

Replaying a trace:

```python
from canstudio.canrawplayer import CanRawPlayer

player = CanRawPlayer()
player.send_frame.connect(print)
player.set_config({"file": "trace.log", "timer tick [ms]": "10"})
player.config_changed()
player.start_simulation()
# ... later
player.stop_simulation()
```

## What it does not do

- No real CAN backend is included. `CanDevice` drives whatever
  `CanDeviceInterface` implementation you pass it. Without one, `init()`
  fails.
- There is no graphical node editor and no configuration dialog. The models
  and `FilterGui` are plain objects with no screen.
- There is no command-line program.

## Tests

```
pip install -e .[test]
pytest
```