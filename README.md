# raftkit

Small building blocks for writing and testing a Raft consensus
implementation in Python.

- `raftkit.util`: timing, notification and encoding helpers.
  - `random_timeout(min_val)` returns a `queue.Queue` that receives the
    firing time (`time.time()`) after a random delay between `min_val` and
    twice `min_val`. `min_val` is given in seconds or as a `timedelta`. A
    zero duration returns `None`, which stands for a timeout that never
    fires.
  - `backoff(base, round_, limit)` doubles `base` once for each round
    beyond the second, with the round capped at `limit`.
    `capped_exponential_backoff(base, round_, limit, cap)` does the same
    but never returns more than `cap`.
  - `generate_uuid()` returns a random identifier laid out as
    8-4-4-4-12 hex digits. `new_seed()` returns a non-negative 63-bit
    integer from a cryptographic source.
  - `encode_msgpack(obj)` and `decode_msgpack(buf)` handle MessagePack.
    A malformed document raises `ValueError`.
  - Non-blocking notification helpers for `queue.Queue`: `async_notify`
    and `async_notify_bool` post a value and drop it if the queue is full.
    `drain_notify` takes one pending item and reports whether there was
    one. `override_notify_bool` replaces the pending value in a one-slot
    queue. It is not safe for concurrent callers and raises `RuntimeError`
    when it detects a concurrent writer.
- `raftkit.mock_fsm`: a state machine for tests.
  - `MockFSM` stores every applied payload in order. It provides `apply`,
    `apply_batch`, `snapshot`, `restore`, `logs` and `configurations`.
  - `MockSnapshot` writes the payloads to a sink as one MessagePack array
    (`persist`). A sink is any object with `write`, `close` and `cancel`.
  - `MockFSMConfigStore` wraps a `MockFSM` and also records configuration
    changes through `store_configuration`.
  - `WrappingFSM` is an abstract base class for state machines that
    delegate to another one.
  - `get_mock_fsm` finds the `MockFSM` behind any of these classes.
- `raftkit.log_adapter`: routing log output into a line sink.
  - `PrefixedLineWriter` passes each written line to a callable. It drops
    one trailing newline and puts an optional `"<prefix>: "` in front of
    the line.
  - `new_logger(prefix, sink)` returns a `logging.Logger` that sends
    records through such a writer. With no sink, the logger writes to
    standard error.

## Installation

```
pip install raftkit
```

## Examples

Backoff. Durations can be floats or `timedelta` values:

```python
from datetime import timedelta
from raftkit.util import backoff, capped_exponential_backoff

backoff(timedelta(milliseconds=10), 8, 8)   # timedelta(milliseconds=640)
capped_exponential_backoff(0.010, 8, 8, 0.1)  # 0.1, the cap
```

A random election-style timeout:

```python
from raftkit.util import random_timeout

fired = random_timeout(0.05)    # fires after 50 to 100 ms
fired_at = fired.get(timeout=1)
```

Keeping only the latest value on a one-slot queue:

```python
import queue
from raftkit.util import override_notify_bool

ch = queue.Queue(maxsize=1)
override_notify_bool(ch, False)
override_notify_bool(ch, True)
ch.get_nowait()  # True
```

Recording entries, then snapshotting and restoring them. A log entry is
any object with a `data` attribute. In `apply_batch`, an entry with no
`type`, or with a command type, is recorded, and any other entry yields
`None`:

```python
import io
from types import SimpleNamespace
from raftkit.mock_fsm import MockFSM

fsm = MockFSM()
fsm.apply(SimpleNamespace(data=b"first"))   # 1
fsm.apply(SimpleNamespace(data=b"second"))  # 2


class BufferSink(io.BytesIO):
    def close(self):   # keep the bytes readable after persist()
        pass

    def cancel(self):
        pass


sink = BufferSink()
fsm.snapshot().persist(sink)

restored = MockFSM()
restored.restore(io.BytesIO(sink.getvalue()))
restored.logs()  # [b"first", b"second"]
```

Sending log lines to a test's output:

```python
from raftkit.log_adapter import new_logger

lines = []
logger = new_logger("node-1", lines.append)
logger.info("elected")
lines  # ["node-1: [INFO] elected"]
```

## What it does not include

raftkit provides no Raft node itself, and no leader election or log
replication built on these helpers. It has no network transport or RPC
layer, and no persistent log, stable or snapshot store. The state machine
it ships is a recording mock for tests.

## Running the tests

```
pip install raftkit[test]
pytest
```