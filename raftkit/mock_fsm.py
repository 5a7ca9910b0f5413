"""An in-memory state machine that records every command it applies.

It is meant for exercising replication and snapshot code: it keeps the
applied payloads in order, can snapshot and restore them as MessagePack,
and can optionally record configuration changes.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Iterable, Protocol

import msgpack
from msgpack.exceptions import UnpackException

__all__ = [
    "MockFSM",
    "MockFSMConfigStore",
    "WrappingFSM",
    "MockSnapshot",
    "get_mock_fsm",
]

# Numeric code of a client command entry in the replicated log.
_COMMAND_TYPE = 0


class _SnapshotSink(Protocol):
    def write(self, data: bytes) -> Any: ...

    def close(self) -> Any: ...

    def cancel(self) -> Any: ...


def _is_command(log: Any) -> bool:
    log_type = getattr(log, "type", _COMMAND_TYPE)
    name = getattr(log_type, "name", None)
    if isinstance(name, str) and name.lower().replace("_", "").endswith("command"):
        return True
    return getattr(log_type, "value", log_type) == _COMMAND_TYPE


@dataclass
class MockSnapshot:
    """A point-in-time copy of a :class:`MockFSM`'s applied payloads."""

    entries: list[bytes] = field(default_factory=list)
    max_index: int = 0

    def persist(self, sink: _SnapshotSink) -> None:
        """Write the payloads to ``sink`` as one MessagePack array.

        On failure the sink is cancelled and the error propagates;
        on success the sink is closed.
        """
        try:
            encoded = msgpack.packb(list(self.entries[: self.max_index]), use_bin_type=True)
            sink.write(encoded)
        except Exception:
            sink.cancel()
            raise
        sink.close()

    def release(self) -> None:
        """Drop the captured payloads once the snapshot is no longer needed."""
        self.entries = []
        self.max_index = 0


class MockFSM:
    """A state machine that stores applied payloads in sequence."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._logs: list[bytes] = []
        self._configurations: list[Any] = []

    def apply(self, log: Any) -> int:
        """Record ``log.data`` and return how many payloads are stored."""
        with self._lock:
            self._logs.append(log.data)
            return len(self._logs)

    def apply_batch(self, logs: Iterable[Any]) -> list[int | None]:
        """Apply a batch; command entries are recorded, others yield ``None``."""
        results: list[int | None] = []
        with self._lock:
            for log in logs:
                if _is_command(log):
                    self._logs.append(log.data)
                    results.append(len(self._logs))
                else:
                    results.append(None)
        return results

    def snapshot(self) -> MockSnapshot:
        """Capture the payloads applied so far."""
        with self._lock:
            return MockSnapshot(list(self._logs), len(self._logs))

    def restore(self, source: BinaryIO) -> None:
        """Replace the payloads with those read from ``source``, then close it.

        Raises ``ValueError`` if the stream does not hold a valid snapshot.
        """
        with self._lock:
            try:
                self._logs = []
                unpacker = msgpack.Unpacker(source, raw=False)
                try:
                    decoded = next(unpacker)
                except StopIteration as exc:
                    raise ValueError("failed to decode snapshot: no data") from exc
                except (ValueError, UnpackException) as exc:
                    raise ValueError(f"failed to decode snapshot: {exc}") from exc
                if decoded is None:
                    return
                if not isinstance(decoded, list):
                    raise ValueError("failed to decode snapshot: expected an array")
                self._logs = [
                    item.encode() if isinstance(item, str) else item for item in decoded
                ]
            finally:
                source.close()

    def logs(self) -> list[bytes]:
        """Return the applied payloads in order."""
        with self._lock:
            return list(self._logs)

    def configurations(self) -> list[Any]:
        """Return the configurations recorded so far, in order."""
        with self._lock:
            return list(self._configurations)

    def _record_configuration(self, config: Any) -> None:
        with self._lock:
            self._configurations.append(config)


class MockFSMConfigStore:
    """Wraps a :class:`MockFSM` and also records configuration changes."""

    def __init__(self, fsm: MockFSM | None = None) -> None:
        self.fsm = fsm if fsm is not None else MockFSM()

    def apply(self, log: Any) -> Any:
        """Apply ``log`` to the wrapped state machine."""
        return self.fsm.apply(log)

    def snapshot(self) -> MockSnapshot:
        """Snapshot the wrapped state machine."""
        return self.fsm.snapshot()

    def restore(self, source: BinaryIO) -> None:
        """Restore the wrapped state machine from ``source``."""
        self.fsm.restore(source)

    def store_configuration(self, index: int, config: Any) -> None:
        """Record ``config`` on the wrapped state machine."""
        if not isinstance(self.fsm, MockFSM):
            raise TypeError("configuration store must wrap a MockFSM")
        self.fsm._record_configuration(config)


class WrappingFSM(ABC):
    """A state machine that delegates to another one."""

    @abstractmethod
    def underlying(self) -> Any:
        """Return the state machine being wrapped."""


def get_mock_fsm(fsm: Any) -> MockFSM | None:
    """Find the :class:`MockFSM` behind ``fsm``, or ``None`` if there is none."""
    if isinstance(fsm, MockFSM):
        return fsm
    if isinstance(fsm, MockFSMConfigStore):
        if not isinstance(fsm.fsm, MockFSM):
            raise TypeError("configuration store must wrap a MockFSM")
        return fsm.fsm
    if isinstance(fsm, WrappingFSM):
        return get_mock_fsm(fsm.underlying())
    return None