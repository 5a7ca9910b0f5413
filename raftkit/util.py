"""Timing, notification and encoding helpers shared across the package."""

from __future__ import annotations

import os
import queue
import random
import secrets
import threading
import time
from datetime import timedelta
from typing import Any, TypeVar

import msgpack
from msgpack.exceptions import UnpackException

__all__ = [
    "new_seed",
    "random_timeout",
    "generate_uuid",
    "async_notify",
    "drain_notify",
    "async_notify_bool",
    "override_notify_bool",
    "decode_msgpack",
    "encode_msgpack",
    "backoff",
    "capped_exponential_backoff",
]

_MAX_INT64 = (1 << 63) - 1

D = TypeVar("D")


def new_seed() -> int:
    """Return a non-negative 63-bit integer from a cryptographic source."""
    return secrets.randbelow(_MAX_INT64)


# High-entropy seed for the pseudo-random generator used for timeouts.
_rng = random.Random(new_seed())


def _to_nanoseconds(value: float | timedelta) -> int:
    if isinstance(value, timedelta):
        return value // timedelta(microseconds=1) * 1000
    return round(float(value) * 1_000_000_000)


def random_timeout(min_val: float | timedelta) -> queue.Queue[float] | None:
    """Return a queue that receives the firing time after a delay of
    between ``min_val`` and twice ``min_val``.

    ``min_val`` is in seconds or a ``timedelta``. A zero duration gives
    ``None``: a timeout that never fires.
    """
    min_ns = _to_nanoseconds(min_val)
    if min_ns == 0:
        return None
    extra = _rng.getrandbits(63) % abs(min_ns)
    delay = max(min_ns + extra, 0) / 1_000_000_000

    fired: queue.Queue[float] = queue.Queue(maxsize=1)
    timer = threading.Timer(delay, lambda: fired.put(time.time()))
    timer.daemon = True
    timer.start()
    return fired


def generate_uuid() -> str:
    """Return a random identifier laid out as 8-4-4-4-12 hex digits."""
    raw = os.urandom(16).hex()
    return f"{raw[0:8]}-{raw[8:12]}-{raw[12:16]}-{raw[16:20]}-{raw[20:32]}"


def async_notify(ch: queue.Queue[Any]) -> None:
    """Post a notification on ``ch`` without blocking; drop it if full."""
    try:
        ch.put_nowait(None)
    except queue.Full:
        pass


def drain_notify(ch: queue.Queue[Any]) -> bool:
    """Take one pending notification from ``ch`` without blocking.

    Returns whether anything was taken.
    """
    try:
        ch.get_nowait()
    except queue.Empty:
        return False
    return True


def async_notify_bool(ch: queue.Queue[bool], value: bool) -> None:
    """Post ``value`` on ``ch`` without blocking; drop it if full."""
    try:
        ch.put_nowait(value)
    except queue.Full:
        pass


def override_notify_bool(ch: queue.Queue[bool], value: bool) -> None:
    """Post ``value`` on a one-slot queue, replacing any pending value.

    Not safe for concurrent callers; a concurrent writer is reported as
    ``RuntimeError``.
    """
    try:
        ch.put_nowait(value)
        return
    except queue.Full:
        pass
    try:
        ch.get_nowait()
    except queue.Empty:
        pass
    try:
        ch.put_nowait(value)
    except queue.Full as exc:
        raise RuntimeError("race: channel was sent concurrently") from exc


def decode_msgpack(buf: bytes) -> Any:
    """Decode a MessagePack document; raise ``ValueError`` if malformed."""
    try:
        return msgpack.unpackb(buf, raw=False)
    except (ValueError, UnpackException) as exc:
        raise ValueError(f"failed to decode msgpack: {exc}") from exc


def encode_msgpack(obj: Any) -> bytes:
    """Encode ``obj`` as a MessagePack document."""
    return msgpack.packb(obj, use_bin_type=True)


def backoff(base: D, round_: int, limit: int) -> D:
    """Exponential backoff: ``base`` doubled once per round beyond the
    second, with the round capped at ``limit``."""
    power = min(round_, limit)
    while power > 2:
        base = base * 2  # type: ignore[operator]
        power -= 1
    return base


def capped_exponential_backoff(base: D, round_: int, limit: int, cap: D) -> D:
    """Like :func:`backoff`, but never returns more than ``cap``."""
    power = min(round_, limit)
    while power > 2:
        if base > cap:  # type: ignore[operator]
            return cap
        base = base * 2  # type: ignore[operator]
        power -= 1
    if base > cap:  # type: ignore[operator]
        return cap
    return base