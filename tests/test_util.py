import queue
import re
import time
from datetime import timedelta

import pytest

from raftkit.util import (
    async_notify,
    async_notify_bool,
    backoff,
    capped_exponential_backoff,
    decode_msgpack,
    drain_notify,
    encode_msgpack,
    generate_uuid,
    new_seed,
    override_notify_bool,
    random_timeout,
)


def test_random_timeout_fires_after_minimum():
    start = time.monotonic()
    fired = random_timeout(timedelta(milliseconds=1))
    fired.get(timeout=1.0)
    assert time.monotonic() - start >= 0.001
    assert fired.empty()


def test_random_timeout_accepts_seconds():
    start = time.monotonic()
    fired = random_timeout(0.05)
    assert fired.empty()
    fired.get(timeout=1.0)
    assert time.monotonic() - start >= 0.05
    assert fired.empty()


def test_new_seed_unique():
    seeds = {new_seed() for _ in range(1000)}
    assert len(seeds) == 1000
    assert all(0 <= s < (1 << 63) for s in seeds)


def test_random_timeout_no_time():
    assert random_timeout(0) is None
    assert random_timeout(timedelta(0)) is None


def test_generate_uuid():
    prev = generate_uuid()
    pattern = re.compile(r"[\da-f]{8}-[\da-f]{4}-[\da-f]{4}-[\da-f]{4}-[\da-f]{12}")
    for _ in range(100):
        ident = generate_uuid()
        assert ident != prev
        assert pattern.fullmatch(ident)
        prev = ident


@pytest.mark.parametrize(
    "base, round_, expected",
    [
        (timedelta(milliseconds=10), 1, timedelta(milliseconds=10)),
        (timedelta(milliseconds=20), 2, timedelta(milliseconds=20)),
        (timedelta(milliseconds=10), 8, timedelta(milliseconds=640)),
        (timedelta(milliseconds=10), 9, timedelta(milliseconds=640)),
    ],
)
def test_backoff(base, round_, expected):
    assert backoff(base, round_, 8) == expected


@pytest.mark.parametrize("round_", [1, 2, 5, 8, 9])
def test_capped_backoff_with_large_cap_matches_backoff(round_):
    base = timedelta(milliseconds=10)
    big_cap = timedelta(hours=1)
    assert capped_exponential_backoff(base, round_, 8, big_cap) == backoff(base, round_, 8)


def test_capped_backoff_returns_cap():
    cap = timedelta(milliseconds=100)
    assert capped_exponential_backoff(timedelta(milliseconds=10), 9, 8, cap) == cap
    assert capped_exponential_backoff(timedelta(seconds=1), 1, 8, cap) == cap


def test_override_notify_bool():
    ch = queue.Queue(maxsize=1)
    assert ch.empty()

    override_notify_bool(ch, False)
    assert ch.get_nowait() is False

    override_notify_bool(ch, False)
    override_notify_bool(ch, False)
    override_notify_bool(ch, False)
    override_notify_bool(ch, False)
    override_notify_bool(ch, True)

    assert ch.get_nowait() is True
    with pytest.raises(queue.Empty):
        ch.get_nowait()


def test_async_notify_and_drain():
    ch = queue.Queue(maxsize=1)
    assert drain_notify(ch) is False
    async_notify(ch)
    async_notify(ch)
    assert ch.qsize() == 1
    assert drain_notify(ch) is True
    assert drain_notify(ch) is False


def test_async_notify_bool_keeps_first():
    ch = queue.Queue(maxsize=1)
    async_notify_bool(ch, True)
    async_notify_bool(ch, False)
    assert ch.get_nowait() is True
    assert ch.empty()


def test_msgpack_round_trip():
    value = {"servers": [{"id": "a", "address": "b"}], "index": 7, "data": b"\x00\x01"}
    assert decode_msgpack(encode_msgpack(value)) == value


def test_decode_msgpack_invalid():
    with pytest.raises(ValueError):
        decode_msgpack(b"invalid msgpack")


def test_encode_msgpack_unsupported():
    with pytest.raises(TypeError):
        encode_msgpack(object())