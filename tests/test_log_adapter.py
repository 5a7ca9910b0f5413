import logging

import pytest

from raftkit.log_adapter import PrefixedLineWriter, new_logger


@pytest.fixture
def lines():
    return []


def test_write_strips_single_trailing_newline(lines):
    writer = PrefixedLineWriter(lines.append)
    count = writer.write("hello\n")
    assert lines == ["hello"]
    assert count == len("hello")


def test_write_keeps_text_without_newline(lines):
    writer = PrefixedLineWriter(lines.append)
    writer.write("no newline")
    assert lines == ["no newline"]


def test_write_strips_only_one_newline(lines):
    writer = PrefixedLineWriter(lines.append)
    writer.write("a\n\n")
    assert lines == ["a\n"]


def test_write_adds_prefix(lines):
    writer = PrefixedLineWriter(lines.append, "cluster")
    count = writer.write("started\n")
    assert lines == ["cluster: started"]
    assert count == len("cluster: started")


def test_write_accepts_bytes(lines):
    writer = PrefixedLineWriter(lines.append, "node")
    writer.write(b"payload\n")
    assert lines == ["node: payload"]


def test_logger_sends_records_to_sink(lines):
    logger = new_logger("server-1", lines.append)
    logger.info("stable state reached")
    assert len(lines) == 1
    assert lines[0].startswith("server-1: ")
    assert "stable state reached" in lines[0]
    assert "INFO" in lines[0]


def test_logger_logs_debug_level(lines):
    logger = new_logger("x", lines.append)
    logger.debug("resetting stability timeout")
    assert any("resetting stability timeout" in line for line in lines)


def test_logger_without_prefix_has_no_prefix(lines):
    logger = new_logger("", lines.append)
    logger.error("boom")
    assert lines[0].startswith("[ERROR]")


def test_loggers_are_independent():
    first, second = [], []
    a = new_logger("same", first.append)
    b = new_logger("same", second.append)
    a.warning("only first")
    assert len(first) == 1
    assert second == []
    assert b is not a


def test_logger_without_sink_writes_to_stderr(capsys):
    logger = new_logger("stderr-node")
    logger.info("to stderr")
    err = capsys.readouterr().err
    assert "stderr-node: to stderr" in err


def test_logger_does_not_propagate(lines, caplog):
    logger = new_logger("iso", lines.append)
    with caplog.at_level(logging.DEBUG):
        logger.info("private")
    assert caplog.records == []
    assert len(lines) == 1