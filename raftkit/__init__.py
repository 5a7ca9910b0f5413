"""Raft helpers: timeouts, backoff, msgpack and notification utilities, a mock state machine and a line logger."""

__version__ = "0.1.0"
__all__ = ["util", "mock_fsm", "log_adapter"]