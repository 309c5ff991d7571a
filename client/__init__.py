"""Client-side helpers for polling asynchronous resources."""
from .poller import PollingTimeoutError, StatusPoller

__all__ = ["PollingTimeoutError", "StatusPoller"]
