"""
Status polling helpers.

The server never retries anything; waiting for an asynchronous resource to
settle is the client's job. ``StatusPoller`` wraps an ``httpx.AsyncClient``
(against a live server or an in-process ASGI app) and offers the two polling
loops the test suites use: fixed-interval until complete, and exponential
backoff with a bounded number of attempts.
"""
import asyncio
import time
from typing import Any, Dict, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)

TERMINAL_STATUSES = frozenset({"COMPLETED", "FAILED"})


class PollingTimeoutError(Exception):
    """Raised when a resource does not reach a terminal state in time."""

    def __init__(self, path: str, waited_seconds: float, last_payload: Optional[Dict[str, Any]]):
        super().__init__(f"{path} not complete after {waited_seconds:.1f}s")
        self.path = path
        self.waited_seconds = waited_seconds
        self.last_payload = last_payload


def is_terminal(payload: Dict[str, Any]) -> bool:
    """Both device (``isComplete``) and order status payloads are understood."""
    if "isComplete" in payload:
        return bool(payload["isComplete"])
    return payload.get("status") in TERMINAL_STATUSES


class StatusPoller:
    """
    Polls a status endpoint until the resource settles.

    Example:
        >>> async with httpx.AsyncClient(base_url="http://localhost:8080") as http:
        ...     poller = StatusPoller(http)
        ...     final = await poller.poll_until_complete("/devices/device-1/status")
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, path: str) -> Optional[Dict[str, Any]]:
        """
        One status read.

        Returns:
            Optional[Dict[str, Any]]: Payload, or None on 404
        """
        response = await self.client.get(path)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    async def poll_until_complete(
        self,
        path: str,
        max_wait: float = 30.0,
        interval: float = 0.5,
    ) -> Dict[str, Any]:
        """
        Poll at a fixed interval until the payload is terminal.

        Args:
            path: Status endpoint path
            max_wait: Give up after this many seconds
            interval: Seconds between polls

        Returns:
            Dict[str, Any]: Terminal status payload

        Raises:
            PollingTimeoutError: If ``max_wait`` elapses first
        """
        start = time.monotonic()
        last: Optional[Dict[str, Any]] = None
        attempts = 0

        while True:
            attempts += 1
            last = await self.fetch(path)
            if last is not None and is_terminal(last):
                logger.info(
                    "polling_completed",
                    path=path,
                    attempts=attempts,
                    status=last.get("status"),
                    waited_seconds=time.monotonic() - start,
                )
                return last

            waited = time.monotonic() - start
            if waited + interval > max_wait:
                logger.warning("polling_timeout", path=path, attempts=attempts, waited_seconds=waited)
                raise PollingTimeoutError(path, waited, last)
            await asyncio.sleep(interval)

    async def poll_with_backoff(
        self,
        path: str,
        max_retries: int = 3,
        initial_delay: float = 0.1,
    ) -> Optional[Dict[str, Any]]:
        """
        Poll with exponential backoff (the delay doubles after each attempt).

        Returns:
            Optional[Dict[str, Any]]: Terminal payload, or None once retries are exhausted
        """
        delay = initial_delay
        for attempt in range(1, max_retries + 1):
            payload = await self.fetch(path)
            logger.debug("polling_attempt", path=path, attempt=attempt, delay_seconds=delay)
            if payload is not None and is_terminal(payload):
                return payload
            if attempt < max_retries:
                await asyncio.sleep(delay)
                delay *= 2

        logger.info("polling_retries_exhausted", path=path, attempts=max_retries)
        return None
