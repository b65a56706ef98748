"""Eventual-consistency waiter.

An asynchronous engine applies a write some time after accepting it. To give
callers read-after-write semantics, the cache store blocks after each write
or delete until the engine reports the expected state for that key. After a
write the expected state is the written value itself, not mere presence,
so overwriting an existing key waits until the old value is gone.

The wait is a plain polling loop on the calling thread:

    probe(key) matches ──yes──> return
            │
            no
            │
    deadline passed? ──yes──> VisibilityTimeoutError
            │
            no
            │
    sleep(poll_interval) ──> probe again

Unlike an unbounded poll, the loop has a deadline, so an engine that
silently drops an admitted write under memory pressure cannot hang the
caller forever.
"""

from __future__ import annotations

import time
from typing import Callable

from kv_drivers.domain.errors import VisibilityTimeoutError
from kv_drivers.infrastructure.logging import get_logger
from kv_drivers.infrastructure.metrics import MetricsRegistry, get_metrics

logger = get_logger(__name__)

# Returns the value currently observable in the engine, or None if absent
ValueProbe = Callable[[bytes], bytes | None]


class VisibilityWaiter:
    """Blocks until a key reaches the expected presence state.

    Attributes:
        poll_interval: Seconds between probes.
        timeout: Upper bound on a single wait in seconds.
    """

    def __init__(
        self,
        probe: ValueProbe,
        poll_interval: float = 0.02,
        timeout: float = 5.0,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the waiter.

        Args:
            probe: Point read against the engine.
            poll_interval: Seconds between probes.
            timeout: Seconds before a wait gives up.
            metrics: Metrics registry (defaults to the global one).

        Raises:
            ValueError: If poll_interval or timeout is not positive.
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {poll_interval}")
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")

        self._probe = probe
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._metrics = metrics or get_metrics()

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def timeout(self) -> float:
        return self._timeout

    def _reached(self, key: bytes, present: bool, value: bytes | None) -> bool:
        observed = self._probe(key)
        if not present:
            return observed is None
        if value is None:
            return observed is not None
        return observed == value

    def wait(self, key: bytes, present: bool, value: bytes | None = None) -> float:
        """Block until the engine shows the expected state for key.

        Args:
            key: The key to watch.
            present: True to wait for visibility, False for removal.
            value: With present=True, the value that must be observed. None
                accepts any value.

        Returns:
            Seconds spent waiting.

        Raises:
            VisibilityTimeoutError: If the state is not reached before the deadline.
        """
        start = time.monotonic()
        deadline = start + self._timeout
        expected = "present" if present else "absent"

        while not self._reached(key, present, value):
            now = time.monotonic()
            if now >= deadline:
                waited = now - start
                self._metrics.visibility_timeouts_total.inc()
                logger.warning(
                    "visibility_wait_timed_out",
                    key=key.hex(),
                    expected=expected,
                    waited_seconds=round(waited, 3),
                )
                raise VisibilityTimeoutError(key, present, waited)
            time.sleep(min(self._poll_interval, deadline - now))

        waited = time.monotonic() - start
        self._metrics.visibility_wait_seconds.labels(expected=expected).observe(waited)
        return waited
