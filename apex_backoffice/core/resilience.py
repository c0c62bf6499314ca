"""
Database fault handling.

Two pieces, both about the database being *unreachable*, never about a
statement being wrong:

``DatabaseCircuitBreaker``
    Every repository round-trip runs inside ``db_circuit_breaker.guard()``.
    A ledger write is several round-trips (locking read, grouped SUM,
    commit); each one is guarded, so a commit that dies on a dropped
    connection counts as an outage exactly like a failed read.  After
    ``failure_threshold`` consecutive outages the circuit opens and every
    request fails fast with 503 instead of queueing on a dead pool while
    the per-investor lock is held.  After ``recovery_timeout`` one trial
    call is admitted; concurrent callers keep getting 503 until it settles.

    Statement errors (constraint violations, numeric overflow, bad SQL)
    prove the server answered, so they pass through without touching the
    breaker; the service maps them to 4xx / 500 itself.

``wait_for_database``
    Startup only.  Request-path writes are never retried: the caller gets
    one answer per request and nothing half-committed.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Tuple, Type

from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
)

from apex_backoffice.core.config import settings

logger = logging.getLogger(__name__)

CONNECTION_ERRORS: Tuple[Type[Exception], ...] = (
    ConnectionError,
    OSError,
    TimeoutError,
    OperationalError,
    InterfaceError,
    DisconnectionError,
)

STATEMENT_ERRORS: Tuple[Type[Exception], ...] = (IntegrityError, DataError, ProgrammingError)


def is_outage(exc: BaseException) -> bool:
    """True when ``exc`` means the database could not be reached."""
    if isinstance(exc, STATEMENT_ERRORS):
        return False
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, CONNECTION_ERRORS)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(Exception):
    """The circuit is open; ``retry_after`` seconds until a trial is allowed."""

    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit '{name}' is OPEN; retry after {retry_after:.1f}s")


class DatabaseCircuitBreaker:
    """Counts consecutive outages and short-circuits calls while open."""

    def __init__(self, name: str, failure_threshold: int, recovery_timeout: float):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.consecutive_failures = 0
        self._opened_at = 0.0
        self._state = CircuitState.CLOSED
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._seconds_until_trial() == 0:
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit '%s' half-open: admitting one trial call", self.name)
        return self._state

    def _seconds_until_trial(self) -> float:
        return max(self.recovery_timeout - (time.monotonic() - self._opened_at), 0.0)

    def _admit(self) -> None:
        state = self.state
        if state == CircuitState.OPEN:
            raise CircuitBreakerError(self.name, self._seconds_until_trial())
        if state == CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                raise CircuitBreakerError(self.name, 0.0)
            self._trial_in_flight = True

    def _close(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("Circuit '%s' closed after a successful trial", self.name)
        self._state = CircuitState.CLOSED
        self.consecutive_failures = 0

    def _record_outage(self, exc: BaseException) -> None:
        self.consecutive_failures += 1
        if self._state == CircuitState.HALF_OPEN or (
            self.consecutive_failures >= self.failure_threshold
        ):
            self._state = CircuitState.OPEN
            self._opened_at = time.monotonic()
            logger.error(
                "Circuit '%s' OPEN after %d consecutive outages (%s); failing fast for %.0fs",
                self.name,
                self.consecutive_failures,
                type(exc).__name__,
                self.recovery_timeout,
            )
        else:
            logger.warning(
                "Circuit '%s' outage %d/%d: %s",
                self.name,
                self.consecutive_failures,
                self.failure_threshold,
                exc,
            )

    @asynccontextmanager
    async def guard(self) -> AsyncIterator[None]:
        """Run the enclosed database work under the breaker."""
        self._admit()
        try:
            yield
        except Exception as exc:
            if is_outage(exc):
                self._record_outage(exc)
            else:
                # The server answered, so it is reachable.
                self._close()
            raise
        else:
            self._close()
        finally:
            self._trial_in_flight = False

    def snapshot(self) -> dict:
        state = self.state
        return {
            "state": state.value,
            "consecutive_failures": self.consecutive_failures,
            "retry_after_s": round(self._seconds_until_trial(), 1)
            if state == CircuitState.OPEN
            else 0.0,
        }


db_circuit_breaker = DatabaseCircuitBreaker(
    name="database",
    failure_threshold=settings.CB_FAILURE_THRESHOLD,
    recovery_timeout=settings.CB_RECOVERY_TIMEOUT,
)


async def wait_for_database(
    connect: Callable[[], Awaitable[None]],
    attempts: int = 5,
    base_delay: float = 2.0,
    max_delay: float = 30.0,
) -> None:
    """
    Call ``connect`` until it succeeds, doubling the pause after each outage.

    Re-raises the last outage after ``attempts`` tries.  Statement errors
    are raised immediately; retrying a broken schema does not help.
    """
    delay = base_delay
    for attempt in range(1, attempts + 1):
        try:
            await connect()
            return
        except CONNECTION_ERRORS as exc:
            if not is_outage(exc) or attempt == attempts:
                logger.error("Database still unreachable after %d attempts: %s", attempt, exc)
                raise
            pause = min(delay, max_delay)
            logger.warning(
                "Database unreachable (attempt %d/%d), retrying in %.1fs: %s",
                attempt,
                attempts,
                pause,
                exc,
            )
            await asyncio.sleep(pause)
            delay *= 2
