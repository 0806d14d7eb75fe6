"""Generic poll-until-target-state waiter.

The waiter repeatedly calls a ``refresh`` probe that reports the current
state of some asynchronous remote operation and returns once that state
reaches one of the target statuses. It is independent of any particular
resource type::

    def refresh():
        thing = fetch()
        return thing, thing["Status"]

    waiter = StateChangeWaiter(
        pending={"CREATING"},
        target={"READY"},
        refresh=refresh,
        timeout=300,
        min_timeout=3,
    )
    ready = waiter.wait()
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Generic, Optional, Tuple, TypeVar

from loguru import logger

from .errors import ResourceNotFoundError, UnexpectedStateError, WaitTimeoutError

T = TypeVar("T")

RefreshFunc = Callable[[], Tuple[Optional[T], str]]

INITIAL_BACKOFF = 0.1
MAX_BACKOFF = 10.0


@dataclass
class StateChangeWaiter(Generic[T]):
    """Configuration and execution of a single wait.

    ``refresh`` returns ``(result, state)``. A ``None`` result means the
    resource is not visible yet; more than ``not_found_checks`` consecutive
    ``None`` results abort the wait. Exceptions raised by ``refresh``
    propagate unchanged.

    Between probes the waiter backs off exponentially from 100 ms up to 10 s,
    never sleeping less than ``min_timeout``. A non-zero ``poll_interval``
    replaces the backoff with a fixed delay. Sleeps are clamped to the time
    left before the deadline.
    """

    pending: AbstractSet[str]
    target: AbstractSet[str]
    refresh: RefreshFunc
    timeout: float
    min_timeout: float = 0.0
    delay: float = 0.0
    poll_interval: float = 0.0
    not_found_checks: int = 20
    continuous_target_occurence: int = 1
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def wait(self) -> T:
        """Poll until a target state is reached and return the last result."""

        start = self.clock()
        deadline = start + self.timeout

        if self.delay > 0:
            self.sleep(min(self.delay, self.timeout))

        backoff = 0.0
        target_occurence = 0
        not_found = 0
        last_state: Optional[str] = None

        while True:
            result, state = self.refresh()
            last_state = state
            logger.debug(f"Waiting for state to become {sorted(self.target)}, got '{state}'")

            if result is None:
                target_occurence = 0
                not_found += 1
                if not_found > self.not_found_checks:
                    raise ResourceNotFoundError(
                        f"couldn't find resource ({self.not_found_checks} retries)"
                    )
            else:
                not_found = 0
                if state in self.target:
                    target_occurence += 1
                    if target_occurence >= self.continuous_target_occurence:
                        return result
                elif state in self.pending:
                    target_occurence = 0
                else:
                    raise UnexpectedStateError(state, self.target)

            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.warning(
                    f"Timed out after {self.clock() - start:.1f}s waiting for "
                    f"{sorted(self.target)} (last state: '{last_state}')"
                )
                raise WaitTimeoutError(last_state, self.target, self.timeout)

            if self.poll_interval > 0:
                interval = self.poll_interval
            else:
                backoff = INITIAL_BACKOFF if backoff == 0 else min(backoff * 2, MAX_BACKOFF)
                interval = max(backoff, self.min_timeout)

            self.sleep(min(interval, remaining))


def wait_for_state(
    refresh: RefreshFunc,
    *,
    pending: AbstractSet[str],
    target: AbstractSet[str],
    timeout: float,
    min_timeout: float = 0.0,
    **kwargs,
):
    """Shortcut that builds a :class:`StateChangeWaiter` and waits on it."""

    waiter: StateChangeWaiter = StateChangeWaiter(
        pending=pending,
        target=target,
        refresh=refresh,
        timeout=timeout,
        min_timeout=min_timeout,
        **kwargs,
    )
    return waiter.wait()


__all__ = ["RefreshFunc", "StateChangeWaiter", "wait_for_state"]
