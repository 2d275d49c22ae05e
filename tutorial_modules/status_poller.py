"""Fixed-interval polling for resources that settle asynchronously.

Every wait is bounded by an attempt budget and sleeps the same interval
after each unsatisfied attempt. No backoff.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_STATES: FrozenSet[str] = frozenset(
    {"FAILED", "DELETE_FAILED", "CREATE_FAILED", "UPDATE_FAILED", "ERROR"}
)


class PollOutcome(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class PollResult:
    outcome: PollOutcome
    attempts: int
    last_state: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is PollOutcome.SUCCEEDED


def poll_until(
    predicate: Callable[[], bool],
    interval: float,
    max_attempts: int,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[bool, int]:
    """Call ``predicate`` until it returns true or the attempts run out.

    Sleeps ``interval`` seconds after each unsatisfied attempt. Returns
    whether the predicate was satisfied and how many attempts were made.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        if predicate():
            return True, attempt
        sleep(interval)
    return False, max_attempts


def wait_for(
    describe_fn: Callable[[], Optional[str]],
    target_state: str,
    max_attempts: int,
    interval: float,
    failure_states: Iterable[str] = DEFAULT_FAILURE_STATES,
    sleep: Callable[[float], None] = time.sleep,
    label: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> PollResult:
    """Wait until ``describe_fn`` reports ``target_state``.

    Stops early on any of ``failure_states`` (compared case-insensitively)
    and gives up after ``max_attempts`` describe calls.
    """
    label = label or "resource"
    log = log or logger
    failures = {state.upper() for state in failure_states}
    observed = {"state": None}

    def reached_terminal_state() -> bool:
        state = describe_fn()
        observed["state"] = state
        if state == target_state:
            return True
        if state is not None and str(state).upper() in failures:
            return True
        log.info(f"{label} state: {state}. Waiting for {target_state}...")
        return False

    matched, attempts = poll_until(reached_terminal_state, interval, max_attempts, sleep)
    state = observed["state"]

    if not matched:
        log.warning(f"Timed out waiting for {label} to reach {target_state} after {attempts} attempts")
        return PollResult(PollOutcome.TIMED_OUT, attempts, state)
    if state == target_state:
        log.info(f"{label} is now {target_state}")
        return PollResult(PollOutcome.SUCCEEDED, attempts, state)
    log.error(f"{label} entered failure state {state}")
    return PollResult(PollOutcome.FAILED, attempts, state)
