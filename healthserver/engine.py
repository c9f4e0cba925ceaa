"""Check engine — runs an endpoint's checks concurrently and collects outcomes.

Each check runs on its own worker thread. Outcomes come back in the same
order as the input checks no matter which check finishes first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass

from .errors import CheckError, CheckFault, ConfigurationError

logger = logging.getLogger(__name__)


# ── Models ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Check:
    """A named health check.

    ``func`` returns on success and raises on failure. Raise ``CheckError``
    for expected failures; anything else is treated as a crash.
    """

    name: str
    func: Callable[[], object]

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ConfigurationError("Check name must not be empty")

    def __call__(self) -> None:
        self.func()


@dataclass(frozen=True)
class CheckOutcome:
    """Pass/fail result of one check for one evaluation."""

    name: str
    error: BaseException | None = None

    @property
    def passed(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AggregateResult:
    """Ordered outcomes of one endpoint evaluation."""

    outcomes: tuple[CheckOutcome, ...] = ()

    @property
    def healthy(self) -> bool:
        return all(o.passed for o in self.outcomes)

    @property
    def failing(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.passed]


# ── Collector ────────────────────────────────────────────────────────────────


def run_check(check: Check) -> CheckOutcome:
    """Run a single check, converting any exception into a failing outcome."""
    try:
        check()
    except CheckError as e:
        logger.debug("Check %s failed: %s", check.name, e)
        return CheckOutcome(name=check.name, error=e)
    except (KeyboardInterrupt, GeneratorExit):
        raise
    except BaseException as e:
        logger.exception("Check %s crashed", check.name)
        fault = CheckFault(f"check failed: {type(e).__name__}: {e}")
        fault.__cause__ = e
        return CheckOutcome(name=check.name, error=fault)

    logger.debug("Check %s passed", check.name)
    return CheckOutcome(name=check.name)


def collect(checks: Sequence[Check]) -> AggregateResult:
    """Run every check concurrently and wait for all of them.

    There is no timeout: a check that never returns holds up the result.
    """
    if not checks:
        return AggregateResult()

    slots: list[CheckOutcome | None] = [None] * len(checks)

    def _run_into_slot(index: int, check: Check) -> None:
        slots[index] = run_check(check)

    with ThreadPoolExecutor(
        max_workers=len(checks), thread_name_prefix="healthcheck",
    ) as executor:
        futures = [
            executor.submit(_run_into_slot, i, check)
            for i, check in enumerate(checks)
        ]
        wait(futures)

    # Surface bugs in the slot writer itself; check exceptions never get here.
    for future in futures:
        future.result()

    return AggregateResult(outcomes=tuple(o for o in slots if o is not None))
