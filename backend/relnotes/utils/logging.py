"""
Release Notes Forge — Logging setup.

One "relnotes" logger for the whole service. Lines emitted during a
pipeline run carry the run id as a "[abc123def456]" prefix so that
concurrent runs can be told apart in the output.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Generator, MutableMapping

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("relnotes")


class RunLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the run id."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['run_id']}] {msg}", kwargs


def run_logger(run_id: str) -> RunLoggerAdapter:
    return RunLoggerAdapter(logger, {"run_id": run_id})


@contextmanager
def step_timer(
    step_name: str, log: logging.Logger | logging.LoggerAdapter = logger
) -> Generator[None, None, None]:
    """Log start, duration and outcome of a single collaborator call."""
    log.info("▶ %s — started", step_name)
    start = time.perf_counter()
    try:
        yield
    except BaseException:
        elapsed_ms = (time.perf_counter() - start) * 1000
        log.warning("✗ %s — aborted after %.0f ms", step_name, elapsed_ms)
        raise
    elapsed_ms = (time.perf_counter() - start) * 1000
    log.info("✔ %s — completed in %.0f ms", step_name, elapsed_ms)
