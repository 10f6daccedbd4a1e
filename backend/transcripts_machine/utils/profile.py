import logging
import time
from contextlib import contextmanager
from typing import Generator, Optional

_logger = logging.getLogger(__name__)


@contextmanager
def timer(
    name: str, timings: Optional[dict[str, float]] = None
) -> Generator[None, None, None]:
    """Time a pipeline step, logging the duration and optionally recording it."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if timings is not None:
            timings[name] = round(elapsed, 3)
        _logger.info(f"⏱️  {name}: {elapsed:.2f}s")
