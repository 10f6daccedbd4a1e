import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from transcripts_machine.core.cancellation import CancelToken
from transcripts_machine.core.errors import (
    ActionFallbackExhausted,
    ExtractionCancelled,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")

StepAction = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class StepStrategy(Generic[T]):
    """A page step: a selector-based action and the AI directive used if it fails."""

    name: str
    deterministic: StepAction[T]
    fallback: StepAction[T]
    deterministic_timeout: float
    fallback_timeout: float


@dataclass(frozen=True)
class StepOutcome(Generic[T]):
    step: str
    value: T
    used_fallback: bool


async def first_success_of(strategy: StepStrategy[T], token: CancelToken) -> StepOutcome[T]:
    """
    Run the deterministic action, falling back to the AI directive on failure.

    Cancellation is never treated as a step failure and propagates immediately.

    Raises:
        ActionFallbackExhausted: both attempts failed (including timeouts)
        ExtractionCancelled: the token fired during either attempt
    """
    try:
        value = await token.guard(
            strategy.deterministic(),
            timeout=strategy.deterministic_timeout,
            step=strategy.name,
        )
        return StepOutcome(step=strategy.name, value=value, used_fallback=False)
    except ExtractionCancelled:
        raise
    except Exception as primary_exc:
        _logger.warning(
            "Step '%s' selector action failed (%s), using AI fallback",
            strategy.name,
            primary_exc,
        )
        primary = primary_exc

    try:
        value = await token.guard(
            strategy.fallback(),
            timeout=strategy.fallback_timeout,
            step=f"{strategy.name} (fallback)",
        )
    except ExtractionCancelled:
        raise
    except Exception as fallback_exc:
        _logger.error("Step '%s' AI fallback failed: %s", strategy.name, fallback_exc)
        raise ActionFallbackExhausted(strategy.name, primary, fallback_exc) from fallback_exc

    return StepOutcome(step=strategy.name, value=value, used_fallback=True)
