"""Backoff for throttled provider calls."""

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from llm import LLMRateLimitError

logger = structlog.get_logger()


def honor_retry_after(backoff, ceiling: float):
    """Sleep what the provider asked for when it said, else defer to ``backoff``.

    The hint is capped at ``ceiling`` so a long Retry-After cannot stall a
    request thread.
    """

    def wait(retry_state: RetryCallState) -> float:
        hint = getattr(retry_state.outcome.exception(), "retry_after", None)
        if hint is not None:
            return max(0.0, min(float(hint), ceiling))
        return backoff(retry_state)

    return wait


def _log_retry(retry_state: RetryCallState):
    logger.warning(
        "llm.retrying",
        attempt=retry_state.attempt_number,
        wait=round(retry_state.next_action.sleep, 2),
        error=str(retry_state.outcome.exception()),
    )


def llm_retry(
    max_attempts: int = 3,
    min_wait: float = 2.0,
    max_wait: float = 30.0,
    exceptions: tuple = (LLMRateLimitError,),
):
    """Retry decorator for provider calls.

    Only rate-limit errors are retried by default; auth failures, empty
    replies and unparseable output surface on the first attempt.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=honor_retry_after(wait_exponential(multiplier=1, min=min_wait, max=max_wait), max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=_log_retry,
        reraise=True,
    )
