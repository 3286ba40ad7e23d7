import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    base: float = 0.5
    factor: float = 2.0
    cap: float = 8.0

    def delay(self, attempt: int) -> float:
        # exponential backoff with up to 25% jitter
        delay = min(self.base * (self.factor ** attempt), self.cap)
        return delay + random.uniform(0, delay * 0.25)


NO_RETRY = RetryPolicy(attempts=1)


def retry_on(
    fn: Callable[[], T],
    policy: RetryPolicy = NO_RETRY,
    *,
    is_retryable: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds or ``policy.attempts`` is used up.

    Exceptions rejected by ``is_retryable`` propagate immediately. When no
    predicate is given nothing is considered retryable.
    """
    last_exc: Optional[Exception] = None
    for i in range(policy.attempts):
        try:
            return fn()
        except Exception as e:
            if is_retryable is None or not is_retryable(e):
                raise
            last_exc = e
            if i == policy.attempts - 1:
                break
            sleep_s = policy.delay(i)
            logger.warning("retry #%s in %.2fs due to %r", i + 1, sleep_s, e)
            sleep(sleep_s)
    assert last_exc is not None
    raise last_exc
