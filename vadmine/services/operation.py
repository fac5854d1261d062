"""Operation boundary shared by every ledger-mutating reward call."""

import functools
from typing import Any, Awaitable, Callable, TypeVar

from vadmine.core.exceptions import AppError, NotAuthenticatedError, RewardOperationError
from vadmine.core.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R")


def reward_operation(name: str) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """
    Reject calls without a uid before touching the store, let typed app errors
    (conflicts, auth) through, and turn anything else into a retryable
    RewardOperationError. "Nothing to claim" is handled inside the operation as
    a 0 reward, never as an exception.
    """

    def decorator(fn: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @functools.wraps(fn)
        async def wrapper(store: Any, uid: str | None, *args: Any, **kwargs: Any) -> R:
            if not uid:
                log.info("reward_rejected_unauthenticated", operation=name)
                raise NotAuthenticatedError()
            try:
                return await fn(store, uid, *args, **kwargs)
            except AppError:
                raise
            except Exception as e:
                log.exception("reward_operation_failed", operation=name, uid=uid)
                raise RewardOperationError(name) from e

        return wrapper

    return decorator
