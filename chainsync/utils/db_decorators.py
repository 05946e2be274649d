"""
Database decorators for automatic commit and rollback.

Wraps async functions whose first argument is an AsyncSession so that
each call is one unit of work against the block store.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


def _find_session(args: tuple[Any, ...], kwargs: dict[str, Any]) -> AsyncSession | None:
    session = kwargs.get("session")
    if session is None and args and isinstance(args[0], AsyncSession):
        session = args[0]
    return session


def with_auto_commit(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """
    Commit the session on success and roll it back on error.

    Usage:
        @with_auto_commit
        async def write_block(session: AsyncSession, block: Block) -> int:
            ...

    The original exception is always re-raised after rollback.

    Args:
        func: Async function taking the session first or as ``session=``

    Returns:
        Wrapped function with automatic commit/rollback
    """
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = _find_session(args, kwargs)
        if session is None:
            raise TypeError(
                f"{func.__name__} decorated with @with_auto_commit "
                f"must receive an AsyncSession"
            )

        try:
            result = await func(*args, **kwargs)
            await session.commit()
            return result
        except Exception as e:
            try:
                await session.rollback()
                logger.debug(
                    f"Rollback performed in {func.__name__} due to error: {type(e).__name__}"
                )
            except Exception as rollback_error:
                logger.error(
                    f"Failed to rollback in {func.__name__}: {rollback_error}"
                )
            raise

    return wrapper
