# Standard library imports
import asyncio
from collections.abc import Awaitable, Callable, Coroutine
import functools
from typing import Any, TypeVar

T = TypeVar("T")


def run_async_in_celery(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion from a synchronous Celery task.

    Uses a fresh event loop when one is already running in this thread
    (eager mode inside an async test, for instance), otherwise
    ``asyncio.run``.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def celery_async_task(func: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """
    Decorator to convert async functions to sync functions for Celery tasks.

    Usage:
        @celery_app.task(bind=True)
        @celery_async_task
        async def my_async_task(self, param1, param2):
            result = await some_async_function()
            return result
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        return run_async_in_celery(func(*args, **kwargs))

    return wrapper
