"""
All-or-nothing join for concurrent coroutines

join_all() starts every awaitable at once and waits for them together.
The outcome is either Joined, holding every result in input order, or
JoinFailed, holding the first error. There is no partial success.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Generic, List, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

@dataclass(frozen=True)
class Joined(Generic[T]):
    """Every operation succeeded"""
    values: List[T] = field(default_factory=list)

@dataclass(frozen=True)
class JoinFailed:
    """At least one operation failed"""
    error: BaseException
    index: int  # position of the failed operation in the input

JoinResult = Union[Joined[T], JoinFailed]

async def join_all(awaitables: Sequence[Awaitable[T]]) -> "JoinResult[T]":
    """
    Run awaitables concurrently and join them.

    Results keep input order whatever order they complete in. On the first
    failure the still pending operations are cancelled and JoinFailed is
    returned; when several fail in the same step the lowest index wins.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return Joined([])

    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

    for index, task in enumerate(tasks):
        if task in done and not task.cancelled() and task.exception() is not None:
            for other in pending:
                other.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            logger.debug(f"Join failed at operation {index}: {task.exception()!r}")
            return JoinFailed(error=task.exception(), index=index)

    return Joined([task.result() for task in tasks])
