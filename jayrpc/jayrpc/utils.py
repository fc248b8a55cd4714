"""Small helpers shared by the processor and the transport."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable

import anyio
from starlette.requests import Request


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


async def gather_all(calls: Iterable[Callable[[], Any | Awaitable[Any]]]) -> None:
    """Run *calls* concurrently and wait until every one has settled.

    A failing call does not cancel its siblings.  Once all are done the
    first failure (in completion order) is re-raised.
    """
    errors: list[Exception] = []

    async def _run(fn: Callable[[], Any]) -> None:
        try:
            await maybe_await(fn())
        except Exception as exc:
            errors.append(exc)

    async with anyio.create_task_group() as tg:
        for fn in calls:
            tg.start_soon(_run, fn)

    if errors:
        raise errors[0]


def get_bearer_token(request: Request) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header."""
    authorization = request.headers.get("authorization")
    if not authorization:
        return None

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        return None
    return parts[1]
