"""Middleware hooks.

* ``Middleware``      — base class, every hook is an async no-op.
* ``MiddlewareChain`` — ordered list of middleware; runs one lifecycle
  stage at a time across all of them.

Within a stage all hooks are started together and the stage finishes
only when every hook has settled.  If one or more hooks fail, the
stage raises the first failure.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from jayrpc.utils import gather_all

log = logging.getLogger(__name__)

ON_REQUEST = "on_request"
BEFORE_CALL = "before_call"
AFTER_CALL = "after_call"
ON_RESPONSE = "on_response"

HOOKS = (ON_REQUEST, BEFORE_CALL, AFTER_CALL, ON_RESPONSE)


class Middleware:
    """Override the hooks you need; the rest do nothing."""

    async def on_request(self, request: Any, state: dict[str, Any]) -> None:
        """Once per HTTP transaction, before the body is parsed."""

    async def before_call(self, procedure: Any, request: Any) -> None:
        """Once per call, after validation and instantiation."""

    async def after_call(self, definition: Any, response: Any) -> None:
        """Once per call, with the response that will be sent for it."""

    async def on_response(self, response: Any, state: dict[str, Any]) -> None:
        """Once per HTTP transaction, before the reply is serialised."""


class MiddlewareChain:
    def __init__(self) -> None:
        self._middlewares: list[Any] = []

    def register(self, middleware: Any | Iterable[Any]) -> None:
        """Append one middleware or a list of them."""
        if isinstance(middleware, (list, tuple)):
            self._middlewares.extend(middleware)
        else:
            self._middlewares.append(middleware)

    @property
    def middlewares(self) -> list[Any]:
        return list(self._middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    async def run(self, hook: str, *args: Any) -> None:
        """Run *hook* on every middleware concurrently."""
        if hook not in HOOKS:
            raise ValueError(f"unknown middleware hook {hook!r}")

        calls = []
        for mw in self._middlewares:
            fn = getattr(mw, hook, None)
            if fn is None:
                continue
            calls.append(lambda fn=fn: fn(*args))

        if calls:
            log.debug("running %s on %d middleware(s)", hook, len(calls))
            await gather_all(calls)

    # -- Stage shortcuts -----------------------------------------------
    async def on_request(self, request: Any, state: dict[str, Any]) -> None:
        await self.run(ON_REQUEST, request, state)

    async def before_call(self, procedure: Any, request: Any) -> None:
        await self.run(BEFORE_CALL, procedure, request)

    async def after_call(self, definition: Any, response: Any) -> None:
        await self.run(AFTER_CALL, definition, response)

    async def on_response(self, response: Any, state: dict[str, Any]) -> None:
        await self.run(ON_RESPONSE, response, state)
