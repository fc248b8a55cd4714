"""Procedure definitions.

A *definition* is anything the registry can index: it has a ``name``,
an optional ``params_schema`` and, when called with ``(params, state)``,
returns an instance whose ``call()`` produces the result (directly or
as an awaitable).  Subclassing ``Procedure`` is the usual way to get
one, ``Registry.procedure`` wraps plain functions.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, ClassVar, Iterable, Protocol, runtime_checkable

# Type alias for a function procedure: (params, state) -> result | awaitable
ProcedureFn = Callable[[Any, dict[str, Any]], Any]


@runtime_checkable
class ProcedureInstance(Protocol):
    def call(self) -> Any | Awaitable[Any]:
        ...


@runtime_checkable
class ProcedureDefinition(Protocol):
    name: str
    params_schema: dict[str, Any] | None

    def __call__(self, params: Any, state: dict[str, Any]) -> ProcedureInstance:
        ...


class Procedure:
    """Base class for class-based procedures.

    Usage::

        class Add(Procedure):
            name = "add"
            params_schema = {
                "type": "object",
                "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                "required": ["a", "b"],
            }

            async def call(self):
                return self.params["a"] + self.params["b"]
    """

    name: ClassVar[str] = ""
    params_schema: ClassVar[dict[str, Any] | None] = None

    def __init__(self, params: Any, state: dict[str, Any]) -> None:
        self.params = params
        self.state = state

    def clean_params(self, ignore_fields: Iterable[str]) -> None:
        """Drop *ignore_fields* from ``params``."""
        if not isinstance(self.params, dict):
            return
        for field_name in ignore_fields:
            self.params.pop(field_name, None)

    async def call(self) -> Any:
        raise NotImplementedError(f'Method "call" is not implemented by {type(self).__name__}')


class _BoundFunction:
    __slots__ = ("_fn", "params", "state")

    def __init__(self, fn: ProcedureFn, params: Any, state: dict[str, Any]) -> None:
        self._fn = fn
        self.params = params
        self.state = state

    def call(self) -> Any:
        return self._fn(self.params, self.state)


class FunctionProcedure:
    """Definition backed by a plain (sync or async) function."""

    def __init__(
        self,
        name: str,
        fn: ProcedureFn,
        params_schema: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.fn = fn
        self.params_schema = params_schema

    def __call__(self, params: Any, state: dict[str, Any]) -> _BoundFunction:
        return _BoundFunction(self.fn, params, state)

    def __repr__(self) -> str:
        return f"FunctionProcedure({self.name!r}, {self.fn.__qualname__})"
