"""Procedure registry.

Maps JSON-RPC method names to procedure definitions, nothing more.
Definitions are registered directly or through the ``@registry.procedure``
decorator.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from jayrpc.procedure import FunctionProcedure, ProcedureDefinition, ProcedureFn
from jayrpc.validation import check_schema

log = logging.getLogger(__name__)


class Registry:
    """A simple method → definition mapping.

    Usage::

        registry = Registry()
        registry.register([Add, Subtract])

        @registry.procedure("echo")
        async def echo(params, state):
            return params
    """

    def __init__(self) -> None:
        self._procedures: dict[str, ProcedureDefinition] = {}

    # -- Registration --------------------------------------------------
    def register(
        self, definition: ProcedureDefinition | Iterable[ProcedureDefinition]
    ) -> None:
        """Register one definition or a list of them.  Last one wins."""
        if isinstance(definition, (list, tuple)):
            for item in definition:
                self._add(item)
        else:
            self._add(definition)

    def _add(self, definition: Any) -> None:
        name = getattr(definition, "name", None)
        if not isinstance(name, str) or not name:
            raise TypeError(f"procedure {definition!r} has no name")

        schema = getattr(definition, "params_schema", None)
        if schema is not None:
            check_schema(schema)

        if name in self._procedures:
            log.warning("overwriting procedure for %r", name)
        self._procedures[name] = definition
        log.debug("registered procedure %r → %r", name, definition)

    def procedure(
        self, name: str, params_schema: dict[str, Any] | None = None
    ) -> Callable[[ProcedureFn], ProcedureFn]:
        """Decorator that registers *fn* under *name*."""

        def decorator(fn: ProcedureFn) -> ProcedureFn:
            self.register(FunctionProcedure(name, fn, params_schema))
            return fn

        return decorator

    # -- Lookup --------------------------------------------------------
    def lookup(self, method: str) -> ProcedureDefinition | None:
        return self._procedures.get(method)

    # -- Introspection -------------------------------------------------
    @property
    def methods(self) -> list[str]:
        return list(self._procedures.keys())

    def is_registered(self, method: str) -> bool:
        return method in self._procedures
