"""Server options."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from jayrpc.errors import ErrorCodeTable
from jayrpc.jsonrpc import DEFAULT_PROTOCOL_VERSION

# Defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8100


@dataclass(slots=True)
class ServerOptions:
    """Options recognised by the batch processor and the transport.

    ``error_class_to_code`` is an ordered list of ``(predicate, code)``
    pairs consulted when an exception carries no integer ``code``.  A
    predicate is an exception class or ``fn(exc) -> bool``.
    """

    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    error_class_to_code: ErrorCodeTable = field(default_factory=list)

    @classmethod
    def from_env(cls, **overrides) -> "ServerOptions":
        opts = cls(
            protocol_version=os.getenv("JAYRPC_PROTOCOL_VERSION", DEFAULT_PROTOCOL_VERSION),
        )
        for key, value in overrides.items():
            setattr(opts, key, value)
        return opts
