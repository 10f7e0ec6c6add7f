"""Chainable, immutable description of a single remote call."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .errors import EncodingError
from .protocol.codec import ArgsBody, Body, MapBody, RawBody

if TYPE_CHECKING:
    import concurrent.futures

    from .client import Client
    from .protocol.message import Response


@dataclass(frozen=True)
class Call:
    """
    A call to *method* on the client's service. Every ``with_*`` method
    returns a new :class:`Call`, leaving this one untouched, so a partially
    configured call can be kept and reused as a template:

        status = client.call("status").with_timeout(0.5)
        future = status.with_args("disk").invoke()

    At most one body encoding may be chosen: raw bytes, positional
    arguments, or named arguments. Choosing a second one raises
    :class:`porthos.errors.EncodingError`.
    """

    client: "Client" = field(repr=False, compare=False)
    method: str
    timeout: Optional[float] = None
    body: Optional[Body] = None

    @property
    def effective_timeout(self) -> float:
        if self.timeout is not None:
            return self.timeout
        return self.client.request_ttl

    def with_timeout(self, timeout: float) -> "Call":
        """Override the client's default request time-to-live, in seconds."""
        return replace(self, timeout=timeout_seconds(timeout))

    def with_body(self, data: bytes) -> "Call":
        """Send *data* as is (application/octet-stream)."""
        if isinstance(data, str):
            raise EncodingError("raw call bodies are bytes; encode the string first")
        return self._with(RawBody(bytes(data)))

    def with_args(self, *args: Any) -> "Call":
        """Send positional arguments as a JSON array (application/porthos-args)."""
        return self._with(ArgsBody(tuple(args)))

    def with_map(self, mapping: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Call":
        """Send named arguments as a JSON object (application/porthos-map)."""
        named = dict(mapping or {})
        named.update(kwargs)
        return self._with(MapBody(named))

    def _with(self, body: Body) -> "Call":
        if self.body is not None:
            raise EncodingError(
                f"call to {self.method!r} already has a {self.body.content_type} body"
            )
        return replace(self, body=body)

    # Terminal operations
    def invoke(self) -> "concurrent.futures.Future[Response]":
        """Send the call and return a future for its :class:`Response`."""
        return self.client.invoke(self)

    def void(self) -> None:
        """Send the call without expecting, or waiting for, any reply."""
        self.client.void(self)


def timeout_seconds(timeout: float) -> float:
    """Validate a timeout: a finite, non-negative number of seconds."""
    timeout = float(timeout)
    if not math.isfinite(timeout) or timeout < 0:
        raise ValueError(f"timeout must be a finite, non-negative number of seconds: {timeout}")
    return timeout
