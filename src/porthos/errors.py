"""Exceptions raised by, or delivered through, the porthos client."""

from __future__ import annotations

from typing import Optional


class PorthosError(Exception):
    """Base class for all porthos errors."""


class CallError(PorthosError):
    """A single remote call failed. Delivered through the call's future."""

    def __init__(self, message: str, correlation_id: Optional[str] = None):
        super().__init__(message)
        self.correlation_id = correlation_id


class CallTimeout(CallError, TimeoutError):
    """No reply arrived within the call's effective time-to-live."""

    timed_out = True

    def __init__(self, correlation_id: str, timeout: float):
        super().__init__(
            f"call {correlation_id}: no reply in {timeout:.3f} sec",
            correlation_id,
        )
        self.timeout = timeout


class ClientClosed(CallError):
    """The client was closed while the call was still pending."""


class EncodingError(PorthosError, ValueError):
    """A call body was configured incorrectly, or cannot be decoded."""
