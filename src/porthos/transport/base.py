"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`porthos.protocol` so the protocol remains
transport-agnostic: the client only ever publishes a message with metadata,
and subscribes to inbound messages on a named queue.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..errors import PorthosError


# Transport agnostic exceptions

class TransportError(PorthosError):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """The transport did not complete an operation in time."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


@dataclass(frozen=True)
class Properties:
    """Message metadata attached to a published message."""

    content_type: Optional[str] = None
    expiration: Optional[str] = None
    correlation_id: Optional[str] = None
    reply_to: Optional[str] = None
    headers: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Delivery:
    """One inbound message, as handed to a subscription handler. The *tag*
    is opaque to everyone but the transport, which uses it to acknowledge.
    """

    body: bytes
    properties: Properties
    tag: Any = None


Handler = Callable[[Delivery], None]


class Channel(ABC):
    """A single-owner channel on a shared connection."""

    @abstractmethod
    def declare_exclusive_queue(self) -> str:
        """Declare a private, exclusive, server-named queue; return its name."""

    @abstractmethod
    def subscribe(self, queue: str, handler: Handler) -> None:
        """Invoke *handler* for every message arriving on *queue*."""

    @abstractmethod
    def publish(self, exchange: str, routing_key: str, body: bytes, properties: Properties) -> None:
        """Publish one message."""

    @abstractmethod
    def acknowledge(self, delivery: Delivery) -> None:
        """Acknowledge receipt of a delivered message."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the channel."""

    @property
    def is_open(self) -> bool:
        """Whether the channel is currently usable."""
        return False


class Connection(ABC):
    """Minimal contract for a broker connection."""

    @abstractmethod
    def open_channel(self) -> Channel:
        """Open a new channel on this connection."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False
