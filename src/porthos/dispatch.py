"""Routing of inbound replies to the calls waiting on them."""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger

from .pending import CorrelationRegistry
from .protocol.fields import STATUS_HEADER
from .protocol.message import ReplyEnvelope, Response
from .timeout import TimeoutSupervisor
from .transport.base import Channel, Delivery


class ResponseDispatcher:
    """ Consume the client's private reply queue. Each reply is acknowledged,
        matched to its :class:`porthos.pending.PendingCall` by correlation
        identifier, and settles that call. A reply with no matching call
        (it timed out already, or was never ours) is logged and dropped.
    """

    def __init__(self, channel: Channel, registry: CorrelationRegistry, supervisor: TimeoutSupervisor):
        self.channel = channel
        self.registry = registry
        self.supervisor = supervisor
        self.queue: Optional[str] = None

    def subscribe(self, queue: str) -> None:
        self.queue = queue
        self.channel.subscribe(queue, self)

    def __call__(self, delivery: Delivery) -> None:
        self.channel.acknowledge(delivery)

        reply = _reply(delivery)
        logger.debug(
            "client.reply correlation_id={} status={} bytes={}",
            reply.correlation_id, reply.status_code, len(reply.body),
        )

        pending = self.registry.lookup_and_remove(reply.correlation_id)
        if pending is None:
            logger.info("client.reply.orphaned correlation_id={}", reply.correlation_id)
            return

        self.supervisor.release(pending)
        pending.succeed(Response.from_reply(reply))


def _reply(delivery: Delivery) -> ReplyEnvelope:
    properties = delivery.properties
    headers = dict(properties.headers)

    return ReplyEnvelope(
        correlation_id=properties.correlation_id,
        body=delivery.body,
        content_type=properties.content_type,
        status_code=_status_code(headers),
        headers=headers,
    )


def _status_code(headers: Dict[str, Any]) -> Optional[int]:
    value = headers.get(STATUS_HEADER)
    if value is None:
        return None

    if isinstance(value, bytes):
        value = value.decode("utf-8", "replace")

    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("client.reply.bad_status value={!r}", value)
        return None
