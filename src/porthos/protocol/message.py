""" Data structures for the messages exchanged with a remote service: the
    outbound :class:`CallEnvelope`, the inbound :class:`ReplyEnvelope`, and
    the :class:`Response` handed back to the original caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .. import json
from .fields import METHOD_HEADER


@dataclass(frozen=True)
class CallEnvelope:
    """ The outbound unit of a remote call. A :class:`CallEnvelope` with
        neither a *correlation_id* nor a *reply_to* is fire-and-forget: no
        reply is expected, and none will be routed back.

        :ivar expiration: Time-to-live of the request on the broker, in
            seconds.
    """

    method: str
    body: bytes
    content_type: str
    expiration: float
    correlation_id: Optional[str] = None
    reply_to: Optional[str] = None

    @property
    def headers(self) -> Dict[str, Any]:
        return {METHOD_HEADER: self.method}

    @property
    def expiration_ms(self) -> str:
        """ The expiration as AMQP wants it: integer milliseconds, as a
            string.
        """

        return str(max(0, int(round(self.expiration * 1000))))


@dataclass(frozen=True)
class ReplyEnvelope:
    """ The inbound unit. It is only routable if *correlation_id* matches
        exactly one pending call.
    """

    correlation_id: Optional[str]
    body: bytes
    content_type: Optional[str]
    status_code: Optional[int]
    headers: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Response:
    """ The structured result of a successful call. The content is left
        undecoded; :meth:`json` and :attr:`text` are conveniences for the
        common cases.
    """

    content: bytes
    content_type: Optional[str]
    status_code: Optional[int]
    headers: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_reply(cls, reply: ReplyEnvelope) -> "Response":
        return cls(
            content=reply.body,
            content_type=reply.content_type,
            status_code=reply.status_code,
            headers=dict(reply.headers),
        )

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
