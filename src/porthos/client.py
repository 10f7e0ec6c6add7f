""" The client side of porthos: a :class:`Client` issues calls to one remote
    service over a shared broker connection, and routes every reply arriving
    on its private reply queue back to the call that is waiting for it.
"""

from __future__ import annotations

import concurrent.futures
from typing import Optional

from loguru import logger

from . import config
from . import transport
from .call import Call, timeout_seconds
from .dispatch import ResponseDispatcher
from .errors import ClientClosed
from .pending import CorrelationRegistry
from .protocol import codec
from .protocol.fields import DEFAULT_EXCHANGE
from .protocol.message import CallEnvelope
from .timeout import TimeoutSupervisor
from .transport.base import Channel, Connection, Properties


class Client:
    """ Invoke methods on the remote service *service_name*. Requests are
        published to the broker's default exchange, routed by service name;
        replies come back on an exclusive queue declared by :func:`start`.

        A :class:`Client` is safe to share between threads: any number of
        calls may be in flight at once.

        :ivar request_ttl: Default time-to-live for a call, in seconds. It
            is both the broker-side expiration of the request and the
            client-side deadline for the reply.
        :ivar reply_queue: Name of the private reply queue, once started.
    """

    def __init__(self, broker: Connection, service_name: str, request_ttl: Optional[float] = None):

        if request_ttl is None:
            request_ttl = config.request_ttl

        self.broker = broker
        self.service_name = service_name
        self.request_ttl = timeout_seconds(request_ttl)

        self.registry = CorrelationRegistry()
        self.supervisor: Optional[TimeoutSupervisor] = None
        self.dispatcher: Optional[ResponseDispatcher] = None
        self.channel: Optional[Channel] = None
        self.reply_queue: Optional[str] = None
        self.closed = False


    def start(self) -> "Client":
        """ Open this client's channel, declare its reply queue, and begin
            consuming replies. Returns the client itself.
        """

        self.channel = self.broker.open_channel()
        self.reply_queue = self.channel.declare_exclusive_queue()

        self.supervisor = TimeoutSupervisor(self.registry)
        self.dispatcher = ResponseDispatcher(self.channel, self.registry, self.supervisor)
        self.dispatcher.subscribe(self.reply_queue)

        logger.info("client.start service={} reply_queue={}", self.service_name, self.reply_queue)
        return self


    def call(self, method: str) -> Call:
        """ Prepare the invocation of *method*; see :class:`porthos.Call`.
        """

        return Call(self, method)


    def invoke(self, call: Call) -> concurrent.futures.Future:
        """ Send *call* and return a future that resolves to its
            :class:`porthos.Response`, or fails with a
            :class:`porthos.CallError` if the call times out or the client
            is closed first. An error raised while publishing is delivered
            through the future as well.
        """

        self._check_open()

        body, content_type = codec.encode(call.body)
        timeout = timeout_seconds(call.effective_timeout)

        pending = self.registry.register(timeout)
        self.supervisor.arm(pending)

        envelope = CallEnvelope(
            method=call.method,
            body=body,
            content_type=content_type,
            expiration=timeout,
            correlation_id=pending.correlation_id,
            reply_to=self.reply_queue,
        )

        logger.debug(
            "client.call service={} method={} correlation_id={}",
            self.service_name, call.method, pending.correlation_id,
        )

        try:
            self._publish(envelope)
        except Exception as exc:
            if self.registry.lookup_and_remove(pending.correlation_id) is not None:
                self.supervisor.release(pending)
                pending.fail(exc)

        # A close() racing with this call may have drained the registry
        # before the call was registered.

        if self.closed and self.registry.lookup_and_remove(pending.correlation_id) is not None:
            pending.fail(ClientClosed(
                f"client of {self.service_name!r} closed with the call pending",
                pending.correlation_id,
            ))

        return pending.future


    def void(self, call: Call) -> None:
        """ Send *call* as fire-and-forget: no reply is requested, nothing is
            tracked, and errors while publishing are logged rather than
            raised.
        """

        self._check_open()

        body, content_type = codec.encode(call.body)
        envelope = CallEnvelope(
            method=call.method,
            body=body,
            content_type=content_type,
            expiration=timeout_seconds(call.effective_timeout),
        )

        logger.debug("client.call.void service={} method={}", self.service_name, call.method)

        try:
            self._publish(envelope)
        except Exception:
            logger.exception("client.call.void.error service={} method={}", self.service_name, call.method)


    def close(self) -> None:
        """ Close this client's channel. Calls still waiting for a reply fail
            with :class:`porthos.ClientClosed`. The broker connection is left
            open; it may be shared with other clients.
        """

        if self.closed:
            return
        self.closed = True

        abandoned = self.registry.drain()

        for pending in abandoned:
            if self.supervisor is not None:
                self.supervisor.release(pending)
            pending.fail(ClientClosed(
                f"client of {self.service_name!r} closed with the call pending",
                pending.correlation_id,
            ))

        if abandoned:
            logger.warning("client.close.abandoned service={} count={}", self.service_name, len(abandoned))

        if self.supervisor is not None:
            self.supervisor.stop()

        logger.info("client.close service={}", self.service_name)

        if self.channel is not None:
            self.channel.close()


    def _check_open(self) -> None:
        if self.closed:
            raise ClientClosed(f"client of {self.service_name!r} is closed")
        if self.channel is None:
            raise RuntimeError("client has not been started")


    def _publish(self, envelope: CallEnvelope) -> None:

        properties = Properties(
            content_type=envelope.content_type,
            expiration=envelope.expiration_ms,
            correlation_id=envelope.correlation_id,
            reply_to=envelope.reply_to,
            headers=envelope.headers,
        )

        self.channel.publish(DEFAULT_EXCHANGE, self.service_name, envelope.body, properties)


# end of class Client


def create_broker(url: Optional[str] = None) -> Connection:
    """ Connect to the AMQP broker at *url*. If no *url* is specified the
        ``PORTHOS_AMQP_URL`` environment variable is used.
    """

    return transport.connect(url)


def create_client(broker: Connection, service_name: str, request_ttl: Optional[float] = None) -> Client:
    """ Create and start a :class:`Client` for *service_name* on an
        established *broker* connection. *request_ttl* is the default call
        timeout in seconds; if not specified, ``PORTHOS_REQUEST_TTL`` is used.
    """

    return Client(broker, service_name, request_ttl).start()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
