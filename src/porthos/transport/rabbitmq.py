"""RabbitMQ transport, backed by pika."""

from __future__ import annotations

import concurrent.futures
import threading
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlparse

import pika
import pika.exceptions
from loguru import logger

from .. import config
from .base import (
    Channel,
    Connection,
    Delivery,
    Handler,
    Properties,
    TransportConnectionError,
    TransportError,
    TransportTimeout,
)


def parameters(url: Optional[str] = None) -> pika.URLParameters:
    url = url or config.amqp_url
    params = pika.URLParameters(url)
    query = parse_qs(urlparse(url).query)

    # Query arguments in the URL win over the environment defaults.
    if 'heartbeat' not in query:
        params.heartbeat = config.heartbeat
    if 'blocked_connection_timeout' not in query:
        params.blocked_connection_timeout = 300

    return params


def connect(url: Optional[str] = None) -> "RabbitConnection":
    return RabbitConnection(parameters(url))


class RabbitConnection(Connection):
    """ A pika BlockingConnection owned by a dedicated I/O thread. pika is
        not thread safe; every operation against the connection or one of
        its channels is handed to the I/O thread via add_callback_threadsafe,
        and the caller blocks on a Future for the outcome. Operations issued
        from the I/O thread itself (for example from inside a delivery
        handler) run inline.
    """

    timeout = 10

    def __init__(self, params: pika.ConnectionParameters):
        self.params = params
        self.shutdown = False

        self._connection: Optional[pika.BlockingConnection] = None
        self._error: Optional[BaseException] = None
        self._ready = threading.Event()

        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self._ready.wait(self.timeout):
            raise TransportTimeout(
                f"no connection to AMQP broker at {self._where()} in {self.timeout} sec"
            )

        if self._error is not None:
            raise TransportConnectionError(
                f"cannot connect to AMQP broker at {self._where()}: {self._error}"
            ) from self._error

    def _where(self) -> str:
        return f"{self.params.host}:{self.params.port}"

    @property
    def is_open(self) -> bool:
        return self._connection is not None and self._connection.is_open and not self.shutdown

    def _run(self) -> None:
        try:
            self._connection = pika.BlockingConnection(self.params)
        except pika.exceptions.AMQPError as exc:
            self._error = exc
            self._ready.set()
            return

        logger.info("rabbitmq.connected broker={}", self._where())
        self._ready.set()

        while not self.shutdown:
            try:
                self._connection.process_data_events(time_limit=1)
            except pika.exceptions.AMQPError:
                logger.exception("rabbitmq.connection.lost broker={}", self._where())
                self.shutdown = True
                return

        try:
            if self._connection.is_open:
                self._connection.close()
        except pika.exceptions.AMQPError:
            logger.exception("rabbitmq.close.error broker={}", self._where())

        logger.info("rabbitmq.disconnected broker={}", self._where())

    def invoke(self, function: Callable[..., Any], *args, **kwargs) -> Any:
        """ Run *function* on the I/O thread and return its result. pika
            errors are re-raised as :class:`TransportError`.
        """

        if threading.current_thread() is self._thread:
            return _translated(function, *args, **kwargs)

        if not self.is_open:
            raise TransportConnectionError(f"connection to {self._where()} is closed")

        future: concurrent.futures.Future = concurrent.futures.Future()

        def _call() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = _translated(function, *args, **kwargs)
            except TransportError as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        try:
            self._connection.add_callback_threadsafe(_call)
        except pika.exceptions.AMQPError as exc:
            raise TransportConnectionError(str(exc)) from exc

        try:
            return future.result(self.timeout)
        except concurrent.futures.TimeoutError as exc:
            raise TransportTimeout(
                f"broker operation {getattr(function, '__name__', function)} "
                f"took more than {self.timeout} sec"
            ) from exc

    def open_channel(self) -> "RabbitChannel":
        return RabbitChannel(self)

    def close(self) -> None:
        if self.shutdown:
            return
        self.shutdown = True

        # Wake up process_data_events() so the I/O thread notices.
        try:
            self._connection.add_callback_threadsafe(lambda: None)
        except pika.exceptions.AMQPError:
            pass

        if threading.current_thread() is not self._thread:
            self._thread.join(self.timeout)


class RabbitChannel(Channel):
    """ One pika channel. Every method marshals onto the owning connection's
        I/O thread.
    """

    def __init__(self, connection: RabbitConnection):
        self.connection = connection
        self._channel = connection.invoke(connection._connection.channel)

    @property
    def is_open(self) -> bool:
        return self.connection.is_open and self._channel.is_open

    def declare_exclusive_queue(self) -> str:
        result = self.connection.invoke(self._channel.queue_declare, queue='', exclusive=True)
        return result.method.queue

    def subscribe(self, queue: str, handler: Handler) -> None:

        def on_message(_channel, method, properties, body: bytes) -> None:
            delivery = Delivery(
                body=body,
                properties=_from_pika(properties),
                tag=method.delivery_tag,
            )

            # An exception escaping here would tear down the I/O loop, and
            # with it every other call sharing the connection.
            try:
                handler(delivery)
            except Exception:
                logger.exception("rabbitmq.handler.error queue={}", queue)

        self.connection.invoke(
            self._channel.basic_consume,
            queue=queue,
            on_message_callback=on_message,
        )

    def publish(self, exchange: str, routing_key: str, body: bytes, properties: Properties) -> None:
        self.connection.invoke(
            self._channel.basic_publish,
            exchange=exchange,
            routing_key=routing_key,
            body=body,
            properties=_to_pika(properties),
        )

    def acknowledge(self, delivery: Delivery) -> None:
        self.connection.invoke(self._channel.basic_ack, delivery_tag=delivery.tag)

    def close(self) -> None:
        if self.is_open:
            self.connection.invoke(self._channel.close)


def _translated(function: Callable[..., Any], *args, **kwargs) -> Any:
    try:
        return function(*args, **kwargs)
    except pika.exceptions.AMQPError as exc:
        raise TransportError(f"{type(exc).__name__}: {exc}") from exc


def _to_pika(properties: Properties) -> pika.BasicProperties:
    return pika.BasicProperties(
        content_type=properties.content_type,
        expiration=properties.expiration,
        correlation_id=properties.correlation_id,
        reply_to=properties.reply_to,
        headers=dict(properties.headers),
    )


def _from_pika(properties: pika.BasicProperties) -> Properties:
    return Properties(
        content_type=properties.content_type,
        expiration=properties.expiration,
        correlation_id=properties.correlation_id,
        reply_to=properties.reply_to,
        headers=dict(properties.headers or {}),
    )
