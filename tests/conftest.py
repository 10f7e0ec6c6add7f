import pytest
import threading

from loguru import logger

import porthos
from porthos.protocol import fields
from porthos.transport.base import Channel, Connection, Delivery, Properties


class FakeChannel(Channel):
    """ In-process stand-in for a broker channel. Published messages are
        recorded; :func:`deliver` pushes a reply into whichever handler is
        subscribed to the reply queue, on the calling thread.
    """

    queue_name = 'amq.gen-fakeQueue'

    def __init__(self):
        self.published = list()
        self.acknowledged = list()
        self.handlers = dict()
        self.closed = False
        self.publish_error = None
        self.lock = threading.Lock()

    @property
    def is_open(self):
        return not self.closed

    def declare_exclusive_queue(self):
        return self.queue_name

    def subscribe(self, queue, handler):
        self.handlers[queue] = handler

    def publish(self, exchange, routing_key, body, properties):
        if self.publish_error is not None:
            raise self.publish_error
        with self.lock:
            self.published.append((exchange, routing_key, body, properties))

    def acknowledge(self, delivery):
        with self.lock:
            self.acknowledged.append(delivery)

    def close(self):
        self.closed = True

    def deliver(self, correlation_id, body=b'', status=200, content_type=fields.OCTET_STREAM, headers=None):
        headers = dict(headers or {})
        if status is not None:
            headers[fields.STATUS_HEADER] = str(status)

        properties = Properties(
            content_type=content_type,
            correlation_id=correlation_id,
            headers=headers,
        )

        delivery = Delivery(body=body, properties=properties, tag=object())
        self.handlers[self.queue_name](delivery)
        return delivery


class FakeBroker(Connection):

    def __init__(self):
        self.channels = list()
        self.closed = False

    @property
    def is_open(self):
        return not self.closed

    def open_channel(self):
        channel = FakeChannel()
        self.channels.append(channel)
        return channel

    def close(self):
        self.closed = True


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def client(broker):

    client = porthos.create_client(broker, 'ServiceName', 1.5)

    yield client

    client.close()


@pytest.fixture
def channel(client):
    return client.channel


@pytest.fixture
def errors():
    """ Collect everything logged at ERROR or above while the test runs.
        Failures on background threads are logged rather than raised, this
        is how a test gets to see them.
    """

    records = list()
    sink = logger.add(records.append, level='ERROR', format='{message}')

    yield records

    logger.remove(sink)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
