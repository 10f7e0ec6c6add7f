"""Transport layer implementations."""

from .base import (
    Channel,
    Connection,
    Delivery,
    Properties,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
)


def connect(url=None):
    """Connect to the AMQP broker at *url*, defaulting to
    ``PORTHOS_AMQP_URL``.
    """

    from . import rabbitmq
    return rabbitmq.connect(url)
