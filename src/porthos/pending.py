""" Bookkeeping for calls awaiting a reply: the :class:`PendingCall` record,
    the :class:`CorrelationRegistry` holding every unsettled call, and the
    generator for correlation identifiers.
"""

from __future__ import annotations

import concurrent.futures
import itertools
import threading
import time
from typing import Dict, List, Optional

from .protocol.message import Response


class PendingCall:
    """ One in-flight call. The *future* is the single-assignment result
        slot handed back to the caller: it is settled exactly once, either
        with a :class:`Response` or with a :class:`porthos.errors.CallError`.
        Whoever settles a :class:`PendingCall` must first have taken it out
        of the registry; a second settlement raises
        :class:`concurrent.futures.InvalidStateError`.

        :ivar correlation_id: The identifier carried by the request and its
            reply.
        :ivar timeout: The effective timeout for this call, in seconds.
        :ivar deadline: Monotonic clock time at which the call times out.
    """

    def __init__(self, correlation_id: str, timeout: float):
        self.correlation_id = correlation_id
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout
        self.future: concurrent.futures.Future = concurrent.futures.Future()

        # Callers cannot cancel a call; its only ways out are a reply, a
        # timeout, or the client closing.
        self.future.set_running_or_notify_cancel()

    def __repr__(self):
        return 'PendingCall(%r, timeout=%r)' % (self.correlation_id, self.timeout)

    @property
    def settled(self) -> bool:
        return self.future.done()

    def succeed(self, response: Response) -> None:
        self.future.set_result(response)

    def fail(self, error: BaseException) -> None:
        self.future.set_exception(error)


class CorrelationRegistry:
    """ Process-wide mapping of correlation identifier to
        :class:`PendingCall`. An identifier is present if and only if its call
        has not yet settled. Both settlement paths (reply delivery, timeout
        expiry) go through :func:`lookup_and_remove`, which is atomic: of
        two concurrent callers for the same identifier, exactly one gets the
        :class:`PendingCall` back.
    """

    def __init__(self):
        self._pending: Dict[str, PendingCall] = dict()
        self._lock = threading.Lock()

    def __contains__(self, correlation_id):
        with self._lock:
            return correlation_id in self._pending

    def __len__(self):
        with self._lock:
            return len(self._pending)

    def register(self, timeout: float) -> PendingCall:
        """ Create, store, and return a fresh :class:`PendingCall` with a
            correlation identifier distinct from every other pending call.
        """

        with self._lock:
            correlation_id = _id_next()
            attempts = 1

            # Wrap-around of the sequence within a single millisecond could
            # land on an identifier that is still in use. Skip it.

            while correlation_id in self._pending:
                if attempts > _id_max - _id_min:
                    raise RuntimeError('correlation identifier space exhausted')
                correlation_id = _id_next()
                attempts += 1

            pending = PendingCall(correlation_id, timeout)
            self._pending[correlation_id] = pending

        return pending

    def lookup_and_remove(self, correlation_id: Optional[str]) -> Optional[PendingCall]:
        """ Take the :class:`PendingCall` for *correlation_id* out of the
            registry and return it. Returns None, with no other effect, if
            the identifier is unknown or was already removed.
        """

        with self._lock:
            return self._pending.pop(correlation_id, None)

    remove = lookup_and_remove

    def drain(self) -> List[PendingCall]:
        """ Remove and return every pending call.
        """

        with self._lock:
            drained = list(self._pending.values())
            self._pending.clear()

        return drained


# end of class CorrelationRegistry


# The sequence number wraps well before it could exceed the largest integer
# that a double can represent exactly, to stay compatible with peers that
# parse the identifier as a JavaScript number. The millisecond timestamp
# changes long before the sequence could be exhausted at any realistic call
# rate, which is what keeps a wrapped sequence from repeating an identifier.

_id_min = 1
_id_max = 2 ** 53 - 1
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def _timestamp():
    """ Milliseconds since the UNIX epoch. """

    return int(time.time() * 1000)


def _id_next():
    """ Return the next correlation identifier, of the form
        ``<milliseconds>.<sequence>``.
    """

    global _id_ticker

    with _id_lock:
        sequence = next(_id_ticker)

        if sequence >= _id_max:
            _id_ticker = itertools.count(_id_min)
            sequence = next(_id_ticker)

    return '%d.%d' % (_timestamp(), sequence)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
