""" Per-call deadlines. A single background thread per client tracks every
    armed deadline and fails calls that outlive them.
"""

import heapq
import itertools
import threading
import time

from loguru import logger

from .errors import CallTimeout


# The longest single wait on the alarm, in seconds. Deadlines further out
# than this are picked up again on a later pass through the loop.
_longest_wait = 60.0


class TimeoutSupervisor:
    """ Arm a deadline for each registered call; when a deadline passes,
        take the call out of the *registry* and fail it with
        :class:`porthos.errors.CallTimeout`. If the call is no longer in the
        registry the reply got there first, and nothing happens.

        Releasing a deadline via :func:`release` is best effort. The
        registry's atomic removal is what guarantees that a call settles
        only once.
    """

    def __init__(self, registry):

        self.registry = registry
        self.shutdown = False

        self._heap = list()
        self._armed = dict()
        self._lock = threading.Lock()
        self._tiebreak = itertools.count()

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def __len__(self):
        """ The number of deadlines currently armed. """

        with self._lock:
            return len(self._armed)


    def arm(self, pending):
        """ Start the clock for the :class:`porthos.pending.PendingCall`
            *pending*, which times out at its *deadline*.
        """

        correlation_id = pending.correlation_id

        with self._lock:
            self._armed[correlation_id] = pending
            entry = (pending.deadline, next(self._tiebreak), correlation_id, pending)
            heapq.heappush(self._heap, entry)

        # The new deadline may be sooner than whatever the thread is
        # currently waiting for.

        self.alarm.set()


    def release(self, pending):
        """ Forget the deadline for a call that settled some other way.
        """

        with self._lock:
            if self._armed.get(pending.correlation_id) is pending:
                del self._armed[pending.correlation_id]


    def expire(self, correlation_id):
        """ The deadline for *correlation_id* passed. Fail the call if it is
            still pending.
        """

        pending = self.registry.remove(correlation_id)

        if pending is None:
            # Already settled by a reply.
            return

        logger.debug("call.timeout correlation_id={} timeout={}", correlation_id, pending.timeout)
        pending.fail(CallTimeout(correlation_id, pending.timeout))


    def run(self):

        while self.shutdown == False:

            # Clear the alarm before looking at the heap: an arm() that
            # lands after this point will cut the wait below short.

            self.alarm.clear()

            now = time.monotonic()
            expired = list()
            delay = None

            with self._lock:
                heap = self._heap
                while heap and heap[0][0] <= now:
                    _deadline, _tiebreak, correlation_id, pending = heapq.heappop(heap)
                    if self._armed.get(correlation_id) is pending:
                        del self._armed[correlation_id]
                        expired.append(correlation_id)

                if heap:
                    delay = heap[0][0] - now

            for correlation_id in expired:
                try:
                    self.expire(correlation_id)
                except Exception:
                    logger.exception("call.timeout.error correlation_id={}", correlation_id)

            if delay is None or delay > _longest_wait:
                delay = _longest_wait

            try:
                self.alarm.wait(delay)
            except Exception:
                logger.exception("call.timeout.wait.error delay={}", delay)


    def stop(self):
        """ Stop the background thread. Deadlines still armed never fire.
        """

        self.shutdown = True
        self.alarm.set()

        if threading.current_thread() is not self.thread:
            self.thread.join(1)

        with self._lock:
            self._heap.clear()
            self._armed.clear()


# end of class TimeoutSupervisor


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
