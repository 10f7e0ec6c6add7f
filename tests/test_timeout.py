import pytest
import time

from porthos import CallTimeout
from porthos.pending import CorrelationRegistry
from porthos.protocol.message import Response
from porthos.timeout import TimeoutSupervisor


@pytest.fixture
def registry():
    return CorrelationRegistry()


@pytest.fixture
def supervisor(registry):

    supervisor = TimeoutSupervisor(registry)

    yield supervisor

    supervisor.stop()


def test_expiry(registry, supervisor):

    call = registry.register(0.01)
    supervisor.arm(call)
    assert len(supervisor) == 1

    begin = time.monotonic()

    with pytest.raises(CallTimeout) as raised:
        call.future.result(timeout=1)

    elapsed = time.monotonic() - begin

    assert elapsed < 0.5
    assert raised.value.correlation_id == call.correlation_id
    assert raised.value.timeout == 0.01
    assert raised.value.timed_out == True
    assert isinstance(raised.value, TimeoutError)

    assert call.correlation_id not in registry
    assert len(supervisor) == 0


def test_deadline_order(registry, supervisor):
    """ A short deadline armed after a long one still fires first.
    """

    slow = registry.register(10)
    fast = registry.register(0.01)

    supervisor.arm(slow)
    supervisor.arm(fast)

    with pytest.raises(CallTimeout):
        fast.future.result(timeout=1)

    assert slow.settled == False
    assert slow.correlation_id in registry


def test_release(registry, supervisor):

    call = registry.register(0.01)
    supervisor.arm(call)

    # Settled by some other path: taken out of the registry first, then
    # released.

    assert registry.lookup_and_remove(call.correlation_id) is call
    supervisor.release(call)
    call.succeed(Response(b'someContent', None, 200))

    assert len(supervisor) == 0

    time.sleep(0.05)
    assert call.future.result().content == b'someContent'


def test_lost_race(registry, supervisor, errors):
    """ The deadline fires for a call that is already out of the registry
        but whose deadline was never released. The presence check alone
        keeps the timeout from touching it.
    """

    call = registry.register(0.01)
    supervisor.arm(call)

    registry.lookup_and_remove(call.correlation_id)
    call.succeed(Response(b'someContent', None, 200))

    time.sleep(0.05)

    assert call.future.result().content == b'someContent'
    assert len(supervisor) == 0
    assert errors == []


def test_expire_unknown(registry, supervisor):

    supervisor.expire('no.such.id')
    assert len(registry) == 0


def test_far_deadline(registry, supervisor, errors):
    """ A deadline further out than the thread can wait for at once is
        waited for in steps; nearer deadlines keep firing meanwhile.
    """

    distant = registry.register(1e12)
    supervisor.arm(distant)

    time.sleep(0.05)

    soon = registry.register(0.01)
    supervisor.arm(soon)

    with pytest.raises(CallTimeout):
        soon.future.result(timeout=1)

    assert supervisor.thread.is_alive() == True
    assert distant.settled == False
    assert len(supervisor) == 1
    assert errors == []


def test_stop(registry):

    supervisor = TimeoutSupervisor(registry)
    call = registry.register(0.05)
    supervisor.arm(call)

    supervisor.stop()
    assert supervisor.thread.is_alive() == False

    time.sleep(0.1)
    assert call.settled == False


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
