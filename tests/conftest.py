import brokerlog
import pytest
import time


@pytest.fixture
def registry():

    # A private registry per test, so that owners shut down by one test
    # don't leak their CLOSED state into the next.

    registry = brokerlog.lifecycle.Registry()

    yield registry

    registry.shutdown_all()


@pytest.fixture
def subscriber():

    client = brokerlog.subscribe.Client('tcp://127.0.0.1:*')
    client.subscribe('')

    yield client

    client.close()


def _deliver(registry, owner, subscriber, destination, payload, timeout=2):
    """ PUB/SUB connections take a moment to establish, and anything sent
        before the subscription reaches the publisher is discarded. Keep
        emitting until the subscriber sees a frame, or give up after
        *timeout* seconds.
    """

    expires = time.time() + timeout

    while time.time() < expires:
        registry.emit(owner, destination, payload)
        frame = subscriber.recv(timeout=0.05)
        if frame is not None:
            return frame

    return None


@pytest.fixture
def deliver():
    return _deliver

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
