import errno
import brokerlog
import pytest
import time
import zmq

from brokerlog.publisher import Outcome, Publisher


@pytest.fixture
def context():

    context = brokerlog.context.TransportContext('stratus')
    context.create(1)

    yield context

    context.terminate()


@pytest.fixture
def publisher(context):

    publisher = Publisher(context)

    yield publisher

    publisher.close()


def unused_endpoint():
    """ Return a TCP endpoint that nobody is listening on.
    """

    context = zmq.Context.instance()
    socket = context.socket(zmq.PULL)
    socket.bind('tcp://127.0.0.1:*')
    endpoint = socket.getsockopt_string(zmq.LAST_ENDPOINT)
    socket.close(linger=0)

    return endpoint


def test_context_missing():

    context = brokerlog.context.TransportContext('stratus')
    publisher = Publisher(context)

    with pytest.raises(brokerlog.ContextMissing):
        publisher.create('tcp://127.0.0.1:5555')

    assert publisher.created == False


def test_create(publisher):

    endpoint = unused_endpoint()
    publisher.create(endpoint, queue_length=10, linger=5)

    assert publisher.created == True
    assert publisher.socket.type == zmq.PUB
    assert publisher.socket.getsockopt(zmq.SNDHWM) == 10
    assert publisher.socket.getsockopt(zmq.LINGER) == 5
    assert publisher.endpoints == [endpoint]


def test_defaults(publisher):

    publisher.create(unused_endpoint())

    assert publisher.queue_length == brokerlog.config.default_queue_length
    assert publisher.linger == brokerlog.config.default_linger
    assert publisher.socket.getsockopt(zmq.SNDHWM) == brokerlog.config.default_queue_length


def test_create_twice(publisher):
    """ A second create() keeps the socket, but applies the new options.
    """

    endpoint = unused_endpoint()
    publisher.create(endpoint, queue_length=10, linger=5)
    socket = publisher.socket

    publisher.create(endpoint, queue_length=20, linger=7)

    assert publisher.socket is socket
    assert socket.getsockopt(zmq.SNDHWM) == 20
    assert socket.getsockopt(zmq.LINGER) == 7
    assert publisher.queue_length == 20
    assert publisher.linger == 7

    # The same endpoint is not connected twice.
    assert publisher.endpoints == [endpoint]


def test_socket_create_failure(monkeypatch, publisher):

    def exhausted(*args, **kwargs):
        raise zmq.ZMQError(errno.EMFILE)

    monkeypatch.setattr(zmq.Context, 'socket', exhausted)

    with pytest.raises(brokerlog.SocketCreateFailed):
        publisher.create('tcp://127.0.0.1:5555')

    assert publisher.created == False


def test_option_failure(publisher):

    with pytest.raises(brokerlog.OptionSetFailed) as failure:
        publisher.create(unused_endpoint(), linger=-2)

    assert failure.value.option == 'LINGER'

    with pytest.raises(brokerlog.OptionSetFailed) as failure:
        publisher.create(unused_endpoint(), queue_length=-1)

    assert failure.value.option == 'SNDHWM'


def test_connect_failure(publisher):

    # Rejected before ZeroMQ ever sees it.

    with pytest.raises(brokerlog.ConnectFailed):
        publisher.create('bogus://127.0.0.1:5555')

    assert publisher.created == False

    # Rejected by ZeroMQ: no port number.

    with pytest.raises(brokerlog.ConnectFailed):
        publisher.create('tcp://127.0.0.1')

    assert publisher.created == False
    assert publisher.endpoints == []
    assert publisher.send(b'frame') == Outcome.ERROR


def test_connect_failure_existing_socket(publisher):
    """ A failed connect on an already working socket leaves that socket
        alone; only a socket created by the failing call is discarded.
    """

    endpoint = unused_endpoint()
    publisher.create(endpoint)
    socket = publisher.socket

    with pytest.raises(brokerlog.ConnectFailed):
        publisher.create('tcp://127.0.0.1')

    assert publisher.socket is socket
    assert publisher.endpoints == [endpoint]


def test_send_without_peers(publisher):
    """ With nobody on the other end a PUB socket discards frames; the
        caller is never blocked.
    """

    publisher.create(unused_endpoint(), queue_length=1)

    begin = time.time()

    for count in range(10000):
        outcome = publisher.send(b'/stratus/' + str(count).encode())
        assert outcome in (Outcome.SENT, Outcome.DROPPED)

    elapsed = time.time() - begin
    assert elapsed < 5


def test_high_water_mark(context, publisher):
    """ Once the queue is full, further frames are discarded instead of
        blocking the sender. A PUB socket never raises zmq.Again, so the
        discard is silent: every send reports SENT, and the only evidence
        of the drop is what the subscriber does not receive.

        The subscriber is an inproc peer on the same context, so there are
        no kernel socket buffers between the two; the only room for queued
        frames is the high-water mark on each end.
    """

    endpoint = 'inproc://high-water-mark-%d' % (id(context))

    receiver = context.handle.socket(zmq.SUB)
    receiver.setsockopt(zmq.LINGER, 0)
    receiver.setsockopt(zmq.RCVHWM, 1)
    receiver.setsockopt(zmq.SUBSCRIBE, b'')
    receiver.bind(endpoint)

    poller = zmq.Poller()
    poller.register(receiver, zmq.POLLIN)

    def drain():
        received = list()
        while poller.poll(200):
            received.append(receiver.recv())
        return received

    try:
        publisher.create(endpoint, queue_length=1)

        # Wait for the subscription to reach the publisher, otherwise
        # everything below is discarded for lack of a subscriber.

        connected = False
        expires = time.time() + 2
        while connected == False and time.time() < expires:
            publisher.send(b'/warmup/')
            connected = bool(poller.poll(50))

        assert connected == True
        drain()

        # Nobody reads while the burst goes out.

        sent = 1000
        outcomes = list()

        begin = time.time()
        for count in range(sent):
            outcomes.append(publisher.send(b'/stratus/' + str(count).encode()))
        elapsed = time.time() - begin

        assert elapsed < 5
        for outcome in outcomes:
            assert outcome == Outcome.SENT

        received = drain()

        assert len(received) >= 1
        assert len(received) <= 4
        assert received[0] == b'/stratus/0'
    finally:
        receiver.close(linger=0)


def test_send_error(publisher):

    class Broken:
        def send(self, frame, flags=0):
            raise zmq.ZMQError(zmq.ENOTSUP)

        def close(self, linger=None):
            pass

    publisher.socket = Broken()
    assert publisher.send(b'frame') == Outcome.ERROR

    class Full(Broken):
        def send(self, frame, flags=0):
            raise zmq.Again()

    publisher.socket = Full()
    assert publisher.send(b'frame') == Outcome.DROPPED


def test_close(publisher):

    publisher.create(unused_endpoint(), linger=0)
    socket = publisher.socket

    publisher.close()

    assert publisher.created == False
    assert socket.closed == True
    assert publisher.endpoints == []
    assert publisher.send(b'frame') == Outcome.ERROR

    # Closing again is a no-op.
    publisher.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
