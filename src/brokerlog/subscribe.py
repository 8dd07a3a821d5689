""" The receiving side of a brokerlog relay: a ZeroMQ SUB socket. Publishers
    dial out, so a subscriber (or the broker in front of the subscribers)
    is the side that binds.
"""

import atexit
import threading

import zmq

from loguru import logger

from . import framing

zmq_context = None
_context_lock = threading.Lock()


def _context():
    """ Return the ZeroMQ context shared by all subscribers, creating it on
        first use. Processes that only publish never allocate it.
    """

    global zmq_context

    with _context_lock:
        if zmq_context is None:
            zmq_context = zmq.Context()
            atexit.register(_cleanup)

        return zmq_context



class Client:
    """ Receive brokerlog frames on a SUB socket. By default the socket
        binds to *address*, which may use a wildcard port (``tcp://host:*``);
        the resolved endpoint is available as the *address* attribute
        afterwards. Set *bind* to False to connect to a broker's outbound
        side instead.

        Nothing is received until :func:`subscribe` is called, either with
        a destination prefix or with the empty string for everything.
    """

    def __init__(self, address, bind=True):

        self.socket = _context().socket(zmq.SUB)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket_lock = threading.Lock()

        if bind == True:
            self.socket.bind(address)
            address = self.socket.getsockopt_string(zmq.LAST_ENDPOINT)
        else:
            self.socket.connect(address)

        self.address = address
        self.subscriptions = list()
        logger.debug("SUB socket {} {}", 'bound to' if bind else 'connected to', address)


    def _poll_flush(self, timeout=0.01):
        """ Poll the socket briefly so a new subscription has a chance to
            propagate before the caller starts relying on it. This is not
            deterministic; it only narrows the window where early frames
            are missed. The *timeout* is in seconds.
        """

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN|zmq.POLLOUT)
        poller.poll(timeout * 1000)


    def subscribe(self, destination=b''):
        """ Receive frames whose leading bytes match *destination*. The empty
            string subscribes to all frames.
        """

        try:
            destination.decode
        except AttributeError:
            destination = str(destination)
            destination = destination.encode('utf-8')

        with self.socket_lock:
            self.socket.setsockopt(zmq.SUBSCRIBE, destination)

        self.subscriptions.append(destination)
        self._poll_flush()


    def recv(self, timeout=None):
        """ Return the next frame as bytes, waiting at most *timeout* seconds;
            None is returned if nothing arrived in time. With no *timeout*
            this waits indefinitely.
        """

        if timeout is None:
            with self.socket_lock:
                return self.socket.recv()

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        ready = dict(poller.poll(timeout * 1000))

        if self.socket in ready:
            with self.socket_lock:
                return self.socket.recv(zmq.NOBLOCK)

        return None


    def recv_payload(self, destination, timeout=None):
        """ Receive the next frame and strip the known *destination* from
            it, returning the payload. See :func:`brokerlog.framing.split`.
        """

        frame = self.recv(timeout)

        if frame is None:
            return None

        return framing.split(frame, destination)


    def close(self):
        with self.socket_lock:
            self.socket.close(linger=0)


# end of class Client



def _cleanup():

    global zmq_context

    with _context_lock:
        context = zmq_context
        zmq_context = None

    if context is not None:
        context.destroy(linger=0)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
