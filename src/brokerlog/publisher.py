""" The outbound side of brokerlog: a single ZeroMQ PUB socket per owner,
    dialing out to a broker or proxy. Sends never block; when the socket's
    high-water mark is reached ZeroMQ drops the message instead.
"""

import enum
import threading

import zmq

from loguru import logger

from . import config
from . import errors


class Outcome(enum.Enum):
    """ The result of a single send. A drop is not an error: it is the
        expected behavior under backpressure.
    """

    SENT = 'sent'
    DROPPED = 'dropped'
    ERROR = 'error'



class Publisher:
    """ Manage the PUB socket for the owner of the supplied *context*, a
        :class:`brokerlog.context.TransportContext` instance. The socket is
        not created until :func:`create` is called.

        :ivar socket: The :class:`zmq.Socket`, or None.
        :ivar linger: The linger period in milliseconds last applied.
        :ivar queue_length: The high-water mark last applied.
        :ivar endpoints: Connection strings this socket has connected to.
    """

    def __init__(self, context):

        self.context = context
        self.socket = None
        self.socket_lock = threading.Lock()

        self.linger = None
        self.queue_length = None
        self.endpoints = list()


    def __repr__(self):
        return "Publisher(%r, endpoints=%r)" % (self.context.owner, self.endpoints)


    @property
    def created(self):
        return self.socket is not None


    @property
    def owner(self):
        return self.context.owner


    def create(self, connection, queue_length=None, linger=None):
        """ Create the PUB socket if it does not already exist, apply the
            *linger* (milliseconds) and *queue_length* (high-water mark)
            options, and connect to *connection*.

            If the socket already exists no new socket is created, but the
            options are applied again; this is how a running publisher is
            reconfigured. A *connection* the socket is already connected to
            is not connected a second time.

            Any failure to connect closes a socket that was created by this
            call, so that no half-configured socket is left behind.
        """

        handle = self.context.handle

        if handle is None:
            raise errors.ContextMissing('no transport context for ' + repr(self.owner))

        if linger is None:
            linger = config.default_linger
        if queue_length is None:
            queue_length = config.default_queue_length

        linger = int(linger)
        queue_length = int(queue_length)

        fresh = False

        if self.socket is None:
            try:
                self.socket = handle.socket(zmq.PUB)
            except zmq.ZMQError as e:
                logger.error("{!r}: PUB socket not created: {}", self.owner, e)
                raise errors.SocketCreateFailed('unable to create a PUB socket for ' + repr(self.owner)) from e

            fresh = True
            logger.debug("{!r}: PUB socket created", self.owner)

        self._setsockopt('LINGER', zmq.LINGER, linger)
        self.linger = linger

        self._setsockopt('SNDHWM', zmq.SNDHWM, queue_length)
        self.queue_length = queue_length

        try:
            self._connect(connection)
        except errors.ConnectFailed:
            if fresh == True:
                self.close()
            raise


    def _setsockopt(self, name, option, value):

        try:
            self.socket.setsockopt(option, value)
        except zmq.ZMQError as e:
            logger.error("{!r}: error setting {} to {}: {}", self.owner, name, value, e)
            raise errors.OptionSetFailed(name, e) from e


    def _connect(self, connection):

        connection = config.validate(connection)

        if connection in self.endpoints:
            logger.debug("{!r}: already connected to {}", self.owner, connection)
            return

        try:
            self.socket.connect(connection)
        except zmq.ZMQError as e:
            logger.error("{!r}: error connecting to {}: {}", self.owner, connection, e)
            raise errors.ConnectFailed('unable to connect to ' + connection) from e

        self.endpoints.append(connection)
        logger.debug("{!r}: connected to {}", self.owner, connection)


    def send(self, frame):
        """ Send a single *frame* without blocking, returning an
            :class:`Outcome`. No exception is raised for a failed send; the
            caller is never stalled by log delivery.
        """

        socket = self.socket

        if socket is None:
            return Outcome.ERROR

        # ZeroMQ sockets are not thread-safe. Concurrent request handlers
        # share this one socket, so the send itself is serialized; it never
        # waits on the network.

        with self.socket_lock:
            try:
                socket.send(frame, zmq.NOBLOCK)
            except zmq.Again:
                return Outcome.DROPPED
            except zmq.ZMQError as e:
                logger.warning("{!r}: send failed: {}", self.owner, e)
                return Outcome.ERROR

        return Outcome.SENT


    def close(self):
        """ Close the socket. Queued messages are flushed for at most the
            configured linger period. Calling this when no socket exists is
            a no-op.
        """

        with self.socket_lock:
            socket = self.socket
            self.socket = None

        if socket is None:
            return

        socket.close(linger=self.linger)
        self.endpoints = list()
        logger.debug("{!r}: PUB socket closed", self.owner)


# end of class Publisher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
