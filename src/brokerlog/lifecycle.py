""" Lifecycle management for brokerlog owners. An owner is the scope, for
    example one configuration block of the host, that exclusively holds one
    :class:`brokerlog.context.TransportContext` and at most one
    :class:`brokerlog.publisher.Publisher`. Each owner moves through a
    fixed sequence of states:

        UNINITIALIZED -> CONTEXT_READY -> SOCKET_READY -> CLOSED

    :func:`initialize`, :func:`attach_socket` and :func:`shutdown` are meant
    to be called from the single-threaded startup and shutdown phases of the
    host process; they are not safe to call concurrently for the same owner.
    The per-owner lock only guards against accidents, it does not make
    concurrent creation meaningful. :func:`emit` may be called from any
    number of threads once the owner is SOCKET_READY.
"""

import atexit
import enum
import threading

from loguru import logger

from . import errors
from . import framing
from .context import TransportContext
from .publisher import Publisher


class State(enum.Enum):
    UNINITIALIZED = 'uninitialized'
    CONTEXT_READY = 'context ready'
    SOCKET_READY = 'socket ready'
    CLOSED = 'closed'



class Owner:
    """ The lifecycle record for a single *owner*: its current *state*, its
        transport *context*, and its *publisher*.
    """

    def __init__(self, owner):

        self.owner = owner
        self.state = State.UNINITIALIZED
        self.lock = threading.Lock()

        self.context = TransportContext(owner)
        self.publisher = Publisher(self.context)


    def __repr__(self):
        return "Owner(%r, %s)" % (self.owner, self.state.name)


    def initialize(self, iothreads=None):
        """ Create the transport context, returning the :class:`zmq.Context`
            handle. Repeat calls return the existing handle.
        """

        with self.lock:
            state = self.state

            if state == State.CLOSED:
                raise errors.AlreadyTerminated(repr(self.owner) + ' was already shut down')

            if state == State.UNINITIALIZED:
                handle = self.context.create(iothreads)
                self.state = State.CONTEXT_READY
                return handle

            logger.debug("{!r}: initialize() in state {}, nothing to do", self.owner, state.name)
            return self.context.handle


    def attach_socket(self, connection, queue_length=None, linger=None):
        """ Create the publisher socket and connect it to *connection*. If
            the socket already exists, the options are applied again.
        """

        with self.lock:
            state = self.state

            if state == State.UNINITIALIZED:
                raise errors.ContextMissing('no transport context for ' + repr(self.owner))

            if state == State.CLOSED:
                raise errors.AlreadyTerminated(repr(self.owner) + ' was already shut down')

            self.publisher.create(connection, queue_length, linger)

            if self.publisher.created:
                self.state = State.SOCKET_READY


    def emit(self, destination, payload):
        """ Frame *payload* for *destination* and send it without blocking.
            Returns a :class:`brokerlog.publisher.Outcome`.
        """

        state = self.state

        if state == State.SOCKET_READY:
            pass
        elif state == State.UNINITIALIZED:
            raise errors.ContextMissing('no transport context for ' + repr(self.owner))
        elif state == State.CONTEXT_READY:
            raise errors.SocketMissing('no publisher socket for ' + repr(self.owner))
        else:
            raise errors.AlreadyTerminated(repr(self.owner) + ' was already shut down')

        frame = framing.serialize(destination, payload)
        return self.publisher.send(frame)


    def terminate(self):
        """ Close the publisher socket, then terminate the transport context.
            The socket must always be closed first: terminating a ZeroMQ
            context with open sockets blocks indefinitely. Safe to call in
            any state, any number of times.
        """

        with self.lock:
            state = self.state

            if state == State.UNINITIALIZED or state == State.CLOSED:
                return

            self.state = State.CLOSED
            self.publisher.close()
            self.context.terminate()

        logger.debug("{!r}: shut down", self.owner)


# end of class Owner



class Registry:
    """ Map owner identities to their :class:`Owner` records. Owners are
        created by :func:`initialize` and never removed, so that a shut-down
        owner stays CLOSED for the rest of the process.
    """

    def __init__(self):
        self.owners = dict()
        self.owners_lock = threading.Lock()


    def __contains__(self, owner):
        return owner in self.owners


    def __getitem__(self, owner):

        try:
            return self.owners[owner]
        except KeyError:
            pass

        with self.owners_lock:
            try:
                record = self.owners[owner]
            except KeyError:
                record = Owner(owner)
                self.owners[owner] = record

        return record


    def state(self, owner):
        try:
            record = self.owners[owner]
        except KeyError:
            return State.UNINITIALIZED

        return record.state


    def initialize(self, owner, iothreads=None):
        return self[owner].initialize(iothreads)


    def attach_socket(self, owner, connection, queue_length=None, linger=None):

        try:
            record = self.owners[owner]
        except KeyError:
            raise errors.ContextMissing('no transport context for ' + repr(owner))

        record.attach_socket(connection, queue_length, linger)


    def emit(self, owner, destination, payload):

        try:
            record = self.owners[owner]
        except KeyError:
            raise errors.ContextMissing('no transport context for ' + repr(owner))

        return record.emit(destination, payload)


    def shutdown(self, owner):

        try:
            record = self.owners[owner]
        except KeyError:
            return

        record.terminate()


    def shutdown_all(self):

        with self.owners_lock:
            records = list(self.owners.values())

        for record in records:
            try:
                record.terminate()
            except Exception:
                logger.exception("{!r}: error during shutdown", record.owner)


# end of class Registry



registry = Registry()


def initialize(owner, iothreads=None):
    """ Create the transport context for *owner* with *iothreads* I/O
        threads. Returns the :class:`zmq.Context`. Idempotent; raises
        :class:`brokerlog.errors.AlreadyTerminated` after :func:`shutdown`.
    """

    return registry.initialize(owner, iothreads)



def attach_socket(owner, connection, queue_length=None, linger=None):
    """ Create the publisher socket for *owner* and connect it to the broker
        at *connection*. *queue_length* is the high-water mark and *linger*
        the close grace period in milliseconds; either defaults to the
        values in :mod:`brokerlog.config`. A repeat call re-applies the
        options to the existing socket.
    """

    registry.attach_socket(owner, connection, queue_length, linger)



def emit(owner, destination, payload):
    """ Send one event for *owner*. Returns a
        :class:`brokerlog.publisher.Outcome`; a full queue results in
        ``Outcome.DROPPED``, never in blocking.
    """

    return registry.emit(owner, destination, payload)



def shutdown(owner):
    """ Close the socket and terminate the context for *owner*, in that
        order. Safe to call repeatedly.
    """

    registry.shutdown(owner)



def state(owner):
    return registry.state(owner)



def _cleanup():
    registry.shutdown_all()


atexit.register(_cleanup)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
