""" The :class:`TransportContext` owns the ZeroMQ context for one owner.
    The context pins its I/O threads for as long as it lives; that cost is
    paid once per owner, not per message.
"""

import zmq

from loguru import logger

from . import config
from . import errors


class TransportContext:
    """ Wrapper around a single :class:`zmq.Context` for the named *owner*.
        The context is not allocated until :func:`create` is called. The
        *handle* attribute is None until then, and again after
        :func:`terminate`.

        :ivar handle: The :class:`zmq.Context`, or None.
        :ivar iothreads: The number of I/O threads requested at creation.
    """

    def __init__(self, owner):

        self.owner = owner
        self.handle = None
        self.iothreads = None
        self.terminated = False


    def __repr__(self):
        return "TransportContext(%r, iothreads=%r, created=%r)" % (self.owner, self.iothreads, self.created)


    @property
    def created(self):
        return self.handle is not None


    def create(self, iothreads=None):
        """ Allocate the ZeroMQ context with *iothreads* background threads,
            returning the :class:`zmq.Context`. Calling this again after a
            successful creation returns the existing context; the requested
            thread count is not re-applied.
        """

        if self.terminated == True:
            raise errors.AlreadyTerminated('transport context already terminated for ' + repr(self.owner))

        if self.handle is not None:
            logger.debug("{!r}: transport context already created", self.owner)
            return self.handle

        if iothreads is None:
            iothreads = config.default_iothreads

        iothreads = int(iothreads)
        if iothreads < 1:
            raise ValueError('iothreads must be a positive integer, not ' + str(iothreads))

        try:
            handle = zmq.Context(io_threads=iothreads)
        except zmq.ZMQError as e:
            logger.error("{!r}: zmq.Context({}) failed: {}", self.owner, iothreads, e)
            raise errors.EngineInitFailed("unable to create a context with %d I/O threads" % (iothreads)) from e

        self.iothreads = iothreads
        self.handle = handle

        logger.debug("{!r}: transport context created with {} I/O threads", self.owner, iothreads)
        return handle


    def terminate(self):
        """ Terminate the ZeroMQ context. All sockets created against it
            must already be closed; see :class:`brokerlog.lifecycle.Owner`,
            which enforces that ordering. Calling this more than once, or
            without a prior :func:`create`, is a no-op.
        """

        handle = self.handle

        if handle is None:
            return

        self.handle = None
        self.terminated = True

        handle.term()
        logger.debug("{!r}: transport context terminated", self.owner)


# end of class TransportContext


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
