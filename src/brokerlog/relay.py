""" A convenience wrapper tying one owner to one broker server, for hosts
    that prefer an object to the module-level functions in
    :mod:`brokerlog.lifecycle`.
"""

import copy

from . import config
from . import errors
from . import lifecycle


class Relay:
    """ Initialize the transport for *owner* and attach its publisher to
        *server*, which is either a :class:`brokerlog.config.Server` instance,
        the name of one defined with :func:`brokerlog.config.add`, or a
        connection string. A :class:`Relay` can be used as a context manager;
        leaving the block shuts the owner down.

        Example::

            with brokerlog.Relay('access', 'tcp://broker:5555') as relay:
                relay.emit('/access/', line)
    """

    def __init__(self, owner, server, iothreads=None, registry=None):

        if registry is None:
            registry = lifecycle.registry

        if isinstance(server, config.Server):
            pass
        elif str(server) in config.servers:
            server = config.get(server)
        else:
            server = config.Server(owner, server)

        # The Server may be a shared entry in config.servers; reconfigure()
        # must only affect this relay.

        server = copy.copy(server)

        self.owner = owner
        self.server = server
        self.registry = registry

        previous = registry.state(owner)
        registry.initialize(owner, iothreads)

        try:
            registry.attach_socket(owner, server.connection, server.queue_length, server.linger)
        except errors.BrokerlogError:
            # Only an owner this constructor initialized is shut down; an
            # owner that was already running keeps its working socket.
            if previous == lifecycle.State.UNINITIALIZED:
                registry.shutdown(owner)
            raise


    def __enter__(self):
        return self


    def __exit__(self, *exc):
        self.shutdown()
        return False


    def __repr__(self):
        return "Relay(%r, %r)" % (self.owner, self.server)


    @property
    def state(self):
        return self.registry.state(self.owner)


    def emit(self, destination, payload):
        return self.registry.emit(self.owner, destination, payload)


    def reconfigure(self, queue_length=None, linger=None):
        """ Re-apply socket options to the running publisher. Only the
            options are changed; the socket and its connection are kept.
        """

        if queue_length is not None:
            self.server.queue_length = int(queue_length)
        if linger is not None:
            self.server.linger = int(linger)

        server = self.server
        self.registry.attach_socket(self.owner, server.connection, server.queue_length, server.linger)


    def shutdown(self):
        self.registry.shutdown(self.owner)


# end of class Relay


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
