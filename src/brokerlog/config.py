""" Default settings for brokerlog, and a small registry of named broker
    servers. The defaults can be overridden with environment variables at
    import time:

        BROKERLOG_IOTHREADS     I/O threads per transport context.
        BROKERLOG_QUEUE_LENGTH  High-water mark for each publisher socket.
        BROKERLOG_LINGER        Milliseconds a closing socket may keep
                                flushing queued messages.
"""

import os
import threading

from . import errors


def _integer(name, default, minimum):

    value = os.environ.get(name)

    if value is None or value == '':
        return default

    try:
        value = int(value)
    except ValueError:
        raise ValueError("%s must be an integer, not %r" % (name, value))

    if value < minimum:
        raise ValueError("%s must be at least %d, not %d" % (name, minimum, value))

    return value


default_iothreads = _integer('BROKERLOG_IOTHREADS', 1, 1)
default_queue_length = _integer('BROKERLOG_QUEUE_LENGTH', 1000, 0)
default_linger = _integer('BROKERLOG_LINGER', 0, -1)


# ZeroMQ transports a publisher can dial out on.

schemes = set(('tcp', 'ipc', 'inproc', 'pgm', 'epgm', 'vmci', 'ws', 'wss'))


def validate(connection):
    """ Confirm the *connection* string looks like a ZeroMQ endpoint: a
        known transport scheme followed by a non-empty address. Returns the
        connection string; raises :class:`brokerlog.errors.ConnectFailed`
        if it does not.
    """

    if connection is None:
        raise errors.ConnectFailed('no connection string specified')

    connection = str(connection).strip()

    try:
        scheme, address = connection.split('://', 1)
    except ValueError:
        raise errors.ConnectFailed('malformed connection string: ' + repr(connection))

    if scheme not in schemes:
        raise errors.ConnectFailed('unsupported transport: ' + repr(scheme))

    if address == '':
        raise errors.ConnectFailed('no address in connection string: ' + repr(connection))

    return connection



class Server:
    """ A named broker this process publishes to. Each owner attaching a
        socket does so against one :class:`Server`. The *queue_length* and
        *linger* default to the module-level settings when not specified.
    """

    def __init__(self, name, connection, queue_length=None, linger=None):

        self.name = str(name)
        self.connection = validate(connection)

        if queue_length is None:
            queue_length = default_queue_length
        if linger is None:
            linger = default_linger

        self.queue_length = int(queue_length)
        self.linger = int(linger)


    def __repr__(self):
        return "Server(%r, %r)" % (self.name, self.connection)


# end of class Server



servers = dict()
_servers_lock = threading.Lock()


def add(name, connection, queue_length=None, linger=None):
    """ Define a named :class:`Server`. Redefining an existing name replaces
        the previous definition, and returns the new instance.
    """

    server = Server(name, connection, queue_length, linger)

    with _servers_lock:
        servers[server.name] = server

    return server



def get(name):
    """ Return the :class:`Server` previously defined with :func:`add`.
    """

    try:
        return servers[str(name)]
    except KeyError:
        raise KeyError('no server defined with name: ' + str(name))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
