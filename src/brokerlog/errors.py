""" Exceptions raised by brokerlog. Every error is raised synchronously at
    configuration or initialization time; a send that cannot be delivered
    is reported as an :class:`brokerlog.publisher.Outcome`, never raised.
"""


class BrokerlogError(Exception):
    """ Base class for all brokerlog errors.
    """


class ContextMissing(BrokerlogError):
    """ A socket was requested, or an event emitted, for an owner that has
        no transport context.
    """


class SocketMissing(BrokerlogError):
    """ An event was emitted for an owner whose transport context exists
        but which has no publisher socket attached.
    """


class EngineInitFailed(BrokerlogError):
    """ The ZeroMQ context could not allocate its I/O threads.
    """


class SocketCreateFailed(BrokerlogError):
    """ The ZeroMQ context could not allocate a PUB socket.
    """


class OptionSetFailed(BrokerlogError):
    """ A socket option could not be applied. The name of the offending
        option is available as the *option* attribute.
    """

    def __init__(self, option, reason=None):

        self.option = option
        message = 'unable to set socket option ' + str(option)

        if reason is not None:
            message = message + ': ' + str(reason)

        BrokerlogError.__init__(self, message)


class ConnectFailed(BrokerlogError):
    """ The outbound connection to the broker address failed, or the address
        is malformed.
    """


class AllocationFailed(BrokerlogError):
    """ The framing routine could not obtain an output buffer.
    """


class AlreadyTerminated(BrokerlogError):
    """ The owner was already shut down; recreating its transport within the
        same process is not supported.
    """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
