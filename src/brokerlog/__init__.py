""" Python implementation of brokerlog: relay discrete event records, such
    as access-log entries, from a request-handling host to downstream
    subscribers over a ZeroMQ PUB socket, without ever blocking the host.

    Logging goes through loguru and is disabled by default; a host that
    wants to see it calls ``loguru.logger.enable('brokerlog')``.
"""

from loguru import logger
logger.disable(__name__)

# Utility components.

from . import errors
from . import config
from . import framing

# Transport machinery.

from . import context
from . import publisher
from . import lifecycle
from . import subscribe

# Primary public-facing interfaces.

from .errors import BrokerlogError, ContextMissing, SocketMissing, EngineInitFailed
from .errors import SocketCreateFailed, OptionSetFailed, ConnectFailed
from .errors import AllocationFailed, AlreadyTerminated
from .framing import serialize
from .publisher import Outcome
from .lifecycle import State, initialize, attach_socket, emit, shutdown
from .relay import Relay

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
