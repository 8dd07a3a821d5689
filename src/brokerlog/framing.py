""" Framing for brokerlog messages. A frame on the wire is the destination
    immediately followed by the payload:

        destination = b'/stratus/', payload = b"{'num':1}"
        frame       = b"/stratus/{'num':1}"

    There is no delimiter and no length prefix. A receiver has to know where
    the destination ends by some other convention, typically a fixed
    destination per subscription; ZeroMQ prefix subscriptions match on the
    leading bytes of the frame, which is why the destination comes first.
"""

from . import errors


def _as_bytes(value, name):

    try:
        value.decode
    except AttributeError:
        pass
    else:
        return bytes(value)

    if isinstance(value, str):
        return value.encode('utf-8')

    try:
        return bytes(memoryview(value))
    except TypeError:
        raise TypeError("%s must be bytes-like or str, not %s" % (name, type(value).__name__))



def serialize(destination, payload):
    """ Return the wire frame for *payload* addressed to *destination*. Both
        arguments are opaque byte sequences; a :class:`str` is encoded as
        UTF-8. Embedded zero bytes survive unchanged. The length of the
        frame is always the sum of the two input lengths.

        Raises :class:`brokerlog.errors.AllocationFailed` if the frame could
        not be allocated.
    """

    destination = _as_bytes(destination, 'destination')
    payload = _as_bytes(payload, 'payload')

    try:
        frame = destination + payload
    except MemoryError:
        raise errors.AllocationFailed("unable to allocate a %d byte frame" % (len(destination) + len(payload)))

    return frame



def split(frame, destination):
    """ Recover the payload from a *frame* known to be addressed to
        *destination*. This is the receiving half of the fixed-destination
        convention; a ValueError is raised if the frame does not begin with
        the destination.
    """

    frame = _as_bytes(frame, 'frame')
    destination = _as_bytes(destination, 'destination')

    if frame.startswith(destination):
        pass
    else:
        raise ValueError("frame is not addressed to %r" % (destination,))

    return frame[len(destination):]


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
