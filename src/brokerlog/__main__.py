""" Command line access to brokerlog. Two subcommands are provided:

        python -m brokerlog emit tcp://broker:5555 /access/ 'payload'
        python -m brokerlog listen 'tcp://*:5555' --prefix /access/

    With no payload argument, ``emit`` publishes one frame per line of
    standard input.
"""

import argparse
import sys
import time

from loguru import logger

from . import config
from . import lifecycle
from . import subscribe
from .publisher import Outcome

# A one-shot command exits right after sending; its socket is given this
# many milliseconds to flush unless told otherwise.

emit_linger = 1000


def main(arguments=None):

    parser = argparse.ArgumentParser(prog='brokerlog',
        description='Publish or receive brokerlog frames over ZeroMQ.')
    parser.add_argument('-v', '--verbose', action='store_true',
        help='Enable debug logging on standard error')

    subparsers = parser.add_subparsers(dest='command', required=True)

    emit = subparsers.add_parser('emit', help='Publish frames to a broker')
    emit.add_argument('connection', help='Broker address, for example tcp://localhost:5555')
    emit.add_argument('destination', help='Destination prepended to each payload')
    emit.add_argument('payload', nargs='?', default=None,
        help='Payload to send; read one per line from stdin if omitted')
    emit.add_argument('--queue-length', type=int, default=config.default_queue_length,
        help='High-water mark for the publisher socket (default: %(default)s)')
    emit.add_argument('--linger', type=int, default=emit_linger,
        help='Milliseconds to keep flushing on exit (default: %(default)s)')
    emit.add_argument('--iothreads', type=int, default=config.default_iothreads,
        help='ZeroMQ I/O threads (default: %(default)s)')

    listen = subparsers.add_parser('listen', help='Bind a SUB socket and print frames')
    listen.add_argument('address', help='Address to bind, for example tcp://*:5555')
    listen.add_argument('--prefix', action='append', default=None,
        help='Destination prefix to subscribe to; may be repeated')
    listen.add_argument('--connect', action='store_true',
        help='Connect to the address instead of binding it')

    parsed = parser.parse_args(arguments)

    logger.remove()
    logger.enable('brokerlog')

    if parsed.verbose:
        logger.add(sys.stderr, level='DEBUG')
    else:
        logger.add(sys.stderr, level='WARNING')

    if parsed.command == 'emit':
        return run_emit(parsed)
    else:
        return run_listen(parsed)



def run_emit(parsed):

    owner = 'cli'

    linger = parsed.linger

    if parsed.payload is None:
        payloads = (line.rstrip('\n') for line in sys.stdin)
    else:
        payloads = (parsed.payload,)

    dropped = 0
    lifecycle.initialize(owner, parsed.iothreads)

    try:
        lifecycle.attach_socket(owner, parsed.connection, parsed.queue_length, linger)

        # PUB sockets discard anything sent before the connection completes.
        time.sleep(0.1)

        for payload in payloads:
            outcome = lifecycle.emit(owner, parsed.destination, payload)
            if outcome != Outcome.SENT:
                dropped += 1
    finally:
        lifecycle.shutdown(owner)

    if dropped:
        print("%d frame(s) not sent" % (dropped), file=sys.stderr)
        return 1

    return 0



def run_listen(parsed):

    client = subscribe.Client(parsed.address, bind=not parsed.connect)

    prefixes = parsed.prefix
    if prefixes is None:
        prefixes = ('',)

    for prefix in prefixes:
        client.subscribe(prefix)

    print('listening on ' + client.address, file=sys.stderr)

    try:
        while True:
            frame = client.recv()
            sys.stdout.write(frame.decode('utf-8', errors='replace') + '\n')
            sys.stdout.flush()
    except KeyboardInterrupt:
        pass
    finally:
        client.close()

    return 0



if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
