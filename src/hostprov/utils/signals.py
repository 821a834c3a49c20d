"""Signal masking for runs that must not be cut short."""

import signal
from collections.abc import Iterator
from contextlib import contextmanager

# A dropped SSH session delivers SIGHUP; an operator may send INT or TERM.
IGNORED_SIGNALS = (signal.SIGTERM, signal.SIGINT, signal.SIGHUP)


@contextmanager
def signals_ignored(signals: tuple[signal.Signals, ...] = IGNORED_SIGNALS) -> Iterator[None]:
    """Ignore termination signals for the duration of the block.

    Previous handlers are restored on exit.
    """
    previous = {}
    for signum in signals:
        previous[signum] = signal.signal(signum, signal.SIG_IGN)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            # None means the handler was installed outside Python
            signal.signal(signum, signal.SIG_DFL if handler is None else handler)
