"""System log setup.

Status lines go to syslog the way ``logger(1)`` would send them, so an
operator can audit a run with ``journalctl -t hostprov``.
"""

import logging
import logging.handlers
import os
import stat

LOGGER_NAME = "hostprov"
SYSLOG_IDENT = "hostprov: "

logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def setup_logging(syslog_address: str | None = "/dev/log") -> bool:
    """Attach a syslog handler to the hostprov logger.

    Args:
        syslog_address: Unix socket path of the syslog daemon, or None to
            skip syslog entirely.

    Returns:
        True if the syslog handler was attached, False if the socket is
        unavailable.
    """
    logger.setLevel(logging.INFO)

    # Avoid duplicate handlers
    for handler in list(logger.handlers):
        if isinstance(handler, logging.handlers.SysLogHandler):
            logger.removeHandler(handler)
            handler.close()

    if not syslog_address:
        return False

    # SysLogHandler tolerates a missing socket, so check for one first
    try:
        if not stat.S_ISSOCK(os.stat(syslog_address).st_mode):
            return False
        handler = logging.handlers.SysLogHandler(
            address=syslog_address,
            facility=logging.handlers.SysLogHandler.LOG_USER,
        )
    except OSError:
        return False

    handler.ident = SYSLOG_IDENT
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return True
