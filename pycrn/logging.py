"""
Logging for pycrn.

Every pycrn module logs under the ``pycrn`` logger namespace. The first call
to :func:`get_logger` attaches a console handler to the ``pycrn`` logger
unless :func:`setup_logger` has been called already. The default level is
WARNING, overridden by the ``PYCRN_LOG`` environment variable (an integer or
a level name such as ``DEBUG`` or ``EXTENDED_DEBUG``).

Messages about a particular network go through a
:class:`NetworkLoggerAdapter`, so that parse, expansion and assembly
messages of several networks can be told apart::

    [birth_death] Assembled 3 reaction(s) over 1 species and 3 parameter(s)
"""

import logging
import os
import time
import pycrn

LOG_LEVEL_ENV_VAR = 'PYCRN_LOG'
BASE_LOGGER_NAME = 'pycrn'
EXTENDED_DEBUG = 5

logging.addLevelName(EXTENDED_DEBUG, 'EXTENDED_DEBUG')


def formatter(time_utc=False):
    """Log formatter with local (default) or UTC time stamps."""
    log_fmt = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - '
                                '%(message)s', datefmt='%Y-%m-%d %H:%M:%S')
    if time_utc:
        log_fmt.converter = time.gmtime
    return log_fmt


def _level_from_environment(default):
    value = os.environ.get(LOG_LEVEL_ENV_VAR)
    if value is None:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value)
    if isinstance(level, int):
        return level
    raise ValueError('Environment variable %s must be an integer log level '
                     'or a level name, got "%s"' % (LOG_LEVEL_ENV_VAR, value))


def setup_logger(level=logging.WARNING, stream=None, time_utc=False):
    """
    Set up the handler of the ``pycrn`` logger.

    Replaces any handler attached by an earlier call.

    Parameters
    ----------
    level : int
        Log level, unless ``PYCRN_LOG`` is set.
    stream : file-like, optional
        Where to write log entries (default: ``sys.stderr``).
    time_utc : bool
        Time stamps in UTC instead of local time.

    Returns
    -------
    logging.Logger
    """
    log = logging.getLogger(BASE_LOGGER_NAME)
    log.setLevel(_level_from_environment(level))
    log.handlers = []
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter(time_utc=time_utc))
    log.addHandler(handler)
    log.info('Logging started on pycrn version %s', pycrn.__version__)
    return log


def get_logger(logger_name=BASE_LOGGER_NAME, network=None, log_level=None):
    """
    Return a logger in the ``pycrn`` namespace.

    Parameters
    ----------
    logger_name : string
        Typically ``__name__`` of the calling module.
    network : pycrn.network.ReactionNetwork or str, optional
        Prefix every message with the name of this network.
    log_level : bool or int, optional
        Override the level of the requested logger. None or False keeps the
        current level, True means ``logging.DEBUG``.

    Returns
    -------
    logging.Logger, or a NetworkLoggerAdapter when ``network`` is given

    Examples
    --------

    >>> from pycrn.logging import get_logger
    >>> logger = get_logger(__name__, network='toggle_switch')
    >>> logger.debug('Test message')
    """
    if not logging.getLogger(BASE_LOGGER_NAME).handlers:
        setup_logger()

    logger = logging.getLogger(logger_name)

    if log_level is not None and log_level is not False:
        if isinstance(log_level, bool):
            log_level = logging.DEBUG
        elif not isinstance(log_level, int):
            raise ValueError('log_level must be a boolean, integer or None')
        logger.setLevel(log_level)

    if network is None:
        return logger
    return NetworkLoggerAdapter(logger, {'network': network})


class NetworkLoggerAdapter(logging.LoggerAdapter):
    """Prefixes log entries with the name of a network."""

    def process(self, msg, kwargs):
        network = self.extra['network']
        name = network if isinstance(network, str) else network.name
        return '[%s] %s' % (name, msg), kwargs
