"""
Logger Module

Logging setup for the authenticator package using Python's built-in
logging module. The package logs through ``logging.getLogger(__name__)``
in every module and stays silent until an application calls
``setup_logging`` or configures logging itself.

Secrets and one-time codes are never passed to a logger.
"""

import logging
import os
from typing import Optional, Union

PACKAGE_LOGGER = 'authenticator'
LOG_FORMAT = '%(levelname)s [%(name)s]: %(message)s'

# Debug output is enabled with AUTHENTICATOR_DEBUG=1/true/yes
DEBUG_ENV_VAR = 'AUTHENTICATOR_DEBUG'

# Console handler installed by setup_logging(), replaced on each call
_console_handler: Optional[logging.Handler] = None


def debug_enabled(environ=None) -> bool:
    """Check the environment for the debug switch."""
    environ = os.environ if environ is None else environ
    return environ.get(DEBUG_ENV_VAR, '').lower() in ('1', 'true', 'yes')


def setup_logging(level: Optional[Union[int, str]] = None,
                  environ=None) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Calling it again replaces the console handler it installed before
    instead of stacking a second one. Handlers added by the application
    are left in place.

    Args:
        level: Logging level; defaults to DEBUG when AUTHENTICATOR_DEBUG
            is set, WARNING otherwise
        environ: Mapping used instead of os.environ

    Returns:
        The configured package logger
    """
    global _console_handler

    if level is None:
        level = logging.DEBUG if debug_enabled(environ) else logging.WARNING

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _console_handler is not None:
        package_logger.removeHandler(_console_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(console_handler)
    _console_handler = console_handler
    package_logger.setLevel(level)
    return package_logger


# Library default: no output unless the application opts in
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
