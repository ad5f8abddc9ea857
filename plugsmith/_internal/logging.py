# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Simple logging configuration using Python's standard logging with Rich.

Logs go to stderr so that bundle reports on stdout stay clean.

Usage:
    from plugsmith._internal.logging import setup_logging

    # In CLI setup
    setup_logging(level="info")

    # In application code
    import logging
    logger = logging.getLogger(__name__)
    logger.warning("Source ./missing is not mapped!")
"""

import logging

# CLI verbosity → logging level name
VERBOSITY_LEVELS = {
    'quiet': 'error',
    'normal': 'warning',
    'verbose': 'info',
    'debug': 'debug',
}


def setup_logging(level: str = "warning") -> None:
    """Configure Python logging with Rich handler.

    Maps string level ('error', 'warning', 'info', 'debug') to logging
    constants. CLI verbosity names (quiet, normal, verbose) are accepted too.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    level_map = {
        'error': logging.ERROR,
        'warning': logging.WARNING,
        'info': logging.INFO,
        'debug': logging.DEBUG
    }
    level = VERBOSITY_LEVELS.get(level.lower(), level.lower())
    log_level = level_map.get(level, logging.WARNING)

    root = logging.getLogger()
    root.setLevel(log_level)

    if not root.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=(log_level == logging.DEBUG),
            show_path=False,
            markup=False,
            show_time=False
        )
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
    else:
        for handler in root.handlers:
            handler.setLevel(log_level)
