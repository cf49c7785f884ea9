# Copyright (c) 2025-2026 NASK. All rights reserved.

import logging


TOPLEVEL_PACKAGE_NAME = 'n6structmap'


def get_logger(name=None):
    """
    Get a logger, e.g., for the module-level `LOGGER` constants
    (`LOGGER = get_logger(__name__)`).
    """
    return logging.getLogger(name)


def install_null_handler():
    """
    Make the package's root logger silent unless the application
    configures logging (see: *Configuring Logging for a Library* in
    the docs of the `logging` module).
    """
    logger = logging.getLogger(TOPLEVEL_PACKAGE_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
