"""Logging setup shared by the command runners."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def configure_logging(*, silent: bool = False, debug: bool = False) -> None:
    if debug:
        level = logging.DEBUG
    elif silent:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    # web3 and aiohttp are chatty at DEBUG
    for noisy in ("web3", "aiohttp", "urllib3", "websockets"):
        logging.getLogger(noisy).setLevel(max(level, logging.INFO))


__all__ = ["LOG_FORMAT", "configure_logging"]
