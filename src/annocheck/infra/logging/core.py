from __future__ import annotations

"""
Logging Lifecycle.

Configures the root logger once per process. Verification threads only put
records on a queue; a single QueueListener thread formats them and writes to
stderr and the optional rotating log file, so output from parallel cases is
never interleaved mid-line.
"""

import atexit
import logging
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from annocheck.infra.logging.config import _LEVEL_MAP, LoggingConfig
from annocheck.infra.logging.handlers import (
    _create_console_handler,
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_annocheck_configured"
_QUEUE_LISTENER_ATTR: str = "_annocheck_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Attach annocheck's queue-based handlers to the root logger.

    Calling it again is a no-op unless `force` is set, in which case the
    previous handlers and listener are torn down first.

    Args:
        cfg: Logging settings.
        force: Reconfigure even if logging was already set up.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    shutdown_logging()

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    targets: List[logging.Handler] = []
    if cfg.console:
        targets.append(_create_console_handler(level_int, logging.Formatter(cfg.console_fmt)))
    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh is not None:
            targets.append(fh)

    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    if not targets:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = QueueListener(log_queue, *targets, respect_handler_level=True)
    listener.start()

    root.addHandler(_tag_handler(QueueHandler(log_queue)))
    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    atexit.register(_stop_listener, listener)
    return root


def shutdown_logging() -> None:
    """Flush and detach every handler annocheck attached to the root logger."""
    root = logging.getLogger()

    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        _stop_listener(listener)
        for handler in listener.handlers:
            handler.close()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for handler in list(root.handlers):
        if _is_our_handler(handler):
            root.removeHandler(handler)
            handler.close()

    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _stop_listener(listener: Optional[QueueListener]) -> None:
    # QueueListener.stop() fails on a listener that was already stopped.
    if listener is not None and getattr(listener, "_thread", None) is not None:
        listener.stop()
