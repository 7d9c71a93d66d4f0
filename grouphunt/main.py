#!/usr/bin/env python3
"""
grouphunt - Main Entry Point
Main entry point with logging setup
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from .scan_core.constants import (
    DEFAULT_LOG_FORMAT, DEFAULT_LOG_LEVEL, NOISY_LOGGERS, LOG_FILE_MAX_BYTES, LOG_FILE_BACKUPS
)


def setup_logging(level: str = DEFAULT_LOG_LEVEL, log_file: Optional[str] = None):
    """Configure logging for the application"""
    log_level = getattr(logging, str(level).upper(), logging.WARNING)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format=DEFAULT_LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # Set third-party loggers to WARNING to reduce noise
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def main():
    """Main entry point"""
    try:
        from grouphunt.scan_cli.cli import main_cli
        return main_cli(obj={})

    except KeyboardInterrupt:
        print("\n👋 Cancelled by user, goodbye!")
        return 0


if __name__ == "__main__":
    sys.exit(main())
