"""Logging utilities for LookML Transfer Tool."""

import re
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

SECRET_PATTERNS = [
    re.compile(r'(Bearer\s+)\S+', re.IGNORECASE),
    re.compile(r'((?:client_secret|access_token|token)["\']?\s*[:=]\s*["\']?)[^\s"\',}]+'),
]


def redact(message: str) -> str:
    """Mask bearer tokens and secrets in a log message."""
    for pattern in SECRET_PATTERNS:
        message = pattern.sub(r'\1***', message)
    return message


def _redact_record(record) -> bool:
    record['message'] = redact(record['message'])
    return True


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Setup logging configuration using loguru.

    Tracebacks are logged without variable values so credentials never
    reach a sink.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        log_format: Optional custom log format
    """
    logger.remove()
    logger.configure(extra={'component': 'cli'})

    if log_format is None:
        log_format = (
            '<green>{time:YYYY-MM-DD HH:mm:ss}</green> | '
            '<level>{level: <8}</level> | '
            '<cyan>{extra[component]}</cyan> | '
            '<level>{message}</level>'
        )

    logger.add(
        sys.stderr,
        format=log_format,
        level=level,
        colorize=True,
        backtrace=False,
        diagnose=False,
        filter=_redact_record,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            format='{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | '
            '{extra[component]} | {name}:{function}:{line} | {message}',
            level=level,
            rotation='10 MB',
            retention='30 days',
            compression='gz',
            backtrace=False,
            diagnose=False,
            filter=_redact_record,
        )

    logger.info(f'Logging initialized with level: {level}')
    if log_file:
        logger.info(f'Log file: {log_file}')
