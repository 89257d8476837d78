"""
Loguru sinks for the purchase service

Every record carries the service context, the Logger.io call target and the
start time of the current call chain. Standard-library loggers (uvicorn,
SQLAlchemy, asyncpg) are routed into the same sinks by InterceptHandler.
"""

from contextvars import ContextVar
from datetime import datetime
from enum import StrEnum
import logging
import os
from pathlib import Path
import re
import sys

from loguru import logger as loguru_logger

from src.platform.config.core_setting import settings
from src.platform.constant.path import LOG_DIR
from src.platform.logging.service_context import get_service_context


SENSITIVE_KEYWORDS = {'password', 'hashed_password', 'token', 'secret_key'}
MAX_LOG_CONTENT_LENGTH = 1000

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


# uvicorn access line: '127.0.0.1:53422 - "POST /api/transaction HTTP/1.1" 201'
_ACCESS_LINE = re.compile(r' - "[A-Z]+ \S+ HTTP/[\d.]+" (\d{3})')
_STATUS_LEVELS = ((500, 'CRITICAL'), (400, 'ERROR'), (300, 'WARNING'), (200, 'SUCCESS'))


def access_log_level(message: str) -> str | None:
    """Level for an access line by its status code, None for any other message"""
    match = _ACCESS_LINE.search(message)
    if not match:
        return None
    status_code = int(match.group(1))
    return next((level for floor, level in _STATUS_LEVELS if status_code >= floor), 'INFO')


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)

loguru_logger.remove()
custom_logger = loguru_logger.bind(
    **{
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }
)


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        message = record.getMessage()
        if record.levelno <= logging.DEBUG and 'Using selector:' in message:
            return

        level: str | int | None = access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        custom_logger.opt(depth=depth, exception=record.exc_info).log(level, message)


def log_file_path(log_dir: Path | str, *, under_test: bool) -> str:
    """One file per hour, prefixed with test_ for pytest runs"""
    stamp = datetime.now().astimezone().strftime('%Y-%m-%d_%H')
    return f'{log_dir}/{"test_" if under_test else ""}{stamp}.log'


min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'
custom_logger.add(sys.stdout, format=io_log_format, level=min_log_level, enqueue=True)

# Production ships stdout only
if settings.DEBUG:
    test_log_dir = os.environ.get('TEST_LOG_DIR')
    custom_logger.add(
        log_file_path(test_log_dir or LOG_DIR, under_test=bool(test_log_dir)),
        format=io_log_format,
        rotation='1 hour',
        retention='7 days',
        compression='gz',
        enqueue=True,
        level=min_log_level,
    )

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
