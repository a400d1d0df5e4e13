import logging
import sys
from pathlib import Path

from loguru import logger

from app.core.config import (
    LOG_DIR,
    settings,
)
from app.core.constants import (
    FILE_LOG_FORMAT,
    INTERCEPTED_LOGGERS,
    LOG_COMPRESSION,
    LOG_DEPTH,
    LOG_ENCODING,
    LOG_FORMAT,
    get_logger_header,
)

LOG_FILE_NAME = 'agenda.log'
EXTRA_DEFAULTS = {
    'username': 'SYSTEM',
    'user_id': '-',
    'request_id': '-',
}

_STD_INTERCEPT_CONFIGURED = False


class InterceptHandler(logging.Handler):
    """Перехват stdlib логов (uvicorn и sqlalchemy) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Передаёт запись стандартного логгера в Loguru."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(
            depth=LOG_DEPTH,
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_stdlib_intercept() -> None:
    """Перенаправляет логи uvicorn и sqlalchemy в Loguru (один раз)."""
    global _STD_INTERCEPT_CONFIGURED
    if _STD_INTERCEPT_CONFIGURED:
        return
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
    _STD_INTERCEPT_CONFIGURED = True


def _ensure_defaults(record: dict) -> None:
    """Заполняет extra-поля записи, если их не задал контекст запроса."""
    for key, value in EXTRA_DEFAULTS.items():
        record['extra'].setdefault(key, value)


def _prepare_log_file(path: Path) -> None:
    """Создаёт каталог логов и пишет заголовок в новый файл."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and path.stat().st_size > 0:
        return
    try:
        with open(path, 'a', encoding=LOG_ENCODING) as f:
            f.write(get_logger_header())
    except OSError as e:
        logger.warning(f'Не удалось записать заголовок в файл {path}: {e}')


def configure_logging() -> None:
    """Настраивает Loguru: консоль, файл с ротацией и перехват stdlib."""
    log_file = LOG_DIR / LOG_FILE_NAME
    _prepare_log_file(log_file)

    logger.remove()
    logger.configure(patcher=_ensure_defaults)

    common = {
        'level': settings.LOG_LEVEL,
        'enqueue': True,
        'backtrace': False,
        'diagnose': False,
    }
    logger.add(sys.stdout, format=LOG_FORMAT, colorize=True, **common)
    logger.add(
        log_file,
        rotation=settings.LOG_ROTATION,
        retention=settings.LOG_RETENTION,
        compression=LOG_COMPRESSION,
        format=FILE_LOG_FORMAT,
        encoding=LOG_ENCODING,
        **common,
    )

    setup_stdlib_intercept()
