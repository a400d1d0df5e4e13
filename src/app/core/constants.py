from datetime import datetime

# Настройки логгера
MS_IN_SECOND = 1000
LOG_DEPTH = 7
LOG_ENCODING = 'utf-8'
LOG_COMPRESSION = 'zip'
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '{extra[request_id]} | {extra[username]}({extra[user_id]}) | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
FILE_LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | '
    '{extra[request_id]} | {extra[username]}({extra[user_id]}) | '
    '{name}:{function}:{line} | {message}'
)
INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'sqlalchemy',
)
NOISE_PATHS = {
    '/docs',
    '/openapi.json',
    '/healthcheck/db',
    '/healthcheck/redis',
    '/api/docs',
    '/api/openapi.json',
    '/api/healthcheck/db',
    '/api/healthcheck/redis',
}
HTTP_LOG_TEMPLATE = (
    '{method} {path} -> {status} ({ms:.1f} ms)\n    ip={ip}\n    ua={ua}\n'
)
USER_ID_HEADER = 'X-User-ID'
USER_NAME_HEADER = 'X-User-Name'

# Настройки кеша слотов
SLOTS_CACHE_KEY = 'slots:{agenda_id}:{day}'
SLOTS_CACHE_PATTERN = 'slots:{agenda_id}:*'

# Ограничения полей
NAME_MAX_LENGTH = 255
INTERVAL_MIN_MINUTES = 1

# Сообщения для листинга слотов
SLOTS_DAY_NOT_ACTIVE = 'День не активен для этой агенды'
SLOTS_DATE_OUT_OF_RANGE = 'Дата вне диапазона агенды'


def get_logger_header() -> str:
    """Формирует заголовок для нового лог-файла."""
    return (
        '\n'
        '================== LOGGER - AGENDA_RESERVAS ===================\n'
        f'Date: {datetime.now():%Y-%m-%d %H:%M:%S}\n'
        '================================================================\n\n'
    )
