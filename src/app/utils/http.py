from typing import Any, Optional


def build_error(
    message: Any,
    code: int,
    errors: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Формирует унифицированный ответ об ошибке для API."""
    return {
        'status': 'error',
        'code': code,
        'message': str(message) if message is not None else '',
        'errors': errors,
    }
