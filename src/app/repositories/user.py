from pydantic import BaseModel

from app.models import User
from app.repositories.base import CRUDBase


class UserRepository(CRUDBase[User, BaseModel, BaseModel]):
    """Репозиторий клиентов: только чтение, учётки ведутся вне сервиса."""

    def __init__(self) -> None:
        """Инициализация репозитория клиентов."""
        super().__init__(User)


user_repository = UserRepository()
