# backend/tutorly/repositories/user_repository.py
"""Repository for platform users."""

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Data access for User rows."""

    def __init__(self, db: Session):
        super().__init__(db, User)
