# backend/tutorly/repositories/oauth_credential_repository.py
"""Repository for stored OAuth credentials."""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.oauth_credential import OAuthCredential
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class OAuthCredentialRepository(BaseRepository[OAuthCredential]):
    """Data access for OAuthCredential rows, keyed by (user_id, provider)."""

    def __init__(self, db: Session):
        super().__init__(db, OAuthCredential)

    def get_for(self, user_id: str, provider: str) -> Optional[OAuthCredential]:
        return self.find_one_by(user_id=user_id, provider=provider)

    def upsert(self, user_id: str, provider: str, **fields: Any) -> OAuthCredential:
        """Create the credential row or overwrite the existing one."""
        existing = self.get_for(user_id, provider)
        if existing is None:
            return self.create(user_id=user_id, provider=provider, **fields)
        return self.update(existing, **fields)

    def delete_for(self, user_id: str, provider: str) -> bool:
        query = self._build_query().filter(
            OAuthCredential.user_id == user_id, OAuthCredential.provider == provider
        )
        return self._execute_delete(query) > 0
