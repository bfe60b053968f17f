"""
Identity provider collaborator.

The notice services only need two answers about a caller: which user
a bearer credential belongs to, and whether that user is a parent or a
student.  ``IdentityProvider`` answers both from the signed tokens
issued by ``core.security`` and the profile records kept in the
key‑value store under ``profile:<id>``.  Swapping in an external
provider means replacing this class; nothing else reads tokens or
profiles.
"""

import logging
from typing import Optional

from .security import decode_access_token
from .store import KeyValueStore, get_store
from ..schemas.profile import Caller, Profile, Role


PROFILE_PREFIX = "profile:"
EMAIL_PREFIX = "email:"

logger = logging.getLogger(__name__)


def profile_key(user_id: str) -> str:
    return f"{PROFILE_PREFIX}{user_id}"


def email_key(email: str) -> str:
    return f"{EMAIL_PREFIX}{email.strip().lower()}"


class IdentityProvider:
    """Resolves bearer credentials and roles for the HTTP boundary."""

    def __init__(self, store: Optional[KeyValueStore] = None) -> None:
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store or get_store()

    def resolve(self, credential: str) -> Optional[str]:
        """Return the user id a token was issued for, or ``None``."""
        payload = decode_access_token(credential)
        if not payload:
            return None
        user_id = payload.get("sub")
        return str(user_id) if user_id else None

    def get_profile(self, user_id: str) -> Optional[Profile]:
        record = self.store.get(profile_key(user_id))
        if record is None:
            return None
        return Profile.model_validate(record)

    def get_role(self, user_id: str) -> Optional[Role]:
        profile = self.get_profile(user_id)
        return profile.role if profile else None

    def get_caller(self, user_id: str) -> Optional[Caller]:
        profile = self.get_profile(user_id)
        if profile is None:
            logger.warning("Token for %s has no matching profile", user_id)
            return None
        return Caller(user_id=profile.id, role=profile.role, name=profile.name)


def get_identity_provider() -> IdentityProvider:
    return IdentityProvider()
