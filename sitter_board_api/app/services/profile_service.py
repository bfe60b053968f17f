"""
Business logic for accounts.

The ``ProfileService`` is the built‑in stand‑in for an external
identity provider: it registers parents and students, checks their
passwords and issues bearer tokens.  Profiles are stored under
``profile:<id>`` and an ``email:<address>`` record maps each address
to its user id.  Profile editing is deliberately not offered.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..core.errors import ConflictError, StorageError, ValidationError
from ..core.identity import email_key, profile_key
from ..core.security import create_access_token, hash_password, verify_password
from ..core.store import get_store
from ..schemas.profile import Profile, SignupRequest


class ProfileService:
    """Service for registering and authenticating users."""

    @classmethod
    async def signup(cls, data: SignupRequest) -> Profile:
        """Register a new parent or student.

        The e‑mail address is reserved first with a compare‑and‑swap, so
        two concurrent sign‑ups with the same address cannot both
        succeed.  If the profile cannot be written the reservation is
        released again.  Raises ``ConflictError`` if the address is taken.
        """
        logger = logging.getLogger(__name__)
        email = data.email.strip().lower()
        name = data.name.strip()
        if not email or "@" not in email:
            raise ValidationError("A valid e-mail address is required", details={"email": "invalid"})
        if not name:
            raise ValidationError("Name is required", details={"name": "required"})

        store = get_store()
        user_id = uuid.uuid4().hex
        if not store.compare_and_swap(email_key(email), 0, {"user_id": user_id}):
            raise ConflictError(f"An account for {email} already exists")
        profile = Profile(
            id=user_id,
            email=email,
            name=name,
            role=data.role,
            password_hash=hash_password(data.password),
            created_at=datetime.now(timezone.utc),
        )
        try:
            store.put(profile_key(user_id), profile.model_dump(mode="json"))
        except StorageError:
            # Release the address so the user can sign up again.
            store.delete(email_key(email))
            raise
        logger.info("Registered %s %s as %s", data.role.value, email, user_id)
        return profile

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[Profile]:
        """Return the profile if the credentials match, else ``None``."""
        store = get_store()
        index = store.get(email_key(email))
        if not index:
            return None
        record = store.get(profile_key(index["user_id"]))
        if not record:
            return None
        profile = Profile.model_validate(record)
        if not verify_password(password, profile.password_hash):
            return None
        return profile

    @classmethod
    def issue_token(cls, profile: Profile) -> str:
        return create_access_token({"sub": profile.id})
