"""Identity provider: tokens, roles and password hashes."""

import asyncio

import pytest

from sitter_board_api.app.core.errors import StorageError
from sitter_board_api.app.core.identity import PROFILE_PREFIX, IdentityProvider, email_key
from sitter_board_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from sitter_board_api.app.core.store import SQLiteKeyValueStore, get_store, set_store
from sitter_board_api.app.schemas.profile import Role, SignupRequest
from sitter_board_api.app.services.profile_service import ProfileService


def test_token_round_trip_and_tampering():
    token = create_access_token({"sub": "user-1"})
    assert decode_access_token(token)["sub"] == "user-1"

    header, payload, signature = token.split(".")
    assert decode_access_token(f"{header}.{payload}.{signature[:-2]}xx") is None
    assert decode_access_token("garbage") is None


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "user-1"}, expires_delta=-10)
    assert decode_access_token(token) is None


def test_password_hashing():
    hashed = hash_password("secret123")
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "not-a-hash")


def test_provider_resolves_token_to_caller():
    profile = asyncio.run(
        ProfileService.signup(
            SignupRequest(email="emma@example.com", password="secret123", name="Emma", role=Role.STUDENT)
        )
    )
    provider = IdentityProvider()
    user_id = provider.resolve(ProfileService.issue_token(profile))
    assert user_id == profile.id
    assert provider.get_role(user_id) == Role.STUDENT

    caller = provider.get_caller(user_id)
    assert caller.user_id == profile.id
    assert caller.role == Role.STUDENT
    assert caller.name == "Emma"


def test_provider_unknown_user():
    provider = IdentityProvider()
    assert provider.resolve(create_access_token({"sub": "ghost"})) == "ghost"
    assert provider.get_role("ghost") is None
    assert provider.get_caller("ghost") is None
    assert provider.resolve("not.a.token") is None


class FailingProfileWriteStore(SQLiteKeyValueStore):
    def put(self, key, record):
        if key.startswith(PROFILE_PREFIX):
            raise StorageError(f"Failed to write {key}")
        return super().put(key, record)


def test_failed_profile_write_releases_the_email():
    request = SignupRequest(email="emma@example.com", password="secret123", name="Emma", role=Role.STUDENT)
    set_store(FailingProfileWriteStore())
    with pytest.raises(StorageError):
        asyncio.run(ProfileService.signup(request))
    assert get_store().get(email_key("emma@example.com")) is None

    set_store(None)
    profile = asyncio.run(ProfileService.signup(request))
    assert asyncio.run(ProfileService.authenticate("emma@example.com", "secret123")).id == profile.id


def test_authenticate_is_case_insensitive_on_email():
    asyncio.run(
        ProfileService.signup(
            SignupRequest(email="Sarah@Example.com", password="secret123", name="Sarah", role=Role.PARENT)
        )
    )
    assert asyncio.run(ProfileService.authenticate("sarah@example.com", "secret123")) is not None
    assert asyncio.run(ProfileService.authenticate("SARAH@example.com", "nope")) is None
    assert asyncio.run(ProfileService.authenticate("nobody@example.com", "secret123")) is None
