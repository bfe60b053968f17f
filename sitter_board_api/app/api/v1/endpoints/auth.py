"""
Account endpoints for API v1.

Sign‑up registers a parent or student and returns a bearer token right
away; login exchanges credentials for a fresh token.  The profile
route returns the account behind the current token.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from sitter_board_api.app.core.errors import LifecycleError, to_http_exception
from sitter_board_api.app.core.identity import get_identity_provider
from sitter_board_api.app.core.security import get_current_user
from sitter_board_api.app.schemas.profile import (
    Caller,
    LoginRequest,
    ProfileRead,
    SignupRequest,
    TokenResponse,
)
from sitter_board_api.app.services.profile_service import ProfileService


router = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest) -> TokenResponse:
    """Register an account.

    Returns HTTP 409 if the e‑mail address is already registered.
    """
    try:
        profile = await ProfileService.signup(data)
    except LifecycleError as e:
        raise to_http_exception(e) from e
    return TokenResponse(access_token=ProfileService.issue_token(profile), profile=profile.public())


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest) -> TokenResponse:
    """Exchange e‑mail and password for a bearer token."""
    try:
        profile = await ProfileService.authenticate(data.email, data.password)
    except LifecycleError as e:
        raise to_http_exception(e) from e
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid e-mail or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=ProfileService.issue_token(profile), profile=profile.public())


@router.get("/profile", response_model=ProfileRead)
async def get_profile(current_user: Caller = Depends(get_current_user)) -> ProfileRead:
    """Return the profile of the authenticated user."""
    try:
        profile = get_identity_provider().get_profile(current_user.user_id)
    except LifecycleError as e:
        raise to_http_exception(e) from e
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile.public()
