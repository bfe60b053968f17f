"""
Notice endpoints for API v1.

Parents post notices and decide on the applications they receive;
students browse open notices and apply.  Role and ownership rules are
enforced by ``NoticeService``; these handlers only resolve the caller
and map service errors to HTTP responses.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from sitter_board_api.app.core.errors import LifecycleError, to_http_exception
from sitter_board_api.app.core.security import get_current_user
from sitter_board_api.app.schemas.notice import (
    Application,
    ApplicationCreate,
    ApplicationStatusUpdate,
    Notice,
    NoticeFields,
)
from sitter_board_api.app.schemas.profile import Caller
from sitter_board_api.app.services.notice_service import NoticeService


router = APIRouter()


@router.post("/", response_model=Notice, status_code=status.HTTP_201_CREATED)
async def create_notice(
    notice: NoticeFields,
    current_user: Caller = Depends(get_current_user),
) -> Notice:
    """Post a new babysitting notice.

    Only parents may post.  Returns HTTP 400 when a required field is
    missing or blank, or the pay rate is not a positive number.
    """
    try:
        return await NoticeService.create_notice(current_user, notice)
    except LifecycleError as e:
        raise to_http_exception(e) from e


@router.get("/", response_model=List[Notice])
async def list_open_notices(current_user: Caller = Depends(get_current_user)) -> List[Notice]:
    """List open notices, newest first.

    Applications of other students are hidden from the listing.
    """
    try:
        notices = await NoticeService.list_open_notices()
    except LifecycleError as e:
        raise to_http_exception(e) from e
    return [NoticeService.project(n, current_user) for n in notices]


@router.get("/my-notices", response_model=List[Notice])
async def list_my_notices(current_user: Caller = Depends(get_current_user)) -> List[Notice]:
    """List the notices posted by the authenticated parent, newest first."""
    try:
        return await NoticeService.list_owned_notices(current_user.user_id)
    except LifecycleError as e:
        raise to_http_exception(e) from e


@router.get("/{notice_id}", response_model=Notice)
async def get_notice(
    notice_id: str = Path(..., description="ID of the notice"),
    current_user: Caller = Depends(get_current_user),
) -> Notice:
    """Retrieve a single notice.

    The owner sees every application; other callers only see their own.
    """
    try:
        return await NoticeService.get_notice(notice_id, current_user)
    except LifecycleError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{notice_id}/apply",
    response_model=Application,
    status_code=status.HTTP_201_CREATED,
)
async def apply_to_notice(
    body: ApplicationCreate,
    notice_id: str = Path(..., description="ID of the notice to apply to"),
    current_user: Caller = Depends(get_current_user),
) -> Application:
    """Apply to a notice as the authenticated student.

    Returns HTTP 409 if the student already applied.
    """
    try:
        return await NoticeService.apply_to_notice(notice_id, current_user, body.message)
    except LifecycleError as e:
        raise to_http_exception(e) from e


@router.put("/{notice_id}/applications/{application_id}", response_model=Application)
async def update_application_status(
    body: ApplicationStatusUpdate,
    notice_id: str = Path(..., description="ID of the notice"),
    application_id: str = Path(..., description="ID of the application"),
    current_user: Caller = Depends(get_current_user),
) -> Application:
    """Accept or reject an application.

    Only the owner of the notice may call this.  Accepting fills the
    notice and rejects every other pending application.  Returns HTTP
    409 when the notice is already filled by a different application.
    """
    try:
        return await NoticeService.update_application_status(
            notice_id, application_id, current_user, body.status
        )
    except LifecycleError as e:
        raise to_http_exception(e) from e
