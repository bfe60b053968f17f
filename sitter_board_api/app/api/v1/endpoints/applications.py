"""
Student application history for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends

from sitter_board_api.app.core.errors import LifecycleError, to_http_exception
from sitter_board_api.app.core.security import get_current_user
from sitter_board_api.app.schemas.notice import StudentApplication
from sitter_board_api.app.schemas.profile import Caller
from sitter_board_api.app.services.notice_service import NoticeService


router = APIRouter()


@router.get("/my-applications", response_model=List[StudentApplication])
async def list_my_applications(current_user: Caller = Depends(get_current_user)) -> List[StudentApplication]:
    """List the authenticated student's applications, newest first.

    Each entry carries a short summary of the notice it was made on.
    Parents get HTTP 403.
    """
    try:
        return await NoticeService.list_applications_for_student(current_user)
    except LifecycleError as e:
        raise to_http_exception(e) from e
