"""
Notice and application lifecycle rules.

Everything in this module is pure: functions take the current state of
a notice plus an explicit ``Caller`` and return new model instances,
or raise a ``LifecycleError``.  Inputs are never mutated, there is no
I/O, and ids and timestamps are supplied by the caller.  The
read‑modify‑write cycle around these rules lives in
``notice_service``.

State rules enforced here:

* a notice is created ``open`` with no applications;
* a student applies at most once per notice;
* accepting an application fills the notice, records the selection and
  rejects every other pending application in the same step;
* accepted and rejected are final for an application, and a filled
  notice keeps its selection.
"""

import math
from datetime import datetime
from typing import Any, Mapping, Tuple, Union

import pydantic

from ..core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..schemas.notice import (
    Application,
    ApplicationStatus,
    Notice,
    NoticeCreate,
    NoticeFields,
    NoticeStatus,
    NoticeSummary,
)
from ..schemas.profile import Caller, Role


REQUIRED_TEXT_FIELDS = (
    "title",
    "description",
    "date",
    "time",
    "address",
    "location",
    "age_group",
)

TARGET_STATUSES = {ApplicationStatus.ACCEPTED.value, ApplicationStatus.REJECTED.value}


def require_role(caller: Caller, role: Role, action: str) -> None:
    if caller.role != role:
        raise AuthorizationError(f"Only {role.value}s can {action}")


def require_owner(notice: Notice, caller: Caller) -> None:
    if notice.owner_id != caller.user_id:
        raise AuthorizationError("Only the owner of this notice can change its applications")


def validate_notice_fields(fields: Union[NoticeFields, NoticeCreate, Mapping[str, Any]]) -> NoticeCreate:
    """Check the descriptive payload of a new notice.

    Every text field must be present and non‑blank and ``pay_rate``
    must be a finite number greater than zero.  All problems are
    reported together in ``ValidationError.details``.
    """
    if isinstance(fields, (NoticeFields, NoticeCreate)):
        raw = fields.model_dump()
    else:
        raw = dict(fields)

    problems = {}
    for name in REQUIRED_TEXT_FIELDS:
        value = raw.get(name)
        if value is None or not isinstance(value, str) or not value.strip():
            problems[name] = "required"

    pay_rate = raw.get("pay_rate")
    if pay_rate is None or pay_rate == "":
        problems["pay_rate"] = "required"
    else:
        try:
            if isinstance(pay_rate, bool):
                raise TypeError(pay_rate)
            number = float(pay_rate)
        except (TypeError, ValueError):
            problems["pay_rate"] = "must be a number"
        else:
            if not math.isfinite(number) or number <= 0:
                problems["pay_rate"] = "must be a positive number"
            else:
                raw["pay_rate"] = number

    if problems:
        raise ValidationError("Missing or invalid notice fields", details=problems)

    duration = raw.get("duration")
    if not isinstance(duration, str) or not duration.strip():
        raw["duration"] = None
    try:
        return NoticeCreate.model_validate(raw)
    except pydantic.ValidationError as e:
        raise ValidationError("Missing or invalid notice fields", details=e.errors()) from e


def create_notice(
    caller: Caller,
    fields: Union[NoticeFields, NoticeCreate, Mapping[str, Any]],
    notice_id: str,
    now: datetime,
) -> Notice:
    """Build a new open notice owned by ``caller``."""
    require_role(caller, Role.PARENT, "create notices")
    data = validate_notice_fields(fields)
    return Notice(
        id=notice_id,
        owner_id=caller.user_id,
        owner_name=caller.name,
        title=data.title.strip(),
        description=data.description.strip(),
        date=data.date.strip(),
        time=data.time.strip(),
        address=data.address.strip(),
        location=data.location.strip(),
        pay_rate=data.pay_rate,
        duration=data.duration.strip() if data.duration else "TBD",
        age_group=data.age_group.strip(),
        status=NoticeStatus.OPEN,
        created_at=now,
        applications=[],
    )


def submit_application(
    notice: Notice,
    caller: Caller,
    message: str,
    application_id: str,
    now: datetime,
    allow_when_filled: bool = False,
) -> Tuple[Notice, Application]:
    """Append a pending application by ``caller`` to a copy of ``notice``.

    Raises ``AuthorizationError`` for non‑students and ``ConflictError``
    when the student already applied.  Unless ``allow_when_filled`` is
    set, a notice that is no longer open also refuses applications.
    """
    require_role(caller, Role.STUDENT, "apply to notices")
    if notice.application_of(caller.user_id) is not None:
        raise ConflictError("Already applied to this notice")
    if notice.status != NoticeStatus.OPEN and not allow_when_filled:
        raise ConflictError(f"Notice is {notice.status.value} and no longer accepts applications")

    application = Application(
        id=application_id,
        student_id=caller.user_id,
        student_name=caller.name,
        message=message or "",
        status=ApplicationStatus.PENDING,
        applied_at=now,
    )
    updated = notice.model_copy(deep=True)
    updated.applications.append(application)
    updated.updated_at = now
    return updated, application.model_copy()


def transition_application(
    notice: Notice,
    application_id: str,
    target_status: str,
    now: datetime,
) -> Tuple[Notice, Application, bool]:
    """Apply an accept/reject decision to a copy of ``notice``.

    Ownership is checked by the caller beforehand.  Returns ``(notice, application, changed)``; ``changed`` is false for
    the idempotent cases (re‑rejecting a rejected application,
    re‑accepting the selected one), in which nothing needs to be written.
    """
    updated = notice.model_copy(deep=True)
    application = updated.find_application(application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")

    target_value = getattr(target_status, "value", target_status)
    if target_value not in TARGET_STATUSES:
        raise ValidationError(
            f"Invalid status {target_value!r}",
            details={"allowed": sorted(TARGET_STATUSES)},
        )
    target = ApplicationStatus(target_value)

    if target == ApplicationStatus.REJECTED:
        if application.status == ApplicationStatus.REJECTED:
            return notice, application.model_copy(), False
        if application.status == ApplicationStatus.ACCEPTED:
            raise ConflictError("An accepted application cannot be rejected")
        application.status = ApplicationStatus.REJECTED
        application.updated_at = now
        updated.updated_at = now
        return updated, application.model_copy(), True

    if updated.status == NoticeStatus.FILLED:
        if updated.selected_application_id == application.id:
            return notice, application.model_copy(), False
        raise ConflictError("Notice is already filled by another application")
    if updated.status != NoticeStatus.OPEN:
        raise ConflictError(f"Notice is {updated.status.value}")
    if application.status == ApplicationStatus.REJECTED:
        raise ConflictError("A rejected application cannot be accepted")

    application.status = ApplicationStatus.ACCEPTED
    application.updated_at = now
    updated.status = NoticeStatus.FILLED
    updated.selected_application_id = application.id
    updated.updated_at = now
    for other in updated.applications:
        if other.id != application.id and other.status == ApplicationStatus.PENDING:
            other.status = ApplicationStatus.REJECTED
            other.updated_at = now
    return updated, application.model_copy(), True


def visible_to(notice: Notice, caller: Caller) -> Notice:
    """Project ``notice`` for ``caller``.

    The owner sees every application; anyone else only sees their own.
    """
    if caller.user_id == notice.owner_id:
        return notice.model_copy(deep=True)
    view = notice.model_copy(deep=True)
    view.applications = [a for a in view.applications if a.student_id == caller.user_id]
    return view


def summarize(notice: Notice) -> NoticeSummary:
    return NoticeSummary(
        id=notice.id,
        title=notice.title,
        date=notice.date,
        time=notice.time,
        location=notice.location,
        pay_rate=notice.pay_rate,
        owner_name=notice.owner_name,
        status=notice.status,
    )
