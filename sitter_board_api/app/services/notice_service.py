"""
Business logic for notices and applications.

The ``NoticeService`` wires the pure rules from ``lifecycle`` to the
key‑value store.  Each notice lives under ``notice:<id>`` together
with its applications, so every mutation is one read‑modify‑write of a
single record.  Writes go through ``compare_and_swap`` on the record's
version: when two callers race on the same notice the loser re‑reads
and re‑evaluates its request against the winner's state.  That is what
keeps a second accept on an already filled notice from slipping
through.  Requests against different notices never contend.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Tuple, TypeVar, Union

from ..core.config import settings
from ..core.errors import ConflictError, NotFoundError
from ..core.store import KeyValueStore, get_store
from ..schemas.notice import (
    Application,
    Notice,
    NoticeCreate,
    NoticeFields,
    NoticeStatus,
    StudentApplication,
)
from ..schemas.profile import Caller, Role
from . import lifecycle


NOTICE_PREFIX = "notice:"

T = TypeVar("T")

logger = logging.getLogger(__name__)


def notice_key(notice_id: str) -> str:
    return f"{NOTICE_PREFIX}{notice_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class NoticeService:
    """Service for posting notices and deciding on applications."""

    @classmethod
    def _store(cls) -> KeyValueStore:
        return get_store()

    @classmethod
    def _load(cls, store: KeyValueStore, notice_id: str) -> Tuple[Notice, int]:
        record, version = store.get_with_version(notice_key(notice_id))
        if record is None:
            raise NotFoundError(f"Notice {notice_id} not found")
        return Notice.model_validate(record), version

    @classmethod
    def _scan(cls) -> List[Notice]:
        return [Notice.model_validate(record) for record in cls._store().scan_prefix(NOTICE_PREFIX)]

    @classmethod
    def _update(cls, notice_id: str, decide: Callable[[Notice], Tuple[Optional[Notice], T]]) -> T:
        """Run ``decide`` against the latest notice and persist its result.

        ``decide`` returns ``(updated_notice, result)``; ``None`` as the
        notice means nothing changed and nothing is written.  Lost
        compare‑and‑swap races are retried up to
        ``settings.update_max_retries`` times after the first attempt.
        """
        store = cls._store()
        retries = max(0, settings.update_max_retries)
        for attempt in range(retries + 1):
            notice, version = cls._load(store, notice_id)
            updated, result = decide(notice)
            if updated is None:
                return result
            if store.compare_and_swap(notice_key(notice_id), version, updated.model_dump(mode="json")):
                return result
            logger.info(
                "Notice %s changed concurrently (attempt %s of %s)", notice_id, attempt + 1, retries + 1
            )
        raise ConflictError(f"Notice {notice_id} is being modified concurrently, try again")

    @classmethod
    async def create_notice(
        cls, caller: Caller, fields: Union[NoticeFields, NoticeCreate, Mapping[str, Any]]
    ) -> Notice:
        """Create a new open notice owned by the calling parent.

        Raises ``AuthorizationError`` if the caller is not a parent and
        ``ValidationError`` for missing fields or a non‑positive pay rate.
        """
        notice = lifecycle.create_notice(caller, fields, notice_id=_new_id(), now=_utcnow())
        if not cls._store().compare_and_swap(notice_key(notice.id), 0, notice.model_dump(mode="json")):
            raise ConflictError(f"Notice {notice.id} already exists")
        logger.info("Parent %s created notice %s '%s'", caller.user_id, notice.id, notice.title)
        return notice

    @classmethod
    async def list_open_notices(cls) -> List[Notice]:
        """Return open notices, newest first."""
        notices = [n for n in cls._scan() if n.status == NoticeStatus.OPEN]
        notices.sort(key=lambda n: n.created_at, reverse=True)
        return notices

    @classmethod
    async def list_owned_notices(cls, owner_id: str) -> List[Notice]:
        """Return every notice created by ``owner_id``, newest first."""
        notices = [n for n in cls._scan() if n.owner_id == owner_id]
        notices.sort(key=lambda n: n.created_at, reverse=True)
        return notices

    @classmethod
    async def get_notice(cls, notice_id: str, caller: Caller) -> Notice:
        notice, _ = cls._load(cls._store(), notice_id)
        return cls.project(notice, caller)

    @staticmethod
    def project(notice: Notice, caller: Caller) -> Notice:
        """Hide applications of other students unless ``caller`` owns the notice."""
        return lifecycle.visible_to(notice, caller)

    @classmethod
    async def apply_to_notice(cls, notice_id: str, caller: Caller, message: str) -> Application:
        """Submit the calling student's application to a notice.

        Checks, in order: the notice exists, the caller is a student,
        the caller has not applied yet.  Whether a filled notice still
        accepts applications is controlled by
        ``settings.allow_applications_when_filled``.
        """
        application_id = _new_id()

        def decide(notice: Notice) -> Tuple[Notice, Application]:
            return lifecycle.submit_application(
                notice,
                caller,
                message,
                application_id=application_id,
                now=_utcnow(),
                allow_when_filled=settings.allow_applications_when_filled,
            )

        application = cls._update(notice_id, decide)
        logger.info("Student %s applied to notice %s (application %s)", caller.user_id, notice_id, application.id)
        return application

    @classmethod
    async def update_application_status(
        cls,
        notice_id: str,
        application_id: str,
        caller: Caller,
        target_status: str,
    ) -> Application:
        """Accept or reject an application on a notice owned by the caller.

        Accepting fills the notice and rejects every other pending
        application in the same write.  Re‑rejecting a rejected
        application, or re‑accepting the selected one, returns it
        unchanged without writing.
        """

        def decide(notice: Notice) -> Tuple[Optional[Notice], Application]:
            lifecycle.require_owner(notice, caller)
            if notice.find_application(application_id) is None:
                raise NotFoundError(f"Application {application_id} not found")
            before = {a.id: a.status for a in notice.applications}
            updated, application, changed = lifecycle.transition_application(
                notice, application_id, target_status, now=_utcnow()
            )
            if not changed:
                return None, application
            cascaded = [
                a.id for a in updated.applications
                if a.id != application_id and a.status != before[a.id]
            ]
            if cascaded:
                logger.debug("Accepting %s on notice %s rejects %s", application_id, notice_id, cascaded)
            return updated, application

        application = cls._update(notice_id, decide)
        logger.info(
            "Owner %s set application %s on notice %s to %s",
            caller.user_id,
            application_id,
            notice_id,
            application.status.value,
        )
        return application

    @classmethod
    async def list_applications_for_student(cls, caller: Caller) -> List[StudentApplication]:
        """Return the calling student's applications with a summary of each notice.

        Sorted by ``applied_at``, newest first.
        """
        lifecycle.require_role(caller, Role.STUDENT, "list their applications")
        history: List[StudentApplication] = []
        for notice in cls._scan():
            application = notice.application_of(caller.user_id)
            if application is not None:
                history.append(StudentApplication(application=application, notice=lifecycle.summarize(notice)))
        history.sort(key=lambda entry: entry.application.applied_at, reverse=True)
        return history
