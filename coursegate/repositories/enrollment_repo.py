"""Repository layer for enrollments and their transition log."""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from coursegate.models.enums import EnrollmentStatus
from coursegate.models.persisted import (
    CourseRecord,
    EnrollmentRecord,
    EnrollmentTransitionRecord,
)


class EnrollmentNotFoundError(Exception):
    pass


class EnrollmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, user_id: str, course_id: int) -> Optional[EnrollmentRecord]:
        result = await self.session.execute(
            select(EnrollmentRecord).where(
                EnrollmentRecord.user_id == user_id,
                EnrollmentRecord.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, course_id: int, enrollment_id: int) -> EnrollmentRecord:
        result = await self.session.execute(
            select(EnrollmentRecord).where(
                EnrollmentRecord.id == enrollment_id,
                EnrollmentRecord.course_id == course_id,
            )
        )
        record = result.scalar_one_or_none()
        if not record:
            raise EnrollmentNotFoundError
        return record

    async def list_for_course(self, course_id: int) -> Sequence[EnrollmentRecord]:
        result = await self.session.execute(
            select(EnrollmentRecord)
            .where(EnrollmentRecord.course_id == course_id)
            .order_by(EnrollmentRecord.created_at.desc(), EnrollmentRecord.id.desc())
        )
        return result.scalars().all()

    async def list_for_user(
        self, user_id: str
    ) -> List[Tuple[EnrollmentRecord, CourseRecord]]:
        """A user's enrollments paired with their courses, newest first."""
        result = await self.session.execute(
            select(EnrollmentRecord, CourseRecord)
            .join(CourseRecord, CourseRecord.id == EnrollmentRecord.course_id)
            .where(EnrollmentRecord.user_id == user_id)
            .order_by(EnrollmentRecord.created_at.desc(), EnrollmentRecord.id.desc())
        )
        return [(enrollment, course) for enrollment, course in result.all()]

    async def history(self, enrollment_id: int) -> List[EnrollmentTransitionRecord]:
        result = await self.session.execute(
            select(EnrollmentTransitionRecord)
            .where(EnrollmentTransitionRecord.enrollment_id == enrollment_id)
            .order_by(EnrollmentTransitionRecord.id)
        )
        return list(result.scalars().all())

    def _log(
        self,
        record: EnrollmentRecord,
        previous: Optional[str],
        reason: str,
        actor_id: str,
        note: Optional[str] = None,
    ) -> None:
        if previous == record.status:
            return
        self.session.add(
            EnrollmentTransitionRecord(
                enrollment_id=record.id,
                from_status=previous,
                to_status=record.status,
                reason=reason,
                actor_id=actor_id,
                note=note,
            )
        )

    async def upsert(
        self,
        user_id: str,
        course_id: int,
        answers: Dict[str, str],
        reason: str,
        force_status: Optional[str] = None,
        via_code: bool = False,
        default_answers: Optional[Dict[str, str]] = None,
    ) -> EnrollmentRecord:
        """Create the (user, course) enrollment or update the existing one.

        ``force_status`` overwrites the status of an existing record; without
        it an existing status is left untouched. ``joined_via_code`` only ever
        flips to True. Empty ``answers`` keep the stored ones;
        ``default_answers`` fill in only when nothing is stored yet.
        """
        existing = await self.find(user_id, course_id)
        if existing is None:
            record = EnrollmentRecord(
                user_id=user_id,
                course_id=course_id,
                status=force_status or EnrollmentStatus.PENDING.value,
                joined_via_code=via_code,
                form_answers=answers or default_answers or {},
            )
            self.session.add(record)
            try:
                await self.session.flush()
            except IntegrityError:
                # Lost the insert race: the row exists now, update it instead
                await self.session.rollback()
                existing = await self.find(user_id, course_id)
                if existing is None:
                    raise
            else:
                self._log(record, None, reason, user_id)
                await self.session.commit()
                await self.session.refresh(record)
                return record

        previous = existing.status
        if answers:
            existing.form_answers = answers
        elif default_answers and not existing.form_answers:
            existing.form_answers = default_answers
        if via_code:
            existing.joined_via_code = True
        if force_status is not None:
            existing.status = force_status
        await self.session.flush()
        self._log(existing, previous, reason, user_id)
        await self.session.commit()
        await self.session.refresh(existing)
        return existing

    async def set_decision(
        self,
        record: EnrollmentRecord,
        actor_id: str,
        reason: str,
        status: Optional[str] = None,
        admin_note: Optional[str] = None,
    ) -> EnrollmentRecord:
        previous = record.status
        if status is not None:
            record.status = status
        if admin_note is not None:
            record.admin_note = admin_note
        self._log(record, previous, reason, actor_id, note=admin_note)
        await self.session.commit()
        await self.session.refresh(record)
        return record
