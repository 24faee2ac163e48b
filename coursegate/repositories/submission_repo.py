"""Repository layer for assignment submissions."""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from coursegate.models.enums import SubmissionStatus
from coursegate.models.persisted import AssignmentRecord, SubmissionRecord
from coursegate.utils.timeutils import utcnow


class SubmissionNotFoundError(Exception):
    pass


class SubmissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(
        self, assignment_id: int, student_id: str
    ) -> Optional[SubmissionRecord]:
        result = await self.session.execute(
            select(SubmissionRecord).where(
                SubmissionRecord.assignment_id == assignment_id,
                SubmissionRecord.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, assignment_id: int, submission_id: int) -> SubmissionRecord:
        result = await self.session.execute(
            select(SubmissionRecord).where(
                SubmissionRecord.id == submission_id,
                SubmissionRecord.assignment_id == assignment_id,
            )
        )
        record = result.scalar_one_or_none()
        if not record:
            raise SubmissionNotFoundError
        return record

    async def list_for_assignment(
        self, assignment_id: int
    ) -> Sequence[SubmissionRecord]:
        result = await self.session.execute(
            select(SubmissionRecord)
            .where(SubmissionRecord.assignment_id == assignment_id)
            .order_by(SubmissionRecord.submitted_at.desc(), SubmissionRecord.id.desc())
        )
        return result.scalars().all()

    async def by_assignment(self, course_id: int) -> Dict[int, List[SubmissionRecord]]:
        """All submissions of a course, grouped by assignment id."""
        result = await self.session.execute(
            select(SubmissionRecord)
            .join(
                AssignmentRecord,
                AssignmentRecord.id == SubmissionRecord.assignment_id,
            )
            .where(AssignmentRecord.course_id == course_id)
            .order_by(SubmissionRecord.submitted_at.desc(), SubmissionRecord.id.desc())
        )
        grouped: Dict[int, List[SubmissionRecord]] = {}
        for row in result.scalars().all():
            grouped.setdefault(row.assignment_id, []).append(row)
        return grouped

    async def for_student(
        self, course_id: int, student_id: str
    ) -> Dict[int, SubmissionRecord]:
        result = await self.session.execute(
            select(SubmissionRecord)
            .join(
                AssignmentRecord,
                AssignmentRecord.id == SubmissionRecord.assignment_id,
            )
            .where(
                AssignmentRecord.course_id == course_id,
                SubmissionRecord.student_id == student_id,
            )
        )
        return {row.assignment_id: row for row in result.scalars().all()}

    async def upsert(
        self,
        assignment_id: int,
        student_id: str,
        content: Optional[str],
        attachment_url: Optional[str],
    ) -> SubmissionRecord:
        """Create the student's submission or replace its work product.

        Review fields (status, grade, feedback) are left to managers.
        """
        existing = await self.find(assignment_id, student_id)
        if existing is None:
            record = SubmissionRecord(
                assignment_id=assignment_id,
                student_id=student_id,
                content=content,
                attachment_url=attachment_url,
                status=SubmissionStatus.SUBMITTED.value,
            )
            self.session.add(record)
            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                existing = await self.find(assignment_id, student_id)
                if existing is None:
                    raise
            else:
                await self.session.refresh(record)
                return record

        existing.content = content
        existing.attachment_url = attachment_url
        existing.submitted_at = utcnow()
        await self.session.commit()
        await self.session.refresh(existing)
        return existing

    async def review(
        self,
        record: SubmissionRecord,
        status: Optional[str] = None,
        grade: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> SubmissionRecord:
        if status is not None:
            record.status = status
        if grade is not None:
            record.grade = grade
        if feedback is not None:
            record.feedback = feedback
        await self.session.commit()
        await self.session.refresh(record)
        return record
