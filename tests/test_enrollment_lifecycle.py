"""Enrollment lifecycle against a real async session"""

import pytest
from sqlalchemy import func, select

from coursegate.models.enums import EnrollmentStatus, Role
from coursegate.models.persisted import EnrollmentRecord
from coursegate.models.schemas import CourseCreate
from coursegate.repositories.enrollment_repo import EnrollmentRepository
from coursegate.services.access import Principal
from coursegate.services.catalog import CourseCatalog
from coursegate.services.enrollment import (
    CODE_APPROVED,
    CODE_INVALID,
    EnrollmentLifecycle,
)
from coursegate.services.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

TUTOR = Principal("tutor-1", Role.TUTOR)
STUDENT = Principal("student-1", Role.STUDENT)
RECRUITER = Principal("recruiter-1", Role.RECRUITER)


@pytest.fixture
async def course(session):
    return await CourseCatalog(session).create_course(
        TUTOR, CourseCreate(title="Intro to Robotics", isPublished=True)
    )


@pytest.fixture
def lifecycle(session):
    return EnrollmentLifecycle(session)


async def _count(session, course_id):
    result = await session.execute(
        select(func.count(EnrollmentRecord.id)).where(
            EnrollmentRecord.course_id == course_id
        )
    )
    return result.scalar_one()


class TestSubmitEnrollment:
    async def test_new_application_is_pending(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)

        outcome = await lifecycle.submit_enrollment(ctx, {"intent": "Build a rover"})

        assert outcome.code_status is None
        assert outcome.enrollment.status == EnrollmentStatus.PENDING.value
        assert outcome.enrollment.form_answers == {"intent": "Build a rover"}
        assert outcome.context.enrollment_approved is False

    async def test_resubmission_is_idempotent(self, session, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        first = await lifecycle.submit_enrollment(ctx, {"intent": "v1"})

        ctx = await lifecycle.resolve(course.id, STUDENT)
        second = await lifecycle.submit_enrollment(ctx, {"intent": "v2"})

        assert second.enrollment.id == first.enrollment.id
        assert second.enrollment.form_answers == {"intent": "v2"}
        assert second.enrollment.status == EnrollmentStatus.PENDING.value
        assert await _count(session, course.id) == 1

    async def test_resubmission_keeps_manager_status(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        outcome = await lifecycle.submit_enrollment(ctx, {"intent": "v1"})
        manager_ctx = await lifecycle.resolve(course.id, TUTOR)
        await lifecycle.decide(
            manager_ctx, outcome.enrollment.id, status=EnrollmentStatus.REJECTED
        )

        ctx = await lifecycle.resolve(course.id, STUDENT)
        again = await lifecycle.submit_enrollment(ctx, {"intent": "please"})

        assert again.enrollment.status == EnrollmentStatus.REJECTED.value

    async def test_unrecognized_answers_rejected(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)

        with pytest.raises(ValidationError):
            await lifecycle.submit_enrollment(ctx, {"unknown": "x", "intent": "  "})

    async def test_join_code_approves_regardless_of_answers(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)

        outcome = await lifecycle.submit_enrollment(
            ctx, {}, join_code=course.join_code.lower()
        )

        assert outcome.code_status == CODE_APPROVED
        assert outcome.enrollment.status == EnrollmentStatus.APPROVED.value
        assert outcome.enrollment.joined_via_code is True
        # A default answer is recorded for the first question
        assert list(outcome.enrollment.form_answers) == ["intent"]

    async def test_join_code_overrides_rejection(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        outcome = await lifecycle.submit_enrollment(ctx, {"intent": "v1"})
        manager_ctx = await lifecycle.resolve(course.id, TUTOR)
        await lifecycle.decide(
            manager_ctx, outcome.enrollment.id, status=EnrollmentStatus.REJECTED
        )

        ctx = await lifecycle.resolve(course.id, STUDENT)
        again = await lifecycle.submit_enrollment(ctx, {}, join_code=course.join_code)

        assert again.enrollment.status == EnrollmentStatus.APPROVED.value
        # Stored answers survive an empty submission
        assert again.enrollment.form_answers == {"intent": "v1"}

    async def test_wrong_code_falls_back_to_application(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)

        outcome = await lifecycle.submit_enrollment(
            ctx, {"intent": "v1"}, join_code="WRONG1"
        )

        assert outcome.code_status == CODE_INVALID
        assert outcome.enrollment.status == EnrollmentStatus.PENDING.value
        assert outcome.enrollment.joined_via_code is False

    async def test_only_learners_enroll(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, RECRUITER)

        with pytest.raises(ForbiddenError):
            await lifecycle.submit_enrollment(ctx, {"intent": "x"})

    async def test_anonymous_cannot_enroll(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, None)

        with pytest.raises(UnauthorizedError):
            await lifecycle.submit_enrollment(ctx, {"intent": "x"})


class TestJoinCodeOnly:
    async def test_joins_by_code(self, session, lifecycle, course):
        outcome = await lifecycle.submit_by_join_code_only(
            STUDENT, f"  {course.join_code.lower()} "
        )

        assert outcome.context.course.id == course.id
        assert outcome.enrollment.status == EnrollmentStatus.APPROVED.value
        assert outcome.context.enrollment_approved is True

    async def test_repeat_join_keeps_single_row(self, session, lifecycle, course):
        await lifecycle.submit_by_join_code_only(STUDENT, course.join_code)
        await lifecycle.submit_by_join_code_only(STUDENT, course.join_code)

        assert await _count(session, course.id) == 1

    async def test_unknown_code(self, lifecycle, course):
        with pytest.raises(NotFoundError):
            await lifecycle.submit_by_join_code_only(STUDENT, "ZZZZZZ")

    async def test_unpublished_course_cannot_be_joined(self, session, lifecycle):
        draft = await CourseCatalog(session).create_course(
            TUTOR, CourseCreate(title="Draft", isPublished=False)
        )

        with pytest.raises(NotFoundError):
            await lifecycle.submit_by_join_code_only(STUDENT, draft.join_code)


class TestManagerDecisions:
    async def test_reversal_is_logged(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        enrollment = (await lifecycle.submit_enrollment(ctx, {"intent": "x"})).enrollment
        manager_ctx = await lifecycle.resolve(course.id, TUTOR)

        await lifecycle.decide(manager_ctx, enrollment.id, status=EnrollmentStatus.REJECTED)
        updated = await lifecycle.decide(
            manager_ctx, enrollment.id, status=EnrollmentStatus.APPROVED
        )
        history = await lifecycle.history(manager_ctx, enrollment.id)

        assert updated.status == EnrollmentStatus.APPROVED.value
        assert [(h.from_status, h.to_status) for h in history] == [
            (None, "PENDING"),
            ("PENDING", "REJECTED"),
            ("REJECTED", "APPROVED"),
        ]
        assert history[-1].reason == "MANAGER"
        assert history[-1].actor_id == "tutor-1"

    async def test_admin_note_is_sticky(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        enrollment = (await lifecycle.submit_enrollment(ctx, {"intent": "x"})).enrollment
        manager_ctx = await lifecycle.resolve(course.id, TUTOR)

        await lifecycle.decide(manager_ctx, enrollment.id, admin_note="Check prerequisites")
        updated = await lifecycle.decide(
            manager_ctx, enrollment.id, status=EnrollmentStatus.APPROVED
        )

        assert updated.admin_note == "Check prerequisites"

    async def test_other_tutor_cannot_decide(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        enrollment = (await lifecycle.submit_enrollment(ctx, {"intent": "x"})).enrollment
        outsider = await lifecycle.resolve(course.id, Principal("tutor-2", Role.TUTOR))

        with pytest.raises(ForbiddenError):
            await lifecycle.decide(outsider, enrollment.id, status=EnrollmentStatus.APPROVED)

    async def test_empty_decision_rejected(self, lifecycle, course):
        ctx = await lifecycle.resolve(course.id, STUDENT)
        enrollment = (await lifecycle.submit_enrollment(ctx, {"intent": "x"})).enrollment
        manager_ctx = await lifecycle.resolve(course.id, TUTOR)

        with pytest.raises(ValidationError):
            await lifecycle.decide(manager_ctx, enrollment.id)

    async def test_regenerated_code_invalidates_old_one(self, lifecycle, course):
        old_code = course.join_code
        manager_ctx = await lifecycle.resolve(course.id, TUTOR)

        new_code = await lifecycle.regenerate_join_code(manager_ctx)

        assert new_code != old_code
        with pytest.raises(NotFoundError):
            await lifecycle.submit_by_join_code_only(STUDENT, old_code)


class TestLostInsertRace:
    async def test_upsert_falls_back_to_update(self, session_factory, course, monkeypatch):
        # First writer commits the row
        async with session_factory() as first:
            await EnrollmentRepository(first).upsert(
                "student-1", course.id, {"intent": "x"}, reason="JOIN_CODE",
                force_status="APPROVED", via_code=True,
            )

        # Second writer read "no row" before the first committed
        async with session_factory() as second:
            repo = EnrollmentRepository(second)
            real_find = repo.find
            calls = []

            async def stale_find(user_id, course_id):
                calls.append(user_id)
                if len(calls) == 1:
                    return None
                return await real_find(user_id, course_id)

            monkeypatch.setattr(repo, "find", stale_find)
            record = await repo.upsert(
                "student-1", course.id, {}, reason="JOIN_CODE",
                force_status="APPROVED", via_code=True,
            )

            assert len(calls) == 2
            assert record.status == "APPROVED"
            assert record.joined_via_code is True
            assert record.form_answers == {"intent": "x"}

        async with session_factory() as check:
            assert await _count(check, course.id) == 1

    async def test_losing_code_join_keeps_winner_answers(
        self, session_factory, course, monkeypatch
    ):
        async with session_factory() as second:
            loser = EnrollmentLifecycle(second)
            # Context read before the winner's row existed
            stale_ctx = await loser.resolve(course.id, STUDENT)
            assert stale_ctx.enrollment is None

            async with session_factory() as first:
                await EnrollmentLifecycle(first).submit_by_join_code_only(
                    STUDENT, course.join_code, {"intent": "learn robots"}
                )

            real_find = loser.enrollments.find
            calls = []

            async def stale_find(user_id, course_id):
                calls.append(user_id)
                if len(calls) == 1:
                    return None
                return await real_find(user_id, course_id)

            monkeypatch.setattr(loser.enrollments, "find", stale_find)
            outcome = await loser.submit_enrollment(stale_ctx, {}, course.join_code)

            assert outcome.code_status == CODE_APPROVED
            assert outcome.enrollment.status == EnrollmentStatus.APPROVED.value
            assert outcome.enrollment.form_answers == {"intent": "learn robots"}

        async with session_factory() as check:
            assert await _count(check, course.id) == 1



class TestMyEnrollments:
    async def test_listing_carries_course_summaries(self, session, lifecycle, course):
        catalog = CourseCatalog(session)
        second = await catalog.create_course(
            TUTOR, CourseCreate(title="Welding Basics", isPublished=True)
        )
        await lifecycle.submit_by_join_code_only(STUDENT, course.join_code)
        ctx = await lifecycle.resolve(second.id, STUDENT)
        await lifecycle.submit_enrollment(ctx, {"intent": "Weld a frame"})

        listing = await catalog.my_enrollments(STUDENT)

        assert {(e["course"]["title"], e["status"]) for e in listing} == {
            ("Intro to Robotics", "APPROVED"),
            ("Welding Basics", "PENDING"),
        }
        for entry in listing:
            assert entry["course"]["id"] == entry["courseId"]

    async def test_listing_is_scoped_to_the_user(self, session, lifecycle, course):
        await lifecycle.submit_by_join_code_only(STUDENT, course.join_code)

        listing = await CourseCatalog(session).my_enrollments(
            Principal("student-2", Role.STUDENT)
        )

        assert listing == []
