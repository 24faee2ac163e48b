"""Enrollment endpoints end to end"""

from sqlalchemy import update

from coursegate.models.persisted import CourseRecord

from helpers import (
    OTHER_STUDENT,
    OTHER_TUTOR,
    STUDENT,
    TUTOR,
    approve_student,
    assert_response_error,
    assert_response_success,
    create_course,
)


def _enroll_url(course):
    return f"/api/v1/courses/{course['course']['id']}/enroll"


class TestEnrollEndpoint:
    async def test_application_starts_pending(self, client):
        course = await create_course(client)

        r = await client.post(
            _enroll_url(course),
            json={"answers": {"intent": "Build a rover", "experience": "Some"}},
            headers=STUDENT,
        )
        assert_response_success(r)
        data = r.json()
        assert data["enrollment"]["status"] == "PENDING"
        assert data["codeStatus"] is None
        assert data["viewer"]["enrollmentStatus"] == "PENDING"
        assert data["viewer"]["isEnrolled"] is False
        assert data["viewer"]["formAnswers"]["intent"] == "Build a rover"

    async def test_lowercase_join_code_enrolls(self, client, session_factory):
        course = await create_course(client)
        course_id = course["course"]["id"]
        async with session_factory() as s:
            await s.execute(
                update(CourseRecord)
                .where(CourseRecord.id == course_id)
                .values(join_code="AB12CD")
            )
            await s.commit()

        r = await client.post(
            _enroll_url(course), json={"joinCode": "ab12cd"}, headers=STUDENT
        )
        assert_response_success(r)
        data = r.json()
        assert data["codeStatus"] == "APPROVED"
        assert data["enrollment"]["status"] == "APPROVED"
        assert data["enrollment"]["joinedViaCode"] is True
        assert data["viewer"]["isEnrolled"] is True
        assert data["viewer"]["calendarUnlocked"] is True
        assert data["course"]["calendarDownloadUrl"] == (
            f"/api/v1/courses/{course_id}/calendar.ics"
        )

    async def test_invalid_code_with_answers_keeps_application(self, client):
        course = await create_course(client)

        r = await client.post(
            _enroll_url(course),
            json={"joinCode": "NOPE99", "answers": {"intent": "Learn"}},
            headers=STUDENT,
        )
        assert_response_success(r)
        data = r.json()
        assert data["codeStatus"] == "INVALID"
        assert data["enrollment"]["status"] == "PENDING"

    async def test_invalid_code_without_answers(self, client):
        course = await create_course(client)

        r = await client.post(
            _enroll_url(course), json={"joinCode": "NOPE99"}, headers=STUDENT
        )
        assert_response_error(r, 400)

    async def test_tutor_cannot_enroll(self, client):
        course = await create_course(client)

        r = await client.post(
            _enroll_url(course), json={"answers": {"intent": "x"}}, headers=OTHER_TUTOR
        )
        assert_response_error(r, 403)

    async def test_anonymous_cannot_enroll(self, client):
        course = await create_course(client)

        r = await client.post(_enroll_url(course), json={"answers": {"intent": "x"}})
        assert_response_error(r, 401)


class TestJoinCodeEndpoint:
    async def test_join_by_code(self, client):
        course = await create_course(client)

        r = await client.post(
            "/api/v1/courses/join-code",
            json={"code": course["course"]["joinCode"].lower()},
            headers=STUDENT,
        )
        assert_response_success(r)
        data = r.json()
        assert data["codeStatus"] == "APPROVED"
        assert data["course"]["id"] == course["course"]["id"]

    async def test_unknown_code(self, client):
        await create_course(client)

        r = await client.post(
            "/api/v1/courses/join-code", json={"code": "ZZZZZZ"}, headers=STUDENT
        )
        assert_response_error(r, 404)


class TestManagerDecisions:
    async def test_roster_and_reversal(self, client):
        course = await create_course(client)
        course_id = course["course"]["id"]
        r = await client.post(
            _enroll_url(course), json={"answers": {"intent": "x"}}, headers=STUDENT
        )
        enrollment_id = r.json()["enrollment"]["id"]

        r = await client.get(f"/api/v1/courses/{course_id}/enrollments", headers=TUTOR)
        assert_response_success(r)
        assert [e["id"] for e in r.json()["list"]] == [enrollment_id]

        decision_url = f"/api/v1/courses/{course_id}/enrollments/{enrollment_id}"
        r = await client.patch(
            decision_url,
            json={"status": "REJECTED", "adminNote": "Missing prerequisites"},
            headers=TUTOR,
        )
        assert_response_success(r)
        assert r.json()["enrollment"]["status"] == "REJECTED"

        r = await client.patch(decision_url, json={"status": "APPROVED"}, headers=TUTOR)
        assert_response_success(r)
        enrollment = r.json()["enrollment"]
        assert enrollment["status"] == "APPROVED"
        assert enrollment["adminNote"] == "Missing prerequisites"
        assert r.json()["enrollments"][0]["status"] == "APPROVED"

        r = await client.get(f"{decision_url}/history", headers=TUTOR)
        assert_response_success(r)
        assert [h["toStatus"] for h in r.json()["list"]] == [
            "PENDING",
            "REJECTED",
            "APPROVED",
        ]

        r = await client.get(f"/api/v1/courses/{course_id}", headers=STUDENT)
        assert r.json()["viewer"]["isEnrolled"] is True

    async def test_invalid_status_value(self, client):
        course = await create_course(client)
        data = await approve_student(client, course)
        url = (
            f"/api/v1/courses/{course['course']['id']}"
            f"/enrollments/{data['enrollment']['id']}"
        )

        r = await client.patch(url, json={"status": "MAYBE"}, headers=TUTOR)
        assert_response_error(r, 422)
        body = r.json()
        assert body["message"] == "Invalid request: status"
        assert "detail" not in body
        assert "MAYBE" not in r.text

    async def test_students_cannot_see_roster(self, client):
        course = await create_course(client)
        await approve_student(client, course)

        r = await client.get(
            f"/api/v1/courses/{course['course']['id']}/enrollments", headers=STUDENT
        )
        assert_response_error(r, 403)

    async def test_enrollment_from_other_course(self, client):
        first = await create_course(client, title="First")
        second = await create_course(client, title="Second")
        data = await approve_student(client, first)

        r = await client.patch(
            f"/api/v1/courses/{second['course']['id']}"
            f"/enrollments/{data['enrollment']['id']}",
            json={"status": "REJECTED"},
            headers=TUTOR,
        )
        assert_response_error(r, 404)

    async def test_manager_workspace_lists_roster(self, client):
        course = await create_course(client)
        await approve_student(client, course)
        await approve_student(client, course, headers=OTHER_STUDENT)

        r = await client.get(f"/api/v1/courses/{course['course']['id']}", headers=TUTOR)
        assert len(r.json()["enrollments"]) == 2
