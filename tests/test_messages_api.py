"""Course channel and chat endpoints"""

from helpers import (
    OTHER_STUDENT,
    STUDENT,
    TUTOR,
    approve_student,
    assert_response_error,
    assert_response_success,
    create_course,
)


def _url(course, kind):
    return f"/api/v1/courses/{course['course']['id']}/{kind}"


class TestChannel:
    async def test_staff_post_from_learner_is_downgraded(self, client):
        course = await create_course(client)
        await approve_student(client, course)

        r = await client.post(
            _url(course, "messages"),
            json={"content": "Question about lab 2", "visibility": "STAFF"},
            headers=STUDENT,
        )
        assert_response_success(r)
        assert r.json()["message"]["visibility"] == "ENROLLED"

        r = await client.get(_url(course, "messages"), headers=STUDENT)
        assert [m["content"] for m in r.json()["list"]] == ["Question about lab 2"]

    async def test_staff_posts_hidden_from_learners(self, client):
        course = await create_course(client)
        await approve_student(client, course)
        await client.post(
            _url(course, "messages"),
            json={"content": "Grading rubric", "visibility": "STAFF"},
            headers=TUTOR,
        )
        await client.post(
            _url(course, "messages"), json={"content": "Welcome!"}, headers=TUTOR
        )

        r = await client.get(_url(course, "messages"), headers=STUDENT)
        assert [m["content"] for m in r.json()["list"]] == ["Welcome!"]

        r = await client.get(_url(course, "messages"), headers=TUTOR)
        # Channel lists newest first
        assert [m["content"] for m in r.json()["list"]] == ["Welcome!", "Grading rubric"]

    async def test_pending_learner_cannot_read(self, client):
        course = await create_course(client)
        await client.post(
            f"/api/v1/courses/{course['course']['id']}/enroll",
            json={"answers": {"intent": "x"}},
            headers=STUDENT,
        )

        r = await client.get(_url(course, "messages"), headers=STUDENT)
        assert_response_error(r, 403)

    async def test_anonymous_cannot_read(self, client):
        course = await create_course(client)

        r = await client.get(_url(course, "messages"))
        assert_response_error(r, 401)

    async def test_empty_post_rejected(self, client):
        course = await create_course(client)

        r = await client.post(
            _url(course, "messages"), json={"content": "   "}, headers=TUTOR
        )
        assert_response_error(r, 400)


class TestChat:
    async def test_chat_is_chronological(self, client):
        course = await create_course(client)
        await approve_student(client, course)
        await approve_student(client, course, headers=OTHER_STUDENT)

        for headers, text in ((STUDENT, "hi"), (OTHER_STUDENT, "hello"), (TUTOR, "welcome")):
            r = await client.post(_url(course, "chat"), json={"content": text}, headers=headers)
            assert_response_success(r)

        r = await client.get(_url(course, "chat"), headers=OTHER_STUDENT)
        assert_response_success(r)
        assert [m["content"] for m in r.json()["list"]] == ["hi", "hello", "welcome"]

    async def test_chat_and_channel_are_separate(self, client):
        course = await create_course(client)
        await client.post(_url(course, "chat"), json={"content": "in chat"}, headers=TUTOR)

        r = await client.get(_url(course, "messages"), headers=TUTOR)
        assert r.json()["list"] == []

        r = await client.get(f"/api/v1/courses/{course['course']['id']}", headers=TUTOR)
        messages = r.json()["messages"]
        assert [m["content"] for m in messages["chat"]] == ["in chat"]
        assert messages["channel"] == []
