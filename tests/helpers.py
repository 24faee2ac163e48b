"""Shared helpers for the API tests"""

from httpx import AsyncClient


def auth(user_id: str, role: str = "STUDENT") -> dict:
    """Gateway headers for a verified principal"""
    return {"X-User-Id": user_id, "X-User-Role": role}


TUTOR = auth("tutor-1", "TUTOR")
OTHER_TUTOR = auth("tutor-2", "TUTOR")
ADMIN = auth("admin-1", "ADMIN")
STUDENT = auth("student-1")
OTHER_STUDENT = auth("student-2")
RECRUITER = auth("recruiter-1", "RECRUITER")


async def create_course(client: AsyncClient, headers: dict = TUTOR, **overrides) -> dict:
    """Create a course through the API and return its workspace payload"""
    payload = {
        "title": "Intro to Robotics",
        "summary": "Build and program small robots",
        "isPublished": True,
        "tags": ["STEM", "Robotics"],
    }
    payload.update(overrides)
    r = await client.post("/api/v1/courses", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


async def approve_student(client: AsyncClient, course: dict, headers: dict = STUDENT) -> dict:
    """Enroll a student with the course join code"""
    r = await client.post(
        f"/api/v1/courses/{course['course']['id']}/enroll",
        json={"joinCode": course["course"]["joinCode"]},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()


def assert_response_success(response, expected_status=200):
    """Assert that response is successful"""
    assert response.status_code == expected_status, (
        f"Expected {expected_status}, got {response.status_code}: {response.text}"
    )


def assert_response_error(response, expected_status=400):
    """Assert that response is an error in the standard envelope"""
    assert response.status_code == expected_status, (
        f"Expected error {expected_status}, got {response.status_code}: {response.text}"
    )
    body = response.json()
    assert body["success"] is False
    assert body["error"]
    assert body["message"]
