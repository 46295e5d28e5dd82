"""Unit tests for user, school and subject routes."""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from coursereg.api.app import ERROR_STATUS
from coursereg.api.dependencies import get_entity_store, get_machine
from coursereg.api.models import APIResponse
from coursereg.api.routes import schools, subjects, users
from coursereg.entity_store import EntityStore, School, User
from coursereg.registration import RegistrationMachine


@pytest.fixture
def app(store: EntityStore, machine: RegistrationMachine) -> FastAPI:
    """Create a test FastAPI app wired to the in-memory store."""
    app = FastAPI()

    def override_get_entity_store() -> Iterator[EntityStore]:
        yield store

    def override_get_machine() -> Iterator[RegistrationMachine]:
        yield machine

    app.dependency_overrides[get_entity_store] = override_get_entity_store
    app.dependency_overrides[get_machine] = override_get_machine

    for exc_type, status_code in ERROR_STATUS:

        async def handler(request: Request, exc: Exception, status_code: int = status_code):
            return JSONResponse(
                status_code=status_code,
                content=APIResponse[None](data=None, error=str(exc)).model_dump(),
            )

        app.add_exception_handler(exc_type, handler)

    app.include_router(users.router, prefix="/api/v1")
    app.include_router(schools.router, prefix="/api/v1")
    app.include_router(subjects.router, prefix="/api/v1")
    return app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def school(store: EntityStore) -> School:
    return store.create_school("eng", "Engineering")


@pytest.fixture
def admin(store: EntityStore) -> User:
    return store.create_user("Ada", "Admin", "ada@uni.test", role="admin")


@pytest.fixture
def student(store: EntityStore, school: School) -> User:
    return store.create_user("Sam", "Student", "sam@uni.test", school_id=school.id)


def as_user(user: User) -> dict[str, str]:
    return {"X-User-Id": user.id}


@pytest.mark.unit
class TestCreateUser:
    """Tests for POST /users."""

    def test_create_student(self, client: TestClient, admin: User, school: School) -> None:
        response = client.post(
            "/api/v1/users",
            json={
                "first_name": "Lee",
                "last_name": "Learner",
                "email": "lee@uni.test",
                "school_id": school.id,
            },
            headers=as_user(admin),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["role"] == "student"
        assert data["full_name"] == "Lee Learner"
        assert data["max_credits"] == 24
        assert data["current_credits"] == 0
        assert len(data["student_number"]) == 8
        assert data["student_number"].isdigit()

    def test_teacher_has_no_student_number(self, client: TestClient, admin: User) -> None:
        response = client.post(
            "/api/v1/users",
            json={"first_name": "Tom", "last_name": "Teacher", "email": "tom@uni.test", "role": "teacher"},
            headers=as_user(admin),
        )
        assert response.json()["data"]["student_number"] is None

    def test_student_without_school(self, client: TestClient, admin: User) -> None:
        response = client.post(
            "/api/v1/users",
            json={"first_name": "No", "last_name": "School", "email": "no@uni.test"},
            headers=as_user(admin),
        )
        assert response.status_code == 422
        assert response.json()["data"] is None

    def test_duplicate_email(self, client: TestClient, admin: User) -> None:
        response = client.post(
            "/api/v1/users",
            json={"first_name": "Ada", "last_name": "Again", "email": "ada@uni.test", "role": "admin"},
            headers=as_user(admin),
        )
        assert response.status_code == 409

    def test_students_cannot_create_users(self, client: TestClient, student: User) -> None:
        response = client.post(
            "/api/v1/users",
            json={"first_name": "X", "last_name": "Y", "email": "x@uni.test", "role": "admin"},
            headers=as_user(student),
        )
        assert response.status_code == 403


@pytest.mark.unit
class TestReadUsers:
    """Tests for GET /users, /users/me and /users/{id}."""

    def test_me(self, client: TestClient, student: User) -> None:
        response = client.get("/api/v1/users/me", headers=as_user(student))
        assert response.json()["data"]["id"] == student.id

    def test_other_user_forbidden(self, client: TestClient, student: User, admin: User) -> None:
        response = client.get(f"/api/v1/users/{admin.id}", headers=as_user(student))
        assert response.status_code == 403

    def test_admin_lists_by_role(self, client: TestClient, student: User, admin: User) -> None:
        response = client.get("/api/v1/users", params={"role": "student"}, headers=as_user(admin))
        assert [u["id"] for u in response.json()["data"]] == [student.id]

    def test_inactive_user_is_unauthorized(
        self, client: TestClient, store: EntityStore, student: User
    ) -> None:
        store.update_user(student.id, is_active=False)
        response = client.get("/api/v1/users/me", headers=as_user(student))
        assert response.status_code == 401
        assert response.json()["error"] == "User is inactive"

    def test_credits_requires_semester(self, client: TestClient, student: User) -> None:
        response = client.get(f"/api/v1/users/{student.id}/credits", headers=as_user(student))
        assert response.status_code == 422

    def test_credits_unknown_semester(self, client: TestClient, student: User) -> None:
        response = client.get(
            f"/api/v1/users/{student.id}/credits",
            params={"semester_id": "missing"},
            headers=as_user(student),
        )
        assert response.status_code == 404


@pytest.mark.unit
class TestSchoolAndSubjectRoutes:
    """Tests for the school and subject catalog routes."""

    def test_school_code_upper_cased(self, client: TestClient, admin: User) -> None:
        response = client.post(
            "/api/v1/schools",
            json={"school_code": " sci ", "school_name": "Science"},
            headers=as_user(admin),
        )
        assert response.status_code == 201
        assert response.json()["data"]["school_code"] == "SCI"

    def test_rename_school(self, client: TestClient, admin: User, school: School) -> None:
        response = client.patch(
            f"/api/v1/schools/{school.id}", json={"school_name": "Engineering & CS"}, headers=as_user(admin)
        )
        assert response.json()["data"]["school_name"] == "Engineering & CS"

    def test_unknown_school(self, client: TestClient, student: User) -> None:
        response = client.get("/api/v1/schools/missing", headers=as_user(student))
        assert response.status_code == 404

    def test_subject_credits_out_of_range(self, client: TestClient, admin: User) -> None:
        response = client.post(
            "/api/v1/subjects",
            json={"subject_code": "big", "subject_name": "Too big", "credits": 11},
            headers=as_user(admin),
        )
        assert response.status_code == 422

    def test_subjects_filtered_by_school(
        self, client: TestClient, store: EntityStore, admin: User, school: School
    ) -> None:
        offered = store.create_subject("math101", "Calculus", 3, school_ids=[school.id])
        store.create_subject("art101", "Drawing", 2)

        response = client.get("/api/v1/subjects", params={"school_id": school.id}, headers=as_user(admin))

        assert [s["id"] for s in response.json()["data"]] == [offered.id]
