"""Integration tests for catalog, semester, change request and ledger routes."""

import pytest

from coursereg.entity_store import Course


@pytest.mark.integration
class TestCatalogCrudFullFlow:
    """An admin builds a small catalog over HTTP."""

    def test_catalog_full_flow(self, api) -> None:
        """School -> subject -> classroom -> semester -> course."""
        admin = api.as_user(api.catalog.admin)

        # 1. School
        school = api.client.post(
            "/api/v1/schools", json={"school_code": "law", "school_name": "Law"}, headers=admin
        )
        assert school.status_code == 201
        school_id = school.json()["data"]["id"]

        # 2. Subject offered by the school
        subject = api.client.post(
            "/api/v1/subjects",
            json={"subject_code": "law101", "subject_name": "Torts", "credits": 2, "school_ids": [school_id]},
            headers=admin,
        )
        assert subject.status_code == 201
        assert subject.json()["data"]["school_ids"] == [school_id]

        # 3. Classroom
        room = api.client.post(
            "/api/v1/classrooms",
            json={"building": 2, "floor": 3, "room_number": 4, "room_type": "lecture_hall", "capacity": 120},
            headers=admin,
        )
        assert room.status_code == 201
        room_data = room.json()["data"]

        # 4. Semester
        semester = api.client.post(
            "/api/v1/semesters",
            json={
                "name": "Spring 2026",
                "code": "spring-2026",
                "academic_year": "2025-2026",
                "semester_number": 2,
                "start_date": "2026-01-15T00:00:00",
                "end_date": "2026-05-20T00:00:00",
                "registration_start_date": "2026-01-01T00:00:00",
                "registration_end_date": "2026-01-14T00:00:00",
                "withdrawal_deadline": "2026-03-01T00:00:00",
            },
            headers=admin,
        )
        assert semester.status_code == 201
        semester_id = semester.json()["data"]["id"]

        # 5. Course without a teacher starts locked
        course = api.client.post(
            "/api/v1/courses",
            json={
                "subject_id": subject.json()["data"]["id"],
                "semester_id": semester_id,
                "class_code": "a",
                "max_students": 50,
                "schedule": [{"day_of_week": 5, "period": 3, "classroom_id": room_data["id"]}],
            },
            headers=admin,
        )
        assert course.status_code == 201
        course_data = course.json()["data"]
        assert course_data["is_active"] is False
        assert course_data["credits"] == 2

        # 6. Assigning a teacher and opening it
        updated = api.client.patch(
            f"/api/v1/courses/{course_data['id']}",
            json={"teacher_id": api.catalog.teacher.id, "is_active": True},
            headers=admin,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["teacher_id"] == api.catalog.teacher.id
        assert updated.json()["data"]["is_active"] is True

        listed = api.client.get(
            "/api/v1/courses", params={"semester_id": semester_id}, headers=api.as_user(api.catalog.student)
        )
        assert [c["id"] for c in listed.json()["data"]] == [course_data["id"]]

    def test_duplicate_school_code_is_409(self, api) -> None:
        response = api.client.post(
            "/api/v1/schools",
            json={"school_code": "eng", "school_name": "Engineering again"},
            headers=api.as_user(api.catalog.admin),
        )
        assert response.status_code == 409

    def test_students_cannot_write_catalog(self, api) -> None:
        response = api.client.post(
            "/api/v1/schools",
            json={"school_code": "art", "school_name": "Art"},
            headers=api.as_user(api.catalog.student),
        )
        assert response.status_code == 403
        assert response.json() == {"data": None, "error": "Admin access required"}

    def test_request_body_validation(self, api) -> None:
        response = api.client.post(
            "/api/v1/classrooms",
            json={"building": 9, "floor": 1, "room_number": 1, "room_type": "regular", "capacity": 10},
            headers=api.as_user(api.catalog.admin),
        )
        assert response.status_code == 422

    def test_delete_course_refunds(self, api) -> None:
        catalog = api.catalog
        created = api.client.post(
            "/api/v1/registrations",
            json={"course_id": catalog.math_a.id, "semester_id": catalog.semester.id},
            headers=api.as_user(catalog.student),
        ).json()["data"]
        api.client.post(f"/api/v1/registrations/{created['id']}/approve", headers=api.as_user(catalog.admin))

        response = api.client.delete(f"/api/v1/courses/{catalog.math_a.id}", headers=api.as_user(catalog.admin))

        assert response.status_code == 200
        assert response.json()["data"] == {
            "course_id": catalog.math_a.id,
            "deleted_registrations": [created["id"]],
            "refunded_credits": {catalog.student.id: 3},
        }
        assert api.store.get_user(catalog.student.id).current_credits == 0


@pytest.mark.integration
class TestSemesterRoutes:
    """Current and open semester lookups."""

    def test_current_semester(self, api) -> None:
        response = api.client.get("/api/v1/semesters/current", headers=api.as_user(api.catalog.student))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == api.catalog.semester.id
        assert response.json()["data"]["registration_open"] is True

    def test_set_current(self, api) -> None:
        response = api.client.post(
            f"/api/v1/semesters/{api.catalog.semester.id}/set-current", headers=api.as_user(api.catalog.admin)
        )
        assert response.json()["data"]["is_current"] is True

        flagged = api.client.get(
            "/api/v1/semesters", params={"is_current": True}, headers=api.as_user(api.catalog.admin)
        )
        assert [s["id"] for s in flagged.json()["data"]] == [api.catalog.semester.id]


@pytest.mark.integration
class TestChangeRequestRoutes:
    """Students request a school change; admins resolve it."""

    def test_submit_and_approve(self, api) -> None:
        catalog = api.catalog
        submitted = api.client.post(
            "/api/v1/change-requests",
            json={"requested_school_id": catalog.other_school.id},
            headers=api.as_user(catalog.student),
        )
        assert submitted.status_code == 201
        request = submitted.json()["data"]
        assert request["request_type"] == "change_school"
        assert request["status"] == "pending"

        again = api.client.post(
            "/api/v1/change-requests",
            json={"requested_school_id": catalog.other_school.id},
            headers=api.as_user(catalog.student),
        )
        assert again.status_code == 409

        approved = api.client.post(
            f"/api/v1/change-requests/{request['id']}/approve",
            json={"reason": "transfer accepted"},
            headers=api.as_user(catalog.admin),
        )
        assert approved.status_code == 200
        assert approved.json()["data"]["status"] == "approved"
        assert api.store.get_user(catalog.student.id).school_id == catalog.other_school.id

    def test_only_admins_resolve(self, api) -> None:
        catalog = api.catalog
        request = api.client.post(
            "/api/v1/change-requests",
            json={"requested_school_id": catalog.other_school.id},
            headers=api.as_user(catalog.student),
        ).json()["data"]

        response = api.client.post(
            f"/api/v1/change-requests/{request['id']}/reject", headers=api.as_user(catalog.teacher)
        )
        assert response.status_code == 403


@pytest.mark.integration
class TestLedgerRoutes:
    """Audit, repair and recompute over HTTP."""

    def test_audit_reports_drift_and_repair_fixes_it(self, api) -> None:
        catalog = api.catalog
        admin = api.as_user(catalog.admin)
        with api.store.transaction() as session:
            session.get(Course, catalog.math_b.id).current_students = 4

        audit = api.client.get("/api/v1/ledger/audit", headers=admin).json()["data"]
        assert audit["is_consistent"] is False
        assert audit["courses"] == [{"course_id": catalog.math_b.id, "stored": 4, "derived": 0}]

        repaired = api.client.post("/api/v1/ledger/repair", headers=admin).json()["data"]
        assert repaired["repaired"] is True

        assert api.client.get("/api/v1/ledger/audit", headers=admin).json()["data"]["is_consistent"] is True

    def test_recompute_course(self, api) -> None:
        catalog = api.catalog
        with api.store.transaction() as session:
            session.get(Course, catalog.math_a.id).current_students = 7

        response = api.client.post(
            f"/api/v1/ledger/courses/{catalog.math_a.id}/recompute", headers=api.as_user(catalog.admin)
        )

        assert response.json()["data"] == {"course_id": catalog.math_a.id, "current_students": 0}

    def test_ledger_is_admin_only(self, api) -> None:
        response = api.client.get("/api/v1/ledger/audit", headers=api.as_user(api.catalog.teacher))
        assert response.status_code == 403

    def test_activity_log_records_registrations(self, api) -> None:
        catalog = api.catalog
        created = api.client.post(
            "/api/v1/registrations",
            json={"course_id": catalog.math_a.id, "semester_id": catalog.semester.id},
            headers=api.as_user(catalog.student),
        ).json()["data"]

        response = api.client.get(
            "/api/v1/activity-logs",
            params={"action": "registration.create"},
            headers=api.as_user(catalog.admin),
        )

        assert response.status_code == 200
        [entry] = response.json()["data"]
        assert entry["target_id"] == created["id"]
        assert entry["user_id"] == catalog.student.id
