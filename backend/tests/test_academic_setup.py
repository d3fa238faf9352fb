from app.core.security import create_access_token
from app.models.user import User, UserRole


def create_user(db_session, *, email, role):
    user = User(name=email.split("@")[0].title(), email=email, hashed_password="x", role=role)
    db_session.add(user)
    db_session.commit()
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}, user.id


def test_full_setup_through_the_api_feeds_generation(client, db_session):
    admin_headers, _ = create_user(db_session, email="admin@example.com", role=UserRole.admin)
    trainer_headers, trainer_id = create_user(db_session, email="trainer@example.com", role=UserRole.trainer)

    room = client.post("/api/rooms/", json={"name": "Room A"}, headers=admin_headers)
    assert room.status_code == 201
    assert room.json()["room_type"] == "classroom"

    period = client.post(
        "/api/lesson-periods/",
        json={"name": "First", "start_time": "08:00", "end_time": "09:30"},
        headers=admin_headers,
    )
    assert period.status_code == 201
    assert period.json()["duration"] == 90

    subject = client.post(
        "/api/subjects/",
        json={"code": "net101", "name": "Networking", "can_be_online": True},
        headers=admin_headers,
    )
    assert subject.status_code == 201
    assert subject.json()["code"] == "NET101"

    class_group = client.post(
        "/api/classes/",
        json={"code": "net-a", "name": "Networking A", "department": "ICT"},
        headers=admin_headers,
    )
    assert class_group.status_code == 201

    term = client.post(
        "/api/terms/",
        json={
            "name": "Autumn",
            "start_date": "2026-10-19",
            "end_date": "2027-01-29",
            "working_days": [5, 1, 3, 1],
            "holidays": ["2026-12-25"],
            "is_active": True,
        },
        headers=admin_headers,
    )
    assert term.status_code == 201
    term_body = term.json()
    assert term_body["working_days"] == [1, 3, 5]
    assert term_body["holidays"] == ["2026-12-25"]

    assigned = client.post(
        f"/api/terms/{term_body['id']}/classes",
        json={"class_ids": [class_group.json()["id"]]},
        headers=admin_headers,
    )
    assert assigned.status_code == 201
    assert [item["code"] for item in assigned.json()] == ["NET-A"]

    class_subject = client.post(
        f"/api/classes/{class_group.json()['id']}/subjects",
        json={"subject_id": subject.json()["id"], "term_id": term_body["id"]},
        headers=admin_headers,
    )
    assert class_subject.status_code == 201

    selection = client.post(
        "/api/trainer-assignments/",
        json={"class_subject_id": class_subject.json()["id"]},
        headers=trainer_headers,
    )
    assert selection.status_code == 201
    assert selection.json()["trainer_id"] == trainer_id
    assert selection.json()["term_id"] == term_body["id"]

    preflight = client.get(
        "/api/timetable/generate/pre-flight",
        params={"term_id": term_body["id"]},
        headers=admin_headers,
    )
    assert preflight.json()["errors"] == []

    generated = client.post(
        "/api/timetable/generate",
        json={"term_id": term_body["id"], "sessions_per_week": 2, "min_classes_per_day": 1},
        headers=admin_headers,
    )
    assert generated.status_code == 201
    assert generated.json()["stats"]["slots_created"] == 2


def test_invalid_catalog_payloads(client, db_session):
    admin_headers, _ = create_user(db_session, email="admin@example.com", role=UserRole.admin)

    backwards = client.post(
        "/api/lesson-periods/",
        json={"name": "Broken", "start_time": "10:00", "end_time": "09:00"},
        headers=admin_headers,
    )
    assert backwards.status_code == 422

    bad_format = client.post(
        "/api/lesson-periods/",
        json={"name": "Broken", "start_time": "8:00", "end_time": "09:00"},
        headers=admin_headers,
    )
    assert bad_format.status_code == 422

    bad_day = client.post(
        "/api/terms/",
        json={"name": "Bad", "start_date": "2026-10-19", "end_date": "2027-01-29", "working_days": [7]},
        headers=admin_headers,
    )
    assert bad_day.status_code == 422

    holiday_outside = client.post(
        "/api/terms/",
        json={"name": "Bad", "start_date": "2026-10-19", "end_date": "2027-01-29", "holidays": ["2027-03-01"]},
        headers=admin_headers,
    )
    assert holiday_outside.status_code == 422


def test_duplicates_and_permissions(client, db_session):
    admin_headers, _ = create_user(db_session, email="admin@example.com", role=UserRole.admin)
    trainer_headers, _ = create_user(db_session, email="trainer@example.com", role=UserRole.trainer)

    assert client.post("/api/rooms/", json={"name": "Room A"}, headers=admin_headers).status_code == 201
    assert client.post("/api/rooms/", json={"name": "Room A"}, headers=admin_headers).status_code == 409
    assert client.post("/api/rooms/", json={"name": "Room B"}, headers=trainer_headers).status_code == 403
    assert client.get("/api/rooms/", headers=trainer_headers).status_code == 200

    assert client.post("/api/subjects/", json={"code": "A1", "name": "A"}, headers=admin_headers).status_code == 201
    assert client.post("/api/subjects/", json={"code": "a1", "name": "A"}, headers=admin_headers).status_code == 409


def test_activating_a_term_deactivates_the_others(client, db_session):
    admin_headers, _ = create_user(db_session, email="admin@example.com", role=UserRole.admin)
    first = client.post(
        "/api/terms/",
        json={"name": "First", "start_date": "2026-01-05", "end_date": "2026-04-30", "is_active": True},
        headers=admin_headers,
    ).json()
    second = client.post(
        "/api/terms/",
        json={"name": "Second", "start_date": "2026-09-07", "end_date": "2026-12-18"},
        headers=admin_headers,
    ).json()

    assert client.get("/api/terms/active", headers=admin_headers).json()["id"] == first["id"]

    activated = client.put(f"/api/terms/{second['id']}", json={"is_active": True}, headers=admin_headers)
    assert activated.status_code == 200

    active = client.get("/api/terms/active", headers=admin_headers)
    assert active.json()["id"] == second["id"]
    terms = {item["id"]: item for item in client.get("/api/terms/", headers=admin_headers).json()}
    assert terms[first["id"]]["is_active"] is False


def test_trainer_cannot_select_for_someone_else(client, db_session, seed_term):
    seeded = seed_term(subjects=2)
    class_subject_id = seeded.class_subjects[0].id
    other_trainer_id = seeded.trainers[1].id
    trainer_headers, _ = create_user(db_session, email="newtrainer@example.com", role=UserRole.trainer)

    response = client.post(
        "/api/trainer-assignments/",
        json={"class_subject_id": class_subject_id, "trainer_id": other_trainer_id},
        headers=trainer_headers,
    )
    assert response.status_code == 403
