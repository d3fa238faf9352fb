def register_user(client, payload):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    return response.json()


def login_user(client, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def test_register_login_me(client):
    register_payload = {
        "name": "Admin User",
        "email": "Admin@Example.com",
        "password": "password123",
        "role": "admin",
        "department": "Administration",
    }

    data = register_user(client, register_payload)
    assert data["email"] == "admin@example.com"
    assert data["role"] == "admin"
    assert data["has_timetable_admin"] is False

    login_response = client.post(
        "/api/auth/login",
        json={"email": "admin@example.com", "password": "password123"},
    )
    assert login_response.status_code == 200
    login_data = login_response.json()
    assert login_data["token_type"] == "bearer"
    assert login_data["user"]["email"] == "admin@example.com"

    me_response = client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {login_data['access_token']}"}
    )
    assert me_response.status_code == 200
    assert me_response.json()["name"] == "Admin User"


def test_duplicate_email_is_rejected(client):
    payload = {"name": "Trainer", "email": "trainer@example.com", "password": "password123", "role": "trainer"}
    register_user(client, payload)

    duplicate = client.post("/api/auth/register", json=payload)
    assert duplicate.status_code == 409


def test_wrong_password_is_unauthorized(client):
    register_user(
        client,
        {"name": "Trainer", "email": "trainer@example.com", "password": "password123", "role": "trainer"},
    )

    response = client.post("/api/auth/login", json={"email": "trainer@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_invalid_token_is_unauthorized(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_admin_grants_timetable_admin(client):
    register_user(
        client,
        {"name": "Admin", "email": "admin@example.com", "password": "password123", "role": "admin"},
    )
    employee = register_user(
        client,
        {"name": "Coordinator", "email": "coord@example.com", "password": "password123", "role": "employee"},
    )
    admin_token = login_user(client, "admin@example.com", "password123")
    employee_token = login_user(client, "coord@example.com", "password123")

    denied = client.put(
        f"/api/users/{employee['id']}/timetable-admin",
        json={"has_timetable_admin": True},
        headers={"Authorization": f"Bearer {employee_token}"},
    )
    assert denied.status_code == 403

    granted = client.put(
        f"/api/users/{employee['id']}/timetable-admin",
        json={"has_timetable_admin": True},
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert granted.status_code == 200
    assert granted.json()["has_timetable_admin"] is True

    # The delegate can now manage catalog data.
    room = client.post(
        "/api/rooms/",
        json={"name": "Lab 1", "capacity": 20, "room_type": "lab"},
        headers={"Authorization": f"Bearer {employee_token}"},
    )
    assert room.status_code == 201
