"""
API tests for login, token refresh and session role selection
"""

PASSWORD = "secret123"

LOGIN = "/api/v1/auth/login"


def login(client, email, role=None, password=PASSWORD):
    params = {"role": role} if role else None
    return client.post(LOGIN, data={"username": email, "password": password}, params=params)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["message"] == "Healthy"
    assert response.headers["X-Correlation-ID"]


def test_correlation_id_is_echoed(client):
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"


def test_single_role_user_gets_role_on_login(client, seed):
    response = login(client, "tester@example.com")

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "tester"
    assert body["token_type"] == "bearer"

    session = client.get("/api/v1/auth/session", headers=bearer(body["access_token"])).json()
    assert session["active_role"] == "tester"
    assert session["roles"] == ["tester"]
    assert session["profile"]["email"] == "tester@example.com"
    assert session["profile"]["full_name"] == "Tomas Tester"


def test_wrong_password_is_rejected(client, seed):
    response = login(client, "tester@example.com", password="nope")

    assert response.status_code == 401
    assert response.json()["error"]["type"] == "http_error"


def test_login_with_role_not_held(client, seed):
    response = login(client, "tester@example.com", role="admin")

    assert response.status_code == 403
    assert response.json()["error"]["type"] == "role_error"


def test_multi_role_user_must_select_a_role(client, seed):
    tokens = login(client, "dual@example.com").json()
    assert tokens["role"] is None

    blocked = client.get("/api/v1/inspections/mine", headers=bearer(tokens["access_token"]))
    assert blocked.status_code == 403
    assert blocked.json()["error"]["type"] == "role_error"

    switched = client.post(
        "/api/v1/auth/session/role", json={"role": "repairman"}, headers=bearer(tokens["access_token"])
    )
    assert switched.status_code == 200
    assert switched.json()["role"] == "repairman"

    queue = client.get("/api/v1/repairs/queue", headers=bearer(switched.json()["access_token"]))
    assert queue.status_code == 200


def test_select_role_not_held(client, seed):
    tokens = login(client, "dual@example.com", role="tester").json()

    response = client.post(
        "/api/v1/auth/session/role", json={"role": "admin"}, headers=bearer(tokens["access_token"])
    )

    assert response.status_code == 403


def test_refresh_keeps_selected_role(client, seed):
    tokens = login(client, "dual@example.com", role="repairman").json()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    assert response.json()["role"] == "repairman"


def test_refresh_rejects_access_token(client, seed):
    tokens = login(client, "tester@example.com").json()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


def test_missing_or_invalid_token(client, seed):
    assert client.get("/api/v1/auth/session").status_code == 401
    assert client.get("/api/v1/auth/session", headers=bearer("garbage")).status_code == 401


def test_role_claim_is_checked_against_store(client, seed, make_headers):
    # Token claims admin but the profile only holds tester
    response = client.get("/api/v1/admin/overview", headers=make_headers(seed.tester_id, "admin"))

    assert response.status_code == 403
    assert response.json()["error"]["type"] == "role_error"


def test_logout_is_stateless(client):
    response = client.post("/api/v1/auth/logout")

    assert response.status_code == 200
    assert response.json()["message"] == "Logged out"
