"""
API tests for the admin dashboard, overview and user administration
"""

from datetime import timedelta

URL = "/api/v1/admin"


def test_dashboard_summary(client, seed, add_inspection, admin_headers):
    add_inspection(severity="None", status="Completed", age=timedelta(minutes=30))
    add_inspection(severity="None", status="Completed", age=timedelta(minutes=10))
    add_inspection(severity="High", status="Pending", age=timedelta(hours=50), leakage_type_id=seed.hose_leak_id)
    add_inspection(severity="Low", status="Pending", age=timedelta(hours=3), leakage_type_id=seed.hose_leak_id)
    add_inspection(severity="Medium", status="Completed", age=timedelta(days=3), leakage_type_id=seed.seal_leak_id)

    response = client.get(f"{URL}/dashboard", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    summary = body["summary"]
    assert body["delay_threshold_hours"] == 48
    assert summary["total"] == 5
    assert summary["status_counts"] == {"pending": 2, "completed": 3}
    assert summary["delayed_count"] == 1
    assert summary["leakage_free_counts"]["week"] == 2
    assert summary["leakage_free_counts"]["month"] == 2
    assert [(t["code"], t["count"]) for t in summary["top_leakages"]] == [("HYD-HOSE", 2), ("CYL-SEAL", 1)]
    assert len(body["recent"]) == 5
    assert [r["is_delayed"] for r in body["recent"]].count(True) == 1


def test_dashboard_filters(client, seed, add_inspection, admin_headers):
    add_inspection(severity="High", status="Pending", age=timedelta(hours=2))
    add_inspection(severity="None", status="Completed", age=timedelta(hours=1))
    add_inspection(severity="Low", status="Pending", age=timedelta(days=10))

    pending = client.get(f"{URL}/dashboard", params={"status": "Pending"}, headers=admin_headers).json()
    limited = client.get(f"{URL}/dashboard", params={"limit": 1}, headers=admin_headers).json()
    high = client.get(f"{URL}/dashboard", params={"severity": "High"}, headers=admin_headers).json()

    assert pending["summary"]["total"] == 2
    assert limited["summary"]["total"] == 1
    assert limited["recent"][0]["severity"] == "None"
    assert [r["severity"] for r in high["recent"]] == ["High"]


def test_dashboard_rejects_unknown_status(client, seed, admin_headers):
    response = client.get(f"{URL}/dashboard", params={"status": "pending"}, headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["error"]["type"] == "validation_error"


def test_overview_counts_recent_inspections(client, add_inspection, admin_headers):
    for hours in range(12):
        add_inspection(severity="Low", status="Pending", age=timedelta(hours=hours))
    add_inspection(severity="High", status="Pending", age=timedelta(hours=70))

    response = client.get(f"{URL}/overview", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert len(body["recent"]) == 10
    assert body["status_counts"]["pending"] == 10
    # The overdue inspection is outside the ten most recent
    assert body["delayed_count"] == 0


def test_admin_routes_require_admin(client, tester_headers, repairman_headers):
    assert client.get(f"{URL}/dashboard", headers=tester_headers).status_code == 403
    assert client.get(f"{URL}/overview", headers=repairman_headers).status_code == 403
    assert client.get(f"{URL}/users", headers=tester_headers).status_code == 403


def test_list_users_with_roles(client, admin_headers):
    response = client.get(f"{URL}/users", headers=admin_headers)

    assert response.status_code == 200
    users = {u["email"]: u["roles"] for u in response.json()}
    assert users["dual@example.com"] == ["repairman", "tester"]
    assert users["admin@example.com"] == ["admin"]


def test_create_user_and_login(client, admin_headers):
    response = client.post(
        f"{URL}/users",
        json={
            "email": "new.tester@example.com",
            "password": "pa55word",
            "full_name": "Nia New",
            "roles": ["tester"],
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["roles"] == ["tester"]

    login = client.post(
        "/api/v1/auth/login", data={"username": "new.tester@example.com", "password": "pa55word"}
    )
    assert login.status_code == 200
    assert login.json()["role"] == "tester"


def test_create_duplicate_user(client, admin_headers):
    response = client.post(
        f"{URL}/users",
        json={"email": "tester@example.com", "password": "secret123", "full_name": "Dup"},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_assign_and_remove_role(client, seed, admin_headers):
    user_url = f"{URL}/users/{seed.tester_id}/roles"

    assigned = client.put(f"{user_url}/repairman", headers=admin_headers)
    again = client.put(f"{user_url}/repairman", headers=admin_headers)
    removed = client.delete(f"{user_url}/tester", headers=admin_headers)

    assert assigned.status_code == 200
    assert assigned.json()["roles"] == ["repairman", "tester"]
    assert again.json()["roles"] == ["repairman", "tester"]
    assert removed.json()["roles"] == ["repairman"]


def test_role_changes_apply_to_existing_tokens(client, seed, admin_headers, tester_headers):
    client.delete(f"{URL}/users/{seed.tester_id}/roles/tester", headers=admin_headers)

    response = client.get("/api/v1/inspections/mine", headers=tester_headers)

    assert response.status_code == 403


def test_unknown_role_is_rejected(client, seed, admin_headers):
    response = client.put(f"{URL}/users/{seed.tester_id}/roles/superuser", headers=admin_headers)

    assert response.status_code == 422
