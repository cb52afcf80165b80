"""
API tests for the repair queue and repair submission
"""

from datetime import timedelta
from uuid import uuid4

from leaktrack.core.exceptions import PhotoUploadError

URL = "/api/v1/repairs"


def test_queue_lists_open_inspections_oldest_first(client, add_inspection, repairman_headers):
    newest = add_inspection(age=timedelta(hours=1))
    legacy = add_inspection(status="Delayed", age=timedelta(hours=90))
    overdue = add_inspection(age=timedelta(hours=60))
    add_inspection(severity="None", status="Completed", age=timedelta(hours=100))

    response = client.get(f"{URL}/queue", headers=repairman_headers)

    assert response.status_code == 200
    rows = response.json()
    assert [r["id"] for r in rows] == [str(legacy), str(overdue), str(newest)]
    assert [r["is_delayed"] for r in rows] == [False, True, False]


def test_queue_requires_repairman_or_admin(client, tester_headers, admin_headers):
    assert client.get(f"{URL}/queue", headers=tester_headers).status_code == 403
    assert client.get(f"{URL}/queue", headers=admin_headers).status_code == 200


def test_repair_with_photo_completes_inspection(
    client, seed, add_inspection, repairman_headers, photo_storage
):
    inspection_id = add_inspection(leakage_type_id=seed.hose_leak_id)

    response = client.post(
        URL,
        data={"inspection_id": str(inspection_id), "repair_status": "Repairable", "notes": "Hose replaced"},
        files={"photo": ("proof.jpg", b"\xff\xd8fake-jpeg", "image/jpeg")},
        headers=repairman_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["repair_status"] == "Repairable"
    assert body["notes"] == "Hose replaced"
    assert body["repairman"]["full_name"] == "Rosa Repair"
    assert body["started_at"] is not None
    assert body["completed_at"] is not None
    assert body["inspection"]["status"] == "Completed"
    assert [r["id"] for r in body["inspection"]["repairs"]] == [body["id"]]

    prefix = f"/photos/{seed.repairman_id}/{inspection_id}-"
    assert body["photo_url"].startswith(prefix)
    assert body["photo_url"].endswith(".jpg")
    stored = photo_storage.root / body["photo_url"][len("/photos/"):]
    assert stored.read_bytes() == b"\xff\xd8fake-jpeg"

    queue = client.get(f"{URL}/queue", headers=repairman_headers).json()
    assert str(inspection_id) not in [r["id"] for r in queue]


def test_not_repairable_still_completes(client, add_inspection, repairman_headers):
    inspection_id = add_inspection()

    response = client.post(
        URL,
        data={"inspection_id": str(inspection_id), "repair_status": "Not Repairable"},
        headers=repairman_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["photo_url"] is None
    assert body["inspection"]["status"] == "Completed"


def test_upload_failure_does_not_block_repair(
    client, add_inspection, repairman_headers, photo_storage, monkeypatch
):
    async def broken_save(name, data):
        raise PhotoUploadError("bucket unavailable", {"name": name})

    monkeypatch.setattr(photo_storage, "save", broken_save)
    inspection_id = add_inspection()

    response = client.post(
        URL,
        data={"inspection_id": str(inspection_id), "repair_status": "Repairable"},
        files={"photo": ("proof.png", b"png-bytes", "image/png")},
        headers=repairman_headers,
    )

    assert response.status_code == 201
    assert response.json()["photo_url"] is None
    assert response.json()["inspection"]["status"] == "Completed"


def test_repair_for_unknown_inspection(client, seed, repairman_headers):
    response = client.post(
        URL,
        data={"inspection_id": str(uuid4()), "repair_status": "Repairable"},
        headers=repairman_headers,
    )

    assert response.status_code == 404


def test_invalid_repair_status(client, add_inspection, repairman_headers):
    inspection_id = add_inspection()

    response = client.post(
        URL,
        data={"inspection_id": str(inspection_id), "repair_status": "Fixed"},
        headers=repairman_headers,
    )

    assert response.status_code == 422


def test_testers_cannot_submit_repairs(client, add_inspection, tester_headers):
    inspection_id = add_inspection()

    response = client.post(
        URL,
        data={"inspection_id": str(inspection_id), "repair_status": "Repairable"},
        headers=tester_headers,
    )

    assert response.status_code == 403


def test_my_repairs(client, seed, add_inspection, repairman_headers, make_headers):
    first = add_inspection()
    second = add_inspection()
    for inspection_id in (first, second):
        posted = client.post(
            URL,
            data={"inspection_id": str(inspection_id), "repair_status": "Repairable"},
            headers=repairman_headers,
        )
        assert posted.status_code == 201
    other = add_inspection()
    client.post(
        URL,
        data={"inspection_id": str(other), "repair_status": "Repairable"},
        headers=make_headers(seed.dual_id, "repairman"),
    )

    response = client.get(f"{URL}/mine", headers=repairman_headers)

    assert response.status_code == 200
    assert [r["inspection_id"] for r in response.json()] == [str(second), str(first)]


def test_inspection_detail_embeds_its_repair(client, seed, add_inspection, repairman_headers, tester_headers):
    inspection_id = add_inspection(age=timedelta(hours=70), leakage_type_id=seed.seal_leak_id)
    posted = client.post(
        URL,
        data={"inspection_id": str(inspection_id), "repair_status": "Repairable", "notes": "Seal swapped"},
        headers=repairman_headers,
    )
    assert posted.status_code == 201

    response = client.get(f"/api/v1/inspections/{inspection_id}", headers=tester_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Completed"
    assert body["is_delayed"] is False
    assert [r["id"] for r in body["repairs"]] == [posted.json()["id"]]
    assert body["repairs"][0]["repairman"]["full_name"] == "Rosa Repair"
    assert body["machine"]["model"]["product_line"]["code"] == "EXC"


def test_my_repairs_with_several_repairs_on_one_inspection(client, add_inspection, repairman_headers):
    inspection_id = add_inspection()
    repair_ids = set()
    for status in ("Not Repairable", "Repairable"):
        posted = client.post(
            URL,
            data={"inspection_id": str(inspection_id), "repair_status": status},
            headers=repairman_headers,
        )
        assert posted.status_code == 201
        repair_ids.add(posted.json()["id"])

    response = client.get(f"{URL}/mine", headers=repairman_headers)

    assert response.status_code == 200
    rows = response.json()
    assert {r["id"] for r in rows} == repair_ids
    for row in rows:
        assert row["inspection_id"] == str(inspection_id)
        assert row["inspection"]["status"] == "Completed"
        assert {r["id"] for r in row["inspection"]["repairs"]} == repair_ids
        assert row["inspection"]["machine"]["model"]["code"] == "EX-210"
        assert row["inspection"]["tester"]["full_name"] == "Tomas Tester"
