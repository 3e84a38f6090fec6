import pytest

pytestmark = pytest.mark.anyio


async def _register(client, email: str, role: str = "supplier", headers=None) -> dict:
    r = await client.post(
        "/api/v1/accounts",
        json={"displayName": email.split("@")[0], "email": email, "role": role},
        headers=headers or {},
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _as(account: dict) -> dict[str, str]:
    return {"X-Actor-Id": account["id"], "X-Actor-Role": account["role"]}


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


async def test_missing_actor_headers_is_401(client):
    r = await client.get("/api/v1/submissions")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


async def test_only_first_admin_self_registers(client):
    root = await _register(client, "root@example.com", "admin")
    r = await client.post(
        "/api/v1/accounts",
        json={"displayName": "Intruder", "email": "x@example.com", "role": "admin"},
    )
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"

    ops = await _register(client, "ops@example.com", "admin", headers=_as(root))
    assert ops["role"] == "admin"


async def test_duplicate_email_lists_field(client):
    await _register(client, "ram@example.com")
    r = await client.post(
        "/api/v1/accounts", json={"displayName": "Ram", "email": "RAM@example.com"}
    )
    assert r.status_code == 422
    assert r.json()["error"]["details"]["fields"] == {"email": ["is already registered"]}


async def test_request_body_errors_use_the_same_envelope(client):
    supplier = await _register(client, "ram@example.com")
    r = await client.post(
        "/api/v1/submissions",
        json={"documents": [{"kind": "gmail"}]},
        headers=_as(supplier),
    )
    assert r.status_code == 422
    body = r.json()["error"]
    assert body["code"] == "VALIDATION_ERROR"
    assert "documents[0].reference" in body["details"]["fields"]


async def test_full_lifecycle_over_http(client):
    root = await _register(client, "root@example.com", "admin")
    ops = await _register(client, "ops@example.com", "admin", headers=_as(root))
    supplier = await _register(client, "ram@example.com")

    r = await client.put(
        f"/api/v1/accounts/{supplier['id']}/payout-profile",
        json={"method": "bank_transfer", "bankName": "NIC Asia", "accountHolderName": "Ram", "accountNumber": "0012"},
        headers=_as(supplier),
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["payoutProfile"]["method"] == "bank_transfer"

    r = await client.post(
        "/api/v1/submissions",
        json={"documents": [{"kind": "gmail", "reference": "a@gmail.com"}]},
        headers=_as(supplier),
    )
    assert r.status_code == 201, r.text
    submission_id = r.json()["data"]["id"]

    # Not verified yet
    r = await client.post("/api/v1/payouts", json={"amount": "100"}, headers=_as(supplier))
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "INELIGIBLE_ACCOUNT"

    r = await client.post(f"/api/v1/submissions/{submission_id}/claim", headers=_as(root))
    assert r.json()["data"]["status"] == "in_review"

    r = await client.post(f"/api/v1/submissions/{submission_id}/claim", headers=_as(ops))
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "ALREADY_CLAIMED"

    r = await client.post(
        f"/api/v1/submissions/{submission_id}/verify", json={"notes": "ok"}, headers=_as(root)
    )
    assert r.json()["data"]["status"] == "verified"

    r = await client.post(
        f"/api/v1/accounts/{supplier['id']}/credits", json={"amount": "1000"}, headers=_as(root)
    )
    assert r.status_code == 201, r.text

    r = await client.post("/api/v1/payouts", json={"amount": "600"}, headers=_as(supplier))
    assert r.status_code == 201, r.text
    payout_id = r.json()["data"]["id"]

    r = await client.post(
        f"/api/v1/payouts/{payout_id}/decision", json={"outcome": "approved"}, headers=_as(root)
    )
    assert r.json()["data"]["status"] == "approved"

    r = await client.post(
        f"/api/v1/payouts/{payout_id}/paid", json={"externalReference": "TXN1"}, headers=_as(root)
    )
    assert r.json()["data"]["status"] == "paid"

    r = await client.get(f"/api/v1/accounts/{supplier['id']}/balance", headers=_as(supplier))
    assert r.json()["data"]["available"] == "400.00"

    r = await client.get(f"/api/v1/payouts/{payout_id}/history", headers=_as(supplier))
    assert [e["newStatus"] for e in r.json()["data"]] == ["requested", "approved", "paid"]


async def test_invalid_transition_is_409(client):
    root = await _register(client, "root@example.com", "admin")
    supplier = await _register(client, "ram@example.com")
    r = await client.post(
        "/api/v1/submissions",
        json={"documents": [{"kind": "gmail", "reference": "a@gmail.com"}]},
        headers=_as(supplier),
    )
    submission_id = r.json()["data"]["id"]

    r = await client.post(f"/api/v1/submissions/{submission_id}/release", headers=_as(root))
    assert r.status_code == 409
    assert r.json()["error"]["details"] == {"status": "pending", "action": "submission.release"}


async def test_views_paginate_with_snapshot(client):
    root = await _register(client, "root@example.com", "admin")
    supplier = await _register(client, "ram@example.com")
    for i in range(3):
        await client.post(
            "/api/v1/submissions",
            json={"documents": [{"kind": "gmail", "reference": f"{i}@gmail.com"}]},
            headers=_as(supplier),
        )

    r = await client.get("/api/v1/views/review-queue", params={"limit": 2}, headers=_as(root))
    assert r.status_code == 200, r.text
    first = r.json()
    assert first["meta"]["total"] == 3
    assert first["meta"]["pages"] == 2
    snapshot = first["meta"]["snapshotId"]

    r = await client.get(
        "/api/v1/views/review-queue",
        params={"limit": 2, "page": 2, "snapshot": snapshot},
        headers=_as(root),
    )
    second = r.json()
    assert len(second["data"]) == 1
    ids = [s["id"] for s in first["data"] + second["data"]]
    assert len(set(ids)) == 3

    r = await client.get("/api/v1/views/nope", headers=_as(root))
    assert r.status_code == 404


async def test_supplier_list_is_scoped(client):
    ram = await _register(client, "ram@example.com")
    sita = await _register(client, "sita@example.com")
    for supplier in (ram, sita):
        await client.post(
            "/api/v1/submissions",
            json={"documents": [{"kind": "gmail", "reference": f"{supplier['id']}@gmail.com"}]},
            headers=_as(supplier),
        )

    r = await client.get("/api/v1/submissions", headers=_as(ram))
    assert [s["accountId"] for s in r.json()["data"]] == [ram["id"]]

    r = await client.get(
        "/api/v1/submissions", params={"accountId": sita["id"]}, headers=_as(ram)
    )
    assert r.status_code == 403
