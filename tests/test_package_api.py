"""
Tests for the /api/v1/packages endpoints
"""

import uuid

import pytest

BASE = "/api/v1/packages"


def _create(client, order_ref="ORD-1", driver_code="DRV-1"):
    response = client.post(BASE, json={"order_reference": order_ref, "driver_code": driver_code})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _set_status(client, package_id, status):
    return client.patch(f"{BASE}/{package_id}/status", json={"status": status})


class TestCreatePackage:

    def test_created_package_payload(self, client):
        response = client.post(BASE, json={"order_reference": "ORD-1", "driver_code": "DRV-1"})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["order_reference"] == "ORD-1"
        assert data["driver_code"] == "DRV-1"
        assert data["status"] == "WAITING"
        assert data["picked_up_at"] is None
        assert data["handed_over_at"] is None
        assert data["expired_at"] is None
        uuid.UUID(data["id"])

    def test_duplicate_order_reference_conflicts(self, client):
        _create(client, "ORD-1")

        response = client.post(BASE, json={"order_reference": "ORD-1"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "DuplicateOrderRefError"

    @pytest.mark.parametrize("payload", [{}, {"order_reference": ""}, {"order_reference": "   "}])
    def test_missing_order_reference_is_rejected(self, client, payload):
        response = client.post(BASE, json=payload)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestReadPackages:

    def test_get_by_id(self, client):
        created = _create(client)

        response = client.get(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    def test_get_unknown_id(self, client):
        response = client.get(f"{BASE}/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ResourceNotFoundError"

    def test_get_malformed_id(self, client):
        response = client.get(f"{BASE}/not-a-uuid")

        assert response.status_code == 422
        assert response.json()["error_code"] == "ValidationError"
        assert response.json()["details"]["field"] == "id"

    def test_get_by_order_reference(self, client):
        created = _create(client, "ORD-77")

        response = client.get(f"{BASE}/order/ORD-77")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    def test_get_by_unknown_order_reference(self, client):
        assert client.get(f"{BASE}/order/NOPE").status_code == 404

    def test_list_with_meta(self, client):
        for i in range(3):
            _create(client, f"ORD-{i}")

        response = client.get(BASE, params={"limit": 2})

        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 2
        assert body["meta"] == {"limit": 2, "offset": 0, "count": 2}

    @pytest.mark.parametrize("params,expected_meta", [
        ({}, {"limit": 50, "offset": 0}),
        ({"limit": 0}, {"limit": 1, "offset": 0}),
        ({"limit": 1000, "offset": -4}, {"limit": 100, "offset": 0}),
    ])
    def test_list_clamps_paging(self, client, params, expected_meta):
        _create(client)

        meta = client.get(BASE, params=params).json()["meta"]

        assert {"limit": meta["limit"], "offset": meta["offset"]} == expected_meta

    def test_list_status_filter(self, client):
        waiting = _create(client, "ORD-1")
        picked = _create(client, "ORD-2")
        _set_status(client, picked["id"], "PICKED")

        data = client.get(BASE, params={"status": "PICKED"}).json()["data"]
        assert [p["id"] for p in data] == [picked["id"]]

        data = client.get(BASE, params={"status": "waiting"}).json()["data"]
        assert [p["id"] for p in data] == [waiting["id"]]

    def test_unknown_status_filter_is_ignored(self, client):
        _create(client, "ORD-1")
        _create(client, "ORD-2")

        response = client.get(BASE, params={"status": "LOST"})

        assert response.status_code == 200
        assert response.json()["meta"]["count"] == 2


class TestUpdateStatus:

    def test_lifecycle(self, client):
        created = _create(client)

        picked = _set_status(client, created["id"], "PICKED")
        assert picked.status_code == 200
        assert picked.json()["data"]["status"] == "PICKED"
        assert picked.json()["data"]["picked_up_at"] is not None

        handed_over = _set_status(client, created["id"], "HANDED_OVER")
        assert handed_over.status_code == 200
        assert handed_over.json()["data"]["handed_over_at"] is not None

    def test_invalid_transition(self, client):
        created = _create(client)
        _set_status(client, created["id"], "PICKED")

        response = _set_status(client, created["id"], "WAITING")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "InvalidTransitionError"
        assert body["details"] == {"current_status": "PICKED", "requested_status": "WAITING"}

    def test_unknown_status_value(self, client):
        created = _create(client)

        response = _set_status(client, created["id"], "LOST")

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_package(self, client):
        assert _set_status(client, str(uuid.uuid4()), "PICKED").status_code == 404


class TestDeleteAndStats:

    def test_delete(self, client):
        created = _create(client)

        response = client.delete(f"{BASE}/{created['id']}")

        assert response.status_code == 204
        assert client.get(f"{BASE}/{created['id']}").status_code == 404
        assert client.delete(f"{BASE}/{created['id']}").status_code == 404

    def test_stats(self, client):
        first = _create(client, "ORD-1")
        _create(client, "ORD-2")
        _set_status(client, first["id"], "EXPIRED")

        response = client.get(f"{BASE}/stats")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total": 2, "waiting": 1, "picked": 0, "handed_over": 0, "expired": 1
        }


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_header_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


def test_order_reference_whitespace_is_preserved(client):
    padded = _create(client, " ORD-1")
    plain = _create(client, "ORD-1")

    assert padded["order_reference"] == " ORD-1"
    assert plain["order_reference"] == "ORD-1"
    assert padded["id"] != plain["id"]
