"""Tests for /api/invoices endpoints."""

from uuid import uuid4

import pytest

from builders import TEST_CLIENT_ID, make_invoice_create


def payload(**kwargs):
    return make_invoice_create(**kwargs).model_dump(mode="json")


@pytest.fixture
def draft(client):
    """A draft created over HTTP, as returned by the API."""
    return client.post("/api/invoices", json=payload()).json()["data"]


@pytest.fixture
def active(client, draft):
    return client.post(f"/api/invoices/{draft['id']}/activate").json()["data"]


class TestCreate:

    def test_creates_draft_with_derived_amounts(self, client):
        response = client.post("/api/invoices", json=payload())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["meta"]["message"] == "Invoice created successfully"
        data = body["data"]
        assert data["status"] == 0
        assert data["status_text"] == "Draft"
        assert data["due_date"] == "2024-01-16"
        assert data["subtotal_amount"] == "457.00"
        assert data["total_amount"] == "444.15"

    def test_empty_items_rejected(self, client):
        response = client.post("/api/invoices", json=payload(items=[]))

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"] == ["Invoice cannot be created without items."]
        assert client.get("/api/invoices").json()["data"] == []

    def test_other_company_rejected(self, company_b_client):
        response = company_b_client.post("/api/invoices", json=payload())

        assert response.status_code == 422
        assert response.json()["error"]["details"] == ["Company of invoice differs from selected company!"]

    def test_schema_errors_use_envelope(self, client):
        response = client.post("/api/invoices", json={"name": "x"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"]


class TestReads:

    def test_get_by_id(self, client, draft):
        response = client.get(f"/api/invoices/{draft['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == draft["id"]

    def test_get_missing(self, client):
        response = client.get(f"/api/invoices/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_list_period_filter(self, client, draft):
        inside = client.get("/api/invoices", params={"start": "2024-01-01", "end": "2024-01-31"})
        outside = client.get("/api/invoices", params={"start": "2024-02-01"})

        assert [i["id"] for i in inside.json()["data"]] == [draft["id"]]
        assert outside.json()["data"] == []

    def test_list_scoped_to_acting_company(self, client, company_b_client, draft):
        assert company_b_client.get("/api/invoices").json()["data"] == []

    def test_only_mine(self, client, draft):
        mine = client.get("/api/invoices", params={"only_mine": "true"}).json()["data"]
        other_user = client.get(
            "/api/invoices", params={"only_mine": "true"}, headers={"X-User-Id": str(uuid4())}
        ).json()["data"]

        assert len(mine) == 1
        assert other_user == []

    def test_statuses(self, client):
        data = client.get("/api/invoices/statuses").json()["data"]

        assert data[0] == {"value": 0, "name": "Draft"}
        assert data[-1] == {"value": 4, "name": "Partial Storno"}

    def test_next_number(self, client, active):
        response = client.get(f"/api/invoices/next-number/{TEST_CLIENT_ID}")

        assert response.json()["data"] == {"number": 2}

    def test_for_clients(self, client, draft):
        found = client.get(f"/api/invoices/for-clients/{TEST_CLIENT_ID},{uuid4()}").json()["data"]

        assert [i["id"] for i in found] == [draft["id"]]

    def test_for_clients_bad_id(self, client):
        response = client.get("/api/invoices/for-clients/nope")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_logs(self, client, draft, audit):
        audit.get_entity_history.return_value = [{"message": "Invoice created successfully"}]

        response = client.get(f"/api/invoices/{draft['id']}/logs", params={"count": 5})

        assert response.json()["data"] == [{"message": "Invoice created successfully"}]
        assert audit.get_entity_history.call_args.kwargs["limit"] == 5


class TestUpdate:

    def test_updates_draft(self, client, draft):
        response = client.put(f"/api/invoices/{draft['id']}", json={"name": "Renamed"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Renamed"

    def test_active_invoice_conflict(self, client, active):
        response = client.put(f"/api/invoices/{active['id']}", json={"name": "Too late"})

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Invalid action: Update. Only draft invoices can be updated"
        assert client.get(f"/api/invoices/{active['id']}").json()["data"]["name"] == "Consulting"


class TestActivate:

    def test_assigns_number(self, active):
        assert active["status"] == 1
        assert active["number"] == 1

    def test_second_activation_conflict(self, client, active):
        response = client.post(f"/api/invoices/{active['id']}/activate")

        assert response.status_code == 409


class TestSetStatus:

    def test_paid(self, client, active):
        response = client.post(f"/api/invoices/{active['id']}/status/2")

        assert response.status_code == 200
        assert response.json()["data"]["status_text"] == "Paid"

    def test_full_storno(self, client, active):
        response = client.post(f"/api/invoices/{active['id']}/status/3")

        body = response.json()
        assert response.status_code == 200
        assert body["meta"]["message"] == "Invoice storned. Storno invoice number: #2"
        source = body["data"]
        assert source["status"] == 2

        storno = client.get(f"/api/invoices/{source['related_to_invoice_id']}").json()["data"]
        assert storno["status_text"] == "Storno"
        assert [i["quantity"] for i in storno["items"]] == [-3, -2]
        assert storno["related_to_invoice_id"] == active["id"]
        assert storno["subtotal_amount"] == "-457.00"

    def test_partial_storno(self, client, active):
        response = client.post(f"/api/invoices/{active['id']}/status/4", json={"storno_items": ["sku-2"]})

        source = response.json()["data"]
        assert source["status"] == 1
        storno = client.get(f"/api/invoices/{source['related_to_invoice_id']}").json()["data"]
        assert [(i["item_id"], i["quantity"]) for i in storno["items"]] == [("sku-2", -2)]

    def test_partial_storno_without_items(self, client, active):
        response = client.post(f"/api/invoices/{active['id']}/status/4", json={"storno_items": []})

        assert response.status_code == 422
        assert response.json()["error"]["details"] == ["Items not selected"]
        assert client.get(f"/api/invoices/{active['id']}").json()["data"]["related_to_invoice_id"] is None

    def test_unknown_status(self, client, active):
        response = client.post(f"/api/invoices/{active['id']}/status/7")

        assert response.status_code == 422


class TestRepetitiveData:

    def test_saves(self, client, active):
        response = client.post(
            f"/api/invoices/{active['id']}/repetitive-data",
            json={"is_active": True, "days": 30, "start_on": "2024-01-01", "end_on": "2024-12-31"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["repetitive_data"]["days"] == 30

    def test_other_company_forbidden(self, company_b_client, active):
        response = company_b_client.post(
            f"/api/invoices/{active['id']}/repetitive-data", json={"is_active": True}
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED"


class TestDelete:

    def test_soft_delete(self, client, draft):
        response = client.delete(f"/api/invoices/{draft['id']}")

        assert response.status_code == 200
        assert client.get(f"/api/invoices/{draft['id']}").status_code == 404

    def test_delete_missing_succeeds(self, client):
        assert client.delete(f"/api/invoices/{uuid4()}").status_code == 200
