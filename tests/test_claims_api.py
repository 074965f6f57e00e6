"""
API tests for the advance claim lifecycle.

Walks the release checklist gate, cancellation and the cancelled-invoice
correction flow over HTTP, checking that release audit fields are set only
while a claim is Released.
"""
import pytest

from conftest import full_checklist, invoice_payload


@pytest.fixture
def invoice_id(client, staff_headers):
    response = client.post("/api/invoices", json=invoice_payload(), headers=staff_headers)
    assert response.status_code == 201
    return response.json()["id"]


def _assert_coupled(body):
    released = body["advanceClaimStatus"] == "Released"
    assert (body["advanceClaimReleaseDate"] is not None) == released
    assert (body["advanceClaimReleasedBy"] is not None) == released


class TestRelease:
    def test_release_with_full_checklist(self, client, doctor_headers, invoice_id):
        response = client.post(
            f"/api/claims/{invoice_id}/release",
            json={"checklist": full_checklist()},
            headers=doctor_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["advanceClaimStatus"] == "Released"
        assert body["advanceClaimReleasedBy"] == "Dr. Ravi"
        _assert_coupled(body)

    def test_incomplete_checklist_names_missing_items(self, client, doctor_headers, invoice_id):
        checklist = full_checklist()
        checklist["diagnosis"] = False
        checklist["consentForm"] = False
        response = client.post(
            f"/api/claims/{invoice_id}/release",
            json={"checklist": checklist},
            headers=doctor_headers,
        )
        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Checklist incomplete. Missing: Consent form, Diagnosis"
        assert [e["field"] for e in body["errors"]] == ["checklist.consentForm", "checklist.diagnosis"]

        invoice = client.get(f"/api/invoices/{invoice_id}", headers=doctor_headers).json()
        assert invoice["advanceClaimStatus"] == "Pending"
        _assert_coupled(invoice)

    def test_release_without_checklist(self, client, doctor_headers, invoice_id):
        response = client.post(f"/api/claims/{invoice_id}/release", json={}, headers=doctor_headers)
        assert response.status_code == 422
        assert len(response.json()["errors"]) == 12

    def test_release_twice_is_conflict(self, client, doctor_headers, invoice_id):
        url = f"/api/claims/{invoice_id}/release"
        client.post(url, json={"checklist": full_checklist()}, headers=doctor_headers)
        response = client.post(url, json={"checklist": full_checklist()}, headers=doctor_headers)
        assert response.status_code == 409
        assert "already" in response.json()["detail"]

    def test_release_unknown_invoice(self, client, doctor_headers):
        response = client.post(
            "/api/claims/9999/release", json={"checklist": full_checklist()}, headers=doctor_headers
        )
        assert response.status_code == 404

    def test_checklist_endpoint(self, client, doctor_headers):
        body = client.get("/api/claims/checklist", headers=doctor_headers).json()
        assert len(body) == 12
        assert body[5] == {"key": "vitalSign", "label": "Vital sign"}


class TestCancelAndReconcile:
    def test_cancel_released_clears_audit_fields(self, client, doctor_headers, invoice_id):
        client.post(
            f"/api/claims/{invoice_id}/release",
            json={"checklist": full_checklist()},
            headers=doctor_headers,
        )
        response = client.post(
            f"/api/claims/{invoice_id}/cancel", json={"remark": "Insurer rejected"}, headers=doctor_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["advanceClaimStatus"] == "Cancelled"
        assert body["advanceClaimCancellationRemark"] == "Insurer rejected"
        _assert_coupled(body)

    def test_cancelled_cannot_be_released_directly(self, client, doctor_headers, invoice_id):
        client.post(f"/api/claims/{invoice_id}/cancel", json={}, headers=doctor_headers)
        response = client.post(
            f"/api/claims/{invoice_id}/release",
            json={"checklist": full_checklist()},
            headers=doctor_headers,
        )
        assert response.status_code == 409

    def test_edit_cancelled_then_release(self, client, doctor_headers, invoice_id):
        client.post(f"/api/claims/{invoice_id}/cancel", json={}, headers=doctor_headers)
        cancelled = client.get("/api/claims/cancelled", headers=doctor_headers).json()
        assert [c["id"] for c in cancelled] == [invoice_id]

        response = client.put(
            f"/api/claims/{invoice_id}/cancelled",
            json={"firstName": "Meena", "advanceClaimStatus": "Released"},
            headers=doctor_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["firstName"] == "Meena"
        assert body["advanceClaimStatus"] == "Pending"
        _assert_coupled(body)

        assert client.get("/api/claims/cancelled", headers=doctor_headers).json() == []

        released = client.post(
            f"/api/claims/{invoice_id}/release",
            json={"checklist": full_checklist()},
            headers=doctor_headers,
        ).json()
        assert released["advanceClaimStatus"] == "Released"
        _assert_coupled(released)

    def test_edit_pending_invoice_is_conflict(self, client, doctor_headers, invoice_id):
        response = client.put(
            f"/api/claims/{invoice_id}/cancelled", json={"firstName": "X"}, headers=doctor_headers
        )
        assert response.status_code == 409

    def test_edit_unknown_invoice(self, client, doctor_headers):
        response = client.put("/api/claims/4242/cancelled", json={"firstName": "X"}, headers=doctor_headers)
        assert response.status_code == 404

    def test_transitions_endpoint(self, client, doctor_headers, invoice_id):
        body = client.get(f"/api/claims/{invoice_id}/transitions", headers=doctor_headers).json()
        assert body == {
            "invoiceId": invoice_id,
            "currentStatus": "Pending",
            "validTransitions": ["Cancelled", "Released"],
        }

    def test_history_endpoint(self, client, doctor_headers, invoice_id):
        client.post(f"/api/claims/{invoice_id}/cancel", json={}, headers=doctor_headers)
        body = client.get(f"/api/claims/{invoice_id}/history", headers=doctor_headers).json()
        assert [e["action"] for e in body] == ["INVOICE_CREATED", "CLAIM_CANCELLED"]
        assert body[1]["actorId"] == "doc-7"

    def test_claim_routes_require_token(self, client, invoice_id):
        response = client.post(f"/api/claims/{invoice_id}/cancel", json={})
        assert response.status_code == 401
