"""Tests for the offer negotiation HTTP API."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from offer_negotiation.domain.errors import PersistenceError
from offer_negotiation.domain.models import Offer

CLIENT = {"X-User-Id": "user-client"}
OWNER = {"X-User-Id": "user-owner"}
STRANGER = {"X-User-Id": "stranger"}


def _counter(client: TestClient, headers: dict[str, str], amount: str) -> Any:
    return client.post(
        "/api/offers/offer-1/counter-offer",
        json={"counterOfferAmount": amount},
        headers=headers,
    )


# ===================================================================
# Reads
# ===================================================================


class TestGetOffer:
    def test_camel_case_view_for_owner(self, client: TestClient, stored: Offer) -> None:
        resp = client.get("/api/offers/offer-1", headers=OWNER)
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == "offer-1"
        assert body["status"] == "pending"
        assert body["offerAmount"] == "20000"
        assert body["currentAmount"] == "20000"
        assert body["lastOfferedBy"] == "client"
        assert body["negotiationRound"] == 0
        assert body["yourRole"] == "owner"
        assert body["awaiting"] == "owner"
        assert body["availableCommands"] == ["accept", "counter_offer", "reject"]

    def test_client_view(self, client: TestClient, stored: Offer) -> None:
        body = client.get("/api/offers/offer-1", headers=CLIENT).json()
        assert body["yourRole"] == "client"
        assert body["availableCommands"] == ["reject"]

    def test_stranger_forbidden(self, client: TestClient, stored: Offer) -> None:
        resp = client.get("/api/offers/offer-1", headers=STRANGER)
        assert resp.status_code == 403
        assert resp.json()["error"] == "not_a_party"

    def test_missing_offer(self, client: TestClient) -> None:
        resp = client.get("/api/offers/nope", headers=OWNER)
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    def test_missing_identity(self, client: TestClient, stored: Offer) -> None:
        resp = client.get("/api/offers/offer-1")
        assert resp.status_code == 401
        assert resp.json() == {"error": "unauthenticated", "detail": "Missing X-User-Id header"}


class TestListOffers:
    def test_lists_for_both_parties(self, client: TestClient, stored: Offer) -> None:
        assert [o["id"] for o in client.get("/api/offers", headers=CLIENT).json()] == ["offer-1"]
        assert [o["id"] for o in client.get("/api/offers", headers=OWNER).json()] == ["offer-1"]
        assert client.get("/api/offers", headers=STRANGER).json() == []

    def test_status_filter(self, client: TestClient, stored: Offer) -> None:
        resp = client.get("/api/offers", params={"status": "accepted"}, headers=OWNER)
        assert resp.json() == []

    def test_unknown_status_is_422(self, client: TestClient) -> None:
        resp = client.get("/api/offers", params={"status": "under-review"}, headers=OWNER)
        assert resp.status_code == 422


# ===================================================================
# Commands
# ===================================================================


class TestNegotiationFlow:
    def test_counter_then_accept(self, client: TestClient, stored: Offer) -> None:
        resp = client.post(
            "/api/offers/offer-1/counter-offer",
            json={
                "counterOfferAmount": "22000",
                "counterOfferServicesIncluded": ["water", "internet"],
                "counterOfferNotes": "parking included",
            },
            headers=OWNER,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "countered"
        assert body["lastOfferedBy"] == "owner"
        assert body["negotiationRound"] == 1
        assert body["counterOfferAmount"] == "22000"
        assert body["counterOfferServicesIncluded"] == ["water", "internet"]
        assert body["availableCommands"] == ["reject"]

        resp = client.post("/api/offers/offer-1/accept", headers=CLIENT)
        assert resp.status_code == 200
        assert resp.json()["status"] == "accepted"
        assert resp.json()["currentAmount"] == "22000"
        assert resp.json()["availableCommands"] == []

    def test_self_accept_is_412(self, client: TestClient, stored: Offer) -> None:
        _counter(client, OWNER, "22000")
        resp = client.post("/api/offers/offer-1/accept", headers=OWNER)
        assert resp.status_code == 412
        assert resp.json()["error"] == "invalid_transition"

    def test_round_limit_is_412(self, client: TestClient, stored: Offer) -> None:
        assert _counter(client, OWNER, "22000").status_code == 200
        assert _counter(client, CLIENT, "21000").status_code == 200
        assert _counter(client, OWNER, "21500").status_code == 200

        resp = _counter(client, CLIENT, "21200")
        assert resp.status_code == 412
        assert resp.json()["error"] == "round_limit_exceeded"
        assert "3 of 3" in resp.json()["detail"]

        resp = client.post("/api/offers/offer-1/accept", headers=CLIENT)
        assert resp.json()["status"] == "accepted"

    def test_reject_with_reason(self, client: TestClient, stored: Offer) -> None:
        resp = client.post(
            "/api/offers/offer-1/reject", json={"reason": "too low"}, headers=OWNER
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        assert resp.json()["rejectionReason"] == "too low"

    def test_reject_without_body(self, client: TestClient, stored: Offer) -> None:
        resp = client.post("/api/offers/offer-1/reject", headers=CLIENT)
        assert resp.status_code == 200
        assert resp.json()["rejectionReason"] is None

    def test_terminal_offer_refuses_everything(self, client: TestClient, stored: Offer) -> None:
        client.post("/api/offers/offer-1/reject", headers=CLIENT)
        assert client.post("/api/offers/offer-1/accept", headers=OWNER).status_code == 412
        assert client.post("/api/offers/offer-1/reject", headers=OWNER).status_code == 412
        assert _counter(client, OWNER, "1").status_code == 412

    def test_stranger_cannot_act(self, client: TestClient, stored: Offer) -> None:
        resp = client.post("/api/offers/offer-1/accept", headers=STRANGER)
        assert resp.status_code == 403

    def test_role_comes_from_identity_not_body(self, client: TestClient, stored: Offer) -> None:
        """A client claiming to be the owner in the body still counters as the client."""
        resp = client.post(
            "/api/offers/offer-1/counter-offer",
            json={"counterOfferAmount": "19000", "lastOfferedBy": "owner", "actor": "owner"},
            headers=CLIENT,
        )
        assert resp.status_code == 412
        assert "client" in resp.json()["detail"]

    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    def test_invalid_amount_is_422(
        self, client: TestClient, stored: Offer, amount: str
    ) -> None:
        assert _counter(client, OWNER, amount).status_code == 422

    @pytest.mark.parametrize(
        ("amount", "expected"), [(22000, "22000"), (21500.5, "21500.5")], ids=["int", "fraction"]
    )
    def test_numeric_json_amount_accepted(
        self, client: TestClient, stored: Offer, amount: float, expected: str
    ) -> None:
        resp = client.post(
            "/api/offers/offer-1/counter-offer",
            json={"counterOfferAmount": amount},
            headers=OWNER,
        )
        assert resp.status_code == 200
        assert resp.json()["counterOfferAmount"] == expected
        assert resp.json()["currentAmount"] == expected

    def test_snake_case_body_accepted(self, client: TestClient, stored: Offer) -> None:
        resp = client.post(
            "/api/offers/offer-1/counter-offer",
            json={"counter_offer_amount": "22000"},
            headers=OWNER,
        )
        assert resp.json()["counterOfferAmount"] == "22000"


class TestHistory:
    def test_history_in_order(self, client: TestClient, stored: Offer) -> None:
        _counter(client, OWNER, "22000")
        client.post("/api/offers/offer-1/accept", headers=CLIENT)

        resp = client.get("/api/offers/offer-1/history", headers=CLIENT)
        assert resp.status_code == 200
        events = resp.json()
        assert [e["eventType"] for e in events] == ["offer_created", "counter_offer", "accepted"]
        assert events[1]["fromStatus"] == "pending"
        assert events[1]["amount"] == "22000"

    def test_history_forbidden_to_strangers(self, client: TestClient, stored: Offer) -> None:
        assert client.get("/api/offers/offer-1/history", headers=STRANGER).status_code == 403


class TestErrorMapping:
    def test_persistence_failure_hides_details(
        self,
        client: TestClient,
        stored: Offer,
        services: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _boom(*args: Any, **kwargs: Any) -> None:
            raise PersistenceError("disk I/O error on /var/lib/offers.db")

        monkeypatch.setattr(services["offer_store"], "save_transition", _boom)
        resp = client.post("/api/offers/offer-1/accept", headers=OWNER)
        assert resp.status_code == 500
        assert resp.json() == {
            "error": "persistence_failure",
            "detail": "The offer could not be saved; no changes were made",
        }

    def test_concurrent_modification_is_409(
        self,
        client: TestClient,
        stored: Offer,
        services: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        store = services["offer_store"]
        snapshot = store.get("offer-1")
        client.post("/api/offers/offer-1/reject", headers=CLIENT)
        monkeypatch.setattr(store, "get", lambda offer_id: snapshot)

        resp = client.post("/api/offers/offer-1/accept", headers=OWNER)
        assert resp.status_code == 409
        assert resp.json()["error"] == "concurrent_modification"
