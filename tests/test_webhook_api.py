"""End-to-end tests for the webhook endpoint."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from embed_gate.repositories.base import StoreError
from embed_gate.repositories.sql_repo import SqlGateRepository
from embed_gate.services.delivery import DeliveryResult
from tests.factories import RecordingDelivery, build_payload

WEBHOOK_PATH = "/api/v1/webhook"
ADDRESS = "203.0.113.7"
HEADERS = {"cf-connecting-ip": ADDRESS}


def test_valid_embed_is_accepted(client: TestClient, delivery: RecordingDelivery) -> None:
    response = client.post(WEBHOOK_PATH, json=build_payload(), headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"status": "accepted", "detail": "OK"}
    assert delivery.payloads[0]["embeds"][0]["title"] == "New server found"


def test_non_post_is_rejected(client: TestClient) -> None:
    response = client.get(WEBHOOK_PATH, headers=HEADERS)

    assert response.status_code == 405
    assert response.headers["allow"] == "POST"
    assert response.json()["status"] == "method_not_allowed"


def test_non_json_content_type_is_rejected(client: TestClient) -> None:
    response = client.post(
        WEBHOOK_PATH,
        content=b"embeds",
        headers={**HEADERS, "content-type": "text/plain"},
    )

    assert response.status_code == 415


def test_invalid_json_is_rejected(client: TestClient, delivery: RecordingDelivery) -> None:
    response = client.post(
        WEBHOOK_PATH,
        content=b"{not json",
        headers={**HEADERS, "content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"status": "malformed", "detail": "Invalid JSON"}
    assert delivery.payloads == []


def test_invalid_embed_reports_reason(client: TestClient) -> None:
    response = client.post(WEBHOOK_PATH, json=build_payload(color=1), headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid embed color: 1"


def test_missing_embeds_is_malformed(client: TestClient) -> None:
    response = client.post(WEBHOOK_PATH, json={"content": "hi"}, headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid embeds array"


def test_identical_burst_bans_sender(
    client: TestClient, repository: SqlGateRepository, delivery: RecordingDelivery
) -> None:
    codes = [
        client.post(WEBHOOK_PATH, json=build_payload(), headers=HEADERS).status_code
        for _ in range(4)
    ]

    assert codes == [200, 200, 200, 403]
    assert len(delivery.payloads) == 3
    assert repository.get_ban(ADDRESS) is not None

    follow_up = client.post(WEBHOOK_PATH, json=build_payload(title="Other"), headers=HEADERS)
    assert follow_up.status_code == 403
    assert follow_up.json() == {"status": "banned", "detail": "IP is banned"}


def test_duplicate_ban_response_carries_expiry(client: TestClient) -> None:
    for _ in range(3):
        client.post(WEBHOOK_PATH, json=build_payload(), headers=HEADERS)

    response = client.post(WEBHOOK_PATH, json=build_payload(), headers=HEADERS)
    body = response.json()

    assert body["status"] == "duplicate_banned"
    banned_until = datetime.fromisoformat(body["banned_until"])
    assert banned_until > datetime.now(UTC) + timedelta(days=2)


def test_banned_address_is_rejected_before_method_check(
    client: TestClient, repository: SqlGateRepository
) -> None:
    repository.upsert_ban(ADDRESS, datetime.now(UTC) + timedelta(days=1))

    response = client.get(WEBHOOK_PATH, headers=HEADERS)

    assert response.status_code == 403
    assert response.json()["status"] == "banned"


def test_bans_are_per_address(client: TestClient, repository: SqlGateRepository) -> None:
    repository.upsert_ban(ADDRESS, datetime.now(UTC) + timedelta(days=1))

    response = client.post(
        WEBHOOK_PATH,
        json=build_payload(),
        headers={"cf-connecting-ip": "198.51.100.1, 10.0.0.1"},
    )

    assert response.status_code == 200
    assert repository.count_messages("198.51.100.1") == 1


def test_falls_back_to_peer_address(client: TestClient, repository: SqlGateRepository) -> None:
    response = client.post(WEBHOOK_PATH, json=build_payload())

    assert response.status_code == 200
    assert repository.count_messages("testclient") == 1


def test_delivery_failure_hides_downstream_detail(
    client: TestClient, delivery: RecordingDelivery
) -> None:
    delivery.result = DeliveryResult(ok=False, status_code=400, error="http_status")

    response = client.post(WEBHOOK_PATH, json=build_payload(), headers=HEADERS)

    assert response.status_code == 502
    assert response.json() == {
        "status": "delivery_failed",
        "detail": "Failed to deliver notification",
    }


def test_store_failure_returns_500(client: TestClient, mocker) -> None:
    mocker.patch.object(SqlGateRepository, "get_ban", side_effect=StoreError("boom"))

    response = client.post(WEBHOOK_PATH, json=build_payload(), headers=HEADERS)

    assert response.status_code == 500
    assert response.json() == {
        "status": "infrastructure_error",
        "detail": "Internal server error",
    }
