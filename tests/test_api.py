"""HTTP surface: end-to-end through FastAPI with the fake gateway."""

from conftest import ALICE, BOB, signed_transaction
from vaultguard.config import Settings, get_settings
from vaultguard.errors import RemoteUnavailable
from vaultguard.main import app


def test_health_is_always_ok(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "timestamp" in response.json()


def test_get_will_formats_ledger_record(client, gateway):
    gateway.records[5] = (2_000_000_000, False, ["0xAbC"], "0x11", "0x00", False)
    gateway.owners[5] = ALICE
    response = client.get("/api/will/5")
    assert response.status_code == 200
    body = response.json()
    assert body["tokenId"] == 5
    assert body["status"]["isActive"] is True
    assert body["status"]["deadlinePassed"] is False
    assert body["owner"].lower() == ALICE


def test_get_will_without_owner_still_returns_record(client, gateway):
    gateway.add(5, owner=None)
    response = client.get("/api/will/5")
    assert response.status_code == 200
    assert response.json()["owner"] is None


def test_get_will_rejects_non_numeric_id(client, gateway):
    for token_id in ("abc", "\u00b2", "\u0661", "-1", "1.5"):
        response = client.get(f"/api/will/{token_id}")
        assert response.status_code == 400, token_id
        assert "numeric" in response.json()["error"]
    assert gateway.calls == []


def test_get_will_missing_is_404(client):
    response = client.get("/api/will/77")
    assert response.status_code == 404
    assert response.json()["error"].startswith("Will not found")


def test_get_will_remote_failure_is_500(client, gateway):
    gateway.add(5)
    gateway.unavailable_ids = {5}
    response = client.get("/api/will/5")
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch will details from the blockchain",
        "details": "read timed out",
    }


def test_list_wills_over_sparse_ledger(client, gateway):
    gateway.add(2)
    gateway.add(7)
    response = client.get("/api/wills", params={"limit": 5, "offset": 0})
    assert response.status_code == 200
    body = response.json()
    assert [w["tokenId"] for w in body["wills"]] == [2, 7]
    assert body["pagination"] == {
        "limit": 5, "offset": 0, "count": 2, "hasMore": False, "examined": 50,
    }
    assert body["filters"] == {"owner": None}


def test_list_wills_filters_by_owner(client, gateway):
    gateway.add(1, owner=ALICE)
    gateway.add(2, owner=BOB)
    response = client.get("/api/wills", params={"owner": BOB, "limit": 10})
    assert [w["tokenId"] for w in response.json()["wills"]] == [2]
    assert response.json()["filters"]["owner"] == BOB


def test_list_wills_rejects_bad_arguments(client, gateway):
    for params in ({"limit": 0}, {"limit": 101}, {"offset": -1},
                   {"owner": "nobody"}, {"limit": "many"}):
        response = client.get("/api/wills", params=params)
        assert response.status_code == 400, params
        assert "error" in response.json()
    assert gateway.calls == []


def test_prepare_rejects_bad_nominee_without_ledger_calls(client, gateway):
    response = client.post("/api/will/prepare", json={
        "userAddress": ALICE, "nominees": ["not-an-address"],
    })
    assert response.status_code == 400
    assert "not-an-address" in response.json()["error"]
    assert gateway.calls == []


def test_prepare_returns_unsigned_transaction(client):
    response = client.post("/api/will/prepare", json={
        "userAddress": ALICE, "nominees": [BOB], "deadlineSeconds": 3600,
        "encryptedData": "ciphertext",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["transactionData"]["type"] == 2
    assert body["transactionData"]["gasLimit"] == "120000"
    assert body["parameters"]["placeholderHash"] is False
    assert body["gasEstimate"]["maxFeePerGas"] == "22"


def test_prepare_remote_failure_is_500(client, gateway):
    gateway.fail_reads = True
    response = client.post("/api/will/prepare", json={"userAddress": ALICE, "nominees": [BOB]})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to prepare transaction data"


def test_broadcast_requires_payload(client, gateway):
    response = client.post("/api/will/broadcast", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "Signed transaction is required"
    assert gateway.calls == []


def test_broadcast_without_creation_event_has_null_token(client):
    response = client.post("/api/will/broadcast", json={"signedTransaction": signed_transaction()})
    assert response.status_code == 201
    body = response.json()
    assert body["tokenId"] is None
    assert body["blockNumber"] == 123


def test_broadcast_reports_minted_token(client, gateway):
    gateway.events = [("Transfer", {"tokenId": 8})]
    response = client.post("/api/will/broadcast", json={"signedTransaction": signed_transaction()})
    assert response.status_code == 201
    assert response.json()["tokenId"] == 8


def test_broadcast_classified_failure_is_400(client, gateway):
    gateway.broadcast_error = RemoteUnavailable(
        "Ledger call eth_sendRawTransaction failed", details="insufficient funds for gas")
    response = client.post("/api/will/broadcast", json={"signedTransaction": signed_transaction()})
    assert response.status_code == 400
    assert response.json() == {
        "error": "Insufficient funds to pay for gas fees",
        "details": "insufficient funds for gas",
    }


def test_broadcast_unclassified_failure_is_500(client, gateway):
    gateway.broadcast_error = RemoteUnavailable(
        "Ledger call eth_sendRawTransaction failed", details="upstream gateway error")
    response = client.post("/api/will/broadcast", json={"signedTransaction": signed_transaction()})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to broadcast transaction to the blockchain"


def test_broadcast_reverted_transaction_is_500(client, gateway):
    gateway.receipt["status"] = 0
    response = client.post("/api/will/broadcast", json={"signedTransaction": signed_transaction()})
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to broadcast transaction to the blockchain",
        "details": "transaction execution reverted",
        "transactionHash": "0x" + "ab" * 32,
    }


def test_get_will_empty_slot_with_unreachable_owner_is_500(client, gateway, monkeypatch):
    gateway.add(6, owner=None, deadline=0)

    def owner_unreachable(record_id):
        raise RemoteUnavailable("Ledger call ownerOf failed", details="read timed out")

    monkeypatch.setattr(gateway, "fetch_owner", owner_unreachable)
    response = client.get("/api/will/6")
    assert response.status_code == 500
    assert response.json()["details"] == "read timed out"


def test_get_will_empty_slot_without_owner_is_404(client, gateway):
    gateway.add(6, owner=None, deadline=0)
    response = client.get("/api/will/6")
    assert response.status_code == 404


def test_list_wills_default_page_size_comes_from_settings(client, gateway):
    for i in range(5):
        gateway.add(i)
    app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, default_page_size=2)
    response = client.get("/api/wills")
    assert response.status_code == 200
    body = response.json()
    assert [w["tokenId"] for w in body["wills"]] == [0, 1]
    assert body["pagination"]["limit"] == 2
    assert body["pagination"]["hasMore"] is True
