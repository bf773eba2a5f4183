from unittest.mock import MagicMock

import pytest
import requests

from token_mint_api.client import PRESETS, TokenApiClient, format_mint_address

MINT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def _resp(status=200, payload=None):
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.json.return_value = payload
    r.text = ""
    return r


CREATED = _resp(payload={"success": True, "data": {
    "mintAddress": MINT,
    "transactionSignature": "5sig",
    "explorerUrl": f"https://explorer.solana.com/address/{MINT}?cluster=devnet",
}})
REVOKED = _resp(payload={"success": True, "data": {
    "mintAddress": MINT,
    "signatures": ["3rev"],
    "revoked": {"mintAuthority": True, "freezeAuthority": True},
    "message": "Revoked mint authority and freeze authority",
}})


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def api(session, sleeps):
    return TokenApiClient("http://api.test/", session=session, sleep=sleeps.append)


def test_check_health(api, session):
    session.get.return_value = _resp(payload={"status": "OK", "timestamp": "2026-01-01T00:00:00.000Z"})
    assert api.check_health() is True
    session.get.assert_called_once_with("http://api.test/health", timeout=10)


def test_check_health_when_down(api, session):
    session.get.side_effect = requests.ConnectionError("refused")
    assert api.check_health() is False


def test_create_token(api, session):
    session.post.return_value = CREATED
    result = api.create_token("https://example.com/m.json")
    assert result == {
        "success": True,
        "mintAddress": MINT,
        "transactionSignature": "5sig",
        "explorerUrl": f"https://explorer.solana.com/address/{MINT}?cluster=devnet",
    }
    session.post.assert_called_once_with(
        "http://api.test/create-token", json={"metadataUrl": "https://example.com/m.json"}, timeout=120.0
    )


def test_create_token_api_error(api, session):
    session.post.return_value = _resp(400, {"success": False, "error": "Invalid URL format"})
    result = api.create_token("nope")
    assert result["success"] is False
    assert result["error"] == "Invalid URL format"


def test_transport_error_does_not_raise(api, session):
    session.post.side_effect = requests.Timeout("read timed out")
    result = api.revoke_authorities(MINT)
    assert result == {"success": False, "error": "read timed out"}


def test_create_and_revoke_waits_between_steps(api, session, sleeps):
    session.post.side_effect = [CREATED, REVOKED]
    result = api.create_and_revoke("https://example.com/m.json", revoke_freeze_authority=False, wait_seconds=3)
    assert result["success"] is True
    assert result["revokeSignatures"] == ["3rev"]
    assert sleeps == [3]
    revoke_call = session.post.call_args_list[1]
    assert revoke_call.kwargs["json"] == {
        "mintAddress": MINT,
        "revokeMintAuthority": True,
        "revokeFreezeAuthority": False,
    }


def test_create_failure_stops_saga(api, session, sleeps):
    session.post.return_value = _resp(500, {"success": False, "error": "Token creation failed"})
    result = api.create_and_revoke("https://example.com/m.json")
    assert result["step"] == "create"
    assert session.post.call_count == 1
    assert sleeps == []


def test_revoke_failure_keeps_mint_address(api, session):
    session.post.side_effect = [CREATED, _resp(500, {"success": False, "error": "Could not fetch mint information"})]
    result = api.create_and_revoke("https://example.com/m.json", wait_seconds=0)
    assert result["success"] is False
    assert result["step"] == "revoke"
    assert result["mintAddress"] == MINT
    assert result["error"] == "Could not fetch mint information"


def test_create_with_preset(api, session):
    session.post.side_effect = [CREATED, REVOKED]
    api.create_with_preset("https://example.com/m.json", "MINTABLE_TOKEN", wait_seconds=0)
    flags = session.post.call_args_list[1].kwargs["json"]
    assert flags["revokeMintAuthority"] is PRESETS["MINTABLE_TOKEN"]["revoke_mint_authority"]
    assert flags["revokeFreezeAuthority"] is True


def test_unknown_preset(api):
    with pytest.raises(KeyError):
        api.create_with_preset("https://example.com/m.json", "FOREVER_TOKEN")


def test_batch_create(api, session, sleeps):
    session.post.side_effect = [
        CREATED, REVOKED,
        CREATED,
        _resp(400, {"success": False, "error": "Failed to fetch metadata: 404 Not Found"}),
    ]
    configs = [
        {"name": "Immutable", "metadataUrl": "https://example.com/a.json"},
        {"name": "Full", "metadataUrl": "https://example.com/b.json",
         "revokeMintAuthority": False, "revokeFreezeAuthority": False},
        {"name": "Broken", "metadataUrl": "https://example.com/c.json"},
    ]
    outcome = api.batch_create(configs, delay_seconds=2, wait_seconds=1)
    assert outcome["summary"] == {"total": 3, "successful": 2, "failed": 1}
    assert outcome["results"][1]["result"]["revoked"] == {"mintAuthority": False, "freezeAuthority": False}
    assert outcome["failed"][0]["result"]["step"] == "create"
    # one confirmation wait plus delays between the three tokens
    assert sleeps == [1, 2, 2]


def test_format_mint_address():
    assert format_mint_address(MINT) == f"{MINT[:8]}...{MINT[-8:]}"
    assert format_mint_address("short") == "short"
    assert format_mint_address(None) is None


@pytest.mark.parametrize("flags", [
    {"revoke_mint_authority": "false"},
    {"revoke_freeze_authority": 0},
])
def test_create_and_revoke_rejects_non_boolean_flags(api, session, flags):
    result = api.create_and_revoke("https://example.com/m.json", wait_seconds=0, **flags)
    assert result["success"] is False
    assert result["step"] == "validate"
    assert "must be a boolean" in result["error"]
    assert session.post.call_count == 0


def test_batch_rejects_string_flags_before_minting(api, session, sleeps):
    configs = [{"name": "Typo", "metadataUrl": "https://example.com/a.json",
                "revokeMintAuthority": "false", "revokeFreezeAuthority": "false"}]
    outcome = api.batch_create(configs, delay_seconds=0, wait_seconds=0)
    result = outcome["results"][0]["result"]
    assert result == {"success": False, "step": "validate", "error": "revokeMintAuthority must be a boolean"}
    assert outcome["summary"] == {"total": 1, "successful": 0, "failed": 1}
    assert session.post.call_count == 0


def test_batch_null_flags_default_to_revoke(api, session):
    session.post.side_effect = [CREATED, REVOKED]
    configs = [{"metadataUrl": "https://example.com/a.json", "revokeMintAuthority": None}]
    api.batch_create(configs, delay_seconds=0, wait_seconds=0)
    flags = session.post.call_args_list[1].kwargs["json"]
    assert flags["revokeMintAuthority"] is True
    assert flags["revokeFreezeAuthority"] is True


@pytest.mark.parametrize("payload", [["OK"], None, "OK"])
def test_check_health_with_non_object_body(api, session, payload):
    session.get.return_value = _resp(payload=payload)
    assert api.check_health() is False


@pytest.mark.parametrize("payload", [["unexpected"], None])
def test_non_object_api_body_becomes_failure(api, session, payload):
    session.post.return_value = _resp(502, payload)
    assert api.create_token("https://example.com/m.json") == {
        "success": False, "error": "502 ", "details": None,
    }
    assert api.revoke_authorities(MINT)["success"] is False
