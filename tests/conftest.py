"""Shared fixtures: stub collaborators for the HTTP layer and an offline Solana RPC."""

from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from spl.token.constants import TOKEN_PROGRAM_ID

from token_mint_api.config import Settings
from token_mint_api.models import RevocationResult, TokenCreationResult, TokenMetadata
from token_mint_api.server import create_app

SET_AUTHORITY = 6
MINT_TOKENS = 0
FREEZE_ACCOUNT = 1

VALID_METADATA = {
    "name": "Test Token",
    "symbol": "TEST",
    "description": "A token for tests",
    "image": "https://example.com/token.png",
}


class FakeSolanaClient:
    """Offline stand-in for solana.rpc.api.Client.

    Holds the state of a single mint and applies SetAuthority instructions
    from submitted transactions to it.
    """

    def __init__(self, mint_authority=None, freeze_authority=None, exists=True,
                 account_type="mint", send_error=None):
        self.mint_authority = mint_authority
        self.freeze_authority = freeze_authority
        self.exists = exists
        self.account_type = account_type
        self.send_error = send_error
        self.sent = []

    def get_account_info_json_parsed(self, pubkey, commitment=None):
        if not self.exists:
            return SimpleNamespace(value=None)
        parsed = {
            "type": self.account_type,
            "info": {
                "decimals": 9,
                "mintAuthority": self.mint_authority,
                "freezeAuthority": self.freeze_authority,
            },
        }
        return SimpleNamespace(value=SimpleNamespace(owner=TOKEN_PROGRAM_ID, data=SimpleNamespace(parsed=parsed)))

    def get_latest_blockhash(self, commitment=None):
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))

    def get_minimum_balance_for_rent_exemption(self, size, commitment=None):
        return SimpleNamespace(value=1461600)

    def send_transaction(self, tx, opts=None):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(tx)
        keys = tx.message.account_keys
        for ix in tx.message.instructions:
            data = bytes(ix.data)
            if keys[ix.program_id_index] == TOKEN_PROGRAM_ID and data[0] == SET_AUTHORITY:
                if data[1] == MINT_TOKENS:
                    self.mint_authority = None
                elif data[1] == FREEZE_ACCOUNT:
                    self.freeze_authority = None
        return SimpleNamespace(value=tx.signatures[0])


class StubFetcher:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return TokenMetadata.from_dict(VALID_METADATA)


class StubMinter:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def mint(self, metadata, metadata_url):
        self.calls.append((metadata, metadata_url))
        if self.error is not None:
            raise self.error
        return TokenCreationResult(
            mint_address="So11111111111111111111111111111111111111112",
            transaction_signature="5sig",
            explorer_url="https://explorer.solana.com/address/So11111111111111111111111111111111111111112?cluster=devnet",
        )


class StubRevoker:
    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def revoke(self, mint_address, options=None):
        self.calls.append((mint_address, options))
        if self.result is not None:
            return self.result
        return RevocationResult(
            success=True,
            signatures=["3revoke"],
            mint_authority_revoked=options.revoke_mint_authority,
            freeze_authority_revoked=options.revoke_freeze_authority,
        )


@pytest.fixture
def wallet():
    return Keypair()


@pytest.fixture
def fetcher():
    return StubFetcher()


@pytest.fixture
def minter():
    return StubMinter()


@pytest.fixture
def revoker():
    return StubRevoker()


@pytest.fixture
def settings():
    return Settings(app_env="production")


@pytest.fixture
def app(settings, fetcher, minter, revoker):
    app = create_app(settings, fetcher=fetcher, minter=minter, revoker=revoker)
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
