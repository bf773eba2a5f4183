import logging

from solders.keypair import Keypair
from solders.system_program import CreateAccountParams, create_account
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import InitializeMintParams, initialize_mint

from .errors import InvalidMetadataSchema, MintFailure
from .ledger import explorer_url, send_instructions
from .models import TokenCreationResult, TokenMetadata
from .token_metadata import create_metadata_v3

logger = logging.getLogger(__name__)

MINT_ACCOUNT_SIZE = 82


class SolanaTokenMinter:
    """Creates a fungible SPL mint and attaches Metaplex metadata to it.

    Mint creation and metadata go out in a single transaction, mint first. The
    service wallet pays, and holds the mint, freeze and update authorities
    afterwards so they can be revoked later.
    """

    def __init__(self, client, wallet: Keypair, cluster: str = "devnet", decimals: int = 9):
        self.client = client
        self.wallet = wallet
        self.cluster = cluster
        self.decimals = decimals

    def mint(self, metadata: TokenMetadata, metadata_url: str) -> TokenCreationResult:
        mint_keypair = Keypair()
        mint = mint_keypair.pubkey()
        owner = self.wallet.pubkey()

        try:
            metadata_ix = create_metadata_v3(
                mint=mint,
                mint_authority=owner,
                payer=owner,
                update_authority=owner,
                name=metadata.name,
                symbol=metadata.symbol,
                uri=metadata_url,
            )
        except ValueError as e:
            raise InvalidMetadataSchema(f"Invalid metadata: {e}")

        logger.info(f"Creating token {metadata.symbol} with mint {mint}")
        try:
            lamports = self.client.get_minimum_balance_for_rent_exemption(MINT_ACCOUNT_SIZE).value
            instructions = [
                create_account(
                    CreateAccountParams(
                        from_pubkey=owner,
                        to_pubkey=mint,
                        lamports=lamports,
                        space=MINT_ACCOUNT_SIZE,
                        owner=TOKEN_PROGRAM_ID,
                    )
                ),
                initialize_mint(
                    InitializeMintParams(
                        decimals=self.decimals,
                        program_id=TOKEN_PROGRAM_ID,
                        mint=mint,
                        mint_authority=owner,
                        freeze_authority=owner,
                    )
                ),
                metadata_ix,
            ]
            signature = send_instructions(self.client, instructions, [self.wallet, mint_keypair])
        except Exception as e:
            logger.error(f"Token creation failed for mint {mint}: {e}")
            raise MintFailure(f"Token creation failed: {e}") from e

        address = str(mint)
        logger.info(f"Token created: {address} (tx {signature})")
        return TokenCreationResult(
            mint_address=address,
            transaction_signature=signature,
            explorer_url=explorer_url(address, self.cluster),
        )
