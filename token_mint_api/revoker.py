import logging
from typing import Dict, List, Optional, Sequence

from solana.rpc.commitment import Confirmed
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import AuthorityType, SetAuthorityParams, set_authority

from .errors import RevokeFailure
from .ledger import send_instructions
from .models import RevocationResult, RevokeAuthorityOptions

logger = logging.getLogger(__name__)


class AuthorityRevoker:
    """Strips mint and/or freeze authority from an SPL mint.

    Authorities that are already empty, not requested, or held by a key we do
    not own are left alone and reported as not revoked. Everything that can be
    revoked goes out in one transaction so the pair lands atomically.
    """

    def __init__(self, client, wallet: Keypair, extra_signers: Sequence[Keypair] = ()):
        self.client = client
        self.wallet = wallet
        self.known_signers: List[Keypair] = [wallet] + [k for k in extra_signers if k.pubkey() != wallet.pubkey()]

    def _signer_for(self, authority: str) -> Optional[Keypair]:
        for keypair in self.known_signers:
            if str(keypair.pubkey()) == authority:
                return keypair
        return None

    def _mint_account(self, mint: Pubkey):
        account = self.client.get_account_info_json_parsed(mint, commitment=Confirmed).value
        if account is None:
            raise RevokeFailure("Could not fetch mint information")
        parsed = getattr(account.data, "parsed", None)
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise RevokeFailure(f"Account {mint} is not a token mint")
        return account.owner, parsed["info"]

    def revoke(self, mint_address: str, options: Optional[RevokeAuthorityOptions] = None) -> RevocationResult:
        options = options or RevokeAuthorityOptions()
        try:
            mint = Pubkey.from_string(mint_address)
        except ValueError:
            return RevocationResult(success=False, error=f"Invalid mint address: {mint_address}")

        try:
            program_id, info = self._mint_account(mint)
            logger.info(f"Current mint authority: {info.get('mintAuthority')}")
            logger.info(f"Current freeze authority: {info.get('freezeAuthority')}")

            changes = [
                ("mintAuthority", AuthorityType.MINT_TOKENS, options.revoke_mint_authority),
                ("freezeAuthority", AuthorityType.FREEZE_ACCOUNT, options.revoke_freeze_authority),
            ]
            instructions = []
            signers = [self.wallet]
            revoked: Dict[str, bool] = {"mintAuthority": False, "freezeAuthority": False}

            for field, authority_type, wanted in changes:
                current = info.get(field)
                if not current:
                    logger.info(f"{field} already revoked for {mint}")
                    continue
                if not wanted:
                    logger.info(f"Skipping {field} revocation (not requested)")
                    continue
                signer = self._signer_for(current)
                if signer is None:
                    logger.warning(f"Cannot revoke {field} {current}: not held by a known signer")
                    continue
                instructions.append(
                    set_authority(
                        SetAuthorityParams(
                            program_id=program_id,
                            account=mint,
                            authority=authority_type,
                            current_authority=signer.pubkey(),
                            new_authority=None,
                        )
                    )
                )
                if signer.pubkey() not in [s.pubkey() for s in signers]:
                    signers.append(signer)
                revoked[field] = True

            if not instructions:
                logger.info(f"No authority instructions to send for {mint}")
                return RevocationResult(success=True)

            signature = send_instructions(self.client, instructions, signers)
        except Exception as e:
            logger.error(f"Error revoking authorities for {mint_address}: {e}")
            return RevocationResult(success=False, error=str(e))

        logger.info(f"Authorities revoked for {mint} (tx {signature})")
        return RevocationResult(
            success=True,
            signatures=[signature],
            mint_authority_revoked=revoked["mintAuthority"],
            freeze_authority_revoked=revoked["freezeAuthority"],
        )
