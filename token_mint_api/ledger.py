from typing import List, Sequence

from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction


def explorer_url(address: str, cluster: str = "devnet") -> str:
    base = f"https://explorer.solana.com/address/{address}"
    if cluster in ("", "mainnet-beta"):
        return base
    return f"{base}?cluster={cluster}"


def send_instructions(client, instructions: List[Instruction], signers: Sequence[Keypair]) -> str:
    """Sign instructions into one transaction, submit it and wait for confirmation.

    The first signer pays the fees. Returns the transaction signature.
    """
    payer = signers[0]
    blockhash = client.get_latest_blockhash(commitment=Confirmed).value.blockhash
    message = Message(instructions, payer.pubkey())
    tx = Transaction(list(signers), message, blockhash)
    resp = client.send_transaction(tx, opts=TxOpts(skip_confirmation=False, preflight_commitment=Confirmed))
    return str(resp.value)
