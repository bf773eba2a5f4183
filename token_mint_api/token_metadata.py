"""Metaplex Token Metadata instruction builder.

Only CreateMetadataAccountV3 is needed: it attaches name, symbol and URI to an
already initialised SPL mint. The instruction data is Borsh encoded.
"""

import struct

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.sysvar import RENT

TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bh518x1s")

CREATE_METADATA_ACCOUNT_V3 = 33

# on-chain limits enforced by the metadata program
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200


def metadata_pda(mint: Pubkey) -> Pubkey:
    seeds = [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)]
    pda, _bump = Pubkey.find_program_address(seeds, TOKEN_METADATA_PROGRAM_ID)
    return pda


def _borsh_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def encode_create_metadata_v3(
    name: str,
    symbol: str,
    uri: str,
    seller_fee_basis_points: int = 0,
    is_mutable: bool = True,
) -> bytes:
    if len(name.encode("utf-8")) > MAX_NAME_LENGTH:
        raise ValueError(f"Token name exceeds {MAX_NAME_LENGTH} bytes: {name!r}")
    if len(symbol.encode("utf-8")) > MAX_SYMBOL_LENGTH:
        raise ValueError(f"Token symbol exceeds {MAX_SYMBOL_LENGTH} bytes: {symbol!r}")
    if len(uri.encode("utf-8")) > MAX_URI_LENGTH:
        raise ValueError(f"Metadata URI exceeds {MAX_URI_LENGTH} bytes")

    data = bytes([CREATE_METADATA_ACCOUNT_V3])
    # DataV2
    data += _borsh_string(name) + _borsh_string(symbol) + _borsh_string(uri)
    data += struct.pack("<H", seller_fee_basis_points)
    data += b"\x00"  # creators: None
    data += b"\x00"  # collection: None
    data += b"\x00"  # uses: None
    data += struct.pack("<?", is_mutable)
    data += b"\x00"  # collection_details: None
    return data


def create_metadata_v3(
    mint: Pubkey,
    mint_authority: Pubkey,
    payer: Pubkey,
    update_authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
) -> Instruction:
    accounts = [
        AccountMeta(metadata_pda(mint), is_signer=False, is_writable=True),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(mint_authority, is_signer=True, is_writable=False),
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(update_authority, is_signer=True, is_writable=False),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(RENT, is_signer=False, is_writable=False),
    ]
    data = encode_create_metadata_v3(name, symbol, uri)
    return Instruction(TOKEN_METADATA_PROGRAM_ID, data, accounts)
