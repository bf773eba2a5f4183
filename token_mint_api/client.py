import logging
import time
from typing import Any, Dict, List, Optional

import requests

from .metadata import is_valid_url as is_valid_metadata_url

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_WAIT_SECONDS = 3.0
DEFAULT_BATCH_DELAY = 2.0

PRESETS = {
    "IMMUTABLE_TOKEN": {
        "revoke_mint_authority": True,
        "revoke_freeze_authority": True,
        "description": "Completely immutable token",
    },
    "FIXED_SUPPLY_TOKEN": {
        "revoke_mint_authority": True,
        "revoke_freeze_authority": False,
        "description": "Fixed supply but can freeze accounts",
    },
    "MINTABLE_TOKEN": {
        "revoke_mint_authority": False,
        "revoke_freeze_authority": True,
        "description": "Can mint more tokens but cannot freeze",
    },
    "FULL_AUTHORITY_TOKEN": {
        "revoke_mint_authority": False,
        "revoke_freeze_authority": False,
        "description": "Keeps both authorities",
    },
}


def invalid_flag(**flags) -> Optional[str]:
    """Name the first revoke flag that is neither a bool nor None."""
    for name, value in flags.items():
        if value is not None and not isinstance(value, bool):
            return f"{name} must be a boolean"
    return None


def format_mint_address(mint_address: Optional[str], length: int = 8) -> Optional[str]:
    if not mint_address or len(mint_address) <= length * 2:
        return mint_address
    return f"{mint_address[:length]}...{mint_address[-length:]}"


class TokenApiClient:
    """Small client for the token API, used by the console and batch runs.

    Calls never raise on transport or API errors; they return a dict with
    ``success: False`` and an ``error`` message instead.
    """

    def __init__(self, base_url: str = DEFAULT_API_URL, timeout: float = 120.0,
                 session: Optional[requests.Session] = None, sleep=time.sleep):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.sleep = sleep

    def _post(self, path: str, payload: Dict[str, Any]):
        r = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        try:
            data = r.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {"success": False, "error": f"{r.status_code} {r.text}"}
        return r, data

    def check_health(self) -> bool:
        try:
            r = self.session.get(f"{self.base_url}/health", timeout=10)
            if not r.ok:
                return False
            data = r.json()
        except (requests.RequestException, ValueError):
            return False
        return isinstance(data, dict) and data.get("status") == "OK"

    def create_token(self, metadata_url: str) -> Dict[str, Any]:
        logger.info(f"Creating token with metadata: {metadata_url}")
        try:
            r, data = self._post("/create-token", {"metadataUrl": metadata_url})
        except requests.RequestException as e:
            logger.error(f"Token creation failed: {e}")
            return {"success": False, "error": str(e)}

        if r.ok and data.get("success"):
            result = data["data"]
            logger.info(f"Token created: {result['mintAddress']}")
            return {
                "success": True,
                "mintAddress": result["mintAddress"],
                "transactionSignature": result["transactionSignature"],
                "explorerUrl": result["explorerUrl"],
            }
        logger.error(f"Token creation failed: {data.get('error')}")
        return {"success": False, "error": data.get("error"), "details": data.get("details")}

    def revoke_authorities(self, mint_address: str, revoke_mint_authority: bool = True,
                           revoke_freeze_authority: bool = True) -> Dict[str, Any]:
        logger.info(
            f"Revoking authorities for {mint_address} "
            f"(mint: {revoke_mint_authority}, freeze: {revoke_freeze_authority})"
        )
        payload = {
            "mintAddress": mint_address,
            "revokeMintAuthority": revoke_mint_authority,
            "revokeFreezeAuthority": revoke_freeze_authority,
        }
        try:
            r, data = self._post("/revoke-authorities", payload)
        except requests.RequestException as e:
            logger.error(f"Authority revocation failed: {e}")
            return {"success": False, "error": str(e)}

        if r.ok and data.get("success"):
            result = data["data"]
            return {
                "success": True,
                "revoked": result["revoked"],
                "signatures": result["signatures"],
                "message": result.get("message"),
            }
        logger.error(f"Authority revocation failed: {data.get('error')}")
        return {"success": False, "error": data.get("error"), "details": data.get("details")}

    def create_and_revoke(self, metadata_url: str, revoke_mint_authority: bool = True,
                          revoke_freeze_authority: bool = True,
                          wait_seconds: float = DEFAULT_WAIT_SECONDS) -> Dict[str, Any]:
        """Create a token, wait for the ledger to settle, then revoke authorities.

        On failure ``step`` says which half failed. A revoke failure still
        reports the mint address, since the token exists by then. Flags that
        are not booleans fail at the ``validate`` step before anything is minted.
        """
        error = invalid_flag(revokeMintAuthority=revoke_mint_authority,
                             revokeFreezeAuthority=revoke_freeze_authority)
        if error:
            logger.error(f"Refusing to create token: {error}")
            return {"success": False, "step": "validate", "error": error}

        created = self.create_token(metadata_url)
        if not created["success"]:
            return {"success": False, "step": "create", "error": created.get("error"),
                    "details": created.get("details")}

        if wait_seconds > 0:
            logger.info(f"Waiting {wait_seconds}s for blockchain confirmation...")
            self.sleep(wait_seconds)

        revoked = self.revoke_authorities(created["mintAddress"], revoke_mint_authority, revoke_freeze_authority)
        if not revoked["success"]:
            return {
                "success": False,
                "step": "revoke",
                "mintAddress": created["mintAddress"],
                "explorerUrl": created["explorerUrl"],
                "error": revoked.get("error"),
                "details": revoked.get("details"),
            }

        return {
            "success": True,
            "mintAddress": created["mintAddress"],
            "explorerUrl": created["explorerUrl"],
            "transactionSignature": created["transactionSignature"],
            "revoked": revoked["revoked"],
            "revokeSignatures": revoked["signatures"],
        }

    def create_with_preset(self, metadata_url: str, preset: str, **kwargs) -> Dict[str, Any]:
        if preset not in PRESETS:
            raise KeyError(f"Unknown preset {preset!r}; choose one of {', '.join(PRESETS)}")
        flags = PRESETS[preset]
        return self.create_and_revoke(
            metadata_url,
            revoke_mint_authority=flags["revoke_mint_authority"],
            revoke_freeze_authority=flags["revoke_freeze_authority"],
            **kwargs,
        )

    def batch_create(self, configs: List[Dict[str, Any]],
                     delay_seconds: float = DEFAULT_BATCH_DELAY,
                     wait_seconds: float = DEFAULT_WAIT_SECONDS) -> Dict[str, Any]:
        """Create tokens one after another with a fixed pause between them.

        Each config needs ``metadataUrl`` and may set ``name``,
        ``revokeMintAuthority`` and ``revokeFreezeAuthority`` (both default to
        true). Configs keeping both authorities are only created.
        """
        logger.info(f"Creating {len(configs)} tokens in batch")
        results = []
        for i, config in enumerate(configs):
            logger.info(f"Creating token {i + 1}/{len(configs)}: {config.get('name') or 'Unnamed'}")
            revoke_mint = config.get("revokeMintAuthority")
            revoke_freeze = config.get("revokeFreezeAuthority")
            error = invalid_flag(revokeMintAuthority=revoke_mint, revokeFreezeAuthority=revoke_freeze)
            if error:
                logger.error(f"Skipping token {i + 1}: {error}")
                result = {"success": False, "step": "validate", "error": error}
            elif revoke_mint is False and revoke_freeze is False:
                result = self.create_token(config["metadataUrl"])
                if result["success"]:
                    result["revoked"] = {"mintAuthority": False, "freezeAuthority": False}
                else:
                    result["step"] = "create"
            else:
                result = self.create_and_revoke(
                    config["metadataUrl"],
                    revoke_mint_authority=revoke_mint is not False,
                    revoke_freeze_authority=revoke_freeze is not False,
                    wait_seconds=wait_seconds,
                )
            results.append({"index": i, "config": config, "result": result})

            if i < len(configs) - 1 and delay_seconds > 0:
                logger.info(f"Waiting {delay_seconds}s before next token...")
                self.sleep(delay_seconds)

        successful = [r for r in results if r["result"]["success"]]
        failed = [r for r in results if not r["result"]["success"]]
        logger.info(f"Batch complete: {len(successful)}/{len(results)} successful")
        return {
            "results": results,
            "successful": successful,
            "failed": failed,
            "summary": {"total": len(results), "successful": len(successful), "failed": len(failed)},
        }


__all__ = [
    "PRESETS",
    "TokenApiClient",
    "format_mint_address",
    "is_valid_metadata_url",
]
