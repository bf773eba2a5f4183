import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from solders.keypair import Keypair

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://api.devnet.solana.com"


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    host: str = "0.0.0.0"
    rpc_url: str = DEFAULT_RPC_URL
    cluster: str = "devnet"
    wallet_path: str = "wallet.json"
    token_decimals: int = 9
    metadata_timeout: float = 30.0
    app_env: str = "production"
    log_level: str = "INFO"

    @property
    def development(self) -> bool:
        return self.app_env.lower() == "development"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def load_settings(dotenv: bool = True) -> Settings:
    """Read settings from the environment (and a .env file when present)."""
    if dotenv:
        load_dotenv()
    return Settings(
        port=_int_env("PORT", 3000),
        host=os.getenv("HOST", "0.0.0.0"),
        rpc_url=os.getenv("SOLANA_RPC_URL", DEFAULT_RPC_URL),
        cluster=os.getenv("SOLANA_CLUSTER", "devnet"),
        wallet_path=os.getenv("WALLET_PATH", "wallet.json"),
        token_decimals=_int_env("TOKEN_DECIMALS", 9),
        metadata_timeout=_float_env("METADATA_TIMEOUT", 30.0),
        app_env=os.getenv("APP_ENV", "production"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def load_keypair(path: str) -> Keypair:
    """Load a wallet saved as a JSON array of 64 secret-key bytes."""
    wallet_file = Path(path)
    try:
        secret = json.loads(wallet_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Wallet file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Wallet file {path} is not valid JSON: {e}")

    if not isinstance(secret, list) or len(secret) != 64:
        raise ConfigurationError(f"Wallet file {path} must hold a JSON array of 64 bytes")
    try:
        keypair = Keypair.from_bytes(bytes(secret))
    except ValueError as e:
        raise ConfigurationError(f"Wallet file {path} does not hold a valid keypair: {e}")
    logger.info(f"Loaded wallet {keypair.pubkey()} from {path}")
    return keypair
