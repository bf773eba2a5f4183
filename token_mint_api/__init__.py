"""REST API for minting Solana SPL tokens from a metadata URL and revoking their authorities."""

from .config import Settings, load_settings
from .server import create_app

__all__ = ["Settings", "create_app", "load_settings"]
