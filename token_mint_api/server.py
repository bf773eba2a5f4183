import logging
import time
import traceback
from datetime import datetime, timezone

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Settings, load_keypair
from .errors import InvalidInput, TokenApiError
from .metadata import MetadataFetcher, is_valid_url
from .models import RevokeAuthorityOptions

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


def _error(message: str, status: int, details: str | None = None):
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def _solana_collaborators(settings: Settings):
    from solana.rpc.api import Client

    from .minter import SolanaTokenMinter
    from .revoker import AuthorityRevoker

    client = Client(settings.rpc_url)
    wallet = load_keypair(settings.wallet_path)
    minter = SolanaTokenMinter(client, wallet, cluster=settings.cluster, decimals=settings.token_decimals)
    return minter, AuthorityRevoker(client, wallet)


def create_app(settings: Settings | None = None, fetcher=None, minter=None, revoker=None) -> Flask:
    """Build the Flask app.

    Collaborators not passed in are built from ``settings``; the Solana ones
    need the RPC endpoint and the wallet file.
    """
    settings = settings or Settings()
    fetcher = fetcher or MetadataFetcher(timeout=settings.metadata_timeout)
    if minter is None or revoker is None:
        default_minter, default_revoker = _solana_collaborators(settings)
        minter = minter or default_minter
        revoker = revoker or default_revoker

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    CORS(app, send_wildcard=True)

    def details_for(exc: BaseException):
        if not settings.development:
            return None
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    @app.before_request
    def _start_timer():
        g.start_time = time.time()

    @app.after_request
    def _finish(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        elapsed_ms = (time.time() - g.get("start_time", time.time())) * 1000
        logger.info(f"{request.remote_addr} {request.method} {request.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    @app.route("/health", methods=["GET"])
    def health():
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return jsonify({"status": "OK", "timestamp": timestamp})

    @app.route("/create-token", methods=["POST"])
    def create_token():
        body = request.get_json(silent=True) or {}
        metadata_url = body.get("metadataUrl") if isinstance(body, dict) else None

        if not metadata_url:
            return _error("Missing required parameter: metadataUrl", 400)
        if not isinstance(metadata_url, str):
            return _error("metadataUrl must be a string", 400)
        if not is_valid_url(metadata_url):
            return _error("Invalid URL format. URL must start with http:// or https://", 400)

        logger.info(f"Creating token with metadata from: {metadata_url}")
        try:
            metadata = fetcher.fetch(metadata_url)
            result = minter.mint(metadata, metadata_url)
        except TokenApiError as e:
            logger.error(f"Error creating token: {e}")
            return _error(e.message, e.status_code, details_for(e))
        except Exception as e:
            logger.exception("Error creating token")
            return _error(str(e) or "An unexpected error occurred", 500, details_for(e))

        return jsonify({"success": True, "data": result.to_dict()})

    @app.route("/revoke-authorities", methods=["POST"])
    def revoke_authorities():
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            body = {}
        try:
            mint_address, options = _revoke_request(body)
        except InvalidInput as e:
            return _error(e.message, e.status_code)

        logger.info(
            f"Revoking authorities for {mint_address} "
            f"(mint: {options.revoke_mint_authority}, freeze: {options.revoke_freeze_authority})"
        )
        result = revoker.revoke(mint_address, options)
        if not result.success:
            return _error(result.error or "Failed to revoke authorities", 500)

        return jsonify({
            "success": True,
            "data": {
                "mintAddress": mint_address,
                "signatures": result.signatures,
                "revoked": result.revoked,
                "message": result.summary(),
            },
        })

    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(e):
        return _error("Endpoint not found", 404)

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return _error(e.description or e.name, e.code or 500)
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return _error("Internal server error", 500, details_for(e))

    return app


def _revoke_request(body: dict):
    mint_address = body.get("mintAddress")
    if mint_address is None or mint_address == "":
        raise InvalidInput("Missing required parameter: mintAddress")
    if not isinstance(mint_address, str):
        raise InvalidInput("mintAddress must be a string")

    flags = {}
    for name in ("revokeMintAuthority", "revokeFreezeAuthority"):
        value = body.get(name)
        if value is None:
            value = True
        elif not isinstance(value, bool):
            raise InvalidInput(f"{name} must be a boolean")
        flags[name] = value

    return mint_address, RevokeAuthorityOptions(
        revoke_mint_authority=flags["revokeMintAuthority"],
        revoke_freeze_authority=flags["revokeFreezeAuthority"],
    )
