import logging

from .config import load_settings
from .server import create_app

logger = logging.getLogger("token_mint_api")


def main():
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)

    logger.info(f"Solana token API running on port {settings.port} ({settings.cluster})")
    logger.info(f"Health check: http://localhost:{settings.port}/health")
    logger.info(f"Create token: POST http://localhost:{settings.port}/create-token")
    logger.info(f"Revoke authorities: POST http://localhost:{settings.port}/revoke-authorities")
    app.run(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
