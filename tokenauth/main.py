"""Public-key service - FastAPI application entry point.

Publishes the issuer's public key so audiences can fetch it with
``tokenauth.crypto.keys.fetch_public_key``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from tokenauth.auth.actors import Issuer
from tokenauth.auth.service import load_issuer
from tokenauth.config import get_settings
from tokenauth.crypto.keys import KeyManager, marshal_public_key

logger = logging.getLogger(__name__)

PUBLIC_KEY_PATH = "/jwtkeypub"


def create_app(issuer: Issuer | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: load or create the signing key unless one was injected
        if getattr(app.state, "issuer", None) is None:
            settings = get_settings()
            app.state.issuer = load_issuer(
                KeyManager(), settings.JWT_KEY_PATH, settings.JWT_ISSUER_NAME
            )
        logger.info("Public key service started for issuer %s", app.state.issuer.name)
        yield

    app = FastAPI(
        title="Token Public Key Service",
        description="Serves the issuer's RSA public key (DER, PKCS#1).",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.issuer = issuer

    @app.get(PUBLIC_KEY_PATH)
    async def public_key(request: Request) -> Response:
        """Return the issuer's public key as DER-encoded PKCS#1 bytes."""
        der = marshal_public_key(request.app.state.issuer.public_key())
        return Response(content=der, media_type="application/octet-stream")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
