"""Helpers that build Issuer and Audience instances from keys on disk or over HTTP."""

import logging
from pathlib import Path

import httpx

from tokenauth.auth.actors import Audience, Issuer
from tokenauth.crypto.keys import KeyManager, fetch_public_key

logger = logging.getLogger(__name__)


def load_issuer(key_manager: KeyManager, key_path: str | Path, name: str) -> Issuer:
    """Load (or create on first use) the private key at ``key_path``."""
    issuer = Issuer(key_manager.load_private_key(key_path), name)
    logger.info("Issuer %s ready (key=%s)", name, key_path)
    return issuer


def audience_from_url(
    url: str,
    name: str,
    timeout: float = 5.0,
    client: httpx.Client | None = None,
) -> Audience:
    """Trust the public key served at ``url``.

    Only as trustworthy as the channel to ``url``.
    """
    audience = Audience(fetch_public_key(url, timeout=timeout, client=client), name)
    logger.info("Audience %s trusts public key from %s", name, url)
    return audience


def audience_for_issuer(issuer: Issuer, name: str) -> Audience:
    return Audience(issuer.public_key(), name)
