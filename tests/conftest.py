import pytest

from tokenauth.auth.actors import Audience, Issuer
from tokenauth.crypto.keys import generate_private_key


@pytest.fixture(scope="session")
def private_key():
    return generate_private_key()


@pytest.fixture(scope="session")
def other_private_key():
    return generate_private_key()


@pytest.fixture
def issuer(private_key):
    return Issuer(private_key, "auth")


@pytest.fixture
def audience(private_key):
    return Audience(private_key.public_key(), "chat")
