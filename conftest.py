import pytest

from zkcrypto import keys


@pytest.fixture(scope="session")
def key_pair():
    """RSA-2048 key pair shared across the test run (generation is slow)."""
    return keys.generate(2048).unwrap()


@pytest.fixture(scope="session")
def other_key_pair():
    return keys.generate(2048).unwrap()
