import pytest

from padbreak.oracles.padding import SchemeOracle
from padbreak.scheme import Key

KEY_HEX = '69e01355635fd7c8404f823ac591efefea4e0d4b7a72888d46a735149c86f852'


@pytest.fixture
def key():
    return Key.from_hex(KEY_HEX)


@pytest.fixture
def zero_key():
    return Key(b'\x00' * 32)


@pytest.fixture
def oracle(key):
    return SchemeOracle(plaintext=b'', key=key)
