import hashlib
import hmac as reference

import pytest

from padbreak.hashing import hmac, sha256, verify


@pytest.mark.parametrize("key_length", [0, 1, 16, 63, 64, 65, 200])
def test_hmac_matches_reference(key_length):
    key = bytes(i % 256 for i in range(key_length))
    msg = b'The quick brown fox jumps over the lazy dog'

    assert hmac(key, msg) == reference.new(key, msg, 'sha256').digest()


def test_hmac_is_untruncated():
    assert len(hmac(b'k' * 16, b'')) == 32


def test_sha256_digest():
    assert sha256(b'abc') == hashlib.sha256(b'abc').digest()
    assert len(sha256(b'')) == 32


def test_hmac_with_other_hash():
    def sha1(data):
        return hashlib.sha1(data).digest()

    assert hmac(b'key', b'msg', alg=sha1) == reference.new(b'key', b'msg', 'sha1').digest()


def test_verify():
    tag = hmac(b'key', b'msg')

    assert verify(b'key', b'msg', tag)
    assert not verify(b'key', b'msG', tag)
    assert not verify(b'key', b'msg', tag[:-1] + bytes([tag[-1] ^ 1]))
