import hashlib
import secrets

from padbreak.utils import xor


__all__ = ['hmac', 'verify', 'sha256']

BLOCK_SIZE = 64


def sha256(data):
    """SHA256 digest of `data`, the default hash of `hmac`"""
    return hashlib.sha256(data).digest()


def hmac(key, msg, alg=sha256):
    """Compute the HMAC (keyed-hash message authentication code) for the given message using the given key

    Example:
    ```python
    >>> import hmac as reference
    >>> key, msg = b'\\x00' * 16, b'hello'
    >>> hmac(key, msg) == reference.new(key, msg, 'sha256').digest()
    True

    ```

    Arguments:
        key {bytes} -- The key to sign the message with
        msg {bytes} -- The message to sign

    Keyword Arguments:
        alg {callable} -- The hash algorithm to use. Its block size must be 64 bytes (default: {sha256})

    Returns:
        bytes -- The HMAC computed
    """
    if len(key) > BLOCK_SIZE:
        key = alg(key)

    if len(key) < BLOCK_SIZE:
        key = key + b'\x00' * (BLOCK_SIZE - len(key))

    outer = xor(key, 0x5c)
    inner = xor(key, 0x36)

    return alg(outer + alg(inner + msg))


def verify(key, msg, tag, alg=sha256):
    """Check the given tag against the HMAC of `msg` without leaking the position of a mismatch

    Arguments:
        key {bytes} -- The MAC key
        msg {bytes} -- The message the tag was computed over
        tag {bytes} -- The delivered tag

    Returns:
        bool -- `True` if the tag matches
    """
    return secrets.compare_digest(hmac(key, msg, alg=alg), bytes(tag))
