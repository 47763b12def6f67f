"""MAC-then-pad-then-encrypt authenticated encryption with AES-CBC and HMAC-SHA256.

A message `m` is encrypted under a 32 byte key `k = enc_key || mac_key` as

    IV || AES-CBC(enc_key, IV, m || HMAC-SHA256(mac_key, m) || padding)

Decryption checks the padding before the tag is even looked at. Telling these two
failures apart is exactly what makes the scheme vulnerable to a padding oracle.
"""
import binascii
import secrets

from padbreak.crypto_constructor import aes_cbc, BLOCK_SIZE
from padbreak.errors import BadMAC, DecodeError, LengthError
from padbreak.hashing import hmac, verify
from padbreak.utils import pad, strip_padding


__all__ = ['Key', 'encrypt', 'decrypt', 'TAG_SIZE', 'KEY_SIZE']

KEY_SIZE = 32
TAG_SIZE = 32


class Key(object):
    """A 32 byte key split into an encryption half and a MAC half.

    Example:
    ```python
    >>> k = Key.from_hex('00' * 16 + 'ff' * 16)
    >>> k.enc_key
    b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00'
    >>> k.mac_key[:2]
    b'\\xff\\xff'

    ```
    """

    __slots__ = ('_raw',)

    def __init__(self, raw):
        raw = bytes(raw)
        if len(raw) != KEY_SIZE:
            raise LengthError(f"A key has to be {KEY_SIZE} bytes long, got {len(raw)}")
        self._raw = raw

    @classmethod
    def generate(cls):
        return cls(secrets.token_bytes(KEY_SIZE))

    @classmethod
    def from_hex(cls, text):
        try:
            raw = binascii.unhexlify(text.strip())
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"A key has to be given as {2 * KEY_SIZE} hex characters") from e
        return cls(raw)

    @property
    def enc_key(self):
        return self._raw[:16]

    @property
    def mac_key(self):
        return self._raw[16:]

    def __bytes__(self):
        return self._raw

    def __eq__(self, other):
        if type(other) != Key:
            return False
        return secrets.compare_digest(self._raw, other._raw)

    def __hash__(self):
        return hash(self._raw)

    def __repr__(self):
        return "<Key>"


def _as_key(key):
    if isinstance(key, Key):
        return key
    return Key(key)


def encrypt(plaintext, key, iv=None):
    r"""Encrypt and authenticate the given plaintext.

    Example:
    ```python
    >>> key = Key(b'\x00' * 32)
    >>> msg = encrypt(b'hello', key)
    >>> len(msg)
    64
    >>> decrypt(msg, key)
    b'hello'

    ```

    Arguments:
        plaintext {bytes} -- The message to protect, of any length
        key {Key or bytes} -- The 32 byte key

    Keyword Arguments:
        iv {bytes} -- The IV to use. A random one is drawn if None (default: {None})

    Returns:
        bytes -- IV || ciphertext
    """
    key = _as_key(key)
    if iv is None:
        iv = secrets.token_bytes(BLOCK_SIZE)

    tag = hmac(key.mac_key, plaintext)
    padded = pad(plaintext, tag, blocksize=BLOCK_SIZE)

    return bytes(iv) + aes_cbc(key.enc_key, iv).encrypt(padded)


def split_iv(msg, blocksize=BLOCK_SIZE):
    """Split IV || ciphertext into its two parts.

    Raises:
        LengthError: If the message is not block aligned or holds no block after the IV

    Returns:
        (bytes, bytes) -- The IV and the ciphertext
    """
    if len(msg) < 2 * blocksize or len(msg) % blocksize != 0:
        raise LengthError(f"Expected IV and at least one block, aligned to {blocksize} bytes, got {len(msg)} bytes")

    return bytes(msg[:blocksize]), bytes(msg[blocksize:])


def decrypt(msg, key):
    r"""Decrypt and verify IV || ciphertext.

    The padding is validated first. If it is malformed `BadPadding` is raised and the tag
    is never computed.

    Example:
    ```python
    >>> key = Key(b'\x00' * 32)
    >>> msg = encrypt(b'hello', key)
    >>> # flipping a bit of the second to last block flips the same bit of the padding
    >>> tampered = bytearray(msg)
    >>> tampered[-17] ^= 1
    >>> decrypt(bytes(tampered), key)
    Traceback (most recent call last):
    ...
    padbreak.errors.BadPadding: INVALID PADDING

    ```

    Arguments:
        msg {bytes} -- IV || ciphertext
        key {Key or bytes} -- The 32 byte key

    Raises:
        LengthError: If the message is not properly sized
        BadPadding: If the decrypted padding is malformed
        BadMAC: If the tag does not match the message

    Returns:
        bytes -- The authenticated plaintext
    """
    key = _as_key(key)
    iv, ciphertext = split_iv(msg)

    padded = aes_cbc(key.enc_key, iv).decrypt(ciphertext)
    with_tag = strip_padding(padded, blocksize=BLOCK_SIZE)

    if len(with_tag) < TAG_SIZE:
        raise BadMAC()

    plaintext, tag = with_tag[:-TAG_SIZE], with_tag[-TAG_SIZE:]
    if not verify(key.mac_key, plaintext, tag):
        raise BadMAC()

    return plaintext
