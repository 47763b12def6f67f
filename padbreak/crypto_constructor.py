"""This module exposes interfaces which can be used to easily encrypt/decrypt
data with AES in CBC mode.

The purpose is ease of use. It comes at the cost of no flexibility: buffers have to
be block aligned, no padding is applied here.
"""

from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import algorithms, modes

import secrets

from padbreak.errors import LengthError

__all__ = ['aes_cbc', 'BLOCK_SIZE']

BLOCK_SIZE = 16


class SimpleSymCipherInterface(object):
    def __init__(self, cipher, alg_name, mode_name, blocksize=BLOCK_SIZE, **kvargs):
        self.cipher = cipher
        self.alg_name = alg_name
        self.mode_name = mode_name
        self.blocksize = blocksize

        for k in kvargs:
            setattr(self, k, kvargs[k])

    def _check_aligned(self, data):
        if len(data) % self.blocksize != 0:
            raise LengthError(f"Data of length {len(data)} is not aligned to {self.blocksize} byte blocks")

    def encrypt(self, plaintext):
        self._check_aligned(plaintext)
        enc = self.cipher.encryptor()
        return enc.update(plaintext) + enc.finalize()

    def decrypt(self, ciphertext):
        self._check_aligned(ciphertext)
        dec = self.cipher.decryptor()
        return dec.update(ciphertext) + dec.finalize()

    def __str__(self):
        return repr(self)

    def __repr__(self):
        return f"<SimpleSymCipherInterface {self.alg_name} | {self.mode_name}>"


def aes_cbc(key=None, iv=None):
    r"""Construct an AES-CBC codec for block aligned buffers.

    Each plaintext block is XORed with the previous ciphertext block (the IV for the first one)
    before it is encrypted. Decryption captures each ciphertext block before decrypting it and
    uses it to unchain the following block.

    Example:
    ```python
    >>> c = aes_cbc(key=b'\x00' * 16, iv=b'\x01' * 16)
    >>> msg = c.encrypt(b'YELLOW SUBMARINE' * 2)
    >>> msg[:16] == msg[16:]
    False
    >>> c.decrypt(msg)
    b'YELLOW SUBMARINEYELLOW SUBMARINE'

    ```

    Keyword Arguments:
        key {bytes} -- The 16 byte key. Will be generated if None (default: {None})
        iv {bytes} -- The 16 byte IV. Will be generated if None (default: {None})

    Returns:
        SimpleSymCipherInterface -- Object exposing `encrypt` and `decrypt`
    """
    if key is None:
        key = secrets.token_bytes(16)
    if iv is None:
        iv = secrets.token_bytes(BLOCK_SIZE)

    if len(iv) != BLOCK_SIZE:
        raise LengthError(f"The IV has to be {BLOCK_SIZE} bytes long, got {len(iv)}")

    c = Cipher(algorithms.AES(key), modes.CBC(iv), default_backend())
    return SimpleSymCipherInterface(c, 'AES', 'CBC', key=key, iv=iv)
