import secrets

from padbreak.errors import BadMAC, BadPadding
from padbreak.oracles._base import _Oracle, Verdict
from padbreak.scheme import Key, encrypt, decrypt


__all__ = [ 'SchemeOracle', 'scheme_verdict' ]


def scheme_verdict(msg, key, distinguish_mac=True):
    """Decrypt IV || ciphertext with the authenticated scheme and report the outcome

    Arguments:
        msg {bytes} -- The candidate
        key {Key or bytes} -- The 32 byte key

    Keyword Arguments:
        distinguish_mac {bool} -- Report `Verdict.BAD_MAC` for tag failures. If `False` they are coalesced into `Verdict.OK` (default: {True})

    Raises:
        LengthError: If the candidate is not properly sized

    Returns:
        Verdict -- The outcome of the decryption
    """
    try:
        decrypt(msg, key)
    except BadPadding:
        return Verdict.BAD_PADDING
    except BadMAC:
        if distinguish_mac:
            return Verdict.BAD_MAC

    return Verdict.OK


class SchemeOracle(_Oracle):
    r"""An in-process oracle decrypting candidates with the authenticated scheme

    The oracle holds a secret key and reports whether a candidate decrypted fine, had an
    invalid padding or an invalid tag. A ciphertext of `plaintext` is available in `msg`.

    Keyword Arguments:
        plaintext {byteslike} -- The plaintext to generate `msg` from. Will be generated if None (default: {None})
        key {Key or byteslike} -- The 32 byte key to use. Will be generated if None (default: {None})
        iv {byteslike} -- The IV to encrypt `plaintext` with. Will be generated if None (default: {None})
        distinguish_mac {bool} -- Report `Verdict.BAD_MAC` for tag failures. If `False` they are coalesced into `Verdict.OK` (default: {True})

    Usage:
    ```python
    >>> oracle = SchemeOracle(b'Hello World!')
    >>> oracle.query(oracle.msg)
    <Verdict.OK: 'SUCCESS'>
    >>> # Replace the final block to break the padding with overwhelming probability
    >>> oracle.query(oracle.msg[:-16] + oracle.msg[16:32]) in (Verdict.BAD_PADDING, Verdict.BAD_MAC)
    True
    >>> oracle(oracle.msg)
    True

    ```
    """

    def __init__(self, plaintext=None, key=None, iv=None, distinguish_mac=True):
        super().__init__()

        if key is None:
            key = Key.generate()
        if plaintext is None:
            len_ = 1 + secrets.randbelow(64)
            plaintext = secrets.token_bytes(len_)

        self.key = key if isinstance(key, Key) else Key(key)
        self.distinguish_mac = distinguish_mac
        self.plain = plaintext
        self.msg = encrypt(plaintext, self.key, iv=iv)

    def query(self, msg):
        return scheme_verdict(msg, self.key, distinguish_mac=self.distinguish_mac)
