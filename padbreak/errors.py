__all__ = [
    'PaddingOracleError', 'LengthError', 'BadPadding', 'BadMAC',
    'OracleUnavailable', 'DecodeError', 'RecoveryError'
]


class PaddingOracleError(Exception):
    """Base class of all errors raised by this package.
    """


class LengthError(PaddingOracleError, ValueError):
    """Raised when a buffer is not block aligned or too short to carry an IV and one block.
    """


class BadPadding(PaddingOracleError):
    """Raised when the trailing bytes of a decrypted message do not form a valid padding.

    This is the side channel the padding oracle attack feeds on.
    """

    def __init__(self, msg="INVALID PADDING"):
        super().__init__(msg)


class BadMAC(PaddingOracleError):
    """Raised when the delivered tag does not match the recomputed HMAC.

    No plaintext is attached to this error.
    """

    def __init__(self, msg="INVALID MAC"):
        super().__init__(msg)


class OracleUnavailable(PaddingOracleError):
    """Raised when an oracle could not produce a verdict at all.

    When raised out of the attack engine `block_index` names the block whose recovery was
    aborted and `recovered` maps block indices to the plaintext blocks recovered so far.
    Pass the latter back to `padbreak.attacks.padding.decrypt` to resume.
    """

    def __init__(self, msg, block_index=None, recovered=None):
        super().__init__(msg)
        self.block_index = block_index
        self.recovered = {} if recovered is None else recovered


class DecodeError(PaddingOracleError, ValueError):
    """Raised when hex or decimal text cannot be decoded into bytes.
    """


class RecoveryError(PaddingOracleError):
    """Raised when no candidate byte yields a valid padding for some position of a block.
    """

    def __init__(self, block_index, position):
        super().__init__(f"No valid padding found for byte #{position} of block #{block_index}")
        self.block_index = block_index
        self.position = position
