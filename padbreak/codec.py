"""Text representations of byte strings exchanged with oracles and users.

Two representations are understood: plain hex (`48656c6c6f`) and whitespace separated
decimal octets (`72 101 108 108 111`, optionally wrapped in brackets).
"""
import binascii
import enum

from padbreak.errors import DecodeError


__all__ = ['Encoding', 'encode', 'decode']

_BRACKETS = "[]{}()"


class Encoding(enum.Enum):
    HEX = 'hex'
    DECIMAL = 'decimal'


def encode(data, encoding=Encoding.HEX):
    """Encode the given bytes as text

    Example:
    ```python
    >>> encode(b'Hello')
    '48656c6c6f'
    >>> encode(b'Hello', Encoding.DECIMAL)
    '72 101 108 108 111'

    ```

    Arguments:
        data {bytes} -- The bytes to encode

    Keyword Arguments:
        encoding {Encoding} -- The representation to produce (default: {Encoding.HEX})

    Returns:
        str -- The encoded text
    """
    if encoding == Encoding.HEX:
        return binascii.hexlify(data).decode('ascii')
    if encoding == Encoding.DECIMAL:
        return ' '.join(str(b) for b in data)

    raise ValueError(f"Unsupported encoding: {encoding!r}")


def _decode_hex(text):
    try:
        return binascii.unhexlify(text.strip())
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid hex input: {e}") from e


def _decode_decimal(text):
    tokens = text.strip().strip(_BRACKETS + " \t\r\n").split()

    data = bytearray()
    for token in tokens:
        try:
            value = int(token, 10)
        except ValueError as e:
            raise DecodeError(f"Invalid decimal octet: {token!r}") from e
        if not 0 <= value <= 255:
            raise DecodeError(f"Decimal octet out of range: {value}")
        data.append(value)

    return bytes(data)


def decode(text, encoding=None):
    """Decode hex or decimal text into bytes

    If no encoding is given hex is tried first and decimal octets second.

    Example:
    ```python
    >>> decode('48656c6c6f')
    b'Hello'
    >>> decode('[72 101 108 108 111]\\n')
    b'Hello'
    >>> decode('72 1010')
    Traceback (most recent call last):
    ...
    padbreak.errors.DecodeError: Decimal octet out of range: 1010

    ```

    Arguments:
        text {str or bytes} -- The text to decode

    Keyword Arguments:
        encoding {Encoding} -- Force a representation instead of guessing it (default: {None})

    Raises:
        DecodeError: If the text is in neither representation

    Returns:
        bytes -- The decoded bytes
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = text.decode('ascii')
        except UnicodeDecodeError as e:
            raise DecodeError("Encoded input has to be ASCII text") from e

    if encoding == Encoding.HEX:
        return _decode_hex(text)
    if encoding == Encoding.DECIMAL:
        return _decode_decimal(text)

    try:
        return _decode_hex(text)
    except DecodeError:
        return _decode_decimal(text)
