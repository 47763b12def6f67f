from itertools import zip_longest, cycle
import cryptography.hazmat.primitives.padding as padding

from padbreak.errors import BadPadding, LengthError


def chunks(iterable, n, fillvalue=None):
    """Generator to yield equal sized chunks from the given iterable

    Example:
    ```python
    >>> iterable = [1, 2, 3, 4, 5]
    >>> list(chunks(iterable, 2, fillvalue=-1))
    [(1, 2), (3, 4), (5, -1)]

    ```

    Arguments:
        iterable {iterable} -- The iterable to drain
        n {int} -- The size of each chunk

    Keyword Arguments:
        fillvalue {any} -- The fill value to use if the iterable cannot be evenly distributed into n-sized chunks (default: {None})

    Yields:
        tuple -- Tuple of size `n` with elements from `iterable`
    """
    its = [ iter(iterable) ] * n
    yield from zip_longest(*its, fillvalue=fillvalue)


def blocks(byteslike, blocksize=16):
    r"""Split the given bytes-like object into a list of `bytes` blocks

    Example:
    ```python
    >>> blocks(b'AAAABBBB', blocksize=4)
    [b'AAAA', b'BBBB']

    ```

    Raises:
        LengthError: If the length is not a multiple of `blocksize`

    Returns:
        list -- The blocks in order
    """
    if len(byteslike) % blocksize != 0:
        raise LengthError(f"Length {len(byteslike)} is not a multiple of the block size {blocksize}")

    return [ bytes(b) for b in chunks(byteslike, blocksize) ]


def xor(buffer, x):
    r"""Compute the XOR of the given operands

    The second operand may either be a single value or a list-like of values.
    If so, it will be applied cyclicly.

    Examples:
    ```python
    >>> a = bytes(b'abcd')
    >>> b = 10
    >>> xor(a, b)
    b'khin'

    ```

    ```python
    >>> a = bytes(b'abcdefgh')
    >>> b = bytes(b'abcd')
    >>> xor(a, b)
    b'\x00\x00\x00\x00\x04\x04\x04\x0c'

    ```

    Arguments:
        buffer {byteslike} -- The first operand
        x {int or list of int} -- The second operand

    Returns:
        bytes -- The result of the XOR operation
    """
    try:
        it = cycle(x)
    except TypeError:
        it = cycle([x])

    return bytes([op1 ^ op2 for op1, op2 in zip(buffer, it)])


def pad(*parts, blocksize=16):
    r"""Combines the given portions of data and pads them to a multiple of `blocksize`.

    Between 1 and `blocksize` bytes are always appended, each equal to the number of
    bytes appended. An already aligned message receives a full block of padding.

    Example:
    ```python
    >>> pad(b'ABC', b'DEFGH')
    b'ABCDEFGH\x08\x08\x08\x08\x08\x08\x08\x08'
    >>> pad(b'0123456789abcdef')[16:]
    b'\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10\x10'

    ```

    Keyword Arguments:
        blocksize {int} -- The desired blocksize in bytes (default: {16})

    Returns:
        bytes -- The padded data
    """
    padder = padding.PKCS7(blocksize * 8).padder()
    data = b''
    for p in parts:
        if len(p) > 0:
            data += padder.update(p)

    return data + padder.finalize()


def is_padding_valid(byteslike, blocksize=16):
    r"""Checks whether the padding is valid in the given bytes-like object.

    Example:
    ```python
    >>> is_padding_valid(b'ABCD' + b'\x0c' * 12)
    True
    >>> is_padding_valid(b'ABCD' + b'\x0c' * 11 + b'\x0b')
    False
    >>> is_padding_valid(b'A' * 15 + b'\x00')
    False

    ```

    Arguments:
        byteslike {byteslike} -- The blob to check

    Keyword Arguments:
        blocksize {int} -- The largest padding length accepted (default: {16})

    Returns:
        bool -- `True` if the padding is valid, `False` if it is invalid.
    """
    if len(byteslike) == 0:
        return False

    pad_byte = byteslike[-1]

    if pad_byte == 0 or pad_byte > blocksize or pad_byte > len(byteslike):
        return False

    for (_, b) in zip(range(pad_byte), reversed(byteslike)):
        if b != pad_byte:
            return False

    return True


def strip_padding(byteslike, blocksize=16):
    r"""Validate and remove the padding of the given bytes-like object.

    Example:
    ```python
    >>> strip_padding(b'Hello' + b'\x0b' * 11)
    b'Hello'

    ```

    Raises:
        BadPadding: If the padding is malformed

    Returns:
        bytes -- The data without padding
    """
    if not is_padding_valid(byteslike, blocksize=blocksize):
        raise BadPadding()

    return bytes(byteslike[:-byteslike[-1]])
