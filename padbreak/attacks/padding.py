import concurrent.futures
import logging
import secrets

from padbreak.errors import LengthError, OracleUnavailable, RecoveryError
from padbreak.utils import blocks, xor


__all__ = [ 'recover_block', 'decrypt', 'strip_recovered', 'decrypt_many' ]

log = logging.getLogger(__name__)


def _confirm_single_byte_padding(oracle, candidate, pos):
    # a hit at the last position may be ...\x02\x02 instead of \x01.
    # changing the byte in front of it only breaks the former
    check = bytearray(candidate)
    check[pos - 1] ^= 0xff
    return oracle(check)


def recover_block(oracle, previous, block, blocksize=16, disambiguate=True,
                  random_bytes=secrets.token_bytes, block_index=None):
    """Recover the plaintext of a single CBC block using a padding oracle.

    The oracle is fed two block candidates: a forged block acting as IV, followed by `block`.
    Starting at the last byte the forged block is tuned until the oracle accepts the padding,
    which reveals the intermediate state, i.e. the raw block cipher decryption of `block`.
    XORing it with the true `previous` block yields the plaintext.

    Every byte position takes at most 256 guesses. With `disambiguate` set, each hit at the
    last position is confirmed by one more query, so that position alone can take up to
    258 queries (256 guesses, a rejected `\\x02\\x02` hit and the genuine one).

    Example:
    ```python
    >>> from padbreak.oracles.padding import SchemeOracle
    >>> o = SchemeOracle(b'Attack at dawn, not at noon.')
    >>> iv, first = o.msg[:16], o.msg[16:32]
    >>> recover_block(o, iv, first)
    b'Attack at dawn, '

    ```

    Arguments:
        oracle {callable} -- Padding oracle. Called with a candidate, returns whether its padding was accepted
        previous {bytes} -- The ciphertext block (or IV) preceding `block`
        block {bytes} -- The ciphertext block to decrypt

    Keyword Arguments:
        blocksize {int} -- The CBC block size in bytes (default: {16})
        disambiguate {bool} -- Confirm hits at the last byte with an extra query. If `False` the first hit is taken (default: {True})
        random_bytes {callable} -- Source of the initial forged block (default: {secrets.token_bytes})
        block_index {int} -- Index of `block` in the message, only used for reporting (default: {None})

    Raises:
        RecoveryError: If no candidate is accepted for some byte
        OracleUnavailable: If the oracle fails to answer

    Returns:
        bytes -- The decrypted block
    """
    previous = bytes(previous)
    block = bytes(block)

    if len(previous) != blocksize or len(block) != blocksize:
        raise LengthError(f"Both blocks have to be {blocksize} bytes long")

    # the forged block starts out random so the genuine padding of the message does not interfere
    candidate = bytearray(random_bytes(blocksize)) + block
    intermediate = bytearray(blocksize)

    # for each byte in the block, in reverse order
    for pos in reversed(range(blocksize)):
        # the value every byte from `pos` on should decrypt to
        pad_len = blocksize - pos
        for j in range(pos + 1, blocksize):
            candidate[j] = pad_len ^ intermediate[j]

        for b in range(256):
            candidate[pos] = b

            if not oracle(candidate):
                continue

            if disambiguate and pad_len == 1 and pos > 0:
                if not _confirm_single_byte_padding(oracle, candidate, pos):
                    log.warning("Block #%s: discarding ambiguous padding hit 0x%02x", block_index, b)
                    continue

            break
        else:
            raise RecoveryError(block_index, pos)

        intermediate[pos] = pad_len ^ candidate[pos]

    return xor(intermediate, previous)


def decrypt(oracle, msg, iv=None, blocksize=16, recovered=None, **kvargs):
    r"""Performs a CBC - blockcipher attack when given a padding oracle.

    A padding oracle reports whether a message given for decryption has valid
    padding after decrpyting it.

    This attack is able to decrypt the given message without knowing the secret key.
    Blocks are recovered from the last one to the first one.

    Example:
    ```python
    >>> from padbreak.oracles.padding import SchemeOracle
    >>> o = SchemeOracle(plaintext=b'Hi oracle!')
    >>> padded = decrypt(o, o.msg)
    >>> len(padded)
    48
    >>> padded[-6:]
    b'\x06\x06\x06\x06\x06\x06'
    >>> strip_recovered(padded)
    b'Hi oracle!'

    ```

    If the oracle fails the attack is aborted, but the blocks recovered so far are handed
    back. Passing them in again resumes the attack:
    ```python
    >>> from padbreak.errors import OracleUnavailable
    >>> class Flaky(SchemeOracle):
    ...     def query(self, msg):
    ...         if self.queries == 300:
    ...             raise OracleUnavailable("gone")
    ...         return super().query(msg)
    >>> o = Flaky(plaintext=b'Hi oracle!')
    >>> try:
    ...     decrypt(o, o.msg)
    ... except OracleUnavailable as e:
    ...     err = e
    >>> strip_recovered(decrypt(o, o.msg, recovered=err.recovered))
    b'Hi oracle!'

    ```

    Arguments:
        oracle {callable} -- The padding oracle
        msg {bytes} -- The encrypted message to decrypt, IV || ciphertext unless `iv` is given

    Keyword Arguments:
        iv {bytes} -- The initialization vector, if `msg` does not start with it (default: {None})
        blocksize {int} -- The CBC block size in bytes (default: {16})
        recovered {dict} -- Already recovered plaintext blocks by block index. These are skipped (default: {None})

    Additional `kvargs` are passed on to `recover_block`.

    Raises:
        LengthError: If the message is not aligned or holds no block besides the IV
        OracleUnavailable: If the oracle fails. Carries the aborted block and everything recovered so far
        RecoveryError: If a block cannot be recovered

    Returns:
        bytes -- The decrypted message, still padded and carrying its tag
    """
    if iv is not None:
        msg = bytes(iv) + bytes(msg)

    if len(msg) < 2 * blocksize:
        raise LengthError(f"Expected IV and at least one block, got {len(msg)} bytes")

    cipher_blocks = blocks(msg, blocksize)
    n = len(cipher_blocks)
    recovered = dict(recovered or {})

    # the IV itself is never attacked
    for i in range(n - 1, 0, -1):
        if i in recovered:
            continue

        log.debug("Attacking block #%d", i)
        try:
            recovered[i] = recover_block(
                oracle, cipher_blocks[i - 1], cipher_blocks[i],
                blocksize=blocksize, block_index=i, **kvargs
            )
        except OracleUnavailable as e:
            log.error("Oracle failed while attacking block #%d: %s", i, e)
            raise OracleUnavailable(str(e), block_index=i, recovered=recovered) from e

        log.info("Recovered block %d/%d", n - i, n - 1)

    return b''.join(recovered[i] for i in range(1, n))


def strip_recovered(padded, tag_size=32):
    r"""Drop padding and tag from a recovered message.

    The padding length is read from the last byte and trusted as is.

    Example:
    ```python
    >>> strip_recovered(b'hi' + b'T' * 32 + b'\x0e' * 14)
    b'hi'

    ```

    Keyword Arguments:
        tag_size {int} -- Size of the tag in front of the padding (default: {32})

    Returns:
        bytes -- The original message
    """
    if len(padded) == 0:
        raise LengthError("Nothing was recovered")

    end = len(padded) - padded[-1] - tag_size
    return bytes(padded[:max(end, 0)])


def decrypt_many(oracle, messages, workers=4, **kvargs):
    """Attack several independent messages concurrently.

    Each message is recovered by `decrypt` in its own task. The oracle has to cope with
    concurrent queries, wrap it in a `GatedOracle` otherwise.

    Example:
    ```python
    >>> from padbreak.oracles.padding import SchemeOracle
    >>> from padbreak.scheme import encrypt
    >>> o = SchemeOracle()
    >>> msgs = [encrypt(m, o.key) for m in (b'first', b'second')]
    >>> [strip_recovered(p) for p in decrypt_many(o, msgs, workers=2)]
    [b'first', b'second']

    ```

    Arguments:
        oracle {callable} -- The padding oracle
        messages {iterable} -- Messages to decrypt, each IV || ciphertext

    Keyword Arguments:
        workers {int} -- Number of concurrent tasks (default: {4})

    Additional `kvargs` are passed on to `decrypt`.

    Returns:
        list -- The recovered, still padded messages in input order
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [ pool.submit(decrypt, oracle, msg, **kvargs) for msg in messages ]
        return [ f.result() for f in futures ]
