import enum
import threading


class Verdict(enum.Enum):
    """The outcome of handing a candidate ciphertext to an oracle.
    """
    OK = 'SUCCESS'
    BAD_PADDING = 'INVALID PADDING'
    BAD_MAC = 'INVALID MAC'

    @property
    def padding_accepted(self):
        return self is not Verdict.BAD_PADDING


class _Oracle(object):
    """Base class of all padding oracles.

    Subclasses implement `query`, which maps IV || ciphertext to a `Verdict`.
    Calling the oracle reports whether the padding was accepted, which is all the attack
    engine ever asks for. Every call is counted in `queries`.
    """

    def __init__(self):
        self.queries = 0
        self._lock = threading.Lock()

    def query(self, msg):
        raise NotImplementedError

    def __call__(self, msg):
        with self._lock:
            self.queries += 1

        return self.query(bytes(msg)).padding_accepted
