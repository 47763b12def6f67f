import concurrent.futures
import logging

from padbreak.errors import OracleUnavailable
from padbreak.oracles._base import _Oracle


__all__ = [ 'GatedOracle' ]

log = logging.getLogger(__name__)


class GatedOracle(_Oracle):
    """Wraps another oracle to serialize its queries and/or bound their duration

    A query that does not finish within `timeout` seconds raises `OracleUnavailable`.
    It is never retried: a late answer cannot be matched to a candidate anymore.

    Example:
    ```python
    >>> import time
    >>> from padbreak.oracles._base import Verdict
    >>> class Slow(_Oracle):
    ...     def query(self, msg):
    ...         time.sleep(0.5)
    ...         return Verdict.OK
    >>> oracle = GatedOracle(Slow(), timeout=0.05)
    >>> oracle(bytes(32))
    Traceback (most recent call last):
    ...
    padbreak.errors.OracleUnavailable: Oracle did not answer within 0.05 seconds
    >>> oracle.close()

    ```

    Arguments:
        oracle {_Oracle} -- The oracle to wrap

    Keyword Arguments:
        timeout {float} -- Seconds a single query may take. None waits forever (default: {None})
        gate {threading.Lock} -- Lock held during each query. Share one between oracles talking to the same service (default: {None})
    """

    def __init__(self, oracle, timeout=None, gate=None):
        super().__init__()

        self.oracle = oracle
        self.timeout = timeout
        self.gate = gate
        self._executor = None

        if timeout is not None:
            self._executor = concurrent.futures.ThreadPoolExecutor(thread_name_prefix='oracle')

    def _query(self, msg):
        if self.gate is None:
            return self.oracle.query(msg)

        with self.gate:
            return self.oracle.query(msg)

    def query(self, msg):
        if self._executor is None:
            return self._query(msg)

        future = self._executor.submit(self._query, msg)
        try:
            return future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            log.error("Oracle query timed out after %s seconds", self.timeout)
            raise OracleUnavailable(f"Oracle did not answer within {self.timeout} seconds") from e

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
