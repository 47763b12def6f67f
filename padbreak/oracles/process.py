import logging
import os
import shlex
import subprocess
import tempfile

from padbreak.codec import Encoding, encode
from padbreak.errors import OracleUnavailable
from padbreak.oracles._base import _Oracle, Verdict


__all__ = [ 'ProcessOracle' ]

log = logging.getLogger(__name__)


class ProcessOracle(_Oracle):
    """An oracle backed by an external decryption program

    For each query the candidate is written to a fresh file, encoded as configured, and
    the program is run as `<command> -i <file>`. Its combined output is searched for
    `INVALID PADDING` and `INVALID MAC`; any other output counts as success.

    Arguments:
        command {str or list} -- The program to invoke, e.g. `padbreak-oracle` or `['./decrypt-test']`

    Keyword Arguments:
        encoding {Encoding} -- How the candidate is written to the candidate file (default: {Encoding.HEX})
        timeout {float} -- Seconds to wait for the program. None waits forever (default: {None})
        workdir {str} -- Directory to place candidate files in. Uses the system default if None (default: {None})
        env {dict} -- Environment for the program. Inherits the current one if None (default: {None})

    Raises:
        OracleUnavailable: From `query` if the program cannot be run, times out or exits non-zero
    """

    def __init__(self, command, encoding=Encoding.HEX, timeout=None, workdir=None, env=None):
        super().__init__()

        if isinstance(command, str):
            command = shlex.split(command)

        self.command = list(command)
        self.encoding = encoding
        self.timeout = timeout
        self.workdir = workdir
        self.env = env

    def _write_candidate(self, msg):
        fd, path = tempfile.mkstemp(prefix='candidate-', suffix='.txt', dir=self.workdir)
        with os.fdopen(fd, 'w') as f:
            f.write(encode(msg, self.encoding))
        return path

    def query(self, msg):
        try:
            path = self._write_candidate(msg)
        except OSError as e:
            raise OracleUnavailable(f"Could not write candidate file: {e}") from e

        args = self.command + ['-i', path]
        log.debug("Running oracle: %s", ' '.join(args))

        try:
            proc = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                env=self.env,
            )
        except subprocess.TimeoutExpired as e:
            log.error("Oracle timed out after %s seconds", self.timeout)
            raise OracleUnavailable(f"Oracle timed out after {self.timeout} seconds") from e
        except OSError as e:
            log.error("Could not run oracle %r: %s", self.command, e)
            raise OracleUnavailable(f"Could not run oracle: {e}") from e
        finally:
            try:
                os.remove(path)
            except OSError:
                log.warning("Could not remove candidate file %s", path)

        out = proc.stdout.decode('utf-8', errors='replace')

        if proc.returncode != 0:
            log.error("Oracle exited with status %d: %s", proc.returncode, out.strip())
            raise OracleUnavailable(f"Oracle exited with status {proc.returncode}")

        if Verdict.BAD_PADDING.value in out:
            return Verdict.BAD_PADDING
        if Verdict.BAD_MAC.value in out:
            return Verdict.BAD_MAC

        return Verdict.OK
