import sys
import threading
import time

import pytest

from padbreak.codec import Encoding
from padbreak.errors import LengthError, OracleUnavailable
from padbreak.oracles import GatedOracle, ProcessOracle, SchemeOracle, Verdict
from padbreak.oracles._base import _Oracle
from padbreak.scheme import encrypt

from conftest import KEY_HEX


def _bad_padding(msg):
    # a bit flip in the second to last block turns \x0b.. into \x0a at the end
    tampered = bytearray(msg)
    tampered[-17] ^= 1
    return bytes(tampered)


def _bad_mac(msg):
    # the IV only affects the first block, which holds message bytes
    tampered = bytearray(msg)
    tampered[0] ^= 1
    return bytes(tampered)


def test_scheme_oracle_verdicts(key):
    o = SchemeOracle(b'hello', key=key)

    assert o.query(o.msg) == Verdict.OK
    assert o.query(_bad_padding(o.msg)) == Verdict.BAD_PADDING
    assert o.query(_bad_mac(o.msg)) == Verdict.BAD_MAC


def test_coalesced_mac_failures(key):
    o = SchemeOracle(b'hello', key=key, distinguish_mac=False)

    assert o.query(_bad_mac(o.msg)) == Verdict.OK
    assert o.query(_bad_padding(o.msg)) == Verdict.BAD_PADDING


def test_call_counts_queries_and_reports_padding(key):
    o = SchemeOracle(b'hello', key=key)

    assert o(o.msg) is True
    assert o(_bad_mac(o.msg)) is True
    assert o(_bad_padding(o.msg)) is False
    assert o.queries == 3


def test_malformed_length_is_an_error(oracle):
    with pytest.raises(LengthError):
        oracle(b'\x00' * 20)


def _oracle_command():
    return [sys.executable, '-m', 'padbreak.cli', 'oracle', '-k', KEY_HEX]


@pytest.mark.parametrize("encoding", [Encoding.HEX, Encoding.DECIMAL])
def test_process_oracle(key, tmp_path, encoding):
    o = ProcessOracle(_oracle_command(), encoding=encoding, workdir=str(tmp_path), timeout=60)
    msg = encrypt(b'hello', key)

    assert o.query(msg) == Verdict.OK
    assert o.query(_bad_padding(msg)) == Verdict.BAD_PADDING
    assert o.query(_bad_mac(msg)) == Verdict.BAD_MAC

    # candidate files are cleaned up
    assert list(tmp_path.iterdir()) == []


def test_process_oracle_failing_program():
    o = ProcessOracle([sys.executable, '-c', 'import sys; sys.exit(3)'])

    with pytest.raises(OracleUnavailable):
        o.query(b'\x00' * 32)


def test_process_oracle_missing_program():
    o = ProcessOracle('/nonexistent/decrypt-test')

    with pytest.raises(OracleUnavailable):
        o(b'\x00' * 32)


def test_process_oracle_timeout():
    o = ProcessOracle([sys.executable, '-c', 'import time; time.sleep(10)'], timeout=0.5)

    with pytest.raises(OracleUnavailable):
        o.query(b'\x00' * 32)


def test_process_oracle_output_parsing():
    script = 'import sys; print(open(sys.argv[2]).read())'
    o = ProcessOracle([sys.executable, '-c', script], encoding=Encoding.DECIMAL)

    # the program echoes the candidate, which never contains the padding marker
    assert o.query(b'\x01' * 32) == Verdict.OK


class _Recording(_Oracle):
    def __init__(self):
        super().__init__()
        self.active = 0
        self.max_active = 0
        self._counter = threading.Lock()

    def query(self, msg):
        with self._counter:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.01)
        with self._counter:
            self.active -= 1
        return Verdict.BAD_PADDING


def test_gate_serializes_queries():
    inner = _Recording()
    gate = threading.Lock()
    oracles = [ GatedOracle(inner, gate=gate) for _ in range(4) ]

    threads = [ threading.Thread(target=o, args=(b'\x00' * 32,)) for o in oracles for _ in range(3) ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert inner.max_active == 1
    assert sum(o.queries for o in oracles) == 12


def test_gate_passes_verdicts_through(key):
    o = SchemeOracle(b'hello', key=key)

    with GatedOracle(o, timeout=30) as gated:
        assert gated.query(o.msg) == Verdict.OK
        assert gated(_bad_padding(o.msg)) is False
