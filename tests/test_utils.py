import pytest

from padbreak.errors import BadPadding, LengthError
from padbreak.utils import blocks, is_padding_valid, pad, strip_padding


@pytest.mark.parametrize("length", range(0, 40))
def test_pad_adds_one_to_sixteen_bytes(length):
    padded = pad(b'x' * length)

    n = 16 - length % 16
    assert len(padded) % 16 == 0
    assert padded[length:] == bytes([n]) * n


def test_pad_combines_parts():
    assert pad(b'abc', b'', b'def') == pad(b'abcdef')


@pytest.mark.parametrize("tail", [
    b'\x00',
    b'\x11',
    b'\xff',
    b'\x01\x03\x03',
    b'\x01\x02',
    b'\x0f' * 15 + b'\x10',
])
def test_malformed_padding_is_rejected(tail):
    data = b'A' * (32 - len(tail)) + tail

    assert not is_padding_valid(data)
    with pytest.raises(BadPadding):
        strip_padding(data)


def test_full_padding_block():
    assert strip_padding(b'A' * 16 + b'\x10' * 16) == b'A' * 16


def test_padding_longer_than_data():
    assert not is_padding_valid(b'\x05\x05')
    assert not is_padding_valid(b'')


def test_blocks_requires_alignment():
    assert blocks(b'A' * 32) == [b'A' * 16, b'A' * 16]
    with pytest.raises(LengthError):
        blocks(b'A' * 33)
