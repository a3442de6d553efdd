import random

import pytest

from bitdata.bitsource import BitSource
from bitdata.codecs.bitcursor import BitCursor
from bitdata.codecs.integer import Bits
from bitdata.errors import InvalidSchema, OutOfRange


@pytest.mark.parametrize("width", range(1, 33))
def test_bits_msb_first(width):
    rng = random.Random(width)
    bits = [rng.randint(0, 1) for _ in range(width + 7)]
    cur = BitCursor(BitSource.from_bits(bits))
    expected = int("".join(str(b) for b in bits[:width]), 2)
    assert Bits(width).decode(cur) == expected
    assert cur.tell() == width


def test_all_ones_is_max_value():
    cur = BitCursor(BitSource.from_string("1" * 40))
    assert Bits(40).decode(cur) == 2**40 - 1


def test_first_bit_is_msb():
    cur = BitCursor(BitSource.from_string("100"))
    assert Bits(3).decode(cur) == 4


def test_out_of_range_partial_advance():
    cur = BitCursor(BitSource.from_string("11111"), 2)
    with pytest.raises(OutOfRange) as ei:
        Bits(8).decode(cur)
    assert cur.tell() == 5
    assert ei.value.position == 5


@pytest.mark.parametrize("width", [0, -3, 2.0, True, "4"])
def test_invalid_width(width):
    with pytest.raises(InvalidSchema):
        Bits(width)


def test_length_and_equality():
    assert Bits(5).length == 5
    assert Bits(5).bit_size() == 5
    assert Bits(5) == Bits(5)
    assert Bits(5) != Bits(6)
