import pytest

from bitdata.bitsource import BitSource
from bitdata.codecs.bitcursor import BitCursor
from bitdata.codecs.integer import Bits
from bitdata.codecs.loop import Loop
from bitdata.codecs.repeat import Repeat
from bitdata.dispatch import Record, read_into
from bitdata.errors import InvalidSchema, OutOfRange


def test_repeat_single_bits_in_order():
    cur = BitCursor(BitSource.from_string("1011001"))
    values = Repeat(7, Bits(1)).decode(cur)
    assert values == [1, 0, 1, 1, 0, 0, 1]
    assert cur.tell() == 7


def test_repeat_elements_start_where_previous_ended():
    cur = BitCursor(BitSource.from_string("101 011 111 0"))
    assert Repeat(3, Bits(3)).decode(cur) == [5, 3, 7]
    assert cur.tell() == 9


def test_repeat_zero_reads_nothing():
    cur = BitCursor(BitSource())
    assert Repeat(0, Bits(8)).decode(cur) == []
    assert cur.tell() == 0


def test_repeat_of_repeat():
    cur = BitCursor(BitSource.from_string("10 01 11"))
    assert Repeat(3, Repeat(2, Bits(1))).decode(cur) == [[1, 0], [0, 1], [1, 1]]


def test_repeat_failure_keeps_decoded_elements():
    class Triples(Record):
        values = Repeat(4, Bits(3))

    cur = BitCursor(BitSource.from_string("001 010 011 0"))
    obj = Triples()
    with pytest.raises(OutOfRange):
        read_into(obj, cur)
    assert obj.values == [1, 2, 3]
    assert cur.tell() == 10


@pytest.mark.parametrize("count", [-1, 1.5, None])
def test_invalid_count(count):
    with pytest.raises(InvalidSchema):
        Repeat(count, Bits(1))


def test_bit_size():
    assert Repeat(7, Bits(1)).bit_size() == 7
    assert Repeat(3, Repeat(2, Bits(4))).bit_size() == 24
    assert Repeat(2, Loop(Bits(1))).bit_size() is None
    assert Repeat(0, Loop(Bits(1))).bit_size() == 0
