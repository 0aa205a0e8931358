import pytest

from voxelcraft.export.packing import bits_for, pack_non_spanning, pack_spanning, varint


@pytest.mark.parametrize(
    "palette_size, minimum, expected",
    [(1, 2, 2), (2, 2, 2), (5, 2, 3), (16, 4, 4), (17, 4, 5), (300, 4, 9)],
)
def test_bits_for(palette_size, minimum, expected):
    assert bits_for(palette_size, minimum=minimum) == expected


def test_spanning_value_continues_in_next_word():
    third = (1 << 29) | 1
    assert pack_spanning([1, 2, third], 30) == [1 | 2 << 30 | 1 << 60, 1 << 25]


def test_spanning_words_are_signed():
    assert pack_spanning([15] * 16, 4) == [-1]


def test_non_spanning_starts_a_new_word():
    words = pack_non_spanning([1] * 13, 5, 13)
    assert words == [sum(1 << (5 * i) for i in range(12)), 1]
    # the same values spill over instead
    assert pack_spanning([1] * 13, 5)[1] == 0


def test_non_spanning_pads_to_count():
    assert pack_non_spanning([3], 4, 32) == [3, 0]


@pytest.mark.parametrize(
    "value, expected",
    [(0, b"\x00"), (127, b"\x7f"), (128, b"\x80\x01"), (300, b"\xac\x02")],
)
def test_varint(value, expected):
    assert varint(value) == expected
