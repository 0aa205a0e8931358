from __future__ import annotations

import math
from typing import Sequence

_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1


def bits_for(palette_size: int, *, minimum: int) -> int:
    return max(minimum, math.ceil(math.log2(palette_size)))


def pack_spanning(values: Sequence[int], bits: int) -> list[int]:
    """Pack values back to back into 64-bit words.

    A value that does not fit in the rest of a word continues in the next one.
    """

    mask = (1 << bits) - 1
    words = [0] * math.ceil(len(values) * bits / _WORD_BITS)
    for i, value in enumerate(values):
        value &= mask
        word, offset = divmod(i * bits, _WORD_BITS)
        words[word] |= (value << offset) & _WORD_MASK
        if offset + bits > _WORD_BITS:
            words[word + 1] |= value >> (_WORD_BITS - offset)
    return [_signed(word) for word in words]


def pack_non_spanning(values: Sequence[int], bits: int, count: int) -> list[int]:
    """Pack `count` values, each word holding only whole values.

    Leftover high bits of every word stay zero.
    """

    mask = (1 << bits) - 1
    per_word = _WORD_BITS // bits
    words = [0] * math.ceil(count / per_word)
    for i, value in enumerate(values[:count]):
        word, slot = divmod(i, per_word)
        words[word] |= (value & mask) << (slot * bits)
    return [_signed(word) for word in words]


def varint(value: int) -> bytes:
    result = bytearray()
    while value & ~0x7F:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value)
    return bytes(result)


def _signed(word: int) -> int:
    # LongArray tags hold signed 64-bit integers
    return word - (1 << _WORD_BITS) if word >> (_WORD_BITS - 1) else word
