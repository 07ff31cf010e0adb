"""Base64 variable-length quantity codec used by source maps."""

from collections.abc import Iterable

from reactgtk.gest.errors import DecodeError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/="

CONTINUATION_BIT = 32
DIGIT_MASK = 31
MIN_INT32 = -0x80000000


class Base64VLQ:
    """Encode and decode Base64 VLQ segments."""

    def __init__(self) -> None:
        """Build the lookup tables."""
        self.char_to_integer = {char: i for i, char in enumerate(ALPHABET)}
        self.integer_to_char = dict(enumerate(ALPHABET))

    def decode(self, segment: str) -> list[int]:
        """Decode every integer encoded in ``segment``.

        Raises:
            DecodeError: If a character is outside the alphabet

        """
        result: list[int] = []
        shift = 0
        value = 0

        for char in segment:
            integer = self.char_to_integer.get(char)
            if integer is None:
                raise DecodeError(f"Invalid character ({char})")

            has_continuation = integer & CONTINUATION_BIT
            value += (integer & DIGIT_MASK) << shift

            if has_continuation:
                shift += 5
                continue

            negate = value & 1
            value >>= 1
            if negate:
                result.append(MIN_INT32 if value == 0 else -value)
            else:
                result.append(value)

            value = shift = 0

        return result

    def encode(self, value: int | Iterable[int]) -> str:
        """Encode one integer or a sequence of integers."""
        if isinstance(value, int):
            return self.encode_integer(value)
        return "".join(self.encode_integer(n) for n in value)

    def encode_integer(self, num: int) -> str:
        """Encode a single signed integer."""
        if num == MIN_INT32:
            # magnitude 0 with the sign bit set
            num = 1
        elif num < 0:
            num = (-num << 1) | 1
        else:
            num <<= 1

        chars = []
        while True:
            digit = num & DIGIT_MASK
            num >>= 5
            if num > 0:
                digit |= CONTINUATION_BIT
            chars.append(self.integer_to_char[digit])
            if num == 0:
                break

        return "".join(chars)


_codec = Base64VLQ()


def decode(segment: str) -> list[int]:
    """Decode ``segment`` with the shared codec."""
    return _codec.decode(segment)


def encode(value: int | Iterable[int]) -> str:
    """Encode ``value`` with the shared codec."""
    return _codec.encode(value)
