"""Deterministic code-of-the-day encoding.

A sequence index is rendered as three letters followed by two distinct
digits using a mixed-radix decomposition, most significant symbol first.
The alphabets leave out symbols that are easy to misread (I, O, 0, 1).

The mapping is a bijection between ``[0, CODE_SPACE_SIZE)`` and the set of
valid codes; larger indices wrap around so that every index renders.
"""
from __future__ import annotations

from typing import Final

LETTERS: Final[str] = "ABCDEFGHJKLMNPQRSTUVWXYZ"
DIGITS: Final[str] = "23456789"
CODE_LENGTH: Final[int] = 5

_L: Final[int] = len(LETTERS)
_D: Final[int] = len(DIGITS)
# Ordered pairs of distinct digits: the second digit skips the first one.
_DIGIT_PAIRS: Final[int] = _D * (_D - 1)

CODE_SPACE_SIZE: Final[int] = _L**3 * _DIGIT_PAIRS  # 774144


class InvalidCodeError(ValueError):
    """Raised when a string is not a well-formed daily code."""


def encode(index: int) -> str:
    """Render a sequence index as a five-symbol code.

    Args:
        index: Non-negative sequence index. Values at or beyond
            ``CODE_SPACE_SIZE`` wrap around.

    Returns:
        The code, e.g. ``encode(0) == "AAA23"``.

    Raises:
        ValueError: If ``index`` is negative.
    """
    if index < 0:
        raise ValueError(f"sequence index must be non-negative, got {index}")

    idx = index % CODE_SPACE_SIZE

    letter1, rem = divmod(idx, _L * _L * _DIGIT_PAIRS)
    letter2, rem = divmod(rem, _L * _DIGIT_PAIRS)
    letter3, pair = divmod(rem, _DIGIT_PAIRS)

    digit1, digit2 = divmod(pair, _D - 1)
    if digit2 >= digit1:
        digit2 += 1

    return LETTERS[letter1] + LETTERS[letter2] + LETTERS[letter3] + DIGITS[digit1] + DIGITS[digit2]


def _normalize(code: str) -> str:
    return code.strip().upper()


def decode(code: str) -> int:
    """Return the sequence index in ``[0, CODE_SPACE_SIZE)`` that renders ``code``.

    Surrounding whitespace and lower case are tolerated.

    Raises:
        InvalidCodeError: If ``code`` is not a valid code.
    """
    if not isinstance(code, str):
        raise InvalidCodeError("code must be a string")
    value = _normalize(code)
    if len(value) != CODE_LENGTH:
        raise InvalidCodeError(f"code must have {CODE_LENGTH} symbols, got {len(value)}")

    letters, digits = value[:3], value[3:]
    if any(ch not in LETTERS for ch in letters):
        raise InvalidCodeError(f"invalid letter in {value!r}")
    if any(ch not in DIGITS for ch in digits):
        raise InvalidCodeError(f"invalid digit in {value!r}")

    digit1 = DIGITS.index(digits[0])
    digit2 = DIGITS.index(digits[1])
    if digit1 == digit2:
        raise InvalidCodeError(f"digits must differ in {value!r}")
    if digit2 > digit1:
        digit2 -= 1

    letter1, letter2, letter3 = (LETTERS.index(ch) for ch in letters)
    pair = digit1 * (_D - 1) + digit2
    return ((letter1 * _L + letter2) * _L + letter3) * _DIGIT_PAIRS + pair


def is_valid_code(code: str) -> bool:
    """Return True if ``code`` is a well-formed daily code."""
    try:
        decode(code)
    except InvalidCodeError:
        return False
    return True
