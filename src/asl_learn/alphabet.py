"""
Fingerspelling alphabet used by the learning sessions.
"""
from typing import Tuple

ALPHABET: Tuple[str, ...] = tuple("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

FIRST_INDEX = 0
LAST_INDEX = len(ALPHABET) - 1


def letter_at(index: int) -> str:
    """Return the letter at `index`, raising IndexError outside 0..25."""
    if not 0 <= index <= LAST_INDEX:
        raise IndexError(f"Alphabet index out of range: {index}")
    return ALPHABET[index]


def index_of(letter: str) -> int:
    """Return the position of `letter` (case-insensitive)."""
    try:
        return ALPHABET.index(letter.strip().upper())
    except ValueError:
        raise ValueError(f"Not an alphabet letter: {letter!r}") from None


def reference_image_name(letter: str) -> str:
    """
    Name of the reference picture showing how to sign `letter`.

    Reference images are stored as e.g. ``asl_a_sign.png`` next to each other.
    """
    return f"asl_{ALPHABET[index_of(letter)].lower()}_sign"
